"""Search-path handling and overlay path relocation."""

from useralt.paths.relativize import RelativePath, relativize, require_relative
from useralt.paths.search import SearchPaths, split_search_path

__all__ = [
    "RelativePath",
    "SearchPaths",
    "relativize",
    "require_relative",
    "split_search_path",
]
