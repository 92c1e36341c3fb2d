"""Map absolute alternative links onto the `bin/` or `man/` subtree of an overlay."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Literal

from useralt.errors import UnresolvablePath
from useralt.paths.search import SearchPaths, normalize_directory

PathKind = Literal["bin", "man"]


@dataclass(frozen=True, slots=True)
class RelativePath:
    """A link location relative to an overlay base directory."""

    kind: PathKind
    path: str

    def __str__(self) -> str:
        return self.path


def relativize(absolute_path: str, search_paths: SearchPaths) -> RelativePath | None:
    """Classify a link by its containing directory and return its overlay-relative path.

    Returns None when the path is neither directly inside an executable
    search directory nor anywhere below a manual-page search directory.
    """

    directory, file_name = posixpath.split(absolute_path)
    directory = normalize_directory(directory)
    if directory in ("", ".", "/") or not file_name:
        return None

    if search_paths.is_executable_dir(directory):
        return RelativePath(kind="bin", path=posixpath.join("bin", file_name))

    consumed: list[str] = []
    current = directory
    while current not in ("", ".", "/"):
        if search_paths.is_manual_dir(current):
            return RelativePath(kind="man", path=posixpath.join("man", *consumed, file_name))
        current, segment = posixpath.split(current)
        consumed.insert(0, segment)
    return None


def require_relative(absolute_path: str, search_paths: SearchPaths) -> RelativePath:
    """Like `relativize`, raising `UnresolvablePath` instead of returning None."""

    relative = relativize(absolute_path, search_paths)
    if relative is None:
        raise UnresolvablePath(absolute_path)
    return relative
