"""Active lookup paths for executables and manual pages."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass


def normalize_directory(directory: str) -> str:
    """Strip trailing separators, keeping the filesystem root intact."""

    stripped = directory.rstrip("/")
    return stripped or ("/" if directory.startswith("/") else "")


def split_search_path(value: str | None) -> tuple[str, ...]:
    """Split a colon-delimited search path into unique normalized entries."""

    if not value:
        return ()
    return unique_directories(value.split(os.pathsep))


def unique_directories(directories: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for entry in directories:
        normalized = normalize_directory(entry.strip())
        if normalized:
            seen.setdefault(normalized, None)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class SearchPaths:
    """Ordered executable and manual-page directory lists."""

    executables: tuple[str, ...] = ()
    manuals: tuple[str, ...] = ()

    @classmethod
    def of(cls, executables: Iterable[str] = (), manuals: Iterable[str] = ()) -> "SearchPaths":
        return cls(executables=unique_directories(executables), manuals=unique_directories(manuals))

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        manual_fallback: Sequence[str] = (),
    ) -> "SearchPaths":
        """Build lookup paths from PATH and MANPATH.

        An unset or empty MANPATH falls back to `manual_fallback`. Empty
        MANPATH entries (which ask man(1) for its defaults) are filled with
        the fallback directories as well.
        """

        env = os.environ if environ is None else environ
        executables = split_search_path(env.get("PATH"))
        raw_manpath = env.get("MANPATH", "")
        if not raw_manpath.strip(os.pathsep + " "):
            manuals = unique_directories(manual_fallback)
        else:
            entries: list[str] = []
            for entry in raw_manpath.split(os.pathsep):
                if entry.strip():
                    entries.append(entry)
                else:
                    entries.extend(manual_fallback)
            manuals = unique_directories(entries)
        return cls(executables=executables, manuals=manuals)

    def with_prefix(self, executables: Iterable[str] = (), manuals: Iterable[str] = ()) -> "SearchPaths":
        """Return a copy with extra directories placed ahead of the current ones."""

        return SearchPaths.of(
            executables=[*executables, *self.executables],
            manuals=[*manuals, *self.manuals],
        )

    def is_executable_dir(self, directory: str) -> bool:
        return normalize_directory(directory) in self.executables

    def is_manual_dir(self, directory: str) -> bool:
        return normalize_directory(directory) in self.manuals
