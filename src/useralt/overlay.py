"""Overlay roots: isolated director-pairs of alternatives state."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from useralt.config import AppSettings, ExecutableConfig

SYSTEM_ROOT_NAME = "system"
PERSISTENT_ROOT_NAME = "user"
SESSION_ROOT_NAME = "session"
SESSION_DIR_PREFIX = "useralt-session-"


@dataclass(frozen=True, slots=True)
class OverlayRoot:
    """One independent set of alternatives state.

    `base` is the directory links are relocated into (`base/bin`, `base/man`).
    `altdir` and `admindir` are handed to the alternatives executable.
    """

    name: str
    base: Path
    altdir: Path
    admindir: Path
    log_file: Path | None = None

    @property
    def bin_dir(self) -> Path:
        return self.base / "bin"

    @property
    def man_dir(self) -> Path:
        return self.base / "man"

    def link_path(self, relative: str) -> Path:
        """Absolute location of an overlay-relative link."""

        return self.base / relative

    def executable_args(self) -> list[str]:
        args = ["--altdir", str(self.altdir), "--admindir", str(self.admindir)]
        if self.log_file is not None:
            args.extend(["--log", str(self.log_file)])
        return args

    def describe(self) -> str:
        return f"{self.name} ({self.base})"


def system_root(executable: ExecutableConfig) -> OverlayRoot:
    return OverlayRoot(
        name=SYSTEM_ROOT_NAME,
        base=Path("/"),
        altdir=executable.system_altdir,
        admindir=executable.system_admindir,
    )


def overlay_root(base: Path, executable: ExecutableConfig, name: str = PERSISTENT_ROOT_NAME) -> OverlayRoot:
    """Overlay rooted at a user-writable directory."""

    base = base.expanduser().resolve()
    return OverlayRoot(
        name=name,
        base=base,
        altdir=base / executable.altdir_name,
        admindir=base / executable.admindir_name,
        log_file=base / executable.log_name if executable.log_name else None,
    )


def persistent_root(settings: AppSettings) -> OverlayRoot:
    return overlay_root(settings.paths.persistent_root, settings.executable, name=PERSISTENT_ROOT_NAME)


def active_root(settings: AppSettings) -> OverlayRoot:
    """The session overlay when one is exported, otherwise the persistent overlay."""

    if settings.paths.session_root is not None:
        return overlay_root(settings.paths.session_root, settings.executable, name=SESSION_ROOT_NAME)
    return persistent_root(settings)


def import_sources(settings: AppSettings, target: OverlayRoot) -> list[OverlayRoot]:
    """Roots to query when importing into `target`, in fallback order."""

    sources: list[OverlayRoot] = []
    persistent = persistent_root(settings)
    if persistent.base != target.base:
        sources.append(persistent)
    sources.append(system_root(settings.executable))
    return sources


def ensure_overlay_directories(root: OverlayRoot) -> list[Path]:
    """Create the overlay's link and state directories if they do not exist."""

    created_or_existing: list[Path] = []
    for directory in (root.bin_dir, root.man_dir, root.altdir, root.admindir):
        directory.mkdir(parents=True, exist_ok=True)
        created_or_existing.append(directory)
    return created_or_existing


def create_session_base(parent: Path | None = None) -> Path:
    """Create a fresh temporary directory for a per-shell overlay."""

    return Path(tempfile.mkdtemp(prefix=SESSION_DIR_PREFIX, dir=parent))
