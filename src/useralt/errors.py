"""Error taxonomy for the alternative-group import pipeline."""

from __future__ import annotations

from collections.abc import Sequence


class UserAltError(Exception):
    """Base class for every error surfaced to the CLI."""


class ParseError(UserAltError):
    """Raised when a query report does not follow the expected layout."""

    def __init__(self, message: str, *, line_no: int | None = None, line: str | None = None, state: str | None = None):
        self.line_no = line_no
        self.line = line
        self.state = state
        details = message
        if line_no is not None:
            details = f"{details} (line {line_no}: {line!r})"
        super().__init__(details)


class PathError(UserAltError):
    """Raised when a path cannot be mapped into an overlay."""


class UnresolvablePath(PathError):
    """The path is neither under an executable nor a manual-page search directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot classify path as executable or manual page: {path}")


class SourceNotFound(UserAltError):
    """No source root produced a report for the requested group."""

    def __init__(self, name: str, roots: Sequence[str] = ()):
        self.name = name
        self.roots = tuple(roots)
        searched = ", ".join(self.roots) if self.roots else "none"
        super().__init__(f"No alternatives found for {name!r} (searched: {searched})")


class OperationFailure(UserAltError):
    """An invocation of the alternatives executable failed."""

    def __init__(self, args_: Sequence[str], returncode: int, stderr: str = ""):
        self.args_ = tuple(args_)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit status {returncode}: {' '.join(self.args_)}"
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
