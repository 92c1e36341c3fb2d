"""Invocation of the external alternatives executable against an overlay root."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from useralt.errors import OperationFailure
from useralt.overlay import OverlayRoot

LOGGER = logging.getLogger(__name__)

RunCommand = Callable[..., "subprocess.CompletedProcess[str]"]


class AlternativesBackend(Protocol):
    """Collaborator surface the import pipeline needs."""

    def query(self, root: OverlayRoot, name: str) -> str:
        """Return the raw query report, or an empty string when the group is unknown."""
        ...

    def run(self, root: OverlayRoot, args: Sequence[str]) -> None:
        """Run one mutating verb, raising `OperationFailure` on a non-zero exit."""
        ...


class UpdateAlternatives:
    """Run `update-alternatives` (or a compatible program) with a root's director-pair."""

    def __init__(
        self,
        program: str = "update-alternatives",
        run_command: RunCommand | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.program = program
        self._run_command = run_command or subprocess.run
        self._logger = logger or LOGGER

    def command(self, root: OverlayRoot, args: Sequence[str]) -> list[str]:
        return [self.program, *root.executable_args(), *args]

    def _invoke(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self._logger.debug("backend.invoke command=%s", command)
        try:
            return self._run_command(command, text=True, errors="surrogateescape", **kwargs)
        except OSError as exc:
            raise OperationFailure(command, returncode=127, stderr=str(exc)) from exc

    def query(self, root: OverlayRoot, name: str) -> str:
        """Capture the query report through a private temporary file.

        A non-zero exit means the root has no such group and yields "".
        The temporary file is removed on every exit path. Bytes that are not
        UTF-8 are kept as surrogate escapes so paths pass back unchanged.
        """

        command = self.command(root, ["--query", name])
        with tempfile.TemporaryFile(
            mode="w+",
            encoding="utf-8",
            errors="surrogateescape",
            prefix="useralt-query-",
        ) as handle:
            proc = self._invoke(command, stdout=handle, stderr=subprocess.PIPE)
            if proc.returncode != 0:
                self._logger.debug(
                    "backend.query_missing root=%s name=%s returncode=%s stderr=%s",
                    root.name,
                    name,
                    proc.returncode,
                    (proc.stderr or "").strip(),
                )
                return ""
            handle.seek(0)
            return handle.read()

    def run(self, root: OverlayRoot, args: Sequence[str]) -> None:
        command = self.command(root, args)
        proc = self._invoke(command, capture_output=True)
        if proc.returncode != 0:
            raise OperationFailure(command, returncode=proc.returncode, stderr=proc.stderr or "")
        if proc.stdout and proc.stdout.strip():
            self._logger.info("backend.output %s", proc.stdout.strip())

    def passthrough(self, root: OverlayRoot, args: Sequence[str]) -> int:
        """Run a verb attached to the caller's terminal and return its exit status."""

        command = self.command(root, args)
        proc = self._invoke(command)
        return proc.returncode
