"""
Pytest configuration and shared fixtures.
"""
from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from useralt.errors import OperationFailure
from useralt.overlay import OverlayRoot

PAGER_REPORT = """\
Name: pager
Link: /usr/bin/pager
Slaves:
 pager.1.gz /usr/share/man/man1/pager.1.gz
Status: auto
Best: /usr/bin/less
Value: /usr/bin/less

Alternative: /bin/more
Priority: 50
Slaves:
 pager.1.gz /usr/share/man/man1/more.1.gz

Alternative: /usr/bin/less
Priority: 77
Slaves:
 pager.1.gz /usr/share/man/man1/less.1.gz
"""


class FakeBackend:
    """Records invocations; query answers come from a root-name mapping."""

    def __init__(self, reports: dict[str, str] | None = None, fail_on: int | None = None):
        self.reports = reports or {}
        self.fail_on = fail_on
        self.queries: list[tuple[str, str]] = []
        self.calls: list[tuple[str, list[str]]] = []

    def query(self, root: OverlayRoot, name: str) -> str:
        self.queries.append((root.name, name))
        return self.reports.get(root.name, "")

    def run(self, root: OverlayRoot, args: Sequence[str]) -> None:
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise OperationFailure(["update-alternatives", *args], returncode=2, stderr="boom")
        self.calls.append((root.name, list(args)))

    def passthrough(self, root: OverlayRoot, args: Sequence[str]) -> int:
        self.calls.append((root.name, list(args)))
        return 0


def make_root(base: Path | str, name: str = "user") -> OverlayRoot:
    base = Path(base)
    return OverlayRoot(
        name=name,
        base=base,
        altdir=base / "alternatives",
        admindir=base / "admin",
    )


@pytest.fixture
def pager_report_text() -> str:
    return PAGER_REPORT


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point settings, overlays and logs at tmp_path and clear lookup paths."""
    for key in ("USERALT_PATHS__SESSION_ROOT", "USERALT_PATHS__PERSISTENT_ROOT", "MANPATH"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("USERALT_SETTINGS_FILE", str(tmp_path / "missing-settings.yaml"))
    monkeypatch.setenv("USERALT_PATHS__PERSISTENT_ROOT", str(tmp_path / "overlay"))
    monkeypatch.setenv("USERALT_PATHS__LOGS_ROOT", str(tmp_path / "logs"))
    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    monkeypatch.chdir(tmp_path)
    return tmp_path
