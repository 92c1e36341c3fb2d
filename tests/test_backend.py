"""
Unit tests for the alternatives executable wrapper
"""
import os
import subprocess
from pathlib import Path

import pytest

from tests.conftest import make_root
from useralt.backend import UpdateAlternatives
from useralt.errors import OperationFailure
from useralt.overlay import OverlayRoot
from useralt.query import parse_query_text


class FakeRunner:
    """Stands in for subprocess.run."""

    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.commands = []
        self.kwargs = []

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        self.kwargs.append(kwargs)
        handle = kwargs.get("stdout")
        if handle is not None and handle is not subprocess.PIPE:
            handle.write(self.stdout)
            return subprocess.CompletedProcess(command, self.returncode, stderr=self.stderr)
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def root():
    return make_root("/home/u/.config/useralt")


class TestCommand:
    """Tests for command construction"""

    def test_director_pair(self, root):
        backend = UpdateAlternatives(program="ua")
        assert backend.command(root, ["--list", "pager"]) == [
            "ua",
            "--altdir",
            "/home/u/.config/useralt/alternatives",
            "--admindir",
            "/home/u/.config/useralt/admin",
            "--list",
            "pager",
        ]

    def test_log_file(self):
        logged = OverlayRoot(
            name="user",
            base=Path("/o"),
            altdir=Path("/o/alternatives"),
            admindir=Path("/o/admin"),
            log_file=Path("/o/alternatives.log"),
        )
        assert UpdateAlternatives().command(logged, [])[-2:] == ["--log", "/o/alternatives.log"]


class TestQuery:
    """Tests for the query verb"""

    def test_returns_report_text(self, root, pager_report_text):
        runner = FakeRunner(stdout=pager_report_text)
        backend = UpdateAlternatives(run_command=runner)
        assert backend.query(root, "pager") == pager_report_text
        assert runner.commands[0][-2:] == ["--query", "pager"]

    def test_unknown_group_returns_empty(self, root):
        runner = FakeRunner(returncode=2, stdout="", stderr="no alternatives for pager")
        backend = UpdateAlternatives(run_command=runner)
        assert backend.query(root, "pager") == ""

    def test_temporary_capture_is_closed(self, root, pager_report_text):
        """Test the capture file is released once the query returns"""
        runner = FakeRunner(stdout=pager_report_text)
        UpdateAlternatives(run_command=runner).query(root, "pager")
        assert runner.kwargs[0]["stdout"].closed

    def test_capture_is_closed_on_error(self, root):
        """Test the capture file is released when the runner raises"""
        handles = []

        def exploding_runner(command, **kwargs):
            handles.append(kwargs["stdout"])
            raise FileNotFoundError("update-alternatives")

        with pytest.raises(OperationFailure):
            UpdateAlternatives(run_command=exploding_runner).query(root, "pager")
        assert handles[0].closed

    def test_non_utf8_output_is_preserved(self, root, pager_report_text):
        """Test raw bytes from the executable survive as surrogate escapes"""
        raw = pager_report_text.replace("/bin/more", "/bin/m\xf6re").encode("latin-1")

        def raw_runner(command, **kwargs):
            os.write(kwargs["stdout"].fileno(), raw)
            return subprocess.CompletedProcess(command, 0, stderr="")

        text = UpdateAlternatives(run_command=raw_runner).query(root, "pager")
        assert "/bin/m\udcf6re" in text
        assert text.encode("utf-8", "surrogateescape") == raw
        report = parse_query_text(text)
        assert report.candidates[0].value == "/bin/m\udcf6re"


class TestRun:
    """Tests for mutating verbs"""

    def test_success(self, root):
        runner = FakeRunner()
        UpdateAlternatives(run_command=runner).run(root, ["--set", "pager", "/usr/bin/less"])
        assert runner.commands[0][-3:] == ["--set", "pager", "/usr/bin/less"]
        assert runner.kwargs[0]["capture_output"] is True
        assert runner.kwargs[0]["errors"] == "surrogateescape"

    def test_failure_raises(self, root):
        runner = FakeRunner(returncode=2, stderr="error: alternative /x for pager not registered")
        with pytest.raises(OperationFailure) as excinfo:
            UpdateAlternatives(run_command=runner).run(root, ["--set", "pager", "/x"])
        assert excinfo.value.returncode == 2
        assert "not registered" in excinfo.value.stderr

    def test_passthrough_returns_status(self, root):
        runner = FakeRunner(returncode=3)
        assert UpdateAlternatives(run_command=runner).passthrough(root, ["--config", "pager"]) == 3
