"""
Shared fixtures for the scanner tests.
"""

import asyncio
import json
import os
import re
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cognitivetrust.core.findings import Finding, Severity, TextRange
from cognitivetrust.core.state import WorkspaceState
from cognitivetrust.notify import RecordingNotifier


SECRET_LINE = re.compile(r"^\s*\w+\s*=\s*['\"]")


class FakeAnalyzer:
    """Stands in for SemgrepRunner: flags every `name = "literal"` line on disk."""

    def __init__(self):
        self.scanned = []

    async def scan(self, file_path):
        self.scanned.append(file_path)
        with open(file_path, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")
        return [
            Finding(
                range=TextRange.for_line(index, len(line)),
                message="Hardcoded secret detected.",
                severity=Severity.ERROR,
                code="rules.hardcoded-secret",
                document_path=os.path.abspath(file_path),
            )
            for index, line in enumerate(lines)
            if SECRET_LINE.match(line)
        ]


class FakeProcess:
    """Minimal asyncio.subprocess.Process double."""

    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self._stdout = stdout
        self._stderr = stderr
        self._exit_code = returncode
        self.hang = hang
        self.returncode = None
        self.killed = False
        self.pid = 4242

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(3600)
        self.returncode = self._exit_code
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


def semgrep_output(*results):
    """Build Semgrep --json output from (check_id, line, col, end_line, end_col, severity) tuples."""
    return json.dumps({
        "results": [
            {
                "check_id": check_id,
                "start": {"line": line, "col": col},
                "end": {"line": end_line, "col": end_col},
                "extra": {"message": f"{check_id} found", "severity": severity},
            }
            for check_id, line, col, end_line, end_col, severity in results
        ],
        "errors": [],
    }).encode("utf-8")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def state():
    return WorkspaceState()


@pytest.fixture
def make_finding():
    """Factory for findings on a single line."""
    def factory(code="hardcoded-secret", line=0, length=10, path="/tmp/app.py",
                severity=Severity.ERROR, source=None, message="issue"):
        kwargs = {}
        if source is not None:
            kwargs["source"] = source
        return Finding(
            range=TextRange.for_line(line, length),
            message=message,
            severity=severity,
            code=code,
            document_path=path,
            **kwargs,
        )
    return factory


@pytest.fixture
def fake_subprocess(monkeypatch):
    """
    Replace asyncio.create_subprocess_exec.

    Tests register a callable mapping the scanned file path to a
    FakeProcess; every created process is kept in ``calls``.
    """
    class Controller:
        def __init__(self):
            self.calls = []
            self.factory = lambda path: FakeProcess()

        async def create(self, *command, **kwargs):
            process = self.factory(command[-1])
            self.calls.append((list(command), process))
            return process

    controller = Controller()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", controller.create)
    return controller
