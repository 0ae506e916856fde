"""
Tests for the Semgrep invoker.
"""

import asyncio
import logging
import os

from cognitivetrust.analyzers.semgrep import DEFAULT_RULES_DIR, SemgrepRunner
from cognitivetrust.core.findings import FindingKind, Severity

from conftest import FakeProcess, semgrep_output


class TestSemgrepRunner:
    """Tests for subprocess handling and failure tolerance."""

    def test_build_command(self, tmp_path):
        """Test the analyzer command line."""
        target = tmp_path / "app.py"
        runner = SemgrepRunner(rules_dir="/opt/rules")

        assert runner.build_command(str(target)) == [
            "semgrep", "scan", "--config", "/opt/rules", "--json", str(target),
        ]

    def test_packaged_rules_exist(self):
        """Test that the bundled rule files are installed."""
        assert os.path.isfile(os.path.join(DEFAULT_RULES_DIR, "hardcoded-secret.yaml"))
        assert os.path.isfile(os.path.join(DEFAULT_RULES_DIR, "missing-authorization.yaml"))

    def test_zero_timeout_disables_limit(self):
        """Test that a zero timeout means no limit."""
        assert SemgrepRunner(timeout=0).timeout is None
        assert SemgrepRunner(timeout=5).timeout == 5

    def test_findings_are_normalized(self, tmp_path, fake_subprocess):
        """Test that analyzer results become findings."""
        target = str(tmp_path / "app.py")
        fake_subprocess.factory = lambda path: FakeProcess(
            stdout=semgrep_output(("rules.hardcoded-secret", 2, 5, 2, 30, "ERROR")),
        )

        findings = asyncio.run(SemgrepRunner().scan(target))

        assert len(findings) == 1
        assert findings[0].kind is FindingKind.HARDCODED_SECRET
        assert findings[0].severity is Severity.ERROR
        assert findings[0].range.start == (1, 4)
        assert findings[0].document_path == target

    def test_nonzero_exit_with_output_is_parsed(self, tmp_path, fake_subprocess):
        """Test that a failing exit with a report is still parsed."""
        fake_subprocess.factory = lambda path: FakeProcess(
            stdout=semgrep_output(("missing-authorization", 1, 1, 3, 1, "WARNING")),
            returncode=1,
        )

        findings = asyncio.run(SemgrepRunner().scan(str(tmp_path / "app.py")))

        assert [f.kind for f in findings] == [FindingKind.MISSING_AUTHORIZATION]

    def test_nonzero_exit_without_output(self, tmp_path, fake_subprocess, caplog):
        """Test that a failing exit without a report is logged."""
        fake_subprocess.factory = lambda path: FakeProcess(stderr=b"invalid config", returncode=2)

        with caplog.at_level(logging.DEBUG, logger="cognitivetrust.analyzers.semgrep"):
            findings = asyncio.run(SemgrepRunner().scan(str(tmp_path / "app.py")))

        assert findings == []
        assert "exited with code 2" in caplog.text
        assert "invalid config" in caplog.text

    def test_malformed_output(self, tmp_path, fake_subprocess):
        """Test that malformed analyzer output yields no findings."""
        fake_subprocess.factory = lambda path: FakeProcess(stdout=b"{not json")

        assert asyncio.run(SemgrepRunner().scan(str(tmp_path / "app.py"))) == []

    def test_missing_executable(self, tmp_path, caplog):
        """Test that a missing analyzer binary is logged, not raised."""
        runner = SemgrepRunner(executable="cognitivetrust-no-such-semgrep")

        with caplog.at_level(logging.WARNING, logger="cognitivetrust.analyzers.semgrep"):
            findings = asyncio.run(runner.scan(str(tmp_path / "app.py")))

        assert findings == []
        assert "not installed" in caplog.text

    def test_timeout_kills_process(self, tmp_path, fake_subprocess, caplog):
        """Test that a timed-out scan kills the analyzer."""
        fake_subprocess.factory = lambda path: FakeProcess(hang=True)

        with caplog.at_level(logging.WARNING, logger="cognitivetrust.analyzers.semgrep"):
            findings = asyncio.run(SemgrepRunner(timeout=0.05).scan(str(tmp_path / "app.py")))

        assert findings == []
        assert fake_subprocess.calls[0][1].killed
        assert "timed out" in caplog.text

    def test_hung_scan_does_not_block_another(self, tmp_path, fake_subprocess):
        """Test that one hung scan does not delay another."""
        def factory(path):
            if path.endswith("hung.py"):
                return FakeProcess(hang=True)
            return FakeProcess(stdout=semgrep_output(("hardcoded-secret", 1, 1, 1, 9, "ERROR")))

        fake_subprocess.factory = factory
        runner = SemgrepRunner(timeout=0.2)

        async def scan_both():
            return await asyncio.gather(
                runner.scan(str(tmp_path / "hung.py")),
                runner.scan(str(tmp_path / "ok.py")),
            )

        hung, ok = asyncio.run(scan_both())

        assert hung == []
        assert len(ok) == 1
