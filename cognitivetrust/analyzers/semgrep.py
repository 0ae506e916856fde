"""
Invoker for the external Semgrep static analyzer.

Each scan runs Semgrep as its own subprocess and awaits it at a single
suspension point. Every failure mode (missing executable, non-zero
exit, malformed JSON, timeout) degrades to an empty result and is
reported on the module logger only.
"""

import asyncio
import logging
import os
from typing import List, Optional, Sequence

from cognitivetrust.core.findings import Finding
from cognitivetrust.core.normalizer import parse_analyzer_output
from cognitivetrust.errors import AnalyzerError

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "semgrep"
DEFAULT_RULES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "rules")
DEFAULT_TIMEOUT = 60.0


class SemgrepRunner:
    """
    Runs ``semgrep scan --config <rules> --json <file>``.

    The runner holds only immutable settings, so concurrent scans of
    different files share nothing and a hung process for one file does
    not hold up another.
    """

    def __init__(
        self,
        executable: str = DEFAULT_EXECUTABLE,
        rules_dir: str = DEFAULT_RULES_DIR,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.executable = executable
        self.rules_dir = rules_dir
        self.timeout = timeout if timeout else None

    def build_command(self, file_path: str) -> Sequence[str]:
        return [
            self.executable,
            "scan",
            "--config", self.rules_dir,
            "--json",
            os.path.abspath(file_path),
        ]

    async def scan(self, file_path: str) -> List[Finding]:
        """Scan one file. Never raises for analyzer failures."""
        try:
            stdout = await self._run(file_path)
        except AnalyzerError as e:
            logger.warning("Semgrep scan of %s failed: %s", file_path, e)
            return []
        if not stdout.strip():
            return []
        return parse_analyzer_output(stdout, os.path.abspath(file_path))

    async def _run(self, file_path: str) -> str:
        command = self.build_command(file_path)
        logger.debug("Running %s", " ".join(command))
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise AnalyzerError(f"{self.executable} is not installed or not in PATH")
        except OSError as e:
            raise AnalyzerError(f"{self.executable} failed to start: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._terminate(proc)
            raise AnalyzerError(f"timed out after {self.timeout}s")

        if stderr:
            logger.debug("Semgrep process output: %s", stderr.decode("utf-8", errors="replace"))
        if not stdout and proc.returncode:
            raise AnalyzerError(f"process exited with code {proc.returncode}")
        return stdout.decode("utf-8", errors="replace")

    async def _terminate(self, proc) -> None:
        try:
            if proc.returncode is None:
                proc.kill()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(proc.wait(), timeout=2)
        except asyncio.TimeoutError:
            logger.error("Semgrep process %s did not exit after kill", getattr(proc, "pid", "?"))
