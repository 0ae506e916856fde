"""
Scanning pipeline for the security scanner.

ScanEngine runs the per-document pipeline used by open and save
events: pick an analyzer, replace the document's diagnostics, record
the scan in history. WorkspaceScanner drives that same pipeline over
every matching file of the project, one file at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from cognitivetrust.analyzers.dependencies import DependencyChecker
from cognitivetrust.analyzers.semgrep import SemgrepRunner
from cognitivetrust.core.diagnostics import DiagnosticStore
from cognitivetrust.core.document import TextDocument, Workspace
from cognitivetrust.core.findings import Finding
from cognitivetrust.core.state import ScanHistory
from cognitivetrust.notify import Notifier

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_GLOB = "**/*.py"
DEFAULT_MANIFEST_GLOB = "**/requirements.txt"
DEFAULT_EXCLUDE_DIRS = ("node_modules",)

WORKSPACE_PROGRESS_TITLE = "Scanning workspace for security issues..."
WORKSPACE_DONE_MESSAGE = 'Workspace scan complete. Check the "Problems" panel for results.'


class ScanEngine:
    """
    Per-document scanning pipeline.

    The engine:
    1. Routes Python sources to Semgrep and manifests to the version checker
    2. Replaces the document's findings in the diagnostic store
    3. Records the scan in history, including scans with no findings
    """

    def __init__(
        self,
        workspace: Workspace,
        diagnostics: DiagnosticStore,
        history: ScanHistory,
        analyzer: Optional[SemgrepRunner] = None,
        dependency_checker: Optional[DependencyChecker] = None,
    ):
        self.workspace = workspace
        self.diagnostics = diagnostics
        self.history = history
        self.analyzer = analyzer or SemgrepRunner()
        self.dependency_checker = dependency_checker or DependencyChecker()

    def is_scannable(self, document: TextDocument) -> bool:
        return document.language_id in ("python", "pip-requirements")

    async def collect_findings(self, document: TextDocument) -> List[Finding]:
        if document.language_id == "python":
            return await self.analyzer.scan(document.path)
        if document.language_id == "pip-requirements":
            return self.dependency_checker.check(document.text, document.path)
        return []

    async def update_diagnostics(self, document: TextDocument) -> List[Finding]:
        """
        Scan a document and publish the result.

        Returns the findings of this scan generation. Documents that are
        neither Python sources nor manifests are left alone.
        """
        if not self.is_scannable(document):
            return []

        findings = await self.collect_findings(document)
        self.diagnostics.set(document.path, findings)
        self.history.record(self.workspace.relative_path(document.path), len(findings))
        logger.debug("Scanned %s: %d finding(s)", document.path, len(findings))
        return findings


@dataclass
class WorkspaceScanResult:
    """Results from a complete workspace scan."""
    files_scanned: List[str] = field(default_factory=list)
    total_findings: int = 0
    scan_time_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)


class WorkspaceScanner:
    """Scans every matching file of the workspace sequentially."""

    def __init__(
        self,
        engine: ScanEngine,
        notifier: Notifier,
        source_glob: str = DEFAULT_SOURCE_GLOB,
        manifest_glob: str = DEFAULT_MANIFEST_GLOB,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    ):
        self.engine = engine
        self.notifier = notifier
        self.patterns = (source_glob, manifest_glob)
        self.exclude_dirs = set(exclude_dirs)

    @property
    def workspace(self) -> Workspace:
        return self.engine.workspace

    def should_ignore(self, path: Path) -> bool:
        relative = path.relative_to(self.workspace.root)
        return any(part in self.exclude_dirs for part in relative.parts[:-1])

    def discover_files(self) -> List[str]:
        """Source files first, then manifests; each path at most once."""
        found: List[str] = []
        seen = set()
        for pattern in self.patterns:
            for path in sorted(self.workspace.root.glob(pattern)):
                if not path.is_file() or self.should_ignore(path):
                    continue
                key = str(path)
                if key not in seen:
                    seen.add(key)
                    found.append(key)
        return found

    async def scan_workspace(self) -> WorkspaceScanResult:
        start_time = time.time()
        result = WorkspaceScanResult()

        with self.notifier.progress(WORKSPACE_PROGRESS_TITLE):
            self.engine.diagnostics.clear()
            for file_path in self.discover_files():
                try:
                    document = self.workspace.open_document(file_path)
                    findings = await self.engine.update_diagnostics(document)
                except Exception as e:
                    logger.error("Error scanning %s: %s", file_path, e)
                    result.errors.append(f"Error scanning {file_path}: {e}")
                    continue
                result.files_scanned.append(file_path)
                result.total_findings += len(findings)

        result.scan_time_seconds = round(time.time() - start_time, 3)
        self.notifier.info(WORKSPACE_DONE_MESSAGE)
        return result
