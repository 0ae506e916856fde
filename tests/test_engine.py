"""
Tests for the scan pipeline, the workspace scan and the service commands.
"""

import asyncio

from cognitivetrust.analyzers.semgrep import SemgrepRunner
from cognitivetrust.core.diagnostics import DiagnosticStore
from cognitivetrust.core.document import TextDocument, Workspace
from cognitivetrust.core.engine import WORKSPACE_DONE_MESSAGE, WORKSPACE_PROGRESS_TITLE, ScanEngine, WorkspaceScanner
from cognitivetrust.core.findings import HandlerKind, Severity
from cognitivetrust.core.state import ScanHistory, WorkspaceState
from cognitivetrust.notify import RecordingNotifier
from cognitivetrust.remediation.credentials import MemoryCredentialStore
from cognitivetrust.service import CREDENTIAL_CLEARED_MESSAGE, ScannerService

from conftest import FakeAnalyzer, FakeProcess, semgrep_output


def build_engine(root, analyzer=None):
    workspace = Workspace(str(root))
    engine = ScanEngine(
        workspace,
        DiagnosticStore(),
        ScanHistory(WorkspaceState()),
        analyzer=analyzer or FakeAnalyzer(),
    )
    return engine


def build_service(root, notifier=None, credentials=None):
    return ScannerService(
        workspace=Workspace(str(root)),
        state=WorkspaceState(),
        notifier=notifier or RecordingNotifier(),
        credentials=credentials or MemoryCredentialStore(),
        analyzer=FakeAnalyzer(),
    )


class TestScanEngine:
    """Tests for the per-document pipeline."""

    def test_python_goes_to_analyzer(self, tmp_path):
        """Test that Python files are sent to the analyzer."""
        (tmp_path / "app.py").write_text('password = "hunter2"\nx = 1\n')
        engine = build_engine(tmp_path)
        document = engine.workspace.open_document(str(tmp_path / "app.py"))

        findings = asyncio.run(engine.update_diagnostics(document))

        assert len(findings) == 1
        assert findings[0].range.start_line == 0
        assert engine.diagnostics.get(document.path) == tuple(findings)
        assert engine.analyzer.scanned == [document.path]

    def test_manifest_goes_to_dependency_checker(self, tmp_path):
        """Test that manifests are sent to the dependency checker."""
        (tmp_path / "requirements.txt").write_text("flask==1.0.0\nrequests==2.31.0\n")
        engine = build_engine(tmp_path)
        document = engine.workspace.open_document(str(tmp_path / "requirements.txt"))

        findings = asyncio.run(engine.update_diagnostics(document))

        assert [f.severity for f in findings] == [Severity.WARNING]
        assert engine.analyzer.scanned == []

    def test_history_records_relative_path_and_zero_counts(self, tmp_path):
        """Test that scans are recorded by relative path, even with no findings."""
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "clean.py").write_text("print('hi')\n")
        engine = build_engine(tmp_path)

        asyncio.run(engine.update_diagnostics(engine.workspace.open_document(str(tmp_path / "src" / "clean.py"))))

        entry = engine.history.entries()[0]
        assert entry.file == "src/clean.py"
        assert entry.issues_found == 0

    def test_other_documents_ignored(self, tmp_path):
        """Test that other documents are not scanned."""
        engine = build_engine(tmp_path)
        document = TextDocument(str(tmp_path / "notes.md"), 'token = "x"')

        assert asyncio.run(engine.update_diagnostics(document)) == []
        assert document.path not in engine.diagnostics
        assert len(engine.history) == 0

    def test_rescan_replaces_previous_findings(self, tmp_path):
        """Test that a rescan replaces earlier findings."""
        target = tmp_path / "app.py"
        target.write_text('token = "x"\n')
        engine = build_engine(tmp_path)
        document = engine.workspace.open_document(str(target))
        asyncio.run(engine.update_diagnostics(document))

        target.write_text("token = None\n")
        asyncio.run(engine.update_diagnostics(document))

        assert engine.diagnostics.get(document.path) == ()
        assert [e.issues_found for e in engine.history.entries()] == [0, 1]


class TestWorkspaceScanner:
    """Tests for the sequential workspace scan."""

    def _layout(self, root):
        (root / "pkg").mkdir()
        (root / "node_modules" / "dep").mkdir(parents=True)
        (root / "app.py").write_text('api_key = "abc"\n')
        (root / "pkg" / "util.py").write_text("x = 1\n")
        (root / "node_modules" / "dep" / "bundle.py").write_text('secret = "s"\n')
        (root / "requirements.txt").write_text("django==2.0\n")
        (root / "README.md").write_text("docs\n")

    def test_discovers_sources_then_manifests(self, tmp_path):
        """Test that sources are found before manifests."""
        self._layout(tmp_path)
        scanner = WorkspaceScanner(build_engine(tmp_path), RecordingNotifier())

        files = [scanner.workspace.relative_path(p) for p in scanner.discover_files()]

        assert files == ["app.py", "pkg/util.py", "requirements.txt"]

    def test_scan_workspace(self, tmp_path):
        """Test scanning every file in the workspace."""
        self._layout(tmp_path)
        notifier = RecordingNotifier()
        engine = build_engine(tmp_path)
        stale = str(tmp_path / "deleted.py")
        engine.diagnostics.set(stale, [])
        scanner = WorkspaceScanner(engine, notifier)

        result = asyncio.run(scanner.scan_workspace())

        assert len(result.files_scanned) == 3
        assert result.total_findings == 2
        assert stale not in engine.diagnostics
        assert len(engine.history) == 3
        assert notifier.progress_titles == [WORKSPACE_PROGRESS_TITLE]
        assert notifier.of_level("info") == [WORKSPACE_DONE_MESSAGE]

    def test_hung_analyzer_does_not_stop_the_scan(self, tmp_path, fake_subprocess):
        """Test that a hung analyzer does not stop the workspace scan."""
        (tmp_path / "a.py").write_text('token = "a"\n')
        (tmp_path / "hung.py").write_text("while True: pass\n")
        (tmp_path / "z.py").write_text('token = "z"\n')

        def factory(path):
            if path.endswith("hung.py"):
                return FakeProcess(hang=True)
            return FakeProcess(stdout=semgrep_output(("hardcoded-secret", 1, 1, 1, 12, "ERROR")))

        fake_subprocess.factory = factory
        engine = build_engine(tmp_path, analyzer=SemgrepRunner(timeout=0.05))
        scanner = WorkspaceScanner(engine, RecordingNotifier())

        result = asyncio.run(scanner.scan_workspace())

        history = {e.file: e.issues_found for e in engine.history.entries()}
        assert history == {"a.py": 1, "hung.py": 0, "z.py": 1}
        assert result.total_findings == 2
        assert [p.killed for _, p in fake_subprocess.calls] == [False, True, False]

    def test_unreadable_file_is_reported_and_skipped(self, tmp_path, monkeypatch):
        """Test that an unreadable file is reported and skipped."""
        (tmp_path / "a.py").write_text("x = 1\n")
        (tmp_path / "b.py").write_text('key = "b"\n')
        engine = build_engine(tmp_path)
        original = engine.workspace.open_document

        def open_document(path):
            if path.endswith("a.py"):
                raise OSError("permission denied")
            return original(path)

        monkeypatch.setattr(engine.workspace, "open_document", open_document)
        result = asyncio.run(WorkspaceScanner(engine, RecordingNotifier()).scan_workspace())

        assert [e.file for e in engine.history.entries()] == ["b.py"]
        assert len(result.errors) == 1
        assert "permission denied" in result.errors[0]


class TestScannerService:
    """End-to-end tests through the service commands."""

    def test_fix_then_save_rescans(self, tmp_path):
        """Test that saving a fixed file triggers a rescan."""
        (tmp_path / "app.py").write_text('API_KEY = "abc123"\nprint(API_KEY)\n')
        notifier = RecordingNotifier()
        service = build_service(tmp_path, notifier)
        document = service.workspace.open_document(str(tmp_path / "app.py"))

        findings = asyncio.run(service.on_document_opened(document))
        assert len(findings) == 1

        actions = service.code_actions(document, document.line_range(0))
        preferred = [a for a in actions if a.is_preferred]
        assert preferred[0].handler is HandlerKind.STANDARD_FIX

        assert asyncio.run(service.run_action(document, preferred[0]))
        asyncio.run(service.save(document))

        assert (tmp_path / "app.py").read_text().startswith("import os\nAPI_KEY = os.getenv('API_KEY')")
        assert service.diagnostics.get(document.path) == ()
        assert service.counter.value == 1
        assert [e.issues_found for e in service.history.entries()] == [0, 1]

    def test_history_report(self, tmp_path):
        """Test the history command."""
        (tmp_path / "requirements.txt").write_text("flask==1.0.0\n")
        service = build_service(tmp_path)
        document = service.workspace.open_document(str(tmp_path / "requirements.txt"))
        asyncio.run(service.on_document_opened(document))

        report = service.show_history()

        assert "Total Fixes Applied: 0" in report
        assert "requirements.txt - Found 1 issues." in report

    def test_ai_action_on_manifest_without_key(self, tmp_path):
        """Test an AI action on a manifest with no key available."""
        (tmp_path / "requirements.txt").write_text("flask==1.0.0\n")
        notifier = RecordingNotifier()
        service = build_service(tmp_path, notifier)
        document = service.workspace.open_document(str(tmp_path / "requirements.txt"))
        asyncio.run(service.on_document_opened(document))

        actions = service.code_actions(document, document.line_range(0))
        assert [a.handler for a in actions] == [HandlerKind.AI_REFACTOR]

        assert asyncio.run(service.run_action(document, actions[0])) is False
        assert notifier.of_level("warning")
        assert document.text == "flask==1.0.0\n"

    def test_unexpected_failure_is_contained(self, tmp_path):
        """Test that an unexpected command failure is reported, not raised."""
        notifier = RecordingNotifier()
        service = build_service(tmp_path, notifier)
        document = TextDocument(str(tmp_path / "gone.py"), "x = 1\n")

        # The fake analyzer reads from disk; the file does not exist.
        assert asyncio.run(service.on_document_opened(document)) == []
        assert notifier.of_level("error")[0].startswith("CognitiveTrust: scan failed")

    def test_clear_credential(self, tmp_path):
        """Test clearing the stored key."""
        notifier = RecordingNotifier()
        credentials = MemoryCredentialStore("k")
        service = build_service(tmp_path, notifier, credentials)

        assert asyncio.run(service.clear_credential()) is True
        assert asyncio.run(credentials.get()) is None
        assert notifier.of_level("info") == [CREDENTIAL_CLEARED_MESSAGE]

    def test_create_uses_state_directory(self, tmp_path):
        """Test that the default wiring uses the state directory."""
        service = ScannerService.create(str(tmp_path), RecordingNotifier())
        service.history.record("app.py", 0)

        assert (tmp_path / ".cognitivetrust" / "state.json").exists()
        assert service.credentials.path == str(tmp_path / ".cognitivetrust" / "secrets.json")
