"""
Scanner service: wires the components together and exposes the
commands and file triggers the host environment calls.

Every command is a boundary. Failures from external calls are handled
inside the handlers; anything unexpected is logged and reported here
rather than propagated to the host.
"""

import logging
import os
from typing import Any, Awaitable, List, Optional

from cognitivetrust.analyzers.dependencies import DependencyChecker
from cognitivetrust.analyzers.semgrep import SemgrepRunner
from cognitivetrust.config import ScanConfig
from cognitivetrust.core.diagnostics import DiagnosticStore
from cognitivetrust.core.document import TextDocument, Workspace
from cognitivetrust.core.engine import ScanEngine, WorkspaceScanner, WorkspaceScanResult
from cognitivetrust.core.findings import Finding, HandlerKind, RemediationAction, TextRange
from cognitivetrust.core.state import FixCounter, ScanHistory, WorkspaceState
from cognitivetrust.formatters.history import render_history
from cognitivetrust.notify import Notifier
from cognitivetrust.remediation.actions import ActionGenerator
from cognitivetrust.remediation.ai import AiRefactorHandler, GeminiClient
from cognitivetrust.remediation.credentials import CredentialProvider, FileCredentialStore
from cognitivetrust.remediation.fixers import StandardFixHandler

logger = logging.getLogger(__name__)

CREDENTIAL_CLEARED_MESSAGE = "CognitiveTrust: Gemini API Key has been cleared."


class ScannerService:
    """
    One workspace's scanner: stores, pipeline, handlers and commands.

    Build it with ``ScannerService.create`` for the default wiring or
    pass components directly to swap any of them out.
    """

    def __init__(
        self,
        workspace: Workspace,
        state: WorkspaceState,
        notifier: Notifier,
        credentials: CredentialProvider,
        analyzer: Optional[SemgrepRunner] = None,
        dependency_checker: Optional[DependencyChecker] = None,
        gemini: Optional[GeminiClient] = None,
        config: Optional[ScanConfig] = None,
    ):
        self.config = config or ScanConfig()
        self.workspace = workspace
        self.state = state
        self.notifier = notifier
        self.credentials = credentials

        self.diagnostics = DiagnosticStore()
        self.history = ScanHistory(state, limit=self.config.history_limit)
        self.counter = FixCounter(state)

        self.engine = ScanEngine(
            workspace,
            self.diagnostics,
            self.history,
            analyzer=analyzer,
            dependency_checker=dependency_checker,
        )
        self.workspace_scanner = WorkspaceScanner(
            self.engine,
            notifier,
            source_glob=self.config.workspace.source_glob,
            manifest_glob=self.config.workspace.manifest_glob,
            exclude_dirs=self.config.workspace.exclude_dirs,
        )
        self.actions = ActionGenerator(self.diagnostics)
        self.standard_fix = StandardFixHandler(workspace, self.counter, notifier)
        self.ai_refactor = AiRefactorHandler(
            workspace, self.counter, notifier, credentials, client=gemini,
        )

        workspace.on_did_save(self.on_document_saved)

    @classmethod
    def create(
        cls,
        root: str,
        notifier: Notifier,
        config: Optional[ScanConfig] = None,
        credentials: Optional[CredentialProvider] = None,
    ) -> "ScannerService":
        """Default wiring: state and secrets persisted under the state directory."""
        config = config or ScanConfig()
        state_dir = config.resolve_state_dir(root)
        # Relative rule directories in a config file are taken from the workspace root.
        rules_dir = os.path.join(root, os.path.expanduser(config.analyzer.rules_dir))
        analyzer = SemgrepRunner(
            executable=config.analyzer.executable,
            rules_dir=os.path.abspath(rules_dir),
            timeout=config.analyzer.timeout,
        )
        gemini = GeminiClient(
            model=config.ai.model,
            endpoint=config.ai.endpoint,
            timeout=config.ai.timeout,
        )
        return cls(
            workspace=Workspace(root),
            state=WorkspaceState.for_directory(state_dir),
            notifier=notifier,
            credentials=credentials or FileCredentialStore.for_directory(state_dir),
            analyzer=analyzer,
            dependency_checker=DependencyChecker(config.vulnerable_libraries),
            gemini=gemini,
            config=config,
        )

    async def _contained(self, command: str, call: Awaitable[Any], default: Any = None) -> Any:
        try:
            return await call
        except Exception as e:
            logger.exception("Command %s failed", command)
            self.notifier.error(f"CognitiveTrust: {command} failed: {e}")
            return default

    # File triggers

    async def on_document_opened(self, document: TextDocument) -> List[Finding]:
        self.workspace.track(document)
        return await self._contained("scan", self.engine.update_diagnostics(document), [])

    async def on_document_saved(self, document: TextDocument) -> List[Finding]:
        return await self._contained("scan", self.engine.update_diagnostics(document), [])

    # Commands

    def code_actions(self, document: TextDocument, text_range: TextRange) -> List[RemediationAction]:
        return self.actions.actions_for(document, text_range)

    async def apply_standard_fix(self, document: TextDocument, finding: Finding) -> bool:
        self.workspace.track(document)
        return await self._contained("applyStandardFix", self.standard_fix.apply(document, finding), False)

    async def refactor_with_ai(self, document: TextDocument, finding: Finding) -> bool:
        self.workspace.track(document)
        return await self._contained("refactorWithAI", self.ai_refactor.apply(document, finding), False)

    async def run_action(self, document: TextDocument, action: RemediationAction) -> bool:
        if action.finding is None:
            return False
        if action.handler is HandlerKind.STANDARD_FIX:
            return await self.apply_standard_fix(document, action.finding)
        return await self.refactor_with_ai(document, action.finding)

    def show_history(self) -> str:
        return render_history(self.history.entries(), self.counter.value)

    async def scan_workspace(self) -> WorkspaceScanResult:
        return await self._contained(
            "scanWorkspace", self.workspace_scanner.scan_workspace(), WorkspaceScanResult()
        )

    async def clear_credential(self) -> bool:
        async def clear() -> bool:
            await self.credentials.delete()
            self.notifier.info(CREDENTIAL_CLEARED_MESSAGE)
            return True
        return await self._contained("clearApiKey", clear(), False)

    async def save(self, document: TextDocument) -> None:
        """Write a document to disk; the save listener rescans it."""
        await self.workspace.save(document)
