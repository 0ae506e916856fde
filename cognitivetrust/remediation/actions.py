"""
Generation of quick-fix actions for findings under the cursor.

Actions are recomputed on every request and bound to a fix handler by
HandlerKind; the service dispatches them to the matching handler.
"""

from typing import Iterable, List, Optional

from cognitivetrust.core.diagnostics import DiagnosticStore
from cognitivetrust.core.document import TextDocument
from cognitivetrust.core.findings import (
    Finding, FindingKind, HandlerKind, RemediationAction, TextRange,
)

STANDARD_FIX_TITLE = "Replace with environment variable"
AI_REFACTOR_TITLE = "Refactor with Gemini ✨"


class ActionGenerator:
    """
    Builds the ordered list of remediation actions for a range.

    Rules:
    - a hardcoded secret gets a standard fix; the first one is preferred
    - every finding gets an AI refactor action
    - without any standard fix, the first AI action is preferred
    - findings from other sources are skipped
    """

    def __init__(self, diagnostics: Optional[DiagnosticStore] = None):
        self.diagnostics = diagnostics

    def provide_actions(
        self,
        document: TextDocument,
        text_range: TextRange,
        findings: Iterable[Finding],
    ) -> List[RemediationAction]:
        actions: List[RemediationAction] = []
        for finding in findings:
            if finding.is_foreign:
                continue
            if finding.kind is FindingKind.HARDCODED_SECRET:
                actions.append(self._standard_fix_action(finding))
            actions.append(self._ai_refactor_action(finding))

        preferred = next(
            (a for a in actions if a.handler is HandlerKind.STANDARD_FIX),
            actions[0] if actions else None,
        )
        if preferred is not None:
            preferred.is_preferred = True
        return actions

    def actions_for(self, document: TextDocument, text_range: TextRange) -> List[RemediationAction]:
        """Actions for the stored findings that intersect ``text_range``."""
        if self.diagnostics is None:
            return []
        findings = self.diagnostics.findings_in_range(document.path, text_range)
        return self.provide_actions(document, text_range, findings)

    def _standard_fix_action(self, finding: Finding) -> RemediationAction:
        return RemediationAction(
            title=STANDARD_FIX_TITLE,
            handler=HandlerKind.STANDARD_FIX,
            findings=[finding],
        )

    def _ai_refactor_action(self, finding: Finding) -> RemediationAction:
        return RemediationAction(
            title=AI_REFACTOR_TITLE,
            handler=HandlerKind.AI_REFACTOR,
            findings=[finding],
        )
