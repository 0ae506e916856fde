"""
Deterministic fixers and the standard fix handler.

Each fixer turns a finding into a WorkspaceEdit, or returns None when
the document no longer has the shape it expects. The handler applies
that edit atomically and tracks it in the fix metrics.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from cognitivetrust.core.document import TextDocument, Workspace, WorkspaceEdit
from cognitivetrust.core.findings import Finding, FindingKind
from cognitivetrust.core.state import FixCounter
from cognitivetrust.errors import EditRejectedError
from cognitivetrust.notify import Notifier

logger = logging.getLogger(__name__)

ENV_MODULE = "os"

# identifier = "literal"  (optionally prefixed: r"", b'', u"")
ASSIGNMENT_PATTERN = re.compile(
    r"^(?P<indent>\s*)(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*[rRbBuU]{0,2}(?P<quote>['\"]).*$"
)


def add_import_if_missing(edit: WorkspaceEdit, document: TextDocument, module: str = ENV_MODULE) -> None:
    """Queue ``import <module>`` at the top of the document unless present."""
    if not document.has_import(module):
        edit.insert(document.path, 0, 0, f"import {module}\n")


class BaseFixer(ABC):
    """Base class for deterministic fixers."""

    @property
    @abstractmethod
    def supported_kinds(self) -> List[FindingKind]:
        """Return the finding kinds this fixer can handle."""
        pass

    @abstractmethod
    def build_edit(self, document: TextDocument, finding: Finding) -> Optional[WorkspaceEdit]:
        """
        Compute the edit that fixes a finding.

        Returns:
            The edit, or None if the document does not match the
            expected pattern (for example because it was already fixed).
        """
        pass

    def can_fix(self, finding: Finding) -> bool:
        return finding.kind in self.supported_kinds


class HardcodedSecretFixer(BaseFixer):
    """Moves a hardcoded secret into an environment variable lookup."""

    @property
    def supported_kinds(self) -> List[FindingKind]:
        return [FindingKind.HARDCODED_SECRET]

    def build_edit(self, document: TextDocument, finding: Finding) -> Optional[WorkspaceEdit]:
        line_number = finding.range.start_line
        try:
            original_line = document.line_at(line_number)
        except IndexError:
            return None

        match = ASSIGNMENT_PATTERN.match(original_line)
        if not match:
            return None

        var_name = match.group("name")
        replacement = f"{match.group('indent')}{var_name} = os.getenv('{var_name.upper()}')"

        edit = WorkspaceEdit()
        edit.replace(document.path, document.line_range(line_number), replacement)
        add_import_if_missing(edit, document)
        return edit


# Registry of fixers
_fixers: Dict[FindingKind, BaseFixer] = {}


def register_fixer(fixer: BaseFixer):
    """Register a fixer instance."""
    for kind in fixer.supported_kinds:
        _fixers[kind] = fixer


def get_fixer(kind: Optional[FindingKind]) -> Optional[BaseFixer]:
    """Get a fixer for a finding kind."""
    if kind is None:
        return None
    return _fixers.get(kind)


register_fixer(HardcodedSecretFixer())


class StandardFixHandler:
    """
    Applies deterministic fixes.

    A finding whose line no longer matches is a silent no-op: no edit,
    no counter change, no message. The finding may simply be stale.
    """

    def __init__(self, workspace: Workspace, counter: FixCounter, notifier: Notifier):
        self.workspace = workspace
        self.counter = counter
        self.notifier = notifier

    async def apply(self, document: TextDocument, finding: Finding) -> bool:
        fixer = get_fixer(finding.kind)
        if fixer is None:
            logger.debug("No standard fix for %s", finding.code)
            return False

        edit = fixer.build_edit(document, finding)
        if not edit:
            logger.debug("Line %d of %s no longer matches; skipping fix",
                         finding.range.start_line + 1, document.path)
            return False

        try:
            await self.workspace.apply_edit(edit)
        except EditRejectedError as e:
            logger.info("Standard fix rejected for %s: %s", document.path, e)
            return False

        self.counter.increment()
        self.notifier.info("Fix applied successfully.")
        return True
