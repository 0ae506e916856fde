"""Core data model, document host, stores and scanning pipeline."""

from cognitivetrust.core.findings import (
    SOURCE_TAG,
    Finding,
    FindingKind,
    HandlerKind,
    RemediationAction,
    ScanHistoryEntry,
    Severity,
    TextRange,
)
from cognitivetrust.core.diagnostics import DiagnosticStore
from cognitivetrust.core.document import TextDocument, Workspace, WorkspaceEdit
from cognitivetrust.core.state import FixCounter, ScanHistory, WorkspaceState

__all__ = [
    "SOURCE_TAG",
    "Finding",
    "FindingKind",
    "HandlerKind",
    "RemediationAction",
    "ScanHistoryEntry",
    "Severity",
    "TextRange",
    "DiagnosticStore",
    "TextDocument",
    "Workspace",
    "WorkspaceEdit",
    "FixCounter",
    "ScanHistory",
    "WorkspaceState",
]
