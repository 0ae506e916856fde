"""
Finding data structures for the security scanner.

This module defines the normalized finding model shared by the
analyzer invoker, the dependency checker, the diagnostic store and
the remediation layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple
import json


# Tag stamped on every finding this package produces. Findings carrying
# any other source are foreign and never get remediation actions.
SOURCE_TAG = "Security Scanner"


class Severity(Enum):
    """Severity levels for findings."""
    ERROR = "error"
    WARNING = "warning"

    @classmethod
    def from_analyzer(cls, value: Optional[str]) -> "Severity":
        """Map an analyzer severity string; only ERROR is an error."""
        if value is not None and value.upper() == "ERROR":
            return cls.ERROR
        return cls.WARNING


class FindingKind(Enum):
    """Closed set of finding categories that drive remediation."""
    HARDCODED_SECRET = "hardcoded-secret"
    MISSING_AUTHORIZATION = "missing-authorization"
    OUTDATED_LIBRARY = "outdated-library"

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["FindingKind"]:
        """
        Resolve an analyzer rule identifier to a kind.

        Semgrep qualifies rule ids with the path of the rules directory
        (``rules.hardcoded-secret``), so the last dotted segment is
        matched as well as the bare id.
        """
        if not code:
            return None
        candidates = (code, code.rsplit(".", 1)[-1])
        for kind in cls:
            if kind.value in candidates:
                return kind
        return None


@dataclass(frozen=True, order=True)
class TextRange:
    """A 0-based (line, column) span inside a document."""
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @property
    def start(self) -> Tuple[int, int]:
        return (self.start_line, self.start_col)

    @property
    def end(self) -> Tuple[int, int]:
        return (self.end_line, self.end_col)

    @classmethod
    def for_line(cls, line: int, length: int) -> "TextRange":
        return cls(line, 0, line, length)

    @classmethod
    def point(cls, line: int, col: int = 0) -> "TextRange":
        return cls(line, col, line, col)

    def intersects(self, other: "TextRange") -> bool:
        """True if the spans overlap or touch."""
        return not (self.end < other.start or other.end < self.start)

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def __str__(self) -> str:
        return f"{self.start_line + 1}:{self.start_col + 1}-{self.end_line + 1}:{self.end_col + 1}"

    def to_dict(self) -> Dict[str, int]:
        return {
            "start_line": self.start_line,
            "start_col": self.start_col,
            "end_line": self.end_line,
            "end_col": self.end_col,
        }


@dataclass(frozen=True)
class Finding:
    """
    Represents a single normalized security finding.

    Findings are immutable; a rescan produces a new set that replaces
    the previous one in the diagnostic store.
    """
    range: TextRange
    message: str
    severity: Severity
    code: str
    document_path: str
    source: str = SOURCE_TAG

    @property
    def kind(self) -> Optional[FindingKind]:
        return FindingKind.from_code(self.code)

    @property
    def is_foreign(self) -> bool:
        return self.source != SOURCE_TAG

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to a dictionary."""
        return {
            "range": self.range.to_dict(),
            "message": self.message,
            "severity": self.severity.value,
            "source": self.source,
            "code": self.code,
            "document_path": self.document_path,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert finding to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class HandlerKind(Enum):
    """Fix handlers a remediation action can be bound to."""
    STANDARD_FIX = "standard_fix"
    AI_REFACTOR = "ai_refactor"


@dataclass
class RemediationAction:
    """A quick fix offered for one or more findings. Never persisted."""
    title: str
    handler: HandlerKind
    findings: List[Finding] = field(default_factory=list)
    kind: str = "quickfix"
    is_preferred: bool = False

    @property
    def finding(self) -> Optional[Finding]:
        return self.findings[0] if self.findings else None


@dataclass(frozen=True)
class ScanHistoryEntry:
    """One completed scan of one document."""
    file: str
    timestamp: str
    issues_found: int

    @classmethod
    def now(cls, file: str, issues_found: int) -> "ScanHistoryEntry":
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return cls(file=file, timestamp=stamp, issues_found=issues_found)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "timestamp": self.timestamp,
            "issuesFound": self.issues_found,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanHistoryEntry":
        return cls(
            file=str(data.get("file", "")),
            timestamp=str(data.get("timestamp", "")),
            issues_found=int(data.get("issuesFound", 0)),
        )
