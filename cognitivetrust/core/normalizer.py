"""
Normalization of external tool output into Finding objects.

Two inputs feed the diagnostic store: Semgrep's JSON report and lines
of a dependency manifest matched by the version checker. Both end up
as the same immutable Finding model.
"""

import json
import logging
from typing import Any, Dict, List

from cognitivetrust.core.findings import (
    Finding, FindingKind, Severity, TextRange,
)

logger = logging.getLogger(__name__)


def _wire_position(position: Dict[str, Any]) -> tuple:
    """Convert a 1-based analyzer position to 0-based (line, col)."""
    return max(int(position["line"]) - 1, 0), max(int(position["col"]) - 1, 0)


def finding_from_analyzer_result(result: Dict[str, Any], document_path: str) -> Finding:
    """
    Build a Finding from one entry of Semgrep's ``results`` array.

    Raises:
        KeyError, TypeError, ValueError: if the entry lacks the expected shape.
    """
    start_line, start_col = _wire_position(result["start"])
    end_line, end_col = _wire_position(result["end"])
    extra = result.get("extra") or {}
    return Finding(
        range=TextRange(start_line, start_col, end_line, end_col),
        message=str(extra.get("message", "")),
        severity=Severity.from_analyzer(extra.get("severity")),
        code=str(result.get("check_id", "")),
        document_path=document_path,
    )


def parse_analyzer_output(stdout: str, document_path: str) -> List[Finding]:
    """
    Parse Semgrep's ``--json`` output.

    Malformed output never raises: the failure is logged and an empty
    list is returned, the same as a scan with no findings.
    """
    try:
        payload = json.loads(stdout)
        results = payload.get("results") or []
        return [finding_from_analyzer_result(r, document_path) for r in results]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error("Failed to parse analyzer JSON output for %s: %s", document_path, e)
        return []


def outdated_library_finding(
    line: int,
    length: int,
    name: str,
    version: str,
    minimum: str,
    document_path: str,
    start: int = 0,
) -> Finding:
    """Build the finding for a manifest line pinning a vulnerable version."""
    return Finding(
        range=TextRange(line, start, line, start + length),
        message=f"{name} version {version} is outdated. Please upgrade to {minimum} or later.",
        severity=Severity.WARNING,
        code=FindingKind.OUTDATED_LIBRARY.value,
        document_path=document_path,
    )
