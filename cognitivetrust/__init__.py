"""
CognitiveTrust Security Scanner

Runs Semgrep and a dependency version checker over source files,
keeps the findings per document, and offers standard and AI-assisted
quick fixes that are applied atomically and tracked in fix metrics.
"""

__version__ = "1.0.0"
__author__ = "CognitiveTrust Team"

from cognitivetrust.core.findings import Finding, FindingKind, Severity
from cognitivetrust.config import ScanConfig
from cognitivetrust.service import ScannerService

__all__ = [
    "Finding",
    "FindingKind",
    "Severity",
    "ScanConfig",
    "ScannerService",
]
