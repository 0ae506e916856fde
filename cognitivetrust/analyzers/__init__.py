"""
Analyzers that produce findings for a document.

Python sources go to Semgrep; dependency manifests go to the
pattern-based version checker.
"""

from cognitivetrust.analyzers.dependencies import (
    VULNERABLE_LIBRARIES,
    DependencyChecker,
    check_dependencies,
)
from cognitivetrust.analyzers.semgrep import SemgrepRunner

__all__ = [
    "VULNERABLE_LIBRARIES",
    "DependencyChecker",
    "check_dependencies",
    "SemgrepRunner",
]
