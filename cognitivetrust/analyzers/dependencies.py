"""
Dependency manifest checker.

Scans requirements.txt-style text line by line and flags pinned
versions of known-vulnerable libraries. Purely synchronous; no I/O.
"""

import re
from typing import Dict, List, Optional

from packaging.version import InvalidVersion, Version

from cognitivetrust.core.findings import Finding
from cognitivetrust.core.normalizer import outdated_library_finding


# Vulnerable Python libraries and their minimum secure versions.
VULNERABLE_LIBRARIES: Dict[str, str] = {
    "requests": "2.25.0",
    "flask": "1.1.2",
    "django": "3.2.0",
}

REQUIREMENT_PATTERN = re.compile(
    r"^(?P<name>[A-Za-z0-9_-]+)\s*(?P<op>==|>=|<=|>|<)?\s*(?P<version>[0-9][0-9A-Za-z.+!-]*)?"
)


def _parse_version(value: str) -> Optional[Version]:
    try:
        return Version(value)
    except InvalidVersion:
        return None


def is_older(version: str, minimum: str) -> bool:
    """
    True if ``version`` sorts strictly before ``minimum``.

    Ordering is PEP 440 aware, so ``2.0.0rc1 < 2.0.0`` and
    ``1.10.0 > 1.9.0``. Unparsable versions are never reported.
    """
    current = _parse_version(version)
    floor = _parse_version(minimum)
    if current is None or floor is None:
        return False
    return current < floor


class DependencyChecker:
    """Checks manifest text against a table of minimum safe versions."""

    def __init__(self, vulnerable_libraries: Optional[Dict[str, str]] = None):
        table = VULNERABLE_LIBRARIES if vulnerable_libraries is None else vulnerable_libraries
        self.vulnerable_libraries = {name.lower(): minimum for name, minimum in table.items()}

    def check(self, text: str, document_path: str) -> List[Finding]:
        findings: List[Finding] = []
        for index, raw_line in enumerate(text.split("\n")):
            raw_line = raw_line.rstrip("\r")
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            match = REQUIREMENT_PATTERN.match(line)
            if not match:
                continue
            name = match.group("name")
            version = match.group("version")
            minimum = self.vulnerable_libraries.get(name.lower())
            # Without an explicit version there is nothing to assess.
            if minimum is None or not version:
                continue
            if is_older(version, minimum):
                findings.append(outdated_library_finding(
                    line=index,
                    start=len(raw_line) - len(raw_line.lstrip()),
                    length=len(line),
                    name=name,
                    version=version,
                    minimum=minimum,
                    document_path=document_path,
                ))
        return findings


def check_dependencies(
    text: str,
    document_path: str,
    vulnerable_libraries: Optional[Dict[str, str]] = None,
) -> List[Finding]:
    """Convenience wrapper around DependencyChecker.check."""
    return DependencyChecker(vulnerable_libraries).check(text, document_path)
