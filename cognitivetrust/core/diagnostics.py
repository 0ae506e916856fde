"""
Per-document cache of the current findings.

This is the single source of truth read by the problem list and by
the remediation action generator.
"""

from typing import Dict, Iterable, Iterator, List, Tuple

from cognitivetrust.core.findings import Finding, TextRange


class DiagnosticStore:
    """
    Maps a document path to the findings of its latest completed scan.

    ``set`` swaps the whole tuple in a single assignment, so readers see
    either the previous scan generation or the new one, never a mix.
    When two scans of one document race, the one that completes last
    wins.
    """

    def __init__(self, name: str = "security"):
        self.name = name
        self._findings: Dict[str, Tuple[Finding, ...]] = {}

    def set(self, path: str, findings: Iterable[Finding]) -> None:
        self._findings[path] = tuple(findings)

    def get(self, path: str) -> Tuple[Finding, ...]:
        return self._findings.get(path, ())

    def delete(self, path: str) -> None:
        self._findings.pop(path, None)

    def clear(self) -> None:
        self._findings = {}

    def items(self) -> Iterator[Tuple[str, Tuple[Finding, ...]]]:
        return iter(list(self._findings.items()))

    def findings_in_range(self, path: str, text_range: TextRange) -> List[Finding]:
        return [f for f in self.get(path) if f.range.intersects(text_range)]

    @property
    def total(self) -> int:
        return sum(len(findings) for findings in self._findings.values())

    def __contains__(self, path: str) -> bool:
        return path in self._findings

    def __len__(self) -> int:
        return len(self._findings)
