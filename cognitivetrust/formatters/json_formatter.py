"""
JSON output formatter for machine-readable results.
"""

import json
from typing import Iterable, List

from cognitivetrust.core.findings import Finding, RemediationAction


class JSONFormatter:
    """
    Formats findings and actions as JSON for machine consumption.
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format_findings(self, findings: Iterable[Finding]) -> str:
        data = [f.to_dict() for f in findings]
        return json.dumps({"findings": data, "total": len(data)}, indent=self.indent)

    def format_finding(self, finding: Finding) -> str:
        """Format a single finding as JSON."""
        return json.dumps(finding.to_dict(), indent=self.indent)

    def format_actions(self, actions: List[RemediationAction]) -> str:
        data = [
            {
                "title": action.title,
                "kind": action.kind,
                "handler": action.handler.value,
                "is_preferred": action.is_preferred,
                "findings": [f.to_dict() for f in action.findings],
            }
            for action in actions
        ]
        return json.dumps({"actions": data}, indent=self.indent)
