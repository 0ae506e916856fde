"""
CLI output formatter for human-readable results.
"""

import os
import sys
from typing import Dict, Iterable, List, Optional

from cognitivetrust.core.findings import Finding, RemediationAction, Severity


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(sys.stdout, "isatty"):
        return False
    return sys.stdout.isatty()


class CLIFormatter:
    """
    Formats findings for human-readable CLI output.
    """

    def __init__(self, use_color: bool = True, root: Optional[str] = None):
        self.use_color = use_color and supports_color()
        self.root = root

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _severity_label(self, severity: Severity) -> str:
        if severity is Severity.ERROR:
            return self._color("[ERROR]", Colors.RED)
        return self._color("[WARNING]", Colors.YELLOW)

    def _display_path(self, path: str) -> str:
        if self.root:
            try:
                return os.path.relpath(path, self.root)
            except ValueError:
                return path
        return path

    def format_findings(self, findings: Iterable[Finding]) -> str:
        """Format findings grouped by file."""
        findings = list(findings)
        lines = []

        if not findings:
            lines.append(self._color("No issues found!", Colors.GREEN))
            return "\n".join(lines)

        findings_by_file: Dict[str, List[Finding]] = {}
        for finding in findings:
            findings_by_file.setdefault(finding.document_path, []).append(finding)

        for file_path, file_findings in findings_by_file.items():
            lines.append(self._color(self._display_path(file_path), Colors.CYAN))
            for finding in file_findings:
                lines.append(self.format_finding(finding))
            lines.append("")

        errors = sum(1 for f in findings if f.severity is Severity.ERROR)
        lines.append(self._color(
            f"{len(findings)} issue(s): {errors} error(s), {len(findings) - errors} warning(s)",
            Colors.BOLD,
        ))
        return "\n".join(lines)

    def format_finding(self, finding: Finding) -> str:
        """Format a single finding."""
        line = finding.range.start_line + 1
        col = finding.range.start_col + 1
        location = self._color(f"{line}:{col}", Colors.DIM)
        code = self._color(f"({finding.code})", Colors.DIM)
        return f"  {location}  {self._severity_label(finding.severity)} {finding.message} {code}"

    def format_actions(self, actions: List[RemediationAction]) -> str:
        """Format the quick fixes available at a position."""
        if not actions:
            return "No quick fixes available."
        lines = []
        for index, action in enumerate(actions, 1):
            marker = self._color("*", Colors.GREEN) if action.is_preferred else " "
            finding = action.finding
            target = f" [{finding.code} @ line {finding.range.start_line + 1}]" if finding else ""
            lines.append(f"{marker} {index}. {action.title}{target}")
        return "\n".join(lines)
