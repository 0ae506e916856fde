"""
Plain-text report of fix metrics and recent scans.
"""

from typing import List

from cognitivetrust.core.findings import ScanHistoryEntry


def render_history(entries: List[ScanHistoryEntry], fixes_applied: int) -> str:
    """Metrics header, then scan entries newest first."""
    lines = [
        "--- METRICS ---",
        f"Total Fixes Applied: {fixes_applied}",
        "---",
        "",
    ]

    if not entries:
        lines.append("No scan history found.")
    else:
        lines.append("Recent Scans (newest first):")
        lines.append("")
        for entry in entries:
            lines.append(f"- [{entry.timestamp}] {entry.file} - Found {entry.issues_found} issues.")

    return "\n".join(lines)
