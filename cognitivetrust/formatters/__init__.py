"""
Output formatters for scan results.

Provides:
- Human-readable CLI output
- JSON for machine processing
- The scan history and metrics report
"""

from cognitivetrust.formatters.cli import CLIFormatter
from cognitivetrust.formatters.history import render_history
from cognitivetrust.formatters.json_formatter import JSONFormatter

__all__ = [
    "CLIFormatter",
    "JSONFormatter",
    "render_history",
    "get_formatter",
]


def get_formatter(format_name: str):
    """Get a formatter by name."""
    formatters = {
        "text": CLIFormatter,
        "cli": CLIFormatter,
        "json": JSONFormatter,
    }

    formatter_class = formatters.get(format_name.lower())
    if formatter_class:
        return formatter_class()

    raise ValueError(f"Unknown format: {format_name}")
