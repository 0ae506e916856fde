"""
Exception hierarchy for the security scanner.

External-call failures are contained at the handler boundary; these
types exist so the boundary can tell them apart.
"""


class ScannerError(Exception):
    """Base class for all scanner errors."""


class ConfigError(ScannerError):
    """Raised when a configuration file cannot be read or parsed."""


class AnalyzerError(ScannerError):
    """Raised inside the analyzer invoker; never escapes it."""


class GenerationError(ScannerError):
    """The generation API returned an empty or malformed response."""


class EditRejectedError(ScannerError):
    """A workspace edit no longer fits the document it targets."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
