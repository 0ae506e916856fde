"""
Remediation for security findings.

Provides quick-fix action generation, deterministic fixers and
AI-assisted refactoring through the Gemini API.
"""

from cognitivetrust.remediation.actions import ActionGenerator
from cognitivetrust.remediation.ai import AiRefactorHandler, GeminiClient
from cognitivetrust.remediation.credentials import (
    CredentialProvider,
    FileCredentialStore,
    MemoryCredentialStore,
)
from cognitivetrust.remediation.fixers import BaseFixer, StandardFixHandler, get_fixer

__all__ = [
    "ActionGenerator",
    "AiRefactorHandler",
    "GeminiClient",
    "CredentialProvider",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "BaseFixer",
    "StandardFixHandler",
    "get_fixer",
]
