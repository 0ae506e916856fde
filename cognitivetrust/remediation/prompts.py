"""
Prompt templates for AI-assisted refactoring, one per finding kind.
"""

from typing import Optional

from cognitivetrust.core.findings import FindingKind


OUTDATED_LIBRARY_TEMPLATE = (
    "You are a dependency management expert. The following line from a Python "
    "requirements.txt file specifies an outdated library: \"{code}\". The specific "
    "issue is: \"{message}\". Please provide only the corrected line, updated to a "
    "secure version that fixes the issue."
)

MISSING_AUTHORIZATION_TEMPLATE = (
    "You are a Python Flask security expert. The following route definition is "
    "missing an authorization check: \n```python\n{code}\n```\nThe specific issue "
    "is: \"{message}\". Add a placeholder authorization decorator (like "
    "'@login_required' from a common library like Flask-Login) to the function. "
    "Provide the complete, corrected function definition as a single block of "
    "code, without any explanation."
)

HARDCODED_SECRET_TEMPLATE = (
    "You are a Python security expert. Refactor the following line of code to "
    "remove the hardcoded secret by using the 'os' module to get it from an "
    "environment variable. The insecure code is: \"{code}\". Provide only the "
    "single, corrected line of Python code, without any explanation or extra text."
)


def select_template(kind: Optional[FindingKind]) -> str:
    """Pick the template for a kind; anything unrecognized gets the secret template."""
    if kind is FindingKind.OUTDATED_LIBRARY:
        return OUTDATED_LIBRARY_TEMPLATE
    elif kind is FindingKind.MISSING_AUTHORIZATION:
        return MISSING_AUTHORIZATION_TEMPLATE
    elif kind is FindingKind.HARDCODED_SECRET:
        return HARDCODED_SECRET_TEMPLATE
    else:
        return HARDCODED_SECRET_TEMPLATE


def build_prompt(kind: Optional[FindingKind], code: str, message: str) -> str:
    return select_template(kind).format(code=code, message=message)
