"""
AI-assisted refactoring through the Gemini generateContent API.

The handler runs four stages: obtain the API key, build a prompt for
the finding's kind, call the API under a progress indicator, and apply
the returned code as one atomic edit. Any failure after the key is
obtained surfaces as a single error message and leaves the document
untouched.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from cognitivetrust.core.document import TextDocument, Workspace, WorkspaceEdit
from cognitivetrust.core.findings import Finding, FindingKind
from cognitivetrust.core.state import FixCounter
from cognitivetrust.errors import EditRejectedError, GenerationError
from cognitivetrust.notify import Notifier
from cognitivetrust.remediation.credentials import CredentialProvider
from cognitivetrust.remediation.fixers import add_import_if_missing
from cognitivetrust.remediation.prompts import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT = 60.0

CANCELLED_MESSAGE = "Refactoring with Gemini cancelled. No API key was provided."
PROGRESS_TITLE = "Asking Gemini to refactor code..."


def extract_text(payload: Any) -> str:
    """
    Pull ``candidates[0].content.parts[0].text`` out of a response.

    Raises:
        GenerationError: if the path is missing or the text is blank.
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not isinstance(text, str) or not text.strip():
        raise GenerationError("Received an empty or invalid response from the Gemini API.")
    return text.strip()


def describe_http_error(error: Exception) -> str:
    """Best-effort human message for a failed API call."""
    response = getattr(error, "response", None)
    if response is not None:
        try:
            message = response.json().get("error", {}).get("message")
        except (ValueError, AttributeError):
            message = None
        if message:
            return str(message)
        # str() of a status error embeds the request URL, which carries the key.
        return f"Request failed with status {response.status_code}"
    return str(error) or "An unknown error occurred."


class GeminiClient:
    """Thin async client for the generateContent endpoint."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.endpoint}/{self.model}:generateContent"

    @staticmethod
    def request_body(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    async def generate(self, prompt: str, api_key: str) -> str:
        """
        Send a prompt and return the generated text.

        Raises:
            httpx.HTTPError: on transport failures and non-2xx responses.
            GenerationError: if the response has no usable text.
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.url,
                params={"key": api_key},
                json=self.request_body(prompt),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError:
                raise GenerationError("Received an empty or invalid response from the Gemini API.")
        return extract_text(payload)


class AiRefactorHandler:
    """Applies Gemini-generated replacements for any kind of finding."""

    def __init__(
        self,
        workspace: Workspace,
        counter: FixCounter,
        notifier: Notifier,
        credentials: CredentialProvider,
        client: Optional[GeminiClient] = None,
    ):
        self.workspace = workspace
        self.counter = counter
        self.notifier = notifier
        self.credentials = credentials
        self.client = client or GeminiClient()

    async def obtain_api_key(self) -> Optional[str]:
        api_key = await self.credentials.get()
        if api_key:
            return api_key

        api_key = await self.notifier.prompt(
            "Please enter your Google AI Gemini API Key",
            title="Gemini API Key",
            password=True,
        )
        if not api_key:
            return None
        await self.credentials.store(api_key)
        return api_key

    async def apply(self, document: TextDocument, finding: Finding) -> bool:
        api_key = await self.obtain_api_key()
        if not api_key:
            self.notifier.warning(CANCELLED_MESSAGE)
            return False

        try:
            insecure_code = document.get_text(finding.range)
        except EditRejectedError as e:
            logger.info("Finding range is stale for %s: %s", document.path, e)
            self.notifier.error(f"Failed to refactor with Gemini: {e}")
            return False
        prompt = build_prompt(finding.kind, insecure_code, finding.message)

        with self.notifier.progress(PROGRESS_TITLE):
            try:
                refactored = await self.client.generate(prompt, api_key)
                edit = WorkspaceEdit()
                edit.replace(document.path, finding.range, refactored)
                if finding.kind is FindingKind.HARDCODED_SECRET:
                    add_import_if_missing(edit, document)
                await self.workspace.apply_edit(edit)
            except httpx.HTTPError as e:
                logger.error("Gemini request failed: %s", type(e).__name__)
                self.notifier.error(f"Failed to refactor with Gemini: {describe_http_error(e)}")
                return False
            except (GenerationError, EditRejectedError) as e:
                logger.error("Gemini refactor of %s failed: %s", document.path, e)
                self.notifier.error(f"Failed to refactor with Gemini: {e}")
                return False

        self.counter.increment()
        self.notifier.info("Code refactored successfully by Gemini.")
        return True
