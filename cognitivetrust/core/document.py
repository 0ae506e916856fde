"""
In-process model of the editor host: documents, edits and the workspace.

Edits are applied transactionally. Every range in a WorkspaceEdit is
resolved against the current document text before anything changes,
so an edit either applies in full or not at all.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterator, List, Optional, Tuple

from cognitivetrust.core.findings import TextRange
from cognitivetrust.errors import EditRejectedError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "requirements.txt"
IMPORT_STATEMENT = re.compile(r"^[ \t]*import[ \t]+(?P<names>[^\n;]+)", re.MULTILINE)


def detect_language(path: str) -> str:
    """Return the host language id for a file path."""
    if path.endswith(MANIFEST_NAME):
        return "pip-requirements"
    if path.endswith(".py"):
        return "python"
    return "plaintext"


class TextDocument:
    """An open text document identified by its absolute path."""

    def __init__(self, path: str, text: str, version: int = 1):
        self.path = os.path.normpath(os.path.abspath(path))
        self.text = text
        self.version = version
        self.language_id = detect_language(self.path)

    @classmethod
    def from_file(cls, path: str) -> "TextDocument":
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return cls(path, f.read())

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n")

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, line: int) -> str:
        """Text of a line without its line terminator."""
        lines = self.lines
        if not 0 <= line < len(lines):
            raise IndexError(f"line {line} out of range for {self.path}")
        return lines[line].rstrip("\r")

    def line_range(self, line: int) -> TextRange:
        return TextRange.for_line(line, len(self.line_at(line)))

    def offset_at(self, line: int, col: int) -> int:
        """Convert a position to a string offset, rejecting stale positions."""
        lines = self.lines
        if not 0 <= line < len(lines) or not 0 <= col <= len(lines[line]):
            raise EditRejectedError(
                f"position {line}:{col} is outside the document", self.path
            )
        return sum(len(text) + 1 for text in lines[:line]) + col

    def get_text(self, text_range: Optional[TextRange] = None) -> str:
        if text_range is None:
            return self.text
        start = self.offset_at(text_range.start_line, text_range.start_col)
        end = self.offset_at(text_range.end_line, text_range.end_col)
        return self.text[start:end]

    def has_import(self, module: str) -> bool:
        """
        True if an ``import`` statement binds ``module``'s name.

        ``import os``, ``import os.path`` and ``import sys, os`` bind
        ``os``; ``from os import path`` and ``import os as o`` do not.
        """
        for match in IMPORT_STATEMENT.finditer(self.text):
            names = match.group("names").split("#", 1)[0]
            for item in names.split(","):
                parts = item.split()
                if not parts:
                    continue
                if len(parts) == 3 and parts[1] == "as":
                    bound = parts[2]
                else:
                    bound = parts[0].split(".", 1)[0]
                if bound == module:
                    return True
        return False

    def __repr__(self) -> str:
        return f"TextDocument({self.path!r}, version={self.version})"


@dataclass(frozen=True)
class TextEdit:
    """Replace ``range`` with ``new_text``; an empty range is an insertion."""
    range: TextRange
    new_text: str


@dataclass
class WorkspaceEdit:
    """A set of text edits across documents, applied as one unit."""
    _edits: Dict[str, List[TextEdit]] = field(default_factory=dict)

    def replace(self, path: str, text_range: TextRange, new_text: str) -> None:
        self._edits.setdefault(path, []).append(TextEdit(text_range, new_text))

    def insert(self, path: str, line: int, col: int, new_text: str) -> None:
        self.replace(path, TextRange.point(line, col), new_text)

    def entries(self) -> Iterator[Tuple[str, List[TextEdit]]]:
        return iter(self._edits.items())

    @property
    def size(self) -> int:
        return sum(len(edits) for edits in self._edits.values())

    def __bool__(self) -> bool:
        return self.size > 0


def _apply_text_edits(document: TextDocument, edits: List[TextEdit]) -> str:
    """Compute the new text for a document, or raise without side effects."""
    resolved = []
    for order, edit in enumerate(edits):
        start = document.offset_at(edit.range.start_line, edit.range.start_col)
        end = document.offset_at(edit.range.end_line, edit.range.end_col)
        if end < start:
            raise EditRejectedError("edit range ends before it starts", document.path)
        resolved.append((start, end, order, edit.new_text))

    resolved.sort()
    for previous, current in zip(resolved, resolved[1:]):
        if current[0] < previous[1]:
            raise EditRejectedError("overlapping edits", document.path)

    text = document.text
    # Apply back to front so earlier offsets stay valid. At equal starts the
    # wider edit goes first, which leaves insertions in front of it.
    for start, end, _, new_text in sorted(resolved, key=lambda r: r[:3], reverse=True):
        text = text[:start] + new_text + text[end:]
    return text


SaveListener = Callable[[TextDocument], Awaitable[None]]


class Workspace:
    """
    The set of documents under one project root.

    Documents are loaded lazily from disk and cached. Listeners
    registered with ``on_did_save`` run after every ``save()``.
    """

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        self.documents: Dict[str, TextDocument] = {}
        self._save_listeners: List[SaveListener] = []

    def open_document(self, path: str) -> TextDocument:
        key = os.path.normpath(os.path.abspath(path))
        document = self.documents.get(key)
        if document is None:
            document = TextDocument.from_file(key)
            self.documents[key] = document
        return document

    def track(self, document: TextDocument) -> TextDocument:
        """Register a document created in memory so edits can reach it."""
        self.documents[document.path] = document
        return document

    def relative_path(self, path: str) -> str:
        try:
            return Path(path).resolve().relative_to(self.root).as_posix()
        except ValueError:
            return path

    def on_did_save(self, listener: SaveListener) -> None:
        self._save_listeners.append(listener)

    async def apply_edit(self, edit: WorkspaceEdit) -> None:
        """
        Apply every text edit or none of them.

        Raises:
            EditRejectedError: if any range no longer fits its document.
        """
        staged = {}
        for path, edits in edit.entries():
            document = self.open_document(path)
            staged[document.path] = (document, _apply_text_edits(document, edits))

        for document, new_text in staged.values():
            document.text = new_text
            document.version += 1
        logger.debug("Applied %d edit(s) to %d document(s)", edit.size, len(staged))

    async def save(self, document: TextDocument) -> None:
        with open(document.path, "w", encoding="utf-8", newline="") as f:
            f.write(document.text)
        for listener in list(self._save_listeners):
            await listener(document)
