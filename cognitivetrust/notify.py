"""
User-facing notifications, prompts and progress indicators.

The remediation and scan layers talk to the user only through a
Notifier. ConsoleNotifier renders with rich; RecordingNotifier keeps
everything in memory for tests and scripted runs.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from rich.console import Console
from rich.prompt import Prompt


class Notifier(ABC):
    """Base notifier. Subclasses implement the output methods."""

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass

    @abstractmethod
    async def prompt(self, message: str, title: str = "", password: bool = False) -> Optional[str]:
        """Ask the user for a value. Returns None or "" when the user declines."""
        pass

    @contextmanager
    def progress(self, title: str) -> Iterator[None]:
        """Show a non-cancellable progress indicator around a block."""
        yield


class ConsoleNotifier(Notifier):
    """Notifier that writes to the terminal through rich."""

    def __init__(self, console: Optional[Console] = None, interactive: bool = True):
        self.console = console or Console(stderr=True)
        self.interactive = interactive

    def info(self, message: str) -> None:
        self.console.print(f"[green]info[/green]  {message}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]warning[/yellow]  {message}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]error[/bold red]  {message}", highlight=False)

    async def prompt(self, message: str, title: str = "", password: bool = False) -> Optional[str]:
        if not self.interactive:
            return None
        if title:
            self.console.print(f"[bold]{title}[/bold]")
        try:
            # Prompt.ask blocks on stdin, so keep it off the event loop.
            return await asyncio.to_thread(
                Prompt.ask, message, console=self.console, password=password, default=""
            )
        except (EOFError, KeyboardInterrupt):
            return None

    @contextmanager
    def progress(self, title: str) -> Iterator[None]:
        with self.console.status(title):
            yield


class RecordingNotifier(Notifier):
    """
    Collects notifications instead of displaying them.

    ``answers`` feeds prompt responses in order; once it runs out every
    prompt is treated as declined.
    """

    def __init__(self, answers: Optional[List[Optional[str]]] = None):
        self.messages: List[Tuple[str, str]] = []
        self.prompts: List[str] = []
        self.progress_titles: List[str] = []
        self._answers = list(answers or [])

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    async def prompt(self, message: str, title: str = "", password: bool = False) -> Optional[str]:
        self.prompts.append(message)
        # Yield once so concurrent callers interleave like a real prompt.
        await asyncio.sleep(0)
        return self._answers.pop(0) if self._answers else None

    @contextmanager
    def progress(self, title: str) -> Iterator[None]:
        self.progress_titles.append(title)
        yield

    def of_level(self, level: str) -> List[str]:
        return [message for kind, message in self.messages if kind == level]
