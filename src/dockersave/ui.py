"""
User-facing progress messages.

Messages sent through a ``Ui`` are advisory and not meant to be parsed.
``ClickUi`` prints them for humans; ``RecordingUi`` keeps them in memory
for callers that relay messages elsewhere.
"""

from __future__ import annotations

from typing import List, Protocol, Tuple, runtime_checkable

import click


@runtime_checkable
class Ui(Protocol):
    """Sink for progress messages emitted by a stage."""

    def say(self, message: str) -> None:
        """Emit a top-level status line."""
        ...

    def message(self, message: str) -> None:
        """Emit a detail line for the current step."""
        ...

    def error(self, message: str) -> None:
        """Emit an error line."""
        ...


class ClickUi:
    """Prints messages to the terminal, prefixed with the stage name."""

    def __init__(self, prefix: str = "docker-save"):
        self.prefix = prefix

    def say(self, message: str) -> None:
        click.secho(f"==> {self.prefix}: {message}", bold=True)

    def message(self, message: str) -> None:
        click.echo(f"    {self.prefix}: {message}")

    def error(self, message: str) -> None:
        click.secho(f"==> {self.prefix}: {message}", fg="red", err=True)


class RecordingUi:
    """Keeps every message as a ``(kind, text)`` pair."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str]] = []

    def say(self, message: str) -> None:
        self.records.append(("say", message))

    def message(self, message: str) -> None:
        self.records.append(("message", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    @property
    def messages(self) -> List[str]:
        """Text of every ``message`` call, in order."""
        return [text for kind, text in self.records if kind == "message"]
