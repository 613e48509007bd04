from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from rich.console import Console
from rich.markup import escape

Severity = Literal["info", "success", "error"]

_PREFIX = {"info": "ℹ", "success": "✓", "error": "✗"}
_STYLE = {"info": "cyan", "success": "green", "error": "red"}
_LOG_LEVEL = {"info": logging.INFO, "success": logging.INFO, "error": logging.WARNING}

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity = "info") -> None: ...


class ConsoleNotifier:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, message: str, severity: Severity = "info") -> None:
        prefix = _PREFIX.get(severity, _PREFIX["info"])
        style = _STYLE.get(severity, _STYLE["info"])
        self.console.print(f"[{style}]{prefix} {escape(message)}[/{style}]", highlight=False)
        logger.log(_LOG_LEVEL.get(severity, logging.INFO), message)


@dataclass
class RecordingNotifier:
    messages: list[tuple[str, str]] = field(default_factory=list)

    def notify(self, message: str, severity: Severity = "info") -> None:
        self.messages.append((severity, message))


class LogNotifier:
    def notify(self, message: str, severity: Severity = "info") -> None:
        logger.log(_LOG_LEVEL.get(severity, logging.INFO), message)
