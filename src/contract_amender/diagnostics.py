"""Diagnostic events and logging setup.

The pipeline reports what it does as structured DiagnosticEvents sent to
an injected observer. The default observer forwards them to the standard
logging module; ``setup_logging`` renders them with Rich.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("contract_amender")


class EventKind(str, Enum):
    """Kinds of diagnostic events."""

    DOCUMENT_STARTED = "document_started"
    ANCHOR_LOCATED = "anchor_located"
    RULE_APPLIED = "rule_applied"
    DOCUMENT_WRITTEN = "document_written"
    DOCUMENT_FAILED = "document_failed"
    BATCH_COMPLETED = "batch_completed"


@dataclass(frozen=True)
class DiagnosticEvent:
    """A structured, leveled pipeline event.

    Attributes:
        kind: What happened
        message: Human-readable summary
        level: A logging level (logging.INFO, logging.ERROR, ...)
        path: The document concerned, if any
        detail: Extra structured fields
    """

    kind: EventKind
    message: str
    level: int = logging.INFO
    path: Optional[Path] = None
    detail: dict[str, Any] = field(default_factory=dict)


Observer = Callable[[DiagnosticEvent], None]


class LoggingObserver:
    """Forward events to a logger, with the detail fields in ``extra``."""

    def __init__(self, target: Optional[logging.Logger] = None) -> None:
        self.logger = target or logger

    def __call__(self, event: DiagnosticEvent) -> None:
        extra = {"event": event.kind.value, **event.detail}
        if event.path is not None:
            extra["document"] = str(event.path)
        self.logger.log(event.level, event.message, extra=extra)


def setup_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Install a Rich handler on the package logger."""
    handler = RichHandler(
        console=console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
