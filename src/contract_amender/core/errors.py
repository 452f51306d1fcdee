"""Errors raised while amending a document."""

from pathlib import Path
from typing import Optional


class AmendmentError(Exception):
    """Base error for a failed amendment.

    Carries enough context (document path, pattern) to diagnose a failure
    without re-running. The pipeline fills in ``path`` when the error
    escapes a document.
    """

    kind = "amendment_error"

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        pattern: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.pattern = pattern

    def __str__(self) -> str:
        parts = [self.message]
        if self.pattern:
            parts.append(f"pattern: {self.pattern}")
        if self.path:
            parts.append(f"document: {self.path}")
        return " | ".join(parts)


class AnchorNotFound(AmendmentError):
    """No text, paragraph or block satisfied the locate criteria."""

    kind = "anchor_not_found"


class MalformedBlock(AmendmentError):
    """A block required for a sentence splice has no usable text."""

    kind = "malformed_block"


class InvalidDocumentStructure(AmendmentError):
    """The document has no blocks to work with."""

    kind = "invalid_document_structure"


class DocumentIOError(AmendmentError):
    """Reading or writing the document failed."""

    kind = "io_error"


class UnknownDocumentClass(AmendmentError):
    """No registered document class accepts the document."""

    kind = "unknown_document_class"


class MissingClauseText(AmendmentError):
    """A rule references a clause the batch did not supply."""

    kind = "missing_clause_text"
