"""Abstract base class for document format handlers."""

from abc import ABC, abstractmethod
from pathlib import Path

from contract_amender.core.errors import InvalidDocumentStructure
from contract_amender.formatting.ir import Document


class FormatHandler(ABC):
    """Abstract base class for document format handlers.

    Each handler reads a document either as plain text (for searching) or
    as a Document of styled blocks, and writes a Document back to the same
    format.
    """

    @property
    @abstractmethod
    def supported_extensions(self) -> tuple[str, ...]:
        """Return tuple of supported file extensions (e.g., ('.docx',))."""
        ...

    @abstractmethod
    def read(self, path: Path) -> str:
        """Extract plain text from document.

        Args:
            path: Path to the input document

        Returns:
            Plain text content, paragraphs separated by blank lines
        """
        ...

    @abstractmethod
    def read_document(self, path: Path) -> Document:
        """Read the document's blocks and runs.

        Args:
            path: Path to the input document

        Returns:
            The Document model of the file

        Raises:
            DocumentIOError: If the file cannot be opened or parsed
            InvalidDocumentStructure: If the file has no paragraphs
        """
        ...

    @abstractmethod
    def write(self, document: Document, path: Path) -> None:
        """Write document to file.

        Args:
            document: The Document to serialize
            path: Path to write the output document

        Raises:
            DocumentIOError: If the file cannot be written
        """
        ...

    def _require_blocks(self, document: Document, path: Path) -> Document:
        if not document.blocks:
            raise InvalidDocumentStructure("Document has no paragraphs", path=path)
        return document
