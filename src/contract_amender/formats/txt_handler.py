"""Plain text file handler."""

import re
from pathlib import Path

from contract_amender.core.errors import DocumentIOError
from contract_amender.core.styles import resolve_default
from contract_amender.formats.base import FormatHandler
from contract_amender.formatting.ir import BLOCK_SEPARATOR, Block, Document, Run

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class TXTHandler(FormatHandler):
    """Handler for plain text (.txt) files.

    Paragraphs are separated by blank lines. Emphasis is written with
    markdown-style markers:
    - **bold** for bold text
    - *italic* for italic text
    """

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return (".txt",)

    def read(self, path: Path) -> str:
        """Read plain text from file."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentIOError(f"Cannot read text file: {e}", path=path) from e

    def read_document(self, path: Path) -> Document:
        """Read each blank-line separated paragraph as an unstyled block."""
        text = self.read(path).replace("\r\n", "\n")
        blocks = [
            Block(runs=(Run(text=paragraph.strip("\n")),))
            for paragraph in PARAGRAPH_BREAK.split(text)
            if paragraph.strip()
        ]
        return self._require_blocks(
            Document(blocks=tuple(blocks), metadata={"source": str(path)}),
            path,
        )

    def write(self, document: Document, path: Path) -> None:
        """Write document as markdown-styled plain text."""
        profile = resolve_default(document)
        lines: list[str] = []

        for block in document.blocks:
            line_parts: list[str] = []
            for run in block.runs:
                style = run.style.resolve(profile)
                text = run.text

                # Apply markdown formatting
                if style.bold and style.italic:
                    text = f"***{text}***"
                elif style.bold:
                    text = f"**{text}**"
                elif style.italic:
                    text = f"*{text}*"

                line_parts.append(text)

            lines.append("".join(line_parts))

        try:
            path.write_text(BLOCK_SEPARATOR.join(lines), encoding="utf-8")
        except OSError as e:
            raise DocumentIOError(f"Cannot write text file: {e}", path=path) from e
