"""Microsoft Word (.docx) file handler."""

import zipfile
from pathlib import Path
from typing import Optional

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.exceptions import PackageNotFoundError
from docx.shared import Length, Pt, Twips
from lxml import etree

from contract_amender.config import get_settings
from contract_amender.core.errors import DocumentIOError
from contract_amender.core.styles import resolve_default
from contract_amender.formats.base import FormatHandler
from contract_amender.formatting.ir import (
    Alignment,
    Block,
    BlockFormat,
    Document,
    Run,
    RunStyle,
    Spacing,
    StyleProfile,
)

ALIGNMENT_FROM_DOCX = {
    WD_ALIGN_PARAGRAPH.LEFT: Alignment.LEFT,
    WD_ALIGN_PARAGRAPH.CENTER: Alignment.CENTER,
    WD_ALIGN_PARAGRAPH.RIGHT: Alignment.RIGHT,
    WD_ALIGN_PARAGRAPH.JUSTIFY: Alignment.JUSTIFY,
}
ALIGNMENT_TO_DOCX = {value: key for key, value in ALIGNMENT_FROM_DOCX.items()}

# Line spacing multiples are stored in 240ths of a line
LINE_UNITS = 240


class DOCXHandler(FormatHandler):
    """Handler for Microsoft Word (.docx) files.

    Uses python-docx for reading and writing. Body paragraphs become
    Blocks; runs keep their font, size, bold, italic and underline.
    """

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return (".docx",)

    def _open(self, path: Path):
        try:
            return DocxDocument(str(path))
        except (
            PackageNotFoundError,
            zipfile.BadZipFile,
            etree.XMLSyntaxError,
            KeyError,
            ValueError,
            OSError,
        ) as e:
            raise DocumentIOError(f"Cannot open document: {e}", path=path) from e

    def read(self, path: Path) -> str:
        """Extract plain text from DOCX file."""
        doc = self._open(path)
        paragraphs: list[str] = []

        for para in doc.paragraphs:
            text = para.text.strip()
            if text:
                paragraphs.append(text)

        return "\n\n".join(paragraphs)

    def read_document(self, path: Path) -> Document:
        """Read body paragraphs with their run and paragraph formatting."""
        doc = self._open(path)
        blocks = [self._read_block(para) for para in doc.paragraphs]
        return self._require_blocks(
            Document(blocks=tuple(blocks), metadata={"source": str(path)}),
            path,
        )

    def _read_block(self, para) -> Block:
        runs = tuple(
            Run(text=run.text, style=self._run_style(run))
            for run in para.runs
            if run.text
        )
        text = para.text
        if "".join(run.text for run in runs) != text:
            # Text outside plain runs (hyperlinks, fields): keep it as one run.
            style = runs[0].style if runs else RunStyle()
            runs = (Run(text=text, style=style),) if text else ()
        return Block(runs=runs, format=self._block_format(para))

    def _run_style(self, run) -> RunStyle:
        font = run.font
        size = int(round(font.size.pt * 2)) if font.size is not None else None
        underline = None if run.underline is None else bool(run.underline)
        return RunStyle(
            font=font.name,
            size=size,
            bold=run.bold,
            italic=run.italic,
            underline=underline,
        )

    def _block_format(self, para) -> BlockFormat:
        fmt = para.paragraph_format
        before, after, line = fmt.space_before, fmt.space_after, fmt.line_spacing

        line_units: Optional[int] = None
        # Exact spacing comes back as a Length; only multiples are kept.
        if line is not None and not isinstance(line, Length):
            line_units = int(round(line * LINE_UNITS))

        spacing = None
        if before is not None or after is not None or line_units is not None:
            defaults = Spacing()
            spacing = Spacing(
                before=before.twips if before is not None else defaults.before,
                after=after.twips if after is not None else defaults.after,
                line=line_units if line_units is not None else defaults.line,
            )

        return BlockFormat(
            spacing=spacing,
            alignment=ALIGNMENT_FROM_DOCX.get(fmt.alignment),
        )

    def write(self, document: Document, path: Path) -> None:
        """Write document to a new DOCX file.

        Every run is written with a fully resolved style, so the output
        never depends on Word's own defaults for font, size or emphasis.
        """
        settings = get_settings()
        profile = resolve_default(document)
        doc = DocxDocument()

        # Set default font
        font = doc.styles["Normal"].font
        font.name = profile.font
        font.size = Pt(profile.size / 2)

        doc.core_properties.author = settings.document_author
        doc.core_properties.title = settings.document_title

        for block in document.blocks:
            para = doc.add_paragraph()
            self._apply_block_format(para, block.format, profile)
            for run_data in block.runs:
                style = run_data.style.resolve(profile)
                run = para.add_run(run_data.text)
                run.font.name = style.font
                run.font.size = Pt(style.size / 2)
                run.bold = style.bold
                run.italic = style.italic
                run.underline = style.underline

        try:
            doc.save(str(path))
        except OSError as e:
            raise DocumentIOError(f"Cannot write document: {e}", path=path) from e

    def _apply_block_format(
        self, para, block_format: BlockFormat, profile: StyleProfile
    ) -> None:
        spacing = block_format.spacing or profile.spacing
        alignment = block_format.alignment or profile.alignment

        fmt = para.paragraph_format
        fmt.space_before = Twips(spacing.before)
        fmt.space_after = Twips(spacing.after)
        fmt.line_spacing = spacing.line / LINE_UNITS
        fmt.alignment = ALIGNMENT_TO_DOCX[alignment]
