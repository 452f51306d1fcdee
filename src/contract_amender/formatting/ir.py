"""Intermediate Representation for amendable documents.

This module defines the data structures that sit between the format
handlers and the transform engine. Documents are immutable values: every
edit produces a new Document, so an Anchor found in one version can never
silently point into another.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


# =============================================================================
# Formatting attributes
# =============================================================================

class Alignment(str, Enum):
    """Paragraph alignment."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


@dataclass(frozen=True)
class Spacing:
    """Paragraph spacing.

    Attributes:
        before: Space before the paragraph, in twips
        after: Space after the paragraph, in twips
        line: Line spacing in 240ths of a line (240 = single, 360 = 1.5)
    """

    before: int = 240
    after: int = 240
    line: int = 360


@dataclass(frozen=True)
class StyleProfile:
    """Fully resolved formatting for newly constructed content.

    Every field is always populated. Profiles are produced by the style
    resolver and shared read-only by all insertions in a document.
    """

    font: str
    size: int  # half-points
    spacing: Spacing
    alignment: Alignment
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def with_emphasis(self, style: Optional["RunStyle"]) -> "StyleProfile":
        """Return a copy with the explicit fields of ``style`` applied."""
        if style is None:
            return self
        changes = {
            name: value
            for name, value in (
                ("font", style.font),
                ("size", style.size),
                ("bold", style.bold),
                ("italic", style.italic),
                ("underline", style.underline),
            )
            if value is not None
        }
        return replace(self, **changes) if changes else self


@dataclass(frozen=True)
class RunStyle:
    """Character formatting of a run.

    A ``None`` field is inherited from the document defaults. Use
    :meth:`resolve` to obtain a style with every field filled in.
    """

    font: Optional[str] = None
    size: Optional[int] = None  # half-points
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None

    @classmethod
    def from_profile(cls, profile: StyleProfile) -> "RunStyle":
        return cls(
            font=profile.font,
            size=profile.size,
            bold=profile.bold,
            italic=profile.italic,
            underline=profile.underline,
        )

    @property
    def is_resolved(self) -> bool:
        """Check if no attribute is left to inheritance."""
        return None not in (
            self.font, self.size, self.bold, self.italic, self.underline
        )

    def resolve(self, profile: StyleProfile) -> "RunStyle":
        """Fill inherited attributes from a resolved profile."""
        return RunStyle(
            font=self.font if self.font is not None else profile.font,
            size=self.size if self.size is not None else profile.size,
            bold=self.bold if self.bold is not None else profile.bold,
            italic=self.italic if self.italic is not None else profile.italic,
            underline=(
                self.underline if self.underline is not None else profile.underline
            ),
        )


@dataclass(frozen=True)
class BlockFormat:
    """Paragraph-level formatting; ``None`` means inherited."""

    spacing: Optional[Spacing] = None
    alignment: Optional[Alignment] = None

    @classmethod
    def from_profile(cls, profile: StyleProfile) -> "BlockFormat":
        return cls(spacing=profile.spacing, alignment=profile.alignment)


# =============================================================================
# Document structure
# =============================================================================

@dataclass(frozen=True)
class Run:
    """A contiguous span of text with consistent styling.

    Attributes:
        text: The text content
        style: Character formatting, possibly partially inherited
    """

    text: str
    style: RunStyle = field(default_factory=RunStyle)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Block:
    """A paragraph made of styled runs.

    Attributes:
        runs: Runs making up this block, in order
        format: Paragraph-level formatting
    """

    runs: tuple[Run, ...] = ()
    format: BlockFormat = field(default_factory=BlockFormat)

    @classmethod
    def from_text(cls, text: str, profile: StyleProfile) -> "Block":
        """Build a single-run block styled entirely from a profile."""
        return cls(
            runs=(Run(text=text, style=RunStyle.from_profile(profile)),),
            format=BlockFormat.from_profile(profile),
        )

    @property
    def text(self) -> str:
        """Get the plain text content without styling."""
        return "".join(run.text for run in self.runs)

    @property
    def first_run(self) -> Optional[Run]:
        return self.runs[0] if self.runs else None

    def __str__(self) -> str:
        return self.text


BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class Document:
    """Complete document as an immutable sequence of blocks.

    Attributes:
        blocks: Blocks (paragraphs) in document order
        metadata: Additional metadata (source path, document class, ...)
    """

    blocks: tuple[Block, ...] = ()
    metadata: dict = field(default_factory=dict, compare=False)

    @property
    def plain_text(self) -> str:
        """Get all text, blocks separated by a blank line."""
        return BLOCK_SEPARATOR.join(block.text for block in self.blocks)

    def block_spans(self) -> list[tuple[int, int]]:
        """Offsets of every block inside :attr:`plain_text`."""
        spans: list[tuple[int, int]] = []
        position = 0
        for block in self.blocks:
            end = position + len(block.text)
            spans.append((position, end))
            position = end + len(BLOCK_SEPARATOR)
        return spans

    def with_blocks(self, blocks) -> "Document":
        """Return a new document sharing this one's metadata."""
        return Document(blocks=tuple(blocks), metadata=dict(self.metadata))

    def __len__(self) -> int:
        return len(self.blocks)
