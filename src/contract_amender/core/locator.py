"""Anchor location over documents and plain text.

Searching happens on normalized text; the resulting Anchor carries both the
normalized range and the matching range of the original text, plus the
index of the paragraph (block) the match starts in.
"""

import bisect
import re
from dataclasses import dataclass
from typing import Union

from contract_amender.core.errors import AnchorNotFound
from contract_amender.formatting.ir import Document
from contract_amender.formatting.normalize import NormalizedText, normalize, normalize_string

PARAGRAPH_BREAK = re.compile(r"\n\n+")


@dataclass(frozen=True)
class Anchor:
    """A located match.

    Attributes:
        start: Start offset in the normalized text
        end: End offset (exclusive) in the normalized text
        source_start: Start offset in the original text
        source_end: End offset (exclusive) in the original text
        block_index: Index of the block/paragraph the match starts in
        excerpt: The matched original text
    """

    start: int
    end: int
    source_start: int
    source_end: int
    block_index: int
    excerpt: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end:
            raise ValueError(f"Invalid normalized range ({self.start}, {self.end})")
        if not 0 <= self.source_start <= self.source_end:
            raise ValueError(
                f"Invalid source range ({self.source_start}, {self.source_end})"
            )
        if self.block_index < 0:
            raise ValueError(f"Invalid block index {self.block_index}")


# =============================================================================
# Pattern specifications
# =============================================================================

@dataclass(frozen=True)
class PhraseSetPattern:
    """First paragraph containing every phrase (case-insensitive)."""

    phrases: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "phrases", tuple(self.phrases))
        if not self.phrases or not all(p.strip() for p in self.phrases):
            raise ValueError("PhraseSetPattern needs at least one non-empty phrase")

    @property
    def case_insensitive(self) -> bool:
        return True

    def __str__(self) -> str:
        return "all of " + ", ".join(repr(p) for p in self.phrases)


@dataclass(frozen=True)
class ExactTextPattern:
    """First occurrence of a literal string, compared after normalization."""

    text: str
    case_insensitive: bool = False

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("ExactTextPattern needs a non-empty target")

    def __str__(self) -> str:
        return f"text {self.text!r}"


@dataclass(frozen=True)
class HeadingPrefixPattern:
    """First paragraph whose text starts with a literal prefix."""

    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix.strip():
            raise ValueError("HeadingPrefixPattern needs a non-empty prefix")

    @property
    def case_insensitive(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"heading starting with {self.prefix!r}"


@dataclass(frozen=True)
class RegexPattern:
    """First regular expression match against the original text."""

    pattern: str
    flags: int = 0

    def __post_init__(self) -> None:
        re.compile(self.pattern, self.flags)

    @property
    def case_insensitive(self) -> bool:
        return bool(self.flags & re.IGNORECASE)

    def __str__(self) -> str:
        return f"regex /{self.pattern}/"


PatternSpec = Union[PhraseSetPattern, ExactTextPattern, HeadingPrefixPattern, RegexPattern]


# =============================================================================
# Paragraph segmentation
# =============================================================================

@dataclass(frozen=True)
class Segment:
    """A paragraph's span in the original text."""

    index: int
    start: int
    end: int


def paragraph_segments(source: Union[str, Document]) -> tuple[str, list[Segment]]:
    """Return the searchable text and its paragraph spans.

    A Document contributes one segment per block, taken from its block span
    table. A plain string is split on blank lines.
    """
    if isinstance(source, Document):
        spans = source.block_spans()
        return source.plain_text, [
            Segment(i, start, end) for i, (start, end) in enumerate(spans)
        ]

    segments: list[Segment] = []
    position = 0
    for match in PARAGRAPH_BREAK.finditer(source):
        segments.append(Segment(len(segments), position, match.start()))
        position = match.end()
    segments.append(Segment(len(segments), position, len(source)))
    return source, segments


def segment_at(segments: list[Segment], offset: int) -> Segment:
    """Return the last segment starting at or before ``offset``."""
    starts = [segment.start for segment in segments]
    return segments[max(bisect.bisect_right(starts, offset) - 1, 0)]


def _trimmed(text: str, segment: Segment) -> tuple[int, int]:
    start, end = segment.start, segment.end
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def _anchor_for_range(
    text: str,
    normalized: NormalizedText,
    source_start: int,
    source_end: int,
    block_index: int,
) -> Anchor:
    return Anchor(
        start=normalized.to_normalized(source_start),
        end=normalized.to_normalized(source_end),
        source_start=source_start,
        source_end=source_end,
        block_index=block_index,
        excerpt=text[source_start:source_end],
    )


# =============================================================================
# Strategies
# =============================================================================

def _locate_phrases(text, segments, normalized, pattern: PhraseSetPattern) -> Anchor:
    needles = [normalize_string(phrase, casefold=True) for phrase in pattern.phrases]
    for segment in segments:
        start, end = _trimmed(text, segment)
        if start == end:
            continue
        paragraph = normalized.text[
            normalized.to_normalized(start):normalized.to_normalized(end)
        ]
        if all(needle in paragraph for needle in needles):
            return _anchor_for_range(text, normalized, start, end, segment.index)
    raise AnchorNotFound(
        "No paragraph contains all required phrases", pattern=str(pattern)
    )


def _locate_exact(text, segments, normalized, pattern: ExactTextPattern) -> Anchor:
    needle = normalize_string(pattern.text, casefold=pattern.case_insensitive)
    index = normalized.text.find(needle)
    if index == -1:
        raise AnchorNotFound("Target text not found", pattern=str(pattern))
    end = index + len(needle)
    source_start, source_end = normalized.to_source(index, end)
    return Anchor(
        start=index,
        end=end,
        source_start=source_start,
        source_end=source_end,
        block_index=segment_at(segments, source_start).index,
        excerpt=text[source_start:source_end],
    )


def _locate_heading(text, segments, normalized, pattern: HeadingPrefixPattern) -> Anchor:
    for segment in segments:
        start, end = _trimmed(text, segment)
        if text[start:end].startswith(pattern.prefix):
            return _anchor_for_range(text, normalized, start, end, segment.index)
    raise AnchorNotFound("No block starts with the heading prefix", pattern=str(pattern))


def _locate_regex(text, segments, normalized, pattern: RegexPattern) -> Anchor:
    match = re.search(pattern.pattern, text, pattern.flags)
    if match is None:
        raise AnchorNotFound("Regular expression did not match", pattern=str(pattern))
    return _anchor_for_range(
        text,
        normalized,
        match.start(),
        match.end(),
        segment_at(segments, match.start()).index,
    )


_STRATEGIES = {
    PhraseSetPattern: _locate_phrases,
    ExactTextPattern: _locate_exact,
    HeadingPrefixPattern: _locate_heading,
    RegexPattern: _locate_regex,
}


def locate(source: Union[str, Document], pattern: PatternSpec) -> Anchor:
    """Find the first match of ``pattern`` in document order.

    Args:
        source: Plain text or a Document
        pattern: One of the pattern specifications above

    Returns:
        The Anchor of the first match

    Raises:
        AnchorNotFound: If nothing matches
    """
    strategy = _STRATEGIES.get(type(pattern))
    if strategy is None:
        raise TypeError(f"Unsupported pattern: {pattern!r}")

    text, segments = paragraph_segments(source)
    if not segments:
        raise AnchorNotFound("Document has no paragraphs", pattern=str(pattern))
    normalized = normalize(text, casefold=pattern.case_insensitive)
    return strategy(text, segments, normalized, pattern)
