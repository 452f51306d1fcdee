"""Search normalization with reversible offset maps.

Matching runs on normalized text while edits are made on the original
text. Both directions of the offset map are kept so a match found in one
coordinate system can be translated to the other without re-deriving
paragraph boundaries.
"""

from dataclasses import dataclass

QUOTE_MAP = {
    "“": '"',
    "”": '"',
    "„": '"',
    "‟": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
}


@dataclass(frozen=True)
class NormalizedText:
    """Normalized text plus offset maps back to the source.

    Attributes:
        source: The original text
        text: The normalized text
        starts: For each normalized char, the source offset it came from
        ends: For each normalized char, the source offset just past it
        source_to_text: For each source offset (and one past the end),
            the first normalized offset at or after it
    """

    source: str
    text: str
    starts: tuple[int, ...]
    ends: tuple[int, ...]
    source_to_text: tuple[int, ...]

    def to_source(self, start: int, end: int) -> tuple[int, int]:
        """Map a normalized range to a range of the source text."""
        if not 0 <= start <= end <= len(self.text):
            raise IndexError(f"Range ({start}, {end}) outside normalized text")
        if start == end:
            offset = self.starts[start] if start < len(self.starts) else len(self.source)
            return offset, offset
        return self.starts[start], self.ends[end - 1]

    def to_normalized(self, offset: int) -> int:
        """Map a source offset to the normalized text."""
        if not 0 <= offset <= len(self.source):
            raise IndexError(f"Offset {offset} outside source text")
        return self.source_to_text[offset]


def normalize(text: str, casefold: bool = False) -> NormalizedText:
    """Normalize text for matching.

    Transforms:
    1. Collapse every whitespace run (newlines and tabs included) to one space.
    2. Drop leading and trailing whitespace.
    3. Replace curly quotes with straight quotes.
    4. Lowercase, when ``casefold`` is set.
    """
    chars: list[str] = []
    starts: list[int] = []
    ends: list[int] = []
    source_to_text = [0] * (len(text) + 1)

    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isspace():
            j = i
            while j < len(text) and text[j].isspace():
                j += 1
            for k in range(i, j):
                source_to_text[k] = len(chars)
            # Leading and trailing runs emit nothing.
            if chars and j < len(text):
                chars.append(" ")
                starts.append(i)
                ends.append(j)
            i = j
            continue

        source_to_text[i] = len(chars)
        emitted = QUOTE_MAP.get(ch, ch)
        if casefold:
            emitted = emitted.lower()
        for out in emitted:
            chars.append(out)
            starts.append(i)
            ends.append(i + 1)
        i += 1

    source_to_text[len(text)] = len(chars)

    return NormalizedText(
        source=text,
        text="".join(chars),
        starts=tuple(starts),
        ends=tuple(ends),
        source_to_text=tuple(source_to_text),
    )


def normalize_string(text: str, casefold: bool = False) -> str:
    """Normalize without keeping offset maps."""
    return normalize(text, casefold=casefold).text
