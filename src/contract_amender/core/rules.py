"""Transform rules applied at an anchor.

Rules are frozen values. Content may be given literally or as a
ClauseText reference that is filled in from the batch's clause mapping
before the rule is applied.
"""

from dataclasses import dataclass
from typing import Optional, Union

from contract_amender.formatting.ir import RunStyle


@dataclass(frozen=True)
class ClauseText:
    """Reference to a named clause supplied with the batch.

    Attributes:
        key: Name in the clause mapping (e.g. "confidentiality")
        default: Text used when the mapping has no such key
    """

    key: str
    default: Optional[str] = None


Content = Union[str, ClauseText]


@dataclass(frozen=True)
class InsertBefore:
    """Insert a new block before the anchor's block."""

    content: Content
    style: Optional[RunStyle] = None


@dataclass(frozen=True)
class InsertAfter:
    """Insert a new block after the anchor's block."""

    content: Content
    style: Optional[RunStyle] = None


@dataclass(frozen=True)
class ReplaceRange:
    """Replace the anchor's text range.

    With ``collapse`` the whole document is rebuilt as a single block;
    otherwise only the block holding the range is rewritten.
    """

    content: Content
    collapse: bool = True


@dataclass(frozen=True)
class RenumberFrom:
    """Rename numeric labels in the text after the anchor's paragraph.

    Pairs are applied one after another, in order. A pair whose source
    label was produced by an earlier pair would renumber a label twice, so
    such chains are rejected.
    """

    replacements: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        pairs = tuple((str(old), str(new)) for old, new in self.replacements)
        object.__setattr__(self, "replacements", pairs)
        if not pairs:
            raise ValueError("RenumberFrom needs at least one replacement")

        produced: set[str] = set()
        for old, new in pairs:
            if old in produced:
                raise ValueError(
                    f"Label {old!r} would be renumbered twice; "
                    "order replacements so the highest label comes first"
                )
            produced.add(new)

    @classmethod
    def shift(
        cls,
        first: int,
        last: int,
        delta: int = 1,
        label: str = "{}.",
    ) -> "RenumberFrom":
        """Shift labels ``first``..``last`` by ``delta`` in a collision-free order."""
        if delta == 0:
            raise ValueError("delta must be non-zero")
        if last < first:
            raise ValueError("last must not be smaller than first")
        numbers = range(first, last + 1)
        ordered = reversed(numbers) if delta > 0 else numbers
        return cls(tuple((label.format(n), label.format(n + delta)) for n in ordered))


@dataclass(frozen=True)
class SpliceSentence:
    """Insert a sentence after the first sentence of the anchor's block."""

    content: Content


@dataclass(frozen=True)
class RestyleBlock:
    """Apply explicit run attributes to every run of the anchor's block."""

    style: RunStyle


@dataclass(frozen=True)
class InsertDefinition:
    """Add a lettered definition at the head of the list after the anchor.

    Existing ``"Term" means ...`` entries that follow are relettered.
    """

    term: str
    definition: Content


TransformRule = Union[
    InsertBefore,
    InsertAfter,
    ReplaceRange,
    RenumberFrom,
    SpliceSentence,
    RestyleBlock,
    InsertDefinition,
]
