"""Style resolution for inserted content.

Every function here returns a complete StyleProfile, so code building new
runs never has to deal with missing attributes.
"""

from dataclasses import replace
from typing import Optional

from contract_amender.formatting.ir import (
    Alignment,
    Block,
    Document,
    Spacing,
    StyleProfile,
)

FALLBACK_PROFILE = StyleProfile(
    font="Times New Roman",
    size=24,
    spacing=Spacing(before=240, after=240, line=360),
    alignment=Alignment.LEFT,
)


def _pick(value, default):
    return default if value is None else value


def profile_from_block(
    block: Block,
    base: StyleProfile,
    emphasis: bool = True,
) -> StyleProfile:
    """Build a profile from a block's first run, filling gaps from ``base``.

    Args:
        block: Block with at least one run
        base: Profile supplying every attribute the block leaves unset
        emphasis: Whether to carry bold/italic/underline over from the run
    """
    style = block.runs[0].style
    profile = replace(
        base,
        font=_pick(style.font, base.font),
        size=_pick(style.size, base.size),
        spacing=_pick(block.format.spacing, base.spacing),
        alignment=_pick(block.format.alignment, base.alignment),
    )
    if emphasis:
        profile = replace(
            profile,
            bold=_pick(style.bold, base.bold),
            italic=_pick(style.italic, base.italic),
            underline=_pick(style.underline, base.underline),
        )
    return profile


def resolve_default(document: Document) -> StyleProfile:
    """Resolve the document's default style.

    Uses the first run in document order. Emphasis is not inherited, so a
    bold title does not make every insertion bold. Falls back to
    FALLBACK_PROFILE when the document has no runs at all.
    """
    for block in document.blocks:
        if block.runs:
            return profile_from_block(block, FALLBACK_PROFILE, emphasis=False)
    return FALLBACK_PROFILE


def _block_with_runs(document: Document, index: int) -> Optional[Block]:
    if 0 <= index < len(document.blocks) and document.blocks[index].runs:
        return document.blocks[index]
    return None


def resolve_contextual(document: Document, position: int) -> StyleProfile:
    """Resolve the style for a block inserted at ``position``.

    Prefers the block that will precede the insertion, then the block that
    will follow it, then the document default.
    """
    default = resolve_default(document)
    neighbour = _block_with_runs(document, position - 1) or _block_with_runs(
        document, position
    )
    if neighbour is None:
        return default
    return profile_from_block(neighbour, default)


def resolve_block(document: Document, index: int) -> StyleProfile:
    """Resolve the style of an existing block, for in-place rewrites."""
    default = resolve_default(document)
    block = _block_with_runs(document, index)
    if block is None:
        return default
    return profile_from_block(block, default)
