"""Transform engine: apply a rule at an anchor.

Every operation returns a new Document and leaves its input untouched.
Block-level rules work on ``anchor.block_index``; text-level rules work on
the anchor's source range inside ``Document.plain_text``.
"""

import re
from dataclasses import fields, replace
from typing import Optional

from contract_amender.core.errors import InvalidDocumentStructure, MalformedBlock
from contract_amender.core.locator import Anchor
from contract_amender.core.rules import (
    ClauseText,
    InsertAfter,
    InsertBefore,
    InsertDefinition,
    RenumberFrom,
    ReplaceRange,
    RestyleBlock,
    SpliceSentence,
    TransformRule,
)
from contract_amender.core.styles import (
    resolve_block,
    resolve_contextual,
    resolve_default,
)
from contract_amender.formatting.ir import (
    BLOCK_SEPARATOR,
    Block,
    BlockFormat,
    Document,
    Run,
    RunStyle,
    StyleProfile,
)

SENTENCE_BOUNDARY = re.compile(r"(?<=\.)\s+")
SECTION_NUMBER = re.compile(r"^\d+(\.\d+)*\.$")
DEFINITION_SPLIT = re.compile(r'(?=["“][A-Z][^"”]+["”]\s+means\b)')
DEFINITION_PARTS = re.compile(r'^(["“][^"”]+["”])\s+(means\b.*)$', re.DOTALL)
LETTER_PREFIX = re.compile(r'^[A-Z]{1,2}\.\s*(?=["“])')
SECTION_START = re.compile(r"^\s*\d+(\.\d+)*\.(\s|$)")

# Unlettered blocks allowed between a definitions heading and its list
MAX_PREAMBLE_BLOCKS = 2

PLAIN = RunStyle(bold=False, italic=False, underline=False)
BOLD = RunStyle(bold=True, italic=False, underline=False)


# =============================================================================
# Helpers
# =============================================================================

def _text(content) -> str:
    if isinstance(content, ClauseText):
        raise TypeError(
            f"Clause reference {content.key!r} must be resolved before applying"
        )
    return content


def _anchor_block(document: Document, anchor: Anchor) -> Block:
    if not document.blocks:
        raise InvalidDocumentStructure("Document has no blocks")
    if anchor.block_index >= len(document.blocks):
        raise InvalidDocumentStructure(
            f"Anchor block {anchor.block_index} is outside a document "
            f"of {len(document.blocks)} blocks"
        )
    return document.blocks[anchor.block_index]


def _check_range(document: Document, anchor: Anchor) -> str:
    text = document.plain_text
    if anchor.source_end > len(text):
        raise InvalidDocumentStructure(
            "Anchor range lies outside the document text; "
            "anchors are only valid against the text they were found in"
        )
    return text


def _paragraph_end(document: Document, anchor: Anchor) -> int:
    """Offset where the anchor's paragraph ends in ``plain_text``."""
    text = _check_range(document, anchor)
    _, block_end = document.block_spans()[anchor.block_index]
    end = text.find(BLOCK_SEPARATOR, anchor.source_end)
    if end == -1 or end > block_end:
        return block_end
    return end


def _letter(index: int) -> str:
    """Spreadsheet-style list letters: A..Z, AA, AB, ..."""
    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


# =============================================================================
# Block insertion
# =============================================================================

def _insert(document: Document, position: int, content: str, style) -> Document:
    profile = resolve_contextual(document, position).with_emphasis(style)
    blocks = list(document.blocks)
    blocks.insert(position, Block.from_text(content, profile))
    return document.with_blocks(blocks)


def _insert_before(document: Document, anchor: Anchor, rule: InsertBefore) -> Document:
    _anchor_block(document, anchor)
    return _insert(document, anchor.block_index, _text(rule.content), rule.style)


def _insert_after(document: Document, anchor: Anchor, rule: InsertAfter) -> Document:
    _anchor_block(document, anchor)
    return _insert(document, anchor.block_index + 1, _text(rule.content), rule.style)


# =============================================================================
# Range replacement
# =============================================================================

def _replace_in_runs(runs, start: int, end: int, content: str) -> tuple[Run, ...]:
    head: list[Run] = []
    tail: list[Run] = []
    content_style: Optional[RunStyle] = None
    position = 0
    for run in runs:
        run_start, run_end = position, position + len(run.text)
        position = run_end
        if run_end <= start:
            head.append(run)
        elif run_start >= end:
            tail.append(run)
        else:
            if run_start < start:
                head.append(Run(run.text[:start - run_start], run.style))
            if content_style is None:
                content_style = run.style
            if run_end > end:
                tail.append(Run(run.text[end - run_start:], run.style))

    if content_style is None:
        neighbours = head[-1:] + tail[:1]
        content_style = neighbours[0].style if neighbours else RunStyle()
    middle = [Run(content, content_style)] if content else []
    return tuple(head + middle + tail)


def _replace_range(document: Document, anchor: Anchor, rule: ReplaceRange) -> Document:
    content = _text(rule.content)
    text = _check_range(document, anchor)

    if rule.collapse:
        rebuilt = text[:anchor.source_start] + content + text[anchor.source_end:]
        return document.with_blocks([Block.from_text(rebuilt, resolve_default(document))])

    block = _anchor_block(document, anchor)
    block_start, block_end = document.block_spans()[anchor.block_index]
    if anchor.source_end > block_end:
        raise InvalidDocumentStructure(
            "Range spans several blocks; only a collapsing replacement can rewrite it"
        )
    runs = _replace_in_runs(
        block.runs,
        anchor.source_start - block_start,
        anchor.source_end - block_start,
        content,
    )
    blocks = list(document.blocks)
    blocks[anchor.block_index] = Block(runs=runs, format=block.format)
    return document.with_blocks(blocks)


# =============================================================================
# Renumbering
# =============================================================================

def _label_pattern(label: str) -> re.Pattern:
    return re.compile(r"(?<!\d)" + re.escape(label))


def renumber_labels(text: str, replacements) -> str:
    """Apply literal label replacements one after another.

    A label only matches when it is not preceded by another digit, so
    renaming "2." leaves "12." alone.
    """
    for old, new in replacements:
        text = _label_pattern(old).sub(lambda _m, new=new: new, text)
    return text


def renumber_runs(runs, offset: int, replacements) -> tuple[Run, ...]:
    """Renumber labels at or after ``offset`` in a block's runs.

    Labels are matched against the joined block text, so a label split over
    several runs (``"11"`` + ``". Term"``) is still found, and a digit in
    the previous run still blocks a match.
    """
    runs = tuple(runs)
    for old, new in replacements:
        text = "".join(run.text for run in runs)
        matches = list(_label_pattern(old).finditer(text, max(offset, 0)))
        # Right to left, so earlier match offsets stay valid.
        for match in reversed(matches):
            runs = _replace_in_runs(runs, match.start(), match.end(), new)
    return runs


def _renumber(document: Document, anchor: Anchor, rule: RenumberFrom) -> Document:
    _anchor_block(document, anchor)
    cut = _paragraph_end(document, anchor)

    blocks: list[Block] = []
    for block, (start, end) in zip(document.blocks, document.block_spans()):
        if end <= cut:
            blocks.append(block)
            continue
        runs = renumber_runs(block.runs, cut - start, rule.replacements)
        blocks.append(Block(runs=runs, format=block.format))
    return document.with_blocks(blocks)


# =============================================================================
# Sentence splice
# =============================================================================

def split_sentences(text: str) -> list[str]:
    """Split on whitespace that follows a period.

    A leading section number such as "11." stays with the sentence after it.
    """
    sentences = [s for s in SENTENCE_BOUNDARY.split(text.strip()) if s]
    if len(sentences) > 1 and SECTION_NUMBER.match(sentences[0]):
        sentences[:2] = [f"{sentences[0]} {sentences[1]}"]
    return sentences


def _splice_sentence(document: Document, anchor: Anchor, rule: SpliceSentence) -> Document:
    content = _text(rule.content)
    block = _anchor_block(document, anchor)
    sentences = split_sentences(block.text)
    if not sentences:
        raise MalformedBlock(
            f"Block {anchor.block_index} has no sentence to splice after"
        )

    profile = resolve_block(document, anchor.block_index)
    style = RunStyle.from_profile(profile)
    rest = " ".join(sentences[1:])
    runs = [Run(sentences[0] + " ", style)]
    if rest:
        runs += [Run(content + " ", style), Run(rest, style)]
    else:
        runs.append(Run(content, style))

    blocks = list(document.blocks)
    blocks[anchor.block_index] = Block(
        runs=tuple(runs), format=BlockFormat.from_profile(profile)
    )
    return document.with_blocks(blocks)


# =============================================================================
# Restyling
# =============================================================================

def _override(style: RunStyle, override: RunStyle) -> RunStyle:
    changes = {
        item.name: getattr(override, item.name)
        for item in fields(override)
        if getattr(override, item.name) is not None
    }
    return replace(style, **changes)


def _restyle_block(document: Document, anchor: Anchor, rule: RestyleBlock) -> Document:
    block = _anchor_block(document, anchor)
    runs = tuple(Run(run.text, _override(run.style, rule.style)) for run in block.runs)
    blocks = list(document.blocks)
    blocks[anchor.block_index] = Block(runs=runs, format=block.format)
    return document.with_blocks(blocks)


# =============================================================================
# Lettered definitions
# =============================================================================

def definition_entries(text: str) -> Optional[list[tuple[str, str]]]:
    """Split text into ``("quoted term", "means ...")`` pairs.

    Returns None unless the whole text is made of definitions. An existing
    list letter in front of the first term is ignored.
    """
    text = LETTER_PREFIX.sub("", text.strip(), count=1)
    parts = [part.strip() for part in DEFINITION_SPLIT.split(text) if part.strip()]
    entries: list[tuple[str, str]] = []
    for part in parts:
        match = DEFINITION_PARTS.match(LETTER_PREFIX.sub("", part, count=1))
        if match is None:
            return None
        entries.append((match.group(1), match.group(2)))
    return entries or None


def _definition_block(letter: str, term: str, body: str, profile: StyleProfile) -> Block:
    plain = RunStyle.from_profile(profile.with_emphasis(PLAIN))
    bold = RunStyle.from_profile(profile.with_emphasis(BOLD))
    return Block(
        runs=(
            Run(f"{letter}.", bold),
            Run(f"\t{term}", bold),
            Run(f" {body}", plain),
        ),
        format=BlockFormat.from_profile(profile),
    )


def _insert_definition(
    document: Document, anchor: Anchor, rule: InsertDefinition
) -> Document:
    _anchor_block(document, anchor)
    definition = _text(rule.definition).strip()
    if not definition.startswith("means"):
        definition = f"means {definition}"
    entries: list[tuple[str, str]] = [(f'"{rule.term}"', definition)]

    first = last = anchor.block_index + 1
    preamble = 0
    for index in range(anchor.block_index + 1, len(document.blocks)):
        text = document.blocks[index].text
        found = definition_entries(text)
        if found is None:
            if len(entries) > 1 or SECTION_START.match(text):
                break
            preamble += 1
            if preamble > MAX_PREAMBLE_BLOCKS:
                break
            continue
        if len(entries) == 1:
            first = index
        entries.extend(found)
        last = index + 1

    if len(entries) == 1:
        first = last = anchor.block_index + 1

    profile = resolve_contextual(document, first)
    lettered = [
        _definition_block(_letter(i), term, body, profile)
        for i, (term, body) in enumerate(entries)
    ]
    blocks = list(document.blocks[:first]) + lettered + list(document.blocks[last:])
    return document.with_blocks(blocks)


_APPLIERS = {
    InsertBefore: _insert_before,
    InsertAfter: _insert_after,
    ReplaceRange: _replace_range,
    RenumberFrom: _renumber,
    SpliceSentence: _splice_sentence,
    RestyleBlock: _restyle_block,
    InsertDefinition: _insert_definition,
}


def apply(document: Document, anchor: Anchor, rule: TransformRule) -> Document:
    """Apply ``rule`` at ``anchor`` and return the edited document.

    Raises:
        InvalidDocumentStructure: If the document has no blocks or the
            anchor does not fit it
        MalformedBlock: If a sentence splice targets a block without text
    """
    applier = _APPLIERS.get(type(rule))
    if applier is None:
        raise TypeError(f"Unsupported transform rule: {rule!r}")
    return applier(document, anchor, rule)
