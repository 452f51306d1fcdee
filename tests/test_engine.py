"""Tests for the transform engine."""

import pytest

from contract_amender.core.engine import (
    apply,
    definition_entries,
    renumber_labels,
    renumber_runs,
    split_sentences,
)
from contract_amender.core.errors import InvalidDocumentStructure, MalformedBlock
from contract_amender.core.locator import (
    Anchor,
    ExactTextPattern,
    HeadingPrefixPattern,
    PhraseSetPattern,
    locate,
)
from contract_amender.core.rules import (
    ClauseText,
    InsertAfter,
    InsertBefore,
    InsertDefinition,
    RenumberFrom,
    ReplaceRange,
    RestyleBlock,
    SpliceSentence,
)
from contract_amender.formatting.ir import Block, Document, Run, RunStyle

SECTION_10_END = "in furtherance of the Business Purpose."


def anchor_at(block_index: int) -> Anchor:
    return Anchor(start=0, end=0, source_start=0, source_end=0, block_index=block_index)


class TestInsert:
    """Tests for InsertBefore and InsertAfter."""

    def test_insert_after(self, make_document):
        """One block is added right after the anchor's block, text verbatim."""
        document = make_document("One.", "Two.", "Three.")
        anchor = locate(document, ExactTextPattern("Two."))
        result = apply(document, anchor, InsertAfter("  Inserted\ttext  "))

        assert len(result) == len(document) + 1
        assert result.blocks[2].text == "  Inserted\ttext  "
        assert [b.text for b in result.blocks[:2]] == ["One.", "Two."]
        assert result.blocks[3].text == "Three."

    def test_insert_before(self, make_document):
        """The new block takes the anchor block's position."""
        document = make_document("One.", "Two.")
        anchor = locate(document, ExactTextPattern("Two."))
        result = apply(document, anchor, InsertBefore("New."))

        assert [b.text for b in result.blocks] == ["One.", "New.", "Two."]

    def test_input_untouched(self, make_document):
        """Applying a rule never mutates the document it was given."""
        document = make_document("One.", "Two.")
        apply(document, anchor_at(0), InsertAfter("New."))

        assert [b.text for b in document.blocks] == ["One.", "Two."]

    def test_inserted_style_is_resolved(self, make_document):
        """New runs carry every attribute, taken from the preceding block."""
        document = make_document("Body.", style=RunStyle(font="Arial", size=22))
        result = apply(document, anchor_at(0), InsertAfter("New."))
        style = result.blocks[1].runs[0].style

        assert style.is_resolved
        assert style.font == "Arial"
        assert style.size == 22
        assert result.blocks[1].format.spacing is not None

    def test_explicit_style_overrides(self, make_document):
        """Explicit attributes win; the rest still come from context."""
        document = make_document("Body.")
        rule = InsertAfter("Heading", RunStyle(bold=True, underline=True))
        style = apply(document, anchor_at(0), rule).blocks[1].runs[0].style

        assert style.bold is True
        assert style.underline is True
        assert style.font == "Times New Roman"

    def test_empty_document(self):
        """A document without blocks cannot be edited."""
        with pytest.raises(InvalidDocumentStructure):
            apply(Document(), anchor_at(0), InsertAfter("New."))

    def test_anchor_outside_document(self, make_document):
        """An anchor past the last block is rejected."""
        with pytest.raises(InvalidDocumentStructure):
            apply(make_document("One."), anchor_at(3), InsertBefore("New."))

    def test_unresolved_clause(self, make_document):
        """Clause references must be resolved before a rule is applied."""
        with pytest.raises(TypeError):
            apply(make_document("One."), anchor_at(0), InsertAfter(ClauseText("x", "y")))


class TestReplaceRange:
    """Tests for ReplaceRange."""

    def test_collapse(self, make_document, nda_paragraph):
        """The rebuilt document is a single block with the range swapped."""
        document = make_document("Intro.", nda_paragraph, "Closing.")
        anchor = locate(document, PhraseSetPattern(("confidential information", "as is")))
        result = apply(document, anchor, ReplaceRange("DISCLAIMER."))

        assert len(result) == 1
        assert result.plain_text == "Intro.\n\nDISCLAIMER.\n\nClosing."

    def test_collapse_uses_default_style(self, make_document):
        """The rebuilt block takes the document default font, not emphasis."""
        document = make_document("Intro.", "Old.", style=RunStyle(font="Garamond", bold=True))
        anchor = locate(document, ExactTextPattern("Old."))
        style = apply(document, anchor, ReplaceRange("New.")).blocks[0].runs[0].style

        assert style.font == "Garamond"
        assert style.bold is False

    def test_in_block(self, make_document):
        """Without collapsing, only the anchor block is rebuilt."""
        document = make_document("Alpha beta gamma.", "Other.")
        anchor = locate(document, ExactTextPattern("beta"))
        result = apply(document, anchor, ReplaceRange("BETA", collapse=False))

        assert [b.text for b in result.blocks] == ["Alpha BETA gamma.", "Other."]
        assert result.blocks[1] is document.blocks[1]

    def test_in_block_keeps_run_styles(self):
        """Runs around the range keep their own styles."""
        bold = RunStyle(bold=True)
        plain = RunStyle(bold=False)
        document = Document(blocks=(
            Block(runs=(Run("Alpha ", bold), Run("beta gamma.", plain))),
        ))
        anchor = locate(document, ExactTextPattern("beta"))
        runs = apply(document, anchor, ReplaceRange("BETA", collapse=False)).blocks[0].runs

        assert [r.text for r in runs] == ["Alpha ", "BETA", " gamma."]
        assert [r.style for r in runs] == [bold, plain, plain]

    def test_in_block_across_runs(self):
        """A range spanning two runs is replaced as one piece."""
        document = Document(blocks=(
            Block(runs=(Run("one two "), Run("three four"))),
        ))
        anchor = locate(document, ExactTextPattern("two three"))
        result = apply(document, anchor, ReplaceRange("2-3", collapse=False))

        assert result.blocks[0].text == "one 2-3 four"

    def test_in_block_rejects_multi_block_range(self, make_document):
        """A range crossing blocks needs a collapsing replacement."""
        document = make_document("Alpha beta gamma.", "Other.")
        anchor = locate(document, ExactTextPattern("gamma. Other."))

        with pytest.raises(InvalidDocumentStructure):
            apply(document, anchor, ReplaceRange("X", collapse=False))

    def test_anchor_from_other_text(self, make_document):
        """An anchor found in a longer text does not fit this document."""
        anchor = Anchor(start=0, end=50, source_start=0, source_end=50, block_index=0)
        with pytest.raises(InvalidDocumentStructure):
            apply(make_document("Short."), anchor, ReplaceRange("X"))


class TestRenumber:
    """Tests for RenumberFrom."""

    def test_renumbers_after_anchor(self, make_document):
        """Each label moves exactly once; earlier text is untouched."""
        document = make_document(
            "11. Use. Information is used only " + SECTION_10_END,
            "Section 12. Foo",
            "Section 11. Bar",
        )
        anchor = locate(document, ExactTextPattern(SECTION_10_END))
        result = apply(document, anchor, RenumberFrom((("12.", "13."), ("11.", "12."))))

        assert [b.text for b in result.blocks] == [
            "11. Use. Information is used only " + SECTION_10_END,
            "Section 13. Foo",
            "Section 12. Bar",
        ]

    def test_single_block_text(self):
        """Collapsed text is renumbered from the end of the anchor's paragraph."""
        document = Document(blocks=(
            Block(runs=(Run("10. Use " + SECTION_10_END + "\n\n11. Term.\n\n12. Law."),)),
        ))
        anchor = locate(document, ExactTextPattern(SECTION_10_END))
        result = apply(document, anchor, RenumberFrom.shift(11, 12))

        assert result.plain_text == "10. Use " + SECTION_10_END + "\n\n12. Term.\n\n13. Law."

    def test_no_duplicate_labels(self, make_document):
        """Shifting 11 and 12 up leaves one 12. and one 13."""
        document = make_document(SECTION_10_END, "11. A", "12. B")
        anchor = locate(document, ExactTextPattern(SECTION_10_END))
        text = apply(document, anchor, RenumberFrom.shift(11, 12)).plain_text

        assert text.count("12.") == 1
        assert text.count("13.") == 1
        assert "11." not in text

    def test_keeps_run_styles(self):
        """A renumbered label keeps the style of the run it sits in."""
        bold = RunStyle(bold=True)
        document = Document(blocks=(
            Block(runs=(Run(SECTION_10_END),)),
            Block(runs=(Run("11.", bold), Run(" Term"))),
        ))
        anchor = locate(document, ExactTextPattern(SECTION_10_END))
        runs = apply(document, anchor, RenumberFrom.shift(11, 11)).blocks[1].runs

        assert runs[0] == Run("12.", bold)
        assert runs[1].text == " Term"

    def test_label_split_across_runs(self):
        """Labels are matched on the block text, not run by run."""
        bold = RunStyle(bold=True)
        document = Document(blocks=(
            Block(runs=(Run(SECTION_10_END),)),
            Block(runs=(Run("11", bold), Run(". Term."))),
            Block(runs=(Run("Fee of 1"), Run("12. dollars"))),
        ))
        anchor = locate(document, ExactTextPattern(SECTION_10_END))
        result = apply(document, anchor, RenumberFrom.shift(11, 12))

        assert result.blocks[1].text == "12. Term."
        assert result.blocks[1].runs == (Run("12.", bold), Run(" Term."))
        assert result.blocks[2].text == "Fee of 112. dollars"

    def test_renumber_runs_from_offset(self):
        """Labels before the offset stay, even when a later one is split."""
        runs = (Run("11. Old "), Run("1"), Run("1. New"))

        result = renumber_runs(runs, 4, [("11.", "12.")])

        assert [r.text for r in result] == ["11. Old ", "12.", " New"]

    def test_renumber_labels(self):
        """Labels preceded by a digit are left alone."""
        assert renumber_labels("112. and 12.", [("12.", "13.")]) == "112. and 13."
        assert renumber_labels("1.", [("1.", "2."), ("2.", "3.")]) == "3."

    def test_chained_replacements_rejected(self):
        """A replacement whose target is renamed later would move twice."""
        with pytest.raises(ValueError):
            RenumberFrom((("11.", "12."), ("12.", "13.")))

    def test_empty_replacements_rejected(self):
        """Renumbering needs at least one label pair."""
        with pytest.raises(ValueError):
            RenumberFrom(())

    def test_shift_order(self):
        """Shifting up starts at the highest label, shifting down at the lowest."""
        assert RenumberFrom.shift(11, 12).replacements == (("12.", "13."), ("11.", "12."))
        assert RenumberFrom.shift(3, 4, delta=-1).replacements == (("3.", "2."), ("4.", "3."))
        assert RenumberFrom.shift(1, 1, label="({})").replacements == (("(1)", "(2)"),)

    def test_shift_validation(self):
        """A zero delta or an inverted range is rejected."""
        with pytest.raises(ValueError):
            RenumberFrom.shift(1, 2, delta=0)
        with pytest.raises(ValueError):
            RenumberFrom.shift(5, 2)


class TestSpliceSentence:
    """Tests for SpliceSentence."""

    def test_splits_sentences(self):
        """A bare section number stays joined to the sentence after it."""
        assert split_sentences("One. Two.  Three") == ["One.", "Two.", "Three"]
        assert split_sentences("11. Confidentiality. Keep it.") == [
            "11. Confidentiality.",
            "Keep it.",
        ]
        assert split_sentences("   ") == []

    def test_splice_after_first_sentence(self, make_document):
        """The new sentence sits between the first and the remaining sentences."""
        document = make_document(
            "10. Use.",
            "11. Confidentiality. The Receiving Party shall hold the information "
            "in confidence. This obligation survives.",
        )
        anchor = locate(document, HeadingPrefixPattern("11. Confidentiality"))
        result = apply(document, anchor, SpliceSentence("No warranty is given."))
        runs = result.blocks[1].runs

        assert [r.text for r in runs] == [
            "11. Confidentiality. ",
            "No warranty is given. ",
            "The Receiving Party shall hold the information in confidence. "
            "This obligation survives.",
        ]
        assert result.blocks[0] is document.blocks[0]

    def test_single_sentence(self, make_document):
        """With one sentence the new text is appended."""
        document = make_document("Only sentence.")
        result = apply(document, anchor_at(0), SpliceSentence("Added."))

        assert result.blocks[0].text == "Only sentence. Added."

    def test_uses_block_style(self):
        """Spliced runs take the block's own font and size."""
        style = RunStyle(font="Arial", size=20)
        document = Document(blocks=(Block(runs=(Run("First. Second.", style),)),))
        runs = apply(document, anchor_at(0), SpliceSentence("Added.")).blocks[0].runs

        assert all(r.style.font == "Arial" and r.style.size == 20 for r in runs)

    def test_empty_block(self):
        """A whitespace-only block has no sentence to splice after."""
        document = Document(blocks=(Block(runs=(Run("Heading."),)), Block(runs=(Run("  "),))))
        with pytest.raises(MalformedBlock):
            apply(document, anchor_at(1), SpliceSentence("Added."))


class TestRestyleBlock:
    """Tests for RestyleBlock."""

    def test_sets_emphasis_keeps_font(self, make_document):
        """Only the attributes the rule names change."""
        document = make_document(
            "Definitions.", "Body.", style=RunStyle(font="Arial", size=22)
        )
        rule = RestyleBlock(RunStyle(bold=True, underline=True))
        result = apply(document, anchor_at(0), rule)

        assert result.blocks[0].text == "Definitions."
        assert result.blocks[0].runs[0].style == RunStyle(
            font="Arial", size=22, bold=True, underline=True
        )
        assert result.blocks[0].format == document.blocks[0].format
        assert result.blocks[1] is document.blocks[1]

    def test_every_run_restyled(self):
        """A heading split over several runs is restyled as a whole."""
        document = Document(blocks=(
            Block(runs=(Run("Defini", RunStyle(italic=True)), Run("tions."))),
        ))
        runs = apply(document, anchor_at(0), RestyleBlock(RunStyle(italic=False))).blocks[0].runs

        assert [r.text for r in runs] == ["Defini", "tions."]
        assert all(r.style.italic is False for r in runs)

    def test_empty_document(self):
        """There is no block to restyle in an empty document."""
        with pytest.raises(InvalidDocumentStructure):
            apply(Document(), anchor_at(0), RestyleBlock(RunStyle(bold=True)))


class TestInsertDefinition:
    """Tests for InsertDefinition."""

    @pytest.fixture
    def definitions_document(self, make_document):
        return make_document(
            "Mutual Non-Disclosure Agreement",
            "Definitions.",
            '"Confidential Information" means all non-public information.',
            'B. "Purpose" means evaluating a transaction.',
            "2. Obligations.",
        )

    def test_letters_new_definition_first(self, definitions_document):
        """The new term is lettered A and the existing entries move down."""
        anchor = locate(definitions_document, HeadingPrefixPattern("Definitions."))
        rule = InsertDefinition("Affiliate", "any entity under common control.")
        result = apply(definitions_document, anchor, rule)

        assert [b.text for b in result.blocks] == [
            "Mutual Non-Disclosure Agreement",
            "Definitions.",
            'A.\t"Affiliate" means any entity under common control.',
            'B.\t"Confidential Information" means all non-public information.',
            'C.\t"Purpose" means evaluating a transaction.',
            "2. Obligations.",
        ]

    def test_letter_and_term_bold(self, definitions_document):
        """Letter and quoted term are bold, the body is plain."""
        anchor = locate(definitions_document, HeadingPrefixPattern("Definitions."))
        result = apply(definitions_document, anchor, InsertDefinition("Affiliate", "means X."))
        runs = result.blocks[2].runs

        assert [r.style.bold for r in runs] == [True, True, False]
        assert runs[2].text == " means X."

    def test_splits_combined_paragraph(self, make_document):
        """Several definitions in one paragraph become separate entries."""
        document = make_document(
            "Definitions.",
            '"Agreement" means this contract. "Party" means a signatory.',
        )
        result = apply(document, anchor_at(0), InsertDefinition("Affiliate", "an affiliate."))

        assert [b.text for b in result.blocks[1:]] == [
            'A.\t"Affiliate" means an affiliate.',
            'B.\t"Agreement" means this contract.',
            'C.\t"Party" means a signatory.',
        ]

    def test_skips_preamble(self, make_document):
        """A short lead-in line before the list is kept in place."""
        document = make_document(
            "Definitions.",
            "In this Agreement:",
            '"Term" means the term.',
        )
        result = apply(document, anchor_at(0), InsertDefinition("Affiliate", "an affiliate."))

        assert [b.text for b in result.blocks] == [
            "Definitions.",
            "In this Agreement:",
            'A.\t"Affiliate" means an affiliate.',
            'B.\t"Term" means the term.',
        ]

    def test_no_existing_definitions(self, make_document):
        """Without a list the definition goes right after the heading."""
        document = make_document("Definitions.", "1. Scope.")
        result = apply(document, anchor_at(0), InsertDefinition("Affiliate", "an affiliate."))

        assert [b.text for b in result.blocks] == [
            "Definitions.",
            'A.\t"Affiliate" means an affiliate.',
            "1. Scope.",
        ]

    def test_numbered_sections_end_search(self, make_document):
        """Numbered sections after the heading are not treated as preamble."""
        document = make_document(
            "Definitions.",
            "1. Scope. This Agreement covers the exchange of information.",
            "2. Obligations. The Receiving Party protects it.",
            '"Residual Information" means information kept in memory.',
        )
        result = apply(document, anchor_at(0), InsertDefinition("Affiliate", "an affiliate."))

        assert [b.text for b in result.blocks] == [
            "Definitions.",
            'A.\t"Affiliate" means an affiliate.',
            "1. Scope. This Agreement covers the exchange of information.",
            "2. Obligations. The Receiving Party protects it.",
            '"Residual Information" means information kept in memory.',
        ]

    def test_preamble_is_bounded(self, make_document):
        """A list further than two lead-in blocks away is left alone."""
        document = make_document(
            "Definitions.",
            "Intro one.",
            "Intro two.",
            "Intro three.",
            '"Term" means the term.',
        )
        result = apply(document, anchor_at(0), InsertDefinition("Affiliate", "an affiliate."))

        assert result.blocks[1].text == 'A.\t"Affiliate" means an affiliate.'
        assert result.blocks[-1].text == '"Term" means the term.'
        assert len(result) == len(document) + 1

    def test_definition_entries(self):
        """Only text made entirely of definitions is split."""
        assert definition_entries('C. "Term" means X.') == [('"Term"', "means X.")]
        assert definition_entries("Not a definition.") is None
        assert definition_entries("") is None
