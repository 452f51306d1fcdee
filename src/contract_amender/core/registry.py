"""Document classes: named sequences of (pattern, rule) steps.

A document class replaces a bespoke per-file function. Adding support for a
new kind of document means registering a new class, not writing new code
paths in the pipeline.
"""

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Callable, Mapping, Optional

from contract_amender.core.errors import MissingClauseText, UnknownDocumentClass
from contract_amender.core.locator import (
    ExactTextPattern,
    HeadingPrefixPattern,
    PatternSpec,
    PhraseSetPattern,
    RegexPattern,
)
from contract_amender.core.rules import (
    ClauseText,
    InsertAfter,
    InsertDefinition,
    RenumberFrom,
    ReplaceRange,
    RestyleBlock,
    SpliceSentence,
    TransformRule,
)
from contract_amender.formatting.ir import RunStyle

Classifier = Callable[[Path], bool]


@dataclass(frozen=True)
class Step:
    """Locate ``pattern``, then apply ``rule`` at the anchor."""

    pattern: PatternSpec
    rule: TransformRule


@dataclass(frozen=True)
class DocumentClass:
    """A registered kind of document.

    Attributes:
        name: Identifier used for explicit selection
        steps: Steps applied in order, each against the previous result
        classifier: Decides whether a path belongs to this class; classes
            without one are only selected by name
        description: One-line summary for listings
    """

    name: str
    steps: tuple[Step, ...]
    classifier: Optional[Classifier] = None
    description: str = ""

    def accepts(self, path: Path) -> bool:
        return self.classifier is not None and self.classifier(path)


def filename_contains(fragment: str) -> Classifier:
    """Classifier matching a substring of the file name."""

    def classify(path: Path) -> bool:
        return fragment in Path(path).name

    return classify


def resolve_clauses(rule: TransformRule, clauses: Mapping[str, str]) -> TransformRule:
    """Replace ClauseText references in a rule with the supplied texts."""
    changes = {}
    for item in fields(rule):
        value = getattr(rule, item.name)
        if not isinstance(value, ClauseText):
            continue
        text = clauses.get(value.key, value.default)
        if text is None:
            raise MissingClauseText(f"No text supplied for clause {value.key!r}")
        changes[item.name] = text
    return replace(rule, **changes) if changes else rule


class Registry:
    """Ordered collection of document classes."""

    def __init__(self) -> None:
        self._classes: dict[str, DocumentClass] = {}

    def register(self, document_class: DocumentClass) -> DocumentClass:
        if document_class.name in self._classes:
            raise ValueError(f"Document class already registered: {document_class.name}")
        self._classes[document_class.name] = document_class
        return document_class

    def get(self, name: str) -> DocumentClass:
        try:
            return self._classes[name]
        except KeyError:
            raise UnknownDocumentClass(
                f"Unknown document class {name!r}. "
                f"Registered: {', '.join(self._classes) or 'none'}"
            ) from None

    def classify(self, path: Path) -> DocumentClass:
        """Return the first registered class whose classifier accepts ``path``."""
        for document_class in self._classes.values():
            if document_class.accepts(path):
                return document_class
        raise UnknownDocumentClass("No document class accepts this document", path=path)

    def names(self) -> list[str]:
        return list(self._classes)

    def __iter__(self):
        return iter(self._classes.values())

    def __len__(self) -> int:
        return len(self._classes)


# =============================================================================
# Built-in contract classes
# =============================================================================

AFFILIATE_DEFINITION = (
    'means any entity that directly or indirectly controls, is controlled by, '
    'or is under common control with a party, where "control" means the '
    "possession, directly or indirectly, of the power to direct or cause the "
    "direction of the management and policies of such entity, whether through "
    "ownership of voting securities, by contract, or otherwise."
)

AS_IS_DISCLAIMER = (
    'THE DISCLOSING PARTY IS PROVIDING CONFIDENTIAL INFORMATION ON AN "AS IS" '
    "BASIS FOR USE BY THE RECEIVING PARTY AT ITS OWN RISK. THE DISCLOSING PARTY "
    "MAKES NO REPRESENTATIONS OR WARRANTIES REGARDING THE ACCURACY OR "
    "COMPLETENESS OF THE CONFIDENTIAL INFORMATION. THE DISCLOSING PARTY "
    "DISCLAIMS ALL WARRANTIES, WHETHER EXPRESS, IMPLIED OR STATUTORY, INCLUDING "
    "WITHOUT LIMITATION ANY IMPLIED WARRANTIES OF TITLE, NON-INFRINGEMENT OF "
    "THIRD PARTY RIGHTS, MERCHANTABILITY, OR FITNESS FOR A PARTICULAR PURPOSE."
)

RESIDUALS_HEADING = "11. Residuals"

RESIDUALS_CLAUSE = (
    "Nothing in this Agreement shall be construed to limit the Receiving "
    "Party's right to independently develop or acquire products or services "
    "without use of the Disclosing Party's Confidential Information, nor shall "
    "it restrict the use of any general knowledge, skills, or experience "
    "retained in unaided memory by personnel of the Receiving Party."
)

NO_WARRANTY_SENTENCE = (
    "The Disclosing Party makes no representations or warranties regarding "
    "the accuracy or completeness of the Confidential Information."
)

SECTION_10_END = "in furtherance of the Business Purpose."

DEFINITIONS_HEADING = RegexPattern(r"\bDefinitions\.[ \t]*(?=\n|$)", re.IGNORECASE)

HEADING_STYLE = RunStyle(bold=True, italic=False, underline=True)
BODY_STYLE = RunStyle(bold=False, italic=False, underline=False)


def builtin_classes() -> list[DocumentClass]:
    """The contract classes shipped with the package."""
    return [
        DocumentClass(
            name="definitions",
            description=(
                "Emphasize the Definitions heading, add the Affiliate definition "
                "and reletter the definitions list"
            ),
            classifier=filename_contains("contract1"),
            steps=(
                Step(DEFINITIONS_HEADING, RestyleBlock(HEADING_STYLE)),
                Step(
                    DEFINITIONS_HEADING,
                    InsertDefinition(
                        term="Affiliate",
                        definition=ClauseText("affiliate", AFFILIATE_DEFINITION),
                    ),
                ),
            ),
        ),
        DocumentClass(
            name="as-is-disclaimer",
            description="Replace the confidentiality paragraph with an AS IS disclaimer",
            classifier=filename_contains("contract2"),
            steps=(
                Step(
                    PhraseSetPattern(
                        ("confidential information", "as is", "receiving party")
                    ),
                    ReplaceRange(ClauseText("as_is_disclaimer", AS_IS_DISCLAIMER)),
                ),
            ),
        ),
        DocumentClass(
            name="residuals",
            description="Insert a Residuals section 11 and renumber the sections after it",
            classifier=filename_contains("contract3"),
            steps=(
                Step(ExactTextPattern(SECTION_10_END), RenumberFrom.shift(11, 12)),
                Step(
                    ExactTextPattern(SECTION_10_END),
                    InsertAfter(RESIDUALS_HEADING, HEADING_STYLE),
                ),
                Step(
                    HeadingPrefixPattern(RESIDUALS_HEADING),
                    InsertAfter(ClauseText("residuals", RESIDUALS_CLAUSE), BODY_STYLE),
                ),
            ),
        ),
        DocumentClass(
            name="confidentiality-disclaimer",
            description="Add a no-warranty sentence to section 11 (Confidentiality)",
            steps=(
                Step(
                    HeadingPrefixPattern("11. Confidentiality"),
                    SpliceSentence(ClauseText("no_warranty", NO_WARRANTY_SENTENCE)),
                ),
            ),
        ),
    ]


def default_registry() -> Registry:
    """A registry holding the built-in classes."""
    registry = Registry()
    for document_class in builtin_classes():
        registry.register(document_class)
    return registry
