"""Core amendment logic: locating anchors, resolving styles, applying rules."""

from contract_amender.core.errors import (
    AmendmentError,
    AnchorNotFound,
    DocumentIOError,
    InvalidDocumentStructure,
    MalformedBlock,
    MissingClauseText,
    UnknownDocumentClass,
)
from contract_amender.core.locator import (
    Anchor,
    ExactTextPattern,
    HeadingPrefixPattern,
    PhraseSetPattern,
    RegexPattern,
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
from contract_amender.core.engine import apply
from contract_amender.core.styles import resolve_contextual, resolve_default
from contract_amender.core.registry import DocumentClass, Registry, Step, default_registry

__all__ = [
    "AmendmentError",
    "AnchorNotFound",
    "DocumentIOError",
    "InvalidDocumentStructure",
    "MalformedBlock",
    "MissingClauseText",
    "UnknownDocumentClass",
    "Anchor",
    "ExactTextPattern",
    "HeadingPrefixPattern",
    "PhraseSetPattern",
    "RegexPattern",
    "locate",
    "ClauseText",
    "InsertAfter",
    "InsertBefore",
    "InsertDefinition",
    "RenumberFrom",
    "ReplaceRange",
    "RestyleBlock",
    "SpliceSentence",
    "apply",
    "resolve_contextual",
    "resolve_default",
    "DocumentClass",
    "Registry",
    "Step",
    "default_registry",
]
