"""Document representation and text normalization."""

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
from contract_amender.formatting.normalize import NormalizedText, normalize

__all__ = [
    "Alignment",
    "Block",
    "BlockFormat",
    "Document",
    "Run",
    "RunStyle",
    "Spacing",
    "StyleProfile",
    "NormalizedText",
    "normalize",
]
