"""Document format handlers for Contract Amender."""

from contract_amender.formats.base import FormatHandler
from contract_amender.formats.txt_handler import TXTHandler
from contract_amender.formats.docx_handler import DOCXHandler

__all__ = [
    "FormatHandler",
    "TXTHandler",
    "DOCXHandler",
]

# Map file extensions to handlers
HANDLER_MAP: dict[str, type[FormatHandler]] = {
    ".txt": TXTHandler,
    ".docx": DOCXHandler,
}

SUPPORTED_EXTENSIONS = tuple(HANDLER_MAP.keys())


def get_handler(extension: str) -> type[FormatHandler]:
    """Get the appropriate handler class for a file extension."""
    ext = extension.lower()
    if ext not in HANDLER_MAP:
        raise ValueError(
            f"Unsupported file format: {ext}. "
            f"Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    return HANDLER_MAP[ext]
