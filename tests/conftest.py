"""Pytest fixtures for Contract Amender tests."""

import zipfile
from pathlib import Path
from typing import Callable

import pytest
from docx import Document as DocxDocument
from docx.shared import Pt

from contract_amender import config
from contract_amender.formatting.ir import Block, Document, Run, RunStyle


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Make every test build its own settings instance."""
    monkeypatch.setattr(config, "_settings", None)


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Build a Document with one unstyled run per paragraph."""

    def build(*paragraphs: str, style: RunStyle = RunStyle()) -> Document:
        return Document(
            blocks=tuple(Block(runs=(Run(text=p, style=style),)) for p in paragraphs)
        )

    return build


@pytest.fixture
def nda_paragraph() -> str:
    return (
        "The Disclosing Party provides Confidential Information AS IS "
        "to the Receiving Party."
    )


@pytest.fixture
def residuals_text() -> str:
    """A contract where section 10 ends the purpose clause."""
    return (
        "1. Purpose.\n\n"
        "10. Use. Confidential Information shall be used only in "
        "furtherance of the Business Purpose.\n\n"
        "11. Term. This Agreement lasts two years.\n\n"
        "12. Governing Law. This Agreement is governed by the laws of New York."
    )


@pytest.fixture
def disclaimer_text(nda_paragraph: str) -> str:
    return f"Mutual NDA.\n\n{nda_paragraph}\n\nSigned by both parties."


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    """Write a .docx whose paragraphs are single Arial 11pt runs."""

    def build(name: str, *paragraphs: str) -> Path:
        doc = DocxDocument()
        for text in paragraphs:
            para = doc.add_paragraph()
            run = para.add_run(text)
            run.font.name = "Arial"
            run.font.size = Pt(11)
        path = tmp_path / name
        doc.save(str(path))
        return path

    return build


@pytest.fixture
def make_corrupt_docx(make_docx) -> Callable[[str], Path]:
    """Write a .docx whose main document part is not well-formed XML."""

    def build(name: str) -> Path:
        path = make_docx(name, "Body.")
        with zipfile.ZipFile(path) as source:
            parts = {item: source.read(item) for item in source.namelist()}
        parts["word/document.xml"] = b"<w:document>"
        with zipfile.ZipFile(path, "w") as target:
            for item, data in parts.items():
                target.writestr(item, data)
        return path

    return build


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Get a temporary output directory (not yet created)."""
    return tmp_path / "amended"
