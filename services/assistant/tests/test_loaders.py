"""Tests for document loaders."""
import io

import pytest
from pypdf import PdfWriter

from assistant.errors import EmptyDocumentError
from assistant.loaders import PDFLoader, TextLoader, loader_for


def test_loader_for_extension() -> None:
    assert isinstance(loader_for("notes.TXT"), TextLoader)
    assert isinstance(loader_for("readme.md"), TextLoader)
    assert isinstance(loader_for("shifts.pdf"), PDFLoader)
    assert isinstance(loader_for("no-extension"), PDFLoader)


def test_text_loader_decodes_utf8() -> None:
    assert TextLoader().load_bytes("Schicht über".encode()) == "Schicht über"


def test_pdf_loader_blank_page_has_no_text() -> None:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    assert PDFLoader().load_bytes(buf.getvalue()).strip() == ""


def test_pdf_loader_rejects_garbage() -> None:
    with pytest.raises(EmptyDocumentError):
        PDFLoader().load_bytes(b"this is not a pdf")
