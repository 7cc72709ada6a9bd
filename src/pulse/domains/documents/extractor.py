# src/pulse/domains/documents/extractor.py
"""
Document Text Extractor

Pulls the raw text out of a PDF with PyPDF2. Layout is ignored; pages are
joined with newlines and handed to the SoW parser as one blob.
"""

import io
import logging
from pathlib import Path
from typing import Union

import PyPDF2
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)


class DocumentExtractionError(Exception):
    """Raised when a document cannot be read at all."""


def extract_text(source: Union[str, Path, bytes]) -> str:
    """
    Extract text from a PDF file path or raw PDF bytes.

    Raises:
        DocumentExtractionError: If the file is unreadable or not a PDF
    """
    try:
        if isinstance(source, bytes):
            reader = PyPDF2.PdfReader(io.BytesIO(source))
            return _join_pages(reader)

        with open(source, "rb") as f:
            reader = PyPDF2.PdfReader(f)
            return _join_pages(reader)
    except (OSError, PdfReadError) as e:
        raise DocumentExtractionError(f"Failed to read PDF: {e}") from e


def _join_pages(reader: "PyPDF2.PdfReader") -> str:
    text_parts = []
    for page in reader.pages:
        text_parts.append(page.extract_text() or "")
    text = "\n".join(text_parts)
    logger.debug(f"Extracted {len(text)} characters from {len(reader.pages)} page(s)")
    return text
