# src/pulse/domains/documents/__init__.py
"""
Documents Domain - SoW upload and parsing

This domain handles:
- PDF text extraction
- SoW field parsing into project drafts
- The upload endpoint
"""

from .extractor import DocumentExtractionError, extract_text
from .models import DraftMilestone, DraftSubtask, SowDraft
from .parser import parse_sow_pdf, parse_sow_text

__all__ = [
    "DocumentExtractionError",
    "extract_text",
    "DraftMilestone",
    "DraftSubtask",
    "SowDraft",
    "parse_sow_pdf",
    "parse_sow_text",
]
