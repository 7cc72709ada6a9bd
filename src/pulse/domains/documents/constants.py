# src/pulse/domains/documents/constants.py
"""
SoW Document Constants

Extraction grammar for the Statement-of-Work template. Each rule is a
pattern compiled case-insensitively; parser.py applies them in order.
"""

import re
from typing import Dict, Pattern

# =============================================================================
# UPLOADS
# =============================================================================

PDF_CONTENT_TYPE = "application/pdf"

# =============================================================================
# FIELD EXTRACTION PATTERNS
# =============================================================================

SLASH_DATE = r"\d{2}/\d{2}/\d{4}"

SOW_PATTERNS: Dict[str, str] = {
    # Whole-document fields
    "project_name": r"Project Name:[ \t]*([^\n]+)",
    "description": r"Project Description:\s*([^\n]+(?:\n(?!\s*Project Dates:)[^\n]+)*)",
    "start_date": rf"Start:\s*({SLASH_DATE})",
    "end_date": rf"End:\s*({SLASH_DATE})",
    # Milestone blocks
    "milestone_marker": r"Milestone\s+\d+:",
    "milestone_header": rf"[ \t]*(?P<name>[^\n]*?)(?:[ \t]*Due Date:[ \t]*(?P<due>{SLASH_DATE}))?[ \t]*",
    "leading_due_date": rf"\s*Due Date:\s*({SLASH_DATE})",
    # Inside a milestone body
    "subtask_section": r"(?:Sub-tasks:?|Subtasks:?|Tasks:)",
    "subtask_line": r"^[ \t]*(?:[-•*]|\d+\.)[ \t]*(?P<name>[^:\n]+)(?::[ \t]*(?P<description>[^\n]*))?",
}

COMPILED_PATTERNS: Dict[str, Pattern] = {
    name: re.compile(pattern, (re.IGNORECASE | re.MULTILINE) if name == "subtask_line" else re.IGNORECASE)
    for name, pattern in SOW_PATTERNS.items()
}
