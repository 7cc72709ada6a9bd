# src/pulse/domains/documents/parser.py
"""
SoW Field Parser

Fixed-grammar extraction of a project draft from Statement-of-Work text.
The documents come from a known template, so each field is one pattern
search over the whole text (see constants.SOW_PATTERNS). Missing fields are
left empty; nothing here raises for a field that is not found.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ...dates import DateOrder, normalize_date
from .constants import COMPILED_PATTERNS
from .extractor import extract_text
from .models import DraftMilestone, DraftSubtask, SowDraft

logger = logging.getLogger(__name__)


def parse_sow_text(text: str) -> SowDraft:
    """
    Recover a structured project draft from SoW text.

    Args:
        text: Raw text of the whole document

    Returns:
        SowDraft with whatever fields matched
    """
    draft = SowDraft(
        project_name=_first_group("project_name", text) or "",
        description=_first_group("description", text) or "",
        start_date=_slash_date("start_date", text),
        end_date=_slash_date("end_date", text),
        milestones=extract_milestones(text),
    )
    logger.debug(
        f"Parsed SoW draft: name={draft.project_name!r}, "
        f"milestones={len(draft.milestones)}"
    )
    return draft


def parse_sow_pdf(path: Union[str, Path]) -> SowDraft:
    """Extract text from a SoW PDF and parse it."""
    return parse_sow_text(extract_text(path))


def extract_milestones(text: str) -> List[DraftMilestone]:
    """Split text on milestone markers and parse each block."""
    markers = list(COMPILED_PATTERNS["milestone_marker"].finditer(text))
    milestones = []

    for index, marker in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        block = text[marker.end():end]
        milestone = _parse_milestone_block(block)
        if milestone:
            milestones.append(milestone)

    return milestones


def extract_subtasks(text: str) -> List[DraftSubtask]:
    """Parse bullet or numbered lines into subtasks."""
    subtasks = []
    for match in COMPILED_PATTERNS["subtask_line"].finditer(text):
        name = match.group("name").strip()
        if not name:
            continue
        description = (match.group("description") or "").strip() or None
        subtasks.append(DraftSubtask(name=name, description=description))
    return subtasks


def _parse_milestone_block(block: str) -> Optional[DraftMilestone]:
    header, _, body = block.partition("\n")
    name, due = _parse_header(header)

    if due is None:
        leading = COMPILED_PATTERNS["leading_due_date"].match(body)
        if leading:
            due = leading.group(1)
            body = body[leading.end():]

    if not name:
        return None

    return DraftMilestone(
        name=name,
        target_date=normalize_date(due, DateOrder.MDY) if due else None,
        subtasks=extract_subtasks(_subtasks_text(body)),
    )


def _parse_header(header: str) -> Tuple[str, Optional[str]]:
    match = COMPILED_PATTERNS["milestone_header"].fullmatch(header)
    if not match:
        return header.strip(), None
    return match.group("name").strip(), match.group("due")


def _subtasks_text(body: str) -> str:
    section = COMPILED_PATTERNS["subtask_section"].search(body)
    if not section:
        return ""
    return body[section.end():].strip()


def _first_group(rule: str, text: str) -> Optional[str]:
    match = COMPILED_PATTERNS[rule].search(text)
    return match.group(1).strip() if match else None


def _slash_date(rule: str, text: str) -> Optional[str]:
    raw = _first_group(rule, text)
    if raw is None:
        return None
    return normalize_date(raw, DateOrder.MDY)


__all__ = [
    "parse_sow_text",
    "parse_sow_pdf",
    "extract_milestones",
    "extract_subtasks",
]
