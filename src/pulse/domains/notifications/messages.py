# src/pulse/domains/notifications/messages.py
"""
Chat Message Composers

Each composer is a pure function from event data to a ChatMessage: a plain
text fallback plus Slack Block Kit blocks. Nothing here talks to the network.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ...dates import format_display_date
from ...models import Milestone, Project
from ..projects.constants import AT_RISK_PROGRESS_THRESHOLD, DONE_STATUS
from ..projects.evaluator import progress_ratio
from ..tracking.models import DateChange, MilestoneBaseline

NOT_SET = "Not set"


@dataclass
class ChatMessage:
    """A message ready for chat.postMessage."""
    text: str
    blocks: List[Dict[str, Any]] = field(default_factory=list)


# =============================================================================
# BLOCK HELPERS
# =============================================================================

def header(text: str) -> Dict[str, Any]:
    return {"type": "header", "text": {"type": "plain_text", "text": text, "emoji": True}}


def section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def fields(*pairs: Tuple[str, str]) -> Dict[str, Any]:
    return {
        "type": "section",
        "fields": [{"type": "mrkdwn", "text": f"*{label}:*\n{value}"} for label, value in pairs],
    }


def divider() -> Dict[str, Any]:
    return {"type": "divider"}


def _display(value: Optional[str]) -> str:
    return format_display_date(value) if value else NOT_SET


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


# =============================================================================
# COMPOSERS
# =============================================================================

def project_created(project: Project) -> ChatMessage:
    blocks = [
        header("🎉 New Project Created"),
        fields(("Project Name", project.name), ("State", project.state)),
    ]
    if project.description:
        blocks.append(section(f"*Description:*\n{project.description}"))
    if project.start_date or project.end_date:
        blocks.append(fields(
            ("Start Date", _display(project.start_date)),
            ("End Date", _display(project.end_date)),
        ))

    assigned = [m for m in project.milestones if m.estimator]
    if assigned:
        blocks.append(section("*Milestone Assignments:*\n" + _bullets(f"{m.name} - {m.estimator}" for m in assigned)))
        blocks.append(section("👋 Estimators, please review your assigned milestones and provide estimates."))
    blocks.append(divider())

    return ChatMessage(text=f"New project created: {project.name}", blocks=blocks)


def estimator_assignment(project: Project, milestone: Milestone) -> ChatMessage:
    blocks = [
        section(f"Hey {milestone.estimator}! You've been assigned to estimate the following milestone:"),
        fields(("Project", project.name), ("Milestone", milestone.name)),
    ]
    if milestone.target_date:
        blocks.append(fields(("Target Date", _display(milestone.target_date))))
    if milestone.subtasks:
        blocks.append(section("*Subtasks:*\n" + _bullets(s.name for s in milestone.subtasks)))
    blocks.append(section("👉 Please provide your estimation for this milestone."))

    return ChatMessage(text=f"Milestone estimation needed: {milestone.name}", blocks=blocks)


def milestone_overdue(project: Project, milestone: Milestone) -> ChatMessage:
    if milestone.estimator:
        ask = f"Hey {milestone.estimator}, please provide an update on this milestone."
    else:
        ask = "*Please provide an update on this milestone.*"
    return ChatMessage(
        text=f"🚨 Overdue Milestone Alert: {milestone.name} in project {project.name}",
        blocks=[
            header("🚨 Overdue Milestone Alert"),
            fields(("Project", project.name), ("Milestone", milestone.name)),
            fields(("Status", milestone.status), ("Target Date", _display(milestone.target_date))),
            section(ask),
            divider(),
        ],
    )


def date_change(project_name: str, changes: List[DateChange]) -> ChatMessage:
    lines = [f"{c.name}: {_display(c.old_date)} → {_display(c.new_date)}" for c in changes]
    return ChatMessage(
        text=f"📅 Milestone dates changed for {project_name}",
        blocks=[
            header("📅 Milestone Dates Changed"),
            section(f"*Project:* {project_name}"),
            section("*Changes:*\n" + _bullets(lines)),
            divider(),
        ],
    )


def date_reminder(project_name: str, milestones: List[MilestoneBaseline]) -> ChatMessage:
    lines = [f"{m.name}: {_display(m.initial_date)}" for m in milestones]
    blocks = [
        header("⏰ Milestone Dates Not Yet Confirmed"),
        section(f"*Project:* {project_name}"),
    ]
    if lines:
        blocks.append(section("*Current target dates:*\n" + _bullets(lines)))
    blocks.append(section("Please confirm these dates or update them in Linear."))
    blocks.append(divider())
    return ChatMessage(text=f"⏰ Please confirm milestone dates for {project_name}", blocks=blocks)


def progress_at_risk(project_name: str, milestone: Milestone) -> ChatMessage:
    ratio = progress_ratio(milestone)
    done = sum(1 for s in milestone.subtasks if s.status == DONE_STATUS)
    return ChatMessage(
        text=f"⚠️ Milestone at risk: {milestone.name} in project {project_name} ({ratio:.0%} complete)",
        blocks=[
            header("⚠️ Milestone At Risk"),
            fields(("Project", project_name), ("Milestone", milestone.name)),
            fields(
                ("Progress", f"{ratio:.0%} ({done}/{len(milestone.subtasks)} subtasks done)"),
                ("Target Date", _display(milestone.target_date)),
            ),
            section(f"This milestone is due soon and less than {AT_RISK_PROGRESS_THRESHOLD:.0%} of its subtasks are done."),
            divider(),
        ],
    )


def overdue_summary(overdue: List[Tuple[Project, Milestone]]) -> Optional[ChatMessage]:
    """Cross-project summary, or None when nothing is overdue."""
    if not overdue:
        return None

    names: Dict[str, str] = {}
    counts: Dict[str, int] = {}
    for project, _ in overdue:
        names[project.id] = project.name
        counts[project.id] = counts.get(project.id, 0) + 1
    summary = f"Found {len(overdue)} overdue milestone(s) across {len(counts)} project(s)"

    return ChatMessage(
        text=summary,
        blocks=[
            header("📊 Overdue Milestones Summary"),
            section(f"Found *{len(overdue)}* overdue milestone(s) across *{len(counts)}* project(s)"),
            section("\n".join(f"*{names[pid]}*: {count} overdue milestone(s)" for pid, count in counts.items())),
        ],
    )
