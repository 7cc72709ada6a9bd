# tests/unit/test_evaluator.py
"""
Unit tests for the overdue / progress evaluator.

All checks run against a fixed "now" of 2024-03-15 12:00 UTC.
"""

import pytest
from datetime import datetime, timezone

from tests.fixtures.data import make_milestone, make_project, make_subtasks

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestOverdue:
    """Tests for is_overdue."""

    def test_past_target_is_overdue(self):
        from src.pulse.domains.projects.evaluator import is_overdue

        assert is_overdue(make_milestone(target_date="2024-03-10"), NOW)

    def test_today_counts_from_midnight(self):
        """A target of today is already past once the day has started."""
        from src.pulse.domains.projects.evaluator import is_overdue

        assert is_overdue(make_milestone(target_date="2024-03-15"), NOW)
        assert not is_overdue(make_milestone(target_date="2024-03-16"), NOW)

    @pytest.mark.parametrize("status", ["Done", "completed", "Canceled", "cancelled"])
    def test_terminal_status_is_never_overdue(self, status):
        from src.pulse.domains.projects.evaluator import is_overdue

        assert not is_overdue(make_milestone(target_date="2024-01-01", status=status), NOW)

    def test_missing_or_unreadable_date_is_not_overdue(self):
        from src.pulse.domains.projects.evaluator import is_overdue

        assert not is_overdue(make_milestone(target_date=None), NOW)
        assert not is_overdue(make_milestone(target_date="someday"), NOW)

    def test_naive_now_is_treated_as_utc(self):
        from src.pulse.domains.projects.evaluator import is_overdue

        assert is_overdue(make_milestone(target_date="2024-03-10"), datetime(2024, 3, 15))


class TestProgress:
    """Tests for progress_ratio, is_due_soon and is_at_risk."""

    def test_no_subtasks_is_zero(self):
        from src.pulse.domains.projects.evaluator import progress_ratio

        assert progress_ratio(make_milestone()) == 0.0

    def test_only_done_counts(self):
        """Exactly "Done"; other statuses are not complete."""
        from src.pulse.models import Subtask
        from src.pulse.domains.projects.evaluator import progress_ratio

        milestone = make_milestone(subtasks=[
            Subtask(name="a", status="Done"),
            Subtask(name="b", status="done"),
            Subtask(name="c", status="In Review"),
            Subtask(name="d", status="Done"),
        ])

        assert progress_ratio(milestone) == 0.5

    def test_due_soon_window_is_inclusive(self):
        from src.pulse.domains.projects.evaluator import is_due_soon

        assert is_due_soon(make_milestone(target_date="2024-03-20"), NOW)
        assert is_due_soon(make_milestone(target_date="2024-03-25"), NOW)
        assert not is_due_soon(make_milestone(target_date="2024-03-26"), NOW)
        assert not is_due_soon(make_milestone(target_date="2024-03-14"), NOW)

    def test_at_risk_below_threshold(self):
        from src.pulse.domains.projects.evaluator import is_at_risk

        milestone = make_milestone(target_date="2024-03-20", subtasks=make_subtasks(done=2, total=3))

        assert is_at_risk(milestone, NOW)

    def test_not_at_risk_at_threshold(self):
        """70% done is not below 70%."""
        from src.pulse.domains.projects.evaluator import is_at_risk

        milestone = make_milestone(target_date="2024-03-20", subtasks=make_subtasks(done=7, total=10))

        assert not is_at_risk(milestone, NOW)

    def test_not_at_risk_when_far_away(self):
        from src.pulse.domains.projects.evaluator import is_at_risk

        milestone = make_milestone(target_date="2024-06-01", subtasks=make_subtasks(done=0, total=3))

        assert not is_at_risk(milestone, NOW)


class TestAnnotation:
    """Tests for annotate_project and overdue_milestones."""

    def test_annotate_project_fills_derived_fields(self):
        from src.pulse.domains.projects.evaluator import annotate_project

        project = make_project(milestones=[
            make_milestone(id="late", target_date="2024-03-01"),
            make_milestone(id="soon", target_date="2024-03-18", subtasks=make_subtasks(done=1, total=4)),
        ])

        annotated = annotate_project(project, NOW)
        late, soon = annotated.milestones

        assert late.is_overdue and not late.is_at_risk
        assert soon.is_at_risk and soon.progress == 0.25
        assert not project.milestones[0].is_overdue

    def test_overdue_milestones_across_projects(self):
        from src.pulse.domains.projects.evaluator import overdue_milestones

        projects = [
            make_project(id="p1", milestones=[make_milestone(id="a", target_date="2024-03-01")]),
            make_project(id="p2", milestones=[
                make_milestone(id="b", target_date="2024-02-01"),
                make_milestone(id="c", target_date="2024-02-01", status="Done"),
            ]),
        ]

        found = overdue_milestones(projects, NOW)

        assert [(p.id, m.id) for p, m in found] == [("p1", "a"), ("p2", "b")]
        assert all(m.is_overdue for _, m in found)


class TestProgressBounds:
    """Exact 0 and 1 progress values."""

    def test_all_done_is_exactly_one(self):
        from src.pulse.domains.projects.evaluator import progress_ratio

        assert progress_ratio(make_milestone(subtasks=make_subtasks(done=3, total=3))) == 1.0

    def test_terminal_overdue_regardless_of_date(self):
        from src.pulse.domains.projects.evaluator import is_overdue

        for target in ("1999-01-01", "2024-03-14", None, "bad"):
            assert not is_overdue(make_milestone(target_date=target, status="Done"), NOW)
