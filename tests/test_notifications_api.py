# tests/test_notifications_api.py
"""
Tests for the notification trigger endpoints.

Covers:
- POST /api/notifications/date-reminder
- POST /api/notifications/milestone-progress
- POST /api/notifications/overdue-check
"""

from tests.fixtures.data import make_milestone, make_project


def posted_texts(mock_chat):
    return [c.args[1] for c in mock_chat.post_message.call_args_list]


class TestDateReminder:
    """Date change / reminder messages."""

    def test_changes_send_date_change_message(self, client, mock_chat):
        response = client.post("/api/notifications/date-reminder", json={
            "projectId": "proj-1",
            "projectName": "Website Redesign",
            "changes": [{"name": "Build", "oldDate": "2024-05-15", "newDate": "2024-05-22"}],
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Notification sent", "kind": "date_changed"}
        assert posted_texts(mock_chat) == ["📅 Milestone dates changed for Website Redesign"]
        assert mock_chat.post_message.call_args.args[0] == "C07PWD53552"

    def test_no_changes_send_reminder(self, client, mock_chat):
        response = client.post("/api/notifications/date-reminder", json={
            "projectName": "Website Redesign",
            "milestones": [{"name": "Discovery", "initialDate": "2024-04-01"}],
        })

        assert response.status_code == 200
        assert response.json()["kind"] == "reminder"
        assert posted_texts(mock_chat) == ["⏰ Please confirm milestone dates for Website Redesign"]

    def test_project_name_required(self, client, mock_chat):
        response = client.post("/api/notifications/date-reminder", json={"projectName": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "Project name is required"
        mock_chat.post_message.assert_not_called()

    def test_invalid_json(self, client):
        response = client.post(
            "/api/notifications/date-reminder",
            content="{broken",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Request body must be JSON"

    def test_invalid_change_entry(self, client):
        response = client.post("/api/notifications/date-reminder", json={
            "projectName": "Website Redesign",
            "changes": [{"oldDate": "2024-05-15", "newDate": "2024-05-22"}],
        })

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request: changes.0.name")

    def test_chat_failure_is_502(self, client, mock_chat):
        from src.pulse.integrations.slack import ChatError

        mock_chat.post_message.side_effect = ChatError("chat.postMessage", "channel_not_found")

        response = client.post("/api/notifications/date-reminder", json={"projectName": "Website Redesign"})

        assert response.status_code == 502
        assert response.json() == {"success": False, "error": "Failed to send notification", "code": "CHAT_ERROR"}

    def test_unconfigured_chat_is_502(self, test_config, mock_tracker, clock):
        from fastapi.testclient import TestClient
        from src.pulse.core.container import Container
        from src.pulse.main import create_app

        app = create_app(Container(config=test_config, tracker=mock_tracker, clock=clock))
        with TestClient(app) as client:
            response = client.post("/api/notifications/date-reminder", json={"projectName": "Website Redesign"})

        assert response.status_code == 502


class TestMilestoneProgress:
    """Progress / at-risk message."""

    def test_sends_progress_with_derived_fields(self, client, mock_chat):
        response = client.post("/api/notifications/milestone-progress", json={
            "projectName": "Website Redesign",
            "milestone": {
                "id": "ms-1",
                "name": "Discovery",
                "targetDate": "2024-03-20",
                "subtasks": [{"name": "a", "status": "Done"}, {"name": "b", "status": "Todo"}],
            },
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Notification sent", "progress": 0.5, "isAtRisk": True}
        assert posted_texts(mock_chat) == [
            "⚠️ Milestone at risk: Discovery in project Website Redesign (50% complete)",
        ]

    def test_milestone_required(self, client):
        response = client.post("/api/notifications/milestone-progress", json={"projectName": "Website Redesign"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request: milestone")

    def test_project_name_required(self, client):
        response = client.post("/api/notifications/milestone-progress", json={
            "milestone": {"id": "ms-1", "name": "Discovery"},
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Project name is required"


class TestOverdueCheck:
    """Manual overdue check."""

    def test_nothing_overdue(self, client, mock_chat):
        response = client.post("/api/notifications/overdue-check")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "job": "overdue_check",
            "projects_checked": 1,
            "sent": False,
            "overdue": 0,
            "reason": "none_overdue",
        }
        mock_chat.post_message.assert_not_called()

    def test_gate_and_force(self, client, mock_tracker, mock_chat):
        mock_tracker.fetch_projects.return_value = [
            make_project(milestones=[make_milestone(target_date="2024-03-01")]),
        ]

        first = client.post("/api/notifications/overdue-check").json()
        second = client.post("/api/notifications/overdue-check").json()
        forced = client.post("/api/notifications/overdue-check", json={"force": True}).json()

        assert first["sent"] is True
        assert second["sent"] is False and second["reason"] == "recently_sent"
        assert forced["sent"] is True
        assert posted_texts(mock_chat).count("Found 1 overdue milestone(s) across 1 project(s)") == 2

    def test_tracker_failure(self, client, mock_tracker):
        from src.pulse.integrations.linear import TrackerError

        mock_tracker.fetch_projects.side_effect = TrackerError("down")

        response = client.post("/api/notifications/overdue-check")

        assert response.status_code == 502
        assert response.json()["error"] == "Failed to check overdue milestones"

    def test_chat_failure(self, client, mock_tracker, mock_chat):
        from src.pulse.integrations.slack import ChatError

        mock_tracker.fetch_projects.return_value = [
            make_project(milestones=[make_milestone(target_date="2024-03-01")]),
        ]
        mock_chat.post_message.side_effect = ChatError("chat.postMessage", "ratelimited")

        response = client.post("/api/notifications/overdue-check")

        assert response.status_code == 502
        assert response.json()["error"] == "Failed to send notification"
