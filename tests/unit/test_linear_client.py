# tests/unit/test_linear_client.py
"""
Unit tests for the Linear client.

Uses respx to mock the GraphQL endpoint.
"""

import json
import pytest
import httpx
import respx

from tests.fixtures.data import graphql_data, make_issue_node, make_project_node

API_URL = "https://api.linear.app/graphql"


def created(kind, id, **extra):
    """A successful create mutation response."""
    key = "project" if kind == "projectCreate" else "issue"
    return httpx.Response(200, json=graphql_data({kind: {"success": True, key: {"id": id, **extra}}}))


def sent_inputs(route):
    """The ``input`` variable of each request made to a route."""
    return [json.loads(call.request.content)["variables"].get("input") for call in route.calls]


@pytest.fixture
def linear():
    from src.pulse.integrations.linear import LinearClient

    client = LinearClient(api_key="lin_api_test", team_id="team-1")
    yield client
    client.close()


class TestClientSetup:
    """Construction."""

    def test_requires_api_key(self):
        from src.pulse.integrations.linear import LinearClient

        with pytest.raises(ValueError):
            LinearClient()


class TestFetchProjects:
    """Tests for fetch_projects and node mapping."""

    @respx.mock
    def test_maps_projects_milestones_and_subtasks(self, linear):
        """Top-level issues become milestones; their children become subtasks."""
        node = make_project_node(
            members=["ana@example.com"],
            issues=[
                make_issue_node(
                    id="issue-1",
                    title="Discovery",
                    due_date="2024-04-01T00:00:00.000Z",
                    assignee_email="ana@example.com",
                    children=[
                        {"title": "Interviews", "description": "", "state": {"name": "Completed"}},
                        {"title": "Audit", "description": "Pages", "state": None},
                    ],
                ),
                make_issue_node(id="issue-1a", title="Interviews", parent="issue-1"),
                make_issue_node(id="issue-2", title="Build", due_date=None, state="Done"),
            ],
        )
        route = respx.post(API_URL).mock(
            return_value=httpx.Response(200, json=graphql_data({"projects": {"nodes": [node]}}))
        )

        projects = linear.fetch_projects(limit=10)

        assert route.called
        assert route.calls.last.request.headers["Authorization"] == "lin_api_test"
        assert json.loads(route.calls.last.request.content)["variables"] == {"first": 10}

        project = projects[0]
        assert project.id == "proj-1"
        assert project.start_date == "2024-01-15"
        assert project.end_date == "2024-06-30"
        assert project.members == ["ana@example.com"]
        assert [m.id for m in project.milestones] == ["issue-1", "issue-2"]

        discovery, build = project.milestones
        assert discovery.target_date == "2024-04-01"
        assert discovery.estimator == "ana@example.com"
        assert discovery.status == "In Progress"
        assert [(s.name, s.status) for s in discovery.subtasks] == [("Interviews", "Done"), ("Audit", "Backlog")]
        assert build.target_date is None
        assert build.status == "Done"

    @respx.mock
    def test_graphql_errors_raise_tracker_error(self, linear):
        from src.pulse.integrations.linear import TrackerError

        respx.post(API_URL).mock(
            return_value=httpx.Response(200, json={"errors": [{"message": "Authentication required"}]})
        )

        with pytest.raises(TrackerError, match="Authentication required"):
            linear.fetch_projects()

    @respx.mock
    def test_http_error_raises_tracker_error(self, linear):
        from src.pulse.integrations.linear import TrackerError

        respx.post(API_URL).mock(return_value=httpx.Response(500, text="boom"))

        with pytest.raises(TrackerError):
            linear.fetch_projects()

    @respx.mock
    def test_network_error_raises_tracker_error(self, linear):
        from src.pulse.integrations.linear import TrackerError

        respx.post(API_URL).mock(side_effect=httpx.ConnectError("unreachable"))

        with pytest.raises(TrackerError):
            linear.fetch_projects()


class TestCreateProject:
    """Tests for the multi-step create_project."""

    def project_input(self):
        from src.pulse.models import MilestoneInput, ProjectInput, SubtaskInput

        return ProjectInput(
            name="Website Redesign",
            description="Rebuild the marketing site",
            start_date="01/15/2024",
            end_date="2024-06-30",
            milestones=[
                MilestoneInput(
                    name="Discovery",
                    target_date="02/01/2024",
                    estimator="ana@example.com",
                    subtasks=[SubtaskInput(name="Interviews"), SubtaskInput(name="Audit")],
                ),
                MilestoneInput(name="Build"),
            ],
        )

    @respx.mock
    def test_creates_project_milestones_and_subtasks_in_order(self, linear):
        route = respx.post(API_URL).mock(side_effect=[
            created("projectCreate", "proj-9", name="Website Redesign"),
            created("issueCreate", "issue-1", title="Discovery"),
            created("issueCreate", "issue-1a", title="Interviews"),
            created("issueCreate", "issue-1b", title="Audit"),
            created("issueCreate", "issue-2", title="Build"),
        ])

        project = linear.create_project(self.project_input())

        inputs = sent_inputs(route)
        assert inputs[0]["teamIds"] == ["team-1"]
        assert inputs[0]["startDate"] == "2024-01-15"
        assert inputs[0]["targetDate"] == "2024-06-30"
        assert inputs[1]["title"] == "Discovery"
        assert inputs[1]["dueDate"] == "2024-02-01"
        assert inputs[2]["parentId"] == "issue-1"
        assert inputs[3]["parentId"] == "issue-1"
        assert inputs[4]["title"] == "Build"
        assert inputs[4]["dueDate"] is None

        assert project.id == "proj-9"
        assert [m.id for m in project.milestones] == ["issue-1", "issue-2"]
        assert project.milestones[0].estimator == "ana@example.com"
        assert project.milestones[0].target_date == "2024-02-01"
        assert [s.name for s in project.milestones[0].subtasks] == ["Interviews", "Audit"]

    @respx.mock
    def test_failed_project_step(self, linear):
        from src.pulse.integrations.linear import ProjectCreationError

        respx.post(API_URL).mock(
            return_value=httpx.Response(200, json=graphql_data({"projectCreate": {"success": False, "project": None}}))
        )

        with pytest.raises(ProjectCreationError) as exc:
            linear.create_project(self.project_input())

        assert exc.value.step == "Failed to create project in Linear"

    @respx.mock
    def test_failed_subtask_names_the_step_and_stops(self, linear):
        from src.pulse.integrations.linear import ProjectCreationError

        route = respx.post(API_URL).mock(side_effect=[
            created("projectCreate", "proj-9"),
            created("issueCreate", "issue-1"),
            httpx.Response(200, json={"errors": [{"message": "rate limited"}]}),
        ])

        with pytest.raises(ProjectCreationError) as exc:
            linear.create_project(self.project_input())

        assert exc.value.step == "Failed to create subtask: Interviews (milestone: Discovery)"
        assert route.call_count == 3

    @respx.mock
    def test_team_lookup_when_no_team_configured(self):
        from src.pulse.integrations.linear import LinearClient
        from src.pulse.models import ProjectInput

        route = respx.post(API_URL).mock(side_effect=[
            httpx.Response(200, json=graphql_data({"teams": {"nodes": [{"id": "team-x", "name": "Eng"}]}})),
            created("projectCreate", "proj-9"),
        ])

        with LinearClient(api_key="lin_api_test") as linear:
            linear.create_project(ProjectInput(name="Solo"))

        assert sent_inputs(route)[1]["teamIds"] == ["team-x"]

    @respx.mock
    def test_no_teams_is_creation_error(self):
        from src.pulse.integrations.linear import LinearClient, ProjectCreationError
        from src.pulse.models import ProjectInput

        respx.post(API_URL).mock(return_value=httpx.Response(200, json=graphql_data({"teams": {"nodes": []}})))

        with LinearClient(api_key="lin_api_test") as linear:
            with pytest.raises(ProjectCreationError, match="No teams found"):
                linear.create_project(ProjectInput(name="Solo"))
