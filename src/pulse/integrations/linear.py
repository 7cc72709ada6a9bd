# src/pulse/integrations/linear.py
"""
Linear API Client

Thin wrapper for the Linear GraphQL API. Projects map to Project, top-level
issues of a project map to Milestone, and child issues map to Subtask.

Uses the personal API key in the Authorization header.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..dates import normalize_date
from ..domains.projects.constants import (
    DEFAULT_MILESTONE_STATUS,
    DEFAULT_SUBTASK_STATUS,
    DONE_STATUS,
    MAX_DESCRIPTION_LENGTH,
)
from ..domains.projects.evaluator import is_terminal_status
from ..models import Milestone, MilestoneInput, Project, ProjectInput, Subtask

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.linear.app/graphql"


class TrackerError(Exception):
    """Raised when the issue tracker rejects a request or is unreachable."""


class ProjectCreationError(TrackerError):
    """Raised when one step of a multi-step project creation fails."""

    def __init__(self, step: str, cause: Optional[Exception] = None):
        self.step = step
        self.cause = cause
        super().__init__(step)


PROJECTS_QUERY = """
query Projects($first: Int!) {
  projects(first: $first) {
    nodes {
      id
      name
      description
      state
      startDate
      targetDate
      members { nodes { email } }
      issues(first: 100) {
        nodes {
          id
          title
          description
          dueDate
          parent { id }
          state { name }
          assignee { email name }
          children(first: 100) {
            nodes {
              title
              description
              state { name }
            }
          }
        }
      }
    }
  }
}
"""

TEAMS_QUERY = """
query Teams {
  teams { nodes { id name } }
}
"""

PROJECT_CREATE_MUTATION = """
mutation ProjectCreate($input: ProjectCreateInput!) {
  projectCreate(input: $input) {
    success
    project { id name }
  }
}
"""

ISSUE_CREATE_MUTATION = """
mutation IssueCreate($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { id title }
  }
}
"""


class LinearClient:
    """
    Client for the issue tracker.

    Usage:
        client = LinearClient(api_key="lin_api_...")
        projects = client.fetch_projects()
        created = client.create_project(ProjectInput(name="Website"))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        team_id: Optional[str] = None,
        timeout: float = 30.0,
        http: Optional[httpx.Client] = None,
    ):
        if not api_key and http is None:
            raise ValueError("Linear API key not provided. Set LINEAR_API_KEY env or pass api_key.")
        self.team_id = team_id
        self._api_url = api_url
        self._http = http or httpx.Client(
            headers={"Authorization": api_key, "Content-Type": "application/json"},
            timeout=timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL document and return its ``data`` member."""
        try:
            response = self._http.post(self._api_url, json={"query": query, "variables": variables or {}})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise TrackerError(f"Linear request failed: {e}") from e
        except ValueError as e:
            raise TrackerError(f"Linear returned invalid JSON: {e}") from e

        if payload.get("errors"):
            messages = "; ".join(err.get("message", "unknown error") for err in payload["errors"])
            raise TrackerError(f"Linear API error: {messages}")
        return payload.get("data") or {}

    # =========================================================================
    # READ
    # =========================================================================

    def fetch_projects(self, limit: int = 50) -> List[Project]:
        """Fetch every project with its milestones and subtasks."""
        data = self.execute(PROJECTS_QUERY, {"first": limit})
        nodes = _nodes(data.get("projects"))
        projects = [project_from_node(node) for node in nodes]
        logger.info(f"Fetched {len(projects)} project(s) from Linear")
        return projects

    def list_teams(self) -> List[Dict[str, Any]]:
        data = self.execute(TEAMS_QUERY)
        return _nodes(data.get("teams"))

    # =========================================================================
    # WRITE
    # =========================================================================

    def create_project(self, project_input: ProjectInput) -> Project:
        """
        Create a project, then its milestone issues and their child issues.

        Steps run in order and stop at the first failure. Records created
        before the failure are left in place.

        Raises:
            ProjectCreationError: Names the step that failed
        """
        team_id = project_input.team_id or self.team_id or self._default_team_id()

        try:
            data = self.execute(PROJECT_CREATE_MUTATION, {"input": _project_create_input(project_input, team_id)})
        except TrackerError as e:
            raise ProjectCreationError("Failed to create project in Linear", e) from e

        result = data.get("projectCreate") or {}
        created = result.get("project")
        if not result.get("success") or not created:
            raise ProjectCreationError("Failed to create project in Linear")

        project_id = created["id"]
        logger.info(f"Created Linear project {project_id} ({project_input.name})")

        milestones = []
        for milestone_input in project_input.milestones:
            milestones.append(self._create_milestone(milestone_input, project_id, team_id))

        return Project(
            id=project_id,
            name=project_input.name,
            description=project_input.description,
            state=project_input.state,
            start_date=project_input.start_date,
            end_date=project_input.end_date,
            milestones=milestones,
            members=list(project_input.members),
        )

    def _create_milestone(self, milestone_input: MilestoneInput, project_id: str, team_id: str) -> Milestone:
        step = f"Failed to create milestone: {milestone_input.name}"
        issue = self._create_issue(
            {
                "teamId": team_id,
                "projectId": project_id,
                "title": milestone_input.name[:MAX_DESCRIPTION_LENGTH],
                "description": (milestone_input.description or "")[:MAX_DESCRIPTION_LENGTH],
                "dueDate": normalize_date(milestone_input.target_date) or None,
            },
            step,
        )

        subtasks = []
        for subtask_input in milestone_input.subtasks:
            self._create_issue(
                {
                    "teamId": team_id,
                    "projectId": project_id,
                    "parentId": issue["id"],
                    "title": subtask_input.name[:MAX_DESCRIPTION_LENGTH],
                    "description": (subtask_input.description or "")[:MAX_DESCRIPTION_LENGTH],
                },
                f"Failed to create subtask: {subtask_input.name} (milestone: {milestone_input.name})",
            )
            subtasks.append(Subtask(name=subtask_input.name, description=subtask_input.description))

        return Milestone(
            id=issue["id"],
            name=milestone_input.name,
            description=milestone_input.description,
            target_date=normalize_date(milestone_input.target_date) or None,
            status=DEFAULT_MILESTONE_STATUS,
            subtasks=subtasks,
            estimator=milestone_input.estimator,
        )

    def _create_issue(self, issue_input: Dict[str, Any], step: str) -> Dict[str, Any]:
        try:
            data = self.execute(ISSUE_CREATE_MUTATION, {"input": issue_input})
        except TrackerError as e:
            logger.error(f"{step}: {e}")
            raise ProjectCreationError(step, e) from e

        result = data.get("issueCreate") or {}
        if not result.get("success") or not result.get("issue"):
            logger.error(f"{step}: tracker reported failure")
            raise ProjectCreationError(step)
        return result["issue"]

    def _default_team_id(self) -> str:
        try:
            teams = self.list_teams()
        except TrackerError as e:
            raise ProjectCreationError("Failed to look up Linear teams", e) from e
        if not teams:
            raise ProjectCreationError("No teams found in Linear. Cannot create project without a team.")
        return teams[0]["id"]


# =============================================================================
# NODE MAPPING
# =============================================================================

def _nodes(connection: Any) -> List[Dict[str, Any]]:
    if isinstance(connection, dict):
        return connection.get("nodes") or []
    return []


def _state_name(node: Dict[str, Any]) -> Optional[str]:
    state = node.get("state")
    if isinstance(state, dict):
        return state.get("name")
    return None


def subtask_from_node(node: Dict[str, Any]) -> Subtask:
    state = _state_name(node)
    if state and is_terminal_status(state):
        status = DONE_STATUS
    else:
        status = state or DEFAULT_SUBTASK_STATUS
    return Subtask(
        name=node.get("title") or "",
        description=node.get("description") or None,
        status=status,
    )


def milestone_from_node(node: Dict[str, Any]) -> Milestone:
    state = _state_name(node)
    if state and is_terminal_status(state):
        status = DONE_STATUS
    else:
        status = state or DEFAULT_MILESTONE_STATUS
    assignee = node.get("assignee") or {}
    return Milestone(
        id=node["id"],
        name=node.get("title") or "",
        description=node.get("description") or None,
        target_date=normalize_date(node.get("dueDate")) or None,
        status=status,
        subtasks=[subtask_from_node(child) for child in _nodes(node.get("children"))],
        estimator=assignee.get("email") or assignee.get("name"),
    )


def project_from_node(node: Dict[str, Any]) -> Project:
    milestones = [
        milestone_from_node(issue)
        for issue in _nodes(node.get("issues"))
        if not issue.get("parent")
    ]
    members = [m["email"] for m in _nodes(node.get("members")) if m.get("email")]
    return Project(
        id=node["id"],
        name=node.get("name") or "",
        description=node.get("description") or None,
        state=node.get("state") or "planned",
        start_date=normalize_date(node.get("startDate")) or None,
        end_date=normalize_date(node.get("targetDate")) or None,
        milestones=milestones,
        members=members,
    )


def _project_create_input(project_input: ProjectInput, team_id: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "teamIds": [team_id],
        "name": project_input.name,
        "description": (project_input.description or "")[:MAX_DESCRIPTION_LENGTH],
        "state": project_input.state or "planned",
    }
    start = normalize_date(project_input.start_date)
    end = normalize_date(project_input.end_date)
    if start:
        payload["startDate"] = start
    if end:
        payload["targetDate"] = end
    return payload
