"""
Store contract consumed by every service.

A store holds named collections (ordered lists of flat record dicts) and
knows how to make them durable. It validates nothing: all integrity rules
live in the services and their guards.

    store.get("departments")   # live list, mutated in place by services
    store.persist()            # flush every collection to durable storage
"""

from abc import ABC, abstractmethod

# ── Collection names ─────────────────────────────────────────────────────────

USERS = "users"
SESSIONS = "sessions"

ORGANIZATIONS = "organizations"
DEPARTMENTS = "departments"
STAFF = "staff"
STATUSES = "statuses"
PRIORITIES = "priorities"
COMPLEXITIES = "complexities"
PROJECTS = "projects"
TASKS = "tasks"
TASK_ASSIGNEES = "task_assignees"
TASK_PREDECESSORS = "task_predecessors"
TASK_PROGRESS = "task_progress"
TASK_EVALUATIONS = "task_evaluations"
TASK_STATUS_REPORTS = "task_status_reports"
PROJECT_STATUS_REPORTS = "project_status_reports"
TEAMS = "teams"
TEAM_MEMBERS = "team_members"

AUTH_COLLECTIONS = (USERS, SESSIONS)

DATA_COLLECTIONS = (
    ORGANIZATIONS,
    DEPARTMENTS,
    STAFF,
    STATUSES,
    PRIORITIES,
    COMPLEXITIES,
    PROJECTS,
    TASKS,
    TASK_ASSIGNEES,
    TASK_PREDECESSORS,
    TASK_PROGRESS,
    TASK_EVALUATIONS,
    TASK_STATUS_REPORTS,
    PROJECT_STATUS_REPORTS,
    TEAMS,
    TEAM_MEMBERS,
)

ALL_COLLECTIONS = AUTH_COLLECTIONS + DATA_COLLECTIONS


def empty_collections(names=ALL_COLLECTIONS) -> dict[str, list]:
    """Return a fresh mapping with an empty list per collection name."""
    return {name: [] for name in names}


class Store(ABC):
    """Abstract entity store."""

    @abstractmethod
    def get(self, collection: str) -> list[dict]:
        """Return the live list for ``collection``.

        Raises KeyError for an unknown collection name so typos surface
        immediately instead of silently creating a new collection.
        """

    @abstractmethod
    def persist(self) -> None:
        """Durably write every collection."""

    def counts(self) -> dict[str, int]:
        """Number of records per collection."""
        return {name: len(self.get(name)) for name in ALL_COLLECTIONS}
