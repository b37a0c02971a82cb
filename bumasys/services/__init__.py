"""
Service registry.

Every service receives the store through its constructor; ``build_services``
wires one instance of each around a single store so they all see the same
collections.
"""

from dataclasses import dataclass

from bumasys.services.auth_service import AuthService
from bumasys.services.database_service import DatabaseService
from bumasys.services.department_service import DepartmentService
from bumasys.services.organization_service import OrganizationService
from bumasys.services.project_service import ProjectService
from bumasys.services.project_status_report_service import ProjectStatusReportService
from bumasys.services.reference_service import ComplexityService, PriorityService, StatusService
from bumasys.services.staff_service import StaffService
from bumasys.services.task_evaluation_service import TaskEvaluationService
from bumasys.services.task_progress_service import TaskProgressService
from bumasys.services.task_service import TaskService
from bumasys.services.task_status_report_service import TaskStatusReportService
from bumasys.services.team_service import TeamService
from bumasys.services.user_service import UserService
from bumasys.store.base import Store


@dataclass
class Services:
    organizations: OrganizationService
    departments: DepartmentService
    staff: StaffService
    statuses: StatusService
    priorities: PriorityService
    complexities: ComplexityService
    projects: ProjectService
    project_status_reports: ProjectStatusReportService
    tasks: TaskService
    task_progress: TaskProgressService
    task_evaluations: TaskEvaluationService
    task_status_reports: TaskStatusReportService
    teams: TeamService
    users: UserService
    auth: AuthService
    database: DatabaseService


def build_services(
    store: Store,
    *,
    jwt_secret: str,
    access_expires: int = 3600,
    refresh_expires: int = 604800,
    bcrypt_rounds: int = 12,
) -> Services:
    users = UserService(store, bcrypt_rounds=bcrypt_rounds)
    return Services(
        organizations=OrganizationService(store),
        departments=DepartmentService(store),
        staff=StaffService(store),
        statuses=StatusService(store),
        priorities=PriorityService(store),
        complexities=ComplexityService(store),
        projects=ProjectService(store),
        project_status_reports=ProjectStatusReportService(store),
        tasks=TaskService(store),
        task_progress=TaskProgressService(store),
        task_evaluations=TaskEvaluationService(store),
        task_status_reports=TaskStatusReportService(store),
        teams=TeamService(store),
        users=users,
        auth=AuthService(store, users, jwt_secret, access_expires, refresh_expires),
        database=DatabaseService(store),
    )
