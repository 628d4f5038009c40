"""
Admin directory: creating projects, clients and employees.

New records start empty: projects at 0% progress with the default columns,
clients active with zero totals, employees available with zero task counts.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from .events import EventBus
from .schema import Client, Employee, Project, ProjectStatus, default_columns
from .session import Session
from .store import EntityStore

logger = logging.getLogger(__name__)

# Due date of a new project when none is given
DEFAULT_PROJECT_DAYS = 90


def _required(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} required")
    return value


class Directory:
    """Admin-only creation of the records the boards hang off."""

    def __init__(
        self,
        store: EntityStore,
        events: Optional[EventBus] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.events = events or EventBus()
        self.clock = clock

    def add_project(
        self,
        session: Session,
        name: str,
        description: str = "",
        client_ids: Iterable[str] = (),
        status: str = "active",
        start_date: Optional[date] = None,
        due_date: Optional[date] = None,
        budget: float = 0,
    ) -> Project:
        """Create a project with a fresh copy of the default columns."""
        session.require_board_manager("add projects")
        name = _required(name, "Project name")
        client_ids = list(client_ids)
        unknown = [cid for cid in client_ids if self.store.get_client(cid) is None]
        if unknown:
            raise ValueError(f"Unknown clients: {unknown}")

        today = self.clock().date()
        project = Project(
            id=self.store.next_id("proj"),
            name=name,
            description=description.strip(),
            client_ids=client_ids,
            status=ProjectStatus.from_str(status),
            progress=0,
            start_date=start_date or today,
            due_date=due_date or today + timedelta(days=DEFAULT_PROJECT_DAYS),
            budget=budget,
            columns=default_columns(),
        )
        self.store.save(project)
        logger.info(f"[DIRECTORY] added project {project.id} '{name}'")
        self.events.emit("project_added", project_id=project.id)
        return project

    def add_client(
        self,
        session: Session,
        name: str,
        company: str = "",
        email: str = "",
        phone: str = "",
        industry: str = "",
        address: str = "",
    ) -> Client:
        session.require_board_manager("add clients")
        client = Client(
            id=self.store.next_id("client"),
            name=_required(name, "Client name"),
            company=company.strip(),
            email=email.strip(),
            phone=phone.strip(),
            status="active",
            industry=industry.strip(),
            address=address.strip(),
            created_at=self.clock().date(),
            total_projects=0,
            total_revenue=0,
        )
        self.store.save(client)
        logger.info(f"[DIRECTORY] added client {client.id} '{client.name}'")
        self.events.emit("client_added", client_id=client.id)
        return client

    def add_employee(
        self,
        session: Session,
        name: str,
        email: str = "",
        role: str = "",
        department: str = "",
    ) -> Employee:
        session.require_board_manager("add employees")
        employee = Employee(
            id=self.store.next_id("emp"),
            name=_required(name, "Employee name"),
            email=email.strip(),
            role=role.strip(),
            department=department.strip(),
            status="available",
            tasks_assigned=0,
            tasks_completed=0,
        )
        self.store.save(employee)
        logger.info(f"[DIRECTORY] added employee {employee.id} '{employee.name}'")
        self.events.emit("employee_added", employee_id=employee.id)
        return employee
