"""
Viewer sessions and capability gates.

- Admin:    manages boards and columns, moderates comments, sees everything
- Employee: moves tasks, moderates comments, files EOD reports
- Client:   read-only board for own projects, may comment and reply
"""
from dataclasses import dataclass

from .schema import Role, Project


class PermissionDenied(Exception):
    """Raised when a viewer's role does not allow an operation."""
    pass


@dataclass(frozen=True)
class Session:
    """Who is acting. Passed explicitly into every controller call."""
    role: Role
    user_id: str
    display_name: str = ""

    @property
    def can_moderate(self) -> bool:
        return self.role in (Role.ADMIN, Role.EMPLOYEE)

    @property
    def can_manage_board(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def admin(cls, user_id: str = "admin", display_name: str = "Admin") -> "Session":
        return cls(role=Role.ADMIN, user_id=user_id, display_name=display_name)

    @classmethod
    def for_employee(cls, store, employee_id: str) -> "Session":
        """Build a session from an Employee record in the store."""
        employee = store.get_employee(employee_id)
        if employee is None:
            raise PermissionDenied(f"Unknown employee: {employee_id}")
        return cls(role=Role.EMPLOYEE, user_id=employee.id, display_name=employee.name)

    @classmethod
    def for_client(cls, store, client_id: str) -> "Session":
        """Build a session from a Client record in the store."""
        client = store.get_client(client_id)
        if client is None:
            raise PermissionDenied(f"Unknown client: {client_id}")
        return cls(role=Role.CLIENT, user_id=client.id, display_name=client.name)

    def require_moderator(self, action: str = "moderate comments") -> None:
        if not self.can_moderate:
            raise PermissionDenied(
                f"{self.role.value} '{self.user_id}' may not {action}. "
                "Only employees and admins can."
            )

    def require_board_manager(self, action: str = "manage the board") -> None:
        if not self.can_manage_board:
            raise PermissionDenied(
                f"{self.role.value} '{self.user_id}' may not {action}. Admin only."
            )

    def can_view(self, project: Project) -> bool:
        """Clients only see projects they belong to; staff see all."""
        if self.role == Role.CLIENT:
            return self.user_id in project.client_ids
        return True

    def require_project_access(self, project: Project) -> None:
        if not self.can_view(project):
            raise PermissionDenied(
                f"Client '{self.user_id}' has no access to project {project.id}"
            )
