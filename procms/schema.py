"""
ProCMS record schema and comment state machine.

Comment lifecycle:
  Pending → Approved   (moderator accepts; a task is generated)
  Pending → Rejected   (moderator declines with a reason)

Approved and Rejected are terminal. Task status is a column id, not an enum:
each project defines its own columns.
"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, List, Dict, Any


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif not value:
        return datetime.now(timezone.utc)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # YAML and ISO strings without an offset are taken as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class Priority(Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_str(cls, value: str) -> "Priority":
        try:
            return cls[str(value).upper()]
        except KeyError:
            return cls.MEDIUM


class Role(Enum):
    """Viewer roles. Also used as a comment's author type."""
    ADMIN = "admin"
    EMPLOYEE = "employee"
    CLIENT = "client"

    @classmethod
    def from_str(cls, value: str) -> "Role":
        try:
            return cls[str(value).upper()]
        except KeyError:
            return cls.CLIENT


class CommentStatus(Enum):
    """Moderation states of a task comment."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def from_str(cls, value: str) -> "CommentStatus":
        try:
            return cls[str(value).upper()]
        except KeyError:
            return cls.PENDING


class ProjectStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"

    @classmethod
    def from_str(cls, value: str) -> "ProjectStatus":
        for member in cls:
            if member.value == value:
                return member
        return cls.ACTIVE


# Allowed comment transitions; terminal states map to nothing.
COMMENT_TRANSITIONS = {
    CommentStatus.PENDING: [CommentStatus.APPROVED, CommentStatus.REJECTED],
    CommentStatus.APPROVED: [],
    CommentStatus.REJECTED: [],
}


@dataclass
class StatusTransition:
    """One recorded comment status change."""
    from_status: CommentStatus
    to_status: CommentStatus
    actor_id: Optional[str] = None
    reason: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "actor_id": self.actor_id or "",
            "reason": self.reason or "",
            "timestamp": self.timestamp,
        }


@dataclass
class KanbanColumn:
    """A named bucket a task's status can reference."""
    id: str
    title: str
    color: str = "#3B82F6"
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "color": self.color, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KanbanColumn":
        return cls(
            id=data["id"],
            title=data.get("title", data["id"]),
            color=data.get("color", "#3B82F6"),
            order=int(data.get("order", 0)),
        )


DEFAULT_COLUMNS: List[Dict[str, Any]] = [
    {"id": "backlog", "title": "Backlog", "color": "#6B7280", "order": 0},
    {"id": "todo", "title": "To Do", "color": "#3B82F6", "order": 1},
    {"id": "in-progress", "title": "In Progress", "color": "#F59E0B", "order": 2},
    {"id": "review", "title": "Review", "color": "#8B5CF6", "order": 3},
    {"id": "done", "title": "Done", "color": "#10B981", "order": 4},
]


def default_columns() -> List[KanbanColumn]:
    """Fresh copies of the standard five-column layout."""
    return [KanbanColumn.from_dict(c) for c in DEFAULT_COLUMNS]


@dataclass
class Task:
    """A card on a project's Kanban board."""

    id: str
    title: str
    project_id: str
    description: str = ""
    status: str = "backlog"            # column id within the project
    priority: Priority = Priority.MEDIUM
    assignee_id: str = ""
    due_date: Optional[date] = None
    created_at: date = field(default_factory=date.today)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority.value,
            "assignee_id": self.assignee_id,
            "project_id": self.project_id,
            "due_date": _iso(self.due_date),
            "created_at": _iso(self.created_at),
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            project_id=data.get("project_id", ""),
            description=data.get("description", ""),
            status=data.get("status", "backlog"),
            priority=Priority.from_str(data.get("priority", "medium")),
            assignee_id=data.get("assignee_id", ""),
            due_date=_parse_date(data.get("due_date")),
            created_at=_parse_date(data.get("created_at")) or date.today(),
            tags=list(data.get("tags", [])),
        )


@dataclass
class TaskCommentReply:
    """A reply in a comment thread. Replies are never edited or removed."""
    id: str
    author_id: str
    author_type: Role
    author_name: str
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "author_type": self.author_type.value,
            "author_name": self.author_name,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskCommentReply":
        return cls(
            id=data["id"],
            author_id=data.get("author_id", ""),
            author_type=Role.from_str(data.get("author_type", "client")),
            author_name=data.get("author_name", ""),
            content=data.get("content", ""),
            created_at=_parse_datetime(data.get("created_at")),
        )


@dataclass
class TaskComment:
    """A comment or request posted against a task."""

    id: str
    task_id: str
    project_id: str
    author_id: str
    author_type: Role
    author_name: str
    content: str = ""
    images: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: CommentStatus = CommentStatus.PENDING
    rejection_reason: Optional[str] = None
    replies: List[TaskCommentReply] = field(default_factory=list)
    generated_task_id: Optional[str] = None
    status_history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return self.status == CommentStatus.PENDING

    def transition_to(
        self,
        new_status: CommentStatus,
        actor_id: str = "",
        reason: str = "",
    ) -> bool:
        """Attempt a status transition. Returns True if successful."""
        if new_status not in COMMENT_TRANSITIONS.get(self.status, []):
            return False

        t = StatusTransition(
            from_status=self.status,
            to_status=new_status,
            actor_id=actor_id or None,
            reason=reason or None,
        )
        self.status_history.append(t.to_dict())
        self.status = new_status
        if new_status == CommentStatus.REJECTED:
            self.rejection_reason = reason
        return True

    def add_reply(self, reply: TaskCommentReply) -> None:
        self.replies.append(reply)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict, preserving replies and status history."""
        return {
            "id": self.id,
            "task_id": self.task_id,
            "project_id": self.project_id,
            "author_id": self.author_id,
            "author_type": self.author_type.value,
            "author_name": self.author_name,
            "content": self.content,
            "images": list(self.images),
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "rejection_reason": self.rejection_reason,
            "replies": [r.to_dict() for r in self.replies],
            "generated_task_id": self.generated_task_id,
            "status_history": list(self.status_history),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskComment":
        return cls(
            id=data["id"],
            task_id=data.get("task_id", ""),
            project_id=data.get("project_id", ""),
            author_id=data.get("author_id", ""),
            author_type=Role.from_str(data.get("author_type", "client")),
            author_name=data.get("author_name", ""),
            content=data.get("content", ""),
            images=list(data.get("images", [])),
            created_at=_parse_datetime(data.get("created_at")),
            status=CommentStatus.from_str(data.get("status", "pending")),
            rejection_reason=data.get("rejection_reason"),
            replies=[TaskCommentReply.from_dict(r) for r in data.get("replies", [])],
            generated_task_id=data.get("generated_task_id"),
            status_history=list(data.get("status_history", [])),
        )


@dataclass
class Project:
    """A client engagement with its own Kanban columns."""
    id: str
    name: str
    description: str = ""
    client_ids: List[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.ACTIVE
    progress: int = 0
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    budget: float = 0
    columns: List[KanbanColumn] = field(default_factory=default_columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "client_ids": list(self.client_ids),
            "status": self.status.value,
            "progress": self.progress,
            "start_date": _iso(self.start_date),
            "due_date": _iso(self.due_date),
            "budget": self.budget,
            "columns": [c.to_dict() for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        # Older records carry a single client_id
        client_ids = data.get("client_ids")
        if client_ids is None:
            client_ids = [data["client_id"]] if data.get("client_id") else []
        columns = data.get("columns")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            client_ids=list(client_ids),
            status=ProjectStatus.from_str(data.get("status", "active")),
            progress=int(data.get("progress", 0)),
            start_date=_parse_date(data.get("start_date")),
            due_date=_parse_date(data.get("due_date")),
            budget=data.get("budget", 0),
            columns=[KanbanColumn.from_dict(c) for c in columns] if columns else default_columns(),
        )


@dataclass
class Client:
    id: str
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""
    status: str = "active"             # "active", "inactive"
    industry: str = ""
    address: str = ""
    created_at: Optional[date] = None
    total_projects: int = 0
    total_revenue: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "status": self.status,
            "industry": self.industry,
            "address": self.address,
            "created_at": _iso(self.created_at),
            "total_projects": self.total_projects,
            "total_revenue": self.total_revenue,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Client":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            company=data.get("company", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            status=data.get("status", "active"),
            industry=data.get("industry", ""),
            address=data.get("address", ""),
            created_at=_parse_date(data.get("created_at")),
            total_projects=int(data.get("total_projects", 0)),
            total_revenue=data.get("total_revenue", 0),
        )


@dataclass
class Employee:
    id: str
    name: str
    email: str = ""
    role: str = ""                     # job title, not the viewer Role
    department: str = ""
    status: str = "available"          # "available", "busy", "away", "offline"
    tasks_assigned: int = 0
    tasks_completed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "status": self.status,
            "tasks_assigned": self.tasks_assigned,
            "tasks_completed": self.tasks_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Employee":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=data.get("role", ""),
            department=data.get("department", ""),
            status=data.get("status", "available"),
            tasks_assigned=int(data.get("tasks_assigned", 0)),
            tasks_completed=int(data.get("tasks_completed", 0)),
        )


@dataclass
class Milestone:
    """A partial-payment installment of a milestone subscription."""
    name: str
    percentage: float
    amount: float
    status: str = "upcoming"           # "paid", "pending", "upcoming"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "percentage": self.percentage,
            "amount": self.amount,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        return cls(
            name=data.get("name", ""),
            percentage=data.get("percentage", 0),
            amount=data.get("amount", 0),
            status=data.get("status", "upcoming"),
        )


@dataclass
class Subscription:
    id: str
    client_id: str
    name: str
    billing_type: str = "monthly"      # "monthly", "hourly", "one-time", "milestone"
    status: str = "active"             # "active", "paused", "completed"
    total_value: float = 0
    amount_paid: float = 0
    project_id: Optional[str] = None
    notes: str = ""
    milestones: List[Milestone] = field(default_factory=list)

    @property
    def outstanding(self) -> float:
        return self.total_value - self.amount_paid

    @property
    def paid_percent(self) -> int:
        if self.total_value <= 0:
            return 0
        return round(self.amount_paid / self.total_value * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "name": self.name,
            "billing_type": self.billing_type,
            "status": self.status,
            "total_value": self.total_value,
            "amount_paid": self.amount_paid,
            "project_id": self.project_id,
            "notes": self.notes,
            "milestones": [m.to_dict() for m in self.milestones],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        return cls(
            id=data["id"],
            client_id=data.get("client_id", ""),
            name=data.get("name", ""),
            billing_type=data.get("billing_type", "monthly"),
            status=data.get("status", "active"),
            total_value=data.get("total_value", 0),
            amount_paid=data.get("amount_paid", 0),
            project_id=data.get("project_id"),
            notes=data.get("notes", ""),
            milestones=[Milestone.from_dict(m) for m in data.get("milestones", [])],
        )


@dataclass
class EODReport:
    """An employee's end-of-day report for one project."""
    id: str
    employee_id: str
    project_id: str
    content: str
    report_date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "project_id": self.project_id,
            "date": self.report_date.isoformat(),
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EODReport":
        return cls(
            id=data["id"],
            employee_id=data.get("employee_id", ""),
            project_id=data.get("project_id", ""),
            content=data.get("content", ""),
            report_date=_parse_date(data.get("date")) or date.today(),
            created_at=_parse_datetime(data.get("created_at")),
        )
