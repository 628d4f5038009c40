"""
ProCMS entity store (in-memory).

Provides CRUD operations and queries for every record kind. Nothing is
persisted; a store lives as long as the process that seeded it.
"""
import logging
import re
from typing import List, Optional, Dict, Any, Type

from .schema import (
    Client,
    CommentStatus,
    EODReport,
    Employee,
    Project,
    ProjectStatus,
    Subscription,
    Task,
    TaskComment,
)

logger = logging.getLogger(__name__)

# record type -> table name
TABLES: Dict[Type, str] = {
    Client: "clients",
    Employee: "employees",
    Project: "projects",
    Task: "tasks",
    TaskComment: "comments",
    Subscription: "subscriptions",
    EODReport: "reports",
}


class EntityStore:
    """Dict-backed store keyed by record id, one table per record kind."""

    def __init__(self):
        """Create empty tables. Insertion order is preserved for listings."""
        self._tables: Dict[str, Dict[str, Any]] = {name: {} for name in TABLES.values()}
        self._sequences: Dict[str, int] = {}

    def _table_for(self, record) -> Dict[str, Any]:
        try:
            return self._tables[TABLES[type(record)]]
        except KeyError:
            raise TypeError(f"Unsupported record type: {type(record).__name__}") from None

    def save(self, record) -> bool:
        """Insert or replace a record. Returns True if it was new."""
        table = self._table_for(record)
        is_new = record.id not in table
        table[record.id] = record
        self._bump_sequence(record.id)
        # Replies and columns live inside their parent but share the id space
        for child in getattr(record, "replies", []) + getattr(record, "columns", []):
            self._bump_sequence(child.id)
        return is_new

    def get(self, kind: Type, record_id: str):
        """Retrieve a record of the given type by id, or None."""
        return self._tables[TABLES[kind]].get(record_id)

    def delete(self, kind: Type, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        table = self._tables[TABLES[kind]]
        if record_id not in table:
            return False
        del table[record_id]
        return True

    def list_all(self, kind: Type) -> List[Any]:
        """All records of a kind, in insertion order."""
        return list(self._tables[TABLES[kind]].values())

    # ── typed lookups ────────────────────────────────────────

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.get(Task, task_id)

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.get(Project, project_id)

    def get_comment(self, comment_id: str) -> Optional[TaskComment]:
        return self.get(TaskComment, comment_id)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self.get(Employee, employee_id)

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.get(Client, client_id)

    # ── queries ──────────────────────────────────────────────

    def list_tasks_by_project(self, project_id: str) -> List[Task]:
        """All tasks belonging to a project."""
        return [t for t in self.list_all(Task) if t.project_id == project_id]

    def list_tasks_by_assignee(self, employee_id: str) -> List[Task]:
        return [t for t in self.list_all(Task) if t.assignee_id == employee_id]

    def list_tasks_by_status(self, status: str) -> List[Task]:
        return [t for t in self.list_all(Task) if t.status == status]

    def list_comments_by_task(self, task_id: str) -> List[TaskComment]:
        """Comments on a task, oldest first."""
        comments = [c for c in self.list_all(TaskComment) if c.task_id == task_id]
        return sorted(comments, key=lambda c: c.created_at)

    def list_comments_by_project(self, project_id: str) -> List[TaskComment]:
        comments = [c for c in self.list_all(TaskComment) if c.project_id == project_id]
        return sorted(comments, key=lambda c: c.created_at)

    def list_projects_by_client(self, client_id: str) -> List[Project]:
        return [p for p in self.list_all(Project) if client_id in p.client_ids]

    def list_projects_by_assignee(self, employee_id: str) -> List[Project]:
        """Projects where the employee has at least one task."""
        project_ids = {t.project_id for t in self.list_tasks_by_assignee(employee_id)}
        return [p for p in self.list_all(Project) if p.id in project_ids]

    def list_subscriptions_by_client(self, client_id: str) -> List[Subscription]:
        return [s for s in self.list_all(Subscription) if s.client_id == client_id]

    def list_reports_by_employee(self, employee_id: str) -> List[EODReport]:
        """An employee's EOD reports, newest first."""
        reports = [r for r in self.list_all(EODReport) if r.employee_id == employee_id]
        return sorted(reports, key=lambda r: r.created_at, reverse=True)

    def delete_comments_by_task(self, task_id: str) -> int:
        """Remove every comment on a task. Returns how many were removed."""
        doomed = [c.id for c in self.list_all(TaskComment) if c.task_id == task_id]
        for comment_id in doomed:
            self.delete(TaskComment, comment_id)
        return len(doomed)

    def get_stats(self) -> Dict[str, Any]:
        """Board statistics grouped by task status, priority, and project."""
        stats: Dict[str, Any] = {
            "by_status": {},
            "by_priority": {},
            "by_project": {},
            "pending_comments": 0,
            "active_projects": 0,
            "total": 0,
        }
        for task in self.list_all(Task):
            stats["total"] += 1
            stats["by_status"][task.status] = stats["by_status"].get(task.status, 0) + 1
            key = task.priority.value
            stats["by_priority"][key] = stats["by_priority"].get(key, 0) + 1
            stats["by_project"][task.project_id] = stats["by_project"].get(task.project_id, 0) + 1
        stats["pending_comments"] = sum(
            1 for c in self.list_all(TaskComment) if c.status == CommentStatus.PENDING
        )
        stats["active_projects"] = sum(
            1 for p in self.list_all(Project) if p.status == ProjectStatus.ACTIVE
        )
        return stats

    # ── id allocation ────────────────────────────────────────

    def _bump_sequence(self, record_id: str) -> None:
        match = re.match(r"^(.*)-(\d+)$", record_id)
        if not match:
            return
        prefix, num = match.group(1), int(match.group(2))
        if num > self._sequences.get(prefix, 0):
            self._sequences[prefix] = num

    def next_id(self, prefix: str) -> str:
        """
        Allocate the next id for a prefix (e.g. "task" -> "task-18").

        Numbering continues past the highest id ever saved, so ids of
        deleted records are never handed out again.
        """
        num = self._sequences.get(prefix, 0) + 1
        self._sequences[prefix] = num
        return f"{prefix}-{num}"
