"""
Kanban board controller: columns and task moves for one project.

Task status is a column id. Every write checks the id against the project's
live columns, so a task can never point at a column that does not exist.
Moves are unconstrained otherwise: any column to any column.
"""
import logging
from datetime import date
from typing import List, Optional, Union

from .config import Config
from .events import EventBus
from .schema import KanbanColumn, Priority, Project, Task
from .session import Session
from .store import EntityStore

logger = logging.getLogger(__name__)


class BoardError(Exception):
    """Base class for rejected board operations."""
    pass


class UnknownColumnError(BoardError):
    """Raised when a column id does not name a live column of the board."""
    pass


class LastColumnError(BoardError):
    """Raised when deleting the only remaining column."""
    pass


class TaskNotFound(BoardError):
    """Raised when a task id is not on this board."""
    pass


class KanbanBoard:
    """Owns the columns and task placement of a single project."""

    def __init__(
        self,
        store: EntityStore,
        project_id: str,
        events: Optional[EventBus] = None,
        config: Optional[Config] = None,
    ):
        project = store.get_project(project_id)
        if project is None:
            raise BoardError(f"Project {project_id} not found")
        self.store = store
        self.project_id = project_id
        self.events = events or EventBus()
        self.config = config or Config()

    @property
    def project(self) -> Project:
        return self.store.get_project(self.project_id)

    # ── queries ──────────────────────────────────────────────

    def columns(self) -> List[KanbanColumn]:
        """Columns in display order. Ties keep insertion order."""
        return sorted(self.project.columns, key=lambda c: c.order)

    def column_ids(self) -> List[str]:
        return [c.id for c in self.columns()]

    def has_column(self, column_id: str) -> bool:
        return any(c.id == column_id for c in self.project.columns)

    def require_column(self, column_id: str) -> KanbanColumn:
        for column in self.project.columns:
            if column.id == column_id:
                return column
        raise UnknownColumnError(
            f"Column '{column_id}' does not exist on project {self.project_id}. "
            f"Columns: {self.column_ids()}"
        )

    def tasks(self, column_id: Optional[str] = None) -> List[Task]:
        """Tasks on the board, optionally only those in one column."""
        tasks = self.store.list_tasks_by_project(self.project_id)
        if column_id is not None:
            tasks = [t for t in tasks if t.status == column_id]
        return tasks

    def get_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None or task.project_id != self.project_id:
            raise TaskNotFound(f"Task {task_id} not found on project {self.project_id}")
        return task

    def request_column(self) -> str:
        """Column that receives tasks generated from approved comments."""
        if self.has_column(self.config.request_column):
            return self.config.request_column
        columns = self.columns()
        return columns[0].id if columns else self.config.fallback_column

    # ── columns ──────────────────────────────────────────────

    def add_column(self, session: Session, title: str, color: str = "#3B82F6") -> KanbanColumn:
        """Append a column at the end of the board."""
        session.require_board_manager("add columns")
        title = (title or "").strip()
        if not title:
            raise BoardError("Column title required")

        project = self.project
        column = KanbanColumn(
            id=self.store.next_id("col"),
            title=title,
            color=color,
            order=len(project.columns),
        )
        project.columns.append(column)
        logger.info(f"[BOARD] {project.id}: added column {column.id} '{title}'")
        self.events.emit("column_added", project_id=project.id, column_id=column.id)
        return column

    def delete_column(self, session: Session, column_id: str) -> int:
        """
        Remove a column and move its tasks to the new first column.

        Returns the number of tasks reassigned.
        Raises LastColumnError if the column is the only one left.
        """
        session.require_board_manager("delete columns")
        self.require_column(column_id)
        project = self.project
        if len(project.columns) <= 1:
            raise LastColumnError(f"Cannot delete the last column of project {project.id}")

        project.columns = [c for c in project.columns if c.id != column_id]
        remaining = self.columns()
        target = remaining[0].id if remaining else self.config.fallback_column

        moved = 0
        for task in self.tasks(column_id):
            task.status = target
            moved += 1

        logger.info(
            f"[BOARD] {project.id}: deleted column {column_id}, "
            f"{moved} task(s) moved to {target}"
        )
        self.events.emit(
            "column_deleted", project_id=project.id, column_id=column_id,
            reassigned_to=target, moved=moved,
        )
        return moved

    # ── tasks ────────────────────────────────────────────────

    def add_task(
        self,
        session: Session,
        title: str,
        column_id: str,
        description: str = "",
        priority: Union[Priority, str] = Priority.MEDIUM,
        assignee_id: str = "",
        due_date: Optional[date] = None,
        tags: Optional[List[str]] = None,
    ) -> Task:
        """Create a task in the column the user added it from."""
        session.require_board_manager("add tasks")
        title = (title or "").strip()
        if not title:
            raise BoardError("Task title required")
        if isinstance(priority, str):
            priority = Priority.from_str(priority)

        task = Task(
            id=self.store.next_id("task"),
            title=title,
            project_id=self.project_id,
            description=description,
            status=column_id,
            priority=priority,
            assignee_id=assignee_id,
            due_date=due_date,
            tags=[t.strip() for t in (tags or []) if t and t.strip()],
        )
        return self.insert_task(task)

    def insert_task(self, task: Task) -> Task:
        """
        Put an already-built task on the board.

        Callers are responsible for capability checks; the status must
        still name a live column.
        """
        self.require_column(task.status)
        task.project_id = self.project_id
        self.store.save(task)
        logger.info(f"[BOARD] {self.project_id}: added {task.id} to {task.status}")
        self.events.emit("task_added", project_id=self.project_id, task_id=task.id, status=task.status)
        return task

    def delete_task(self, session: Session, task_id: str) -> int:
        """
        Delete a task and every comment attached to it.

        Returns the number of comments removed.
        """
        session.require_board_manager("delete tasks")
        task = self.get_task(task_id)
        removed = self.store.delete_comments_by_task(task.id)
        self.store.delete(Task, task.id)
        logger.info(f"[BOARD] {self.project_id}: deleted {task.id} and {removed} comment(s)")
        self.events.emit(
            "task_deleted", project_id=self.project_id, task_id=task.id, comments_removed=removed,
        )
        return removed

    def move_task(self, session: Session, task_id: str, target_column_id: str) -> bool:
        """
        Move a task to another column. Returns True if the status changed.

        Raises UnknownColumnError (task untouched) for a dead column id.
        """
        session.require_moderator("move tasks")
        task = self.get_task(task_id)
        self.require_column(target_column_id)
        if task.status == target_column_id:
            return False

        previous = task.status
        task.status = target_column_id
        logger.info(f"[BOARD] {task.id}: {previous} -> {target_column_id} by {session.user_id}")
        self.events.emit(
            "task_moved", project_id=self.project_id, task_id=task.id,
            from_status=previous, to_status=target_column_id, actor=session.user_id,
        )
        return True

    def begin_drag(self, session: Session, task_id: str) -> "DragGesture":
        """Start a drag of one task. The gesture must be dropped or cancelled."""
        session.require_moderator("move tasks")
        self.get_task(task_id)
        return DragGesture(self, session, task_id)


class DragGesture:
    """
    One drag-and-drop interaction.

    Holds the dragged task id between drag start and drop. Both drop() and
    cancel() close the gesture; a closed gesture moves nothing.

        with board.begin_drag(session, "task-3") as drag:
            drag.drop("review")
    """

    def __init__(self, board: KanbanBoard, session: Session, task_id: str):
        self.board = board
        self.session = session
        self.task_id: Optional[str] = task_id

    @property
    def active(self) -> bool:
        return self.task_id is not None

    def drop(self, column_id: str) -> bool:
        """Apply the move. Returns True if the task changed column."""
        if self.task_id is None:
            return False
        task_id, self.task_id = self.task_id, None
        return self.board.move_task(self.session, task_id, column_id)

    def cancel(self) -> None:
        """Abandon the drag (dropped outside any column)."""
        if self.task_id is not None:
            logger.debug(f"[BOARD] drag of {self.task_id} cancelled")
        self.task_id = None

    def __enter__(self) -> "DragGesture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
