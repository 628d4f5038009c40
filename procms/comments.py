"""
Comment/approval engine: task comment threads and client requests.

Anyone who can see a project may comment on its tasks and reply to
comments. Moderators (employees and admins) approve a pending comment,
which turns it into a new task on the project board, or reject it with a
reason. Both outcomes are final.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional

from .board import KanbanBoard, TaskNotFound
from .config import Config
from .events import EventBus
from .schema import (
    CommentStatus,
    Employee,
    Priority,
    Role,
    Task,
    TaskComment,
    TaskCommentReply,
)
from .session import PermissionDenied, Session
from .store import EntityStore

logger = logging.getLogger(__name__)


class CommentNotFound(Exception):
    """Raised when a comment id is unknown."""
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CommentEngine:
    """Owns comment threads for every project in a store."""

    def __init__(
        self,
        store: EntityStore,
        events: Optional[EventBus] = None,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.events = events or EventBus()
        self.config = config or Config()
        self.clock = clock
        self._boards: Dict[str, KanbanBoard] = {}

    def board_for(self, project_id: str) -> KanbanBoard:
        """The board approved requests are added to, shared per project."""
        if project_id not in self._boards:
            self._boards[project_id] = KanbanBoard(self.store, project_id, self.events, self.config)
        return self._boards[project_id]

    def _require_comment(self, comment_id: str) -> TaskComment:
        comment = self.store.get_comment(comment_id)
        if comment is None:
            raise CommentNotFound(f"Comment {comment_id} not found")
        return comment

    def _require_moderator_for(self, session: Session, comment: TaskComment, action: str) -> None:
        """Admins moderate everywhere; employees only on projects they have tasks in."""
        session.require_moderator(action)
        if session.role != Role.EMPLOYEE:
            return
        assigned = {p.id for p in self.store.list_projects_by_assignee(session.user_id)}
        if comment.project_id not in assigned:
            raise PermissionDenied(
                f"Employee {session.user_id} is not assigned to project {comment.project_id}"
            )

    # ── threads ──────────────────────────────────────────────

    def thread(self, task_id: str) -> List[TaskComment]:
        """Comments on a task, oldest first."""
        return self.store.list_comments_by_task(task_id)

    def comment_count(self, task_id: str) -> int:
        return len(self.thread(task_id))

    def pending_count(self, task_id: str) -> int:
        return sum(1 for c in self.thread(task_id) if c.status == CommentStatus.PENDING)

    def add_comment(
        self,
        session: Session,
        task_id: str,
        content: str,
        images: Iterable[str] = (),
    ) -> Optional[TaskComment]:
        """
        Post a comment on a task.

        Returns None without recording anything when there is neither text
        nor an image.
        """
        task = self.store.get_task(task_id)
        if task is None:
            raise TaskNotFound(f"Task {task_id} not found")
        session.require_project_access(self.store.get_project(task.project_id))

        content = (content or "").strip()
        images = [img for img in images if img]
        if not content and not images:
            logger.info(f"Ignoring empty comment on {task_id} from {session.user_id}")
            return None

        comment = TaskComment(
            id=self.store.next_id("comment"),
            task_id=task.id,
            project_id=task.project_id,
            author_id=session.user_id,
            author_type=session.role,
            author_name=session.display_name,
            content=content,
            images=images,
            created_at=self.clock(),
        )
        self.store.save(comment)
        logger.info(f"[COMMENT] {comment.id} on {task.id} by {session.role.value}:{session.user_id}")
        self.events.emit("comment_added", comment_id=comment.id, task_id=task.id)
        return comment

    def add_reply(self, session: Session, comment_id: str, content: str) -> Optional[TaskCommentReply]:
        """Append a reply. Allowed at any comment status; blank replies are ignored."""
        comment = self._require_comment(comment_id)
        session.require_project_access(self.store.get_project(comment.project_id))

        content = (content or "").strip()
        if not content:
            return None

        reply = TaskCommentReply(
            id=self.store.next_id("reply"),
            author_id=session.user_id,
            author_type=session.role,
            author_name=session.display_name,
            content=content,
            created_at=self.clock(),
        )
        comment.add_reply(reply)
        self.events.emit("reply_added", comment_id=comment.id, reply_id=reply.id)
        return reply

    # ── moderation ───────────────────────────────────────────

    def approve(self, session: Session, comment_id: str) -> Optional[Task]:
        """
        Approve a pending comment and create a task from it.

        Returns the generated task, or None if the comment was already
        approved or rejected (nothing is created in that case).
        """
        comment = self._require_comment(comment_id)
        self._require_moderator_for(session, comment, "approve comments")
        if not comment.is_pending:
            logger.warning(
                f"Approve ignored: {comment.id} is already {comment.status.value}"
            )
            return None

        board = self.board_for(comment.project_id)
        task = self._task_from_comment(comment, board, session)
        board.insert_task(task)

        comment.transition_to(CommentStatus.APPROVED, actor_id=session.user_id)
        comment.generated_task_id = task.id
        logger.info(f"[COMMENT] {comment.id} approved by {session.user_id} -> {task.id}")
        self.events.emit("comment_approved", comment_id=comment.id, task_id=task.id)
        return task

    def reject(self, session: Session, comment_id: str, reason: str) -> bool:
        """Reject a pending comment. A non-blank reason is required."""
        comment = self._require_comment(comment_id)
        self._require_moderator_for(session, comment, "reject comments")

        reason = (reason or "").strip()
        if not reason:
            logger.info(f"Reject ignored: no reason given for {comment.id}")
            return False
        if not comment.transition_to(CommentStatus.REJECTED, actor_id=session.user_id, reason=reason):
            logger.warning(f"Reject ignored: {comment.id} is already {comment.status.value}")
            return False

        logger.info(f"[COMMENT] {comment.id} rejected by {session.user_id}: {reason}")
        self.events.emit("comment_rejected", comment_id=comment.id, reason=reason)
        return True

    # ── task generation ──────────────────────────────────────

    def request_title(self, content: str) -> str:
        cfg = self.config
        return f"{cfg.request_title_prefix}{content[:cfg.request_title_chars]}..."

    def _default_assignee(self, session: Session) -> str:
        if session.role == Role.EMPLOYEE:
            return session.user_id
        if self.config.default_assignee and self.store.get_employee(self.config.default_assignee):
            return self.config.default_assignee
        employees = self.store.list_all(Employee)
        return employees[0].id if employees else ""

    def _task_from_comment(self, comment: TaskComment, board: KanbanBoard, session: Session) -> Task:
        today = self.clock().date()
        return Task(
            id=self.store.next_id("task"),
            title=self.request_title(comment.content),
            project_id=comment.project_id,
            description=comment.content,
            status=board.request_column(),
            priority=Priority.from_str(self.config.request_priority),
            assignee_id=self._default_assignee(session),
            due_date=today + timedelta(days=self.config.request_due_days),
            created_at=today,
            tags=[self.config.request_tag],
        )
