"""
Role-scoped views: dashboard numbers, the search filters, and plain-text
renderings of boards and comment threads for each portal.
"""
from typing import Any, Dict, Iterable, List, Optional

from .board import KanbanBoard
from .comments import CommentEngine
from .schema import (
    Client,
    CommentStatus,
    Employee,
    Project,
    ProjectStatus,
    Role,
    Subscription,
    Task,
)
from .session import PermissionDenied, Session
from .store import EntityStore

STATUS_EMOJI = {
    CommentStatus.PENDING: "⏳",
    CommentStatus.APPROVED: "✅",
    CommentStatus.REJECTED: "❌",
}


def filter_tasks(
    tasks: Iterable[Task],
    search: str = "",
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assignee_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> List[Task]:
    """Tasks page filter. Search matches title or description, case-insensitive."""
    needle = search.strip().lower()
    result = []
    for task in tasks:
        if needle and needle not in task.title.lower() and needle not in task.description.lower():
            continue
        if status and task.status != status:
            continue
        if priority and task.priority.value != priority.lower():
            continue
        if assignee_id and task.assignee_id != assignee_id:
            continue
        if project_id and task.project_id != project_id:
            continue
        result.append(task)
    return result


def _matches(needle: str, *values: str) -> bool:
    return not needle or any(needle in (v or "").lower() for v in values)


def filter_projects(
    projects: Iterable[Project],
    search: str = "",
    status: Optional[str] = None,
) -> List[Project]:
    """Projects page filter: name or description, plus status ("all" = any)."""
    needle = search.strip().lower()
    return [
        p for p in projects
        if _matches(needle, p.name, p.description)
        and (not status or status == "all" or p.status.value == status)
    ]


def filter_clients(
    clients: Iterable[Client],
    search: str = "",
    status: Optional[str] = None,
) -> List[Client]:
    """Clients page filter: name, company or email, plus status."""
    needle = search.strip().lower()
    return [
        c for c in clients
        if _matches(needle, c.name, c.company, c.email)
        and (not status or status == "all" or c.status == status)
    ]


def filter_employees(
    employees: Iterable[Employee],
    search: str = "",
    department: Optional[str] = None,
) -> List[Employee]:
    """Employees page filter: name, job role or email, plus department."""
    needle = search.strip().lower()
    return [
        e for e in employees
        if _matches(needle, e.name, e.role, e.email)
        and (not department or department == "all" or e.department == department)
    ]


def project_progress(store: EntityStore, project: Project) -> Dict[str, int]:
    """Done/total task counts for a project."""
    tasks = store.list_tasks_by_project(project.id)
    done = sum(1 for t in tasks if t.status == "done")
    percent = round(done / len(tasks) * 100) if tasks else 0
    return {"done": done, "total": len(tasks), "percent": percent}


# ── dashboards ───────────────────────────────────────────────


def admin_dashboard(store: EntityStore, session: Session) -> Dict[str, Any]:
    if session.role != Role.ADMIN:
        raise PermissionDenied("Admin dashboard requires the admin role")

    tasks = store.list_all(Task)
    subscriptions = store.list_all(Subscription)
    workload = {}
    for employee in store.list_all(Employee):
        mine = [t for t in tasks if t.assignee_id == employee.id]
        workload[employee.id] = {
            "name": employee.name,
            "total": len(mine),
            "active": sum(1 for t in mine if t.status != "done"),
        }
    return {
        "active_projects": sum(1 for p in store.list_all(Project) if p.status == ProjectStatus.ACTIVE),
        "clients": len(store.list_all(Client)),
        "total_tasks": len(tasks),
        "in_progress": sum(1 for t in tasks if t.status == "in-progress"),
        "done": sum(1 for t in tasks if t.status == "done"),
        "pending_comments": store.get_stats()["pending_comments"],
        "workload": workload,
        "revenue_collected": sum(s.amount_paid for s in subscriptions),
        "revenue_outstanding": sum(s.outstanding for s in subscriptions),
    }


def employee_dashboard(store: EntityStore, session: Session) -> Dict[str, Any]:
    if session.role != Role.EMPLOYEE:
        raise PermissionDenied("Employee dashboard requires the employee role")

    my_tasks = store.list_tasks_by_assignee(session.user_id)
    return {
        "my_tasks": [t for t in my_tasks if t.status != "done"],
        "completed": sum(1 for t in my_tasks if t.status == "done"),
        "in_progress": sum(1 for t in my_tasks if t.status == "in-progress"),
        "projects": store.list_projects_by_assignee(session.user_id),
        "reports": store.list_reports_by_employee(session.user_id),
    }


def client_dashboard(store: EntityStore, session: Session) -> Dict[str, Any]:
    if session.role != Role.CLIENT:
        raise PermissionDenied("Client dashboard requires the client role")

    projects = store.list_projects_by_client(session.user_id)
    subscriptions = store.list_subscriptions_by_client(session.user_id)
    tasks = [t for p in projects for t in store.list_tasks_by_project(p.id)]
    return {
        "projects": [
            {"id": p.id, "name": p.name, "status": p.status.value, **project_progress(store, p)}
            for p in projects
        ],
        "completed_tasks": sum(1 for t in tasks if t.status == "done"),
        "total_tasks": len(tasks),
        "active_subscriptions": [s for s in subscriptions if s.status == "active"],
        "total_paid": sum(s.amount_paid for s in subscriptions),
        "total_outstanding": sum(s.outstanding for s in subscriptions),
    }


def dashboard(store: EntityStore, session: Session) -> Dict[str, Any]:
    """The dashboard for whichever portal the session belongs to."""
    return {
        Role.ADMIN: admin_dashboard,
        Role.EMPLOYEE: employee_dashboard,
        Role.CLIENT: client_dashboard,
    }[session.role](store, session)


# ── text renderings ──────────────────────────────────────────


def render_board(board: KanbanBoard, engine: Optional[CommentEngine] = None) -> str:
    """Format a board column by column, with comment counts when available."""
    project = board.project
    lines = [f"📋 {project.name} ({len(board.tasks())} tasks)"]
    for column in board.columns():
        tasks = board.tasks(column.id)
        lines.append(f"── {column.title} [{column.id}] ({len(tasks)})")
        for task in tasks:
            line = f"  • {task.id}: {task.title} ({task.priority.value})"
            if engine is not None:
                count = engine.comment_count(task.id)
                pending = engine.pending_count(task.id)
                if count:
                    line += f" 💬{count}"
                if pending:
                    line += f" ⏳{pending}"
            lines.append(line)
    return "\n".join(lines)


def render_thread(engine: CommentEngine, task: Task, session: Session) -> str:
    """Format a task's comment thread. Moderation hints only show for moderators."""
    comments = engine.thread(task.id)
    lines = [f"🎯 {task.id}: {task.title}", f"Comments ({len(comments)})"]
    if not comments:
        lines.append("No comments yet")
    for comment in comments:
        emoji = STATUS_EMOJI.get(comment.status, "❓")
        lines.append(
            f"{emoji} {comment.id} {comment.author_name} ({comment.author_type.value}) "
            f"[{comment.status.value}]: {comment.content}"
        )
        if comment.images:
            lines.append(f"    🖼️ {len(comment.images)} attachment(s)")
        if comment.status == CommentStatus.REJECTED and comment.rejection_reason:
            lines.append(f"    Rejection Reason: {comment.rejection_reason}")
        for reply in comment.replies:
            lines.append(f"    ↳ {reply.author_name}: {reply.content}")
        if session.can_moderate and comment.is_pending:
            lines.append(f"    actions: approve {comment.id} | reject {comment.id} <reason>")
    return "\n".join(lines)
