"""
Tests for ProCMS records: enums, comment transitions, serialization.
"""
from datetime import date, datetime, timezone

from procms.schema import (
    CommentStatus,
    EODReport,
    KanbanColumn,
    Priority,
    Project,
    ProjectStatus,
    Role,
    Subscription,
    Task,
    TaskComment,
    TaskCommentReply,
    default_columns,
)


def _comment(**kwargs):
    defaults = dict(
        id="comment-9",
        task_id="task-1",
        project_id="proj-1",
        author_id="client-1",
        author_type=Role.CLIENT,
        author_name="James Mitchell",
        content="Please add a wishlist",
    )
    defaults.update(kwargs)
    return TaskComment(**defaults)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Enum Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_priority_from_str():
    """Test priority parsing with a medium fallback"""
    assert Priority.from_str("urgent") == Priority.URGENT
    assert Priority.from_str("HIGH") == Priority.HIGH
    assert Priority.from_str("whenever") == Priority.MEDIUM


def test_role_and_project_status_from_str():
    """Test role fallback and hyphenated project statuses"""
    assert Role.from_str("employee") == Role.EMPLOYEE
    assert Role.from_str("stranger") == Role.CLIENT
    assert ProjectStatus.from_str("on-hold") == ProjectStatus.ON_HOLD
    assert ProjectStatus.from_str("archived") == ProjectStatus.ACTIVE


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Comment Transition Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_comment_starts_pending():
    """Test a new comment is pending with no history"""
    comment = _comment()
    assert comment.status == CommentStatus.PENDING
    assert comment.is_pending
    assert comment.status_history == []
    assert comment.generated_task_id is None


def test_approve_is_terminal():
    """Test approved comments cannot move again"""
    comment = _comment()
    assert comment.transition_to(CommentStatus.APPROVED, actor_id="emp-1")
    assert comment.status == CommentStatus.APPROVED

    assert not comment.transition_to(CommentStatus.REJECTED, reason="too late")
    assert not comment.transition_to(CommentStatus.PENDING)
    assert comment.status == CommentStatus.APPROVED
    assert comment.rejection_reason is None
    assert len(comment.status_history) == 1


def test_reject_records_reason():
    """Test rejection stores the reason and is terminal"""
    comment = _comment()
    assert comment.transition_to(CommentStatus.REJECTED, actor_id="emp-2", reason="Out of scope")
    assert comment.rejection_reason == "Out of scope"

    entry = comment.status_history[0]
    assert entry["from_status"] == "pending"
    assert entry["to_status"] == "rejected"
    assert entry["actor_id"] == "emp-2"

    assert not comment.transition_to(CommentStatus.APPROVED)
    assert comment.status == CommentStatus.REJECTED


def test_pending_to_pending_is_not_a_transition():
    """Test a comment cannot transition to its own state"""
    comment = _comment()
    assert not comment.transition_to(CommentStatus.PENDING)
    assert comment.status_history == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Serialization Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_comment_serialization_keeps_replies_and_history():
    """Test comment to_dict/from_dict preserves nested data"""
    comment = _comment(created_at=datetime(2025, 2, 10, 9, 30, tzinfo=timezone.utc))
    comment.add_reply(TaskCommentReply(
        id="reply-7",
        author_id="emp-1",
        author_type=Role.EMPLOYEE,
        author_name="Alex Rivera",
        content="On it",
    ))
    comment.transition_to(CommentStatus.APPROVED, actor_id="emp-1")
    comment.generated_task_id = "task-40"

    restored = TaskComment.from_dict(comment.to_dict())
    assert restored.status == CommentStatus.APPROVED
    assert restored.author_type == Role.CLIENT
    assert restored.created_at == comment.created_at
    assert restored.generated_task_id == "task-40"
    assert [r.id for r in restored.replies] == ["reply-7"]
    assert restored.replies[0].author_type == Role.EMPLOYEE
    assert len(restored.status_history) == 1


def test_comment_created_at_accepts_zulu_suffix():
    """Test ISO timestamps ending in Z parse as UTC"""
    comment = TaskComment.from_dict({
        "id": "comment-1",
        "task_id": "task-3",
        "project_id": "proj-1",
        "author_id": "client-1",
        "author_type": "client",
        "author_name": "James",
        "created_at": "2025-02-10T09:30:00Z",
    })
    assert comment.created_at == datetime(2025, 2, 10, 9, 30, tzinfo=timezone.utc)


def test_task_dates_serialize_as_iso():
    """Test task dates and priority survive a dict round trip"""
    task = Task(
        id="task-1",
        title="Design listing page",
        project_id="proj-1",
        priority=Priority.HIGH,
        due_date=date(2025, 2, 15),
        created_at=date(2025, 1, 12),
        tags=["design"],
    )
    data = task.to_dict()
    assert data["due_date"] == "2025-02-15"
    assert data["priority"] == "high"

    restored = Task.from_dict(data)
    assert restored.due_date == date(2025, 2, 15)
    assert restored.priority == Priority.HIGH
    assert restored.status == "backlog"


def test_project_accepts_legacy_client_id():
    """Test a single client_id is read as a one-element client_ids"""
    project = Project.from_dict({"id": "proj-9", "name": "Legacy", "client_id": "client-3"})
    assert project.client_ids == ["client-3"]
    assert [c.id for c in project.columns] == ["backlog", "todo", "in-progress", "review", "done"]


def test_project_custom_columns():
    """Test explicit columns replace the default set"""
    project = Project.from_dict({
        "id": "proj-9",
        "name": "Custom",
        "columns": [{"id": "ideas", "title": "Ideas", "order": 0}],
    })
    assert project.columns == [KanbanColumn(id="ideas", title="Ideas", order=0)]


def test_default_columns_are_independent():
    """Test each call returns fresh column objects"""
    first = default_columns()
    first[0].title = "Changed"
    assert default_columns()[0].title == "Backlog"


def test_subscription_amounts():
    """Test outstanding balance and paid percentage"""
    sub = Subscription(id="sub-1", client_id="client-1", total_value=75000, amount_paid=37500)
    assert sub.outstanding == 37500
    assert sub.paid_percent == 50
    assert Subscription(id="sub-2", client_id="client-1").paid_percent == 0


def test_eod_report_date_key():
    """Test the report date is stored under the 'date' key"""
    report = EODReport.from_dict({
        "id": "report-1",
        "employee_id": "emp-1",
        "project_id": "proj-1",
        "date": "2025-02-10",
        "content": "Done",
        "created_at": "2025-02-10T17:45:00Z",
    })
    assert report.report_date == date(2025, 2, 10)
    assert report.to_dict()["date"] == "2025-02-10"
