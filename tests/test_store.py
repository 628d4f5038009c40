"""
Tests for the entity store and the YAML seed loader.
"""
import pytest

from procms.config import Config, ConfigError
from procms.schema import CommentStatus, Employee, Project, Task, TaskComment
from procms.seed import load_seed_data, load_seed_file, seeded_store
from procms.store import EntityStore


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Store Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_save_and_get():
    """Test saving a record reports whether it was new"""
    store = EntityStore()
    task = Task(id="task-1", title="First", project_id="proj-1")
    assert store.save(task) is True
    assert store.save(task) is False
    assert store.get_task("task-1") is task
    assert store.get(Task, "task-2") is None


def test_save_rejects_unknown_types():
    """Test only known record kinds can be stored"""
    with pytest.raises(TypeError):
        EntityStore().save(object())


def test_delete():
    """Test deleting a record"""
    store = EntityStore()
    store.save(Task(id="task-1", title="First", project_id="proj-1"))
    assert store.delete(Task, "task-1")
    assert not store.delete(Task, "task-1")
    assert store.list_all(Task) == []


def test_next_id_continues_after_seeded_ids(store):
    """Test generated ids start past the highest seeded id"""
    assert store.next_id("task") == "task-19"
    assert store.next_id("task") == "task-20"
    assert store.next_id("comment") == "comment-4"
    assert store.next_id("col") == "col-1"


def test_next_id_counts_nested_replies(store):
    """Test reply ids seeded inside comments are not handed out again"""
    assert store.next_id("reply") == "reply-2"


def test_next_id_never_reuses_deleted_ids():
    """Test deleting the newest record does not free its id"""
    store = EntityStore()
    store.save(Task(id=store.next_id("task"), title="A", project_id="proj-1"))
    store.delete(Task, "task-1")
    assert store.next_id("task") == "task-2"


def test_task_queries(store):
    """Test filtering tasks by project, assignee and status"""
    assert len(store.list_tasks_by_project("proj-1")) == 7
    assert {t.id for t in store.list_tasks_by_assignee("emp-4")} == {"task-13", "task-17"}
    assert {t.id for t in store.list_tasks_by_status("review")} == {"task-6", "task-12"}


def test_project_queries(store):
    """Test client membership and assignee-based project lookups"""
    assert [p.id for p in store.list_projects_by_client("client-1")] == ["proj-1", "proj-4"]
    assert store.list_projects_by_client("client-4") == []
    assert [p.id for p in store.list_projects_by_assignee("emp-1")] == [
        "proj-1", "proj-3", "proj-4", "proj-5",
    ]


def test_reports_newest_first(store):
    """Test EOD reports are listed newest first"""
    assert [r.id for r in store.list_reports_by_employee("emp-1")] == ["report-2", "report-1"]


def test_delete_comments_by_task(store):
    """Test removing every comment on a task"""
    assert store.delete_comments_by_task("task-3") == 1
    assert store.list_comments_by_task("task-3") == []
    assert store.delete_comments_by_task("task-3") == 0
    assert store.get_comment("comment-2") is not None


def test_get_stats(store):
    """Test board statistics over the seed data"""
    stats = store.get_stats()
    assert stats["total"] == 18
    assert stats["by_status"]["done"] == 4
    assert stats["by_status"]["in-progress"] == 4
    assert stats["by_priority"]["urgent"] == 1
    assert stats["by_project"]["proj-1"] == 7
    assert stats["pending_comments"] == 1
    assert stats["active_projects"] == 4


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Seed Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_seed_counts(store):
    """Test the bundled seed file loads every section"""
    assert len(store.list_all(Employee)) == 6
    assert len(store.list_all(Project)) == 5
    assert len(store.list_all(Task)) == 18
    assert len(store.list_all(TaskComment)) == 3


def test_nested_tasks_inherit_project(store):
    """Test tasks listed under a project get its id"""
    assert store.get_task("task-1").project_id == "proj-1"
    assert store.get_task("task-17").project_id == "proj-5"
    assert store.get_task("task-18").project_id == "proj-1"


def test_seeded_comment_states(store):
    """Test seeded comments keep their moderation state"""
    assert store.get_comment("comment-1").status == CommentStatus.PENDING
    assert [r.id for r in store.get_comment("comment-1").replies] == ["reply-1"]

    approved = store.get_comment("comment-2")
    assert approved.status == CommentStatus.APPROVED
    assert store.get_task(approved.generated_task_id).tags == ["client-request"]

    rejected = store.get_comment("comment-3")
    assert rejected.status == CommentStatus.REJECTED
    assert rejected.rejection_reason


def test_seeded_projects_have_default_columns(store):
    """Test projects without columns get the five defaults"""
    project = store.get_project("proj-2")
    assert [c.id for c in project.columns] == ["backlog", "todo", "in-progress", "review", "done"]


def test_load_seed_data_into_existing_store():
    """Test loading a minimal document into a given store"""
    store = EntityStore()
    result = load_seed_data({
        "projects": [{"id": "proj-1", "name": "Site", "tasks": [{"id": "task-1", "title": "Hero"}]}],
    }, store)
    assert result is store
    assert store.get_task("task-1").project_id == "proj-1"


def test_load_seed_file_missing(tmp_path):
    """Test a missing seed file is a config error"""
    with pytest.raises(ConfigError):
        load_seed_file(str(tmp_path / "nope.yaml"))


def test_load_seed_file_invalid_yaml(tmp_path):
    """Test malformed seed YAML is a config error"""
    path = tmp_path / "seed.yaml"
    path.write_text("projects: [\n")
    with pytest.raises(ConfigError):
        load_seed_file(str(path))


def test_seeded_store_uses_config(tmp_path):
    """Test seeded_store reads the configured seed path"""
    path = tmp_path / "seed.yaml"
    path.write_text("employees:\n  - {id: emp-1, name: Solo}\n")
    store = seeded_store(Config(seed_path=str(path)))
    assert store.get_employee("emp-1").name == "Solo"
