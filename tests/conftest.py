"""Shared test fixtures for the ProCMS core tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the repository root is importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

from procms.comments import CommentEngine
from procms.config import Config
from procms.events import EventBus
from procms.schema import KanbanColumn, Project, Task
from procms.seed import load_seed_file
from procms.session import Session

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def store(config):
    return load_seed_file(config.seed_path)


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def engine(store, events, config):
    return CommentEngine(store, events, config, clock=lambda: FIXED_NOW)


@pytest.fixture
def board(engine):
    """proj-1 board, shared with the engine so approvals land on it."""
    return engine.board_for("proj-1")


@pytest.fixture
def admin():
    return Session.admin()


@pytest.fixture
def employee(store):
    return Session.for_employee(store, "emp-1")


@pytest.fixture
def client(store):
    return Session.for_client(store, "client-1")


@pytest.fixture
def two_column_project(store):
    """A project with columns [backlog, done] and one task in backlog."""
    project = Project(
        id="proj-x",
        name="Two Columns",
        client_ids=["client-1"],
        columns=[
            KanbanColumn(id="backlog", title="Backlog", order=0),
            KanbanColumn(id="done", title="Done", order=1),
        ],
    )
    store.save(project)
    store.save(Task(id="task-x1", title="Only task", project_id="proj-x", status="backlog"))
    return project
