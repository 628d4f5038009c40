"""
Seed loader: builds an EntityStore from a YAML document.

Top-level keys: employees, clients, projects, tasks, comments,
subscriptions, reports. Tasks may also be nested under their project.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config import Config, ConfigError
from .schema import (
    Client,
    EODReport,
    Employee,
    Project,
    Subscription,
    Task,
    TaskComment,
)
from .store import EntityStore

logger = logging.getLogger(__name__)

_SECTIONS = [
    ("employees", Employee),
    ("clients", Client),
    ("projects", Project),
    ("tasks", Task),
    ("comments", TaskComment),
    ("subscriptions", Subscription),
    ("reports", EODReport),
]


def load_seed_data(data: Dict[str, Any], store: Optional[EntityStore] = None) -> EntityStore:
    """Populate a store (a new one by default) from parsed seed data."""
    store = store if store is not None else EntityStore()

    # Tasks nested under a project inherit its id
    nested_tasks = []
    for raw in data.get("projects") or []:
        for raw_task in raw.get("tasks") or []:
            nested_tasks.append({"project_id": raw["id"], **raw_task})

    counts = {}
    for section, record_type in _SECTIONS:
        rows = list(data.get(section) or [])
        if section == "tasks":
            rows = nested_tasks + rows
        for raw in rows:
            store.save(record_type.from_dict(raw))
        counts[section] = len(rows)

    logger.info(f"Seeded store: {counts}")
    return store


def load_seed_file(path: str, store: Optional[EntityStore] = None) -> EntityStore:
    """Read a YAML seed file into a store."""
    seed_path = Path(path)
    if not seed_path.exists():
        raise ConfigError(f"Seed file not found: {seed_path}")
    with open(seed_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {seed_path}: {e}") from e
    return load_seed_data(data, store)


def seeded_store(config: Optional[Config] = None) -> EntityStore:
    """Store populated from the configured seed file."""
    config = config or Config.load()
    return load_seed_file(config.seed_path)
