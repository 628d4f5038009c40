# ProCMS configuration
# Override defaults via procms.yaml, PROCMS_CONFIG or PROCMS_SEED.

import logging
import os
import sys
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

ROOT = Path(__file__).parent.parent
CONFIG_PATH = ROOT / "config" / "procms.yaml"
SEED_PATH = ROOT / "data" / "seed.yaml"

LOG_FORMAT = "%(asctime)s [procms] %(levelname)s: %(message)s"


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


@dataclass
class Config:
    """Runtime configuration for the ProCMS core."""

    # Seed data
    seed_path: str = str(SEED_PATH)

    # Logging
    log_level: str = "INFO"

    # Kanban columns
    request_column: str = "todo"       # where approved requests land
    fallback_column: str = "backlog"   # used when a board has no columns left

    # Approved-comment task generation
    request_title_prefix: str = "[Client Request] "
    request_title_chars: int = 60
    request_due_days: int = 14
    request_tag: str = "client-request"
    request_priority: str = "medium"
    default_assignee: str = ""         # empty = first employee in the store

    def resolve_paths(self):
        """Expand ~ and apply environment overrides."""
        env_seed = os.environ.get("PROCMS_SEED")
        if env_seed:
            self.seed_path = env_seed
        seed = Path(self.seed_path).expanduser()
        # Relative paths are relative to the repository root
        if not seed.is_absolute():
            seed = ROOT / seed
        self.seed_path = str(seed)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """
        Load config from YAML, falling back to defaults.

        A missing default file is fine. An explicitly requested file
        (argument or PROCMS_CONFIG) must exist and parse.
        """
        explicit = path or os.environ.get("PROCMS_CONFIG")
        cfg_path = Path(explicit) if explicit else CONFIG_PATH

        if not cfg_path.exists():
            if explicit:
                raise ConfigError(f"Config file not found: {cfg_path}")
            cfg = cls()
            cfg.resolve_paths()
            return cfg

        try:
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logging.getLogger(__name__).warning(f"Ignoring unknown config keys: {unknown}")

        data = {k: v for k, v in data.items() if k in known}
        for f in fields(cls):
            if f.type is int and f.name in data:
                try:
                    data[f.name] = int(data[f.name])
                except (TypeError, ValueError):
                    raise ConfigError(f"{f.name} must be an integer, got {data[f.name]!r}") from None

        cfg = cls(**data)
        if cfg.request_title_chars < 1 or cfg.request_due_days < 0:
            raise ConfigError("request_title_chars must be >= 1 and request_due_days >= 0")
        cfg.resolve_paths()
        return cfg


def configure_logging(level: str = "INFO") -> None:
    """Install the stdout handler used by scripts and the verify walkthrough."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
