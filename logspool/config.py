"""Configuration module — frozen dataclass loaded from YAML and env vars."""

import os
import tempfile
from dataclasses import dataclass, field, fields
from enum import Enum

import yaml

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DeliveryPolicy(str, Enum):
    """What the queue does when the sink raises during delivery."""

    RESPOOL = "respool"
    DROP = "drop"
    RAISE = "raise"


@dataclass(frozen=True)
class Config:
    spool_dir: str = field(default_factory=tempfile.gettempdir)
    spool_filename: str = "logspool.queue"
    queued_marker: str = "[QUEUED] "
    delivery_policy: DeliveryPolicy = DeliveryPolicy.RESPOOL
    sink_file: str = "./logs/sink.log"
    log_level: str = "INFO"

    @property
    def spool_path(self) -> str:
        return os.path.join(self.spool_dir, self.spool_filename)

    @classmethod
    def from_dict(cls, d: dict) -> "Config":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in d.items() if k in known}
        if "delivery_policy" in kwargs:
            kwargs["delivery_policy"] = DeliveryPolicy(str(kwargs["delivery_policy"]).lower())
        if "log_level" in kwargs:
            kwargs["log_level"] = _parse_level(kwargs["log_level"])
        return cls(**kwargs)


_ENV_KEYS = {
    "LOGSPOOL_DIR": "spool_dir",
    "LOGSPOOL_FILENAME": "spool_filename",
    "LOGSPOOL_MARKER": "queued_marker",
    "LOGSPOOL_DELIVERY_POLICY": "delivery_policy",
    "LOGSPOOL_SINK_FILE": "sink_file",
    "LOGSPOOL_LOG_LEVEL": "log_level",
}


def _parse_level(value: str) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def load_yaml(path: str) -> dict:
    """Load the ``spool`` section of a YAML config file (empty if missing)."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    section = data.get("spool") if isinstance(data, dict) else data
    if section is None:
        section = {}
    if not isinstance(data, dict) or not isinstance(section, dict):
        raise ValueError(f"Config file {path} must hold a 'spool' mapping")
    return section


def load_config(path: str | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars (highest priority).

    The YAML path comes from *path* or the ``LOGSPOOL_CONFIG`` env var.
    """
    path = path or os.environ.get("LOGSPOOL_CONFIG")
    settings: dict = load_yaml(path) if path else {}

    for env_key, attr in _ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value is not None:
            settings[attr] = value

    return Config.from_dict(settings)
