from __future__ import annotations
import copy, numbers, os, yaml
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import structlog

from .signals import PriorityWeights

logger = structlog.get_logger(__name__)

CONFIG_FILE = ".techdebt-tasks.yml"

DEFAULT_CONFIG = {
    "weights": {
        "critical_comments": 3,
        "days_since_commit": 2,
        "open_issues": 2,
        "code_complexity": 1.5,
        "security_vulnerability": 5,
        "custom_priority": 1,
    },
    "exclude": ["node_modules/**", "dist/**", "vendor/**", "**/*.min.js"],
    "max_items": None,
    "logging": {"level": "INFO", "format": "console"},
}


class ConfigError(ValueError):
    """Raised when configuration values cannot be used."""


def build_weights(raw: Optional[Dict[str, Any]]) -> PriorityWeights:
    raw = raw or {}
    values: Dict[str, float] = {}
    for f in fields(PriorityWeights):
        if f.name not in raw or raw[f.name] is None:
            continue
        v = raw[f.name]
        if isinstance(v, bool) or not isinstance(v, numbers.Real):
            raise ConfigError(f"weight {f.name!r} must be numeric, got {v!r}")
        if v < 0:
            raise ConfigError(f"weight {f.name!r} must be non-negative, got {v!r}")
        values[f.name] = v
    unknown = set(raw) - {f.name for f in fields(PriorityWeights)}
    if unknown:
        logger.warning("unknown_weights_ignored", keys=sorted(unknown))
    return PriorityWeights(**values)


def check_max_items(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"max_items must be a non-negative integer, got {value!r}")
    return value


@dataclass
class Config:
    data: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))

    def weights(self) -> PriorityWeights:
        return build_weights(self.data.get("weights"))

    @property
    def exclude(self) -> List[str]:
        raw = self.data.get("exclude") or []
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list) or not all(isinstance(p, str) for p in raw):
            raise ConfigError(f"exclude must be a list of glob strings, got {raw!r}")
        return list(raw)

    @property
    def max_items(self) -> Optional[int]:
        return check_max_items(self.data.get("max_items"))


def load_config(repo_root: str) -> Config:
    path = os.path.join(repo_root, CONFIG_FILE)
    merged = copy.deepcopy(DEFAULT_CONFIG)
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            try:
                user = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                logger.warning("config_unreadable", path=path, error=str(e))
                user = {}
        if not isinstance(user, dict):
            raise ConfigError(f"{path} must contain a mapping")
        for k, v in user.items():
            if isinstance(v, dict) and isinstance(merged.get(k), dict):
                merged[k].update(v)
            else:
                merged[k] = v
    return Config(merged)
