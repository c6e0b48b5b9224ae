from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

TRUE_VALUES = {"1", "true", "yes", "on"}


def read_yaml(path: Optional[str]) -> Dict[str, Any]:
    """Parse a YAML mapping; a missing path or non-mapping document yields {}."""
    if not path or not Path(path).is_file():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


class LayeredConfig:
    """
    Setting lookup across three layers: environment variable, YAML section, default.
    YAML keys are dotted paths, e.g. "database.pool_size".
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, environ: Optional[Mapping[str, str]] = None):
        self.data = data or {}
        self.environ = os.environ if environ is None else environ

    @classmethod
    def from_file(cls, path: Optional[str]) -> "LayeredConfig":
        return cls(read_yaml(path))

    def _from_yaml(self, dotted: str) -> Any:
        node: Any = self.data
        for part in dotted.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, env_name: str, dotted: str, default: Any = None) -> Any:
        env_value = self.environ.get(env_name)
        if env_value not in (None, ""):
            return env_value
        value = self._from_yaml(dotted)
        return default if value is None else value

    def get_int(self, env_name: str, dotted: str, default: int) -> int:
        return int(self.get(env_name, dotted, default))

    def get_bool(self, env_name: str, dotted: str, default: bool) -> bool:
        value = self.get(env_name, dotted, default)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUE_VALUES

    def get_list(self, env_name: str, dotted: str, default: List[str]) -> List[str]:
        value = self.get(env_name, dotted, default)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return list(value)
