"""Configuration loading helpers for live-checker."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import CheckerConfig

CONFIG_FILENAME = "config.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("LIVE_CHECKER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: CheckerConfig | None = None

    def load_config(self) -> CheckerConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        if path.exists():
            config = CheckerConfig.model_validate(_read_file(path))
        else:
            config = CheckerConfig()
            self.save_config(config)
        self._cache = config
        return config

    def save_config(self, config: CheckerConfig) -> Path:
        path = self.locator.config_path()
        _write_file(path, config.model_dump(mode="json"))
        self._cache = config
        return path

    def update_config(self, **changes: object) -> CheckerConfig:
        """Validate and persist a partial update of the stored configuration."""

        payload = self.load_config().model_dump(mode="json")
        payload.update(changes)
        config = CheckerConfig.model_validate(payload)
        self.save_config(config)
        return config

    def reset_config(self) -> CheckerConfig:
        config = CheckerConfig()
        self.save_config(config)
        return config

    def outputs_dir(self, config: CheckerConfig | None = None) -> Path:
        config = config or self.load_config()
        return config.resolved_outputs_dir(self.locator.project_root)


__all__ = ["ConfigLocator", "ConfigRepository", "CONFIG_FILENAME"]
