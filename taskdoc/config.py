"""Editor feature configuration and its persistence.

``EditorConfig`` switches individual API features on or off; everything is
enabled by default. A user override mapping can be stored in an
OS-appropriate config directory and is overlaid on the defaults section by
section. Keys may be given in snake_case or in the host editor's camelCase.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, is_dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormattingConfig:
    bold: bool = True
    underline: bool = True


@dataclass(frozen=True)
class ContentConfig:
    insert_text: bool = True
    delete_range: bool = True


@dataclass(frozen=True)
class CursorConfig:
    set: bool = True
    select_all: bool = True


@dataclass(frozen=True)
class DocumentConfig:
    get_json: bool = True
    set_json: bool = True
    clear: bool = True
    blocks: bool = True
    merge: bool = True
    split: bool = True


@dataclass(frozen=True)
class EditorConfig:
    formatting: FormattingConfig = field(default_factory=FormattingConfig)
    links: bool = True
    project_chips: bool = True
    content: ContentConfig = field(default_factory=ContentConfig)
    cursor: CursorConfig = field(default_factory=CursorConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)
    # 0 means no limit
    character_limit: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = EditorConfig()


def _snake(name: str) -> str:
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def _overlay(base, overrides: Mapping, path: str):
    """Return a copy of dataclass ``base`` with ``overrides`` applied."""
    known = {f.name: f for f in fields(base)}
    changes = {}
    for key, value in overrides.items():
        name = _snake(str(key))
        if name not in known:
            logger.warning(f"Ignoring unknown config key {path}{key}")
            continue
        current = getattr(base, name)
        if is_dataclass(current):
            if not isinstance(value, Mapping):
                logger.warning(f"Ignoring config section {path}{key}: expected a mapping")
                continue
            changes[name] = _overlay(current, value, f"{path}{key}.")
        elif isinstance(current, bool):
            if not isinstance(value, bool):
                logger.warning(f"Ignoring config key {path}{key}: expected a boolean")
                continue
            changes[name] = value
        elif isinstance(current, int):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                logger.warning(f"Ignoring config key {path}{key}: expected a non-negative integer")
                continue
            changes[name] = value
    return replace(base, **changes)


def merge_config(user_config: Optional[Mapping] = None) -> EditorConfig:
    """Overlay a partial user configuration on the defaults.

    Args:
        user_config: Nested mapping, e.g. ``{"document": {"merge": False}}``.
            Unknown keys and values of the wrong type are ignored.

    Returns:
        The resulting EditorConfig.
    """
    if not user_config:
        return DEFAULT_CONFIG
    return _overlay(DEFAULT_CONFIG, user_config, "")


class ConfigPersistence:
    """Stores the user's configuration overrides as JSON.

    The file lives in the user's config directory. Reads are cached and
    failures are logged and reported, never raised.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir) if config_dir else Path(platformdirs.user_config_dir("taskdoc"))
        self._config_file = self._config_dir / "config.json"
        self._cache: Optional[Dict[str, Any]] = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def load_overrides(self) -> Dict[str, Any]:
        """Load the stored overrides; empty dict if missing or unreadable."""
        if self._cache is not None:
            return dict(self._cache)

        if not self._config_file.exists():
            self._cache = {}
            return {}

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, PermissionError) as e:
            logger.warning(f"Could not load config from {self._config_file}: {e}")
            self._cache = {}
            return {}

        if not isinstance(data, dict):
            logger.warning("Config file has invalid format (not a dict), ignoring")
            data = {}
        self._cache = data
        return dict(data)

    def save_overrides(self, overrides: Mapping[str, Any]) -> bool:
        """Write overrides atomically (temp file + rename).

        Returns:
            True if the save succeeded, False otherwise.
        """
        self._ensure_config_dir()
        temp_file = self._config_file.with_suffix('.tmp')
        data = dict(overrides)

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self._config_file)
            self._cache = data
            return True
        except (OSError, PermissionError, TypeError) as e:
            logger.warning(f"Could not save config to {self._config_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def load_config(self) -> EditorConfig:
        return merge_config(self.load_overrides())

    def clear_cache(self) -> None:
        self._cache = None


# Global instance
_persistence: Optional[ConfigPersistence] = None


def get_persistence() -> ConfigPersistence:
    """Get the global config persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = ConfigPersistence()
    return _persistence
