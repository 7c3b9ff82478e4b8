import json
import os
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .events import Signal


# --- Settings Models ---
class GeneralSettings(BaseModel):
    debug_mode: bool = False
    log_dir: Optional[str] = None


class NavigatorSettings(BaseModel):
    autoscroll_delay_ms: int = 300  # debounce for scroll-from/to-source requests
    autoscroll_on_focus_gained: bool = True
    default_view_id: Optional[str] = None
    show_members_supported: bool = True
    lookup_workers: int = 2
    state_file: str = "navigator_state.json"


class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    navigator: NavigatorSettings = Field(default_factory=NavigatorSettings)


# --- Manager ---
class ConfigManager:
    """
    Application settings backed by a JSON (or read-only TOML) file.

    Every `update()` is validated against the section model, written back
    to disk and announced through `on_changed(section, key, value)`.

    Usage:
        config = ConfigManager("config.json")   # None: memory only
        config.update("navigator", "autoscroll_delay_ms", 150)
        delay = config.data.navigator.autoscroll_delay_ms
    """

    def __init__(self, filepath: Optional[str] = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = Signal("ConfigChanged")
        self.reload()

    @property
    def data(self) -> AppConfig:
        return self._data

    @property
    def is_persistent(self) -> bool:
        return self.filepath is not None and not self.filepath.endswith('.toml')

    def update(self, section: str, key: str, value: Any):
        """
        Change one setting.

        Raises:
            ValueError: unknown section or key, or a value the model rejects
        """
        current = getattr(self._data, section, None)
        if not isinstance(current, BaseModel):
            raise ValueError(f"Invalid section: {section}")
        if key not in type(current).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        try:
            replacement = type(current).model_validate({**current.model_dump(), key: value})
        except ValidationError as e:
            raise ValueError(f"Invalid value for {section}.{key}: {e}") from e

        setattr(self._data, section, replacement)
        self._write()
        self.on_changed.emit(section, key, getattr(replacement, key))

    def get(self, section: str, key: str) -> Any:
        return getattr(getattr(self._data, section), key)

    def reload(self):
        """Re-read the file. A missing or broken file leaves defaults (and is rewritten)."""
        if self.filepath is None:
            return
        raw = self._read()
        if raw is not None:
            try:
                self._data = AppConfig.model_validate(raw)
                return
            except ValidationError as e:
                logger.error(f"Invalid config in {self.filepath}: {e}")
        self._write()

    def _read(self) -> Optional[Dict[str, Any]]:
        if not os.path.isfile(self.filepath):
            return None
        try:
            if self.filepath.endswith('.toml'):
                import tomllib
                with open(self.filepath, "rb") as f:
                    return tomllib.load(f)
            with open(self.filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {self.filepath}: {e}")
            return None

    def _write(self):
        if not self.is_persistent:
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
