"""
Named grid layouts persisted as a single JSON document.

The document maps each layout name to its saved configuration:

    {"version": 1, "layouts": {"<name>": {"savedAt": "...", "config": {...}}}}
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..domain.config import GridConfig
from ..domain.errors import InvalidConfig

logger = logging.getLogger(__name__)

STORE_VERSION = 1
STORE_ENV_VAR = "GRIDPATH_STORE"


def get_default_store_path() -> Path:
    """Location of the layout document, overridable through GRIDPATH_STORE."""
    override = os.environ.get(STORE_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".gridpath" / "layouts.json"


class ConfigStore:
    """
    Save, load, list and delete grid layouts by name.

    Reading an unreadable or corrupt document raises InvalidConfig; save()
    and delete() log the failure and return False instead.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else get_default_store_path()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidConfig(f"Layout store {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise InvalidConfig(f"Layout store {self.path} could not be read: {e}") from e

        layouts = document.get("layouts") if isinstance(document, dict) else None
        if not isinstance(layouts, dict):
            raise InvalidConfig(f"Layout store {self.path} has no 'layouts' object",
                                field="layouts")
        return layouts

    def _write(self, layouts: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump({"version": STORE_VERSION, "layouts": layouts}, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise

    def names(self) -> List[str]:
        """Saved layout names in alphabetical order."""
        return sorted(self._read())

    def __contains__(self, name: str) -> bool:
        return name in self._read()

    def save(self, name: str, config: GridConfig) -> bool:
        """Save or overwrite a layout. Returns False if the store could not be written."""
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Layout name must be a non-empty string")

        try:
            layouts = self._read()
        except InvalidConfig as e:
            logger.error("Error saving layout %r: %s", name, e)
            return False

        layouts[name] = {
            "savedAt": datetime.now().isoformat(timespec="seconds"),
            "config": config.to_dict(),
        }
        try:
            self._write(layouts)
        except OSError as e:
            logger.error("Error saving layout %r to %s: %s", name, self.path, e)
            return False

        logger.debug("Saved layout %r (%dx%d, %d painted cells)",
                     name, config.size, config.size, len(config.nodes))
        return True

    def load(self, name: str) -> Optional[GridConfig]:
        """
        Load a layout by name.

        Returns:
            The configuration, or None if no layout has that name

        Raises:
            InvalidConfig: If the store cannot be read or the entry is malformed
        """
        entry = self._read().get(name)
        if entry is None:
            return None
        if not isinstance(entry, dict) or "config" not in entry:
            raise InvalidConfig(f"Layout {name!r} has no configuration", field="config")
        return GridConfig.from_dict(entry["config"])

    def saved_at(self, name: str) -> Optional[str]:
        entry = self._read().get(name)
        if isinstance(entry, dict):
            return entry.get("savedAt")
        return None

    def delete(self, name: str) -> bool:
        """Delete a layout. Returns False if it did not exist or the store could not be written."""
        try:
            layouts = self._read()
        except InvalidConfig as e:
            logger.error("Error deleting layout %r: %s", name, e)
            return False
        if name not in layouts:
            return False

        del layouts[name]
        try:
            self._write(layouts)
        except OSError as e:
            logger.error("Error deleting layout %r from %s: %s", name, self.path, e)
            return False
        return True
