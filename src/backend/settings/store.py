"""
JSON-backed persistence for storage settings.

The file is rewritten whole on every change (temp file, then rename) so a
crash never leaves a half-written config behind.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable

from ..fs.archive_zip import ArchiveLimits
from .models import StorageSettings


logger = logging.getLogger(__name__)

Mutator = Callable[[StorageSettings], StorageSettings]


class SettingsStore:
    def __init__(self, *, path: Path) -> None:
        self._path = path
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StorageSettings:
        """Read settings; a missing or unreadable file yields defaults."""
        with self._lock:
            try:
                text = self._path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return StorageSettings()
            except OSError as exc:
                logger.warning("Cannot read settings file %s: %s", self._path, exc)
                return StorageSettings()

            try:
                raw = json.loads(text)
            except ValueError as exc:
                logger.warning("Ignoring malformed settings file %s: %s", self._path, exc)
                return StorageSettings()

            if not isinstance(raw, dict):
                logger.warning("Ignoring settings file %s: top level is not an object", self._path)
                return StorageSettings()
            return StorageSettings.from_persist_dict(raw)

    def save(self, settings: StorageSettings) -> None:
        body = json.dumps(settings.to_persist_dict(), ensure_ascii=False, indent=2) + "\n"

        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            staging = self._path.with_name(self._path.name + ".tmp")
            staging.write_text(body, encoding="utf-8")
            staging.replace(self._path)

    def update(self, *, mutator: Mutator) -> StorageSettings:
        """Load, apply mutator and save as one step under the store lock."""
        with self._lock:
            updated = mutator(self.load())
            if not isinstance(updated, StorageSettings):
                raise TypeError("mutator must return StorageSettings")
            self.save(updated)
            logger.info("Settings saved to %s", self._path)
            return updated

    def set_value(self, *, key: str, value: Any) -> StorageSettings:
        def assign(settings: StorageSettings) -> StorageSettings:
            if not hasattr(settings, key):
                raise KeyError(key)
            setattr(settings, key, value)
            return settings

        return self.update(mutator=assign)

    def set_archive_limits(self, limits: ArchiveLimits) -> StorageSettings:
        ok, error = limits.validate()
        if not ok:
            raise ValueError(error)
        return self.set_value(key="archive", value=limits)

    def set_cache_max_age(self, seconds: int) -> StorageSettings:
        if seconds < 0:
            raise ValueError("cache max age must be >= 0")
        return self.set_value(key="cache_max_age", value=seconds)
