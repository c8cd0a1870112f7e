"""
Preference Store.

Small persisted key/value store for user settings, kept as a flat YAML
mapping of string keys to string values. Writes go through an editor and
are flushed to disk atomically; every key whose value actually changed is
then reported to the registered change listeners.

Changes made by another process (or by hand) are picked up with reload(),
or with refresh(), which only re-reads the file when it was replaced. Both
notify listeners the same way. Every write refreshes first, so it never
overwrites newer values on disk.

Usage:
    from notekeeper.core.preferences import PreferenceStore

    store = PreferenceStore(path)
    store.register_listener(lambda store, key: print(key, store.get_string(key)))

    with store.edit() as editor:
        editor.put_string("sort_order", "BY_ETA")
"""

import os
import tempfile
from collections.abc import Callable
from pathlib import Path

import yaml

from notekeeper.core.exceptions import DataCorruptionError
from notekeeper.core.logging import get_logger

logger = get_logger(__name__)

PreferenceListener = Callable[["PreferenceStore", str], None]

_REMOVED = object()


class PreferenceEditor:
    """
    Batch of pending changes for a PreferenceStore.

    Nothing is visible until apply() is called. Used as a context manager,
    the batch is applied on a clean exit and discarded on an exception.
    """

    def __init__(self, store: "PreferenceStore") -> None:
        self._store = store
        self._changes: dict[str, object] = {}

    def put_string(self, key: str, value: str) -> "PreferenceEditor":
        self._changes[key] = value
        return self

    def remove(self, key: str) -> "PreferenceEditor":
        self._changes[key] = _REMOVED
        return self

    def apply(self) -> None:
        changes, self._changes = self._changes, {}
        self._store._commit(changes)

    def __enter__(self) -> "PreferenceEditor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.apply()
        else:
            self._changes.clear()


class PreferenceStore:
    """
    Key/value preferences persisted to a YAML file.

    Pass path=None for a purely in-memory store.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._signature = self._file_signature()
        self._values: dict[str, str] = self._read_file()
        self._listeners: list[PreferenceListener] = []

    @classmethod
    def from_config(cls) -> "PreferenceStore":
        """Open the preference file configured in preferences.yaml."""
        from notekeeper.core.config import get_preferences_path

        return cls(get_preferences_path())

    @property
    def path(self) -> Path | None:
        return self._path

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def contains(self, key: str) -> bool:
        return key in self._values

    def all(self) -> dict[str, str]:
        return dict(self._values)

    def edit(self) -> PreferenceEditor:
        return PreferenceEditor(self)

    def register_listener(self, listener: PreferenceListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unregister_listener(self, listener: PreferenceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def refresh(self) -> set[str]:
        """
        Reload if the backing file was replaced since this store last read
        or wrote it, e.g. by another process sharing the same path.

        Returns:
            Keys whose value changed, empty if the file is untouched
        """
        if self._file_signature() == self._signature:
            return set()
        return self.reload()

    def reload(self) -> set[str]:
        """
        Re-read the backing file and notify listeners of external changes.

        Returns:
            Keys whose value differs from what the store held before
        """
        self._signature = self._file_signature()
        fresh = self._read_file()
        changed = {
            key for key in self._values.keys() | fresh.keys()
            if self._values.get(key) != fresh.get(key)
        }
        self._values = fresh
        if changed:
            logger.debug("Preferences reloaded", extra={"changed": sorted(changed)})
            self._notify(changed)
        return changed

    def _commit(self, changes: dict[str, object]) -> None:
        # Merge onto what is on disk, not onto a stale snapshot.
        self.refresh()
        changed: set[str] = set()
        for key, value in changes.items():
            if value is _REMOVED:
                if key in self._values:
                    del self._values[key]
                    changed.add(key)
            elif self._values.get(key) != value:
                self._values[key] = value  # type: ignore[assignment]
                changed.add(key)

        if not changed:
            return
        self._write_file()
        self._notify(changed)

    def _notify(self, keys: set[str]) -> None:
        for key in sorted(keys):
            for listener in list(self._listeners):
                listener(self, key)

    def _read_file(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}

        with open(self._path, encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise DataCorruptionError(
                    f"Preference file {self._path} is not valid YAML: {e}",
                ) from e

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise DataCorruptionError(
                f"Preference file {self._path} must contain a mapping",
            )
        return {str(key): str(value) for key, value in raw.items()}

    def _write_file(self) -> None:
        if self._path is None:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(self._values, f, default_flow_style=False, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self._signature = self._file_signature()

    def _file_signature(self) -> tuple[int, int, int] | None:
        if self._path is None:
            return None
        try:
            stat = self._path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)
