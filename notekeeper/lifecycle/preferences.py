"""
Preference-Backed Observables.

Expose a single preference as an observable value. The observable only
listens to the store while someone observes it; when it becomes active it
refreshes the store from disk and re-reads it, so changes made while nobody
was listening are not lost, including writes from another process.

Writes never push to observers directly. set() only writes the store; the
store's change notification is what updates observers.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TypeVar

from notekeeper.core.exceptions import DataCorruptionError
from notekeeper.core.logging import get_logger
from notekeeper.core.preferences import PreferenceStore
from notekeeper.lifecycle.observable import Observable

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class PreferenceObservable(Observable[T], ABC):
    """
    Observable view of one key in a PreferenceStore.

    Args:
        store: The preference store to observe
        key: Key of the observed value
        default: Value used when the key is absent
    """

    def __init__(self, store: PreferenceStore, key: str, default: T) -> None:
        super().__init__()
        self._store = store
        self._key = key
        self._default = default

    @property
    def key(self) -> str:
        return self._key

    @property
    def default(self) -> T:
        return self._default

    @abstractmethod
    def _read_from_store(self) -> T:
        """Read and deserialize the value from the store."""

    @abstractmethod
    def _write_to_store(self, value: T) -> None:
        """Serialize the value into the store."""

    def get(self) -> T:
        """
        Current value.

        While inactive the store is refreshed and read directly, since no
        listener is keeping the cached value up to date.
        """
        if not self.has_observers:
            self._store.refresh()
            self._set_value(self._read_from_store())
        return self._value

    def set(self, value: T) -> None:
        self._write_to_store(value)

    def _on_active(self) -> None:
        self._store.refresh()
        self._set_value(self._read_from_store())
        self._store.register_listener(self._on_preference_changed)

    def _on_inactive(self) -> None:
        self._store.unregister_listener(self._on_preference_changed)

    def _on_preference_changed(self, store: PreferenceStore, key: str) -> None:
        if key == self._key:
            self._set_value(self._read_from_store())


class EnumPreferenceObservable(PreferenceObservable[E]):
    """
    PreferenceObservable for Enum values, persisted by member name.

    An unknown persisted name raises DataCorruptionError unless
    fallback_to_default is set, in which case it is logged and the default
    is used instead.
    """

    def __init__(
        self,
        store: PreferenceStore,
        key: str,
        default: E,
        fallback_to_default: bool = False,
    ) -> None:
        super().__init__(store, key, default)
        self._enum_cls = type(default)
        self._fallback_to_default = fallback_to_default

    def _read_from_store(self) -> E:
        raw = self._store.get_string(self._key)
        if raw is None:
            return self._default

        try:
            return self._enum_cls[raw]
        except KeyError:
            if self._fallback_to_default:
                logger.warning(
                    "Unknown preference value, using default",
                    extra={"key": self._key, "value": raw, "default": self._default.name},
                )
                return self._default
            raise DataCorruptionError(
                f"Unknown {self._enum_cls.__name__} value {raw!r} for preference {self._key!r}",
                key=self._key,
                raw_value=raw,
            ) from None

    def _write_to_store(self, value: E) -> None:
        self._store.edit().put_string(self._key, value.name).apply()
