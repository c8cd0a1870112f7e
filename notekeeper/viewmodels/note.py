"""
Note View-Model.

Connects the note store and the persisted sort order preference to the
presentation layer. Observers get the note count, the raw note list and
the list sorted by the remembered order; commands are forwarded to the
store or written to the preference.
"""

from notekeeper.core.preferences import PreferenceStore
from notekeeper.lifecycle.observable import MediatorObservable, Observable
from notekeeper.lifecycle.preferences import EnumPreferenceObservable
from notekeeper.schemas.note import NoteAndSchedule
from notekeeper.services.note import NoteStore
from notekeeper.viewmodels.sort_order import NoteList, SortOrder

SORT_ORDER_KEY = "sort_order"

_MISSING = object()


class SortedNoteView(MediatorObservable[NoteList]):
    """
    The note list sorted by the current sort order.

    Recomputed whenever either the list or the order changes. Nothing is
    emitted until both have produced a value, and both are forgotten when
    the view loses its last observer.
    """

    def __init__(
        self,
        notes: Observable[tuple[NoteAndSchedule, ...]],
        sort_order: Observable[SortOrder],
    ) -> None:
        super().__init__()
        self._latest_notes: object = _MISSING
        self._latest_order: object = _MISSING
        self.add_source(notes, self._on_notes)
        self.add_source(sort_order, self._on_sort_order)

    @property
    def ready(self) -> bool:
        return self._latest_notes is not _MISSING and self._latest_order is not _MISSING

    def _on_notes(self, notes: tuple[NoteAndSchedule, ...]) -> None:
        self._latest_notes = notes
        self._recompute()

    def _on_sort_order(self, order: SortOrder) -> None:
        self._latest_order = order
        self._recompute()

    def _on_inactive(self) -> None:
        super()._on_inactive()
        # Sources re-deliver on activation; stale inputs would emit a misordered list.
        self._latest_notes = _MISSING
        self._latest_order = _MISSING
        self._clear_value()

    def _recompute(self) -> None:
        if not self.ready:
            return
        self._set_value(self._latest_order.sort(self._latest_notes))


class NoteViewModel:
    """
    View-model for the note screens.

    Args:
        store: The note store
        preferences: Preference store holding the sort order
        sort_order_key: Preference key of the sort order
        fallback_to_default: Use SortOrder.NONE instead of failing when the
            persisted order is unreadable
    """

    def __init__(
        self,
        store: NoteStore,
        preferences: PreferenceStore,
        sort_order_key: str = SORT_ORDER_KEY,
        fallback_to_default: bool = False,
    ) -> None:
        self._store = store
        self._sort_order = EnumPreferenceObservable(
            preferences, sort_order_key, SortOrder.NONE, fallback_to_default,
        )
        self._sorted_notes = SortedNoteView(store.observe_all(), self._sort_order)

    def observe_all(self) -> Observable[tuple[NoteAndSchedule, ...]]:
        return self._store.observe_all()

    def observe_count(self) -> Observable[int]:
        return self._store.observe_count()

    def observe_sorted(self) -> Observable[NoteList]:
        return self._sorted_notes

    def observe_sort_order(self) -> Observable[SortOrder]:
        return self._sort_order

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order.get()

    def set_sort_order(self, order: SortOrder | str) -> None:
        """
        Remember a new sort order.

        Raises:
            InvalidCommandError: If order is a name no SortOrder has
        """
        if not isinstance(order, SortOrder):
            order = SortOrder.parse(order)
        self._sort_order.set(order)

    def generate_note(self) -> None:
        self._store.generate_note()

    def delete_all_notes(self) -> None:
        self._store.delete_all_notes()
