"""
Observable Values.

Push-based value holders with explicit subscribe/unsubscribe and lazy
activation. An observable becomes *active* when its first subscriber
arrives and *inactive* when the last one leaves; subclasses hook
`_on_active` / `_on_inactive` to attach or detach from their upstream.

A new subscriber receives the current value immediately, if there is one.
Observables are not thread-safe: subscribe, notify and dispose from the
event loop thread.

Usage:
    from notekeeper.lifecycle.observable import MutableObservable

    counter = MutableObservable(0)
    subscription = counter.subscribe(print)   # prints 0
    counter.set_value(1)                      # prints 1
    subscription.dispose()
"""

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")
S = TypeVar("S")

Observer = Callable[[T], None]

_UNSET: Any = object()


class Subscription:
    """Handle returned by `Observable.subscribe`. Dispose it to unsubscribe."""

    def __init__(self, owner: "Observable[Any]", observer: Observer) -> None:
        self._owner = owner
        self.observer = observer
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Unsubscribe. Calling it more than once is a no-op."""
        if self._disposed:
            return
        self._disposed = True
        self._owner._remove(self)


class Observable(Generic[T]):
    """Read-only observable value."""

    def __init__(self, value: Any = _UNSET) -> None:
        self._value = value
        self._version = 0 if value is _UNSET else 1
        self._subscriptions: list[Subscription] = []

    @property
    def has_value(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T | None:
        """Current value, or None if nothing has been emitted yet."""
        return None if self._value is _UNSET else self._value

    @property
    def has_observers(self) -> bool:
        return bool(self._subscriptions)

    def subscribe(self, observer: Observer) -> Subscription:
        """
        Register an observer.

        The first subscriber activates the observable. If a value is
        available afterwards, the new observer receives it right away.

        Returns:
            Subscription whose dispose() removes the observer
        """
        subscription = Subscription(self, observer)
        self._subscriptions.append(subscription)
        version = self._version

        if len(self._subscriptions) == 1:
            try:
                self._on_active()
            except Exception:
                self._subscriptions.remove(subscription)
                raise

        # Activation may already have pushed a fresh value to everyone.
        if self._version == version and self.has_value and not subscription.disposed:
            observer(self._value)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return
        if not self._subscriptions:
            self._on_inactive()

    def _set_value(self, value: T) -> None:
        """Store a new value and push it to every current observer."""
        self._value = value
        self._version += 1
        for subscription in list(self._subscriptions):
            if not subscription.disposed:
                subscription.observer(value)

    def _clear_value(self) -> None:
        """Forget the current value; the next subscriber waits for a fresh one."""
        self._value = _UNSET

    def _on_active(self) -> None:
        """Called when the number of observers goes from 0 to 1."""

    def _on_inactive(self) -> None:
        """Called when the number of observers goes from 1 to 0."""


class MutableObservable(Observable[T]):
    """Observable whose value is set directly by its owner."""

    def set_value(self, value: T) -> None:
        self._set_value(value)


class _Source(Generic[S]):
    def __init__(self, observable: Observable[S], on_change: Observer) -> None:
        self.observable = observable
        self.on_change = on_change
        self.subscription: Subscription | None = None

    def plug(self) -> None:
        if self.subscription is None:
            self.subscription = self.observable.subscribe(self.on_change)

    def unplug(self) -> None:
        if self.subscription is not None:
            self.subscription.dispose()
            self.subscription = None


class MediatorObservable(Observable[T]):
    """
    Observable derived from other observables.

    Sources are only subscribed to while the mediator itself is active,
    so an unobserved mediator keeps nothing upstream alive.
    """

    def __init__(self) -> None:
        super().__init__()
        self._sources: list[_Source[Any]] = []

    def add_source(self, source: Observable[S], on_change: Callable[[S], None]) -> None:
        entry = _Source(source, on_change)
        self._sources.append(entry)
        if self.has_observers:
            entry.plug()

    def _on_active(self) -> None:
        try:
            for source in self._sources:
                source.plug()
        except Exception:
            self._on_inactive()
            raise

    def _on_inactive(self) -> None:
        for source in self._sources:
            source.unplug()


def map_observable(source: Observable[S], transform: Callable[[S], T]) -> Observable[T]:
    """Derive an observable emitting transform(value) for each upstream value."""
    result: MediatorObservable[T] = MediatorObservable()
    result.add_source(source, lambda value: result._set_value(transform(value)))
    return result


async def first_value(observable: Observable[T], timeout: float | None = None) -> T:
    """
    Subscribe until the observable emits once, then return that value.

    Raises:
        TimeoutError: If nothing is emitted within timeout seconds
    """
    future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    def _receive(value: T) -> None:
        if not future.done():
            future.set_result(value)

    subscription = observable.subscribe(_receive)
    try:
        return await asyncio.wait_for(future, timeout)
    finally:
        subscription.dispose()
