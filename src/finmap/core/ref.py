""" This module provides the :class:`FinmapRef`, a mutable cell holding a :class:`Finmap` that can be shared between
threads. The maps themselves are immutable; the reference serializes replacing the map it points to. """

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, Hashable, TypeVar

from finmap.core.exceptions import FinalizedRefError
from finmap.core.finmap import Finmap

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")
logger = logging.getLogger(__name__)


class FinmapRef(Generic[K, V]):
    """A reference to the current version of a map.

    Reading with :meth:`get` never blocks on anything but a concurrent write. All writes go through a single
    lock, so a read-modify-write with :meth:`update` or :meth:`modify` cannot lose a concurrent update.
    Functions passed to those methods run while the lock is held and must not access the same reference.
    """

    def __init__(self, initial: Finmap[K, V] | None = None, name: str | None = None) -> None:
        self.name = name
        self._value: Finmap[K, V] = Finmap.empty() if initial is None else initial
        self._lock = threading.Lock()
        self._finalized = False

    def __repr__(self) -> str:
        return f"FinmapRef({self.name or hex(id(self))})"

    def _swap(self, value: Finmap[K, V]) -> Finmap[K, V]:
        """Internal. Must be called with the lock held."""

        if self._finalized:
            raise FinalizedRefError(f"{self} is finalized")
        if not isinstance(value, Finmap):
            raise TypeError(f"expected Finmap, got {type(value).__name__}")
        previous, self._value = self._value, value
        logger.debug("%s: %d -> %d entries", self, len(previous), len(value))
        return previous

    def get(self) -> Finmap[K, V]:
        with self._lock:
            return self._value

    def set(self, value: Finmap[K, V]) -> Finmap[K, V]:
        """Point the reference to *value* and return the map it pointed to before."""

        with self._lock:
            return self._swap(value)

    def compare_and_set(self, expected: Finmap[K, V], value: Finmap[K, V]) -> bool:
        """Point the reference to *value* only if it still points to the very same map object *expected*."""

        with self._lock:
            if self._value is not expected:
                return False
            self._swap(value)
            return True

    def modify(self, func: Callable[[Finmap[K, V]], tuple[R, Finmap[K, V]]]) -> R:
        """Atomically replace the map with the second item returned by *func* and return the first."""

        with self._lock:
            result, value = func(self._value)
            self._swap(value)
            return result

    def update(self, func: Callable[[Finmap[K, V]], Finmap[K, V]]) -> Finmap[K, V]:
        """Atomically replace the map with `func(map)` and return the new map."""

        def _update(current: Finmap[K, V]) -> tuple[Finmap[K, V], Finmap[K, V]]:
            new = func(current)
            return new, new

        return self.modify(_update)

    def insert(self, key: K, value: V) -> Finmap[K, V]:
        return self.update(lambda current: current.insert(key, value))

    def erase(self, key: Any) -> Finmap[K, V]:
        return self.update(lambda current: current.erase(key))

    def extract(self, key: Any) -> V | None:
        """Atomically remove *key* and return the value it had, if any."""

        return self.modify(lambda current: current.extract(key))

    def finalize(self) -> None:
        """Prevent further modification of the reference."""

        with self._lock:
            if not self._finalized:
                self._finalized = True
                logger.debug("%s: finalized with %d entries", self, len(self._value))

    def is_finalized(self) -> bool:
        return self._finalized
