""" This module provides the :class:`AList`, an immutable ordered association list with the guarantee that no
two of its entries share a key. It is the representation that :class:`~finmap.core.finmap.Finmap` is built on. """

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Tuple, TypeVar, Union

from typing_extensions import Literal

from finmap.core.exceptions import DuplicateKeyError
from finmap.util.repr import SafeRepr
from finmap.util.text import pluralize

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
W = TypeVar("W")
D = TypeVar("D")
logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["error", "first", "last"]
DUPLICATE_POLICIES: tuple[DuplicatePolicy, ...] = ("error", "first", "last")


@dataclasses.dataclass(frozen=True)
class Sigma(Generic[K, V]):
    """A key together with the value it is paired with."""

    key: K
    value: V

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value


EntryLike = Union[Sigma[K, V], Tuple[K, V]]


def _to_sigma(item: EntryLike[K, V]) -> Sigma[K, V]:
    if isinstance(item, Sigma):
        return item
    key, value = item
    return Sigma(key, value)


def _check_nodupkeys(entries: tuple[Sigma[K, V], ...]) -> tuple[Sigma[K, V], ...]:
    seen: dict[K, int] = {}
    for index, entry in enumerate(entries):
        first = seen.setdefault(entry.key, index)
        if first != index:
            raise DuplicateKeyError(entry.key, first, index)
    return entries


class AList(SafeRepr, Generic[K, V]):
    """An ordered sequence of :class:`Sigma` entries in which every key occurs at most once.

    The list is immutable. Every operation returns a new list (or the same list if nothing changed) that again
    satisfies the no-duplicate-keys invariant. Keys must be hashable; lookups are linear in the length of
    the list.

    :raises DuplicateKeyError: If *entries* contains the same key twice.
    """

    def __init__(self, entries: Iterable[EntryLike[K, V]] = ()) -> None:
        self._entries: tuple[Sigma[K, V], ...] = _check_nodupkeys(tuple(map(_to_sigma, entries)))

    @classmethod
    def _trusted(cls, entries: tuple[Sigma[K, V], ...]) -> AList[K, V]:
        """Internal. Wrap *entries* that are already known to have distinct keys."""

        alist = cls.__new__(cls)
        alist._entries = entries
        return alist

    @classmethod
    def from_pairs(cls, pairs: Iterable[EntryLike[K, V]], duplicates: DuplicatePolicy = "error") -> AList[K, V]:
        """Create an association list from *pairs*, dealing with repeated keys according to *duplicates*.

        * `error`: raise a :class:`DuplicateKeyError`.
        * `first`: the first occurrence of a key wins, later ones are dropped.
        * `last`: the last occurrence of a key provides the value, at the position of the first occurrence.
        """

        if duplicates == "error":
            return cls(pairs)
        if duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"invalid duplicate policy: {duplicates!r}")

        index: dict[K, int] = {}
        result: list[Sigma[K, V]] = []
        dropped = 0
        for entry in map(_to_sigma, pairs):
            position = index.get(entry.key)
            if position is None:
                index[entry.key] = len(result)
                result.append(entry)
                continue
            dropped += 1
            if duplicates == "last":
                result[position] = entry

        if dropped:
            logger.debug(
                "Normalized %d duplicate %s (policy: %s)", dropped, pluralize("entry", dropped), duplicates
            )
        return cls._trusted(tuple(result))

    def __safe_repr__(self) -> str:
        return f"AList([{', '.join(f'({e.key!r}, {e.value!r})' for e in self._entries)}])"

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Sigma[K, V]]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AList):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    @property
    def entries(self) -> tuple[Sigma[K, V], ...]:
        return self._entries

    def keys(self) -> tuple[K, ...]:
        """Return the keys in list order."""

        return tuple(entry.key for entry in self._entries)

    def _index(self, key: Any) -> int:
        for index, entry in enumerate(self._entries):
            if entry.key == key:
                return index
        return -1

    def member(self, key: Any) -> bool:
        return self._index(key) >= 0

    def lookup(self, key: Any) -> V | None:
        """Return the value paired with *key*, or `None` if the key is not in the list."""

        index = self._index(key)
        return None if index < 0 else self._entries[index].value

    def erase(self, key: Any) -> AList[K, V]:
        index = self._index(key)
        if index < 0:
            return self
        return self._trusted(self._entries[:index] + self._entries[index + 1 :])

    def insert(self, key: K, value: V) -> AList[K, V]:
        """Remove any existing entry for *key* and put the new entry at the head of the list."""

        return self._trusted((Sigma(key, value),) + self.erase(key)._entries)

    def replace(self, key: Any, value: V) -> AList[K, V]:
        """Replace the value of *key* in place. Does nothing if *key* is not in the list."""

        index = self._index(key)
        if index < 0:
            return self
        entry = Sigma(self._entries[index].key, value)
        return self._trusted(self._entries[:index] + (entry,) + self._entries[index + 1 :])

    def extract(self, key: Any) -> tuple[V | None, AList[K, V]]:
        """Look up and remove *key* with a single scan of the list."""

        index = self._index(key)
        if index < 0:
            return None, self
        return self._entries[index].value, self._trusted(self._entries[:index] + self._entries[index + 1 :])

    def union(self, other: AList[K, V]) -> AList[K, V]:
        """Left-biased union: all entries of this list followed by the entries of *other* whose key is not
        already present."""

        if not other._entries:
            return self
        if not self._entries:
            return other
        own_keys = set(self.keys())
        tail = tuple(entry for entry in other._entries if entry.key not in own_keys)
        return self._trusted(self._entries + tail)

    def disjoint_keys(self, other: AList[K, Any]) -> bool:
        return set(self.keys()).isdisjoint(other.keys())

    def perm(self, other: AList[Any, Any]) -> bool:
        """Returns `True` if *other* contains the same entries as this list, in any order."""

        if len(self._entries) != len(other._entries):
            return False
        for entry in self._entries:
            index = other._index(entry.key)
            if index < 0:
                return False
            value = other._entries[index].value
            if value is not entry.value and value != entry.value:
                return False
        return True

    def filter(self, pred: Callable[[K, V], bool]) -> AList[K, V]:
        return self._trusted(tuple(entry for entry in self._entries if pred(entry.key, entry.value)))

    def map_values(self, func: Callable[[K, V], W]) -> AList[K, W]:
        entries = tuple(Sigma(entry.key, func(entry.key, entry.value)) for entry in self._entries)
        return AList._trusted(entries)

    def fold(self, func: Callable[[D, K, V], D], initial: D) -> D:
        """Apply *func* to an accumulator and every entry, in list order."""

        acc = initial
        for entry in self._entries:
            acc = func(acc, entry.key, entry.value)
        return acc
