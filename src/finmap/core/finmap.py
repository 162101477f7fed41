""" This module provides the :class:`Finmap` class, a persistent finite map from keys to values in which every key
occurs at most once and equality does not depend on the order in which entries happen to be stored.

A :class:`Finmap` holds one :class:`AList` as its *representative*. Any other association list with the same
entries in a different order represents the same map. The order of the representative is never observable:
every query and every derivation is implemented by handing the representative to a function through
:func:`lift_on` or :func:`lift_on2`, and that function must give the same result for every reordering of its
input. Functions that need an order for presentation (:meth:`Finmap.entries`, :func:`repr`) use the canonical
order defined by :func:`canonical_order`. """

from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, Iterable, Mapping, TypeVar, overload

from finmap.core.alist import AList, DuplicatePolicy, EntryLike, Sigma
from finmap.core.family import Key, TypeFamily
from finmap.util.repr import SafeRepr

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
W = TypeVar("W")
D = TypeVar("D")
R = TypeVar("R")
T = TypeVar("T")
U = TypeVar("U")


def lift_on(fmap: Finmap[K, V], func: Callable[[AList[K, V]], R]) -> R:
    """Evaluate *func* on the representative of *fmap*.

    The caller must ensure that *func* returns equal results for association lists that are permutations of
    each other. This is not checked; see :func:`finmap.core.testing.assert_reorder_invariant`.
    """

    return func(fmap._alist)


def lift_on2(
    fmap1: Finmap[K, V],
    fmap2: Finmap[Any, Any],
    func: Callable[[AList[K, V], AList[Any, Any]], R],
) -> R:
    """Like :func:`lift_on`, but for a function of two maps. *func* must be invariant under independent
    reordering of both of its arguments."""

    return func(fmap1._alist, fmap2._alist)


def canonical_order(entry: Sigma[Any, Any]) -> tuple[str, str, str, int]:
    """Sort key for presenting the entries of a map independent of their stored order.

    Entries are ordered by the type name and `repr` of their key. Keys that look the same are ordered by the
    `repr` of their value, then by their hash. Entries that still tie print identically."""

    return (type(entry.key).__qualname__, repr(entry.key), repr(entry.value), hash(entry.key))


class Finmap(SafeRepr, Generic[K, V]):
    """An immutable finite map with unique keys and order-independent equality.

    :param alist: The representative association list. Its order is discarded.
    :param family: If specified, every value must match the type that the family assigns to its key. The
        family is carried over to every map derived from this one.
    :raises FamilyTypeError: If an entry in *alist* does not match *family*.
    """

    def __init__(self, alist: AList[K, V] | None = None, family: TypeFamily | None = None) -> None:
        alist = AList() if alist is None else alist
        if family is not None:
            for entry in alist:
                family.check(entry.key, entry.value)
        self._alist = alist
        self._family = family
        self._hash: int | None = None

    def _derive(self, alist: AList[K, W]) -> Finmap[K, W]:
        """Internal. Create a map with the same family from entries that have already been checked."""

        if alist is self._alist:
            return self  # type: ignore[return-value]
        fmap: Finmap[K, W] = type(self).__new__(type(self))
        fmap._alist = alist
        fmap._family = self._family
        fmap._hash = None
        return fmap

    def _check(self, key: Any, value: T) -> T:
        return value if self._family is None else self._family.check(key, value)

    # Construction

    @classmethod
    def empty(cls, family: TypeFamily | None = None) -> Finmap[Any, Any]:
        return cls(AList(), family)

    @classmethod
    def singleton(cls, key: K, value: V, family: TypeFamily | None = None) -> Finmap[K, V]:
        return cls(AList([Sigma(key, value)]), family)

    @classmethod
    def of_alist(cls, alist: AList[K, V], family: TypeFamily | None = None) -> Finmap[K, V]:
        """The canonical constructor. Discards the order of *alist*."""

        return cls(alist, family)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[EntryLike[K, V]],
        duplicates: DuplicatePolicy = "error",
        family: TypeFamily | None = None,
    ) -> Finmap[K, V]:
        """Create a map from key-value pairs. See :meth:`AList.from_pairs` for the *duplicates* policies.

        :raises DuplicateKeyError: If a key repeats and *duplicates* is `error`.
        """

        return cls(AList.from_pairs(pairs, duplicates), family)

    @classmethod
    def from_mapping(cls, mapping: Mapping[K, V], family: TypeFamily | None = None) -> Finmap[K, V]:
        return cls(AList._trusted(tuple(Sigma(k, v) for k, v in mapping.items())), family)

    # Presentation

    def __safe_repr__(self) -> str:
        items = ", ".join(f"{entry.key!r}: {entry.value!r}" for entry in self.entries())
        return f"Finmap({{{items}}})"

    @property
    def family(self) -> TypeFamily | None:
        return self._family

    def entries(self) -> tuple[Sigma[K, V], ...]:
        """Return the entries in canonical order."""

        return tuple(sorted(self._alist, key=canonical_order))

    def to_alist(self) -> AList[K, V]:
        """Return an association list with the entries of this map in canonical order."""

        return AList._trusted(self.entries())

    def to_dict(self) -> dict[K, V]:
        return {entry.key: entry.value for entry in self.entries()}

    # Queries

    def __len__(self) -> int:
        return lift_on(self, len)

    def __bool__(self) -> bool:
        return len(self) > 0

    def size(self) -> int:
        return len(self)

    def is_empty(self) -> bool:
        return len(self) == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Finmap):
            return NotImplemented
        if self is other:
            return True
        return lift_on2(self, other, AList.perm)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = lift_on(self, lambda alist: hash(frozenset((e.key, e.value) for e in alist)))
        return self._hash

    def __contains__(self, key: object) -> bool:
        return self.member(key)

    def member(self, key: Any) -> bool:
        return lift_on(self, lambda alist: alist.member(key))

    @overload
    def lookup(self, key: Key[T]) -> T | None:
        ...

    @overload
    def lookup(self, key: K) -> V | None:
        ...

    def lookup(self, key: Any) -> Any:
        """Return the value for *key*, or `None` if the key is not in the map. Use :meth:`member` to tell a
        missing key apart from a key whose value is `None`."""

        return lift_on(self, lambda alist: alist.lookup(key))

    @overload
    def get(self, key: Any) -> V | None:
        ...

    @overload
    def get(self, key: Any, default: U) -> V | U:
        ...

    def get(self, key: Any, default: Any = None) -> Any:
        return self.lookup(key) if self.member(key) else default

    def __getitem__(self, key: Any) -> V:
        if not self.member(key):
            raise KeyError(key)
        return self.lookup(key)  # type: ignore[return-value]

    def keys(self) -> frozenset[K]:
        return lift_on(self, lambda alist: frozenset(alist.keys()))

    def fold(self, func: Callable[[D, K, V], D], initial: D) -> D:
        """Combine all entries into an accumulator, starting with *initial*.

        The order in which entries are visited is unspecified. The result is only well defined if *func* is
        commutative across distinct entries, i.e. `func(func(d, k1, v1), k2, v2) == func(func(d, k2, v2), k1, v1)`
        for all `k1 != k2`. Use :func:`finmap.core.testing.assert_fold_commutative` to check a function in tests.
        """

        return lift_on(self, lambda alist: alist.fold(func, initial))

    def any(self, pred: Callable[[K, V], bool]) -> bool:
        return lift_on(self, lambda alist: any(pred(e.key, e.value) for e in alist))

    def all(self, pred: Callable[[K, V], bool]) -> bool:
        return lift_on(self, lambda alist: all(pred(e.key, e.value) for e in alist))

    def disjoint_keys(self, other: Finmap[Any, Any]) -> bool:
        """Returns `True` if no key is a member of both maps."""

        return lift_on2(self, other, AList.disjoint_keys)

    # Derivation

    def insert(self, key: K, value: V) -> Finmap[K, V]:
        """Return a map in which *key* is paired with *value*, whether or not it was present before."""

        self._check(key, value)
        return self._derive(lift_on(self, lambda alist: alist.insert(key, value)))

    def replace(self, key: Any, value: V) -> Finmap[K, V]:
        """Return a map in which the value of *key* is *value* if *key* is present. Does not add *key*."""

        self._check(key, value)
        return self._derive(lift_on(self, lambda alist: alist.replace(key, value)))

    def erase(self, key: Any) -> Finmap[K, V]:
        return self._derive(lift_on(self, lambda alist: alist.erase(key)))

    @overload
    def extract(self, key: Key[T]) -> tuple[T | None, Finmap[K, V]]:
        ...

    @overload
    def extract(self, key: Any) -> tuple[V | None, Finmap[K, V]]:
        ...

    def extract(self, key: Any) -> tuple[Any, Finmap[K, V]]:
        """Look up and remove *key* in one step. Equivalent to `(self.lookup(key), self.erase(key))`."""

        value, alist = lift_on(self, lambda alist: alist.extract(key))
        return value, self._derive(alist)

    def union(self, other: Finmap[K, V]) -> Finmap[K, V]:
        """Left-biased union. Keys present in both maps keep the value of this map. The union is associative,
        but only commutative if the maps have disjoint keys."""

        if self._family is not None and other._family is not self._family:
            for entry in other._alist:
                if not self.member(entry.key):
                    self._family.check(entry.key, entry.value)
        return self._derive(lift_on2(self, other, AList.union))

    def __or__(self, other: Finmap[K, V]) -> Finmap[K, V]:
        if not isinstance(other, Finmap):
            return NotImplemented
        return self.union(other)

    def sdiff(self, other: Finmap[Any, Any]) -> Finmap[K, V]:
        """Return this map without the keys of *other*."""

        return self._derive(lift_on2(self, other, lambda a, b: a.filter(lambda key, _: not b.member(key))))

    def __sub__(self, other: Finmap[Any, Any]) -> Finmap[K, V]:
        if not isinstance(other, Finmap):
            return NotImplemented
        return self.sdiff(other)

    def filter(self, pred: Callable[[K, V], bool]) -> Finmap[K, V]:
        return self._derive(lift_on(self, lambda alist: alist.filter(pred)))

    def map_values(self, func: Callable[[K, V], W], family: TypeFamily | None = None) -> Finmap[K, W]:
        """Apply *func* to every entry. The values of the new map are checked against *family*, which replaces
        the family of this map."""

        return type(self)(lift_on(self, lambda alist: alist.map_values(func)), family)


# Function forms with the argument order of the operations they stand for.


def empty(family: TypeFamily | None = None) -> Finmap[Any, Any]:
    return Finmap.empty(family)


def singleton(key: K, value: V, family: TypeFamily | None = None) -> Finmap[K, V]:
    return Finmap.singleton(key, value, family)


def lookup(key: Any, fmap: Finmap[K, V]) -> V | None:
    return fmap.lookup(key)


def member(key: Any, fmap: Finmap[Any, Any]) -> bool:
    return fmap.member(key)


def insert(key: K, value: V, fmap: Finmap[K, V]) -> Finmap[K, V]:
    return fmap.insert(key, value)


def replace(key: Any, value: V, fmap: Finmap[K, V]) -> Finmap[K, V]:
    return fmap.replace(key, value)


def erase(key: Any, fmap: Finmap[K, V]) -> Finmap[K, V]:
    return fmap.erase(key)


def extract(key: Any, fmap: Finmap[K, V]) -> tuple[V | None, Finmap[K, V]]:
    return fmap.extract(key)


def union(fmap1: Finmap[K, V], fmap2: Finmap[K, V]) -> Finmap[K, V]:
    return fmap1.union(fmap2)


def keys(fmap: Finmap[K, Any]) -> frozenset[K]:
    return fmap.keys()


def fold(func: Callable[[D, K, V], D], initial: D, fmap: Finmap[K, V]) -> D:
    return fmap.fold(func, initial)


def disjointkeys(fmap1: Finmap[Any, Any], fmap2: Finmap[Any, Any]) -> bool:
    return fmap1.disjoint_keys(fmap2)
