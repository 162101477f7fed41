""" Helpers to check that functions on association lists do not depend on the order of the entries.

Whether a function is invariant under reordering, or a fold function is commutative, cannot be decided in
general. These helpers evaluate a function on many reorderings of the same entries and fail if any two
results differ. """

from __future__ import annotations

import itertools
import math
import operator
import random
from typing import Any, Callable, Iterator, TypeVar

import pytest

from finmap.core.alist import AList, Sigma
from finmap.core.finmap import Finmap, lift_on

R = TypeVar("R")
D = TypeVar("D")

DEFAULT_LIMIT = 24


def _orders(entries: tuple[Sigma[Any, Any], ...], limit: int, seed: int) -> Iterator[tuple[Sigma[Any, Any], ...]]:
    if math.factorial(len(entries)) <= limit:
        yield from itertools.permutations(entries)
        return
    rng = random.Random(seed)
    yield entries
    yield entries[::-1]
    for _ in range(max(limit - 2, 0)):
        order = list(entries)
        rng.shuffle(order)
        yield tuple(order)


def reorderings(fmap: Finmap[Any, Any], limit: int = DEFAULT_LIMIT, seed: int = 0) -> Iterator[Finmap[Any, Any]]:
    """Yield maps equal to *fmap* whose representatives store the entries in different orders.

    If the entries have at most *limit* permutations, all of them are produced. Otherwise the original and the
    reversed order are produced, followed by seeded random shuffles up to *limit* maps in total.
    """

    entries = lift_on(fmap, lambda alist: alist.entries)
    for order in itertools.islice(_orders(entries, limit, seed), max(limit, 0)):
        yield Finmap(AList._trusted(order), fmap.family)


def assert_reorder_invariant(
    func: Callable[[AList[Any, Any]], R],
    fmap: Finmap[Any, Any],
    eq: Callable[[R, R], bool] = operator.eq,
    limit: int = DEFAULT_LIMIT,
) -> R:
    """Assert that *func* gives equal results (according to *eq*) for reorderings of the representative of
    *fmap*, and return the result. Pass `eq=AList.perm` for functions that return association lists."""

    expected = lift_on(fmap, func)
    for count, other in enumerate(reorderings(fmap, limit)):
        actual = lift_on(other, func)
        assert eq(expected, actual), (
            f"{getattr(func, '__qualname__', func)} is not invariant under reordering: "
            f"{expected!r} != {actual!r} (reordering #{count} of {fmap!r})"
        )
    return expected


def assert_reorder_invariant2(
    func: Callable[[AList[Any, Any], AList[Any, Any]], R],
    fmap1: Finmap[Any, Any],
    fmap2: Finmap[Any, Any],
    eq: Callable[[R, R], bool] = operator.eq,
    limit: int = 8,
) -> R:
    """Like :func:`assert_reorder_invariant`, reordering both arguments independently."""

    expected = func(lift_on(fmap1, lambda a: a), lift_on(fmap2, lambda a: a))
    for left, right in itertools.product(reorderings(fmap1, limit), reorderings(fmap2, limit, seed=1)):
        actual = func(lift_on(left, lambda a: a), lift_on(right, lambda a: a))
        assert eq(expected, actual), (
            f"{getattr(func, '__qualname__', func)} is not invariant under reordering: "
            f"{expected!r} != {actual!r} (for {fmap1!r} and {fmap2!r})"
        )
    return expected


def assert_fold_commutative(
    func: Callable[[D, Any, Any], D],
    initial: D,
    fmap: Finmap[Any, Any],
    limit: int = DEFAULT_LIMIT,
) -> D:
    """Assert that folding *func* over *fmap* gives the same result for every visited order of entries."""

    return assert_reorder_invariant(lambda alist: alist.fold(func, initial), fmap, limit=limit)


def random_finmap(rng: random.Random, size: int, key_range: int = 20, value_range: int = 5) -> Finmap[int, str]:
    """Create a map of *size* distinct integer keys taken from `range(key_range)` and short string values."""

    keys = rng.sample(range(key_range), size)
    return Finmap.from_pairs((key, f"v{rng.randrange(value_range)}") for key in keys)


def sample_finmaps(count: int = 12, seed: int = 0, max_size: int = 6) -> list[Finmap[int, str]]:
    rng = random.Random(seed)
    return [random_finmap(rng, rng.randint(0, max_size)) for _ in range(count)]


@pytest.fixture(name="sample_finmaps")
def _sample_finmaps_fixture() -> list[Finmap[int, str]]:
    return sample_finmaps()
