from __future__ import annotations

import pytest

from finmap.core import Finmap, lift_on
from finmap.core.testing import (
    assert_fold_commutative,
    assert_reorder_invariant,
    assert_reorder_invariant2,
    reorderings,
)


def _stored_keys(fmap: Finmap[int, str]) -> tuple[int, ...]:
    return lift_on(fmap, lambda alist: alist.keys())


def test__reorderings__produces_all_permutations_of_small_maps() -> None:
    fmap = Finmap.from_pairs([(1, "a"), (2, "b"), (3, "c")])
    orders = [_stored_keys(other) for other in reorderings(fmap)]
    assert len(orders) == 6
    assert len(set(orders)) == 6
    assert all(other == fmap for other in reorderings(fmap))


def test__reorderings__samples_large_maps() -> None:
    fmap = Finmap.from_pairs((key, str(key)) for key in range(8))
    orders = [_stored_keys(other) for other in reorderings(fmap, limit=10)]
    assert len(orders) == 10
    assert orders[0] == tuple(range(8))
    assert orders[1] == tuple(reversed(range(8)))
    assert orders == [_stored_keys(other) for other in reorderings(fmap, limit=10)]


def test__reorderings__never_exceeds_limit() -> None:
    fmap = Finmap.from_pairs([(1, "a"), (2, "b"), (3, "c")])
    assert [_stored_keys(other) for other in reorderings(fmap, limit=1)] == [(1, 2, 3)]
    assert list(reorderings(fmap, limit=0)) == []


def test__reorderings__keeps_family() -> None:
    from finmap.core import TypeFamily

    family = TypeFamily.uniform(str)
    fmap = Finmap.from_pairs([(1, "a"), (2, "b")], family=family)
    assert all(other.family is family for other in reorderings(fmap))


def test__assert_reorder_invariant__detects_order_sensitive_function() -> None:
    fmap = Finmap.from_pairs([(1, "a"), (2, "b")])
    with pytest.raises(AssertionError, match="is not invariant under reordering"):
        assert_reorder_invariant(lambda alist: alist.keys(), fmap)
    assert assert_reorder_invariant(lambda alist: sorted(alist.keys()), fmap) == [1, 2]


def test__assert_reorder_invariant2__detects_order_sensitive_function() -> None:
    m1 = Finmap.from_pairs([(1, "a"), (2, "b")])
    m2 = Finmap.from_pairs([(3, "c")])
    with pytest.raises(AssertionError):
        assert_reorder_invariant2(lambda a, b: a.union(b).keys(), m1, m2)


def test__assert_fold_commutative__detects_non_commutative_function() -> None:
    fmap = Finmap.from_pairs([(1, "a"), (2, "b"), (3, "c")])
    with pytest.raises(AssertionError):
        assert_fold_commutative(lambda acc, k, v: acc + v, "", fmap)
    assert assert_fold_commutative(lambda acc, k, v: acc | {v}, frozenset(), fmap) == {"a", "b", "c"}
