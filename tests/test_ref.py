from __future__ import annotations

import threading
from typing import Callable

import pytest

from finmap.core import FinalizedRefError, Finmap, FinmapRef


def _run_threads(count: int, target: Callable[[int], None]) -> None:
    threads = [threading.Thread(target=target, args=(index,)) for index in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def test__FinmapRef__get_set_update() -> None:
    ref: FinmapRef[int, str] = FinmapRef(name="test")
    assert ref.get() == Finmap.empty()
    assert repr(ref) == "FinmapRef(test)"

    previous = ref.set(Finmap.singleton(1, "a"))
    assert previous == Finmap.empty()
    assert ref.get() == Finmap.singleton(1, "a")

    assert ref.update(lambda fmap: fmap.insert(2, "b")) == Finmap.from_mapping({1: "a", 2: "b"})
    assert ref.insert(3, "c").keys() == {1, 2, 3}
    assert ref.erase(1).keys() == {2, 3}
    assert ref.extract(2) == "b"
    assert ref.extract(2) is None
    assert ref.get() == Finmap.singleton(3, "c")


def test__FinmapRef__set_requires_finmap() -> None:
    ref: FinmapRef[int, str] = FinmapRef()
    with pytest.raises(TypeError):
        ref.set({1: "a"})  # type: ignore[arg-type]


def test__FinmapRef__compare_and_set() -> None:
    initial = Finmap.singleton(1, "a")
    ref = FinmapRef(initial)
    assert ref.compare_and_set(initial, initial.insert(2, "b"))
    assert not ref.compare_and_set(initial, Finmap.empty())
    assert ref.get().keys() == {1, 2}


def test__FinmapRef__finalize() -> None:
    ref = FinmapRef(Finmap.singleton(1, "a"))
    assert not ref.is_finalized()
    ref.finalize()
    ref.finalize()
    assert ref.is_finalized()
    with pytest.raises(FinalizedRefError):
        ref.insert(2, "b")
    with pytest.raises(FinalizedRefError):
        ref.set(Finmap.empty())
    assert ref.get() == Finmap.singleton(1, "a")


def test__FinmapRef__concurrent_updates_are_not_lost() -> None:
    ref: FinmapRef[str, int] = FinmapRef(Finmap.singleton("count", 0))

    def worker(index: int) -> None:
        for _ in range(200):
            ref.update(lambda fmap: fmap.insert("count", fmap["count"] + 1))
            ref.insert(f"{index}", index)

    _run_threads(8, worker)
    assert ref.get().lookup("count") == 1600
    assert len(ref.get()) == 9


def test__FinmapRef__concurrent_extract_hands_out_each_value_once() -> None:
    ref = FinmapRef(Finmap.from_pairs((key, key) for key in range(100)))
    taken: list[list[int]] = [[] for _ in range(4)]

    def worker(index: int) -> None:
        for key in range(100):
            value = ref.extract(key)
            if value is not None:
                taken[index].append(value)

    _run_threads(4, worker)
    values = [value for values in taken for value in values]
    assert sorted(values) == list(range(100))
    assert ref.get().is_empty()
