""" Reading and writing maps as JSON documents.

A document is either an object, whose members become the entries, or an array of `[key, value]` pairs. In
both forms a key may repeat; what happens then is decided by the duplicate policy. Arrays used as keys are
converted to tuples so that they can be hashed. """

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Hashable, TextIO

from finmap.core import Finmap
from finmap.core.alist import DuplicatePolicy
from finmap.util.text import pluralize

logger = logging.getLogger(__name__)


class LoadError(Exception):
    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


class _ObjectPairs(list):  # type: ignore[type-arg]
    """Internal. Keeps the members of a JSON object in order, including repeated names."""


def _plain(value: Any) -> Any:
    if isinstance(value, _ObjectPairs):
        return {k: _plain(v) for k, v in value}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def freeze_key(value: Any) -> Hashable:
    """Convert a decoded JSON value to a hashable key."""

    if isinstance(value, list):
        return tuple(freeze_key(v) for v in value)
    if isinstance(value, dict):
        raise TypeError("objects cannot be used as keys")
    return value


def thaw_key(value: Any) -> Any:
    if isinstance(value, tuple):
        return [thaw_key(v) for v in value]
    return value


def parse_key(text: str) -> Hashable:
    """Parse a key given on the command line. Valid JSON is decoded, anything else (including
    a JSON object, which cannot be a key) is taken as a string."""

    try:
        return freeze_key(json.loads(text))
    except (json.JSONDecodeError, TypeError):
        return text


def read_finmap(fp: TextIO, source: str, duplicates: DuplicatePolicy = "error") -> Finmap[Any, Any]:
    try:
        data = json.load(fp, object_pairs_hook=_ObjectPairs)
    except json.JSONDecodeError as exc:
        raise LoadError(source, f"invalid JSON ({exc})")

    if isinstance(data, _ObjectPairs):
        pairs = [(key, _plain(value)) for key, value in data]
    elif isinstance(data, list):
        pairs = []
        for index, item in enumerate(data):
            if not isinstance(item, list) or len(item) != 2:
                raise LoadError(source, f"item {index} is not a [key, value] pair")
            try:
                pairs.append((freeze_key(_plain(item[0])), _plain(item[1])))
            except TypeError as exc:
                raise LoadError(source, f"item {index}: {exc}")
    else:
        raise LoadError(source, f"expected an object or an array, got {type(data).__name__}")

    fmap = Finmap.from_pairs(pairs, duplicates)
    logger.info("Loaded %d %s from %s", len(fmap), pluralize("entry", len(fmap)), source)
    return fmap


def load_finmap(path: Path, duplicates: DuplicatePolicy = "error") -> Finmap[Any, Any]:
    try:
        with path.open(encoding="utf-8") as fp:
            return read_finmap(fp, str(path), duplicates)
    except OSError as exc:
        raise LoadError(str(path), exc.strerror or str(exc))


def dump_finmap(fmap: Finmap[Any, Any], fp: TextIO) -> None:
    """Write *fmap* as an array of pairs in canonical order."""

    json.dump([[thaw_key(entry.key), entry.value] for entry in fmap.entries()], fp, indent=2)
    fp.write("\n")
