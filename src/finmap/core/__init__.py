__version__ = "0.1.0"

from finmap.core.alist import AList, Sigma
from finmap.core.exceptions import DuplicateKeyError, FamilyTypeError, FinalizedRefError, FinmapError
from finmap.core.family import Key, TypeFamily
from finmap.core.finmap import (
    Finmap,
    canonical_order,
    disjointkeys,
    empty,
    erase,
    extract,
    fold,
    insert,
    keys,
    lift_on,
    lift_on2,
    lookup,
    member,
    replace,
    singleton,
    union,
)
from finmap.core.ref import FinmapRef

__all__ = [
    "AList",
    "DuplicateKeyError",
    "FamilyTypeError",
    "FinalizedRefError",
    "Finmap",
    "FinmapError",
    "FinmapRef",
    "Key",
    "Sigma",
    "TypeFamily",
    "canonical_order",
    "disjointkeys",
    "empty",
    "erase",
    "extract",
    "fold",
    "insert",
    "keys",
    "lift_on",
    "lift_on2",
    "lookup",
    "member",
    "replace",
    "singleton",
    "union",
]
