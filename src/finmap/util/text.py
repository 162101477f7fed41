from __future__ import annotations

from typing_extensions import Protocol


class SupportsLen(Protocol):
    def __len__(self) -> int:
        ...


def pluralize(word: str, count: int | SupportsLen) -> str:
    if not isinstance(count, int):
        count = len(count)
    if count == 1:
        return word
    if word.endswith("y") and word[-2:-1] not in ("a", "e", "o", "u"):
        return word[:-1] + "ies"
    return f"{word}s"


def truncate(text: str, width: int, marker: str = "...") -> str:
    """Shorten *text* to at most *width* characters, ending in *marker* if anything was cut off."""

    if len(text) <= width:
        return text
    if width <= len(marker):
        return text[:width]
    return text[: width - len(marker)] + marker
