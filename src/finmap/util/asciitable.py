from __future__ import annotations

import re
from typing import Iterator, Sequence, TextIO

from termcolor import colored

from finmap.util.text import truncate

REGEX_ANSI_ESCAPE = re.compile(
    r"""
    \x1B  # ESC
    (?:   # 7-bit C1 Fe (except CSI)
        [@-Z\\-_]
    |     # or [ for CSI, followed by a control sequence
        \[
        [0-?]*  # Parameter bytes
        [ -/]*  # Intermediate bytes
        [@-~]   # Final byte
    )
""",
    re.VERBOSE,
)


def visible_len(text: str) -> int:
    return len(REGEX_ANSI_ESCAPE.sub("", text))


class AsciiTable:
    """A table of text cells that is printed with aligned columns and a bold header row.

    :param max_cell_width: Plain (uncolored) cells longer than this are truncated.
    """

    def __init__(self, headers: Sequence[str] = (), max_cell_width: int | None = None) -> None:
        self.headers: list[str] = list(headers)
        self.rows: list[Sequence[str]] = []
        self.max_cell_width = max_cell_width

    def __iter__(self) -> Iterator[Sequence[str]]:
        yield self.headers
        yield from self.rows

    def __len__(self) -> int:
        return len(self.rows)

    def add_row(self, *cells: str) -> None:
        if len(cells) != len(self.headers):
            raise ValueError(f"expected {len(self.headers)} cells, got {len(cells)}")
        if self.max_cell_width is not None:
            cells = tuple(
                truncate(cell, self.max_cell_width) if visible_len(cell) == len(cell) else cell for cell in cells
            )
        self.rows.append(cells)

    def print(self, fp: TextIO | None = None) -> None:
        widths = [max(visible_len(row[col_idx]) for row in self) for col_idx in range(len(self.headers))]

        def _pad(cell: str, width: int) -> str:
            return cell + " " * (width - visible_len(cell))

        last = len(self.headers) - 1
        for row_idx, row in enumerate(self):
            cells = [x if col_idx == last else _pad(x, widths[col_idx]) for col_idx, x in enumerate(row)]
            if row_idx == 0:
                cells = [colored(x, attrs=["bold"]) for x in cells]
            if row_idx == 1:
                print("  ".join("-" * width for width in widths), file=fp)
            print("  ".join(cells), file=fp)
