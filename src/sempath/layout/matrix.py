"""Layout matrix: a grid of named cells that fixes where each node is drawn."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from sempath.errors import InvalidLayoutError


def _normalise(cell: object) -> str | None:
    """Blank strings and None mark an empty cell; names are stripped."""
    if cell is None:
        return None
    if isinstance(cell, float) and cell != cell:  # NaN from pandas
        return None
    name = str(cell).strip()
    return name or None


def grid_rows(grid: Sequence[Sequence[str | None]]) -> list[list[str | None]]:
    """Normalised copy of a nested grid; a bare string is not a row."""
    rows = [grid] if isinstance(grid, str) else list(grid)
    if any(isinstance(row, str) for row in rows):
        raise InvalidLayoutError(
            "Layout grid must be a sequence of rows, not strings; use build_layout(cells, rows) for a flat list",
            {"rows": rows},
        )
    return [[_normalise(c) for c in row] for row in rows]


class LayoutMatrix:
    """A ``rows x cols`` grid of optional node names.

    Every non-empty name appears at most once. Row 0 is the top row.
    """

    def __init__(self, grid: Sequence[Sequence[str | None]]) -> None:
        cells = grid_rows(grid)
        if not cells:
            raise InvalidLayoutError("Layout must have at least one row")
        width = len(cells[0])
        if width == 0:
            raise InvalidLayoutError("Layout must have at least one column")
        for r, row in enumerate(cells):
            if len(row) != width:
                raise InvalidLayoutError(
                    "Layout rows must all have the same length",
                    {"row": r, "expected": width, "got": len(row)},
                )

        positions: dict[str, tuple[int, int]] = {}
        for r, row in enumerate(cells):
            for c, name in enumerate(row):
                if name is None:
                    continue
                if name in positions:
                    raise InvalidLayoutError(
                        f"Node name {name!r} appears more than once in the layout",
                        {"first": positions[name], "second": (r, c)},
                    )
                positions[name] = (r, c)

        self._cells = cells
        self._positions = positions

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[str | None]]) -> LayoutMatrix:
        """Build from a nested list of rows."""
        return cls(grid)

    @property
    def rows(self) -> int:
        return len(self._cells)

    @property
    def cols(self) -> int:
        return len(self._cells[0])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    def cell(self, row: int, col: int) -> str | None:
        return self._cells[row][col]

    def names(self) -> list[str]:
        """Non-empty names in row-major order."""
        return list(self._positions)

    def positions(self) -> dict[str, tuple[int, int]]:
        """Map of name → (row, col)."""
        return dict(self._positions)

    def position(self, name: str) -> tuple[int, int]:
        try:
            return self._positions[name]
        except KeyError:
            raise KeyError(name) from None

    def to_grid(self) -> list[list[str | None]]:
        return [list(row) for row in self._cells]

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayoutMatrix):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"LayoutMatrix({self._cells!r})"

    def __str__(self) -> str:
        width = max((len(n) for n in self._positions), default=1)
        return "\n".join(" ".join((c or "").ljust(width) for c in row).rstrip() for row in self._cells)


def build_layout(cells: Iterable[str | None], rows: int) -> LayoutMatrix:
    """Fill a ``rows``-row grid with ``cells`` in row-major order.

    Raises:
        InvalidLayoutError: ``rows`` is not positive, the cell count is not a
            multiple of ``rows``, or a non-empty name repeats.
    """
    flat = list(cells)
    if rows < 1:
        raise InvalidLayoutError("Row count must be at least 1", {"rows": rows})
    if not flat or len(flat) % rows != 0:
        raise InvalidLayoutError(
            "Number of cells must be a non-zero multiple of the row count",
            {"cells": len(flat), "rows": rows},
        )
    cols = len(flat) // rows
    return LayoutMatrix([flat[r * cols : (r + 1) * cols] for r in range(rows)])


def read_layout_csv(path: str | Path) -> LayoutMatrix:
    """Read a layout from a headerless CSV file; each line is one grid row."""
    frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, skip_blank_lines=False)
    return LayoutMatrix(frame.values.tolist())
