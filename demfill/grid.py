"""Raster grid, processing flags and the priority node shared by the filling methods."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

NO_DATA_VALUE = -9999.0
_NODATA_TOLERANCE = 0.00001

# Neighbour layout around a cell:
#   5  6  7
#   4     0
#   3  2  1
ROW_OFFSETS = (0, 1, 1, 1, 0, -1, -1, -1)
COL_OFFSETS = (1, 1, 0, -1, -1, -1, 0, 1)

# Flow direction codes, indexed by neighbour direction:
#   32  64  128
#   16   0    1
#    8   4    2
DIRECTION_CODES = (1, 2, 4, 8, 16, 32, 64, 128)
INVERSE_CODES = (16, 32, 64, 128, 1, 2, 4, 8)

DIAGONAL_LENGTH = 1.41421


def neighbour(direction: int, row: int, col: int) -> tuple[int, int]:
    """Return the (row, col) of the neighbour in the given direction (0-7)."""
    return row + ROW_OFFSETS[direction], col + COL_OFFSETS[direction]


def step_length(direction: int) -> float:
    """Distance to the neighbour in a direction: sqrt(2) for diagonals, else 1."""
    return DIAGONAL_LENGTH if direction & 1 else 1.0


@dataclass(frozen=True, eq=False)
class Node:
    """A cell position with its spill elevation.

    Nodes compare equal by position and are ordered by spill elevation.
    """

    row: int
    col: int
    spill: float = NO_DATA_VALUE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.row == other.row and self.col == other.col

    def __hash__(self) -> int:
        return hash((self.row, self.col))

    def __lt__(self, other: Node) -> bool:
        return self.spill < other.spill

    def __le__(self, other: Node) -> bool:
        return self.spill <= other.spill

    def __gt__(self, other: Node) -> bool:
        return self.spill > other.spill

    def __ge__(self, other: Node) -> bool:
        return self.spill >= other.spill


class Dem:
    """A single-precision elevation grid indexed as ``dem[row, col]``."""

    def __init__(self, data) -> None:
        array = np.array(data, dtype=np.float32)
        if array.ndim != 2:
            raise ValueError(f"a DEM needs a two-dimensional array, got {array.ndim} dimensions")
        self.data = array

    @classmethod
    def empty(cls, height: int, width: int) -> Dem:
        """Create a grid of the given size with every cell set to no-data."""
        if height < 0 or width < 0:
            raise ValueError("grid dimensions must not be negative")
        return cls(np.full((height, width), NO_DATA_VALUE, dtype=np.float32))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def in_grid(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def _check(self, row: int, col: int) -> None:
        if not self.in_grid(row, col):
            raise IndexError(f"cell ({row}, {col}) is outside a {self.height}x{self.width} grid")

    def __getitem__(self, key: tuple[int, int]) -> float:
        row, col = key
        self._check(row, col)
        return float(self.data[row, col])

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        row, col = key
        self._check(row, col)
        self.data[row, col] = value

    def is_nodata(self, row: int, col: int) -> bool:
        return abs(self[row, col] - NO_DATA_VALUE) < _NODATA_TOLERANCE

    def copy(self) -> Dem:
        return Dem(self.data)

    def flow_direction(self, row: int, col: int, spill: float) -> int:
        """Return the D8 code of the steepest descent from a cell at ``spill``.

        Without a lower valid neighbour, the code points to the last
        neighbour that is outside the grid or no-data (direction 0 if none).
        """
        spill32 = np.float32(spill)
        steepest = None
        max_gradient = np.float32(0.0)
        last_outlet = 0
        for direction in range(8):
            i_row, i_col = neighbour(direction, row, col)
            valid = self.in_grid(i_row, i_col) and not self.is_nodata(i_row, i_col)
            if valid:
                i_spill = self.data[i_row, i_col]
                if i_spill < spill32:
                    gradient = (spill32 - i_spill) / np.float32(step_length(direction))
                    if max_gradient < gradient:
                        max_gradient = gradient
                        steepest = direction
            else:
                last_outlet = direction
        return DIRECTION_CODES[steepest if steepest is not None else last_outlet]

    def __repr__(self) -> str:
        return f"Dem(height={self.height}, width={self.width})"


class Flag:
    """One processed/unprocessed mark per grid cell."""

    def __init__(self, height: int, width: int) -> None:
        if height < 0 or width < 0:
            raise ValueError("grid dimensions must not be negative")
        self.height = height
        self.width = width
        self._marks = bytearray(height * width)

    def _index(self, row: int, col: int) -> int:
        index = row * self.width + col
        if not 0 <= index < len(self._marks):
            raise IndexError(f"cell ({row}, {col}) is outside a {self.height}x{self.width} grid")
        return index

    def set(self, row: int, col: int) -> None:
        self._marks[self._index(row, col)] = 1

    def set_both(self, row: int, col: int, other: Flag) -> None:
        """Mark the cell in this flag and in ``other``."""
        index = self._index(row, col)
        self._marks[index] = 1
        other._marks[index] = 1

    def is_processed(self, row: int, col: int) -> bool:
        """Whether the cell is marked; cells outside the grid count as processed."""
        if row < 0 or row >= self.height or col < 0 or col >= self.width:
            return True
        return bool(self._marks[row * self.width + col])

    def is_processed_direct(self, row: int, col: int) -> bool:
        """Whether the cell is marked, addressing it by its flat index without a grid check."""
        return bool(self._marks[self._index(row, col)])