"""Depression filling by priority flood (Wang & Liu, Barnes) and by iterative drainage."""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Callable, Iterator

import numpy as np

from demfill.grid import NO_DATA_VALUE, Dem, Flag, Node, neighbour

_NODATA_TOLERANCE = 0.00001

# Initial height of the transient surface in the iterative method.
_SURFACE_CEILING = 99999.0
# Minimum rise enforced over a drained neighbour; zero keeps flats flat.
_EPSILON = 0.0


def _is_nodata(value: float) -> bool:
    return abs(value - NO_DATA_VALUE) < _NODATA_TOLERANCE


def _neighbours(row: int, col: int) -> Iterator[tuple[int, int]]:
    """The eight neighbours of a cell, in direction order."""
    return (neighbour(direction, row, col) for direction in range(8))


def _is_border(values: list[list[float]], row: int, col: int) -> bool:
    """A valid cell is on the border if a neighbour is outside the grid or no-data."""
    height = len(values)
    width = len(values[0]) if height else 0
    return any(
        not (0 <= i_row < height and 0 <= i_col < width) or _is_nodata(values[i_row][i_col])
        for i_row, i_col in _neighbours(row, col)
    )


def _seed(values: list[list[float]], mark: Callable[[int, int], None]) -> list[Node]:
    """Mark no-data and border cells as processed and return the border as a heap."""
    heap: list[Node] = []
    for row, line in enumerate(values):
        for col, value in enumerate(line):
            if _is_nodata(value):
                mark(row, col)
            elif _is_border(values, row, col):
                heap.append(Node(row, col, value))
                mark(row, col)
    heapq.heapify(heap)
    return heap


def _to_dem(template: Dem, values: list[list[float]]) -> Dem:
    result = template.copy()
    if values:
        result.data[...] = np.array(values, dtype=np.float32)
    return result


def _flood(dem: Dem, pit_queue: bool) -> Dem:
    """Priority flood; with ``pit_queue`` raised cells bypass the priority queue."""
    values = dem.data.tolist()
    flag = Flag(dem.height, dem.width)
    queue = _seed(values, flag.set)
    pits: deque[Node] = deque()
    while queue or pits:
        node = pits.popleft() if pits else heapq.heappop(queue)
        for i_row, i_col in _neighbours(node.row, node.col):
            if flag.is_processed(i_row, i_col):
                continue
            flag.set(i_row, i_col)
            if values[i_row][i_col] <= node.spill:
                values[i_row][i_col] = node.spill
                if pit_queue:
                    pits.append(Node(i_row, i_col, node.spill))
                    continue
            heapq.heappush(queue, Node(i_row, i_col, values[i_row][i_col]))
    return _to_dem(dem, values)


def fill_wang(dem: Dem) -> Dem:
    """Fill depressions with the priority-flood method of Wang & Liu (2006).

    Returns a new DEM; the input is left unchanged.
    """
    return _flood(dem, pit_queue=False)


def fill_barnes(dem: Dem) -> Dem:
    """Fill depressions with the Priority-Flood variant of Barnes et al. (2014).

    Cells raised to their spill level go through a plain FIFO queue instead of
    the priority queue. Returns a new DEM; the input is left unchanged.
    """
    return _flood(dem, pit_queue=True)


def fill_planchon_darboux(dem: Dem) -> Dem:
    """Fill depressions by draining a flooded surface (Planchon & Darboux, 2001).

    Interior cells start at a very high level and are lowered repeatedly until
    nothing changes. Returns a new DEM; the input is left unchanged.
    """
    ground = dem.data.tolist()
    surface = [list(line) for line in ground]
    pending: list[tuple[int, int]] = []
    for row, line in enumerate(ground):
        for col, value in enumerate(line):
            if not _is_nodata(value) and not _is_border(ground, row, col):
                surface[row][col] = _SURFACE_CEILING
                pending.append((row, col))

    changed = True
    while changed:
        changed = False
        retained: list[tuple[int, int]] = []
        while pending:
            row, col = pending.pop()
            level = surface[row][col]
            base = ground[row][col]
            if level <= base:
                continue
            lowest = min(surface[i_row][i_col] for i_row, i_col in _neighbours(row, col))
            if base >= lowest + _EPSILON:
                surface[row][col] = base
                changed = True
            else:
                if level > lowest + _EPSILON:
                    surface[row][col] = lowest + _EPSILON
                    changed = True
                retained.append((row, col))
        pending = retained
    return _to_dem(dem, surface)