"""Depression filling with the hybrid priority-flood method of Zhou et al.

The priority queue only holds cells that may spill into unprocessed
terrain. Slopes are traced with a plain FIFO queue, and depressions are
raised to their spill level with another FIFO queue.
"""

from __future__ import annotations

import heapq
from collections import deque

from demfill.grid import Dem, Flag, Node
from demfill.priority_flood import _neighbours, _seed, _to_dem


class _ZhouFiller:
    """Working state of one filling run over a copy of the elevations."""

    def __init__(self, dem: Dem, check_boundary: bool = False) -> None:
        self.values: list[list[float]] = dem.data.tolist()
        self.flag = Flag(dem.height, dem.width)
        self.check_boundary = check_boundary
        self.trace: deque[Node] = deque()
        self.depressions: deque[Node] = deque()
        self.priority: list[Node] = _seed(self.values, self._mark)

    def _mark(self, row: int, col: int) -> None:
        self.flag.set(row, col)

    def fill(self, template: Dem) -> Dem:
        """Run the filling and return the result shaped like ``template``."""
        values = self.values
        while self.priority:
            node = heapq.heappop(self.priority)
            for i_row, i_col in _neighbours(node.row, node.col):
                if self.flag.is_processed(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                self._mark(i_row, i_col)
                if i_spill <= node.spill:
                    values[i_row][i_col] = node.spill
                    self.depressions.append(Node(i_row, i_col, node.spill))
                    self._process_pits()
                else:
                    self.trace.append(Node(i_row, i_col, i_spill))
                self._process_trace()
        return _to_dem(template, values)

    def _process_pits(self) -> None:
        """Raise connected depression cells; hand higher cells to the tracer."""
        values = self.values
        while self.depressions:
            node = self.depressions.popleft()
            for i_row, i_col in _neighbours(node.row, node.col):
                if self.flag.is_processed_direct(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                self._mark(i_row, i_col)
                if i_spill > node.spill:
                    self.trace.append(Node(i_row, i_col, i_spill))
                else:
                    values[i_row][i_col] = node.spill
                    self.depressions.append(Node(i_row, i_col, node.spill))

    def _is_true_boundary(self, row: int, col: int, level: float) -> bool:
        """A lower cell is a true boundary if no processed neighbour of it is lower still."""
        return not any(
            self.flag.is_processed_direct(j_row, j_col) and self.values[j_row][j_col] < level
            for j_row, j_col in _neighbours(row, col)
        )

    def _process_trace(self) -> None:
        """Follow rising slopes; cells next to lower unprocessed cells go to the priority queue."""
        flag = self.flag
        values = self.values
        while self.trace:
            node = self.trace.popleft()
            in_queue = False
            for i_row, i_col in _neighbours(node.row, node.col):
                if flag.is_processed_direct(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                if i_spill <= node.spill:
                    if not in_queue and (
                        not self.check_boundary
                        or self._is_true_boundary(i_row, i_col, i_spill)
                    ):
                        heapq.heappush(self.priority, node)
                        in_queue = True
                    continue
                self.trace.append(Node(i_row, i_col, i_spill))
                flag.set(i_row, i_col)


def fill_zhou_onepass(dem: Dem) -> Dem:
    """Fill depressions with the one-pass variant of Zhou et al.

    A traced cell enters the priority queue only when its lower neighbour has
    no lower processed neighbour of its own. Returns a new DEM; the input is
    left unchanged.
    """
    return _ZhouFiller(dem, check_boundary=True).fill(dem)


def fill_zhou_direct(dem: Dem) -> Dem:
    """Fill depressions with the direct variant of Zhou et al.

    Every traced cell with a lower unprocessed neighbour enters the priority
    queue. Returns a new DEM; the input is left unchanged.
    """
    return _ZhouFiller(dem, check_boundary=False).fill(dem)