"""Depression filling with the priority-flood variant of Wei et al.

Like the hybrid method of Zhou et al., slopes are traced with a FIFO queue
and depressions are raised with another, but a traced cell goes to the
priority queue only when a lower neighbour of it has no lower spill path
through already processed cells.
"""

from __future__ import annotations

import heapq
from collections import deque

import numpy as np

from demfill.grid import NO_DATA_VALUE, Dem, Flag, Node, neighbour

_NODATA_TOLERANCE = 0.00001
# Neighbours with a direction index below this are checked again after tracing.
_INDEX_THRESHOLD = 2


def _is_nodata(value: float) -> bool:
    return abs(value - NO_DATA_VALUE) < _NODATA_TOLERANCE


class _WeiFiller:
    """Working state of one filling run over a copy of the elevations."""

    def __init__(self, dem: Dem) -> None:
        self.values: list[list[float]] = dem.data.tolist()
        self.height = dem.height
        self.width = dem.width
        self.flag = Flag(self.height, self.width)
        self.priority: list[Node] = []
        self.trace: deque[Node] = deque()
        self.depressions: deque[Node] = deque()

    def _in_grid(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def seed(self) -> None:
        """Push the grid edge and the valid neighbours of no-data cells."""
        flag = self.flag
        values = self.values
        last_row, last_col = self.height - 1, self.width - 1
        for row, line in enumerate(values):
            for col, value in enumerate(line):
                if flag.is_processed(row, col):
                    continue
                if _is_nodata(value):
                    flag.set(row, col)
                    for direction in range(8):
                        i_row, i_col = neighbour(direction, row, col)
                        if (
                            not self._in_grid(i_row, i_col)
                            or flag.is_processed(i_row, i_col)
                            or _is_nodata(values[i_row][i_col])
                        ):
                            continue
                        self.priority.append(Node(i_row, i_col, values[i_row][i_col]))
                        flag.set(i_row, i_col)
                elif row in (0, last_row) or col in (0, last_col):
                    self.priority.append(Node(row, col, value))
                    flag.set(row, col)
        heapq.heapify(self.priority)

    def run(self) -> None:
        flag = self.flag
        values = self.values
        while self.priority:
            node = heapq.heappop(self.priority)
            spill = node.spill
            for direction in range(8):
                i_row, i_col = neighbour(direction, node.row, node.col)
                if flag.is_processed(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                flag.set(i_row, i_col)
                if i_spill <= spill:
                    values[i_row][i_col] = spill
                    self.depressions.append(Node(i_row, i_col, spill))
                    self._process_pits()
                else:
                    self.trace.append(Node(i_row, i_col, i_spill))
                self._process_trace()

    def _process_pits(self) -> None:
        """Raise connected depression cells; hand higher cells to the tracer."""
        flag = self.flag
        values = self.values
        while self.depressions:
            node = self.depressions.popleft()
            for direction in range(8):
                i_row, i_col = neighbour(direction, node.row, node.col)
                if flag.is_processed_direct(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                flag.set(i_row, i_col)
                if i_spill > node.spill:
                    self.trace.append(Node(i_row, i_col, i_spill))
                else:
                    values[i_row][i_col] = node.spill
                    self.depressions.append(Node(i_row, i_col, node.spill))

    def _drains_elsewhere(self, node: Node, row: int, col: int, drained: set) -> bool:
        """Whether a lower cell next to ``node`` has a spill path or a lower outlet."""
        for direction in range(8):
            k_row, k_col = neighbour(direction, row, col)
            if (k_row, k_col) in drained or (
                self.flag.is_processed_direct(k_row, k_col)
                and self.values[k_row][k_col] < node.spill
            ):
                drained.add((row, col))
                return True
        return False

    def _process_trace(self) -> None:
        flag = self.flag
        values = self.values
        potential: deque[Node] = deque()
        while self.trace:
            node = self.trace.popleft()
            drained: set[tuple[int, int]] = set()
            for direction in range(8):
                i_row, i_col = neighbour(direction, node.row, node.col)
                if flag.is_processed_direct(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                if i_spill > node.spill:
                    self.trace.append(Node(i_row, i_col, i_spill))
                    flag.set(i_row, i_col)
                    continue
                if not self._drains_elsewhere(node, i_row, i_col, drained):
                    if direction < _INDEX_THRESHOLD:
                        potential.append(node)
                    else:
                        heapq.heappush(self.priority, node)
                    break

        for node in potential:
            if any(
                not flag.is_processed_direct(*neighbour(direction, node.row, node.col))
                for direction in range(8)
            ):
                heapq.heappush(self.priority, node)

    def result(self, template: Dem) -> Dem:
        filled = template.copy()
        if self.values:
            filled.data[...] = np.array(self.values, dtype=np.float32)
        return filled


def fill_wei(dem: Dem) -> Dem:
    """Fill depressions with the priority-flood variant of Wei et al.

    Returns a new DEM; the input is left unchanged.
    """
    filler = _WeiFiller(dem)
    filler.seed()
    filler.run()
    return filler.result(dem)