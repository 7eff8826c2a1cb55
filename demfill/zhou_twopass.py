"""Depression filling with the two-pass variant of the hybrid method of Zhou et al.

Slopes are traced in two passes. The first pass marks every rising cell
reachable from the traced cells. The second pass walks the traced region
again and sends each cell that touches unprocessed terrain to the priority
queue.
"""

from __future__ import annotations

import heapq
from collections import deque

from demfill.grid import Dem, Flag, Node
from demfill.priority_flood import _neighbours
from demfill.zhou import _ZhouFiller


class _TwoPassFiller(_ZhouFiller):
    """Hybrid filler whose slope tracing runs in two passes."""

    def __init__(self, dem: Dem) -> None:
        # Marks cells already visited by the second tracing pass.
        self.flag2 = Flag(dem.height, dem.width)
        super().__init__(dem)

    def _mark(self, row: int, col: int) -> None:
        self.flag.set_both(row, col, self.flag2)

    def _process_trace(self) -> None:
        flag, flag2 = self.flag, self.flag2
        values = self.values
        second = deque(self.trace)

        # First pass: mark every rising cell reachable from the traced cells.
        while self.trace:
            node = self.trace.popleft()
            for i_row, i_col in _neighbours(node.row, node.col):
                if flag.is_processed_direct(i_row, i_col):
                    continue
                i_spill = values[i_row][i_col]
                if i_spill > node.spill:
                    self.trace.append(Node(i_row, i_col, i_spill))
                    flag.set(i_row, i_col)

        # Second pass: cells of the traced region next to unprocessed terrain
        # become potential spill cells.
        while second:
            node = second.popleft()
            in_queue = False
            for i_row, i_col in _neighbours(node.row, node.col):
                if flag2.is_processed_direct(i_row, i_col):
                    continue
                if flag.is_processed_direct(i_row, i_col):
                    flag2.set(i_row, i_col)
                    second.append(Node(i_row, i_col))
                elif not in_queue:
                    heapq.heappush(
                        self.priority,
                        Node(node.row, node.col, values[node.row][node.col]),
                    )
                    in_queue = True


def fill_zhou_twopass(dem: Dem) -> Dem:
    """Fill depressions with the two-pass variant of Zhou et al.

    Returns a new DEM; the input is left unchanged.
    """
    return _TwoPassFiller(dem).fill(dem)