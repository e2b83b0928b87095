"""Cell lists that bin particles into grid cells for short-range pair searches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, MutableSequence, Optional, Sequence

from .particle import (
    Node,
    for_each_node_pair,
    for_each_node_pair_between,
    for_each_node_pair_offset,
    iter_nodes,
)
from .vect import Vec2

PairFunc = Callable[[Node, Node], object]
OffsetPairFunc = Callable[[Node, Node, Vec2], object]


@dataclass
class RectBlock:
    """A block of cells from ``beg`` (inclusive) to ``end`` (exclusive)."""

    beg: Vec2 = field(default_factory=lambda: Vec2(0, 0))
    end: Vec2 = field(default_factory=lambda: Vec2(0, 0))


class CellListBase:
    """Geometry of a cell list: cell counts, origin and real-cell range.

    Along a direction in which the domain is shared with neighbouring
    processes, the cell list is padded by ``pad_w`` ghost cells on each side.
    """

    def __init__(self, domain, grid, pad_w: int = 1) -> None:
        self.n = Vec2(int(grid.n.x), int(grid.n.y))
        self.origin = Vec2(domain.origin.x, domain.origin.y)
        self.lc_recip = Vec2(grid.inverse_lc.x, grid.inverse_lc.y)
        self.l = Vec2(domain.l.x, domain.l.y)
        self.gl_l = Vec2(domain.gl_l.x, domain.gl_l.y)
        self.flag_padded = (domain.proc_size.x > 1, domain.proc_size.y > 1)
        self.real_cells = RectBlock(Vec2(0, 0), Vec2(self.n.x, self.n.y))
        for dim in (0, 1):
            if self.flag_padded[dim]:
                self.origin[dim] -= pad_w * grid.lc[dim]
                self.n[dim] += 2 * pad_w
                self.l[dim] += 2 * pad_w * grid.lc[dim]
                self.real_cells.beg[dim] = pad_w
                self.real_cells.end[dim] = self.n[dim] - pad_w
        self.n_cells = self.n.x * self.n.y
        print(f"Success to create cell list with size {self.n.x}\t{self.n.y}")

    def get_nx(self, x: float) -> int:
        return int((x - self.origin.x) * self.lc_recip.x)

    def get_ny(self, y: float) -> int:
        return int((y - self.origin.y) * self.lc_recip.y)

    def get_ic(self, p) -> int:
        """Index of the cell holding particle ``p``."""
        return self.get_nx(p.pos.x) + self.get_ny(p.pos.y) * self.n.x

    def count_in_real_cells(self, n_arr: Sequence[int]) -> int:
        """Sum the per-cell counts ``n_arr`` over the real (non-ghost) cells."""
        beg, end = self.real_cells.beg, self.real_cells.end
        return sum(
            n_arr[col + row * self.n.x]
            for row in range(beg.y, end.y)
            for col in range(beg.x, end.x)
        )

    def get_pos_offset(self, pos: Vec2) -> Vec2:
        """Shift that maps a position outside the padded domain back across the box."""
        offset = Vec2(0.0, 0.0)
        d_r = pos - self.origin
        for dim in (0, 1):
            if d_r[dim] < 0:
                offset[dim] = self.gl_l[dim]
            elif d_r[dim] >= self.l[dim]:
                offset[dim] = -self.gl_l[dim]
        return offset


def _bounds(beg, end) -> tuple[int, int, int, int]:
    (bx, by), (ex, ey) = beg, end
    return int(bx), int(by), int(ex), int(ey)


class CellList(CellListBase):
    """Cell list whose cells are heads of doubly linked lists of nodes."""

    def __init__(self, domain, grid, pad_w: int = 1) -> None:
        super().__init__(domain, grid, pad_w)
        self.head: list[Optional[Node]] = [None] * self.n_cells

    def for_each_pair(self, f1: PairFunc, f2: PairFunc,
                      ic_beg=None, ic_end=None) -> None:
        """Visit each pair in the same cell with ``f1`` and in adjacent cells with ``f2``."""
        if ic_beg is None:
            ic_beg = Vec2(0, 0)
        if ic_end is None:
            ic_end = self.real_cells.end
        bx, by, ex, ey = _bounds(ic_beg, ic_end)
        nx, ny = self.n.x, self.n.y
        head = self.head
        for y0 in range(by, ey):
            y1 = y0 + 1
            if y1 >= ny:
                y1 -= ny
            row0, row1 = y0 * nx, y1 * nx
            for x0 in range(bx, ex):
                x1 = x0 + 1
                if x1 >= nx:
                    x1 -= nx
                h0 = head[x0 + row0]
                h1 = head[x1 + row0]
                h2 = head[x0 + row1]
                h3 = head[x1 + row1]
                if h0 is not None:
                    for_each_node_pair(h0, f1)
                    for h in (h1, h2, h3):
                        if h is not None:
                            for_each_node_pair_between(h0, h, f2)
                if h1 is not None and h2 is not None:
                    for_each_node_pair_between(h1, h2, f2)

    def for_each_pair_fast(self, f1: PairFunc, f2: OffsetPairFunc,
                           ic_beg=None, ic_end=None) -> None:
        """Like :meth:`for_each_pair`, passing ``f2`` the shift that unwraps the second node."""
        if ic_beg is None:
            ic_beg = Vec2(0, 0)
        if ic_end is None:
            ic_end = self.real_cells.end
        bx, by, ex, ey = _bounds(ic_beg, ic_end)
        nx, ny = self.n.x, self.n.y
        head = self.head
        for y0 in range(by, ey):
            ly = 0.0
            y1 = y0 + 1
            if y1 >= ny:
                y1 -= ny
                ly = self.gl_l.y
            row0, row1 = y0 * nx, y1 * nx
            for x0 in range(bx, ex):
                lx = 0.0
                x1 = x0 + 1
                if x1 >= nx:
                    x1 -= nx
                    lx = self.gl_l.x
                h0 = head[x0 + row0]
                h1 = head[x1 + row0]
                h2 = head[x0 + row1]
                h3 = head[x1 + row1]
                if h0 is not None:
                    for_each_node_pair(h0, f1)
                    if h1 is not None:
                        for_each_node_pair_offset(h0, h1, Vec2(lx, 0.0), f2)
                    if h2 is not None:
                        for_each_node_pair_offset(h0, h2, Vec2(0.0, ly), f2)
                    if h3 is not None:
                        for_each_node_pair_offset(h0, h3, Vec2(lx, ly), f2)
                if h1 is not None and h2 is not None:
                    for_each_node_pair_offset(h1, h2, Vec2(-lx, ly), f2)

    def for_each_pair_slow(self, f1: PairFunc, f2: PairFunc,
                           ic_beg=None, ic_end=None) -> None:
        """Visit pairs using the right, upper-left, upper and upper-right neighbours."""
        if ic_beg is None or ic_end is None:
            beg = Vec2(self.real_cells.beg.x, self.real_cells.beg.y)
            end = Vec2(self.n.x, self.n.y)
            if self.flag_padded[0]:
                beg.x = 0
                end.x = self.n.x
            if self.flag_padded[1]:
                beg.y -= 1
                end.y -= 1
            if ic_beg is None:
                ic_beg = beg
            if ic_end is None:
                ic_end = end
        bx, by, ex, ey = _bounds(ic_beg, ic_end)
        nx, ny = self.n.x, self.n.y
        head = self.head
        for y0 in range(by, ey):
            row0 = y0 * nx
            for x0 in range(bx, ex):
                h0 = head[x0 + row0]
                if h0 is None:
                    continue
                for_each_node_pair(h0, f1)
                x_left = x0 - 1
                if x_left < 0:
                    x_left += nx
                x_right = x0 + 1
                if x_right >= nx:
                    x_right = 0
                y_up = y0 + 1
                if y_up >= ny:
                    y_up = 0
                row_up = y_up * nx
                for ic in (x_right + row0, x_left + row_up, x0 + row_up, x_right + row_up):
                    h = head[ic]
                    if h is not None:
                        for_each_node_pair_between(h0, h, f2)

    def for_each_cell(self, f: Callable[[list, int], object], beg, end) -> None:
        """Call ``f(heads, ic)`` for every cell in the block from ``beg`` to ``end``."""
        bx, by, ex, ey = _bounds(beg, end)
        for y in range(by, ey):
            row = y * self.n.x
            for x in range(bx, ex):
                f(self.head, x + row)

    def create(self, p_arr) -> None:
        """Insert every node of ``p_arr`` into its cell."""
        for p in p_arr:
            self.add_node(p)

    def recreate(self, p_arr) -> None:
        """Empty every cell and insert the nodes of ``p_arr`` again."""
        self.head = [None] * self.n_cells
        self.create(p_arr)

    def update(self, p: Node, ic_old: int, ic_new: int) -> None:
        """Move node ``p`` from cell ``ic_old`` to cell ``ic_new``."""
        p.break_away(self.head, ic_old)
        p.append_at_front(self.head, ic_new)

    def add_node(self, p: Node) -> None:
        p.append_at_front(self.head, self.get_ic(p))

    def clear(self, first, last) -> None:
        """Empty the cells in the block from ``first`` to ``last``."""
        bx, by, ex, ey = _bounds(first, last)
        for y in range(by, ey):
            row = y * self.n.x
            for x in range(bx, ex):
                self.head[x + row] = None

    def replace(self, p1: Node, p2: Node) -> None:
        """Make ``p1`` take the data and list position of ``p2``."""
        p1.pos = Vec2(p2.pos.x, p2.pos.y)
        p1.force = Vec2(p2.force.x, p2.force.y)
        p1.prev = p2.prev
        p1.next = p2.next
        if p1.next is not None:
            p1.next.prev = p1
        if p1.prev is not None:
            p1.prev.next = p1
        else:
            self.head[self.get_ic(p1)] = p1

    def make_compact(self, p_arr: MutableSequence[Node],
                     vacancy: MutableSequence[int]) -> None:
        """Remove the nodes at the indices in ``vacancy`` from ``p_arr``, filling gaps from the end.

        The vacant nodes must already be unlinked from the cell list.
        ``vacancy`` is emptied.
        """
        vacancy.sort(reverse=True)
        k = 0
        while k < len(vacancy):
            if len(p_arr) - 1 == vacancy[k]:
                p_arr.pop()
                k += 1
            else:
                i = vacancy.pop()
                p_arr[i] = p_arr.pop()
        vacancy.clear()

    def get_par_num(self, beg=None, end=None) -> int:
        """Number of nodes in the cells from ``beg`` to ``end`` (default: all cells)."""
        if beg is None:
            beg = Vec2(0, 0)
        if end is None:
            end = self.n
        bx, by, ex, ey = _bounds(beg, end)
        return sum(
            sum(1 for _ in iter_nodes(self.head[x + y * self.n.x]))
            for y in range(by, ey)
            for x in range(bx, ex)
        )