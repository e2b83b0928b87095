"""Brownian particles and the doubly linked nodes that hold them in cell lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, MutableSequence, Optional, TypeVar

from .rand import UniformSource
from .vect import Vec2

N = TypeVar("N", bound="Node")


@dataclass
class Particle:
    """A point particle with a position and an accumulated force."""

    pos: Vec2 = field(default_factory=Vec2)
    force: Vec2 = field(default_factory=Vec2)

    @classmethod
    def random(cls, rng: UniformSource, l: Vec2, origin: Vec2):
        """A particle placed uniformly in the box of size ``l`` at ``origin``."""
        x = rng.doub() * l.x + origin.x
        y = rng.doub() * l.y + origin.y
        return cls(pos=Vec2(x, y), force=Vec2(0.0, 0.0))

    def get_theta(self) -> float:
        """Orientation angle; these particles carry none."""
        return 0.0


@dataclass(eq=False)
class Node(Particle):
    """A particle linked into a doubly linked list stored as a list of heads."""

    prev: Optional[Node] = field(default=None, repr=False)
    next: Optional[Node] = field(default=None, repr=False)

    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def append_at_front(self, heads: MutableSequence[Optional[Node]], ic: int) -> None:
        """Insert this node at the front of list ``heads[ic]``."""
        self.prev = None
        self.next = heads[ic]
        if self.next is not None:
            self.next.prev = self
        heads[ic] = self

    def break_away(self, heads: MutableSequence[Optional[Node]], ic: int) -> None:
        """Unlink this node from list ``heads[ic]``."""
        if self.prev is not None:
            self.prev.next = self.next
            if self.next is not None:
                self.next.prev = self.prev
        else:
            heads[ic] = self.next
            if self.next is not None:
                self.next.prev = None


def iter_nodes(head: Optional[N]) -> Iterator[N]:
    """Yield the nodes of the list starting at ``head``."""
    node = head
    while node is not None:
        yield node
        node = node.next


def for_each_node_pair(head: Optional[N], f: Callable[[N, N], object]) -> None:
    """Apply ``f`` to every unordered pair of nodes within one list."""
    for node1 in iter_nodes(head):
        for node2 in iter_nodes(node1.next):
            f(node1, node2)


def for_each_node_pair_between(head1: Optional[N], head2: Optional[N],
                               f: Callable[[N, N], object]) -> None:
    """Apply ``f`` to every pair with one node from each of two lists."""
    for node1 in iter_nodes(head1):
        for node2 in iter_nodes(head2):
            f(node1, node2)


def for_each_node_pair_offset(head1: Optional[N], head2: Optional[N], offset,
                              f: Callable[[N, N, object], object]) -> None:
    """Like :func:`for_each_node_pair_between`, passing ``offset`` to ``f``."""
    for node1 in iter_nodes(head1):
        for node2 in iter_nodes(head2):
            f(node1, node2, offset)


def count_node(head: Optional[Node]) -> int:
    """Number of nodes in the list starting at ``head``."""
    return sum(1 for _ in iter_nodes(head))