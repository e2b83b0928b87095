"""Uniform pseudo-random generators and random point picking helpers."""

from __future__ import annotations

import math
from typing import Callable, MutableSequence, Protocol, TypeVar

_MASK64 = 0xFFFFFFFFFFFFFFFF
_MASK32 = 0xFFFFFFFF
_TO_UNIT = 5.42101086242752217e-20
_SEED_MIX = 4101842887655102017

T = TypeVar("T")


class UniformSource(Protocol):
    """Anything that yields uniform doubles in [0, 1)."""

    def doub(self) -> float: ...


class Ran:
    """Combined generator with period about 3.1e57."""

    def __init__(self, seed: int) -> None:
        self._v = _SEED_MIX
        self._w = 1
        self._u = (seed & _MASK64) ^ self._v
        self.int64()
        self._v = self._u
        self.int64()
        self._w = self._v
        self.int64()

    def int64(self) -> int:
        self._u = (self._u * 2862933555777941757 + 7046029254386353087) & _MASK64
        v = self._v
        v ^= v >> 17
        v ^= (v << 31) & _MASK64
        v ^= v >> 8
        self._v = v
        self._w = (4294957665 * (self._w & _MASK32) + (self._w >> 32)) & _MASK64
        x = self._u ^ ((self._u << 21) & _MASK64)
        x ^= x >> 35
        x ^= (x << 4) & _MASK64
        return ((x + self._v) & _MASK64) ^ self._w

    def doub(self) -> float:
        return _TO_UNIT * self.int64()

    def int32(self) -> int:
        return self.int64() & _MASK32


class Ranq1:
    """Fast xorshift generator with period about 1.8e19."""

    def __init__(self, seed: int) -> None:
        self._v = _SEED_MIX ^ (seed & _MASK64)
        self._v = self.int64()

    def int64(self) -> int:
        v = self._v
        v ^= v >> 21
        v ^= (v << 35) & _MASK64
        v ^= v >> 4
        self._v = v
        return (v * 2685821657736338717) & _MASK64

    def doub(self) -> float:
        return _TO_UNIT * self.int64()

    def int32(self) -> int:
        return self.int64() & _MASK32


class Ranq2:
    """Xorshift combined with multiply-with-carry, period about 8.5e37."""

    def __init__(self, seed: int) -> None:
        self._v = _SEED_MIX ^ (seed & _MASK64)
        self._w = 1
        self._w = self.int64()
        self._v = self.int64()

    def int64(self) -> int:
        v = self._v
        v ^= v >> 17
        v ^= (v << 31) & _MASK64
        v ^= v >> 8
        self._v = v
        self._w = (4294957665 * (self._w & _MASK32) + (self._w >> 32)) & _MASK64
        return self._v ^ self._w

    def doub(self) -> float:
        return _TO_UNIT * self.int64()

    def int32(self) -> int:
        return self.int64() & _MASK32


class Ranfib:
    """Knuth's subtractive generator using floating-point arithmetic only."""

    _SIZE = 55

    def __init__(self, seed: int) -> None:
        init = Ranq1(seed)
        self._dtab = [init.doub() for _ in range(self._SIZE)]
        self._inext = 0
        self._inextp = 31

    def doub(self) -> float:
        self._inext = (self._inext + 1) % self._SIZE
        self._inextp = (self._inextp + 1) % self._SIZE
        dd = self._dtab[self._inext] - self._dtab[self._inextp]
        if dd < 0:
            dd += 1.0
        self._dtab[self._inext] = dd
        return dd

    def int32(self) -> int:
        """Random 32-bit integer; intended for testing only."""
        return int(self.doub() * 4294967295.0)


def circle_point_picking(rng: UniformSource) -> tuple[float, float]:
    """Uniform random point on the unit circle."""
    while True:
        a = rng.doub() * 2 - 1
        b = rng.doub() * 2 - 1
        aa = a * a
        bb = b * b
        s = aa + bb
        if s < 1:
            break
    return (aa - bb) / s, 2 * a * b / s


def sphere_point_picking(rng: UniformSource) -> tuple[float, float, float]:
    """Uniform random point on the unit sphere."""
    while True:
        a = rng.doub() * 2 - 1
        b = rng.doub() * 2 - 1
        s = a * a + b * b
        if s < 1:
            break
    r = math.sqrt(1 - s)
    return 2 * a * r, 2 * b * r, 1 - 2 * s


def hypersphere_point_picking(rng: UniformSource) -> tuple[float, float, float, float]:
    """Uniform random point on the unit 3-sphere in four dimensions."""
    while True:
        a1 = rng.doub() * 2 - 1
        b1 = rng.doub() * 2 - 1
        s1 = a1 * a1 + b1 * b1
        if s1 < 1:
            break
    while True:
        a2 = rng.doub() * 2 - 1
        b2 = rng.doub() * 2 - 1
        s2 = a2 * a2 + b2 * b2
        if s2 < 1:
            break
    q = math.sqrt((1 - s1) / s2)
    return a1, b1, a2 * q, b2 * q


def _swap_indices(n: int, rng: UniformSource):
    for i in range(n - 1, 0, -1):
        j = min(int(rng.doub() * (i + 1)), i)
        yield i, j


def shuffle(arr: MutableSequence[T], rng: UniformSource) -> None:
    """Shuffle ``arr`` in place (Fisher-Yates)."""
    for i, j in _swap_indices(len(arr), rng):
        arr[i], arr[j] = arr[j], arr[i]


def for_each_shuffle(arr: MutableSequence[T], rng: UniformSource,
                     f: Callable[[T], object]) -> None:
    """Shuffle ``arr`` in place, applying ``f`` to each element as it is fixed."""
    if not arr:
        return
    for i, j in _swap_indices(len(arr), rng):
        arr[i], arr[j] = arr[j], arr[i]
        f(arr[i])
    f(arr[0])