"""Two- and three-dimensional vectors with in-place and arithmetic operations."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from .rand import UniformSource, circle_point_picking

_SCALAR = (int, float)


@dataclass
class Vec2:
    """A mutable 2D vector."""

    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __getitem__(self, i: int) -> float:
        if i == 0:
            return self.x
        if i == 1:
            return self.y
        raise IndexError(f"Vec2 index out of range: {i}")

    def __setitem__(self, i: int, value: float) -> None:
        if i == 0:
            self.x = value
        elif i == 1:
            self.y = value
        else:
            raise IndexError(f"Vec2 index out of range: {i}")

    def __str__(self) -> str:
        return f"{self.x:g}\t{self.y:g}"

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __add__(self, other):
        if isinstance(other, Vec2):
            return Vec2(self.x + other.x, self.y + other.y)
        if isinstance(other, _SCALAR):
            return Vec2(self.x + other, self.y + other)
        return NotImplemented

    def __radd__(self, other):
        if isinstance(other, _SCALAR):
            return Vec2(other + self.x, other + self.y)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Vec2):
            return Vec2(self.x - other.x, self.y - other.y)
        if isinstance(other, _SCALAR):
            return Vec2(self.x - other, self.y - other)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, _SCALAR):
            return Vec2(other - self.x, other - self.y)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, Vec2):
            return Vec2(self.x * other.x, self.y * other.y)
        if isinstance(other, _SCALAR):
            return Vec2(self.x * other, self.y * other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, _SCALAR):
            return Vec2(other * self.x, other * self.y)
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, _SCALAR):
            return Vec2(self.x / other, self.y / other)
        return NotImplemented

    def __iadd__(self, other: Vec2) -> Vec2:
        self.x += other.x
        self.y += other.y
        return self

    def __isub__(self, other: Vec2) -> Vec2:
        self.x -= other.x
        self.y -= other.y
        return self

    def __imul__(self, other: float) -> Vec2:
        self.x *= other
        self.y *= other
        return self

    def __itruediv__(self, other: float) -> Vec2:
        self.x /= other
        self.y /= other
        return self

    def dot(self, a: Vec2) -> float:
        return self.x * a.x + self.y * a.y

    def cross(self, a: Vec2) -> float:
        """Z component of the cross product."""
        return self.x * a.y - self.y * a.x

    def normalize(self) -> None:
        """Scale this vector to unit length in place."""
        one_over_r = 1 / math.sqrt(self.square())
        self.x *= one_over_r
        self.y *= one_over_r

    def square(self) -> float:
        return self.x * self.x + self.y * self.y

    def module(self) -> float:
        return math.sqrt(self.square())

    def inverse(self) -> Vec2:
        return Vec2(1 / self.x, 1 / self.y)

    def rotate(self, theta: float) -> None:
        """Rotate counter-clockwise by ``theta`` in place."""
        c = math.cos(theta)
        s = math.sin(theta)
        self.x, self.y = self.x * c - self.y * s, self.x * s + self.y * c


@dataclass
class Vec3:
    """A mutable 3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, i: int) -> float:
        if i == 0:
            return self.x
        if i == 1:
            return self.y
        if i == 2:
            return self.z
        raise IndexError(f"Vec3 index out of range: {i}")

    def __setitem__(self, i: int, value: float) -> None:
        if i == 0:
            self.x = value
        elif i == 1:
            self.y = value
        elif i == 2:
            self.z = value
        else:
            raise IndexError(f"Vec3 index out of range: {i}")

    def __str__(self) -> str:
        return f"{self.x:g}\t{self.y:g}\t{self.z:g}"

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __add__(self, other):
        if isinstance(other, Vec3):
            return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)
        if isinstance(other, _SCALAR):
            return Vec3(self.x + other, self.y + other, self.z + other)
        return NotImplemented

    def __radd__(self, other):
        if isinstance(other, _SCALAR):
            return Vec3(other + self.x, other + self.y, other + self.z)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Vec3):
            return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)
        if isinstance(other, _SCALAR):
            return Vec3(self.x - other, self.y - other, self.z - other)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, _SCALAR):
            return Vec3(other - self.x, other - self.y, other - self.z)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        if isinstance(other, _SCALAR):
            return Vec3(self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, _SCALAR):
            return Vec3(other * self.x, other * self.y, other * self.z)
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, _SCALAR):
            return Vec3(self.x / other, self.y / other, self.z / other)
        return NotImplemented

    def __iadd__(self, other: Vec3) -> Vec3:
        self.x += other.x
        self.y += other.y
        self.z += other.z
        return self

    def __isub__(self, other: Vec3) -> Vec3:
        self.x -= other.x
        self.y -= other.y
        self.z -= other.z
        return self

    def __imul__(self, other: float) -> Vec3:
        self.x *= other
        self.y *= other
        self.z *= other
        return self

    def __itruediv__(self, other: float) -> Vec3:
        self.x /= other
        self.y /= other
        self.z /= other
        return self

    def dot(self, a: Vec3) -> float:
        return self.x * a.x + self.y * a.y + self.z * a.z

    def cross(self, a: Vec3) -> Vec3:
        return Vec3(
            self.y * a.z - self.z * a.y,
            self.z * a.x - self.x * a.z,
            self.x * a.y - self.y * a.x,
        )

    def normalize(self) -> None:
        """Scale this vector to unit length in place."""
        one_over_r = 1 / math.sqrt(self.square())
        self.x *= one_over_r
        self.y *= one_over_r
        self.z *= one_over_r

    def square(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def module(self) -> float:
        return math.sqrt(self.square())

    def inverse(self) -> Vec3:
        return Vec3(1 / self.x, 1 / self.y, 1 / self.z)

    def rotate(self, theta: float) -> None:
        """Rotate about the z axis by ``theta`` in place."""
        c = math.cos(theta)
        s = math.sin(theta)
        self.x, self.y = self.x * c - self.y * s, self.x * s + self.y * c

    def rotate_axis(self, theta: float, axis: Vec3) -> None:
        """Rotate about the unit vector ``axis`` by ``theta`` in place."""
        self.rotate_cs(math.cos(theta), math.sin(theta), axis)

    def rotate_cs(self, c: float, s: float, axis: Vec3) -> None:
        """Rotate about the unit vector ``axis`` given the cosine and sine of the angle."""
        a = axis
        bxx = a.x * a.x * (1 - c)
        bxy = a.x * a.y * (1 - c)
        bxz = a.x * a.z * (1 - c)
        byy = a.y * a.y * (1 - c)
        byz = a.y * a.z * (1 - c)
        bzz = a.z * a.z * (1 - c)
        x, y, z = self.x, self.y, self.z
        self.x = (bxx + c) * x + (bxy - a.z * s) * y + (bxz + a.y * s) * z
        self.y = (bxy + a.z * s) * x + (byy + c) * y + (byz - a.x * s) * z
        self.z = (bxz - a.y * s) * x + (byz + a.x * s) * y + (bzz + c) * z

    def get_perp_vec(self, rng: UniformSource) -> Vec3:
        """Return a random unit vector perpendicular to this (unit) vector."""
        s = math.sqrt(self.x * self.x + self.y * self.y)
        rot_axis = Vec3(-self.y / s, self.x / s, 0.0)
        c = self.z
        px, py = circle_point_picking(rng)
        v_perp = Vec3(px, py, 0.0)
        v_perp.rotate_cs(c, s, rot_axis)
        return v_perp

    def rotate_rand(self, theta: float, rng: UniformSource) -> None:
        """Rotate this unit vector by ``theta`` about a random perpendicular axis."""
        self.rotate_axis(theta, self.get_perp_vec(rng))