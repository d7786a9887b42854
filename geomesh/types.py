# geomesh/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, TypeAlias

Scalar: TypeAlias = float


@dataclass(frozen=True, slots=True)
class Vector3:
    x: Scalar
    y: Scalar
    z: Scalar

    @staticmethod
    def zero() -> Vector3:
        return Vector3(0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(
            self.x - other.x,
            self.y - other.y,
            self.z - other.z,
        )


@dataclass(frozen=True, slots=True)
class Vector4:
    x: Scalar
    y: Scalar
    z: Scalar
    w: Scalar = 1.0

    @staticmethod
    def zero() -> Vector4:
        return Vector4(0.0, 0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    def xyz(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)


@dataclass(slots=True)
class Bounds3:
    """
    Axis-aligned box.
    A box nothing has been inflated into is the degenerate box at the origin.
    """

    min: Vector3 = field(default_factory=Vector3.zero)
    max: Vector3 = field(default_factory=Vector3.zero)

    @classmethod
    def from_point(cls, point: Vector3) -> Bounds3:
        return cls(point, point)

    def inflate(self, point: Vector3) -> None:
        """Grow the box in place so that it contains point."""
        self.min = Vector3(
            min(self.min.x, point.x),
            min(self.min.y, point.y),
            min(self.min.z, point.z),
        )
        self.max = Vector3(
            max(self.max.x, point.x),
            max(self.max.y, point.y),
            max(self.max.z, point.z),
        )

    def contains(self, point: Vector3) -> bool:
        return all(lo <= p <= hi for lo, p, hi in zip(self.min, point, self.max))

    def corners(self) -> list[Vector3]:
        mn, mx = self.min, self.max
        return [
            Vector3(mn.x, mn.y, mn.z),
            Vector3(mx.x, mn.y, mn.z),
            Vector3(mn.x, mx.y, mn.z),
            Vector3(mx.x, mx.y, mn.z),
            Vector3(mn.x, mn.y, mx.z),
            Vector3(mx.x, mn.y, mx.z),
            Vector3(mn.x, mx.y, mx.z),
            Vector3(mx.x, mx.y, mx.z),
        ]

    @property
    def width(self) -> Scalar:
        return self.max.x - self.min.x

    @property
    def height(self) -> Scalar:
        return self.max.y - self.min.y
