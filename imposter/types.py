# imposter/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, TypeAlias, overload

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

    def __len__(self) -> int:
        return 3

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(
            self.x + other.x,
            self.y + other.y,
            self.z + other.z,
        )

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(
            self.x - other.x,
            self.y - other.y,
            self.z - other.z,
        )

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(
            self.x * scalar,
            self.y * scalar,
            self.z * scalar,
        )

    @overload
    def __getitem__(self, index: int) -> Scalar: ...
    @overload
    def __getitem__(self, index: slice) -> tuple[Scalar, ...]: ...

    def __getitem__(self, index: Any):
        if isinstance(index, int):
            if index == 0:
                return self.x
            if index == 1:
                return self.y
            if index == 2:
                return self.z
            raise IndexError(index)

        if isinstance(index, slice):
            return tuple(self)[index]

        raise TypeError(
            f"indices must be int or slice, not {type(index).__name__}"
        )


@dataclass(frozen=True, slots=True)
class Bounds:
    """
    Axis-aligned box described by its center and full size.
    Matches what a host renderer expects for culling.
    """

    center: Vector3
    size: Vector3

    @property
    def extents(self) -> Vector3:
        return self.size * 0.5

    @property
    def min(self) -> Vector3:
        return self.center - self.extents

    @property
    def max(self) -> Vector3:
        return self.center + self.extents
