# geomesh/geo.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, TypeAlias

from geomesh.types import Scalar

TILE_SIZE = 512
LATITUDE_MAX = 85.051128779806604
LONGITUDE_MAX = 180.0
DEGREES_MAX = 360.0


@dataclass(frozen=True, slots=True)
class LatLng:
    lat: Scalar
    lng: Scalar

    def __post_init__(self) -> None:
        if not math.isfinite(self.lat) or not math.isfinite(self.lng):
            raise ValueError(f"LatLng must be finite, got ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude must be within [-90, 90], got {self.lat}")

    def wrapped(self) -> LatLng:
        """Same point with longitude brought into [-180, 180)."""
        lng = (self.lng + LONGITUDE_MAX) % DEGREES_MAX - LONGITUDE_MAX
        return LatLng(self.lat, lng)


@dataclass(frozen=True, slots=True)
class ProjectedPoint:
    x: Scalar
    y: Scalar


# (position, world scale) -> point on the projected plane
Projection: TypeAlias = Callable[[LatLng, Scalar], ProjectedPoint]


def zoom_scale(zoom: Scalar) -> Scalar:
    return 2.0**zoom


def project(position: LatLng, scale: Scalar) -> ProjectedPoint:
    """
    Spherical Mercator projection onto a square plane of
    scale * TILE_SIZE units. Origin is the north-west corner, y grows south.
    """
    lat = max(min(position.lat, LATITUDE_MAX), -LATITUDE_MAX)
    world_size = scale * TILE_SIZE

    x = LONGITUDE_MAX + position.lng
    y = LONGITUDE_MAX - math.degrees(
        math.log(math.tan(math.pi / 4.0 + lat * math.pi / DEGREES_MAX))
    )
    return ProjectedPoint(
        x * world_size / DEGREES_MAX,
        y * world_size / DEGREES_MAX,
    )
