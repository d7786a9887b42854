# geomesh/lod.py
"""
Per-frame visibility and level-of-detail selection for map assets.

The decision is stateless: every frame the mesh bounds are projected into
clip space, rejected if they fall outside the view border, and otherwise
bucketed by how much of the viewport they cover.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from geomesh import geo
from geomesh.assets.database import AssetDatabase
from geomesh.assets.types import AssetDescriptor
from geomesh.geometry import project_to_clip_space
from geomesh.math import as_matrix4, scale_matrix, translation_matrix
from geomesh.mesh import Mesh
from geomesh.settings import Color, LodSettings
from geomesh.types import Bounds3

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FrameParams:
    """What the host knows about the current frame."""

    projection_matrix: np.ndarray
    zoom: float

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "projection_matrix", as_matrix4(self.projection_matrix)
        )


@dataclass(frozen=True, slots=True)
class LodDecision:
    """
    level is None when the asset is culled. clip_bounds is diagnostic only
    and takes no part in equality, so any culled decision == CULLED.
    """

    level: Optional[int] = None
    clip_bounds: Optional[Bounds3] = field(
        default=None, compare=False, hash=False
    )

    @property
    def culled(self) -> bool:
        return self.level is None

    @property
    def visible(self) -> bool:
        return self.level is not None

    @classmethod
    def cull(cls, clip_bounds: Optional[Bounds3] = None) -> LodDecision:
        return cls(None, clip_bounds)

    @classmethod
    def at_level(
        cls, level: int, clip_bounds: Optional[Bounds3] = None
    ) -> LodDecision:
        return cls(level, clip_bounds)


CULLED = LodDecision()


@dataclass(eq=False)
class DrawItem:
    descriptor: AssetDescriptor
    mesh: Mesh
    level: int
    color: Color
    wvp: np.ndarray = field(repr=False)


def model_matrix(
    descriptor: AssetDescriptor,
    zoom: float,
    project: geo.Projection = geo.project,
) -> np.ndarray:
    """
    Translate to the projected map position, after applying the local
    transform scaled uniformly by the zoom-derived unit scale.
    """
    unit_scale = geo.zoom_scale(zoom)
    point = project(descriptor.position, unit_scale)

    translation = translation_matrix(point.x, point.y, 0.0)
    user = descriptor.local_transform @ scale_matrix(
        unit_scale, unit_scale, unit_scale
    )
    return translation @ user


def clip_space_contribution(clip_bounds: Bounds3) -> float:
    """
    Shortest half extent (x or y) of the clip-space box.
    1.0 covers the whole viewport, 0.5 half of it, and so on.
    """
    return min(0.5 * clip_bounds.width, 0.5 * clip_bounds.height)


def outside_border(clip_bounds: Bounds3, border: float) -> bool:
    """Box lies entirely beyond [-border, border] on x or on y."""
    mn, mx = clip_bounds.min, clip_bounds.max
    if mx.x < -border or mn.x > border:
        return True
    if mx.y < -border or mn.y > border:
        return True
    return False


def select_lod_level(
    contribution: float, thresholds: Sequence[float]
) -> Optional[int]:
    """Index of the first threshold the contribution meets, else None."""
    for level, threshold in enumerate(thresholds):
        if contribution >= threshold:
            return level
    return None


def decide_lod(
    bounds: Bounds3,
    wvp: np.ndarray,
    settings: LodSettings,
) -> LodDecision:
    clip = project_to_clip_space(bounds, wvp)
    if outside_border(clip, settings.border):
        return LodDecision.cull(clip)

    level = select_lod_level(clip_space_contribution(clip), settings.thresholds)
    if level is None:
        # Too small to matter
        return LodDecision.cull(clip)
    return LodDecision.at_level(level, clip)


class LodSelector:
    def __init__(
        self,
        settings: Optional[LodSettings] = None,
        project: geo.Projection = geo.project,
    ) -> None:
        self.settings = settings or LodSettings()
        self._project = project

    def wvp(self, descriptor: AssetDescriptor, frame: FrameParams) -> np.ndarray:
        return frame.projection_matrix @ model_matrix(
            descriptor, frame.zoom, self._project
        )

    def decide(
        self, mesh: Mesh, descriptor: AssetDescriptor, frame: FrameParams
    ) -> LodDecision:
        return decide_lod(mesh.bounds, self.wvp(descriptor, frame), self.settings)

    def color(self, level: int) -> Color:
        return self.settings.colors[level]

    def collect(self, database: AssetDatabase, frame: FrameParams) -> List[DrawItem]:
        """
        Everything the host should draw this frame, most detailed first.
        Also kicks off loads for assets that are not ready yet.
        """
        items: List[DrawItem] = []

        for descriptor in database.query_ready():
            mesh = database.get_mesh(descriptor.uri)
            if mesh is None:
                logger.warning("Ready asset %s has no mesh", descriptor.uri)
                continue

            wvp = self.wvp(descriptor, frame)
            decision = decide_lod(mesh.bounds, wvp, self.settings)
            if decision.culled:
                logger.debug("Culled %s", descriptor.uri)
                continue

            items.append(
                DrawItem(
                    descriptor=descriptor,
                    mesh=mesh,
                    level=decision.level,
                    color=self.color(decision.level),
                    wvp=wvp,
                )
            )

        items.sort(key=lambda i: i.level)
        return items
