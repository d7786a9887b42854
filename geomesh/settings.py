# geomesh/settings.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

Color = Tuple[float, float, float]


@dataclass(slots=True)
class RetrySettings:
    """
    Policy for assets whose load failed.
    Delay doubles per consecutive failure, capped at max_delay (seconds).
    max_attempts <= 0 retries forever.
    """

    max_attempts: int = 5
    base_delay: float = 0.5
    max_delay: float = 30.0

    def delay_for(self, failures: int) -> float:
        if failures <= 0:
            return 0.0
        return min(self.max_delay, self.base_delay * 2.0 ** (failures - 1))

    def exhausted(self, failures: int) -> bool:
        return self.max_attempts > 0 and failures >= self.max_attempts


@dataclass(slots=True)
class LodSettings:
    """
    Descending contribution thresholds, one per LOD level. Level 0 is the
    most detailed. Anything below the last threshold is culled.
    """

    thresholds: Tuple[float, ...] = (0.3, 0.1, 0.05, 0.03, 0.01, 0.005)
    colors: Tuple[Color, ...] = (
        (0.0, 0.75, 0.0),
        (0.3, 0.75, 0.0),
        (0.6, 0.75, 0.0),
        (0.75, 0.75, 0.0),
        (0.75, 0.4, 0.0),
        (0.75, 0.2, 0.0),
    )
    clip_border: float = 1.0
    # Shrinks the border so culling is visible on screen
    debug_clip_border: float = 0.75
    visualize_culling: bool = False

    def __post_init__(self) -> None:
        if not self.thresholds:
            raise ValueError("At least one LOD threshold is required")
        if any(a < b for a, b in zip(self.thresholds, self.thresholds[1:])):
            raise ValueError(f"LOD thresholds must be descending: {self.thresholds}")
        if len(self.colors) < len(self.thresholds):
            raise ValueError("Need one color per LOD level")

    @property
    def level_count(self) -> int:
        return len(self.thresholds)

    @property
    def border(self) -> float:
        return self.debug_clip_border if self.visualize_culling else self.clip_border


@dataclass(slots=True)
class FetchSettings:
    max_workers: int = 2
    timeout: float = 10.0
    user_agent: str = "geomesh/0.1"
    # Send If-None-Match with the last seen ETag
    revalidate: bool = False


@dataclass(slots=True)
class GeomeshSettings:
    """The master configuration object."""

    asset_root: Path = field(default_factory=Path.cwd)
    retry: RetrySettings = field(default_factory=RetrySettings)
    lod: LodSettings = field(default_factory=LodSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)
