# geomesh/assets/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence, Union

import numpy as np

from geomesh.geo import LatLng
from geomesh.math import as_matrix4, identity
from geomesh.mesh import Mesh

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


class AssetSource(str, Enum):
    """Which fetch capability serves an asset."""

    FILE = "file"
    WEB = "web"


class LoadStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not-found"
    INVALID_DATA = "invalid-data"
    UNKNOWN_ERROR = "unknown-error"


# (status, uri, mesh). mesh is None unless status is OK and a mesh was built.
MeshLoadedCallback = Callable[[LoadStatus, str, Optional[Mesh]], None]


def _frozen_matrix(m: Optional[MatrixLike]) -> np.ndarray:
    mat = identity() if m is None else as_matrix4(m).copy()
    mat.flags.writeable = False
    return mat


@dataclass(frozen=True, eq=False)
class AssetDescriptor:
    """
    Identity and placement of an asset. uri is the registry key.
    local_transform is applied in model space before world placement.
    """

    uri: str
    position: LatLng
    local_transform: np.ndarray = field(default_factory=identity)
    source: AssetSource = AssetSource.FILE

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "local_transform", _frozen_matrix(self.local_transform)
        )
        object.__setattr__(self, "source", AssetSource(self.source))

    @classmethod
    def from_file(
        cls,
        position: LatLng,
        uri: str,
        transform: Optional[MatrixLike] = None,
    ) -> AssetDescriptor:
        return cls(uri, position, _frozen_matrix(transform), AssetSource.FILE)

    @classmethod
    def from_web(
        cls,
        position: LatLng,
        uri: str,
        transform: Optional[MatrixLike] = None,
    ) -> AssetDescriptor:
        return cls(uri, position, _frozen_matrix(transform), AssetSource.WEB)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssetDescriptor):
            return NotImplemented
        return (
            self.uri == other.uri
            and self.position == other.position
            and self.source == other.source
            and np.array_equal(self.local_transform, other.local_transform)
        )

    def __hash__(self) -> int:
        return hash((self.uri, self.position, self.source))


@dataclass(slots=True)
class ParseReport:
    status: LoadStatus = LoadStatus.OK
    position_count: int = 0
    normal_count: int = 0
    triangle_count: int = 0

    @property
    def needs_normals(self) -> bool:
        """The payload did not carry a normal for every position."""
        return self.position_count != self.normal_count

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.OK
