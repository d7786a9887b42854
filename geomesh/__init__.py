# geomesh/__init__.py
from geomesh.assets import (
    AssetDatabase,
    AssetDescriptor,
    AssetSource,
    LoadStatus,
    LocalFileSource,
    OnlineFileSource,
)
from geomesh.geo import LatLng
from geomesh.lod import CULLED, FrameParams, LodDecision, LodSelector
from geomesh.mesh import Mesh, Triangle, Vertex
from geomesh.settings import GeomeshSettings, LodSettings, RetrySettings
from geomesh.types import Bounds3, Vector3, Vector4

__version__ = "0.1.0"

__all__ = [
    "AssetDatabase",
    "AssetDescriptor",
    "AssetSource",
    "Bounds3",
    "CULLED",
    "FrameParams",
    "GeomeshSettings",
    "LatLng",
    "LoadStatus",
    "LocalFileSource",
    "LodDecision",
    "LodSelector",
    "LodSettings",
    "Mesh",
    "OnlineFileSource",
    "RetrySettings",
    "Triangle",
    "Vector3",
    "Vector4",
    "Vertex",
]
