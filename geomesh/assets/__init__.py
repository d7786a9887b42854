# geomesh/assets/__init__.py
from geomesh.assets.database import AssetDatabase
from geomesh.assets.fetch import (
    AsyncRequest,
    ErrorReason,
    FileSource,
    LocalFileSource,
    OnlineFileSource,
    ResourceKind,
    Response,
    ResponseError,
)
from geomesh.assets.loader import MeshLoader, ObjMeshLoader
from geomesh.assets.registry import AssetRecord, AssetRegistry, LoadState
from geomesh.assets.types import (
    AssetDescriptor,
    AssetSource,
    LoadStatus,
    ParseReport,
)

__all__ = [
    "AssetDatabase",
    "AssetDescriptor",
    "AssetRecord",
    "AssetRegistry",
    "AssetSource",
    "AsyncRequest",
    "ErrorReason",
    "FileSource",
    "LoadState",
    "LoadStatus",
    "LocalFileSource",
    "MeshLoader",
    "ObjMeshLoader",
    "OnlineFileSource",
    "ParseReport",
    "ResourceKind",
    "Response",
    "ResponseError",
]
