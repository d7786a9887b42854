# geomesh/assets/importers/__init__.py
from geomesh.assets.importers.base import MeshParser
from geomesh.assets.importers.obj import ObjParser, parse_obj

__all__ = ["MeshParser", "ObjParser", "parse_obj"]
