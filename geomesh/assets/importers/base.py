# geomesh/assets/importers/base.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Tuple, Union

from geomesh.assets.types import ParseReport
from geomesh.mesh import Mesh

Payload = Union[bytes, str]


class MeshParser(ABC):
    @abstractmethod
    def parse(self, data: Payload) -> Tuple[ParseReport, Mesh]:
        """
        Decode a payload into a mesh.
        Failures are reported through ParseReport.status, never raised.
        The mesh is only meaningful when the status is OK.
        Must be thread-safe.
        """
        pass

    def import_file(self, path: Path) -> Mesh:
        """Synchronously read and parse a local file. Raises on failure."""
        report, mesh = self.parse(Path(path).read_bytes())
        if not report.ok:
            raise ValueError(f"Failed to parse {path}: {report.status.value}")
        return mesh
