# geomesh/assets/importers/obj.py
"""
Wavefront OBJ reader for the subset used by map assets.

Grammar, one statement per line:
    v <x> <y> <z>     vertex position (w fixed to 1.0)
    f <i> <j> <k>     triangle, 1-based vertex indices
Blank lines and lines starting with '#' are ignored. Anything else,
including 'vn' / 'vt' and polygon faces, is invalid data.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from geomesh.assets.importers.base import MeshParser, Payload
from geomesh.assets.types import LoadStatus, ParseReport
from geomesh.errors import ObjParseError
from geomesh.geometry import compute_bounds, compute_vertex_normals
from geomesh.mesh import Mesh, Triangle, Vertex
from geomesh.types import Vector4

logger = logging.getLogger(__name__)


class ObjParser(MeshParser):
    def parse(self, data: Payload) -> Tuple[ParseReport, Mesh]:
        report = ParseReport()
        if not data:
            report.status = LoadStatus.INVALID_DATA
            return report, Mesh()

        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            vertices, triangles = self._read(text, report)
            self._validate_indices(triangles, len(vertices))
        except (ObjParseError, UnicodeDecodeError) as e:
            logger.debug("Rejected OBJ payload: %s", e)
            report.status = LoadStatus.INVALID_DATA
            return report, Mesh()

        mesh = Mesh(
            bounds=compute_bounds(vertices),
            vertices=tuple(vertices),
            triangles=tuple(triangles),
        )
        if report.needs_normals:
            mesh = compute_vertex_normals(mesh)

        return report, mesh

    def _read(
        self, text: str, report: ParseReport
    ) -> Tuple[List[Vertex], List[Triangle]]:
        vertices: List[Vertex] = []
        triangles: List[Triangle] = []

        for line_no, line in enumerate(text.splitlines(), start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            parts = line.split()
            tag = parts[0]

            if tag == "v":
                x, y, z = _parse_fields(parts[1:], float, line_no)
                vertices.append(Vertex(position=Vector4(x, y, z, 1.0)))
                report.position_count += 1

            elif tag == "f":
                i, j, k = _parse_fields(parts[1:], int, line_no)
                # face elements start at 1
                triangles.append(Triangle(i - 1, j - 1, k - 1))
                report.triangle_count += 1

            else:
                raise ObjParseError(f"Unsupported statement '{tag}'", line_no)

        return vertices, triangles

    def _validate_indices(self, triangles: List[Triangle], count: int) -> None:
        for n, tri in enumerate(triangles):
            for idx in tri:
                if not 0 <= idx < count:
                    raise ObjParseError(
                        f"Triangle {n} references vertex {idx + 1}, "
                        f"only {count} defined"
                    )


def _parse_fields(fields: List[str], kind: type, line_no: int) -> tuple:
    if len(fields) != 3:
        raise ObjParseError(f"Expected 3 fields, got {len(fields)}", line_no)
    try:
        return tuple(kind(f) for f in fields)
    except ValueError:
        raise ObjParseError(f"Malformed number in {fields}", line_no)


def parse_obj(data: Payload) -> Tuple[ParseReport, Mesh]:
    return ObjParser().parse(data)
