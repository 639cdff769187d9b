"""Ray tracing through a tetrahedral mesh: face crossings and cell lookup."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

_MAX_DISTANCE = sys.float_info.max

# Local vertex triples of the four faces of a tetrahedron.
_CELL_FACES = ((0, 1, 2), (0, 1, 3), (0, 2, 3), (1, 2, 3))


class TetrahedronMesh:
    """Tetrahedral mesh with the face and vertex adjacency used by the tracer."""

    def __init__(self, points: Sequence[Sequence[float]], cells: Sequence[Sequence[int]]) -> None:
        self.points = np.array(points, dtype=np.float64)
        self.cells = np.array(cells, dtype=np.int64)
        if self.points.ndim != 2 or self.points.shape[1] != 3:
            raise ValueError("points must have shape (n, 3)")
        if self.cells.ndim != 2 or self.cells.shape[1] != 4:
            raise ValueError("cells must have shape (m, 4)")
        if self.cells.size and (self.cells.min() < 0 or self.cells.max() >= len(self.points)):
            raise ValueError("cell refers to a point that does not exist")

        face_index: dict[tuple[int, ...], int] = {}
        self._faces: list[tuple[int, int, int]] = []
        self._face_cells: list[list[int]] = []
        self._cell_faces: list[tuple[int, ...]] = []
        self._point_cells: list[list[int]] = [[] for _ in range(len(self.points))]

        for cell, vertices in enumerate(self.cells.tolist()):
            if len(set(vertices)) != 4:
                raise ValueError(f"cell {cell} repeats a vertex")
            for vertex in vertices:
                self._point_cells[vertex].append(cell)
            faces = []
            for local in _CELL_FACES:
                triple = tuple(vertices[i] for i in local)
                key = tuple(sorted(triple))
                face = face_index.get(key)
                if face is None:
                    face = len(self._faces)
                    face_index[key] = face
                    self._faces.append(triple)
                    self._face_cells.append([])
                self._face_cells[face].append(cell)
                faces.append(face)
            self._cell_faces.append(tuple(faces))

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def face_count(self) -> int:
        """Number of distinct triangular faces."""
        return len(self._faces)

    def cell_points(self, cell: int) -> list[int]:
        """Indices of the four vertices of a tetrahedron."""
        return self.cells[cell].tolist()

    def cell_faces(self, cell: int) -> list[int]:
        """Indices of the four faces of a tetrahedron."""
        return list(self._cell_faces[cell])

    def face_points(self, face: int) -> list[int]:
        """Indices of the three vertices of a face."""
        return list(self._faces[face])

    def face_cells(self, face: int) -> list[int]:
        """Tetrahedra bounded by a face."""
        return list(self._face_cells[face])

    def point_cells(self, point: int) -> list[int]:
        """Tetrahedra that have the point as a vertex."""
        return list(self._point_cells[point])


@dataclass
class Intersection:
    """First face a ray meets inside a tetrahedron.

    ``is_intersection_with_triangle`` is false when the second nearest face is
    closer than epsilon to the first, i.e. the ray leaves through an edge or vertex.
    """

    nearest_face: int = -1
    distance: float = -1.0
    is_intersection_with_triangle: bool = True


def _vec(value: Sequence[float]) -> np.ndarray:
    return np.asarray(value, dtype=np.float64)


def ray_plane_intersection(point0, point1, point2, origin, direction) -> float:
    """Distance along the ray to the plane of a triangle, or -1 if it moves away."""
    p0, p1, p2 = _vec(point0), _vec(point1), _vec(point2)
    origin, direction = _vec(origin), _vec(direction)
    normal = np.cross(p1 - p0, p2 - p0)
    if np.dot(p0 - origin, normal) < 0:
        normal = -normal
    with np.errstate(all="ignore"):
        normal = normal / np.sqrt(np.dot(normal, normal))
        projection = np.dot(normal, direction)
        if projection > 0:
            return float(np.dot(p0 - origin, normal) / projection)
    return -1.0


def points_on_one_side(plane_point0, plane_point1, plane_point2, point0, point1) -> bool:
    """Whether two points lie on the same side of a plane (on the plane counts)."""
    q0 = _vec(plane_point0)
    normal = np.cross(_vec(plane_point1) - q0, _vec(plane_point2) - q0)
    product0 = np.dot(_vec(point0) - q0, normal)
    product1 = np.dot(_vec(point1) - q0, normal)
    return bool(product0 * product1 >= 0)


def point_in_tetrahedron(mesh: TetrahedronMesh, tetrahedron: int, point) -> bool:
    """Whether the point lies inside the tetrahedron or on its boundary."""
    a, b, c, d = (mesh.points[i] for i in mesh.cell_points(tetrahedron))
    return (
        points_on_one_side(a, b, c, d, point)
        and points_on_one_side(b, c, d, a, point)
        and points_on_one_side(a, c, d, b, point)
        and points_on_one_side(a, b, d, c, point)
    )


def first_border_in_tetrahedron(
    mesh: TetrahedronMesh, tetrahedron: int, origin, direction, epsilon: float
) -> Intersection:
    """Find the face of the tetrahedron that the ray from ``origin`` meets first."""
    result = Intersection(nearest_face=-1, distance=_MAX_DISTANCE)
    second_distance = _MAX_DISTANCE
    for face in mesh.cell_faces(tetrahedron):
        p0, p1, p2 = (mesh.points[i] for i in mesh.face_points(face))
        distance = ray_plane_intersection(p0, p1, p2, origin, direction)
        if distance > 0:
            if distance < result.distance:
                second_distance = result.distance
                result.distance = distance
                result.nearest_face = face
            elif distance < second_distance:
                second_distance = distance
    if second_distance - result.distance < epsilon:
        result.is_intersection_with_triangle = False
    return result


def next_tetrahedron(
    mesh: TetrahedronMesh, intersection: Intersection, origin, direction, ray_offset: float
) -> int | None:
    """Tetrahedron the ray enters after the intersection, or ``None`` if it leaves the mesh."""
    if not 0 <= intersection.nearest_face < mesh.face_count:
        raise ValueError("intersection has no face")
    probe = _vec(origin) + _vec(direction) * ray_offset
    face = intersection.nearest_face

    for cell in mesh.face_cells(face):
        if point_in_tetrahedron(mesh, cell, probe):
            return cell

    if intersection.is_intersection_with_triangle:
        return None

    for point in mesh.face_points(face):
        for cell in mesh.point_cells(point):
            if point_in_tetrahedron(mesh, cell, probe):
                return cell
    return None


def current_tetrahedron(mesh: TetrahedronMesh, point) -> int | None:
    """Lowest-numbered tetrahedron containing the point, or ``None`` if outside the mesh."""
    return next(
        (cell for cell in range(len(mesh)) if point_in_tetrahedron(mesh, cell, point)),
        None,
    )