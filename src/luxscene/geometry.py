"""
Geometry helpers - transforms, primitive meshes and PLY payloads.

The scene graph treats everything here as opaque values: a
:class:`Transform` is stored as entity metadata and turned into
coordinate-system statements by the compiler, a :class:`Mesh` is
attached to an entity and streamed to disk as binary PLY.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class Transform:
    """Either an explicit 4x4 matrix or a composed translate/rotate/scale.

    Composed transforms apply, in statement order: translation, rotation
    about x, then y, then z (degrees), an optional rotation of ``angle``
    degrees around an arbitrary axis, and finally scale.
    """

    matrix: Optional[tuple[float, ...]] = None
    translate: Optional[Vec3] = None
    rotate: Optional[Vec3] = None
    axis_rotation: Optional[tuple[float, Vec3]] = None
    scale: Optional[Vec3] = None

    @property
    def is_matrix(self) -> bool:
        return self.matrix is not None

    def as_matrix(self) -> np.ndarray:
        """Return the equivalent row-major 4x4 matrix."""
        if self.matrix is not None:
            return np.array(self.matrix, dtype=float).reshape(4, 4)
        m = np.identity(4)
        if self.translate is not None:
            m = m @ translation_matrix(self.translate)
        if self.rotate is not None:
            for angle, axis in zip(self.rotate, ((1, 0, 0), (0, 1, 0), (0, 0, 1))):
                if angle:
                    m = m @ rotation_matrix(angle, axis)
        if self.axis_rotation is not None:
            angle, axis = self.axis_rotation
            m = m @ rotation_matrix(angle, axis)
        if self.scale is not None:
            m = m @ scale_matrix(self.scale)
        return m


def translation_matrix(offset: Sequence[float]) -> np.ndarray:
    m = np.identity(4)
    m[:3, 3] = offset
    return m


def scale_matrix(factors: Sequence[float]) -> np.ndarray:
    return np.diag([factors[0], factors[1], factors[2], 1.0])


def rotation_matrix(angle_degrees: float, axis: Sequence[float]) -> np.ndarray:
    """Rotation of ``angle_degrees`` around ``axis`` (Rodrigues)."""
    a = np.asarray(axis, dtype=float)
    norm = np.linalg.norm(a)
    if norm == 0:
        raise ValueError("Rotation axis must be non-zero")
    x, y, z = a / norm
    theta = math.radians(angle_degrees)
    c, s = math.cos(theta), math.sin(theta)
    t = 1.0 - c
    m = np.identity(4)
    m[:3, :3] = [
        [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
        [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
        [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
    ]
    return m


@dataclass
class Mesh:
    """Indexed polygon mesh with uniform face arity."""

    vertices: np.ndarray
    faces: np.ndarray
    normals: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int32)
        if self.faces.ndim != 2:
            raise ValueError("Faces must be a 2D array of vertex indices")
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float32).reshape(-1, 3)
            if len(self.normals) != len(self.vertices):
                raise ValueError("Normals must match the vertex count")

    def to_ply(self) -> bytes:
        """Encode as binary little-endian PLY."""
        arity = self.faces.shape[1]
        header = [
            "ply",
            "format binary_little_endian 1.0",
            f"element vertex {len(self.vertices)}",
            "property float x",
            "property float y",
            "property float z",
        ]
        vertex_fields = [("x", "<f4"), ("y", "<f4"), ("z", "<f4")]
        if self.normals is not None:
            header += ["property float nx", "property float ny", "property float nz"]
            vertex_fields += [("nx", "<f4"), ("ny", "<f4"), ("nz", "<f4")]
        header += [
            f"element face {len(self.faces)}",
            "property list uchar int vertex_indices",
            "end_header",
        ]

        vertex_data = np.empty(len(self.vertices), dtype=vertex_fields)
        vertex_data["x"], vertex_data["y"], vertex_data["z"] = self.vertices.T
        if self.normals is not None:
            vertex_data["nx"], vertex_data["ny"], vertex_data["nz"] = self.normals.T

        face_data = np.empty(len(self.faces), dtype=[("n", "u1"), ("idx", "<i4", (arity,))])
        face_data["n"] = arity
        face_data["idx"] = self.faces

        return ("\n".join(header) + "\n").encode("ascii") + vertex_data.tobytes() + face_data.tobytes()


def _basis(normal: Sequence[float]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    n = np.asarray(normal, dtype=float)
    length = np.linalg.norm(n)
    if length == 0:
        raise ValueError("Normal must be non-zero")
    n = n / length
    helper = np.array([0.0, 0.0, 1.0]) if abs(n[2]) < 0.9 else np.array([1.0, 0.0, 0.0])
    u = np.cross(helper, n)
    u /= np.linalg.norm(u)
    v = np.cross(n, u)
    return u, v, n


def plane_mesh(
    center: Sequence[float],
    normal: Sequence[float],
    size: Union[float, Sequence[float]],
) -> Mesh:
    """Two-triangle quad centered at ``center`` facing along ``normal``."""
    width, height = (size, size) if np.isscalar(size) else (size[0], size[1])
    u, v, n = _basis(normal)
    c = np.asarray(center, dtype=float)
    hu, hv = u * (width / 2.0), v * (height / 2.0)
    vertices = np.array([c - hu - hv, c + hu - hv, c + hu + hv, c - hu + hv])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return Mesh(vertices, faces, np.tile(n, (4, 1)))


def disk_mesh(
    center: Sequence[float],
    normal: Sequence[float],
    radius: float,
    segments: int = 32,
) -> Mesh:
    """Triangle fan approximating a disk."""
    u, v, n = _basis(normal)
    c = np.asarray(center, dtype=float)
    angles = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    rim = c + radius * (np.outer(np.cos(angles), u) + np.outer(np.sin(angles), v))
    vertices = np.vstack([c, rim])
    faces = np.array([[0, 1 + i, 1 + (i + 1) % segments] for i in range(segments)])
    return Mesh(vertices, faces, np.tile(n, (len(vertices), 1)))
