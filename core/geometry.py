import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from .constants import CONE_THETA_START
from .materials import ColorTuple

Vector3 = Tuple[float, float, float]


def create_box_mesh(position: np.ndarray = np.array([0.0, 0.0, 0.0]),
                    dimensions: np.ndarray = np.array([1.0, 1.0, 1.0])) -> trimesh.Trimesh:
    """
    Creates an axis-aligned box mesh centered at a specified position.

    Args:
        position: A numpy array representing the center of the box (x, y, z).
        dimensions: A numpy array for width(X), height(Y), depth(Z).

    Returns:
        A watertight trimesh.Trimesh object representing the box.
    """
    dimensions = np.asarray(dimensions, dtype=float)
    primitive = trimesh.primitives.Box(extents=dimensions)
    primitive.apply_translation(np.asarray(position, dtype=float))

    # Plain Trimesh so boolean backends and exporters see ordinary data
    mesh = trimesh.Trimesh(vertices=primitive.vertices, faces=primitive.faces)

    # --- Basic UV Generation (Box Projection Approximation) ---
    bounds = mesh.bounds
    span = dimensions.copy()
    # Avoid division by zero for flat dimensions if any
    span[span == 0] = 1.0
    uvs = (mesh.vertices - bounds[0]) / span
    mesh.visual = trimesh.visual.TextureVisuals(uv=uvs[:, :2])

    return mesh


def create_cone_mesh(radius: float = 0.125, height: float = 0.25, radial_segments: int = 4,
                     theta_start: float = CONE_THETA_START) -> trimesh.Trimesh:
    """
    Creates a faceted cone with its geometric center at the origin,
    base ring at Y = -height/2 and apex at Y = +height/2.

    Base ring vertices sit at angles theta_start + k * 2pi / radial_segments,
    measured from +Z towards +X.

    Args:
        radius: Circumradius of the base polygon.
        height: Distance from base to apex.
        radial_segments: Number of sides of the base polygon (>= 3).
        theta_start: Angle of the first base vertex.

    Returns:
        A watertight trimesh.Trimesh object representing the cone.
    """
    if radial_segments < 3:
        raise ValueError(f"Cone needs at least 3 radial segments, got {radial_segments}")

    half_h = height / 2.0
    theta = theta_start + np.arange(radial_segments) * (2.0 * np.pi / radial_segments)
    ring = np.column_stack([
        radius * np.sin(theta),
        np.full(radial_segments, -half_h),
        radius * np.cos(theta),
    ])
    base_center = len(ring)
    apex = base_center + 1
    vertices = np.vstack([ring, [[0.0, -half_h, 0.0], [0.0, half_h, 0.0]]])

    k = np.arange(radial_segments)
    k_next = (k + 1) % radial_segments
    # Sides wind (k, k+1, apex) and the base (center, k+1, k) for outward normals
    sides = np.column_stack([k, k_next, np.full(radial_segments, apex)])
    base = np.column_stack([np.full(radial_segments, base_center), k_next, k])
    faces = np.vstack([sides, base])

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def create_plane_mesh(size: float, segments: int, uv_repeat: float = 1.0) -> trimesh.Trimesh:
    """
    Creates a square plane in the XY plane, centered at the origin and
    subdivided into segments x segments quads. UVs span [0, uv_repeat].
    """
    segments = max(1, int(segments))
    half = size / 2.0
    steps = np.linspace(-half, half, segments + 1)
    xs, ys = np.meshgrid(steps, steps)
    vertices = np.column_stack([xs.ravel(), ys.ravel(), np.zeros(xs.size)])

    row = segments + 1
    idx = np.arange(segments)
    ii, jj = np.meshgrid(idx, idx)
    a = (jj * row + ii).ravel()
    b = a + 1
    c = a + row
    d = c + 1
    faces = np.vstack([np.column_stack([a, b, d]), np.column_stack([a, d, c])])

    uvs = (vertices[:, :2] + half) / size * uv_repeat
    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    mesh.visual = trimesh.visual.TextureVisuals(uv=uvs)
    return mesh


def euler_matrix(rotation: Sequence[float]) -> np.ndarray:
    """4x4 rotation for intrinsic X, then Y, then Z Euler angles."""
    rx, ry, rz = rotation
    return trimesh.transformations.euler_matrix(rx, ry, rz, axes='rxyz')


def instance_mesh(template: trimesh.Trimesh, rotation: Sequence[float],
                  positions: np.ndarray) -> trimesh.Trimesh:
    """
    Places copies of a template mesh at every position with a shared rotation.

    Vertices are transformed in one numpy pass instead of building a
    Trimesh per copy.
    """
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    rot = euler_matrix(rotation)[:3, :3]
    rotated = template.vertices @ rot.T
    count = len(positions)
    n_verts = len(rotated)

    vertices = (rotated[None, :, :] + positions[:, None, :]).reshape(-1, 3)
    offsets = (np.arange(count) * n_verts)[:, None, None]
    faces = (template.faces[None, :, :] + offsets).reshape(-1, 3)
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def batch_instances(keys: List[Tuple], positions: List[Vector3]) -> Dict[Tuple, np.ndarray]:
    """Groups positions by a hashable key, keeping first-seen key order."""
    grouped = defaultdict(list)
    for key, position in zip(keys, positions):
        grouped[key].append(position)
    return {key: np.array(items, dtype=float) for key, items in grouped.items()}


def color_mesh(mesh: trimesh.Trimesh, color: ColorTuple) -> trimesh.Trimesh:
    """Returns a copy of the mesh with uniform face colors."""
    colored = mesh.copy()
    colored.visual = trimesh.visual.ColorVisuals(mesh=colored)
    colored.visual.face_colors = np.tile(color, (len(colored.faces), 1))
    return colored


def mesh_bounds(meshes: List[Optional[trimesh.Trimesh]]) -> Tuple[np.ndarray, np.ndarray]:
    """Overall (min, max) corners of a list of meshes."""
    all_vertices = [m.vertices for m in meshes if m is not None and m.vertices.size]
    if not all_vertices:
        return np.zeros(3), np.zeros(3)
    stacked = np.vstack(all_vertices)
    return stacked.min(axis=0), stacked.max(axis=0)


def slant_height(radius: float) -> float:
    """Diagonal of a cone's square footprint; the tiling pitch."""
    return math.sqrt(2.0) * radius
