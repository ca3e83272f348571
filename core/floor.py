import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np
import trimesh

from .constants import FLOOR_DIVISION_SIZE, FLOOR_PLANE_OFFSET, FLOOR_TEXTURE_DIVISOR
from .geometry import create_plane_mesh, euler_matrix


@dataclass(frozen=True)
class FloorPlane:
    """Checkered ground plane beneath the enclosure."""
    size: float
    divisions: float
    segments: int
    texture_repeat: Tuple[float, float]
    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float]
    mesh: Optional[trimesh.Trimesh] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "divisions": self.divisions,
            "segments": self.segments,
            "texture_repeat": list(self.texture_repeat),
            "position": list(self.position),
            "rotation": list(self.rotation),
        }


def build_floor(width: float, length: float, offset: float = FLOOR_PLANE_OFFSET) -> FloorPlane:
    """
    Builds the checkered floor plane sized to the enclosure footprint.

    The plane is size x size with size = max(width, length), split into
    size / 2 divisions per axis. The checker texture repeats divisions / 10
    times per axis so its density follows the floor size, not the mesh
    resolution. The plane is laid horizontal and dropped `offset` below the
    enclosure base.
    """
    if width <= 0 or length <= 0:
        raise ValueError(f"Floor dimensions must be positive, got {width} x {length}")

    size = max(width, length)
    divisions = size / FLOOR_DIVISION_SIZE
    repeat = divisions / FLOOR_TEXTURE_DIVISOR
    segments = max(1, int(math.floor(divisions)))
    rotation = (-math.pi / 2.0, 0.0, 0.0)
    position = (0.0, -offset, 0.0)

    mesh = create_plane_mesh(size, segments, uv_repeat=repeat)
    transform = euler_matrix(rotation)
    transform[:3, 3] = np.array(position)
    mesh.apply_transform(transform)

    return FloorPlane(
        size=size,
        divisions=divisions,
        segments=segments,
        texture_repeat=(repeat, repeat),
        position=position,
        rotation=rotation,
        mesh=mesh,
    )
