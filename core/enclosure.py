from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import trimesh

from .errors import InvalidDimension
from .geometry import create_box_mesh

Vector3 = Tuple[float, float, float]


class Orientation(Enum):
    FRONT = "Front"
    BACK = "Back"
    LEFT = "Left"
    RIGHT = "Right"
    ROOF = "Roof"
    FLOOR = "Floor"


@dataclass(frozen=True)
class EnclosureSpec:
    width: float
    length: float
    height: float
    thickness: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "width": self.width,
            "length": self.length,
            "height": self.height,
            "thickness": self.thickness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnclosureSpec":
        try:
            return cls(
                width=data["width"],
                length=data["length"],
                height=data["height"],
                thickness=data["thickness"],
            )
        except KeyError as missing:
            raise InvalidDimension(str(missing.args[0]), None, "missing from spec data") from None


@dataclass(frozen=True)
class WallSegment:
    """One box-shaped solid of the enclosure."""
    orientation: Orientation
    dimensions: Vector3  # W, H, D
    position: Vector3  # Geometric center
    has_cutout: bool = False
    mesh: Optional[trimesh.Trimesh] = field(default=None, repr=False, compare=False)

    @property
    def volume(self) -> float:
        if self.mesh is not None:
            return float(self.mesh.volume)
        w, h, d = self.dimensions
        return w * h * d

    def with_mesh(self, mesh: trimesh.Trimesh, has_cutout: bool) -> "WallSegment":
        return replace(self, mesh=mesh, has_cutout=has_cutout)

    def to_dict(self) -> Dict[str, Any]:
        """Serializes segment data to a dictionary (excluding the mesh)."""
        return {
            "orientation": self.orientation.value,
            "dimensions": list(self.dimensions),
            "position": list(self.position),
            "has_cutout": self.has_cutout,
        }


def validate_spec(spec: EnclosureSpec) -> EnclosureSpec:
    """
    Checks the dimensional parameters before any geometry is built.

    Every value must be a finite positive real and the walls must leave an
    interior, i.e. thickness < min(width, length) / 2.

    Raises:
        InvalidDimension: On the first offending parameter.
    """
    for name in ("width", "length", "height", "thickness"):
        value = getattr(spec, name)
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidDimension(name, value, "must be a real number")
        if not math.isfinite(value) or value <= 0:
            raise InvalidDimension(name, value)

    inner_limit = min(spec.width, spec.length) / 2.0
    if spec.thickness >= inner_limit:
        raise InvalidDimension(
            "thickness", spec.thickness,
            f"must be smaller than half the shorter side ({inner_limit})",
        )
    return spec


def segment_layout(spec: EnclosureSpec) -> List[Tuple[Orientation, Vector3, Vector3]]:
    """(orientation, dimensions, center) of the six solids, in build order."""
    w, l, h, t = spec.width, spec.length, spec.height, spec.thickness
    return [
        (Orientation.FRONT, (w, h, t), (0.0, h / 2.0, -(l / 2.0 - t / 2.0))),
        (Orientation.BACK, (w, h, t), (0.0, h / 2.0, l / 2.0 - t / 2.0)),
        (Orientation.LEFT, (t, h, l), (-(w / 2.0 - t / 2.0), h / 2.0, 0.0)),
        (Orientation.RIGHT, (t, h, l), (w / 2.0 - t / 2.0, h / 2.0, 0.0)),
        (Orientation.ROOF, (w, t, l), (0.0, h + t / 2.0, 0.0)),
        (Orientation.FLOOR, (w, t, l), (0.0, 0.0, 0.0)),
    ]


def build_enclosure(spec: EnclosureSpec) -> List[WallSegment]:
    """
    Builds the six axis-aligned box solids of the enclosure.

    Front/back walls span the width, left/right walls span the length and
    sit between them, the roof rests on top of the walls and the floor is
    centered on the origin.

    Args:
        spec: Enclosure dimensions.

    Returns:
        Six WallSegments ordered Front, Back, Left, Right, Roof, Floor.

    Raises:
        InvalidDimension: If the enclosure spec fails validation. Nothing is built.
    """
    validate_spec(spec)

    segments = []
    for orientation, dimensions, position in segment_layout(spec):
        mesh = create_box_mesh(np.array(position), np.array(dimensions))
        segments.append(WallSegment(
            orientation=orientation,
            dimensions=tuple(float(v) for v in dimensions),
            position=tuple(float(v) for v in position),
            mesh=mesh,
        ))
    return segments


def find_segment(segments: List[WallSegment], orientation: Orientation) -> WallSegment:
    for segment in segments:
        if segment.orientation == orientation:
            return segment
    raise KeyError(f"No {orientation.value} segment in enclosure")
