from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import trimesh

from .constants import (
    DEFAULT_CONE_HEIGHT,
    DEFAULT_CONE_RADIUS,
    DEFAULT_CONE_SEGMENTS,
    FLATTENED_CONE_HEIGHT,
    REGION_DIVISIONS,
    REGION_LOWER_MARK,
    REGION_UPPER_MARK,
)
from .door import DEFAULT_DOOR, DoorSpec, door_opening
from .enclosure import EnclosureSpec, Orientation, WallSegment
from .errors import InvalidDimension
from .geometry import batch_instances, color_mesh, create_cone_mesh, instance_mesh, slant_height
from .materials import CONE_COLOR, FLATTENED_CONE_COLOR, ColorTuple

Vector3 = Tuple[float, float, float]

X, Y, Z = 0, 1, 2
HALF_PI = math.pi / 2


class ConeVariant(Enum):
    STANDARD = "Standard"
    FLATTENED = "Flattened"


VARIANT_COLORS: Dict[ConeVariant, ColorTuple] = {
    ConeVariant.STANDARD: CONE_COLOR,
    ConeVariant.FLATTENED: FLATTENED_CONE_COLOR,
}


@dataclass(frozen=True)
class ConeInstance:
    position: Vector3
    rotation: Vector3  # Intrinsic XYZ Euler angles
    radius: float
    height: float
    radial_segments: int
    variant: ConeVariant
    orientation: Orientation
    cell: Tuple[int, int]  # (i, j) grid index on the host surface

    def to_dict(self):
        return {
            "position": list(self.position),
            "rotation": list(self.rotation),
            "radius": self.radius,
            "height": self.height,
            "radial_segments": self.radial_segments,
            "variant": self.variant.value,
            "orientation": self.orientation.value,
            "cell": list(self.cell),
        }


@dataclass(frozen=True)
class CentralRegionPolicy:
    """
    Substitutes flattened cones in the central ninth of a floor/roof grid.

    The usable span on each axis is cut into eighths; a cell (i, j) is in
    the region when 3/8 < i*pitch < 5/8 on the width axis and likewise for
    j on the length axis. Both bounds are strict.
    """
    quarter_w: float
    quarter_l: float
    pitch: float

    @classmethod
    def for_spec(cls, spec: EnclosureSpec, pitch: float) -> "CentralRegionPolicy":
        return cls(
            quarter_w=(spec.width - 2.0 * spec.thickness) / REGION_DIVISIONS,
            quarter_l=(spec.length - 2.0 * spec.thickness) / REGION_DIVISIONS,
            pitch=pitch,
        )

    def contains(self, i: int, j: int) -> bool:
        u = i * self.pitch
        v = j * self.pitch
        return (REGION_LOWER_MARK * self.quarter_w < u < REGION_UPPER_MARK * self.quarter_w
                and REGION_LOWER_MARK * self.quarter_l < v < REGION_UPPER_MARK * self.quarter_l)

    def variant_for(self, i: int, j: int) -> ConeVariant:
        return ConeVariant.FLATTENED if self.contains(i, j) else ConeVariant.STANDARD


@dataclass(frozen=True)
class SurfaceRule:
    """How cones are laid out on one orientation's inner face."""
    u_axis: int  # Grid column axis
    v_axis: int  # Grid row axis
    normal_axis: int
    inner_face: Callable[[EnclosureSpec], float]
    normal_sign: float  # Direction from the face into the room
    rotation: Vector3  # Turns the +Y apex onto normal_sign * normal_axis
    horizontal: bool  # Floor/roof grids index (i, j) = (u, v); walls (i, j) = (v, u)


SURFACE_RULES: Dict[Orientation, SurfaceRule] = {
    Orientation.FRONT: SurfaceRule(X, Y, Z, lambda s: -s.length / 2.0 + s.thickness, 1.0,
                                   (HALF_PI, 0.0, 0.0), False),
    Orientation.BACK: SurfaceRule(X, Y, Z, lambda s: s.length / 2.0 - s.thickness, -1.0,
                                  (-HALF_PI, 0.0, 0.0), False),
    Orientation.LEFT: SurfaceRule(Z, Y, X, lambda s: -s.width / 2.0 + s.thickness, 1.0,
                                  (0.0, 0.0, -HALF_PI), False),
    Orientation.RIGHT: SurfaceRule(Z, Y, X, lambda s: s.width / 2.0 - s.thickness, -1.0,
                                   (0.0, 0.0, HALF_PI), False),
    Orientation.ROOF: SurfaceRule(X, Z, Y, lambda s: s.height, -1.0,
                                  (0.0, 0.0, math.pi), True),
    Orientation.FLOOR: SurfaceRule(X, Z, Y, lambda s: s.thickness / 2.0, 1.0,
                                   (0.0, 0.0, 0.0), True),
}


def axis_extent(spec: EnclosureSpec, axis: int) -> Tuple[float, float]:
    """(lower edge, full dimension) of the enclosure along a world axis."""
    if axis == X:
        return -spec.width / 2.0, spec.width
    if axis == Z:
        return -spec.length / 2.0, spec.length
    return 0.0, spec.height


def axis_count(dimension: float, thickness: float, pitch: float) -> int:
    """Cones that fit along an axis; leftover space stays at the far edge."""
    usable = dimension - 2.0 * thickness
    if usable <= 0:
        return 0
    return int(math.floor(usable / pitch))


def axis_positions(spec: EnclosureSpec, axis: int, pitch: float) -> List[float]:
    lower, dimension = axis_extent(spec, axis)
    start = lower + spec.thickness + pitch / 2.0
    return [start + k * pitch for k in range(axis_count(dimension, spec.thickness, pitch))]


def grid_counts(orientation: Orientation, spec: EnclosureSpec,
                radius: float = DEFAULT_CONE_RADIUS) -> Tuple[int, int]:
    """(columns, rows) of the full grid on a surface, before exclusions."""
    rule = SURFACE_RULES[orientation]
    pitch = slant_height(radius)
    return (len(axis_positions(spec, rule.u_axis, pitch)),
            len(axis_positions(spec, rule.v_axis, pitch)))


def _overlaps_opening(u: float, v: float, half_pitch: float, opening) -> bool:
    (x_min, x_max), (y_min, y_max) = opening
    return (u - half_pitch < x_max and u + half_pitch > x_min
            and v - half_pitch < y_max and v + half_pitch > y_min)


def validate_cone_size(radius: float, height: float, radial_segments: int):
    """
    Checks cone dimensions before any cone is placed or meshed.

    Raises:
        InvalidDimension: On the first offending parameter.
    """
    for name, value in (("cone_radius", radius), ("cone_height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidDimension(name, value, "must be a real number")
        if not math.isfinite(value) or value <= 0:
            raise InvalidDimension(name, value)
    if (isinstance(radial_segments, bool) or not isinstance(radial_segments, (int, np.integer))
            or radial_segments < 3):
        raise InvalidDimension("cone_segments", radial_segments, "must be an integer of at least 3")


def tile_cones(segment: WallSegment, spec: EnclosureSpec,
               radius: float = DEFAULT_CONE_RADIUS,
               height: float = DEFAULT_CONE_HEIGHT,
               radial_segments: int = DEFAULT_CONE_SEGMENTS,
               region_policy: Optional[CentralRegionPolicy] = None,
               door: DoorSpec = DEFAULT_DOOR) -> List[ConeInstance]:
    """
    Lays a grid of cones over the inner face of a wall, roof or floor.

    The pitch is the cone's slant height (sqrt(2) * radius). Each axis
    holds floor((dimension - 2 * thickness) / pitch) cones starting at
    thickness + pitch / 2 from the edge. Bases sit flush on the inner face
    with the apex pointing into the room.

    A region policy only applies to floor and roof grids. Cells overlapping
    the door opening of a cut front wall are left empty.

    Returns:
        ConeInstances ordered row by row.
    """
    validate_cone_size(radius, height, radial_segments)

    rule = SURFACE_RULES[segment.orientation]
    pitch = slant_height(radius)
    us = axis_positions(spec, rule.u_axis, pitch)
    vs = axis_positions(spec, rule.v_axis, pitch)
    face = rule.inner_face(spec)
    policy = region_policy if rule.horizontal else None
    opening = door_opening(segment, door) if segment.has_cutout else None

    instances = []
    for v_index, v in enumerate(vs):
        for u_index, u in enumerate(us):
            if opening is not None and _overlaps_opening(u, v, pitch / 2.0, opening):
                continue

            i, j = (u_index, v_index) if rule.horizontal else (v_index, u_index)
            variant = policy.variant_for(i, j) if policy is not None else ConeVariant.STANDARD
            cone_height = FLATTENED_CONE_HEIGHT if variant == ConeVariant.FLATTENED else height

            position = [0.0, 0.0, 0.0]
            position[rule.u_axis] = u
            position[rule.v_axis] = v
            position[rule.normal_axis] = face + rule.normal_sign * cone_height / 2.0

            instances.append(ConeInstance(
                position=tuple(position),
                rotation=rule.rotation,
                radius=radius,
                height=cone_height,
                radial_segments=radial_segments,
                variant=variant,
                orientation=segment.orientation,
                cell=(i, j),
            ))
    return instances


def cone_meshes(instances: List[ConeInstance]) -> List[Tuple[ConeVariant, trimesh.Trimesh]]:
    """
    Builds one colored mesh per (cone shape, rotation) batch.

    Returns:
        (variant, mesh) pairs in first-seen order.
    """
    if not instances:
        return []

    keys = [(c.variant, c.radius, c.height, c.radial_segments, c.rotation) for c in instances]
    batches = batch_instances(keys, [c.position for c in instances])

    templates: Dict[Tuple, trimesh.Trimesh] = {}
    meshes = []
    for (variant, radius, height, segments, rotation), positions in batches.items():
        shape = (radius, height, segments)
        if shape not in templates:
            templates[shape] = create_cone_mesh(radius, height, segments)
        mesh = instance_mesh(templates[shape], rotation, positions)
        meshes.append((variant, color_mesh(mesh, VARIANT_COLORS[variant])))
    return meshes


def count_variants(instances: List[ConeInstance]) -> Dict[str, int]:
    counts = {variant.value: 0 for variant in ConeVariant}
    for cone in instances:
        counts[cone.variant.value] += 1
    return counts
