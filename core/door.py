from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import trimesh

from .boolean import BooleanEngine, subtract
from .constants import DOOR_HEIGHT, DOOR_THICKNESS_MARGIN, DOOR_WIDTH
from .enclosure import EnclosureSpec, Orientation, WallSegment
from .errors import DoorDoesNotFit
from .geometry import create_box_mesh


@dataclass(frozen=True)
class DoorSpec:
    width: float = DOOR_WIDTH
    height: float = DOOR_HEIGHT
    thickness_margin: float = DOOR_THICKNESS_MARGIN

    def thickness_for(self, wall_thickness: float) -> float:
        return wall_thickness + self.thickness_margin


DEFAULT_DOOR = DoorSpec()


def check_door_fits(spec: EnclosureSpec, door: DoorSpec = DEFAULT_DOOR):
    """
    Raises DoorDoesNotFit unless the front wall leaves a margin around the door.

    The width must strictly exceed door width plus one wall thickness on
    each side, and the wall must be taller than the door so the lintel keeps
    the wall in one piece.
    """
    required_width = door.width + 2.0 * spec.thickness
    if not spec.width > required_width:
        raise DoorDoesNotFit(
            f"Front wall width {spec.width} must exceed door width plus side margins ({required_width})"
        )
    if not spec.height > door.height:
        raise DoorDoesNotFit(
            f"Wall height {spec.height} must exceed door height ({door.height}); "
            "this lintel rule applies in addition to the width margin so the cut never splits the wall"
        )


def door_center(front_wall: WallSegment, door: DoorSpec = DEFAULT_DOOR) -> Tuple[float, float, float]:
    """Door volume center: wall's x and z, base resting at floor level (y = 0)."""
    x, _, z = front_wall.position
    return (x, door.height / 2.0, z)


def door_opening(front_wall: WallSegment, door: DoorSpec = DEFAULT_DOOR) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """((x_min, x_max), (y_min, y_max)) of the opening in the wall plane."""
    x, y, _ = door_center(front_wall, door)
    return ((x - door.width / 2.0, x + door.width / 2.0),
            (y - door.height / 2.0, y + door.height / 2.0))


def create_door_mesh(front_wall: WallSegment, spec: EnclosureSpec,
                     door: DoorSpec = DEFAULT_DOOR) -> trimesh.Trimesh:
    dimensions = np.array([door.width, door.height, door.thickness_for(spec.thickness)])
    return create_box_mesh(np.array(door_center(front_wall, door)), dimensions)


def cut_door(front_wall: WallSegment, spec: EnclosureSpec,
             engine: Optional[BooleanEngine] = None,
             door: DoorSpec = DEFAULT_DOOR) -> WallSegment:
    """
    Cuts the door opening out of the front wall.

    The door volume is thicker than the wall so its faces never coincide
    with the wall faces during the subtraction.

    Args:
        front_wall: The Front segment from build_enclosure.
        spec: The enclosure spec the wall was built from.
        engine: Boolean backend; defaults to trimesh with manifold.
        door: Door dimensions.

    Returns:
        A new WallSegment carrying the cut mesh and has_cutout=True.

    Raises:
        DoorDoesNotFit: Before any boolean work, if the wall is too small.
        CSGFailure: If the subtraction fails. The input wall is unchanged.
    """
    if front_wall.orientation != Orientation.FRONT:
        raise ValueError(f"Doors are cut from the Front wall, got {front_wall.orientation.value}")
    check_door_fits(spec, door)

    wall_mesh = front_wall.mesh
    if wall_mesh is None:
        wall_mesh = create_box_mesh(np.array(front_wall.position), np.array(front_wall.dimensions))

    door_mesh = create_door_mesh(front_wall, spec, door)
    cut_mesh = subtract(wall_mesh, door_mesh, engine)
    return front_wall.with_mesh(cut_mesh, has_cutout=True)


def expected_cut_volume(spec: EnclosureSpec, door: DoorSpec = DEFAULT_DOOR) -> float:
    """Wall volume minus the part of the door volume lying inside the wall."""
    wall_volume = spec.width * spec.height * spec.thickness
    return wall_volume - door.width * door.height * min(door.thickness_for(spec.thickness), spec.thickness)
