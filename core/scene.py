from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import trimesh

from .boolean import BooleanEngine
from .constants import (
    DEFAULT_CONE_HEIGHT,
    DEFAULT_CONE_RADIUS,
    DEFAULT_CONE_SEGMENTS,
    LABEL_ANCHOR_ROTATION,
    MODEL_ANCHOR_INSET,
    MODEL_ANCHOR_ROTATION,
)
from .door import DEFAULT_DOOR, DoorSpec, check_door_fits, cut_door
from .enclosure import EnclosureSpec, Orientation, WallSegment, build_enclosure, find_segment, validate_spec
from .errors import CSGFailure
from .floor import FloorPlane, build_floor
from .geometry import color_mesh, mesh_bounds, slant_height
from .materials import WALL_COLOR, ColorTuple
from .tiling import CentralRegionPolicy, ConeInstance, count_variants, tile_cones, validate_cone_size
from .tiling import cone_meshes as build_cone_meshes

Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class ConeParameters:
    radius: float = DEFAULT_CONE_RADIUS
    height: float = DEFAULT_CONE_HEIGHT
    radial_segments: int = DEFAULT_CONE_SEGMENTS
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": self.radius,
            "height": self.height,
            "radial_segments": self.radial_segments,
            "enabled": self.enabled,
        }

    def validate(self) -> "ConeParameters":
        validate_cone_size(self.radius, self.height, self.radial_segments)
        return self


@dataclass(frozen=True)
class Anchor:
    """Attachment point for an externally loaded model or label."""
    position: Vector3
    rotation: Vector3

    def rotation_hints(self) -> Dict[str, float]:
        return {axis: angle for axis, angle in zip("xyz", self.rotation) if angle}


@dataclass
class SceneState:
    """Everything one rebuild produced. Owned by the caller until dispose()."""
    spec: EnclosureSpec
    cone_parameters: ConeParameters
    segments: Tuple[WallSegment, ...]
    cones: Tuple[ConeInstance, ...]
    floor: Optional[FloorPlane]
    model_anchor: Anchor
    label_anchor: Anchor
    warnings: List[str] = field(default_factory=list)
    disposed: bool = False
    _cone_meshes: Optional[List[Tuple[Any, trimesh.Trimesh]]] = field(default=None, repr=False)

    def segment(self, orientation: Orientation) -> WallSegment:
        return find_segment(list(self.segments), orientation)

    def cones_on(self, orientation: Orientation) -> List[ConeInstance]:
        return [cone for cone in self.cones if cone.orientation == orientation]

    def segment_meshes(self, color: ColorTuple = WALL_COLOR) -> List[trimesh.Trimesh]:
        return [color_mesh(s.mesh, color) for s in self.segments if s.mesh is not None]

    def cone_meshes(self) -> List[trimesh.Trimesh]:
        """Batched cone meshes, built on first use and cached until dispose."""
        if self._cone_meshes is None:
            self._cone_meshes = build_cone_meshes(list(self.cones))
        return [mesh for _, mesh in self._cone_meshes]

    def get_all_meshes(self, include_floor: bool = True) -> List[trimesh.Trimesh]:
        """Segments, cone batches and the floor plane, in assembly order."""
        meshes = self.segment_meshes() + self.cone_meshes()
        if include_floor and self.floor is not None and self.floor.mesh is not None:
            meshes.append(self.floor.mesh)
        return meshes

    def summary(self) -> Dict[str, Any]:
        return {
            "segments": len(self.segments),
            "cones": len(self.cones),
            "cone_variants": count_variants(list(self.cones)),
            "front_wall_cut": any(s.has_cutout for s in self.segments),
            "warnings": list(self.warnings),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the scene state to a dictionary (geometry is derived from the EnclosureSpec)."""
        return {
            "spec": self.spec.to_dict(),
            "cones": self.cone_parameters.to_dict(),
            "segments": [s.to_dict() for s in self.segments],
            "floor": self.floor.to_dict() if self.floor is not None else None,
            "model_anchor": {"position": list(self.model_anchor.position),
                             "rotation": list(self.model_anchor.rotation)},
            "label_anchor": {"position": list(self.label_anchor.position),
                             "rotation": list(self.label_anchor.rotation)},
            "summary": self.summary(),
        }


def model_anchor(spec: EnclosureSpec) -> Anchor:
    """Roof corner above the back-right walls, inset by 1.25 wall thicknesses."""
    inset = spec.thickness * MODEL_ANCHOR_INSET
    return Anchor(
        position=(spec.width / 2.0 - inset, spec.height, spec.length / 2.0 - inset),
        rotation=MODEL_ANCHOR_ROTATION,
    )


def label_anchor(spec: EnclosureSpec) -> Anchor:
    """Top edge of the front wall, one thickness in from its right end."""
    return Anchor(
        position=(spec.width / 2.0 - spec.thickness, spec.height, -spec.length / 2.0),
        rotation=LABEL_ANCHOR_ROTATION,
    )


def rebuild(spec: EnclosureSpec,
            cone_parameters: Optional[ConeParameters] = None,
            engine: Optional[BooleanEngine] = None,
            door: DoorSpec = DEFAULT_DOOR) -> SceneState:
    """
    Builds a complete scene from scratch.

    Runs validation, the six solids, the door cut, cone tiling on every
    surface and the floor plane in one blocking sequence. A failed door
    cut keeps the uncut front wall and records a warning; the other
    segments are unaffected.

    Raises:
        InvalidDimension: If the enclosure spec or the cone parameters are
            invalid. Nothing is built.
        DoorDoesNotFit: If the front wall cannot hold the door.
    """
    cone_parameters = (cone_parameters or ConeParameters()).validate()
    segments = build_enclosure(spec)
    warnings: List[str] = []

    front = segments[0]
    try:
        segments[0] = cut_door(front, spec, engine=engine, door=door)
    except CSGFailure as exc:
        message = f"Door cut failed, using uncut front wall: {exc}"
        print(f"Warning: {message}")
        warnings.append(message)

    cones: List[ConeInstance] = []
    if cone_parameters.enabled:
        pitch = slant_height(cone_parameters.radius)
        policy = CentralRegionPolicy.for_spec(spec, pitch)
        for segment in segments:
            cones.extend(tile_cones(
                segment, spec,
                radius=cone_parameters.radius,
                height=cone_parameters.height,
                radial_segments=cone_parameters.radial_segments,
                region_policy=policy,
                door=door,
            ))

    floor = build_floor(spec.width, spec.length)
    print(f"Info: Enclosure built: {len(segments)} segments, {len(cones)} cones.")

    return SceneState(
        spec=spec,
        cone_parameters=cone_parameters,
        segments=tuple(segments),
        cones=tuple(cones),
        floor=floor,
        model_anchor=model_anchor(spec),
        label_anchor=label_anchor(spec),
        warnings=warnings,
    )


def dispose(state: Optional[SceneState]):
    """Releases every mesh and instance held by a state. Safe to call twice."""
    if state is None or state.disposed:
        return
    state.segments = ()
    state.cones = ()
    state.floor = None
    state._cone_meshes = None
    state.disposed = True


class SceneSession:
    """Owns the current SceneState; each rebuild disposes the previous one first."""

    def __init__(self, cone_parameters: Optional[ConeParameters] = None,
                 engine: Optional[BooleanEngine] = None):
        self.cone_parameters = cone_parameters or ConeParameters()
        self.engine = engine
        self.state: Optional[SceneState] = None

    def rebuild(self, spec: EnclosureSpec) -> SceneState:
        # Reject bad input before releasing the current scene
        validate_spec(spec)
        check_door_fits(spec)
        self.cone_parameters.validate()
        self.clear()
        self.state = rebuild(spec, cone_parameters=self.cone_parameters, engine=self.engine)
        return self.state

    def adopt(self, state: SceneState) -> SceneState:
        """Takes ownership of a state built elsewhere (e.g. on a worker thread)."""
        if state is not self.state:
            self.clear()
            self.state = state
        return state

    def clear(self):
        dispose(self.state)
        self.state = None

    def get_all_meshes(self) -> List[trimesh.Trimesh]:
        if self.state is None:
            return []
        return self.state.get_all_meshes()


def scene_bounds(state: SceneState) -> Tuple[np.ndarray, np.ndarray]:
    return mesh_bounds([s.mesh for s in state.segments])
