"""
Asset loading with explicit results.

Loaders never raise for a missing or unreadable asset; they return
`Failed(reason)` and print a warning so the scene keeps rendering without
the affected element.
"""

import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
import trimesh
from PIL import Image, UnidentifiedImageError

from .errors import AssetLoadFailure
from .geometry import euler_matrix

# Face order of a cube map: +X, -X, +Y, -Y, +Z, -Z
CUBEMAP_FACES = ("px", "nx", "py", "ny", "pz", "nz")


@dataclass(frozen=True)
class Loaded:
    asset: Any
    path: str = ""

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    reason: str
    path: str = ""
    error: Optional[AssetLoadFailure] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return False


AssetResult = Union[Loaded, Failed]


@dataclass(frozen=True)
class PlacedModel:
    mesh: trimesh.Trimesh = field(repr=False)
    position: Tuple[float, float, float]
    scale: float
    rotation: Tuple[float, float, float]


def _failed(kind: str, path: str, exc: Exception) -> Failed:
    reason = f"{kind} could not be loaded from '{path}': {exc}"
    print(f"Warning: {reason}")
    return Failed(reason=reason, path=path, error=AssetLoadFailure(reason))


def load_texture(path: str) -> AssetResult:
    """Loads an image as an RGBA numpy array."""
    try:
        with Image.open(path) as image:
            pixels = np.asarray(image.convert("RGBA"))
    except (OSError, UnidentifiedImageError) as exc:
        return _failed("Texture", path, exc)
    print(f"Info: Texture loaded successfully: {path}")
    return Loaded(asset=pixels, path=path)


def cubemap_paths(directory: str, extension: str = ".jpg",
                  names: Optional[Sequence[str]] = None) -> List[str]:
    names = names or CUBEMAP_FACES
    return [os.path.join(directory, f"{name}{extension}") for name in names]


def load_cubemap(paths: Sequence[str]) -> AssetResult:
    """
    Loads the six face images of an environment cube map.

    Returns Loaded with the list of face paths once every face decodes,
    otherwise Failed naming the first bad face.
    """
    if len(paths) != 6:
        return _failed("Cubemap", ", ".join(paths), ValueError(f"expected 6 faces, got {len(paths)}"))
    for path in paths:
        result = load_texture(path)
        if not result.ok:
            # load_texture already printed the warning for this face
            return Failed(reason=f"Cubemap face failed: {result.reason}", path=path, error=result.error)
    return Loaded(asset=list(paths), path=os.path.dirname(paths[0]))


def load_model(path: str, position: Sequence[float], scale: float = 1.0,
               rotation: Optional[dict] = None) -> AssetResult:
    """
    Loads a model file (GLB, OBJ, STL...) and places it in the scene frame.

    Args:
        path: Model file path.
        position: Target translation (x, y, z).
        scale: Uniform scale factor.
        rotation: Optional per-axis angles, e.g. {'x': pi, 'y': -pi / 4}.
    """
    rotation = rotation or {}
    angles = (rotation.get('x', 0.0), rotation.get('y', 0.0), rotation.get('z', 0.0))
    if not os.path.exists(path):
        return _failed("Model", path, FileNotFoundError("file not found"))
    try:
        mesh = trimesh.load(path, force='mesh')
    except Exception as exc:
        # trimesh raises loader-specific errors for malformed files
        return _failed("Model", path, exc)
    if mesh is None or mesh.is_empty:
        return _failed("Model", path, ValueError("file contains no geometry"))

    transform = euler_matrix(angles)
    transform[:3, :3] *= scale
    transform[:3, 3] = np.asarray(position, dtype=float)
    mesh.apply_transform(transform)
    return Loaded(
        asset=PlacedModel(mesh=mesh, position=tuple(float(v) for v in position),
                          scale=scale, rotation=angles),
        path=path,
    )
