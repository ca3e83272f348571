"""
Narrow boolean-solid interface used by the door cutter.

The cutter only needs `subtract(A, B) -> C` and `to_mesh(C)`, so any
geometry kernel (or a test double) can stand behind it.
"""

from typing import Optional

import trimesh

from .errors import CSGFailure


class BooleanEngine:
    """Interface for a boolean geometry kernel."""

    name = "abstract"

    def subtract(self, solid: trimesh.Trimesh, tool: trimesh.Trimesh) -> trimesh.Trimesh:
        raise NotImplementedError

    def to_mesh(self, solid) -> trimesh.Trimesh:
        return solid


class TrimeshBooleanEngine(BooleanEngine):
    """Boolean ops through trimesh.boolean with a selectable backend ("manifold", "blender")."""

    def __init__(self, engine: Optional[str] = "manifold"):
        self.engine = engine
        self.name = f"trimesh:{engine or 'default'}"

    def subtract(self, solid: trimesh.Trimesh, tool: trimesh.Trimesh) -> trimesh.Trimesh:
        try:
            result = trimesh.boolean.difference([solid, tool], engine=self.engine)
        except ImportError as imp_err:
            # Backend package (e.g. manifold3d) is not installed
            raise CSGFailure(f"Boolean backend '{self.engine}' unavailable: {imp_err}") from imp_err
        except ValueError as val_err:
            # Non-volume input or "No backends available"
            raise CSGFailure(f"Boolean subtraction rejected input: {val_err}") from val_err
        except Exception as bool_err:
            raise CSGFailure(
                f"Boolean subtraction failed (Type: {type(bool_err).__name__}): {bool_err}"
            ) from bool_err
        return result

    def to_mesh(self, solid) -> trimesh.Trimesh:
        if isinstance(solid, trimesh.Scene):
            solid = solid.dump(concatenate=True)
        return trimesh.Trimesh(vertices=solid.vertices, faces=solid.faces)


def subtract(solid: trimesh.Trimesh, tool: trimesh.Trimesh,
             engine: Optional[BooleanEngine] = None) -> trimesh.Trimesh:
    """
    Computes solid - tool and checks the result is a usable volume.

    Raises:
        CSGFailure: If the backend fails or the result is empty or not watertight.
    """
    engine = engine or TrimeshBooleanEngine()
    result = engine.to_mesh(engine.subtract(solid, tool))
    if result is None or result.is_empty:
        raise CSGFailure(f"Boolean subtraction via {engine.name} produced an empty mesh")
    if not result.is_watertight:
        raise CSGFailure(f"Boolean subtraction via {engine.name} produced a non-watertight mesh")
    if result.volume <= 0:
        raise CSGFailure(f"Boolean subtraction via {engine.name} produced a mesh with no volume")
    return result
