import json
import os
from typing import List, Optional

import trimesh

from core.boolean import BooleanEngine
from core.enclosure import EnclosureSpec
from core.scene import ConeParameters, SceneState, rebuild


def export_meshes_to_glb(meshes: List[trimesh.Trimesh], file_path: str) -> str:
    """
    Exports a list of Trimesh meshes to a single GLB file (binary glTF).

    Each mesh becomes its own node so per-mesh colors survive the export.

    Args:
        meshes: A list of trimesh.Trimesh objects.
        file_path: The full path for the output GLB file.

    Returns:
        The path actually written (".glb" appended if missing).

    Raises:
        ValueError: If the meshes list is empty.
        Exception: Propagates exceptions from trimesh export.
    """
    if not meshes:
        raise ValueError("Cannot export an empty list of meshes.")

    if not file_path.lower().endswith(".glb"):
        file_path += ".glb"

    # Ensure the directory exists (if one is present)
    export_dir = os.path.dirname(file_path)
    if export_dir:
        os.makedirs(export_dir, exist_ok=True)

    scene = trimesh.Scene()
    for index, mesh in enumerate(meshes):
        scene.add_geometry(mesh, node_name=f"mesh_{index}", geom_name=f"mesh_{index}")

    print(f"Exporting {len(meshes)} meshes to: {file_path}")
    try:
        scene.export(file_obj=file_path, file_type='glb')
        print("Export successful.")
    except Exception as e:
        print(f"Error during GLB export: {e}")
        raise  # Re-raise the exception to be caught by the caller
    return file_path


def save_scene_to_json(state: SceneState, file_path: str) -> str:
    """
    Saves the scene state (spec, cone parameters, layout summary) to a JSON file.

    Raises:
        Exception: Propagates exceptions from file I/O or JSON serialization.
    """
    if not file_path.lower().endswith(".json"):
        file_path += ".json"

    export_dir = os.path.dirname(file_path)
    if export_dir:
        os.makedirs(export_dir, exist_ok=True)

    print(f"Saving scene to: {file_path}")
    try:
        with open(file_path, 'w') as f:
            json.dump(state.to_dict(), f, indent=4)
        print("Scene save successful.")
    except Exception as e:
        print(f"Error during JSON scene save: {e}")
        raise
    return file_path


def load_scene_from_json(file_path: str, engine: Optional[BooleanEngine] = None) -> SceneState:
    """
    Loads a saved scene by rebuilding it from the stored spec.

    Geometry is fully derived from the enclosure spec, so only it and the cone
    parameters are read back.

    Raises:
        FileNotFoundError: If the file_path does not exist.
        InvalidDimension: If the stored spec is missing or invalid.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Scene file not found: {file_path}")

    print(f"Loading scene from: {file_path}")
    with open(file_path, 'r') as f:
        scene_data = json.load(f)

    spec = EnclosureSpec.from_dict(scene_data.get("spec", {}))
    cone_data = scene_data.get("cones", {})
    cone_parameters = ConeParameters(
        radius=float(cone_data.get("radius", ConeParameters.radius)),
        height=float(cone_data.get("height", ConeParameters.height)),
        radial_segments=int(cone_data.get("radial_segments", ConeParameters.radial_segments)),
        enabled=bool(cone_data.get("enabled", True)),
    )
    state = rebuild(spec, cone_parameters=cone_parameters, engine=engine)
    print("Scene load successful.")
    return state
