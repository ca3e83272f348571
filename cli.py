"""Minimal CLI for generating and exporting enclosure scenes.

Usage examples:
  python3 cli.py generate --out builds/enclosure.glb --summary
  python3 cli.py generate --width 4 --length 4 --height 3 --thickness 0.5 --json builds/compact.json
  python3 cli.py view
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from config import check_config, config
from core.boolean import TrimeshBooleanEngine
from core.enclosure import EnclosureSpec, Orientation
from core.errors import EnclosureError
from core.io import export_meshes_to_glb, load_scene_from_json, save_scene_to_json
from core.scene import ConeParameters, SceneState, rebuild, scene_bounds


def _build_state(args: argparse.Namespace) -> SceneState:
    engine = TrimeshBooleanEngine(args.engine)
    if args.load:
        return load_scene_from_json(str(args.load), engine=engine)

    spec = EnclosureSpec(
        width=args.width,
        length=args.length,
        height=args.height,
        thickness=args.thickness,
    )
    cone_parameters = ConeParameters(
        radius=args.cone_radius,
        height=args.cone_height,
        radial_segments=args.cone_segments,
        enabled=not args.no_cones,
    )
    return rebuild(spec, cone_parameters=cone_parameters, engine=engine)


def _export(state: SceneState, output: Optional[Path], json_path: Optional[Path], summary: bool):
    meshes: List = state.get_all_meshes(include_floor=False)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        export_meshes_to_glb(meshes, str(output))

    if json_path:
        json_path.parent.mkdir(parents=True, exist_ok=True)
        save_scene_to_json(state, str(json_path))

    if summary:
        bounds = scene_bounds(state)
        info = state.summary()
        variants = info["cone_variants"]
        print(
            f"Segments: {info['segments']} | Cones: {info['cones']}"
            f" (standard={variants['Standard']} flattened={variants['Flattened']})"
            f" | Meshes: {len(meshes)}"
            f" | Enclosure bounds: min{bounds[0].round(3)} max{bounds[1].round(3)}"
        )
        print(f"Door cut: {'yes' if info['front_wall_cut'] else 'no (uncut fallback)'}")
        for warning in info["warnings"]:
            print(f"Warning: {warning}")
        if config.VERBOSE:
            for orientation in Orientation:
                print(f"  {orientation.value}: {len(state.cones_on(orientation))} cones")

    if len(state.cones) > config.MAX_CONES_WARNING:
        print(f"Warning: {len(state.cones)} cones exceeds MAX_CONES_WARNING={config.MAX_CONES_WARNING}")


def _run_viewer() -> int:
    from PyQt5.QtWidgets import QApplication
    from gui.main_window import MainWindow

    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    return app.exec_()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Enclosure generator CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate an enclosure and export to GLB/JSON")
    gen.add_argument("--width", type=float, default=config.DEFAULT_WIDTH, help="X dimension")
    gen.add_argument("--length", type=float, default=config.DEFAULT_LENGTH, help="Z dimension")
    gen.add_argument("--height", type=float, default=config.DEFAULT_HEIGHT, help="Wall height (Y)")
    gen.add_argument("--thickness", type=float, default=config.DEFAULT_THICKNESS, help="Wall thickness")
    gen.add_argument("--cone-radius", type=float, default=config.CONE_RADIUS)
    gen.add_argument("--cone-height", type=float, default=config.CONE_HEIGHT)
    gen.add_argument("--cone-segments", type=int, default=config.CONE_SEGMENTS)
    gen.add_argument("--no-cones", action="store_true", default=not config.CONES_ENABLED,
                     help="Skip cone tiling")
    gen.add_argument(
        "--engine",
        choices=["manifold", "blender"],
        default=config.BOOLEAN_ENGINE,
        help="trimesh boolean engine used for the door cut",
    )
    gen.add_argument("--load", type=Path, help="Rebuild from a saved JSON scene instead of the dimension flags")
    gen.add_argument("--out", type=Path, help="Output GLB path")
    gen.add_argument("--json", type=Path, help="Optional JSON scene save path")
    gen.add_argument("--summary", action="store_true", help="Print counts and bounds")

    sub.add_parser("view", help="Open the interactive viewer")
    sub.add_parser("config", help="Print the configuration summary")

    args = parser.parse_args(argv)

    if args.command == "config":
        print(config.get_summary())
        check_config()
        return 0

    if args.command == "view":
        check_config()
        return _run_viewer()

    try:
        state = _build_state(args)
    except (EnclosureError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        if config.DEBUG:
            raise
        return 1
    _export(state, args.out, args.json, args.summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
