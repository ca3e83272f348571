from __future__ import annotations

import os
import math
from typing import Dict, Optional

import numpy as np
import pyvista as pv
import trimesh
from PyQt5.QtCore import pyqtSignal
from PyQt5.QtWidgets import QVBoxLayout, QWidget
from pyvistaqt import QtInteractor

from core.assets import AssetResult, PlacedModel
from core.constants import (
    GRID_HELPER_DIVISIONS,
    GRID_HELPER_SIZE,
    FLOOR_PLANE_OFFSET,
    LABEL_TEXT_DEPTH,
    LABEL_TEXT_SIZE,
)
from core.materials import FLOOR_COLOR, LABEL_COLOR, WALL_COLOR, color_to_rgb
from core.scene import Anchor, SceneState

VIEWPORT_BASE = "#eeeeee"
VIEWPORT_SKY = "#ffffff"
VIEWPORT_EDGE = "#3c3f44"
VIEWPORT_HIGHLIGHT = "#ffd36a"
VIEWPORT_GRID = "#9a9a9a"
VIEWPORT_AMBIENT = 0.2
VIEWPORT_DIFFUSE = 0.6
VIEWPORT_SPECULAR = 0.2
VIEWPORT_SPECULAR_POWER = 14.0
HEMISPHERE_LIGHT_POSITION = (0.0, 500.0, 0.0)
HEMISPHERE_LIGHT_INTENSITY = 0.6

pv.set_plot_theme("document")
pv.global_theme.background = VIEWPORT_BASE
pv.global_theme.anti_aliasing = "fxaa"


class ViewportWidget(QWidget):
    """Qt widget wrapping a PyVista interactor; presents one SceneState at a time."""

    segment_picked = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plotter = QtInteractor(self)
        self.plotter.set_background(VIEWPORT_BASE, top=VIEWPORT_SKY)
        layout.addWidget(self.plotter.interactor)

        self.plotter.add_axes()
        self.plotter.camera_position = "iso"
        self._init_lighting()

        self._actors: Dict[pv.Actor, str] = {}
        self._highlighted_actor: Optional[pv.Actor] = None

        self.plotter.enable_mesh_picking(self._handle_pick, use_actor=True, show=False)

    def _init_lighting(self):
        self.plotter.remove_all_lights()
        hemi = pv.Light(
            position=HEMISPHERE_LIGHT_POSITION,
            focal_point=(0.0, 0.0, 0.0),
            intensity=HEMISPHERE_LIGHT_INTENSITY,
            light_type="scene light",
        )
        self.plotter.add_light(hemi)
        self.plotter.add_light(pv.Light(light_type="headlight", intensity=0.5))

    def _base_mesh_render_kwargs(self) -> Dict[str, float | bool]:
        return {
            "smooth_shading": False,
            "ambient": VIEWPORT_AMBIENT,
            "diffuse": VIEWPORT_DIFFUSE,
            "specular": VIEWPORT_SPECULAR,
            "specular_power": VIEWPORT_SPECULAR_POWER,
        }

    def _add_trimesh(self, mesh: trimesh.Trimesh, label: str, show_edges: bool = False,
                     color=None) -> Optional[pv.Actor]:
        pv_mesh = pv.wrap(mesh)
        kwargs = {"show_edges": show_edges, "edge_color": VIEWPORT_EDGE, **self._base_mesh_render_kwargs()}
        try:
            if color is None and len(mesh.visual.face_colors) == mesh.faces.shape[0]:
                pv_mesh.cell_data["colors"] = mesh.visual.face_colors
                actor = self.plotter.add_mesh(pv_mesh, scalars="colors", rgb=True, preference="cell", **kwargs)
            else:
                actor = self.plotter.add_mesh(pv_mesh, color=color or color_to_rgb(WALL_COLOR), **kwargs)
        except Exception as exc:
            print(f"Warning: Could not add {label} to viewport: {exc}")
            return None
        self._actors[actor] = label
        return actor

    def display_state(self, state: Optional[SceneState], floor_texture: Optional[AssetResult] = None):
        """Replaces everything on screen with the given state."""
        self.clear_viewport()
        if state is None or state.disposed:
            self.plotter.render()
            return

        wall_meshes = state.segment_meshes()
        for segment, mesh in zip(state.segments, wall_meshes):
            self._add_trimesh(mesh, segment.orientation.value, show_edges=True)

        for index, mesh in enumerate(state.cone_meshes()):
            self._add_trimesh(mesh, f"Cones {index}")

        self._add_floor(state, floor_texture)
        self._add_grid_helper()
        self.apply_stable_camera()
        self.plotter.render()

    def _add_floor(self, state: SceneState, floor_texture: Optional[AssetResult]):
        if state.floor is None or state.floor.mesh is None:
            return
        pv_mesh = pv.wrap(state.floor.mesh)
        texture = None
        if floor_texture is not None and floor_texture.ok:
            try:
                pv_mesh.active_texture_coordinates = np.asarray(state.floor.mesh.visual.uv)
                texture = pv.numpy_to_texture(floor_texture.asset)
                texture.repeat = True
            except Exception as exc:
                print(f"Warning: Floor texture not applied: {exc}")
                texture = None
        try:
            if texture is not None:
                actor = self.plotter.add_mesh(pv_mesh, texture=texture, **self._base_mesh_render_kwargs())
            else:
                actor = self.plotter.add_mesh(pv_mesh, color=color_to_rgb(FLOOR_COLOR), **self._base_mesh_render_kwargs())
            self._actors[actor] = "Floor plane"
        except Exception as exc:
            print(f"Warning: Could not add floor plane to viewport: {exc}")

    def _add_grid_helper(self):
        grid = pv.Plane(
            center=(0.0, -FLOOR_PLANE_OFFSET, 0.0),
            direction=(0.0, 1.0, 0.0),
            i_size=GRID_HELPER_SIZE,
            j_size=GRID_HELPER_SIZE,
            i_resolution=GRID_HELPER_DIVISIONS,
            j_resolution=GRID_HELPER_DIVISIONS,
        )
        actor = self.plotter.add_mesh(grid, style="wireframe", color=VIEWPORT_GRID, pickable=False)
        self._actors[actor] = "Grid"

    def add_environment(self, cubemap: AssetResult):
        """Uses six face images as the environment map; skipped on failure."""
        if not cubemap.ok:
            return
        try:
            texture = pv.cubemap_from_filenames(cubemap.asset)
            self.plotter.set_environment_texture(texture)
        except Exception as exc:
            print(f"Warning: Environment cubemap not applied: {exc}")

    def add_model(self, model: AssetResult):
        if not model.ok or not isinstance(model.asset, PlacedModel):
            return
        self._add_trimesh(model.asset.mesh, "Model", color=color_to_rgb(WALL_COLOR))

    def add_label(self, text: str, anchor: Anchor):
        if not text:
            return
        try:
            label = pv.Text3D(text, depth=LABEL_TEXT_DEPTH)
            label = label.scale([LABEL_TEXT_SIZE, LABEL_TEXT_SIZE, 1.0], inplace=False)
            rx, ry, rz = (math.degrees(angle) for angle in anchor.rotation)
            label = label.rotate_x(rx, inplace=False).rotate_y(ry, inplace=False).rotate_z(rz, inplace=False)
            label = label.translate(anchor.position, inplace=False)
            actor = self.plotter.add_mesh(label, color=color_to_rgb(LABEL_COLOR), **self._base_mesh_render_kwargs())
            self._actors[actor] = "Label"
        except Exception as exc:
            print(f"Warning: Label '{text}' not rendered: {exc}")

    def apply_stable_camera(self):
        self.plotter.camera_position = "iso"
        self.plotter.reset_camera()

    def resize_viewport(self, width: int, height: int):
        """Re-renders at the new size; the camera aspect follows the render window."""
        if width <= 0 or height <= 0:
            return
        self.plotter.reset_camera_clipping_range()
        self.plotter.render()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resize_viewport(event.size().width(), event.size().height())

    def save_snapshot(self, path: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        previous_off_screen = getattr(self.plotter, "off_screen", False)
        self.apply_stable_camera()

        try:
            self.plotter.off_screen = True
            self.plotter.show(screenshot=path, auto_close=False)
        finally:
            self.plotter.off_screen = previous_off_screen

    def clear_viewport(self):
        """Removes every actor so no render buffers outlive the state they showed."""
        self._clear_highlight()
        self.plotter.clear_actors()
        self._actors.clear()

    def _clear_highlight(self):
        if self._highlighted_actor and self._highlighted_actor.prop:
            try:
                self._highlighted_actor.prop.edge_color = VIEWPORT_EDGE
                self._highlighted_actor.prop.line_width = 1
            except Exception as exc:
                print(f"Warning: Could not reset highlight: {exc}")
        self._highlighted_actor = None

    def _handle_pick(self, actor: Optional[pv.Actor]):
        self._clear_highlight()

        label = self._actors.get(actor) if actor is not None else None
        if label is None:
            self.segment_picked.emit(None)
            return

        if actor.prop:
            actor.prop.edge_color = VIEWPORT_HIGHLIGHT
            actor.prop.line_width = 3
            self._highlighted_actor = actor

        self.segment_picked.emit(label)

    def closeEvent(self, event):
        self.plotter.close()
        super().closeEvent(event)
