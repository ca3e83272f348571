from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from PyQt5.QtCore import QThread, Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from config import config
from core.assets import AssetResult, cubemap_paths, load_cubemap, load_model, load_texture
from core.boolean import TrimeshBooleanEngine
from core.door import check_door_fits
from core.enclosure import EnclosureSpec, validate_spec
from core.errors import EnclosureError
from core.io import export_meshes_to_glb, save_scene_to_json
from core.scene import ConeParameters, SceneSession, SceneState, rebuild
from .panels import GenerationPanel, OutlinerPanel, SceneExportPanel
from .viewport import ViewportWidget


CONCRETE_STYLESHEET = """
QMainWindow {
    background: #2b2f33;
    color: #eceae6;
}

QWidget {
    color: #eceae6;
    font-family: "Avenir Next", "Gill Sans MT", "Trebuchet MS", sans-serif;
    font-size: 12px;
}

QDockWidget {
    border: 1px solid rgba(236, 234, 230, 0.20);
    background: rgba(34, 38, 42, 0.96);
}

QDockWidget::title {
    text-align: left;
    background: rgba(43, 126, 193, 0.90);
    color: #f5f7fa;
    padding-left: 10px;
    font-size: 11px;
    font-weight: 600;
}

QGroupBox {
    background: rgba(24, 27, 30, 0.80);
    border: 1px solid rgba(236, 234, 230, 0.28);
    border-radius: 8px;
    margin-top: 14px;
    padding: 16px 10px 10px 10px;
    font-weight: 600;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 10px;
    padding: 1px 6px;
    background: rgba(175, 177, 174, 0.85);
    border-radius: 6px;
    color: #1c1f22;
}

QPushButton {
    border: 1px solid rgba(236, 234, 230, 0.45);
    border-radius: 8px;
    padding: 6px 10px;
    background: rgba(70, 78, 86, 0.90);
}

QPushButton:hover {
    background: rgba(90, 100, 110, 0.95);
}

QPushButton#PrimaryActionButton {
    min-height: 34px;
    background: #2b7ec1;
    font-size: 13px;
    font-weight: 700;
}

QPushButton:disabled {
    color: rgba(236, 234, 230, 0.45);
    background: rgba(40, 44, 48, 0.70);
}

QSpinBox, QDoubleSpinBox, QComboBox, QListWidget {
    background: rgba(18, 20, 23, 0.85);
    border: 1px solid rgba(236, 234, 230, 0.30);
    border-radius: 6px;
    padding: 4px 6px;
    selection-background-color: rgba(43, 126, 193, 0.95);
}

QStatusBar {
    background: rgba(18, 20, 23, 0.92);
    border-top: 1px solid rgba(236, 234, 230, 0.20);
}
"""


class BuildThread(QThread):
    """Runs a rebuild in the background to keep UI responsive."""

    build_finished = pyqtSignal(object, str)

    def __init__(self, spec: EnclosureSpec, cone_parameters: ConeParameters,
                 engine: TrimeshBooleanEngine, parent=None):
        super().__init__(parent)
        self.spec = spec
        self.cone_parameters = cone_parameters
        self.engine = engine

    def run(self):
        state = None
        error_message = ""
        try:
            state = rebuild(self.spec, cone_parameters=self.cone_parameters, engine=self.engine)
        except EnclosureError as exc:
            error_message = str(exc)
        self.build_finished.emit(state, error_message)


class MainWindow(QMainWindow):
    """Enclosure viewer: dimension form, viewport and exports."""

    def __init__(self, parent=None):
        super().__init__(parent)

        self.setWindowTitle("Enclosure Generator")
        self.setGeometry(100, 100, 1280, 820)
        self.setObjectName("MainWindow")

        cone_parameters = ConeParameters(
            radius=config.CONE_RADIUS,
            height=config.CONE_HEIGHT,
            radial_segments=config.CONE_SEGMENTS,
            enabled=config.CONES_ENABLED,
        )
        self.session = SceneSession(cone_parameters, engine=TrimeshBooleanEngine(config.BOOLEAN_ENGINE))
        self._build_thread: Optional[BuildThread] = None

        # Loaded once; rebuilds only change the geometry
        self._floor_texture: AssetResult = load_texture(str(config.FLOOR_TEXTURE))
        self._cubemap: AssetResult = load_cubemap(
            cubemap_paths(str(config.CUBEMAP_DIR), extension="", names=config.CUBEMAP_FACES)
        )

        central = QWidget()
        central.setObjectName("CentralCanvas")
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)

        self.viewport = ViewportWidget()
        self.viewport.segment_picked.connect(self.handle_segment_picked)
        layout.addWidget(self.viewport)

        self._create_panels(cone_parameters)
        self._apply_visual_theme()

        self.setStatusBar(QStatusBar(self))
        self.statusBar().showMessage("Ready", 2000)

        self.handle_generate_request(
            self.generation_panel.current_spec(),
            self.generation_panel.current_cone_parameters(),
        )

    def _add_dock(self, title: str, name: str, widget: QWidget, area) -> QDockWidget:
        dock = QDockWidget(title, self)
        dock.setObjectName(name)
        dock.setFeatures(
            QDockWidget.DockWidgetClosable | QDockWidget.DockWidgetMovable | QDockWidget.DockWidgetFloatable
        )
        dock.setWidget(widget)
        dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.addDockWidget(area, dock)
        return dock

    def _create_panels(self, cone_parameters: ConeParameters):
        self.generation_panel = GenerationPanel(cone_parameters)
        self.generation_panel.generate_triggered.connect(self.handle_generate_request)
        generation_dock = self._add_dock("Enclosure", "GenerationDock",
                                         self.generation_panel, Qt.LeftDockWidgetArea)

        self.scene_export_panel = SceneExportPanel()
        self.scene_export_panel.export_glb_triggered.connect(self.handle_export_glb_request)
        self.scene_export_panel.export_json_triggered.connect(self.handle_export_json_request)
        self.scene_export_panel.export_snapshot_triggered.connect(self.handle_export_snapshot_request)
        scene_dock = self._add_dock("Scene / Export", "SceneDock",
                                    self.scene_export_panel, Qt.LeftDockWidgetArea)
        self.splitDockWidget(generation_dock, scene_dock, Qt.Vertical)

        self.outliner_panel = OutlinerPanel()
        self._add_dock("Outliner", "OutlinerDock", self.outliner_panel, Qt.RightDockWidgetArea)

    def _apply_visual_theme(self):
        self.setStyleSheet(CONCRETE_STYLESHEET)
        self.setDockNestingEnabled(True)
        self.setTabPosition(Qt.LeftDockWidgetArea, QTabWidget.North)
        self.setTabPosition(Qt.RightDockWidgetArea, QTabWidget.North)

    def handle_segment_picked(self, label: Optional[str]):
        if label is None:
            self.statusBar().showMessage("Selection cleared.", 1500)
            return
        self.statusBar().showMessage(f"{label} selected.", 1500)

    def handle_generate_request(self, spec: EnclosureSpec, cone_parameters: ConeParameters):
        if self._build_thread and self._build_thread.isRunning():
            self.statusBar().showMessage("Build already running.", 2000)
            return

        # Invalid input leaves the current scene on screen
        try:
            validate_spec(spec)
            check_door_fits(spec)
            cone_parameters.validate()
        except EnclosureError as exc:
            QMessageBox.warning(self, "Invalid Enclosure", str(exc))
            self.statusBar().showMessage(f"Build rejected: {exc}", 5000)
            return

        self.session.cone_parameters = cone_parameters
        self._set_generation_controls_enabled(False)

        self._build_thread = BuildThread(spec, cone_parameters, self.session.engine)
        self._build_thread.build_finished.connect(self.handle_build_finished)
        self._build_thread.finished.connect(self._on_build_thread_finished)
        self._build_thread.start()

        self.statusBar().showMessage(
            f"Building {spec.width}x{spec.length}x{spec.height} (thickness {spec.thickness})", 3000
        )

    def handle_build_finished(self, state: Optional[SceneState], error_message: str):
        if error_message or state is None:
            self.statusBar().showMessage(f"Build failed: {error_message}", 5000)
            return

        self.session.adopt(state)
        self.update_viewport()
        self.outliner_panel.update_list(state)

        message = f"Build complete: {len(state.segments)} segments, {len(state.cones)} cones."
        if state.warnings:
            message += f" {len(state.warnings)} warning(s)."
        if len(state.cones) > config.MAX_CONES_WARNING:
            message += f" Cone count exceeds {config.MAX_CONES_WARNING}."
        self.statusBar().showMessage(message, 4000)

    def _on_build_thread_finished(self):
        self._build_thread = None
        self._set_generation_controls_enabled(True)

    def _set_generation_controls_enabled(self, enabled: bool):
        self.generation_panel.generate_button.setEnabled(enabled)

    def update_viewport(self):
        state = self.session.state
        self.viewport.display_state(state, self._floor_texture)
        if state is None:
            return
        self.viewport.add_environment(self._cubemap)
        self.viewport.add_model(load_model(
            str(config.MODEL_PATH),
            state.model_anchor.position,
            scale=config.MODEL_SCALE,
            rotation=state.model_anchor.rotation_hints(),
        ))
        self.viewport.add_label(config.LABEL_TEXT, state.label_anchor)

    def _save_via_dialog(self, title: str, default_path: Path, file_filter: str,
                         writer: Callable[[str], str], kind: str):
        """Asks for a target path and runs writer on it, reporting through the status bar."""
        file_name, _ = QFileDialog.getSaveFileName(self, title, str(default_path), file_filter)
        if not file_name:
            self.statusBar().showMessage(f"{kind} export cancelled.", 1500)
            return

        try:
            written = writer(file_name) or file_name
        except Exception as exc:
            QMessageBox.critical(self, f"{kind} Export Error", str(exc))
            self.statusBar().showMessage(f"{kind} export failed: {exc}", 5000)
            return

        self.statusBar().showMessage(f"{kind} written to {written}", 3000)

    def handle_export_glb_request(self):
        meshes = self.session.get_all_meshes()
        if not meshes:
            self.statusBar().showMessage("Nothing to export; build an enclosure first.", 4000)
            return
        self._save_via_dialog(
            "Export GLB", config.EXPORT_DIR / "enclosure.glb", "GLB Files (*.glb);;All Files (*)",
            lambda path: export_meshes_to_glb(meshes, path), "GLB",
        )

    def handle_export_json_request(self):
        state = self.session.state
        if state is None:
            self.statusBar().showMessage("Nothing to save; build an enclosure first.", 3000)
            return
        self._save_via_dialog(
            "Export JSON", config.SAVE_DIR / "enclosure.json", "JSON Files (*.json);;All Files (*)",
            lambda path: save_scene_to_json(state, path), "JSON",
        )

    def handle_export_snapshot_request(self):
        snapshots_dir = config.EXPORT_DIR / "snapshots"
        snapshots_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        def write_snapshot(path: str) -> str:
            self.viewport.save_snapshot(path)
            return path

        self._save_via_dialog(
            "Export Snapshot", snapshots_dir / f"enclosure_{stamp}.png", "PNG Files (*.png);;All Files (*)",
            write_snapshot, "Snapshot",
        )

    def closeEvent(self, event):
        if self._build_thread and self._build_thread.isRunning():
            self._build_thread.quit()
            if not self._build_thread.wait(3000):
                self._build_thread.terminate()
                self._build_thread.wait()

        self.session.clear()
        self.viewport.clear_viewport()
        self.viewport.close()
        super().closeEvent(event)
