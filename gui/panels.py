from __future__ import annotations

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QGridLayout,
    QGroupBox,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QSizePolicy,
    QSpacerItem,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from core.constants import (
    COMPACT_HEIGHT,
    COMPACT_LENGTH,
    COMPACT_THICKNESS,
    COMPACT_WIDTH,
    DEFAULT_HEIGHT,
    DEFAULT_LENGTH,
    DEFAULT_THICKNESS,
    DEFAULT_WIDTH,
)
from core.enclosure import EnclosureSpec
from core.scene import ConeParameters, SceneState

PRESETS = {
    "Default": (DEFAULT_WIDTH, DEFAULT_LENGTH, DEFAULT_HEIGHT, DEFAULT_THICKNESS),
    "Compact": (COMPACT_WIDTH, COMPACT_LENGTH, COMPACT_HEIGHT, COMPACT_THICKNESS),
}


def _dimension_spinbox(value: float, minimum: float = 0.05, maximum: float = 200.0,
                       step: float = 0.5, decimals: int = 2) -> QDoubleSpinBox:
    spinbox = QDoubleSpinBox()
    spinbox.setRange(minimum, maximum)
    spinbox.setSingleStep(step)
    spinbox.setDecimals(decimals)
    spinbox.setValue(value)
    return spinbox


class GenerationPanel(QWidget):
    """Enclosure dimension form and cone tiling controls."""

    generate_triggered = pyqtSignal(object, object)  # EnclosureSpec, ConeParameters

    def __init__(self, cone_parameters: ConeParameters = ConeParameters(), parent=None):
        super().__init__(parent)
        self.setObjectName("GenerationPanel")

        main_layout = QVBoxLayout(self)
        main_layout.setAlignment(Qt.AlignTop)
        main_layout.setSpacing(10)

        gen_group = QGroupBox("Enclosure")
        gen_group.setObjectName("GenerationGroup")
        dim_layout = QGridLayout(gen_group)

        self.preset_combo = QComboBox()
        self.preset_combo.addItems(list(PRESETS))
        self.preset_combo.currentTextChanged.connect(self._apply_preset)
        dim_layout.addWidget(QLabel("Preset:"), 0, 0)
        dim_layout.addWidget(self.preset_combo, 0, 1, 1, 3)

        self.width_spinbox = _dimension_spinbox(DEFAULT_WIDTH)
        self.length_spinbox = _dimension_spinbox(DEFAULT_LENGTH)
        self.height_spinbox = _dimension_spinbox(DEFAULT_HEIGHT)
        self.thickness_spinbox = _dimension_spinbox(DEFAULT_THICKNESS, step=0.05)

        dim_layout.addWidget(QLabel("Width:"), 1, 0)
        dim_layout.addWidget(self.width_spinbox, 1, 1)
        dim_layout.addWidget(QLabel("Length:"), 1, 2)
        dim_layout.addWidget(self.length_spinbox, 1, 3)
        dim_layout.addWidget(QLabel("Height:"), 2, 0)
        dim_layout.addWidget(self.height_spinbox, 2, 1)
        dim_layout.addWidget(QLabel("Thickness:"), 2, 2)
        dim_layout.addWidget(self.thickness_spinbox, 2, 3)
        main_layout.addWidget(gen_group)

        cone_group = QGroupBox("Cone Tiling")
        cone_group.setObjectName("ConeTilingGroup")
        cone_layout = QGridLayout(cone_group)

        self.cones_cb = QCheckBox("Tile cones")
        self.cones_cb.setChecked(cone_parameters.enabled)
        cone_layout.addWidget(self.cones_cb, 0, 0, 1, 4)

        self.cone_radius_spinbox = _dimension_spinbox(cone_parameters.radius, 0.01, 5.0, 0.025, 3)
        self.cone_height_spinbox = _dimension_spinbox(cone_parameters.height, 0.01, 5.0, 0.025, 3)
        self.cone_segments_spinbox = QSpinBox()
        self.cone_segments_spinbox.setRange(3, 64)
        self.cone_segments_spinbox.setValue(cone_parameters.radial_segments)

        cone_layout.addWidget(QLabel("Radius:"), 1, 0)
        cone_layout.addWidget(self.cone_radius_spinbox, 1, 1)
        cone_layout.addWidget(QLabel("Height:"), 1, 2)
        cone_layout.addWidget(self.cone_height_spinbox, 1, 3)
        cone_layout.addWidget(QLabel("Segments:"), 2, 0)
        cone_layout.addWidget(self.cone_segments_spinbox, 2, 1)
        main_layout.addWidget(cone_group)

        self.generate_button = QPushButton("Build")
        self.generate_button.setObjectName("PrimaryActionButton")
        self.generate_button.clicked.connect(self._on_generate_clicked)
        main_layout.addWidget(self.generate_button)

        main_layout.addItem(QSpacerItem(20, 40, QSizePolicy.Minimum, QSizePolicy.Expanding))

    def _apply_preset(self, name: str):
        width, length, height, thickness = PRESETS[name]
        self.width_spinbox.setValue(width)
        self.length_spinbox.setValue(length)
        self.height_spinbox.setValue(height)
        self.thickness_spinbox.setValue(thickness)

    def current_spec(self) -> EnclosureSpec:
        return EnclosureSpec(
            width=float(self.width_spinbox.value()),
            length=float(self.length_spinbox.value()),
            height=float(self.height_spinbox.value()),
            thickness=float(self.thickness_spinbox.value()),
        )

    def current_cone_parameters(self) -> ConeParameters:
        return ConeParameters(
            radius=float(self.cone_radius_spinbox.value()),
            height=float(self.cone_height_spinbox.value()),
            radial_segments=int(self.cone_segments_spinbox.value()),
            enabled=bool(self.cones_cb.isChecked()),
        )

    def _on_generate_clicked(self):
        self.generate_triggered.emit(self.current_spec(), self.current_cone_parameters())


class SceneExportPanel(QWidget):
    """Minimal scene actions: exports."""

    export_glb_triggered = pyqtSignal()
    export_json_triggered = pyqtSignal()
    export_snapshot_triggered = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("SceneExportPanel")

        main_layout = QVBoxLayout(self)
        main_layout.setAlignment(Qt.AlignTop)

        group = QGroupBox("Scene / Export")
        group.setObjectName("SceneExportGroup")
        layout = QVBoxLayout(group)

        self.export_glb_button = QPushButton("Export GLB")
        self.export_glb_button.clicked.connect(self.export_glb_triggered.emit)
        layout.addWidget(self.export_glb_button)

        self.export_json_button = QPushButton("Export JSON")
        self.export_json_button.clicked.connect(self.export_json_triggered.emit)
        layout.addWidget(self.export_json_button)

        self.export_snapshot_button = QPushButton("Export Snapshot (PNG)")
        self.export_snapshot_button.clicked.connect(self.export_snapshot_triggered.emit)
        layout.addWidget(self.export_snapshot_button)

        main_layout.addWidget(group)
        main_layout.addItem(QSpacerItem(20, 40, QSizePolicy.Minimum, QSizePolicy.Expanding))


class OutlinerPanel(QWidget):
    """Lists the segments and cone counts of the current state."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("OutlinerPanel")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.list_widget = QListWidget()
        layout.addWidget(self.list_widget)

    def update_list(self, state: SceneState | None):
        self.list_widget.clear()
        if state is None or not state.segments:
            self.list_widget.addItem("Scene is empty")
            self.list_widget.setEnabled(False)
            return

        self.list_widget.setEnabled(True)
        for segment in state.segments:
            x, y, z = segment.position
            cut = " (door)" if segment.has_cutout else ""
            cones = len(state.cones_on(segment.orientation))
            item = QListWidgetItem(
                f"{segment.orientation.value}{cut} [{x:.2f}, {y:.2f}, {z:.2f}] cones={cones}"
            )
            item.setData(Qt.UserRole, segment.orientation.value)
            self.list_widget.addItem(item)

        for warning in state.warnings:
            self.list_widget.addItem(QListWidgetItem(f"! {warning}"))
