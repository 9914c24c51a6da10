from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QGroupBox, QGridLayout, QLabel, QLineEdit, QSlider,
    QPushButton, QFormLayout, QSizePolicy
)

from fluidshape.config import DIMENSION_KEYS
from fluidshape.model.parameters import ParameterSet


class ParameterPanel(QWidget):
    """
    Left-side input panel.

    Top: longitudinal span (start/end in m) with the effective length.
    Middle: one slider per dimension A-E (mm), limited by the configured ranges.
    Bottom: fluid density and the save button.
    """
    params_changed = Signal()
    save_requested = Signal()

    def __init__(self, params: ParameterSet, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.params = params

        root = QVBoxLayout(self)

        # ---- span ----
        span_box = QGroupBox(self.tr("Span length (m)"), self)
        span = QGridLayout(span_box)
        self.edit_start = QLineEdit(span_box)
        self.edit_end = QLineEdit(span_box)
        span.addWidget(self.edit_start, 0, 0)
        span.addWidget(self.edit_end, 0, 1)
        span.addWidget(QLabel(self.tr("Effective total:"), span_box), 1, 0)
        self.label_effective = QLabel("", span_box)
        self.label_effective.setAlignment(Qt.AlignmentFlag.AlignRight)
        span.addWidget(self.label_effective, 1, 1)
        root.addWidget(span_box)

        # ---- dimensions ----
        dims_box = QGroupBox(self.tr("Dimensions"), self)
        self.grid = QGridLayout(dims_box)
        self._sliders: dict[str, QSlider] = {}
        self._value_labels: dict[str, QLabel] = {}
        for row, key in enumerate(DIMENSION_KEYS):
            self._add_slider(dims_box, row, key)
        root.addWidget(dims_box)

        # ---- density ----
        form = QFormLayout()
        self.edit_rho = QLineEdit(self)
        form.addRow(self.tr("Fluid density (kg/m³):"), self.edit_rho)
        root.addLayout(form)

        self.button_save = QPushButton(self.tr("Save profile"), self)
        self.button_save.clicked.connect(self.save_requested)
        root.addWidget(self.button_save)
        root.addStretch()

        self.edit_start.textEdited.connect(lambda text: self._on_text_edited("L_start", text))
        self.edit_end.textEdited.connect(lambda text: self._on_text_edited("L_end", text))
        self.edit_rho.textEdited.connect(lambda text: self._on_text_edited("rho", text))

        self.load_from_params()

    def _add_slider(self, parent: QWidget, row: int, key: str) -> None:
        field_range = self.params.ranges[key]

        self.grid.addWidget(QLabel(self.tr("Parameter {}").format(key), parent), 2 * row, 0)
        value_label = QLabel("", parent)
        value_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.grid.addWidget(value_label, 2 * row, 1)

        slider = QSlider(Qt.Orientation.Horizontal, parent)
        slider.setRange(int(field_range.min_value), int(field_range.max_value))
        slider.setSingleStep(max(1, int(field_range.step)))
        slider.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        slider.valueChanged.connect(lambda value, k=key: self._on_slider_moved(k, value))
        self.grid.addWidget(slider, 2 * row + 1, 0, 1, 2)

        self._sliders[key] = slider
        self._value_labels[key] = value_label

    def load_from_params(self) -> None:
        """Push the current parameter text into the widgets without feedback."""
        numeric = self.params.numeric_view()
        for key, slider in self._sliders.items():
            slider.blockSignals(True)
            slider.setValue(int(round(numeric[key])))
            slider.blockSignals(False)
            self._value_labels[key].setText(f"{self.params[key]} mm")

        for key, edit in (("L_start", self.edit_start), ("L_end", self.edit_end), ("rho", self.edit_rho)):
            edit.setText(self.params[key])

        self._update_effective_length()

    def _update_effective_length(self) -> None:
        self.label_effective.setText(f"{self.params.effective_length():.3f} m")

    def _on_slider_moved(self, key: str, value: int) -> None:
        text = self.params.set_value(key, value)
        self._value_labels[key].setText(f"{text} mm")
        self.params_changed.emit()

    def _on_text_edited(self, key: str, text: str) -> None:
        self.params.set_field(key, text)
        self._update_effective_length()
        self.params_changed.emit()
