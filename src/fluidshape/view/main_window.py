"""
Main Application Window
=======================
The primary GUI container: parameter and history panels on the left, metric
cards and the 2D preview on the right.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects user actions (edit, save, select, delete) to the
   parameter set and the profile history, and redraws after every change.
"""
import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QLabel, QGridLayout,
    QFrame, QMessageBox, QDialog
)

from fluidshape.application import VISIBLE_APP_NAME
from fluidshape.controller.session import SyncSession
from fluidshape.model.errors import FluidShapeError
from fluidshape.model.geometry import AnalysisResult, analyze
from fluidshape.model.history import ProfileHistoryCache
from fluidshape.model.parameters import ParameterSet
from fluidshape.view.panels.history import HistoryPanel, SaveProfileDialog
from fluidshape.view.panels.parameters import ParameterPanel
from fluidshape.view.preview import ProfilePreview

logger = logging.getLogger(__name__)

# (summary key, title, unit)
METRIC_CARDS = [
    ("area", "Section area", "mm²"),
    ("hydraulic_radius", "Hydraulic radius", "mm"),
    ("volume_cm3", "Fluid volume", "cm³"),
    ("mass", "Total mass", "kg"),
]


class MainWindow(QMainWindow):
    def __init__(
        self,
        session: SyncSession,
        history: ProfileHistoryCache,
        params: Optional[ParameterSet] = None
    ) -> None:
        super().__init__()
        self.session = session
        self.history = history
        self.params = params if params is not None else ParameterSet()
        self.result: AnalysisResult = analyze(self.params.numeric_view())

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 900)

        central = QWidget(self)
        v = QVBoxLayout(central)

        # ---- header ----
        header = QHBoxLayout()
        title = QLabel(f"<h2>{VISIBLE_APP_NAME}</h2>", central)
        self.label_connection = QLabel("", central)
        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.label_connection)
        v.addLayout(header)

        # ---- content ----
        splitter = QSplitter(Qt.Orientation.Horizontal, central)
        splitter.setChildrenCollapsible(False)
        v.addWidget(splitter, 1)

        side = QWidget(splitter)
        side_layout = QVBoxLayout(side)
        side_layout.setContentsMargins(0, 0, 0, 0)
        self.param_panel = ParameterPanel(self.params, side)
        self.history_panel = HistoryPanel(side)
        side_layout.addWidget(self.param_panel)
        side_layout.addWidget(self.history_panel, 1)

        work = QWidget(splitter)
        work_layout = QVBoxLayout(work)
        work_layout.setContentsMargins(0, 0, 0, 0)
        cards = QGridLayout()
        self._card_values: dict[str, QLabel] = {}
        for col, (key, caption, unit) in enumerate(METRIC_CARDS):
            cards.addWidget(self._make_card(work, key, caption, unit), 0, col)
        work_layout.addLayout(cards)
        self.preview = ProfilePreview(work)
        work_layout.addWidget(self.preview, 1)

        splitter.addWidget(side)
        splitter.addWidget(work)
        splitter.setSizes([400, 1000])

        self.setCentralWidget(central)

        # ---- SIGNAL CONNECTIONS ----
        self.param_panel.params_changed.connect(self.recompute)
        self.param_panel.save_requested.connect(self.on_save_requested)
        self.history_panel.profile_selected.connect(self.on_profile_selected)
        self.history_panel.delete_requested.connect(self.on_delete_requested)
        self.history.history_changed.connect(self.history_panel.set_profiles)
        self.history.connection_changed.connect(self._update_connection_label)
        self.history.error_occurred.connect(lambda msg: self.statusBar().showMessage(msg, 5000))

        self.history_panel.set_profiles(self.history.profiles)
        self._update_connection_label(self.history.is_connected)
        self.recompute()

    def _make_card(self, parent: QWidget, key: str, caption: str, unit: str) -> QFrame:
        card = QFrame(parent)
        card.setFrameShape(QFrame.Shape.StyledPanel)
        layout = QVBoxLayout(card)
        layout.addWidget(QLabel(self.tr(caption), card))
        value = QLabel("", card)
        value.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(value)
        layout.addWidget(QLabel(unit, card))
        self._card_values[key] = value
        return card

    def _update_connection_label(self, connected: bool) -> None:
        if connected:
            self.label_connection.setText(self.tr("Cloud sync active"))
        else:
            self.label_connection.setText(self.tr("Offline mode"))

    def recompute(self) -> None:
        """Re-run the analysis for the current parameters and refresh the display."""
        numeric = self.params.numeric_view()
        self.result = analyze(numeric)
        summary = self.result.summary()
        for key, label in self._card_values.items():
            label.setText(summary[key])
        self.preview.set_profile(numeric, self.result)

    def on_save_requested(self) -> None:
        dialog = SaveProfileDialog(self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        try:
            self.history.save(dialog.name(), self.params.snapshot(), self.result.area_snapshot())
        except FluidShapeError as e:
            QMessageBox.warning(self, VISIBLE_APP_NAME, str(e))

    def on_profile_selected(self, profile_id: str) -> None:
        try:
            snapshot = self.history.select(profile_id)
        except KeyError:
            logger.warning(f"Selected profile '{profile_id}' is no longer in the history.")
            return
        self.params.restore(snapshot)
        self.param_panel.load_from_params()
        self.recompute()

    def on_delete_requested(self, profile_id: str) -> None:
        try:
            self.history.delete(profile_id)
        except FluidShapeError as e:
            QMessageBox.warning(self, VISIBLE_APP_NAME, str(e))

    def closeEvent(self, event) -> None:
        self.session.sign_out()
        self.preview.plotter.close()
        super().closeEvent(event)
