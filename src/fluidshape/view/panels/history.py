from __future__ import annotations

import html

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGroupBox, QLabel, QListWidget, QListWidgetItem,
    QPushButton, QDialog, QLineEdit, QDialogButtonBox
)

from fluidshape.model.profile import Profile


class HistoryPanel(QWidget):
    """Saved profiles, newest first. Clicking an entry restores its parameters."""
    profile_selected = Signal(str)
    delete_requested = Signal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        box = QGroupBox(self.tr("Profile history"), self)
        layout = QVBoxLayout(box)
        self.list_widget = QListWidget(box)
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self.list_widget)
        root.addWidget(box)

    def set_profiles(self, profiles: list[Profile]) -> None:
        self.list_widget.clear()
        for profile in profiles:
            item = QListWidgetItem(self.list_widget)
            item.setData(Qt.ItemDataRole.UserRole, profile.id)
            row = self._make_row(profile)
            item.setSizeHint(row.sizeHint())
            self.list_widget.setItemWidget(item, row)

    def _make_row(self, profile: Profile) -> QWidget:
        row = QWidget(self.list_widget)
        h = QHBoxLayout(row)
        h.setContentsMargins(6, 4, 6, 4)

        texts = QVBoxLayout()
        texts.addWidget(QLabel(f"<b>{html.escape(profile.name)}</b>", row))
        texts.addWidget(QLabel(f"{profile.timestamp} • {profile.area} mm²", row))
        h.addLayout(texts, 1)

        button = QPushButton(self.tr("Delete"), row)
        button.clicked.connect(lambda *_, pid=profile.id: self.delete_requested.emit(pid))
        h.addWidget(button, 0)
        return row

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        self.profile_selected.emit(item.data(Qt.ItemDataRole.UserRole))


class SaveProfileDialog(QDialog):
    """Asks for the profile name before saving."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(self.tr("Save profile"))

        layout = QVBoxLayout(self)
        note = QLabel(self.tr("Profiles with the same name are overwritten in the shared history."), self)
        note.setWordWrap(True)
        layout.addWidget(note)

        self.edit_name = QLineEdit(self)
        self.edit_name.setPlaceholderText(self.tr("Profile name..."))
        layout.addWidget(self.edit_name)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel, self)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def name(self) -> str:
        return self.edit_name.text()
