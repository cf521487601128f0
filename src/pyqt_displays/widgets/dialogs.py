"""Qt implementations of the prompts used by display commands."""

from typing import Optional
import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QFileDialog, QFormLayout, QInputDialog, QLabel,
    QLineEdit, QListWidget, QListWidgetItem, QMessageBox, QVBoxLayout, QWidget,
)

from pyqt_displays.model.display_factory import DisplayFactory
from pyqt_displays.protocols.dialog_provider import DialogProviderABC, NewDisplayRequest
from pyqt_displays.protocols.panel_config import get_panel_config

logger = logging.getLogger(__name__)

CLASS_ID_ROLE = Qt.ItemDataRole.UserRole


class AddDisplayDialog(QDialog):
    """
    Choose a display class, a name and optionally a topic.

    The name follows the selected class's short name until the user edits it.
    """

    def __init__(self, factory: DisplayFactory, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle("Add Display")
        self._factory = factory
        self._name_edited = False

        self.class_list = QListWidget()
        for class_id in factory.class_ids():
            item = QListWidgetItem(class_id)
            item.setData(CLASS_ID_ROLE, class_id)
            item.setToolTip(factory.description(class_id))
            self.class_list.addItem(item)

        self.description_label = QLabel()
        self.description_label.setWordWrap(True)

        self.name_edit = QLineEdit()
        self.topic_edit = QLineEdit()
        self.topic_edit.setPlaceholderText("optional")
        self.datatype_edit = QLineEdit()
        self.datatype_edit.setPlaceholderText("optional")

        form = QFormLayout()
        form.addRow("Display Name", self.name_edit)
        form.addRow("Topic", self.topic_edit)
        form.addRow("Datatype", self.datatype_edit)

        self.button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Create visualization by display type:"))
        layout.addWidget(self.class_list)
        layout.addWidget(self.description_label)
        layout.addLayout(form)
        layout.addWidget(self.button_box)

        self.class_list.currentItemChanged.connect(self._on_class_changed)
        self.class_list.itemDoubleClicked.connect(lambda _item: self.accept())
        self.name_edit.textEdited.connect(self._on_name_edited)
        self._update_ok_button()

    def selected_class_id(self) -> Optional[str]:
        item = self.class_list.currentItem()
        return item.data(CLASS_ID_ROLE) if item is not None else None

    def request(self) -> Optional[NewDisplayRequest]:
        class_id = self.selected_class_id()
        if class_id is None:
            return None
        return NewDisplayRequest(
            class_id=class_id,
            name=self.name_edit.text().strip(),
            topic=self.topic_edit.text().strip(),
            datatype=self.datatype_edit.text().strip(),
        )

    def _on_class_changed(self, current: Optional[QListWidgetItem], _previous) -> None:
        class_id = current.data(CLASS_ID_ROLE) if current is not None else None
        info = self._factory.class_info(class_id) if class_id else None
        self.description_label.setText(info.description if info else "")
        if info is not None and not self._name_edited:
            self.name_edit.setText(info.short_name)
        self._update_ok_button()

    def _on_name_edited(self, _text: str) -> None:
        self._name_edited = True

    def _update_ok_button(self) -> None:
        ok_button = self.button_box.button(QDialogButtonBox.StandardButton.Ok)
        ok_button.setEnabled(self.selected_class_id() is not None)


class QtDialogProvider(DialogProviderABC):
    """Modal Qt dialogs parented to ``parent``."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent

    def ask_new_display(self, factory: DisplayFactory) -> Optional[NewDisplayRequest]:
        dialog = AddDisplayDialog(factory, self.parent)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return None
        return dialog.request()

    def ask_text(self, title: str, label: str, text: str = "") -> Optional[str]:
        value, ok = QInputDialog.getText(self.parent, title, label, QLineEdit.EchoMode.Normal, text)
        return value if ok else None

    def ask_save_path(self, title: str, file_filter: str = "") -> Optional[str]:
        filename, _ = QFileDialog.getSaveFileName(self.parent, title, "", file_filter or get_panel_config().group_file_filter)
        return filename or None

    def ask_open_path(self, title: str, file_filter: str = "") -> Optional[str]:
        filename, _ = QFileDialog.getOpenFileName(self.parent, title, "", file_filter or get_panel_config().group_file_filter)
        return filename or None

    def show_error(self, title: str, message: str) -> None:
        logger.debug(f"Error dialog: {title}: {message}")
        QMessageBox.critical(self.parent, title, message)
