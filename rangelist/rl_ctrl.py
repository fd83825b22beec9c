import logging
import re

from PyQt5.QtCore import pyqtSignal
from PyQt5.QtWidgets import (
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QInputDialog,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from core.global_ctrl import GlobalController
from core.notifier import QtNotifier
from rangelist.rl_events import LENGTH_PROPERTY, ChangeEvent
from rangelist.rl_model import RangeObservableList
from rangelist.rl_view import RangeListView

logger = logging.getLogger(__name__)


class RangeListController(QWidget):
    """
    Operation panel for a RangeObservableList.

    Buttons only ever call the list; the view and the event log are driven by
    the notifications the list emits.
    """

    eventLogged = pyqtSignal(str)

    def __init__(self, global_ctrl: GlobalController, values=None):
        super().__init__()
        self.notifier = QtNotifier()
        self.model = RangeObservableList(values, notifier=self.notifier)
        self.view = RangeListView(global_ctrl)
        self._panel_locked = False

        self._build_inputs()
        self.panel = self._create_panel()

        self.notifier.collectionChanged.connect(self._on_collection_changed)
        self.notifier.propertyChanged.connect(self._on_property_changed)
        self.view.interactionLocked.connect(self._on_lock_state)
        self.view.removeRequested.connect(self._handle_remove_from_view)
        self.view.editRequested.connect(self._handle_edit_from_view)
        self.view.clearAllRequested.connect(self.model.clear)

        self.view.rebuild(self.model.snapshot())
        self._refresh_spins()

    # ---------- Panel UI ----------

    def _build_inputs(self):
        self.insert_index_spin = QSpinBox()
        self.insert_value_edit = QLineEdit()
        self.insert_value_edit.setPlaceholderText("Value")

        self.replace_index_spin = QSpinBox()
        self.replace_value_edit = QLineEdit()
        self.replace_value_edit.setPlaceholderText("New value")

        self.remove_index_spin = QSpinBox()
        self.remove_value_edit = QLineEdit()
        self.remove_value_edit.setPlaceholderText("Value")

        self.add_range_edit = QLineEdit()
        self.add_range_edit.setPlaceholderText("e.g. 1, 2, 3")
        self.remove_range_edit = QLineEdit()
        self.remove_range_edit.setPlaceholderText("e.g. 2, 3")

    def _create_panel(self):
        container = QWidget()
        layout = QGridLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setHorizontalSpacing(12)
        layout.setVerticalSpacing(12)
        layout.setColumnStretch(0, 1)
        layout.setColumnStretch(1, 1)
        layout.setColumnStretch(2, 1)

        create_btn = QPushButton("Create From List")
        create_btn.clicked.connect(self._on_create)
        layout.addWidget(self._single_button_group("Create", create_btn), 0, 0)

        append_btn = QPushButton("Append")
        append_btn.clicked.connect(self._on_append)
        layout.addWidget(self._single_button_group("Append", append_btn), 1, 0)

        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.model.clear)
        layout.addWidget(self._single_button_group("Clear", clear_btn), 2, 0)

        insert_btn = QPushButton("Insert")
        insert_btn.clicked.connect(self._on_insert)
        layout.addWidget(
            self._form_group(
                "Insert",
                insert_btn,
                ("Index:", self.insert_index_spin),
                ("Value:", self.insert_value_edit),
            ),
            0,
            1,
        )

        replace_btn = QPushButton("Replace")
        replace_btn.clicked.connect(self._on_replace)
        layout.addWidget(
            self._form_group(
                "Replace",
                replace_btn,
                ("Index:", self.replace_index_spin),
                ("Value:", self.replace_value_edit),
            ),
            1,
            1,
        )

        remove_at_btn = QPushButton("Remove At")
        remove_at_btn.clicked.connect(self._on_remove_at)
        remove_value_btn = QPushButton("Remove Value")
        remove_value_btn.clicked.connect(self._on_remove_value)
        remove_group = self._form_group(
            "Remove",
            remove_at_btn,
            ("Index:", self.remove_index_spin),
        )
        remove_group.layout().addRow("Value:", self.remove_value_edit)
        remove_group.layout().addRow(remove_value_btn)
        layout.addWidget(remove_group, 2, 1)

        add_range_btn = QPushButton("Add Range")
        add_range_btn.clicked.connect(self._on_add_range)
        layout.addWidget(
            self._form_group(
                "Add Range", add_range_btn, ("Values:", self.add_range_edit)
            ),
            0,
            2,
        )

        remove_range_btn = QPushButton("Remove Range")
        remove_range_btn.clicked.connect(self._on_remove_range)
        layout.addWidget(
            self._form_group(
                "Remove Range", remove_range_btn, ("Values:", self.remove_range_edit)
            ),
            1,
            2,
        )

        layout.setRowStretch(3, 1)

        self.create_btn = create_btn
        self.append_btn = append_btn
        self.clear_btn = clear_btn
        self.insert_btn = insert_btn
        self.replace_btn = replace_btn
        self.remove_at_btn = remove_at_btn
        self.remove_value_btn = remove_value_btn
        self.add_range_btn = add_range_btn
        self.remove_range_btn = remove_range_btn

        return container

    @staticmethod
    def _single_button_group(title, button):
        group = QGroupBox(title)
        group.setStyleSheet("QGroupBox { color: white; }")
        vlayout = QVBoxLayout(group)
        vlayout.setContentsMargins(12, 10, 12, 12)
        vlayout.setSpacing(6)
        vlayout.addWidget(button)
        return group

    @staticmethod
    def _form_group(title, button, *rows):
        group = QGroupBox(title)
        group.setStyleSheet("QGroupBox { color: white; }")
        form = QFormLayout()
        form.setContentsMargins(12, 8, 12, 12)
        form.setSpacing(6)
        for label, widget in rows:
            form.addRow(label, widget)
        form.addRow(button)
        group.setLayout(form)
        return group

    def build_panel(self):
        return self.panel

    # ---------- Controller lifecycle ----------

    def on_activate(self, graphics_view):
        self.view.bind_canvas(graphics_view)
        self.view.auto_fit_view()

    def on_deactivate(self):
        self.view.bind_canvas(None)

    # ---------- Model notifications ----------

    def _on_collection_changed(self, event: ChangeEvent):
        self.view.apply_event(event)
        self.eventLogged.emit(event.describe())

    def _on_property_changed(self, name):
        if name == LENGTH_PROPERTY:
            self._refresh_spins()

    # ---------- UI handlers ----------

    def _on_create(self):
        text, ok = QInputDialog.getText(
            self,
            "Create List",
            "Enter values (comma-separated):",
        )
        if not ok:
            return
        self.model.clear()
        self.model.add_range(self._parse_sequence(text))

    def _on_append(self):
        text, ok = QInputDialog.getText(
            self,
            "Append Value",
            "New element:",
        )
        if not ok:
            return
        self.model.append(self._coerce_value(text.strip() or "∅"))

    def _on_insert(self):
        value = self._coerce_value(self.insert_value_edit.text().strip() or "∅")
        self._guarded(self.model.insert, self.insert_index_spin.value(), value)

    def _on_replace(self):
        if self.model.length == 0:
            return
        value = self._coerce_value(self.replace_value_edit.text().strip() or "∅")
        self._guarded(self.model.replace_at, self.replace_index_spin.value(), value)

    def _on_remove_at(self):
        if self.model.length == 0:
            return
        self._guarded(self.model.remove_at, self.remove_index_spin.value())

    def _on_remove_value(self):
        text = self.remove_value_edit.text().strip()
        if not text:
            return
        value = self._coerce_value(text)
        if not self.model.remove(value):
            self.eventLogged.emit(f"Not found: {value!r}")

    def _on_add_range(self):
        values = self._parse_sequence(self.add_range_edit.text())
        if not values:
            return
        self.model.add_range(values)

    def _on_remove_range(self):
        values = self._parse_sequence(self.remove_range_edit.text())
        if not values:
            return
        self.model.remove_range(values, before_purge=self.view.animate_purge)

    def _handle_remove_from_view(self, index):
        if 0 <= index < self.model.length:
            self.model.remove_at(index)

    def _handle_edit_from_view(self, index):
        if index < 0 or index >= self.model.length:
            return
        current_value = str(self.model[index])
        text, ok = QInputDialog.getText(
            self,
            "Replace Value",
            f"Index {index} value:",
            text=current_value,
        )
        if not ok:
            return
        self.model.replace_at(index, self._coerce_value(text.strip() or current_value))

    def _guarded(self, operation, *args):
        try:
            operation(*args)
        except IndexError as exc:
            logger.warning("%s%r rejected: %s", operation.__name__, args, exc)
            self.eventLogged.emit(f"Rejected {operation.__name__}{args}: {exc}")

    # ---------- State helpers ----------

    def _refresh_spins(self):
        length = self.model.length
        self.insert_index_spin.setRange(0, length)

        max_index = max(0, length - 1)
        for spin in (self.replace_index_spin, self.remove_index_spin):
            spin.setRange(0, max_index)

        self._update_panel_enabled_state()

    def _on_lock_state(self, locked):
        self._panel_locked = locked
        self._update_panel_enabled_state()

    def _update_panel_enabled_state(self):
        has_items = self.model.length > 0
        locked = self._panel_locked

        for widget in (
            self.create_btn,
            self.append_btn,
            self.insert_btn,
            self.insert_index_spin,
            self.insert_value_edit,
            self.add_range_btn,
            self.add_range_edit,
        ):
            widget.setDisabled(locked)

        for widget in (
            self.clear_btn,
            self.replace_btn,
            self.replace_index_spin,
            self.replace_value_edit,
            self.remove_at_btn,
            self.remove_index_spin,
            self.remove_value_btn,
            self.remove_value_edit,
            self.remove_range_btn,
            self.remove_range_edit,
        ):
            widget.setDisabled(locked or not has_items)

    # ---------- Helpers ----------

    @staticmethod
    def _parse_sequence(text: str):
        if not text:
            return []

        normalized = text.replace("，", ",")
        tokens = [
            part.strip()
            for part in re.split(r"[,\s]+", normalized)
            if part.strip()
        ]
        return [RangeListController._coerce_value(part) for part in tokens]

    @staticmethod
    def _coerce_value(value):
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                return value
