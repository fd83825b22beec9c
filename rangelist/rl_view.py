import itertools
from typing import Dict, List

from PyQt5.QtCore import QEvent, QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QBrush, QColor, QPen, QTransform
from PyQt5.QtWidgets import (
    QGraphicsItem,
    QGraphicsObject,
    QGraphicsSimpleTextItem,
    QMenu,
)

from core.base_view import BaseStructureView
from rangelist.rl_events import ChangeAction, ChangeEvent

ADD_COLOR = QColor("#ffd54f")
REMOVE_COLOR = QColor("#ff7043")
REPLACE_COLOR = QColor("#4dd0e1")


class RangeListView(BaseStructureView):
    """
    Draws a RangeObservableList and keeps it in sync purely from the change
    events the list emits; the view never reads the list back.
    """

    removeRequested = pyqtSignal(int)
    editRequested = pyqtSignal(int)
    clearAllRequested = pyqtSignal()

    def __init__(self, global_ctrl):
        super().__init__(global_ctrl)
        self.scene.installEventFilter(self)

        self._id_iter = itertools.count()
        self.cells: Dict[int, "RangeCellItem"] = {}
        self.order: List[int] = []
        self.index_labels: Dict[int, QGraphicsSimpleTextItem] = {}
        self.slot_items: Dict[int, "RangeSlotItem"] = {}

        self.base_origin = QPointF(-360, -RangeCellItem.height / 2)
        self.initial_capacity = 4
        self.capacity = self.initial_capacity

        self._rebuild_slots()

    # ---------- Public API ----------

    def values(self) -> list:
        return [self.cells[node_id].value for node_id in self.order]

    def index_of(self, node_id) -> int:
        return self.order.index(node_id) if node_id in self.order else -1

    def apply_event(self, event: ChangeEvent):
        if event.action is ChangeAction.ADD:
            self._apply_add(event.new_start_index, event.new_items)
        elif event.action is ChangeAction.REMOVE:
            self._apply_remove(event.old_start_index, len(event.old_items))
        elif event.action is ChangeAction.REPLACE:
            self._apply_replace(event.new_start_index, event.new_items[0])
        else:
            self.reset()

    def rebuild(self, values):
        """Drop every cell and lay ``values`` out without animation."""
        self.reset()
        self._ensure_capacity(len(values))
        for value in values:
            cell = self._create_cell_item(value)
            self.order.append(cell.node_id)
        self._finalize_layout()

    def reset(self):
        # cells still fading out are not in self.cells and finish on their own
        for cell in self.cells.values():
            if cell.scene():
                self.scene.removeItem(cell)
        self.cells.clear()
        self.order.clear()
        for label in self.index_labels.values():
            if label.scene():
                self.scene.removeItem(label)
        self.index_labels.clear()

        self.capacity = self.initial_capacity
        self._rebuild_slots()
        self.auto_fit_view()

    def animate_purge(self, values):
        """
        Fade out every cell ahead of a RESET.

        Intended as the ``before_purge`` callback of ``remove_range``: the
        cells are detached here, so the RESET that follows finds nothing left
        to wipe and the exit animation gets to finish.
        """
        retiring = [self.cells.pop(node_id) for node_id in self.order]
        self.order.clear()
        if not retiring:
            return
        self._retire(retiring, lift=False)

    # ---------- Event handlers ----------

    def _apply_add(self, index, items):
        self._ensure_capacity(len(self.order) + len(items))

        followers = [self.cells[node_id] for node_id in self.order[index:]]
        new_cells = []
        for offset, value in enumerate(items):
            cell = self._create_cell_item(value)
            cell.setOpacity(0.0)
            cell.setPos(self._spawn_position(index + offset))
            new_cells.append(cell)
        self.order[index:index] = [cell.node_id for cell in new_cells]

        shift = self.anim.parallel(
            *[
                self.anim.move_item(cell, self._slot_position(self.index_of(cell.node_id)))
                for cell in followers
            ]
        )
        drops = self.anim.parallel(
            *[
                self.anim.parallel(
                    self.anim.move_item(cell, self._slot_position(index + offset)),
                    self.anim.fade_item(cell, 0.0, 1.0),
                )
                for offset, cell in enumerate(new_cells)
            ]
        )
        sequence = self.anim.sequential(
            shift if followers else None,
            drops,
            self.anim.flash_cells(new_cells, ADD_COLOR),
            self.anim.pause(),
        )
        self._track_animation(sequence, finalizer=self._finalize_layout)

    def _apply_remove(self, index, count):
        removed_ids = self.order[index:index + count]
        del self.order[index:index + count]
        removed = [self.cells.pop(node_id) for node_id in removed_ids]
        self._retire(removed, lift=True)

    def _apply_replace(self, index, value):
        cell = self.cells[self.order[index]]
        cell.set_value(value)
        self._track_animation(
            self.anim.flash_cells([cell], REPLACE_COLOR),
            finalizer=self._finalize_layout,
        )

    def _retire(self, cells, lift):
        exits = []
        for cell in cells:
            fade = self.anim.fade_item(cell, cell.opacity(), 0.0, duration=360)
            if lift:
                target = QPointF(cell.pos().x(), cell.pos().y() - (RangeCellItem.height + 110))
                exits.append(
                    self.anim.parallel(self.anim.move_item(cell, target, duration=360), fade)
                )
            else:
                exits.append(fade)

        shift = self.anim.parallel(
            *[
                self.anim.move_item(self.cells[node_id], self._slot_position(idx))
                for idx, node_id in enumerate(self.order)
            ]
        )
        sequence = self.anim.sequential(
            self.anim.flash_cells(cells, REMOVE_COLOR),
            self.anim.parallel(*exits),
            shift if self.order else None,
        )

        def _drop():
            for cell in cells:
                if cell.scene():
                    self.scene.removeItem(cell)
            self._finalize_layout()

        self._track_animation(sequence, finalizer=_drop)

    # ---------- Internal helpers ----------

    def _create_cell_item(self, value):
        cell = RangeCellItem(next(self._id_iter), value)
        cell.contextRemove.connect(self._handle_cell_remove)
        cell.contextEdit.connect(self._handle_cell_edit)
        self.scene.addItem(cell)
        self.cells[cell.node_id] = cell
        return cell

    def _handle_cell_remove(self, node_id):
        idx = self.index_of(node_id)
        if idx != -1:
            self.removeRequested.emit(idx)

    def _handle_cell_edit(self, node_id):
        idx = self.index_of(node_id)
        if idx != -1:
            self.editRequested.emit(idx)

    def _slot_position(self, index: int) -> QPointF:
        x = self.base_origin.x() + index * RangeCellItem.width
        return QPointF(x, self.base_origin.y())

    def _spawn_position(self, index: int) -> QPointF:
        target = self._slot_position(index)
        return QPointF(target.x(), target.y() - (RangeCellItem.height + 110))

    def _finalize_layout(self):
        for idx, node_id in enumerate(self.order):
            cell = self.cells[node_id]
            cell.setOpacity(1.0)
            cell.setPos(self._slot_position(idx))
            cell.resetFillColor()
        self._update_index_labels()
        self.auto_fit_view()

    def _update_index_labels(self):
        count = len(self.order)
        for idx in list(self.index_labels.keys()):
            if idx >= count:
                label = self.index_labels.pop(idx)
                if label.scene():
                    self.scene.removeItem(label)

        for idx in range(count):
            label = self.index_labels.get(idx)
            if label is None:
                label = QGraphicsSimpleTextItem(str(idx))
                label.setBrush(QColor("#90a4ae"))
                font = label.font()
                font.setPointSize(12)
                label.setFont(font)
                label.setZValue(1)
                self.scene.addItem(label)
                self.index_labels[idx] = label
            slot = self._slot_position(idx)
            rect = label.boundingRect()
            label.setPos(
                slot.x() + RangeCellItem.width / 2 - rect.width() / 2,
                slot.y() + RangeCellItem.height + 8,
            )

    def _ensure_capacity(self, required: int):
        if required <= self.capacity:
            return
        while self.capacity < required:
            self.capacity *= 2
        self._rebuild_slots()

    def _rebuild_slots(self):
        for idx in range(self.capacity):
            slot = self.slot_items.get(idx)
            if slot is None:
                slot = RangeSlotItem()
                slot.setZValue(-1)
                self.slot_items[idx] = slot
                self.scene.addItem(slot)
            slot.setPos(self._slot_position(idx))

        for idx in list(self.slot_items.keys()):
            if idx >= self.capacity:
                slot = self.slot_items.pop(idx)
                if slot.scene():
                    self.scene.removeItem(slot)

    def _show_background_menu(self, screen_pos):
        if isinstance(screen_pos, QPointF):
            screen_pos = screen_pos.toPoint()
        menu = QMenu()
        clear_action = menu.addAction("Clear List")
        chosen = menu.exec_(screen_pos)
        if chosen == clear_action:
            self.clearAllRequested.emit()

    def eventFilter(self, watched, event):
        if watched is self.scene and event.type() == QEvent.GraphicsSceneContextMenu:
            item = self.scene.itemAt(event.scenePos(), QTransform())
            if item is None or isinstance(item, RangeSlotItem):
                self._show_background_menu(event.screenPos())
                event.accept()
                return True
        return super().eventFilter(watched, event)


class RangeCellItem(QGraphicsObject):
    contextRemove = pyqtSignal(int)
    contextEdit = pyqtSignal(int)

    width = 96
    height = 64
    baseFillColor = QColor("#b8b8d6")

    def __init__(self, node_id, value):
        super().__init__()
        self.node_id = node_id
        self.value = value
        self.fillColor = QColor(self.baseFillColor)
        self.strokeColor = QColor("#4a4a52")
        self.textColor = QColor("#1f1f24")
        self.setZValue(2)
        self.setAcceptedMouseButtons(Qt.LeftButton | Qt.RightButton)
        self.setCacheMode(QGraphicsItem.DeviceCoordinateCache)

    def boundingRect(self):
        return QRectF(0, 0, self.width, self.height)

    def paint(self, painter, option, widget=None):
        painter.setRenderHint(painter.Antialiasing)
        painter.setPen(QPen(self.strokeColor, 2))
        painter.setBrush(QBrush(self.fillColor))
        painter.drawRect(self.boundingRect())

        font = painter.font()
        font.setPointSize(14)
        painter.setFont(font)
        painter.setPen(self.textColor)
        painter.drawText(self.boundingRect(), Qt.AlignCenter, str(self.value))

    def set_value(self, value):
        self.value = value
        self.update()

    def setFillColor(self, color: QColor):
        self.fillColor = QColor(color)
        self.update()

    def resetFillColor(self):
        self.setFillColor(self.baseFillColor)

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.contextEdit.emit(self.node_id)
        super().mouseDoubleClickEvent(event)

    def contextMenuEvent(self, event):
        menu = QMenu()
        edit_action = menu.addAction("Replace Value")
        remove_action = menu.addAction("Remove")
        chosen = menu.exec_(event.screenPos())
        if chosen == edit_action:
            self.contextEdit.emit(self.node_id)
        elif chosen == remove_action:
            self.contextRemove.emit(self.node_id)


class RangeSlotItem(QGraphicsObject):
    width = RangeCellItem.width
    height = RangeCellItem.height

    def __init__(self):
        super().__init__()
        self.fillColor = QColor("#f6f6fd")
        self.strokeColor = QColor("#74828a")

    def boundingRect(self):
        return QRectF(0, 0, self.width, self.height)

    def paint(self, painter, option, widget=None):
        painter.setRenderHint(painter.Antialiasing)
        painter.setPen(QPen(self.strokeColor, 1.6))
        painter.setBrush(QBrush(self.fillColor))
        painter.drawRect(self.boundingRect())
