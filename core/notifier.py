from typing import Callable, List

from PyQt5.QtCore import QObject, pyqtSignal


class CallbackNotifier:
    """
    Delivers collection notifications to plain Python callables, in
    subscription order and on the calling thread.

    Change handlers receive ``(sender, event)``; property handlers receive
    ``(sender, name)``. Exceptions raised by a handler reach the caller of
    the mutating operation.
    """

    def __init__(self):
        self._change_handlers: List[Callable] = []
        self._property_handlers: List[Callable] = []

    def subscribe(self, handler: Callable):
        self._change_handlers.append(handler)

    def unsubscribe(self, handler: Callable):
        if handler in self._change_handlers:
            self._change_handlers.remove(handler)

    def subscribe_property(self, handler: Callable):
        self._property_handlers.append(handler)

    def unsubscribe_property(self, handler: Callable):
        if handler in self._property_handlers:
            self._property_handlers.remove(handler)

    def collection_changed(self, sender, event):
        # copy so a handler may unsubscribe itself while being notified
        for handler in list(self._change_handlers):
            handler(sender, event)

    def property_changed(self, sender, name: str):
        for handler in list(self._property_handlers):
            handler(sender, name)


class QtNotifier(QObject):
    """
    Re-emits collection notifications as Qt signals so views and panels can
    connect to a model the same way they connect to each other.
    """

    collectionChanged = pyqtSignal(object)
    propertyChanged = pyqtSignal(str)

    def collection_changed(self, sender, event):
        self.collectionChanged.emit(event)

    def property_changed(self, sender, name: str):
        self.propertyChanged.emit(name)
