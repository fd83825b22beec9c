import logging
from collections import Counter
from collections.abc import MutableSequence
from typing import Any, Callable, Iterable, List, Optional, Tuple

from core.notifier import CallbackNotifier
from rangelist.rl_events import ITEMS_PROPERTY, LENGTH_PROPERTY, ChangeEvent

logger = logging.getLogger(__name__)


class NullInputError(TypeError):
    """Raised when a batch removal is given ``None`` instead of a sequence."""


class BatchSession:
    """
    Scoped notification suppression for one batch operation.

    The owning list is silent while the session is open; leaving the
    ``with`` block always reopens it, exceptions included.
    """

    def __init__(self, owner: "RangeObservableList"):
        self._owner = owner

    def __enter__(self):
        if self._owner._session is not None:
            raise RuntimeError("batch already in progress")
        self._owner._session = self
        return self

    def __exit__(self, exc_type, exc, tb):
        self._owner._session = None
        return False


class RangeObservableList(MutableSequence):
    """
    Ordered list that reports every mutation through its notifier and can
    add or remove many items as a single operation.
    """

    def __init__(self, items: Optional[Iterable[Any]] = None, notifier=None):
        self._items: List[Any] = list(items) if items is not None else []
        self._notifier = notifier if notifier is not None else CallbackNotifier()
        self._session: Optional[BatchSession] = None

    @property
    def notifier(self):
        return self._notifier

    @property
    def length(self) -> int:
        return len(self._items)

    @property
    def suppressed(self) -> bool:
        return self._session is not None

    def snapshot(self) -> List[Any]:
        return list(self._items)

    # ---------- Sequence protocol ----------

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, item):
        return item in self._items

    def __getitem__(self, index):
        return self._items[index]

    def __setitem__(self, index, item):
        self.replace_at(self._normalize(index), item)

    def __delitem__(self, index):
        self.remove_at(self._normalize(index))

    def __eq__(self, other):
        if isinstance(other, RangeObservableList):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"RangeObservableList({self._items!r})"

    def _normalize(self, index) -> int:
        if isinstance(index, slice):
            raise TypeError("slice assignment is not supported")
        if index < 0:
            index += len(self._items)
        return index

    # ---------- Single-item operations ----------

    def append(self, item):
        self.insert(len(self._items), item)

    def insert(self, index: int, item):
        if index < 0 or index > self.length:
            raise IndexError("Index out of range")
        self._items.insert(index, item)
        self._notify_structure(ChangeEvent.add([item], index))

    def remove(self, item) -> bool:
        try:
            index = self._items.index(item)
        except ValueError:
            return False
        self.remove_at(index)
        return True

    def remove_at(self, index: int):
        if index < 0 or index >= self.length:
            raise IndexError("Index out of range")
        removed = self._items.pop(index)
        self._notify_structure(ChangeEvent.remove([removed], index))

    def replace_at(self, index: int, item):
        if index < 0 or index >= self.length:
            raise IndexError("Index out of range")
        old = self._items[index]
        self._items[index] = item
        self._notify_property(ITEMS_PROPERTY)
        self._notify_change(ChangeEvent.replace(old, item, index))

    def clear(self):
        self._items.clear()
        self._notify_structure(ChangeEvent.reset())

    # ---------- Batch operations ----------

    def add_range(self, items: Optional[Iterable[Any]]):
        """
        Append ``items`` in order and report them with a single ADD event.

        ``None`` and empty input are ignored.
        """
        if items is None:
            return
        items = list(items)
        if not items:
            return

        start_index = self.length
        with BatchSession(self):
            for item in items:
                self.append(item)

        logger.debug("add_range: %d items at index %d", len(items), start_index)
        self._notify_structure(ChangeEvent.add(items, start_index))

    def remove_range(
        self,
        items: Iterable[Any],
        before_purge: Optional[Callable[[List[Any]], None]] = None,
    ):
        """
        Remove ``items`` by value and report the removal with as few REMOVE
        events as possible.

        Items that were adjacent in the list are grouped into one event. The
        events are emitted in the order their first item was found, each
        carrying the index the group started at once earlier groups were
        gone. Values that are not present are skipped.

        If the removal empties the list a single RESET is emitted instead.
        A RESET carries no items, so ``before_purge`` is called with the
        request before anything is removed when that is about to happen.

        Raises:
            NullInputError: ``items`` is None.
        """
        if items is None:
            raise NullInputError("items must not be None")
        if not self._items:
            return

        items = list(items)
        if not items:
            return
        if len(items) == 1:
            self.remove(items[0])
            return

        if before_purge is not None and len(items) >= self.length:
            if self._would_empty(items):
                logger.debug("remove_range: purging all %d items", self.length)
                before_purge(items)

        clusters: List[Tuple[int, List[Any]]] = []
        last_index = -1
        with BatchSession(self):
            for item in items:
                try:
                    index = self._items.index(item)
                except ValueError:
                    continue
                self.remove_at(index)

                if index == last_index:
                    clusters[-1][1].append(item)
                else:
                    last_index = index
                    clusters.append((index, [item]))

        self._notify_property(LENGTH_PROPERTY)
        self._notify_property(ITEMS_PROPERTY)

        if not self._items:
            self._notify_change(ChangeEvent.reset())
            return

        logger.debug(
            "remove_range: %d requested, %d clusters", len(items), len(clusters)
        )
        for anchor, removed in clusters:
            self._notify_change(ChangeEvent.remove(removed, anchor))

    def _would_empty(self, items: List[Any]) -> bool:
        try:
            remaining = Counter(self._items)
            remaining.subtract(items)
        except TypeError:
            # unhashable values: replay the removals on a copy
            leftover = list(self._items)
            for item in items:
                if item in leftover:
                    leftover.remove(item)
            return not leftover
        return all(count <= 0 for count in remaining.values())

    # ---------- Notification ----------

    def _notify_structure(self, event: ChangeEvent):
        self._notify_property(LENGTH_PROPERTY)
        self._notify_property(ITEMS_PROPERTY)
        self._notify_change(event)

    def _notify_property(self, name: str):
        if self._session is None:
            self._notifier.property_changed(self, name)

    def _notify_change(self, event: ChangeEvent):
        if self._session is None:
            self._notifier.collection_changed(self, event)
