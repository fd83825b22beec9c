from enum import Enum
from typing import Any, List, Optional, Sequence

LENGTH_PROPERTY = "length"
ITEMS_PROPERTY = "items"


class ChangeAction(Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    RESET = "reset"


class ChangeEvent:
    """
    Describes one mutation of a RangeObservableList.

    ADD events carry ``new_items`` and the index of the first new item after
    the insert; REMOVE events carry ``old_items`` and the index the first
    removed item had before removal. REPLACE carries both single-item lists.
    RESET carries nothing. Missing indices are -1.
    """

    __slots__ = (
        "action",
        "new_items",
        "old_items",
        "new_start_index",
        "old_start_index",
    )

    def __init__(
        self,
        action: ChangeAction,
        new_items: Optional[Sequence[Any]] = None,
        old_items: Optional[Sequence[Any]] = None,
        new_start_index: int = -1,
        old_start_index: int = -1,
    ):
        self.action = action
        self.new_items: List[Any] = list(new_items or ())
        self.old_items: List[Any] = list(old_items or ())
        self.new_start_index = new_start_index
        self.old_start_index = old_start_index

    @classmethod
    def add(cls, items, index: int) -> "ChangeEvent":
        return cls(ChangeAction.ADD, new_items=items, new_start_index=index)

    @classmethod
    def remove(cls, items, index: int) -> "ChangeEvent":
        return cls(ChangeAction.REMOVE, old_items=items, old_start_index=index)

    @classmethod
    def replace(cls, old_item, new_item, index: int) -> "ChangeEvent":
        return cls(
            ChangeAction.REPLACE,
            new_items=[new_item],
            old_items=[old_item],
            new_start_index=index,
            old_start_index=index,
        )

    @classmethod
    def reset(cls) -> "ChangeEvent":
        return cls(ChangeAction.RESET)

    def describe(self) -> str:
        """One-line summary used by the event log panel."""
        if self.action is ChangeAction.ADD:
            return f"Add @{self.new_start_index}: {self.new_items}"
        if self.action is ChangeAction.REMOVE:
            return f"Remove @{self.old_start_index}: {self.old_items}"
        if self.action is ChangeAction.REPLACE:
            return (
                f"Replace @{self.new_start_index}: "
                f"{self.old_items[0]!r} -> {self.new_items[0]!r}"
            )
        return "Reset"

    def __eq__(self, other):
        if not isinstance(other, ChangeEvent):
            return NotImplemented
        return (
            self.action is other.action
            and self.new_items == other.new_items
            and self.old_items == other.old_items
            and self.new_start_index == other.new_start_index
            and self.old_start_index == other.old_start_index
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"ChangeEvent({self.action.name}, new_items={self.new_items!r}, "
            f"old_items={self.old_items!r}, new_start_index={self.new_start_index}, "
            f"old_start_index={self.old_start_index})"
        )
