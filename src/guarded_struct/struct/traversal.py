"""Ordered, restartable traversal over a struct's fields."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from guarded_struct.struct.base import GuardedStruct


class FieldCursor:
    """Forward cursor over ``(name, value)`` pairs in declaration order.

    Values are read from the struct on every access, so the cursor always
    reflects the current state. The field set is fixed per class.

    Usage::

        cursor = struct.fields()
        while cursor.has_next():
            name, value = cursor.current()
            cursor.advance()

        cursor.reset()
        pairs = list(cursor)
    """

    def __init__(self, struct: GuardedStruct) -> None:
        self._struct = struct
        self._names = type(struct).field_names()
        self.position = 0

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> FieldCursor:
        return self

    def __next__(self) -> tuple[str, Any]:
        if not self.has_next():
            raise StopIteration
        item = self.current()
        self.advance()
        return item

    def has_next(self) -> bool:
        return self.position < len(self._names)

    def key(self) -> str:
        """Name of the field under the cursor."""
        if not self.has_next():
            raise IndexError("Field cursor is exhausted")
        return self._names[self.position]

    def current(self) -> tuple[str, Any]:
        name = self.key()
        return name, self._struct.get_field(name)

    def advance(self) -> None:
        self.position += 1

    def reset(self) -> None:
        self.position = 0

    def first(self) -> tuple[str, Any]:
        """Rewind and return the first pair."""
        self.reset()
        return self.current()

    def __repr__(self) -> str:
        return (
            f"FieldCursor({type(self._struct).__name__}, "
            f"position={self.position}/{len(self._names)})"
        )
