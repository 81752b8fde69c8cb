"""Field declarations for guarded structs.

Usage::

    class Event(GuardedStruct, exposed=("title", "starts_at")):
        title: str = field()
        starts_at = field(type=datetime | None)
        owner = field(visibility=Visibility.PRIVATE)
        note = field(visibility=Visibility.PUBLIC)

        lo, hi = fields(2, doc=\"\"\"
            :vartype lo: int
            :vartype hi: int
        \"\"\")
"""

from __future__ import annotations

from typing import Any, Callable

from guarded_struct.core.enums import Visibility
from guarded_struct.core.errors import StructDefinitionError


class FieldGroup:
    """Sibling fields declared in one statement, sharing one doc block."""

    def __init__(self, doc: str | None = None) -> None:
        self.doc = doc
        self.members: list[Field] = []

    @property
    def names(self) -> list[str]:
        return [member.name for member in self.members if member.name]


class Field:
    """Descriptor for a single guarded field.

    Reads and writes on instances are routed through the owning struct's
    access guard. The value itself lives in the instance slot ``_<name>``.
    """

    def __init__(
        self,
        *,
        type: Any = None,
        visibility: Visibility | str = Visibility.PROTECTED,
        default: Any = None,
        default_factory: Callable[[], Any] | None = None,
        setter: Callable[[Any, Any], None] | None = None,
        doc: str | None = None,
        group: FieldGroup | None = None,
    ) -> None:
        if default is not None and default_factory is not None:
            raise StructDefinitionError(
                "Cannot specify both default and default_factory"
            )
        # Unhashable defaults would be shared between instances
        if default is not None and default.__class__.__hash__ is None:
            raise StructDefinitionError(
                f"Mutable default {default.__class__.__name__} is not allowed: "
                "use default_factory"
            )
        self.type = type
        self.visibility = Visibility(visibility)
        self.default = default
        self.default_factory = default_factory
        self.custom_setter = setter
        self.group = group if group is not None else FieldGroup(doc)
        self.group.members.append(self)
        self.name: str | None = None
        self.owner: type | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        # First binding wins; the registry rejects reused declarations
        if self.name is None:
            self.name = name
            self.owner = owner

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj.get_field(self.name)

    def __set__(self, obj: Any, value: Any) -> None:
        obj.set_field(self.name, value)

    def __delete__(self, obj: Any) -> None:
        obj.clear_field(self.name)

    def setter(self, fn: Callable[[Any, Any], None]) -> Field:
        """Attach a custom setter, property style::

            total = field()

            @total.setter
            def total(self, value):
                self._total = int(value)
        """
        self.custom_setter = fn
        return self

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, visibility={self.visibility.value!r})"


def field(**kwargs: Any) -> Field:
    """Declare one guarded field. See :class:`Field` for arguments."""
    return Field(**kwargs)


def fields(count: int, *, doc: str | None = None, **kwargs: Any) -> tuple[Field, ...]:
    """Declare *count* sibling fields sharing *doc* and the other arguments::

        c, d = fields(2, doc=":vartype: str")
    """
    if count < 1:
        raise StructDefinitionError("A field group needs at least one field")
    group = FieldGroup(doc)
    return tuple(Field(group=group, **kwargs) for _ in range(count))
