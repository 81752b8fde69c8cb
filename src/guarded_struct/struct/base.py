"""GuardedStruct: value types with checked external mutation.

Every external write goes through the same pipeline:

1. Resolve the field in the class registry (``NoSuchFieldError``).
2. If a custom setter is registered, hand the value to it and stop. The
   setter owns coercion and validation for its field.
3. Public fields are stored as given.
4. Protected fields must be listed in ``exposed`` (``NotWritableError``);
   private fields are never writable.
5. The value's kind must match the declared type (``TypeMismatchError``).

Subclass methods write the backing slot (``self._<name> = ...``) directly;
underscore names bypass the guard.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Iterable

from guarded_struct.core.config import get_settings
from guarded_struct.core.enums import Access
from guarded_struct.core.errors import (
    NoSuchFieldError,
    NotWritableError,
    TypeMismatchError,
)
from guarded_struct.struct.registry import FieldMeta, FieldRegistry
from guarded_struct.struct.traversal import FieldCursor
from guarded_struct.struct.validator import check

logger = logging.getLogger(__name__)

# Name under which the exposed-field list is addressed; never a field.
EXPOSED_HOLDER = "__exposed_fields__"


class GuardedStruct:
    """Abstract base for guarded value types.

    Usage::

        class Simple(GuardedStruct, exposed=("c",)):
            b = field()
            c: str = field()

        s = Simple()
        s.c = "test"      # ok
        s.b = "test"      # NotWritableError
        s.c = 123         # TypeMismatchError
    """

    __struct_registry__: ClassVar[FieldRegistry]

    def __init_subclass__(cls, exposed: Iterable[str] | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if exposed is None:
            exposed = cls.__struct_registry__.exposed
        elif isinstance(exposed, str):
            exposed = (exposed,)

        cls.__struct_registry__ = FieldRegistry.build(
            cls,
            exposed,
            reserved=_BASE_ATTRIBUTES,
            strict=get_settings().strict_metadata,
        )
        logger.debug(
            "Registered struct %s: %d fields, exposed=%s",
            cls.__name__,
            len(cls.__struct_registry__),
            list(cls.__struct_registry__.exposed),
        )

    def __init__(self, **values: Any) -> None:
        if type(self) is GuardedStruct:
            raise TypeError("GuardedStruct is abstract; subclass it to declare fields")
        for meta in self.__struct_registry__:
            object.__setattr__(self, meta.slot, meta.initial_value())
        for name, value in values.items():
            self.set_field(name, value)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return cls.__struct_registry__.names()

    @classmethod
    def exposed_fields(cls) -> tuple[str, ...]:
        return cls.__struct_registry__.exposed

    @classmethod
    def field_meta(cls, name: str) -> FieldMeta:
        return cls.__struct_registry__.resolve(name)

    # ------------------------------------------------------------------
    # Access guard
    # ------------------------------------------------------------------

    def get_field(self, name: str) -> Any:
        """Current value of *name*.

        Raises:
            NoSuchFieldError: If *name* is not a declared field.
        """
        return self._read(self.field_meta(name))

    def set_field(self, name: str, value: Any) -> None:
        """Assign *value* to *name* through the guard.

        Raises:
            NoSuchFieldError: If *name* is not a declared field.
            NotWritableError: If the field is not exposed and has no
                custom setter.
            TypeMismatchError: If *value* does not match the declared type.
        """
        meta = self.field_meta(name)
        owner = type(self).__name__

        if meta.setter is not None:
            logger.debug("Dispatching %s.%s to custom setter", owner, name)
            meta.setter(self, value)
            return

        if meta.access is Access.PUBLIC:
            self._write(meta, value)
            return

        if not meta.writable:
            raise NotWritableError(owner, name, meta.visibility)

        accepted, kind = check(meta.declared_type, value)
        if not accepted:
            raise TypeMismatchError(owner, name, meta.declared_type, kind)
        self._write(meta, value)

    def has_field(self, name: str) -> bool:
        """True if *name* is declared and holds a non-``None`` value."""
        meta = self.__struct_registry__.get(name)
        if meta is None:
            return False
        return self._read(meta) is not None

    def clear_field(self, name: str) -> None:
        """Reset an exposed field to ``None``. No-op for any other name."""
        meta = self.__struct_registry__.get(name)
        if meta is None or not meta.writable:
            return
        self._write(meta, None)

    def fields(self) -> FieldCursor:
        """Cursor over ``(name, value)`` pairs in declaration order."""
        return FieldCursor(self)

    def _read(self, meta: FieldMeta) -> Any:
        try:
            return self.__dict__[meta.slot]
        except KeyError:
            # Subclass __init__ skipped super().__init__()
            value = meta.initial_value()
            object.__setattr__(self, meta.slot, value)
            return value

    def _write(self, meta: FieldMeta, value: Any) -> None:
        object.__setattr__(self, meta.slot, value)

    # ------------------------------------------------------------------
    # Attribute protocol
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if name == EXPOSED_HOLDER or not name.startswith("_"):
            raise NoSuchFieldError(type(self).__name__, name)
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if name == EXPOSED_HOLDER:
            raise NoSuchFieldError(type(self).__name__, name)
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self.set_field(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        self.clear_field(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_field(name)

    def __iter__(self) -> FieldCursor:
        return FieldCursor(self)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            self.get_field(name) == other.get_field(name)
            for name in self.field_names()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{name}={value!r}" for name, value in FieldCursor(self))
        return f"{type(self).__name__}({body})"


GuardedStruct.__struct_registry__ = FieldRegistry(GuardedStruct.__name__)
_BASE_ATTRIBUTES = frozenset(dir(GuardedStruct))
