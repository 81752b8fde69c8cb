"""Declared type expressions for struct fields.

A field's declared type is one of four shapes:

- ``Unspecified`` -- no metadata at all, accepts anything.
- ``Mixed`` -- the explicit ``mixed`` (or ``Any``) wildcard.
- ``Named(name)`` -- a primitive kind (``string``, ``integer``, ...) or a
  class name (``datetime``).
- ``Union(members)`` -- ``string|array``, ``datetime | None`` and friends.

Type expressions can be built from type strings or from Python type
objects and typing constructs; both normalise to the same canonical names
so that ``int``, ``"int"`` and ``"integer"`` all declare ``integer``.
"""

from __future__ import annotations

import re
import types
import typing
from dataclasses import dataclass
from typing import Any, Iterable

from guarded_struct.core.enums import Kind
from guarded_struct.core.errors import UnparseableMetadataError

# Spellings folded onto the canonical kind names
TYPE_ALIASES: dict[str, str] = {
    "int": Kind.INTEGER.value,
    "str": Kind.STRING.value,
    "bool": Kind.BOOLEAN.value,
    "double": Kind.FLOAT.value,
    "list": Kind.ARRAY.value,
    "tuple": Kind.ARRAY.value,
    "dict": Kind.ARRAY.value,
    "None": Kind.NULL.value,
    "NoneType": Kind.NULL.value,
    "NULL": Kind.NULL.value,
    "Any": Kind.MIXED.value,
}

_TYPE_NAME = r"[A-Za-z_][A-Za-z0-9_.]*"
_TYPE_STRING_RE = re.compile(rf"^\s*{_TYPE_NAME}(?:\s*\|\s*{_TYPE_NAME})*\s*$")


class TypeExpr:
    """Base class for declared type expressions."""

    def accepts(self, kind: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Unspecified(TypeExpr):
    def accepts(self, kind: str) -> bool:
        return True

    def __str__(self) -> str:
        return "unspecified"


@dataclass(frozen=True)
class Mixed(TypeExpr):
    def accepts(self, kind: str) -> bool:
        return True

    def __str__(self) -> str:
        return Kind.MIXED.value


@dataclass(frozen=True)
class Named(TypeExpr):
    name: str

    def accepts(self, kind: str) -> bool:
        if self.name == Kind.NULL.value:
            return normalize_type_name(kind) == Kind.NULL.value
        return kind == self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Union(TypeExpr):
    members: tuple[TypeExpr, ...]

    def accepts(self, kind: str) -> bool:
        return any(member.accepts(kind) for member in self.members)

    def __str__(self) -> str:
        return "|".join(str(member) for member in self.members)


UNSPECIFIED = Unspecified()
MIXED = Mixed()
NULL = Named(Kind.NULL.value)


def normalize_type_name(name: str) -> str:
    """Canonical spelling of a single type name (``int`` -> ``integer``)."""
    name = name.strip().rsplit(".", 1)[-1]
    return TYPE_ALIASES.get(name, name)


def _named(name: str) -> TypeExpr:
    canonical = normalize_type_name(name)
    if canonical == Kind.MIXED.value:
        return MIXED
    return Named(canonical)


def _combine(members: Iterable[TypeExpr]) -> TypeExpr:
    flat: list[TypeExpr] = []
    for member in members:
        nested = member.members if isinstance(member, Union) else (member,)
        for item in nested:
            if item not in flat:
                flat.append(item)
    if len(flat) == 1:
        return flat[0]
    return Union(tuple(flat))


def parse_type_string(text: str) -> TypeExpr:
    """Parse ``"string|array"``-style type text.

    Raises:
        UnparseableMetadataError: If *text* is not a ``|``-separated list
            of type names.
    """
    if not _TYPE_STRING_RE.match(text):
        raise UnparseableMetadataError(f"Could not interpret type {text!r}")
    return _combine(_named(part) for part in text.split("|"))


def to_type_expr(obj: Any) -> TypeExpr:
    """Convert a type string, Python type or typing construct to a TypeExpr."""
    if isinstance(obj, TypeExpr):
        return obj
    if isinstance(obj, str):
        return parse_type_string(obj)
    if obj is typing.Any:
        return MIXED
    if obj is None or obj is type(None):
        return NULL

    origin = typing.get_origin(obj)
    if origin is typing.Union or origin is types.UnionType:
        return _combine(to_type_expr(arg) for arg in typing.get_args(obj))
    if origin is typing.Annotated:
        return to_type_expr(typing.get_args(obj)[0])
    if isinstance(origin, type):
        # list[int] and friends are checked by container kind only
        return to_type_expr(origin)

    if isinstance(obj, type):
        return _named(obj.__name__)

    raise UnparseableMetadataError(f"Could not interpret type annotation {obj!r}")
