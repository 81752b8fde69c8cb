"""Type validation of candidate field values.

Values are classified into a *kind* string which is then compared with the
field's declared :class:`~guarded_struct.core.types.TypeExpr`:

- ``None`` -> ``null``
- ``bool`` -> ``boolean`` (checked before ``int``)
- ``int`` -> ``integer``, ``float`` -> ``float``, ``str`` -> ``string``
- ``list`` / ``tuple`` / ``dict`` -> ``array``
- open file objects -> ``resource``
- everything else, enum members included -> the concrete class name

Container and file subclasses (``OrderedDict``, named tuples, ``StringIO``)
classify as ``array`` / ``resource`` but are also accepted under their own
class name.
"""

from __future__ import annotations

import io
from enum import Enum
from typing import Any

from guarded_struct.core.enums import Kind
from guarded_struct.core.types import TypeExpr

_PRIMITIVE_KINDS: tuple[tuple[type, Kind], ...] = (
    (bool, Kind.BOOLEAN),
    (int, Kind.INTEGER),
    (float, Kind.FLOAT),
    (str, Kind.STRING),
    (list, Kind.ARRAY),
    (tuple, Kind.ARRAY),
    (dict, Kind.ARRAY),
    (io.IOBase, Kind.RESOURCE),
)


def kind_of(value: Any) -> str:
    """Classify *value* for comparison against a declared type."""
    if value is None:
        return Kind.NULL.value
    if isinstance(value, Enum):
        return type(value).__name__
    for py_type, kind in _PRIMITIVE_KINDS:
        if isinstance(value, py_type):
            return kind.value
    return type(value).__name__


def accepts(expected: TypeExpr, actual_kind: str) -> bool:
    """Whether a value of *actual_kind* may be stored under *expected*."""
    return expected.accepts(actual_kind)


def check(expected: TypeExpr, value: Any) -> tuple[bool, str]:
    """Classify *value* and validate it. Returns ``(accepted, kind)``."""
    kind = kind_of(value)
    if accepts(expected, kind):
        return True, kind
    class_name = type(value).__name__
    return class_name != kind and accepts(expected, class_name), kind
