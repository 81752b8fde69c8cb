"""Guarded structs: value types whose external mutation is checked.

- **Field registry**: declared fields and their metadata, built once per class
- **Access guard**: existence, visibility and custom-setter dispatch on writes
- **Type validator**: declared type vs. the kind of the candidate value
- **Ordered traversal**: restartable ``(name, value)`` cursor
"""

from guarded_struct.core.enums import Visibility
from guarded_struct.struct.base import GuardedStruct
from guarded_struct.struct.fields import Field, field, fields
from guarded_struct.struct.registry import FieldMeta, FieldRegistry
from guarded_struct.struct.traversal import FieldCursor

__all__ = [
    "Field",
    "FieldCursor",
    "FieldMeta",
    "FieldRegistry",
    "GuardedStruct",
    "Visibility",
    "field",
    "fields",
]
