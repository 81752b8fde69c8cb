"""Enumerations used across guarded structs."""

from enum import Enum


class Visibility(str, Enum):
    PUBLIC = "public"  # Bypasses the guard entirely
    PROTECTED = "protected"  # Writable when listed in exposed fields
    PRIVATE = "private"  # Never externally writable


class Access(str, Enum):
    """Effective external write policy of a field."""

    PUBLIC = "public"
    RESTRICTED_WRITABLE = "restricted-writable"
    RESTRICTED_HIDDEN = "restricted-hidden"


class Kind(str, Enum):
    """Canonical kind names for primitive runtime values."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    RESOURCE = "resource"
    MIXED = "mixed"
