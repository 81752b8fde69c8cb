"""Custom exception hierarchy for guarded structs."""

from __future__ import annotations

from typing import Any


class StructError(Exception):
    """Base exception for all guarded struct errors."""


# --- Access ---
class NoSuchFieldError(StructError, AttributeError):
    """Guarded access to a name that is not a declared field."""

    def __init__(self, owner: str, name: str):
        super().__init__(f"Cannot access non-existing field {owner}.{name}")
        self.owner = owner
        self.name = name


class NotWritableError(StructError, AttributeError):
    """External write to a field that is not exposed."""

    def __init__(self, owner: str, name: str, visibility: Any):
        label = getattr(visibility, "value", visibility)
        super().__init__(f"Cannot assign value to {label} field {owner}.{name}")
        self.owner = owner
        self.name = name
        self.visibility = visibility


# --- Validation ---
class TypeMismatchError(StructError, TypeError):
    """Candidate value does not match the field's declared type."""

    def __init__(self, owner: str, name: str, expected: Any, actual: str):
        self.owner = owner
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Field {owner}.{name} needs to be of type {expected}, {actual} given"
        )


# --- Definition ---
class StructDefinitionError(StructError):
    """A struct subclass declares its fields inconsistently."""


class UnparseableMetadataError(StructDefinitionError):
    """Type metadata attached to a field cannot be interpreted."""


class AmbiguousMetadataNameError(StructDefinitionError):
    """Metadata names a different field (raised only in strict mode)."""


# --- Warnings ---
class AmbiguousMetadataName(UserWarning):
    """Metadata names a different field; the entry is applied anyway."""
