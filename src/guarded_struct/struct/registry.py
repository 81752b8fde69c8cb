"""Field registry: per-class metadata for guarded fields.

The registry is built once, when a ``GuardedStruct`` subclass is created,
and holds one :class:`FieldMeta` per declared field in declaration order.

Declared type sources, first match wins:

1. ``field(type=...)``
2. the class annotation (``title: str = field()``)
3. ``:vartype [name]: Type`` lines in the field group's ``doc``

Doc metadata rules
------------------
- One entry: applies to every field of the group, named or not. If it
  names a field outside the group, an ``AmbiguousMetadataName`` warning is
  emitted and the entry still applies. If it names a sibling, it only
  applies to that sibling.
- Several entries: the entry naming the field wins, otherwise the type is
  unspecified.
"""

from __future__ import annotations

import inspect
import logging
import re
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

from guarded_struct.core.enums import Access, Visibility
from guarded_struct.core.errors import (
    AmbiguousMetadataName,
    AmbiguousMetadataNameError,
    NoSuchFieldError,
    StructDefinitionError,
    UnparseableMetadataError,
)
from guarded_struct.core.types import UNSPECIFIED, TypeExpr, parse_type_string, to_type_expr
from guarded_struct.struct.fields import Field

logger = logging.getLogger(__name__)

_VARTYPE_MARKER = ":vartype"
_VARTYPE_RE = re.compile(
    r"^\s*:vartype(?:\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*))?\s*:\s*(?P<type>\S.*?)\s*$"
)
_NO_ANNOTATION = object()


@dataclass(frozen=True)
class FieldMeta:
    """Resolved metadata for one declared field."""

    name: str
    visibility: Visibility
    declared_type: TypeExpr = UNSPECIFIED
    default: Any = None
    default_factory: Callable[[], Any] | None = None
    setter: Callable[[Any, Any], None] | None = None
    exposed: bool = False

    @property
    def slot(self) -> str:
        """Instance attribute holding the field's value."""
        return "_" + self.name

    @property
    def access(self) -> Access:
        if self.visibility is Visibility.PUBLIC:
            return Access.PUBLIC
        if self.visibility is Visibility.PROTECTED and self.exposed:
            return Access.RESTRICTED_WRITABLE
        return Access.RESTRICTED_HIDDEN

    @property
    def writable(self) -> bool:
        """Whether the default, type-checked write path is open."""
        return self.access is Access.RESTRICTED_WRITABLE

    def initial_value(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


@dataclass(frozen=True)
class DocEntry:
    """One ``:vartype`` line."""

    declared_type: TypeExpr
    name: str | None = None


def parse_doc(doc: str | None) -> list[DocEntry]:
    """Extract ``:vartype`` entries from a field doc block.

    Raises:
        UnparseableMetadataError: If a ``:vartype`` line is malformed or
            its type cannot be parsed.
    """
    if not doc:
        return []
    entries: list[DocEntry] = []
    for line in doc.splitlines():
        if _VARTYPE_MARKER not in line:
            continue
        match = _VARTYPE_RE.match(line)
        if match is None:
            raise UnparseableMetadataError(f"Could not interpret metadata line {line.strip()!r}")
        entries.append(DocEntry(parse_type_string(match.group("type")), match.group("name")))
    return entries


class FieldRegistry:
    """Ordered, immutable mapping of field name to :class:`FieldMeta`."""

    def __init__(
        self,
        owner: str,
        metas: Iterable[FieldMeta] = (),
        exposed: Iterable[str] = (),
    ) -> None:
        self.owner = owner
        self.exposed: tuple[str, ...] = tuple(exposed)
        self._fields: dict[str, FieldMeta] = {meta.name: meta for meta in metas}

    def resolve(self, name: str) -> FieldMeta:
        """Metadata for *name*.

        Raises:
            NoSuchFieldError: If *name* is not a declared field.
        """
        meta = self._fields.get(name)
        if meta is None:
            raise NoSuchFieldError(self.owner, name)
        return meta

    def get(self, name: str) -> FieldMeta | None:
        return self._fields.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldMeta]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldRegistry({self.owner}, fields={list(self._fields)})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        struct_cls: type,
        exposed: Iterable[str] = (),
        *,
        reserved: Iterable[str] = (),
        strict: bool = False,
    ) -> FieldRegistry:
        """Collect and resolve every field declared along *struct_cls*'s MRO.

        Args:
            struct_cls: The concrete struct class.
            exposed: Names of protected fields open to external writes.
            reserved: Attribute names of the base class; never treated
                as custom setters.
            strict: Raise instead of warn on ambiguous metadata names.
        """
        owner = struct_cls.__name__
        exposed = tuple(exposed)
        declared = _collect_fields(struct_cls)

        unknown = [name for name in exposed if name not in declared]
        if unknown:
            raise StructDefinitionError(
                f"{owner} exposes undeclared field(s): {', '.join(unknown)}"
            )

        reserved = frozenset(reserved)
        clashes = [name for name in declared if name in reserved]
        if clashes:
            raise StructDefinitionError(
                f"{owner} declares field(s) shadowing struct methods: {', '.join(clashes)}"
            )

        metas = []
        for name, fld in declared.items():
            metas.append(
                FieldMeta(
                    name=name,
                    visibility=fld.visibility,
                    declared_type=_declared_type(fld, owner, strict),
                    default=fld.default,
                    default_factory=fld.default_factory,
                    setter=_find_setter(struct_cls, fld, reserved),
                    exposed=name in exposed,
                )
            )
        return cls(owner, metas, exposed)


def _collect_fields(struct_cls: type) -> dict[str, Field]:
    declared: dict[str, Field] = {}
    for klass in reversed(struct_cls.__mro__):
        for name, value in vars(klass).items():
            if not isinstance(value, Field):
                continue
            if value.name != name:
                raise StructDefinitionError(
                    f"Field {klass.__name__}.{name} reuses the declaration of "
                    f"{value.name}; declare each field separately"
                )
            if name.startswith("_"):
                raise StructDefinitionError(
                    f"Field name {klass.__name__}.{name} must not start with an "
                    "underscore (reserved for internal state)"
                )
            declared[name] = value
    return declared


def _annotation_for(fld: Field, *, eval_str: bool = False) -> Any:
    try:
        annotations = inspect.get_annotations(fld.owner, eval_str=eval_str)
    except (NameError, SyntaxError, TypeError, AttributeError) as exc:
        raise UnparseableMetadataError(
            f"Could not evaluate annotations of {fld.owner.__name__}: {exc}"
        ) from exc
    return annotations.get(fld.name, _NO_ANNOTATION)


def _type_from_annotation(annotation: Any, fld: Field) -> TypeExpr:
    if not isinstance(annotation, str):
        return to_type_expr(annotation)
    try:
        return parse_type_string(annotation)
    except UnparseableMetadataError:
        # Stringified typing construct, e.g. "Optional[datetime]"
        return to_type_expr(_annotation_for(fld, eval_str=True))


def _declared_type(fld: Field, owner: str, strict: bool) -> TypeExpr:
    if fld.type is not None:
        return to_type_expr(fld.type)
    annotation = _annotation_for(fld)
    if annotation is not _NO_ANNOTATION:
        return _type_from_annotation(annotation, fld)
    return _type_from_doc(fld, owner, strict)


def _type_from_doc(fld: Field, owner: str, strict: bool) -> TypeExpr:
    entries = parse_doc(fld.group.doc)
    if not entries:
        return UNSPECIFIED

    if len(entries) == 1:
        entry = entries[0]
        if entry.name is None or entry.name == fld.name:
            return entry.declared_type
        if entry.name in fld.group.names:
            return UNSPECIFIED
        _report_name_mismatch(owner, fld.name, entry.name, strict)
        return entry.declared_type

    for entry in entries:
        if entry.name == fld.name:
            return entry.declared_type
    return UNSPECIFIED


def _report_name_mismatch(owner: str, name: str, stated: str, strict: bool) -> None:
    message = (
        f"Specified field name '{stated}' in metadata does not match "
        f"actual field name '{name}' on {owner}"
    )
    if strict:
        raise AmbiguousMetadataNameError(message)
    logger.warning(message)
    warnings.warn(message, AmbiguousMetadataName, stacklevel=2)


def _find_setter(
    struct_cls: type, fld: Field, reserved: frozenset[str]
) -> Callable[[Any, Any], None] | None:
    if fld.custom_setter is not None:
        if not callable(fld.custom_setter):
            raise StructDefinitionError(
                f"Setter for {struct_cls.__name__}.{fld.name} is not callable"
            )
        return fld.custom_setter

    for candidate in (f"set_{fld.name}", f"_set_{fld.name}"):
        if candidate in reserved or not hasattr(struct_cls, candidate):
            continue
        if not callable(getattr(struct_cls, candidate)):
            raise StructDefinitionError(
                f"{struct_cls.__name__}.{candidate} shadows a setter name but "
                "is not callable"
            )
        return _method_setter(candidate)
    return None


def _method_setter(method_name: str) -> Callable[[Any, Any], None]:
    def call(obj: Any, value: Any) -> None:
        getattr(obj, method_name)(value)

    call.__name__ = method_name
    return call
