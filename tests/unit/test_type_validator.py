"""Type expressions, kind classification and acceptance rules."""

from __future__ import annotations

import io
import typing
from collections import Counter, OrderedDict, defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, NamedTuple, Optional

import pytest

from guarded_struct.core.enums import Kind, Visibility
from guarded_struct.core.errors import TypeMismatchError, UnparseableMetadataError
from guarded_struct.core.types import (
    MIXED,
    NULL,
    UNSPECIFIED,
    Named,
    Union,
    normalize_type_name,
    parse_type_string,
    to_type_expr,
)
from guarded_struct.struct import GuardedStruct, field
from guarded_struct.struct.validator import accepts, check, kind_of


class Point(NamedTuple):
    x: int
    y: int


class TestKindOf:
    @pytest.mark.parametrize(
        "value, kind",
        [
            (None, "null"),
            (True, "boolean"),
            (False, "boolean"),
            (0, "integer"),
            (1.5, "float"),
            ("", "string"),
            ([], "array"),
            ((1, 2), "array"),
            ({"a": 1}, "array"),
            (Decimal("1.0"), "Decimal"),
            (datetime(2024, 1, 1), "datetime"),
            (object(), "object"),
        ],
    )
    def test_classification(self, value, kind):
        assert kind_of(value) == kind

    def test_file_objects_are_resources(self):
        assert kind_of(io.StringIO()) == "resource"

    def test_enum_members_use_class_name(self):
        assert kind_of(Visibility.PUBLIC) == "Visibility"

    def test_subclasses_are_not_matched_by_parent_name(self):
        class Stamp(datetime):
            pass

        assert kind_of(Stamp(2024, 1, 1)) == "Stamp"


class TestParseTypeString:
    def test_single_name(self):
        assert parse_type_string("string") == Named("string")

    def test_int_is_normalized(self):
        assert parse_type_string("int") == Named("integer")

    @pytest.mark.parametrize(
        "alias, canonical",
        [
            ("str", "string"),
            ("bool", "boolean"),
            ("double", "float"),
            ("list", "array"),
            ("dict", "array"),
            ("None", "null"),
            ("NULL", "null"),
        ],
    )
    def test_python_aliases(self, alias, canonical):
        assert normalize_type_name(alias) == canonical

    def test_dotted_names_keep_class_name(self):
        assert parse_type_string("datetime.datetime") == Named("datetime")

    def test_union(self):
        expr = parse_type_string("string | array")
        assert expr == Union((Named("string"), Named("array")))
        assert str(expr) == "string|array"

    def test_union_deduplicates(self):
        assert parse_type_string("int|integer") == Named("integer")

    def test_mixed(self):
        assert parse_type_string("mixed") is MIXED
        assert parse_type_string("Any") is MIXED
        assert str(MIXED) == "mixed"

    @pytest.mark.parametrize("text", ["", "string|", "Optional[int]", "list of int", "|"])
    def test_unparseable(self, text):
        with pytest.raises(UnparseableMetadataError):
            parse_type_string(text)


class TestToTypeExpr:
    def test_builtin_types(self):
        assert to_type_expr(int) == Named("integer")
        assert to_type_expr(str) == Named("string")
        assert to_type_expr(float) == Named("float")
        assert to_type_expr(bool) == Named("boolean")
        assert to_type_expr(list) == Named("array")

    def test_classes(self):
        assert to_type_expr(datetime) == Named("datetime")
        assert to_type_expr(Decimal) == Named("Decimal")

    def test_none(self):
        assert to_type_expr(type(None)) == NULL

    def test_pep604_union(self):
        assert to_type_expr(datetime | None) == Union((Named("datetime"), NULL))

    def test_typing_union_and_optional(self):
        assert to_type_expr(typing.Union[int, str]) == Union((Named("integer"), Named("string")))
        assert to_type_expr(Optional[str]) == Union((Named("string"), NULL))

    def test_any(self):
        assert to_type_expr(Any) is MIXED

    def test_generics_check_container_only(self):
        assert to_type_expr(list[int]) == Named("array")
        assert to_type_expr(dict[str, int]) == Named("array")

    def test_annotated_uses_underlying_type(self):
        assert to_type_expr(Annotated[int, "units"]) == Named("integer")

    def test_type_expr_passes_through(self):
        expr = Named("string")
        assert to_type_expr(expr) is expr

    def test_unsupported_annotation(self):
        with pytest.raises(UnparseableMetadataError):
            to_type_expr(typing.Literal["a"])


class TestAccepts:
    def test_unspecified_accepts_anything(self):
        for kind in ("null", "integer", "datetime"):
            assert accepts(UNSPECIFIED, kind)
        assert str(UNSPECIFIED) == "unspecified"

    def test_mixed_accepts_anything(self):
        assert accepts(MIXED, "resource")

    def test_named_exact_match(self):
        assert accepts(Named("integer"), "integer")
        assert not accepts(Named("integer"), "string")
        assert not accepts(Named("integer"), "boolean")

    def test_null_accepts_absent_kind_in_any_spelling(self):
        assert accepts(NULL, Kind.NULL.value)
        assert accepts(NULL, "NULL")
        assert not accepts(Named("datetime"), "null")

    def test_union(self):
        expr = Union((Named("string"), Named("array")))
        assert accepts(expr, "array")
        assert not accepts(expr, "integer")

    def test_union_with_mixed_member(self):
        assert accepts(Union((Named("string"), MIXED)), "float")

    def test_check_returns_kind(self):
        assert check(Named("string"), 3) == (False, "integer")
        assert check(Named("string"), "x") == (True, "string")


class TestContainerSubclasses:
    @pytest.mark.parametrize(
        "declared, value, kind",
        [
            (Point, Point(1, 2), "array"),
            (OrderedDict, OrderedDict(a=1), "array"),
            (defaultdict, defaultdict(list), "array"),
            (Counter, Counter("aab"), "array"),
            (io.StringIO, io.StringIO(), "resource"),
        ],
    )
    def test_accepted_under_own_class_name(self, declared, value, kind):
        assert check(to_type_expr(declared), value) == (True, kind)

    def test_still_accepted_as_container_kind(self):
        assert check(Named("array"), Point(1, 2)) == (True, "array")
        assert check(Named("resource"), io.StringIO()) == (True, "resource")

    def test_plain_container_rejected_for_subclass_type(self):
        assert check(to_type_expr(Point), (1, 2)) == (False, "array")
        assert check(to_type_expr(OrderedDict), {}) == (False, "array")

    def test_struct_field_typed_with_named_tuple(self):
        class Shape(GuardedStruct, exposed=("origin", "index")):
            origin = field(type=Point)
            index = field(type=OrderedDict)

        shape = Shape()
        shape.origin = Point(1, 2)
        shape.index = OrderedDict()
        assert shape.origin == Point(1, 2)
        assert shape.index == OrderedDict()
        with pytest.raises(TypeMismatchError, match="Shape.origin needs to be of type Point, array given"):
            shape.origin = [1, 2]
