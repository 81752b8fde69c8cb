"""Shared fixtures for the guarded-struct test suite."""

from __future__ import annotations

import pytest

from guarded_struct.core.config import get_settings
from guarded_struct.struct import GuardedStruct, Visibility, field, fields


# ---------------------------------------------------------------------------
# Sample structs
# ---------------------------------------------------------------------------

class Simple(GuardedStruct, exposed=("a", "c", "f")):
    """Visibility and custom setter cases, no type metadata."""

    a = field(visibility=Visibility.PRIVATE)
    b = field()
    c = field()
    d = field(visibility=Visibility.PUBLIC)
    e = field()
    f = field()

    def set_e(self, value):
        self._e = "customPublic"

    def _set_f(self, value):
        self._f = "customProtected"


class Annotated(
    GuardedStruct,
    exposed=("a", "c", "f", "g", "h", "j", "k", "l", "m"),
):
    """Type metadata declared through ``:vartype`` doc lines."""

    a = field(doc=":vartype a: str")

    # One unnamed entry covers both siblings
    c, d = fields(2, doc=":vartype: str")

    # A named entry only covers the sibling it names
    e, f = fields(2, doc="""
        :vartype e: str
        No metadata for f.
    """)

    g = field(doc=":vartype: string")

    h, i = fields(2, doc="""
        :vartype h: int
        :vartype i: str
    """)

    j = field(doc=":vartype j: datetime")
    k = field(doc=":vartype k: string|array")
    l = field(doc=":vartype l: datetime|null")  # noqa: E741
    m = field(doc=":vartype m: datetime", default=None)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached process-wide; isolate env overrides per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def simple() -> Simple:
    return Simple()


@pytest.fixture
def annotated() -> Annotated:
    return Annotated()
