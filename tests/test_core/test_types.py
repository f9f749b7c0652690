"""Tests for type representations."""

from tinyts.core.types import (
    Param,
    Property,
    TypeArray,
    TypeArrow,
    TypeBool,
    TypeForall,
    TypeMap,
    TypeNumber,
    TypeOptional,
    TypeRec,
    TypeRecord,
    TypeRef,
    TypeString,
    TypeUnion,
    TypeUnknown,
    TypeVar,
    Variant,
)
from tinyts.utils.location import Location, Span


class TestTypeStr:
    """Tests for TypeScript-like rendering."""

    def test_primitives(self):
        """Primitive types render as their keywords."""
        assert str(TypeBool()) == "boolean"
        assert str(TypeNumber()) == "number"
        assert str(TypeString()) == "string"
        assert str(TypeUnknown()) == "undefined"

    def test_arrow(self):
        """(x: number) => boolean"""
        ty = TypeArrow((Param("x", TypeNumber()),), TypeBool())
        assert str(ty) == "(x: number) => boolean"

    def test_array_of_function_is_parenthesised(self):
        """((x: number) => number)[]"""
        ty = TypeArray(TypeArrow((Param("x", TypeNumber()),), TypeNumber()))
        assert str(ty) == "((x: number) => number)[]"

    def test_optional_and_map(self):
        """Optional and map wrappers."""
        assert str(TypeOptional(TypeNumber())) == "number | undefined"
        assert str(TypeMap(TypeString())) == "Record<string, string>"

    def test_record(self):
        """{ a: number, b: string }"""
        ty = TypeRecord((Property("a", TypeNumber()), Property("b", TypeString())))
        assert str(ty) == "{ a: number, b: string }"
        assert str(TypeRecord(())) == "{}"

    def test_union(self, shape):
        """Each variant renders its tag first."""
        assert str(shape) == '({ tag: "circle", r: number } | { tag: "rect", w: number, h: number })'
        assert str(TypeUnion(())) == "never"

    def test_rec_forall_and_ref(self, number_list):
        """Binders and alias references."""
        assert str(number_list) == "(mu L. { head: number, tail: L } | undefined)"
        assert str(TypeForall(("T",), TypeArray(TypeVar("T")))) == "<T>T[]"
        assert str(TypeRef("Pair", (TypeNumber(), TypeString()))) == "Pair<number, string>"


class TestFreeVars:
    """Tests for free type variable computation."""

    def test_var(self):
        """A type variable is free in itself."""
        assert TypeVar("X").free_vars() == {"X"}

    def test_rec_binds_its_name(self, number_list):
        """mu L. ... L ... has no free variables."""
        assert number_list.free_vars() == set()

    def test_forall_binds_its_params(self):
        """<X>(x: X) => Y has only Y free."""
        ty = TypeForall(("X",), TypeArrow((Param("x", TypeVar("X")),), TypeVar("Y")))
        assert ty.free_vars() == {"Y"}

    def test_union_payloads(self):
        """Variables inside variant payloads are collected."""
        ty = TypeUnion((Variant("a", (Property("v", TypeVar("A")),)), Variant("b")))
        assert ty.free_vars() == {"A"}


class TestLocations:
    """Tests for location handling on types."""

    def test_location_ignored_by_equality(self):
        """Two types differing only in location are equal."""
        loc = Location(3, 7, "main.ts")
        assert TypeNumber(loc) == TypeNumber()
        assert TypeArray(TypeNumber(), loc) == TypeArray(TypeNumber())

    def test_span_str(self):
        """Spans render as file:line:col-line:col."""
        span = Span(Location(1, 2, "a.ts"), Location(1, 9, "a.ts"))
        assert str(span) == "a.ts:1:2-1:9"
        assert str(Location(4, 5)) == "line 4, column 5"


class TestLookup:
    """Tests for property and variant lookup."""

    def test_record_find(self, named):
        """find returns the property or None."""
        assert named.find("name") == Property("name", TypeString())
        assert named.find("age") is None

    def test_union_find(self, shape):
        """find looks variants up by label."""
        assert shape.find("rect").find("w") == Property("w", TypeNumber())
        assert shape.find("triangle") is None
        assert shape.labels == ["circle", "rect"]
