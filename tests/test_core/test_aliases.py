"""Tests for type alias expansion."""

import pytest

from tinyts.core.aliases import TypeAlias, expand_aliases
from tinyts.core.equiv import type_eq, type_eq_naive
from tinyts.core.errors import MalformedAnnotation, UnknownIdentifier
from tinyts.core.types import (
    Param,
    Property,
    TypeArray,
    TypeArrow,
    TypeForall,
    TypeNumber,
    TypeOptional,
    TypeRec,
    TypeRecord,
    TypeRef,
    TypeString,
    TypeVar,
)


def record(**props):
    return TypeRecord(tuple(Property(name, ty) for name, ty in props.items()))


class TestSimpleAliases:
    """Tests for non-generic aliases."""

    def test_plain_alias(self):
        """type Id = number"""
        aliases = {"Id": TypeAlias(TypeNumber())}
        assert expand_aliases(TypeArray(TypeRef("Id")), aliases) == TypeArray(TypeNumber())

    def test_nested_aliases(self):
        """Aliases may refer to other aliases."""
        aliases = {
            "Name": TypeAlias(TypeString()),
            "Person": TypeAlias(record(name=TypeRef("Name"))),
        }
        assert expand_aliases(TypeRef("Person"), aliases) == record(name=TypeString())

    def test_self_reference_becomes_rec(self):
        """type List = { head: number, tail: List } | undefined"""
        aliases = {"List": TypeAlias(TypeOptional(record(head=TypeNumber(), tail=TypeRef("List"))))}
        expanded = expand_aliases(TypeRef("List"), aliases)
        assert expanded == TypeRec("List", TypeOptional(record(head=TypeNumber(), tail=TypeVar("List"))))

    def test_mutual_recursion(self, number_list):
        """Two aliases referring to each other expand to a closed type."""
        aliases = {
            "List": TypeAlias(TypeOptional(TypeRef("Cell"))),
            "Cell": TypeAlias(record(head=TypeNumber(), tail=TypeRef("List"))),
        }
        expanded = expand_aliases(TypeRef("List"), aliases)
        assert expanded.free_vars() == set()
        assert type_eq(expanded, number_list)

    def test_alias_defined_as_itself(self):
        """type A = A has no structure to unfold."""
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeArray(TypeRef("A")), {"A": TypeAlias(TypeRef("A"))})

    def test_aliases_defined_as_each_other(self):
        """type A = B; type B = A is rejected like type A = A."""
        aliases = {"A": TypeAlias(TypeRef("B")), "B": TypeAlias(TypeRef("A"))}
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRef("A"), aliases)

    def test_non_contractive_annotation(self):
        """A written mu X. mu Y. X is rejected."""
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRec("X", TypeRec("Y", TypeVar("X"))), {})

    def test_unknown_alias(self):
        """A reference to nothing is an unknown type."""
        with pytest.raises(UnknownIdentifier) as exc:
            expand_aliases(TypeRef("Missing"), {})
        assert exc.value.kind == "type"

    def test_bound_variable_shadows_alias(self):
        """A type parameter in scope wins over an alias of the same name."""
        aliases = {"T": TypeAlias(TypeNumber())}
        assert expand_aliases(TypeRef("T"), aliases, frozenset({"T"})) == TypeVar("T")


class TestGenericAliases:
    """Tests for generic aliases."""

    def test_instantiation(self):
        """type Box<T> = { value: T };  Box<string>"""
        aliases = {"Box": TypeAlias(record(value=TypeVar("T")), ("T",))}
        expanded = expand_aliases(TypeRef("Box", (TypeString(),)), aliases)
        assert expanded == record(value=TypeString())

    def test_missing_arguments(self):
        """A generic alias used bare is malformed."""
        aliases = {"Box": TypeAlias(record(value=TypeVar("T")), ("T",))}
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRef("Box"), aliases)

    def test_wrong_number_of_arguments(self):
        """Argument count must match."""
        aliases = {"Box": TypeAlias(record(value=TypeVar("T")), ("T",))}
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRef("Box", (TypeString(), TypeNumber())), aliases)

    def test_arguments_to_non_generic(self):
        """A non-generic alias takes no arguments."""
        aliases = {"Id": TypeAlias(TypeNumber())}
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRef("Id", (TypeNumber(),)), aliases)

    def test_generic_recursion_rejected(self):
        """type List<T> = { head: T, tail: List<T> } | undefined"""
        body = TypeOptional(record(head=TypeVar("T"), tail=TypeRef("List", (TypeVar("T"),))))
        aliases = {"List": TypeAlias(body, ("T",))}
        with pytest.raises(MalformedAnnotation):
            expand_aliases(TypeRef("List", (TypeNumber(),)), aliases)

    def test_argument_not_captured(self):
        """type F<A> = <B>(x: B) => A;  F<B> keeps the outer B free."""
        body = TypeForall(("B",), TypeArrow((Param("x", TypeVar("B")),), TypeVar("A")))
        aliases = {"F": TypeAlias(body, ("A",))}
        expanded = expand_aliases(TypeRef("F", (TypeVar("B"),)), aliases, frozenset({"B"}))
        assert expanded.free_vars() == {"B"}
        captured = TypeForall(("B",), TypeArrow((Param("x", TypeVar("B")),), TypeVar("B")))
        assert not type_eq_naive(expanded, captured)
