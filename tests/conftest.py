"""Test configuration and shared fixtures."""

import pytest

from tinyts.core.types import (
    Param,
    Property,
    TypeArrow,
    TypeForall,
    TypeNumber,
    TypeOptional,
    TypeRec,
    TypeRecord,
    TypeString,
    TypeUnion,
    TypeVar,
    Variant,
)


@pytest.fixture
def number_list():
    """mu L. { head: number, tail: L } | undefined"""
    return TypeRec(
        "L",
        TypeOptional(TypeRecord((Property("head", TypeNumber()), Property("tail", TypeVar("L"))))),
    )


@pytest.fixture
def number_list_unrolled():
    """The same list with its first cell written out: { head: number, tail: mu M. ... } | undefined"""
    inner = TypeRec(
        "M",
        TypeOptional(TypeRecord((Property("head", TypeNumber()), Property("tail", TypeVar("M"))))),
    )
    return TypeOptional(TypeRecord((Property("head", TypeNumber()), Property("tail", inner))))


@pytest.fixture
def number_list_two_step():
    """The same list as a fixed point over two cells at a time."""
    def cell(tail):
        return TypeOptional(TypeRecord((Property("head", TypeNumber()), Property("tail", tail))))

    return TypeRec("P", cell(cell(TypeVar("P"))))


@pytest.fixture
def shape():
    """{ tag: "circle", r: number } | { tag: "rect", w: number, h: number }"""
    return TypeUnion(
        (
            Variant("circle", (Property("r", TypeNumber()),)),
            Variant("rect", (Property("w", TypeNumber()), Property("h", TypeNumber()))),
        )
    )


@pytest.fixture
def identity_type():
    """<X>(x: X) => X"""
    return TypeForall(("X",), TypeArrow((Param("x", TypeVar("X")),), TypeVar("X")))


@pytest.fixture
def named():
    """{ name: string }"""
    return TypeRecord((Property("name", TypeString()),))
