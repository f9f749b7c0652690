"""Capture-avoiding substitution of type variables."""

from __future__ import annotations

import itertools
from collections.abc import Sequence

from loguru import logger

from tinyts.core.errors import MalformedAnnotation
from tinyts.core.types import (
    Param,
    Property,
    Type,
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

_fresh_ids = itertools.count(1)


def fresh_name(name: str) -> str:
    """Mint a type variable name that has never been handed out before.

    "X" becomes "X@1", and a renamed "X@1" becomes "X@2" rather than "X@1@2".
    """
    base = name.partition("@")[0]
    return f"{base}@{next(_fresh_ids)}"


def substitute(ty: Type, name: str, replacement: Type) -> Type:
    """Replace every free occurrence of TypeVar(name) in ty by replacement.

    Type abstractions are renamed to fresh parameters before the
    substitution goes under them, so free variables of replacement are
    never captured.
    """
    match ty:
        case TypeBool() | TypeNumber() | TypeString() | TypeUnknown():
            return ty
        case TypeOptional(elem):
            return TypeOptional(substitute(elem, name, replacement), ty.location)
        case TypeArray(elem):
            return TypeArray(substitute(elem, name, replacement), ty.location)
        case TypeMap(elem):
            return TypeMap(substitute(elem, name, replacement), ty.location)
        case TypeArrow(params, ret):
            new_params = tuple(Param(p.name, substitute(p.type, name, replacement)) for p in params)
            return TypeArrow(new_params, substitute(ret, name, replacement), ty.location)
        case TypeRecord(props):
            return TypeRecord(_substitute_props(props, name, replacement), ty.location)
        case TypeUnion(variants):
            new_variants = tuple(
                Variant(v.label, _substitute_props(v.props, name, replacement)) for v in variants
            )
            return TypeUnion(new_variants, ty.location)
        case TypeRec(bound, body):
            # Shadowed: nothing below refers to the outer variable
            if bound == name:
                return ty
            return TypeRec(bound, substitute(body, name, replacement), ty.location)
        case TypeForall(params, body):
            if name in params:
                return ty
            new_params, new_body = rename_params(params, body)
            return TypeForall(new_params, substitute(new_body, name, replacement), ty.location)
        case TypeVar(var):
            return replacement if var == name else ty
        case TypeRef(ref, args):
            return TypeRef(ref, tuple(substitute(a, name, replacement) for a in args), ty.location)
        case _:
            raise TypeError(f"Unknown type: {ty!r}")


def _substitute_props(props: tuple[Property, ...], name: str, replacement: Type) -> tuple[Property, ...]:
    return tuple(Property(p.name, substitute(p.type, name, replacement)) for p in props)


def rename_params(params: Sequence[str], body: Type) -> tuple[tuple[str, ...], Type]:
    """Rename every bound parameter of a type abstraction to a fresh name."""
    new_params = []
    for param in params:
        new_param = fresh_name(param)
        body = substitute(body, param, TypeVar(new_param))
        new_params.append(new_param)
    return tuple(new_params), body


def unfold(ty: TypeRec) -> Type:
    """Unfold a recursive type by one level: mu X. T  =>  T[X := mu X. T]."""
    return substitute(ty.body, ty.name, ty)


def simplify(ty: Type) -> Type:
    """Unfold recursive types until the outermost node is not a TypeRec.

    Raises:
        MalformedAnnotation: If unfolding comes back to a recursive type it
            already produced, as for mu X. X or mu X. mu Y. X
    """
    seen: list[TypeRec] = []
    while isinstance(ty, TypeRec):
        if ty in seen:
            raise MalformedAnnotation(f"recursive type {seen[0]} does not unfold to a type", seen[0].location)
        seen.append(ty)
        ty = unfold(ty)
    return ty


def instantiate(ty: TypeForall, args: Sequence[Type]) -> Type:
    """Instantiate a type abstraction at explicit type arguments.

    The parameters are renamed first so that an argument mentioning the name
    of a later parameter is left alone by the later substitutions.
    """
    if len(args) != len(ty.params):
        raise ValueError(f"expected {len(ty.params)} type arguments, got {len(args)}")
    params, body = rename_params(ty.params, ty.body)
    for param, arg in zip(params, args):
        body = substitute(body, param, arg)
    logger.debug("subst.instantiate params={} args={}", list(ty.params), [str(a) for a in args])
    return body
