"""Expansion of type aliases into closed types.

The front end records `type Name<X0, ...> = T` declarations and leaves
references to them as TypeRef nodes. Expansion replaces each reference by
the alias body. A non-generic alias that refers to itself becomes a
recursive type; recursion through a generic alias is rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from tinyts.core.errors import MalformedAnnotation, UnknownIdentifier
from tinyts.core.subst import fresh_name
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


@dataclass(frozen=True)
class TypeAlias:
    """type Name<params> = body; params is None for a non-generic alias."""

    body: Type
    params: tuple[str, ...] | None = None


AliasMap = Mapping[str, TypeAlias]


def expand_aliases(
    ty: Type,
    aliases: AliasMap,
    bound: frozenset[str] = frozenset(),
) -> Type:
    """Replace every alias reference in ty by its definition.

    Args:
        ty: Type as produced by the front end
        aliases: Alias declarations visible to ty
        bound: Type variables bound around ty (they shadow aliases)

    Raises:
        UnknownIdentifier: A reference names neither a bound variable nor an alias
        MalformedAnnotation: A generic alias is used without the right type arguments
    """
    bindings: dict[str, Type] = {name: TypeVar(name) for name in bound}
    return _expand(ty, aliases, bindings, frozenset())


def _expand(ty: Type, aliases: AliasMap, bindings: Mapping[str, Type], rec_defined: frozenset[str]) -> Type:
    match ty:
        case TypeBool() | TypeNumber() | TypeString() | TypeUnknown():
            return ty
        case TypeVar(name):
            return bindings.get(name, ty)
        case TypeOptional(elem):
            return TypeOptional(_expand(elem, aliases, bindings, rec_defined), ty.location)
        case TypeArray(elem):
            return TypeArray(_expand(elem, aliases, bindings, rec_defined), ty.location)
        case TypeMap(elem):
            return TypeMap(_expand(elem, aliases, bindings, rec_defined), ty.location)
        case TypeArrow(params, ret):
            new_params = tuple(Param(p.name, _expand(p.type, aliases, bindings, rec_defined)) for p in params)
            return TypeArrow(new_params, _expand(ret, aliases, bindings, rec_defined), ty.location)
        case TypeRecord(props):
            return TypeRecord(_expand_props(props, aliases, bindings, rec_defined), ty.location)
        case TypeUnion(variants):
            new_variants = tuple(
                Variant(v.label, _expand_props(v.props, aliases, bindings, rec_defined)) for v in variants
            )
            return TypeUnion(new_variants, ty.location)
        case TypeRec(name, body):
            (new_name,), inner = _bind((name,), bindings)
            return _contractive(TypeRec(new_name, _expand(body, aliases, inner, rec_defined), ty.location))
        case TypeForall(params, body):
            new_params, inner = _bind(params, bindings)
            return TypeForall(new_params, _expand(body, aliases, inner, rec_defined), ty.location)
        case TypeRef(name, args) if args:
            return _expand_generic(ty, aliases, bindings, rec_defined)
        case TypeRef(name):
            if name in bindings:
                return bindings[name]
            if name in rec_defined:
                return TypeVar(name, ty.location)
            if name not in aliases:
                raise UnknownIdentifier(name, ty.location, kind="type")
            alias = aliases[name]
            if alias.params is not None:
                raise MalformedAnnotation(f"type arguments are required for {name}", ty.location)
            expanded = _expand(alias.body, aliases, {}, rec_defined | {name})
            if name in expanded.free_vars():
                return _contractive(TypeRec(name, expanded, ty.location))
            return expanded
        case _:
            raise TypeError(f"Unknown type: {ty!r}")


def _expand_generic(
    ty: TypeRef, aliases: AliasMap, bindings: Mapping[str, Type], rec_defined: frozenset[str]
) -> Type:
    name = ty.name
    if name in bindings:
        raise MalformedAnnotation(f"not a generic type: {name}", ty.location)
    if name in rec_defined:
        raise MalformedAnnotation("type recursion for generics is not supported", ty.location)
    if name not in aliases:
        raise UnknownIdentifier(name, ty.location, kind="type")
    alias = aliases[name]
    if alias.params is None:
        raise MalformedAnnotation(f"not a generic type: {name}", ty.location)
    if len(alias.params) != len(ty.args):
        raise MalformedAnnotation(f"wrong number of type arguments for {name}", ty.location)
    arg_bindings = {
        param: _expand(arg, aliases, bindings, rec_defined) for param, arg in zip(alias.params, ty.args)
    }
    return _expand(alias.body, aliases, arg_bindings, rec_defined | {name})


def _contractive(rec: TypeRec) -> TypeRec:
    """Reject a recursive type whose body is, under its binders, one of their own variables."""
    names = set()
    body: Type = rec
    while isinstance(body, TypeRec):
        names.add(body.name)
        body = body.body
    if isinstance(body, TypeVar) and body.name in names:
        raise MalformedAnnotation(f"type {rec.name} is defined only in terms of itself", rec.location)
    return rec


def _bind(names: tuple[str, ...], bindings: Mapping[str, Type]) -> tuple[tuple[str, ...], dict[str, Type]]:
    """Bind names for a nested binder, renaming any that would capture a type argument."""
    taken: set[str] = set()
    for key, value in bindings.items():
        if key not in names and value != TypeVar(key):
            taken |= value.free_vars()
    new_names = tuple(fresh_name(n) if n in taken else n for n in names)
    inner = {**bindings, **{n: TypeVar(m) for n, m in zip(names, new_names)}}
    return new_names, inner


def _expand_props(
    props: tuple[Property, ...], aliases: AliasMap, bindings: Mapping[str, Type], rec_defined: frozenset[str]
) -> tuple[Property, ...]:
    return tuple(Property(p.name, _expand(p.type, aliases, bindings, rec_defined)) for p in props)
