"""Structural type equality and subtyping.

Recursive types are equi-recursive: mu X. T is the same type as its
unfolding T[X := mu X. T]. Two types are equal when their infinite
unfoldings are, which is decided by unfolding lazily and remembering every
pair of types already under comparison. Meeting a pair again (up to
renaming of bound variables) closes the cycle and counts as success.

Bound variables are compared through a stack of binder pairs: the n-th
binder entered on the left is paired with the n-th binder entered on the
right, and two variables are equal when the innermost binder of each is
the same pair.
"""

from __future__ import annotations

from enum import Enum

from loguru import logger

from tinyts.core.errors import UnknownIdentifier
from tinyts.core.subst import simplify
from tinyts.core.types import (
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

Seen = tuple[tuple[Type, Type], ...]
Binders = tuple[tuple[str, str], ...]


class Relation(Enum):
    EQUAL = "equal"
    SUBTYPE = "subtype"


def _bind(binders: Binders, left: tuple[str, ...], right: tuple[str, ...]) -> Binders:
    return binders + tuple(zip(left, right))


def _swap(binders: Binders) -> Binders:
    return tuple((r, l) for l, r in binders)


def _same_binder(left: str, right: str, binders: Binders) -> bool | None:
    """Whether left and right refer to the same binder pair; None if neither is bound."""
    for bl, br in reversed(binders):
        if bl == left or br == right:
            return bl == left and br == right
    return None


# =============================================================================
# Naive equality
# =============================================================================


def type_eq_naive(a: Type, b: Type, binders: Binders = ()) -> bool:
    """Compare two types structurally without unfolding recursive types.

    binders pairs variables bound on the left with those bound on the right,
    so `mu X. T` and `mu Y. T[X := Y]` compare equal. Variables bound by
    neither side are free and only equal the same free variable.
    """
    if isinstance(a, TypeUnknown) or isinstance(b, TypeUnknown):
        return True

    match b:
        case TypeBool() | TypeNumber() | TypeString():
            return type(a) is type(b)
        case TypeOptional(elem) | TypeArray(elem) | TypeMap(elem):
            if type(a) is not type(b):
                return False
            return type_eq_naive(a.elem, elem, binders)
        case TypeArrow(params, ret):
            if not isinstance(a, TypeArrow) or len(a.params) != len(params):
                return False
            for pa, pb in zip(a.params, params):
                if not type_eq_naive(pa.type, pb.type, binders):
                    return False
            return type_eq_naive(a.ret, ret, binders)
        case TypeRecord(props):
            if not isinstance(a, TypeRecord):
                return False
            return _props_eq_naive(a.props, props, binders)
        case TypeUnion(variants):
            if not isinstance(a, TypeUnion) or len(a.variants) != len(variants):
                return False
            for va in a.variants:
                vb = b.find(va.label)
                if vb is None or not _props_eq_naive(va.props, vb.props, binders):
                    return False
            return True
        case TypeRec(name, body):
            if not isinstance(a, TypeRec):
                return False
            return type_eq_naive(a.body, body, _bind(binders, (a.name,), (name,)))
        case TypeForall(params, body):
            if not isinstance(a, TypeForall) or len(a.params) != len(params):
                return False
            return type_eq_naive(a.body, body, _bind(binders, a.params, params))
        case TypeVar(name):
            if not isinstance(a, TypeVar):
                return False
            same = _same_binder(a.name, name, binders)
            if same is None:
                return a.name == name
            return same
        case TypeRef(name):
            return isinstance(a, TypeRef) and a == b
        case _:
            raise TypeError(f"Unknown type: {b!r}")


def _props_eq_naive(pa: tuple[Property, ...], pb: tuple[Property, ...], binders: Binders) -> bool:
    if len(pa) != len(pb):
        return False
    for prop in pb:
        found = _find(pa, prop.name)
        if found is None or not type_eq_naive(found.type, prop.type, binders):
            return False
    return True


def _find(props: tuple[Property, ...], name: str) -> Property | None:
    for prop in props:
        if prop.name == name:
            return prop
    return None


# =============================================================================
# Cycle-safe equality and subtyping
# =============================================================================


def type_eq(a: Type, b: Type, rigid: frozenset[str] = frozenset()) -> bool:
    """Decide whether a and b denote the same (possibly infinite) type.

    Args:
        a: Left type
        b: Right type
        rigid: Type variables in scope; each only equals itself

    Raises:
        UnknownIdentifier: If a type variable is bound by nothing
        MalformedAnnotation: If a recursive type never unfolds to a type
    """
    return _relate(a, b, (), tuple((v, v) for v in rigid), Relation.EQUAL)


def is_subtype(a: Type, b: Type, rigid: frozenset[str] = frozenset()) -> bool:
    """Decide whether a value of type a can be used where b is expected.

    Functions are contravariant in their parameters and covariant in their
    result; records follow width and depth subtyping; a union with fewer
    variants is a subtype of one with more; T is a subtype of T | undefined.
    """
    return _relate(a, b, (), tuple((v, v) for v in rigid), Relation.SUBTYPE)


def join(a: Type, b: Type, rigid: frozenset[str] = frozenset()) -> Type | None:
    """Reconcile the types of two branches.

    The placeholder type gives way to the other branch. Otherwise both
    branches must have equal types; None means they do not.
    """
    if isinstance(a, TypeUnknown):
        return b
    if isinstance(b, TypeUnknown):
        return a
    if type_eq(a, b, rigid):
        return a
    return None


def _seen_before(a: Type, b: Type, seen: Seen) -> bool:
    for left, right in seen:
        if type_eq_naive(left, a) and type_eq_naive(right, b):
            return True
    return False


def _relate(a: Type, b: Type, seen: Seen, binders: Binders, relation: Relation) -> bool:
    if _seen_before(a, b, seen):
        return True
    if isinstance(a, TypeRec):
        logger.debug("equiv.unfold side=left type={}", a)
        return _relate(simplify(a), b, seen + ((a, b),), binders, relation)
    if isinstance(b, TypeRec):
        logger.debug("equiv.unfold side=right type={}", b)
        return _relate(a, simplify(b), seen + ((a, b),), binders, relation)

    if isinstance(a, TypeUnknown) or isinstance(b, TypeUnknown):
        return True

    subtyping = relation is Relation.SUBTYPE

    match b:
        case TypeBool() | TypeNumber() | TypeString():
            return type(a) is type(b)
        case TypeOptional(elem):
            if isinstance(a, TypeOptional):
                return _relate(a.elem, elem, seen, binders, relation)
            # T <: T | undefined
            return subtyping and _relate(a, elem, seen, binders, relation)
        case TypeArray(elem) | TypeMap(elem):
            if type(a) is not type(b):
                return False
            return _relate(a.elem, elem, seen, binders, relation)
        case TypeArrow(params, ret):
            if not isinstance(a, TypeArrow) or len(a.params) != len(params):
                return False
            for pa, pb in zip(a.params, params):
                if subtyping:
                    # contravariant
                    if not _relate(pb.type, pa.type, seen, _swap(binders), relation):
                        return False
                elif not _relate(pa.type, pb.type, seen, binders, relation):
                    return False
            return _relate(a.ret, ret, seen, binders, relation)
        case TypeRecord(props):
            if not isinstance(a, TypeRecord):
                return False
            if not subtyping and len(a.props) != len(props):
                return False
            return _relate_props(a.props, props, seen, binders, relation)
        case TypeUnion(variants):
            if not isinstance(a, TypeUnion):
                return False
            if not subtyping and len(a.variants) != len(variants):
                return False
            return _relate_variants(a.variants, b, seen, binders, relation)
        case TypeForall(params, body):
            if not isinstance(a, TypeForall) or len(a.params) != len(params):
                return False
            return _relate(a.body, body, seen, _bind(binders, a.params, params), relation)
        case TypeVar(name):
            if not isinstance(a, TypeVar):
                return False
            same = _same_binder(a.name, name, binders)
            if same is None:
                raise UnknownIdentifier(a.name, a.location, kind="type variable")
            return same
        case TypeRef(name):
            raise UnknownIdentifier(name, b.location, kind="type")
        case _:
            raise TypeError(f"Unknown type: {b!r}")


def _relate_props(
    pa: tuple[Property, ...],
    pb: tuple[Property, ...],
    seen: Seen,
    binders: Binders,
    relation: Relation,
) -> bool:
    """Every property required by the right side exists on the left with a related type."""
    for prop in pb:
        found = _find(pa, prop.name)
        if found is None:
            return False
        if not _relate(found.type, prop.type, seen, binders, relation):
            return False
    return True


def _relate_variants(
    va: tuple[Variant, ...],
    b: TypeUnion,
    seen: Seen,
    binders: Binders,
    relation: Relation,
) -> bool:
    """Every variant on the left exists on the right with a related payload."""
    for variant in va:
        found = b.find(variant.label)
        if found is None:
            return False
        if relation is Relation.EQUAL and len(variant.props) != len(found.props):
            return False
        if not _relate_props(variant.props, found.props, seen, binders, relation):
            return False
    return True
