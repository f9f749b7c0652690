"""Syntax-directed type checker for tinyts."""

from __future__ import annotations

import sys
from collections.abc import Mapping

from loguru import logger

from tinyts.config.settings import load_settings
from tinyts.core.aliases import AliasMap, expand_aliases
from tinyts.core.ast import (
    COMPARE_OPS,
    Arith,
    ArrayExt,
    ArrayNew,
    Assign,
    BoolLit,
    Call,
    Clause,
    Compare,
    Const,
    For,
    ForOf,
    Func,
    If,
    Index,
    MapCopy,
    MapExt,
    MapIn,
    MapNew,
    Member,
    Not,
    NumberLit,
    PropertyTerm,
    RecFunc,
    RecordExt,
    RecordNew,
    Seq,
    StringLit,
    Switch,
    TAbs,
    TApp,
    Term,
    Undefined,
    UnionNew,
    UnionWiden,
    Var,
)
from tinyts.core.context import Context
from tinyts.core.equiv import is_subtype, join, type_eq
from tinyts.core.errors import (
    ArityMismatch,
    InconsistentBranches,
    MalformedAnnotation,
    NonExhaustiveUnion,
    ResourceExhausted,
    TypeMismatch,
    UnknownIdentifier,
    UnknownMember,
)
from tinyts.core.narrowing import narrow
from tinyts.core.subst import instantiate, simplify
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
    TypeRecord,
    TypeString,
    TypeUnion,
    TypeUnknown,
)

ORDERING_OPS = frozenset(COMPARE_OPS) - {"===", "!=="}


class TypeChecker:
    """Type checker for tinyts terms.

    Every binding site is annotated, so checking is a single bottom-up pass:
    each term's type is computed from the types of its subterms.
    """

    def __init__(self, subtyping: bool = False, aliases: AliasMap | None = None):
        """Initialize the checker.

        Args:
            subtyping: Accept subtypes wherever a value is passed or stored
                (arguments, annotated returns, properties). Without it those
                places require equal types.
            aliases: Type alias declarations used to expand annotations.
        """
        self.subtyping = subtyping
        self.aliases = aliases if aliases is not None else {}

    def check(self, term: Term, ctx: Context | None = None) -> Type:
        """Compute the type of a term.

        Args:
            term: Term to check
            ctx: Typing context, empty by default

        Returns:
            The type of term

        Raises:
            TypeCheckError: At the first ill-typed subterm
            ResourceExhausted: If term or its types nest too deeply
        """
        if ctx is None:
            ctx = Context.empty()
        try:
            return self._check(term, ctx)
        except RecursionError as e:
            raise ResourceExhausted("term is nested too deeply to check", term.location) from e

    def _check(self, term: Term, ctx: Context) -> Type:
        match term:
            case BoolLit():
                return TypeBool()

            case NumberLit():
                return TypeNumber()

            case StringLit():
                return TypeString()

            case Undefined():
                return TypeUnknown()

            case Var(name):
                try:
                    return ctx.lookup_type(name)
                except KeyError as e:
                    raise UnknownIdentifier(name, term.location) from e

            case If(cond, thn, els):
                branches = narrow(cond, ctx)
                if branches is None:
                    self._expect_bool(self._check(cond, ctx), cond)
                    branches = (ctx, ctx)
                then_ctx, else_ctx = branches
                then_ty = self._check(thn, then_ctx)
                else_ty = self._check(els, else_ctx)
                return self._join(then_ty, else_ty, ctx, term, "then and else branches differ")

            case Arith(op, left, right):
                left_ty = self._check(left, ctx)
                right_ty = self._check(right, ctx)
                if op == "+" and self._is_string(left_ty) and self._is_string(right_ty):
                    return TypeString()
                if not type_eq(left_ty, TypeNumber(), ctx.type_vars):
                    raise TypeMismatch("number expected", left.location, expected=TypeNumber(), actual=left_ty)
                if not type_eq(right_ty, TypeNumber(), ctx.type_vars):
                    raise TypeMismatch("number expected", right.location, expected=TypeNumber(), actual=right_ty)
                return TypeNumber()

            case Compare(op, left, right):
                left_ty = self._check(left, ctx)
                right_ty = self._check(right, ctx)
                if not type_eq(left_ty, right_ty, ctx.type_vars):
                    raise TypeMismatch(
                        f"cannot compare {left_ty} with {right_ty}", term.location, expected=left_ty, actual=right_ty
                    )
                if op in ORDERING_OPS:
                    head = simplify(left_ty)
                    if not isinstance(head, TypeNumber | TypeString):
                        raise TypeMismatch("number or string expected", left.location, actual=left_ty)
                return TypeBool()

            case Not(operand):
                self._expect_bool(self._check(operand, ctx), operand)
                return TypeBool()

            case Func(params, body, ret_type):
                params = self._params(params, ctx, term)
                body_ty = self._check(body, ctx.extend_terms(params))
                if ret_type is None:
                    return TypeArrow(params, body_ty, term.location)
                ret = self._annotation(ret_type, ctx)
                self._expect_assignable(body_ty, ret, ctx, body, "wrong return type")
                return TypeArrow(params, ret, term.location)

            case Call(func, args):
                func_ty = self._check(func, ctx)
                arrow = simplify(func_ty)
                if not isinstance(arrow, TypeArrow):
                    raise TypeMismatch("function expected", func.location, actual=func_ty)
                if len(args) != len(arrow.params):
                    raise ArityMismatch(
                        "wrong number of arguments", term.location, expected=len(arrow.params), actual=len(args)
                    )
                for arg, param in zip(args, arrow.params):
                    arg_ty = self._check(arg, ctx)
                    self._expect_assignable(arg_ty, param.type, ctx, arg, f"parameter type mismatch for {param.name}")
                return arrow.ret

            case Seq(body, rest):
                self._check(body, ctx)
                return self._check(rest, ctx)

            case Const(name, init, rest):
                return self._check(rest, self._bind(name, init, ctx))

            case Assign(name, value, rest):
                if name not in ctx:
                    return self._check(rest, self._bind(name, value, ctx))
                declared = ctx.lookup_type(name)
                value_ty = self._check(value, ctx)
                self._expect_assignable(value_ty, declared, ctx, value, f"cannot assign to {name}")
                return self._check(rest, ctx)

            case RecFunc(name, params, ret_type, body, rest):
                params = self._params(params, ctx, term)
                ret = self._annotation(ret_type, ctx)
                func_ty = TypeArrow(params, ret, term.location)
                outer = ctx.extend_term(name, func_ty)
                body_ty = self._check(body, outer.extend_terms(params))
                self._expect_assignable(body_ty, ret, ctx, body, "wrong return type")
                return self._check(rest, outer)

            case For(index, array, body, rest):
                self._expect_array(self._check(array, ctx), array)
                body_ty = self._check(body, ctx.extend_term(index, TypeNumber()))
                rest_ty = self._check(rest, ctx)
                return self._join(body_ty, rest_ty, ctx, term, "loop body and rest differ")

            case ForOf(var, array, body, rest):
                elem = self._expect_array(self._check(array, ctx), array).elem
                body_ty = self._check(body, ctx.extend_term(var, elem))
                rest_ty = self._check(rest, ctx)
                return self._join(body_ty, rest_ty, ctx, term, "loop body and rest differ")

            case ArrayNew(ann):
                ty = self._annotation(ann, ctx)
                if not isinstance(simplify(ty), TypeArray):
                    raise MalformedAnnotation(f"array type expected, got {ty}", term.location)
                return ty

            case ArrayExt(array, value):
                array_ty = self._check(array, ctx)
                elem = self._expect_array(array_ty, array).elem
                self._expect_assignable(self._check(value, ctx), elem, ctx, value, "wrong element type")
                return array_ty

            case MapNew(ann):
                ty = self._annotation(ann, ctx)
                if not isinstance(simplify(ty), TypeMap):
                    raise MalformedAnnotation(f"map type expected, got {ty}", term.location)
                return ty

            case MapCopy(m):
                map_ty = self._check(m, ctx)
                self._expect_map(map_ty, m)
                return map_ty

            case MapExt(m, key, value):
                map_ty = self._check(m, ctx)
                elem = self._expect_map(map_ty, m).elem
                self._expect_string(self._check(key, ctx), ctx, key)
                self._expect_assignable(self._check(value, ctx), elem, ctx, value, "wrong value type")
                return map_ty

            case MapIn(m, key):
                self._expect_map(self._check(m, ctx), m)
                self._expect_string(self._check(key, ctx), ctx, key)
                return TypeBool()

            case RecordNew(props):
                return TypeRecord(self._check_props(props, ctx), term.location)

            case RecordExt(record, props):
                record_ty = self._check(record, ctx)
                base = simplify(record_ty)
                if not isinstance(base, TypeRecord):
                    raise TypeMismatch("record expected", record.location, actual=record_ty)
                extra = self._check_props(props, ctx)
                overridden = {p.name for p in extra}
                kept = tuple(p for p in base.props if p.name not in overridden)
                return TypeRecord(kept + extra, term.location)

            case Member(obj, name):
                return self._member(self._check(obj, ctx), name, term)

            case Index(base, index):
                return self._index(self._check(base, ctx), index, ctx, term)

            case UnionNew(label, props, as_type):
                ty = self._annotation(as_type, ctx)
                union = simplify(ty)
                if not isinstance(union, TypeUnion):
                    raise MalformedAnnotation(f"union type expected, got {ty}", term.location)
                variant = union.find(label)
                if variant is None:
                    raise UnknownMember(f"unknown variant label: {label}", label, term.location)
                supplied = set()
                for prop in props:
                    declared = variant.find(prop.name)
                    if declared is None:
                        raise UnknownMember(f"unknown property: {prop.name}", prop.name, prop.term.location)
                    prop_ty = self._check(prop.term, ctx)
                    self._expect_assignable(prop_ty, declared.type, ctx, prop.term, f"wrong type for {prop.name}")
                    supplied.add(prop.name)
                for declared in variant.props:
                    if declared.name not in supplied and not _omittable(declared.type):
                        raise TypeMismatch(
                            f"property {declared.name} is missing", term.location, expected=declared.type
                        )
                return ty

            case UnionWiden(inner, as_type):
                source_ty = self._check(inner, ctx)
                source = simplify(source_ty)
                if not isinstance(source, TypeUnion):
                    raise TypeMismatch("union expected", inner.location, actual=source_ty)
                ty = self._annotation(as_type, ctx)
                target = simplify(ty)
                if not isinstance(target, TypeUnion):
                    raise MalformedAnnotation(f"union type expected, got {ty}", term.location)
                for variant in source.variants:
                    found = target.find(variant.label)
                    if found is None:
                        raise UnknownMember(f"unknown variant label: {variant.label}", variant.label, term.location)
                    if not type_eq(TypeRecord(variant.props), TypeRecord(found.props), ctx.type_vars):
                        raise TypeMismatch(f"payload of {variant.label} differs", term.location)
                return ty

            case Switch(var_name, clauses, default):
                return self._switch(term, var_name, clauses, default, ctx)

            case TAbs(type_params, body):
                if len(set(type_params)) != len(type_params):
                    raise MalformedAnnotation("duplicate type parameter", term.location)
                shadowed = [p for p in type_params if p in ctx.type_vars]
                if shadowed:
                    raise MalformedAnnotation(f"type parameter {shadowed[0]} is already in scope", term.location)
                body_ty = self._check(body, ctx.extend_type(*type_params))
                return TypeForall(type_params, body_ty, term.location)

            case TApp(func, type_args):
                func_ty = self._check(func, ctx)
                forall = simplify(func_ty)
                if not isinstance(forall, TypeForall):
                    raise TypeMismatch("generic function expected", func.location, actual=func_ty)
                if len(type_args) != len(forall.params):
                    raise ArityMismatch(
                        "wrong number of type arguments",
                        term.location,
                        expected=len(forall.params),
                        actual=len(type_args),
                    )
                args = [self._annotation(arg, ctx) for arg in type_args]
                return instantiate(forall, args)

            case _:
                raise TypeError(f"Unknown term: {term!r}")

    # =========================================================================
    # Binding helpers
    # =========================================================================

    def _bind(self, name: str, init: Term, ctx: Context) -> Context:
        """Bind name to the type of init; an annotated function may refer to itself."""
        match init:
            case Func(params, _, ret_type) if ret_type is not None:
                self_ty = TypeArrow(self._params(params, ctx, init), self._annotation(ret_type, ctx), init.location)
                inner = ctx.extend_term(name, self_ty)
                self._check(init, inner)
                return inner
            case _:
                return ctx.extend_term(name, self._check(init, ctx))

    def _params(self, params: tuple[Param, ...], ctx: Context, node: Term) -> tuple[Param, ...]:
        names = [p.name for p in params]
        if len(set(names)) != len(names):
            raise MalformedAnnotation(f"duplicate parameter in ({', '.join(names)})", node.location)
        return tuple(Param(p.name, self._annotation(p.type, ctx)) for p in params)

    def _check_props(self, props: tuple[PropertyTerm, ...], ctx: Context) -> tuple[Property, ...]:
        seen: set[str] = set()
        result = []
        for prop in props:
            if prop.name in seen:
                raise TypeMismatch(f"duplicate property: {prop.name}", prop.term.location)
            seen.add(prop.name)
            result.append(Property(prop.name, self._check(prop.term, ctx)))
        return tuple(result)

    def _annotation(self, ty: Type, ctx: Context) -> Type:
        """Expand aliases in an annotation and reject type variables out of scope."""
        expanded = expand_aliases(ty, self.aliases, ctx.type_vars)
        unbound = expanded.free_vars() - ctx.type_vars
        if unbound:
            raise UnknownIdentifier(sorted(unbound)[0], ty.location, kind="type")
        return expanded

    # =========================================================================
    # Members, indexing and switches
    # =========================================================================

    def _member(self, obj_ty: Type, name: str, term: Member) -> Type:
        head = simplify(obj_ty)
        match head:
            case TypeRecord():
                prop = head.find(name)
                if prop is not None:
                    return prop.type
            case TypeUnion(variants):
                if name == "tag":
                    return TypeString()
                # Payload fields are only visible once the union is down to one variant
                if len(variants) == 1:
                    prop = variants[0].find(name)
                    if prop is not None:
                        return prop.type
            case TypeArray() | TypeString():
                if name == "length":
                    return TypeNumber()
        raise UnknownMember(f"unknown property {name} on {obj_ty}", name, term.location)

    def _index(self, base_ty: Type, index: Term, ctx: Context, term: Index) -> Type:
        head = simplify(base_ty)
        match head:
            case TypeArray(elem):
                index_ty = self._check(index, ctx)
                if not type_eq(index_ty, TypeNumber(), ctx.type_vars):
                    raise TypeMismatch("number expected", index.location, expected=TypeNumber(), actual=index_ty)
                return elem
            case TypeMap(elem):
                self._expect_string(self._check(index, ctx), ctx, index)
                return elem
            case TypeRecord():
                if not isinstance(index, StringLit):
                    raise TypeMismatch("string literal expected", index.location)
                prop = head.find(index.value)
                if prop is None:
                    raise UnknownMember(f"unknown property {index.value} on {base_ty}", index.value, term.location)
                return prop.type
            case _:
                raise TypeMismatch("array, map or record expected", term.location, actual=base_ty)

    def _switch(
        self, term: Switch, var_name: str, clauses: tuple[Clause, ...], default: Term | None, ctx: Context
    ) -> Type:
        try:
            var_ty = ctx.lookup_type(var_name)
        except KeyError as e:
            raise UnknownIdentifier(var_name, term.location) from e
        union = simplify(var_ty)
        if not isinstance(union, TypeUnion):
            raise TypeMismatch("union expected", term.location, actual=var_ty)

        result: Type = TypeUnknown()
        listed: set[str] = set()
        for clause in clauses:
            if clause.label in listed:
                raise ArityMismatch(f"duplicate case: {clause.label}", clause.location)
            variant = union.find(clause.label)
            if variant is None:
                raise UnknownMember(f"unknown variant label: {clause.label}", clause.label, clause.location)
            listed.add(clause.label)
            clause_ty = self._check(clause.body, ctx.extend_term(var_name, TypeUnion((variant,))))
            result = self._join(result, clause_ty, ctx, term, "switch cases differ")

        missing = [label for label in union.labels if label not in listed]
        if default is None:
            if missing:
                raise NonExhaustiveUnion(missing, term.location)
            return result
        logger.debug("checker.switch_default var={} remaining={}", var_name, missing)
        remaining = tuple(union.find(label) for label in missing)
        default_ty = self._check(default, ctx.extend_term(var_name, TypeUnion(remaining)))
        return self._join(result, default_ty, ctx, term, "switch cases differ")

    # =========================================================================
    # Shape and compatibility checks
    # =========================================================================

    def _assignable(self, actual: Type, expected: Type, ctx: Context) -> bool:
        if self.subtyping:
            return is_subtype(actual, expected, ctx.type_vars)
        return type_eq(actual, expected, ctx.type_vars)

    def _expect_assignable(self, actual: Type, expected: Type, ctx: Context, node: Term, message: str) -> None:
        if not self._assignable(actual, expected, ctx):
            raise TypeMismatch(
                f"{message}: expected {expected}, got {actual}", node.location, expected=expected, actual=actual
            )

    def _join(self, a: Type, b: Type, ctx: Context, node: Term, message: str) -> Type:
        result = join(a, b, ctx.type_vars)
        if result is None:
            raise InconsistentBranches(message, a, b, node.location)
        return result

    def _expect_bool(self, ty: Type, node: Term) -> None:
        if not type_eq(ty, TypeBool()):
            raise TypeMismatch("boolean expected", node.location, expected=TypeBool(), actual=ty)

    def _is_string(self, ty: Type) -> bool:
        return isinstance(simplify(ty), TypeString)

    def _expect_string(self, ty: Type, ctx: Context, node: Term) -> None:
        if not type_eq(ty, TypeString(), ctx.type_vars):
            raise TypeMismatch("string expected", node.location, expected=TypeString(), actual=ty)

    def _expect_array(self, ty: Type, node: Term) -> TypeArray:
        head = simplify(ty)
        if not isinstance(head, TypeArray):
            raise TypeMismatch("array expected", node.location, actual=ty)
        return head

    def _expect_map(self, ty: Type, node: Term) -> TypeMap:
        head = simplify(ty)
        if not isinstance(head, TypeMap):
            raise TypeMismatch("map expected", node.location, actual=ty)
        return head


def _omittable(ty: Type) -> bool:
    return isinstance(simplify(ty), TypeOptional | TypeUnknown)


def typecheck(
    term: Term,
    env: Mapping[str, Type] | Context | None = None,
    *,
    aliases: AliasMap | None = None,
    subtyping: bool | None = None,
) -> Type:
    """Check a closed term and return its type.

    Args:
        term: Term produced by the front end
        env: Types of predeclared variables, or a ready-made context
        aliases: Type alias declarations referenced by annotations
        subtyping: Override the subtyping setting from the environment

    Raises:
        TypeCheckError: At the first ill-typed subterm
    """
    settings = load_settings()
    if subtyping is None:
        subtyping = settings.subtyping
    checker = TypeChecker(subtyping=subtyping, aliases=aliases)

    if isinstance(env, Context):
        ctx = env
    else:
        ctx = Context({name: expand_aliases(ty, checker.aliases) for name, ty in (env or {}).items()})

    previous_limit = sys.getrecursionlimit()
    if settings.recursion_limit is not None and settings.recursion_limit > previous_limit:
        sys.setrecursionlimit(settings.recursion_limit)
    try:
        logger.debug("checker.start subtyping={} vars={}", subtyping, len(ctx))
        ty = checker.check(term, ctx)
        logger.debug("checker.done type={}", ty)
        return ty
    finally:
        sys.setrecursionlimit(previous_limit)
