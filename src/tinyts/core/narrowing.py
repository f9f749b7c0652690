"""Flow-sensitive narrowing of optional variables at conditionals."""

from __future__ import annotations

from loguru import logger

from tinyts.core.ast import Not, Term, Var
from tinyts.core.context import Context
from tinyts.core.subst import simplify
from tinyts.core.types import TypeOptional


def narrow(cond: Term, ctx: Context) -> tuple[Context, Context] | None:
    """Refine the branch contexts of `if (x)` and `if (!x)` when x is optional.

    Returns (then_ctx, else_ctx). The branch taken when x is present sees x
    with the optional wrapper removed; the other branch keeps the original
    type. Returns None when the condition is not a test of an optional
    variable.
    """
    match cond:
        case Var(name):
            negated = False
        case Not(Var(name)):
            negated = True
        case _:
            return None

    if name not in ctx:
        return None
    ty = simplify(ctx.lookup_type(name))
    if not isinstance(ty, TypeOptional):
        return None

    present = ctx.extend_term(name, ty.elem)
    logger.debug("narrowing.refine var={} type={} negated={}", name, ty.elem, negated)
    if negated:
        return ctx, present
    return present, ctx
