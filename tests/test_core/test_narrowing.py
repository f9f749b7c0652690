"""Tests for optional narrowing."""

from tinyts.core.ast import Compare, Not, NumberLit, Var
from tinyts.core.context import Context
from tinyts.core.narrowing import narrow
from tinyts.core.types import TypeNumber, TypeOptional


class TestNarrow:
    """Tests for narrow."""

    def test_positive_test(self):
        """if (x): x is present in the then branch."""
        ctx = Context.empty().extend_term("x", TypeOptional(TypeNumber()))
        then_ctx, else_ctx = narrow(Var("x"), ctx)
        assert then_ctx.lookup_type("x") == TypeNumber()
        assert else_ctx.lookup_type("x") == TypeOptional(TypeNumber())

    def test_negated_test(self):
        """if (!x): x is present in the else branch."""
        ctx = Context.empty().extend_term("x", TypeOptional(TypeNumber()))
        then_ctx, else_ctx = narrow(Not(Var("x")), ctx)
        assert then_ctx.lookup_type("x") == TypeOptional(TypeNumber())
        assert else_ctx.lookup_type("x") == TypeNumber()

    def test_parent_context_unchanged(self):
        """Narrowing never changes the context it starts from."""
        ctx = Context.empty().extend_term("x", TypeOptional(TypeNumber()))
        narrow(Var("x"), ctx)
        assert ctx.lookup_type("x") == TypeOptional(TypeNumber())

    def test_recursive_optional(self, number_list):
        """A recursive optional is unfolded before narrowing."""
        ctx = Context.empty().extend_term("xs", number_list)
        then_ctx, _ = narrow(Var("xs"), ctx)
        assert then_ctx.lookup_type("xs").find("head") is not None

    def test_not_optional(self):
        """Variables of other types are not narrowed."""
        ctx = Context.empty().extend_term("n", TypeNumber())
        assert narrow(Var("n"), ctx) is None

    def test_other_conditions(self):
        """Only bare variable tests narrow."""
        ctx = Context.empty().extend_term("x", TypeOptional(TypeNumber()))
        assert narrow(Compare("===", Var("x"), NumberLit(1)), ctx) is None
        assert narrow(Not(Not(Var("x"))), ctx) is None

    def test_unbound_variable(self):
        """Unbound variables are left for the checker to report."""
        assert narrow(Var("missing"), Context.empty()) is None
