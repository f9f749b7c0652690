"""Typing contexts for tinyts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from tinyts.core.types import Param, Type


@dataclass(frozen=True)
class Context:
    """Typing context Γ with term and type variables.

    - term_vars: Types of bound term variables, by name
    - type_vars: Rigid type variables in scope (by name)

    Contexts are never updated in place: every extension returns a new
    context and leaves the receiver as it was.
    """

    term_vars: Mapping[str, Type] = field(default_factory=dict)
    type_vars: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "term_vars", MappingProxyType(dict(self.term_vars)))
        object.__setattr__(self, "type_vars", frozenset(self.type_vars))

    @staticmethod
    def empty() -> "Context":
        """Create an empty context."""
        return Context()

    def lookup_type(self, name: str) -> Type:
        """Look up the type of a variable by name.

        Raises:
            KeyError: If the variable is not bound
        """
        return self.term_vars[name]

    def __contains__(self, name: object) -> bool:
        return name in self.term_vars

    def extend_term(self, name: str, ty: Type) -> "Context":
        """Extend context with a new term variable binding.

        A binding for an existing name shadows it in the new context only.
        """
        return Context({**self.term_vars, name: ty}, self.type_vars)

    def extend_terms(self, params: Iterable[Param]) -> "Context":
        """Extend context with one binding per function parameter."""
        new_vars = dict(self.term_vars)
        for param in params:
            new_vars[param.name] = param.type
        return Context(new_vars, self.type_vars)

    def extend_type(self, *names: str) -> "Context":
        """Extend context with rigid type variables."""
        return Context(self.term_vars, self.type_vars | set(names))

    def __len__(self) -> int:
        """Return the number of term variables in context."""
        return len(self.term_vars)

    def __str__(self) -> str:
        terms = ", ".join(f"{name}: {ty}" for name, ty in self.term_vars.items())
        types = ", ".join(sorted(self.type_vars))
        return f"Context(terms=[{terms}], types=[{types}])"
