"""Error types for the tinyts type checker.

Every failure is raised at the first offending node and carries that node's
location; the checker never recovers or collects several errors.
"""

from __future__ import annotations

from tinyts.core.types import Type
from tinyts.utils.location import SourceLocation


class TypeCheckError(Exception):
    """Base class for type errors."""

    location: SourceLocation | None

    def __init__(self, message: str, location: SourceLocation | None = None):
        super().__init__(message)
        self.message = message
        self.location = location


class TypeMismatch(TypeCheckError):
    """Expected one shape of type, found another."""

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        expected: Type | None = None,
        actual: Type | None = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(message, location)


class UnknownIdentifier(TypeCheckError):
    """Variable, type variable or type alias not in scope."""

    def __init__(self, name: str, location: SourceLocation | None = None, *, kind: str = "variable"):
        self.name = name
        self.kind = kind
        super().__init__(f"unknown {kind}: {name}", location)


class ArityMismatch(TypeCheckError):
    """Wrong number of arguments, type arguments or union clauses."""

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        expected: int | None = None,
        actual: int | None = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(message, location)


class UnknownMember(TypeCheckError):
    """Property, variant label or built-in member absent from the receiver's type."""

    def __init__(self, message: str, name: str, location: SourceLocation | None = None):
        self.name = name
        super().__init__(message, location)


class NonExhaustiveUnion(TypeCheckError):
    """A switch omits variants and has no default clause."""

    def __init__(self, missing: list[str], location: SourceLocation | None = None):
        self.missing = missing
        super().__init__(f"switch case is not exhaustive: missing {', '.join(missing)}", location)


class InconsistentBranches(TypeCheckError):
    """Two branches of a join point produce types that are not equal."""

    def __init__(self, message: str, left: Type, right: Type, location: SourceLocation | None = None):
        self.left = left
        self.right = right
        super().__init__(f"{message}: {left} vs {right}", location)


class MalformedAnnotation(TypeCheckError):
    """A required annotation is absent or has the wrong shape."""


class ResourceExhausted(TypeCheckError):
    """The input nests deeper than the host stack allows."""
