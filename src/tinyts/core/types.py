"""Type representations for tinyts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from tinyts.utils.location import SourceLocation


class Type:
    """Base class for types."""

    location: SourceLocation | None

    def free_vars(self) -> set[str]:
        """Return set of free type variable names."""
        raise NotImplementedError


@dataclass(frozen=True)
class Param:
    """Named function parameter: name: T."""

    name: str
    type: Type

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


@dataclass(frozen=True)
class Property:
    """Record property or variant payload field: name: T."""

    name: str
    type: Type

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


@dataclass(frozen=True)
class Variant:
    """One case of a tagged union: { tag: "label", props... }."""

    label: str
    props: tuple[Property, ...] = ()

    def find(self, name: str) -> Property | None:
        return _find_prop(self.props, name)

    def __str__(self) -> str:
        fields = [f'tag: "{self.label}"'] + [str(p) for p in self.props]
        return "{ " + ", ".join(fields) + " }"


def _find_prop(props: tuple[Property, ...], name: str) -> Property | None:
    for prop in props:
        if prop.name == name:
            return prop
    return None


@dataclass(frozen=True)
class TypeBool(Type):
    """boolean"""

    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "boolean"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class TypeNumber(Type):
    """number"""

    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "number"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class TypeString(Type):
    """string"""

    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "string"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class TypeUnknown(Type):
    """Placeholder compatible with every type.

    This is the type of `undefined`, and what a branch without a value
    contributes to a join.
    """

    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "undefined"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class TypeOptional(Type):
    """Optional value: T | undefined."""

    elem: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{_wrap(self.elem)} | undefined"

    def free_vars(self) -> set[str]:
        return self.elem.free_vars()


@dataclass(frozen=True)
class TypeArray(Type):
    """Array type: T[]."""

    elem: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{_wrap(self.elem)}[]"

    def free_vars(self) -> set[str]:
        return self.elem.free_vars()


@dataclass(frozen=True)
class TypeMap(Type):
    """String-keyed map: Record<string, T>."""

    elem: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"Record<string, {self.elem}>"

    def free_vars(self) -> set[str]:
        return self.elem.free_vars()


@dataclass(frozen=True)
class TypeArrow(Type):
    """Function type: (x0: T0, ...) => T.

    Parameters are positional; their names are kept for display only.
    """

    params: tuple[Param, ...]
    ret: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"({params}) => {self.ret}"

    def free_vars(self) -> set[str]:
        result = self.ret.free_vars()
        for param in self.params:
            result |= param.type.free_vars()
        return result


@dataclass(frozen=True)
class TypeRecord(Type):
    """Structural record: { s0: T0, ... }."""

    props: tuple[Property, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def find(self, name: str) -> Property | None:
        return _find_prop(self.props, name)

    def __str__(self) -> str:
        if not self.props:
            return "{}"
        return "{ " + ", ".join(str(p) for p in self.props) + " }"

    def free_vars(self) -> set[str]:
        result: set[str] = set()
        for prop in self.props:
            result |= prop.type.free_vars()
        return result


@dataclass(frozen=True)
class TypeUnion(Type):
    """Closed tagged union: { tag: "a", ... } | { tag: "b", ... }."""

    variants: tuple[Variant, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def find(self, label: str) -> Variant | None:
        for variant in self.variants:
            if variant.label == label:
                return variant
        return None

    @property
    def labels(self) -> list[str]:
        return [v.label for v in self.variants]

    def __str__(self) -> str:
        if not self.variants:
            return "never"
        return "(" + " | ".join(str(v) for v in self.variants) + ")"

    def free_vars(self) -> set[str]:
        result: set[str] = set()
        for variant in self.variants:
            for prop in variant.props:
                result |= prop.type.free_vars()
        return result


@dataclass(frozen=True)
class TypeRec(Type):
    """Equi-recursive type: mu X. T, equal to its own unfolding."""

    name: str
    body: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"(mu {self.name}. {self.body})"

    def free_vars(self) -> set[str]:
        return self.body.free_vars() - {self.name}


@dataclass(frozen=True)
class TypeVar(Type):
    """Type variable bound by an enclosing TypeRec or TypeForall."""

    name: str
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name

    def free_vars(self) -> set[str]:
        return {self.name}


@dataclass(frozen=True)
class TypeForall(Type):
    """Type abstraction: <X0, ...>T."""

    params: tuple[str, ...]
    body: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"<{', '.join(self.params)}>{self.body}"

    def free_vars(self) -> set[str]:
        return self.body.free_vars() - set(self.params)


@dataclass(frozen=True)
class TypeRef(Type):
    """Unresolved reference to a type alias: Name or Name<T0, ...>.

    Produced by the front end; `expand_aliases` replaces every TypeRef
    before the type reaches the equivalence engine.
    """

    name: str
    args: tuple[Type, ...] = ()
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(str(a) for a in self.args)}>"

    def free_vars(self) -> set[str]:
        result: set[str] = set()
        for arg in self.args:
            result |= arg.free_vars()
        return result


def _wrap(ty: Type) -> str:
    match ty:
        case TypeArrow() | TypeOptional() | TypeForall():
            return f"({ty})"
        case _:
            return str(ty)


# Export the type union for type checking
TypeRepr = Union[
    TypeBool,
    TypeNumber,
    TypeString,
    TypeUnknown,
    TypeOptional,
    TypeArray,
    TypeMap,
    TypeArrow,
    TypeRecord,
    TypeUnion,
    TypeRec,
    TypeVar,
    TypeForall,
    TypeRef,
]
