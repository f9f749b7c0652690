"""Term AST for tinyts.

Terms are produced by the front end with every binding site annotated and
every alias left as a TypeRef for the checker to expand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from tinyts.core.types import Param, Type
from tinyts.utils.location import SourceLocation


class Term:
    """Base class for terms."""

    location: SourceLocation | None


# =============================================================================
# Literals and operators
# =============================================================================


@dataclass(frozen=True)
class BoolLit(Term):
    """true / false"""

    value: bool
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class NumberLit(Term):
    """Number literal: 42"""

    value: float
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLit(Term):
    """String literal: "hello" """

    value: str
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Undefined(Term):
    """undefined"""

    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "undefined"


@dataclass(frozen=True)
class If(Term):
    """Conditional: cond ? thn : els (also if/else statements)."""

    cond: Term
    thn: Term
    els: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.cond} ? {self.thn} : {self.els})"


ARITH_OPS = ("+", "-", "*", "/", "%")
COMPARE_OPS = ("===", "!==", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class Arith(Term):
    """Arithmetic: left op right, op one of ARITH_OPS."""

    op: str
    left: Term
    right: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Compare(Term):
    """Comparison: left op right, op one of COMPARE_OPS."""

    op: str
    left: Term
    right: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Not(Term):
    """Logical negation: !term"""

    term: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"!{self.term}"


# =============================================================================
# Variables, functions and bindings
# =============================================================================


@dataclass(frozen=True)
class Var(Term):
    """Variable reference by name."""

    name: str
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Func(Term):
    """Function literal: (x0: T0, ...): R => body

    ret_type is None when the return type is left to be taken from the body.
    """

    params: tuple[Param, ...]
    body: Term
    ret_type: Type | None = None
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        ret = f": {self.ret_type}" if self.ret_type is not None else ""
        return f"(({params}){ret} => {self.body})"


@dataclass(frozen=True)
class Call(Term):
    """Function call: func(arg0, ...)."""

    func: Term
    args: tuple[Term, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.func}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Seq(Term):
    """Statement sequence: body; rest"""

    body: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.body}; {self.rest}"


@dataclass(frozen=True)
class Const(Term):
    """Immutable binding: const name = init; rest"""

    name: str
    init: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"const {self.name} = {self.init}; {self.rest}"


@dataclass(frozen=True)
class Assign(Term):
    """Mutable binding or update: name = value; rest

    Updating an existing binding never changes its type.
    """

    name: str
    value: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.name} = {self.value}; {self.rest}"


@dataclass(frozen=True)
class RecFunc(Term):
    """Recursive function declaration followed by the rest of the block.

    function name(x0: T0, ...): R { body }; rest
    """

    name: str
    params: tuple[Param, ...]
    ret_type: Type
    body: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"function {self.name}({params}): {self.ret_type} {{ {self.body} }}; {self.rest}"


# =============================================================================
# Iteration
# =============================================================================


@dataclass(frozen=True)
class For(Term):
    """Index loop: for (let index = 0; index < array.length; index++) body; rest"""

    index: str
    array: Term
    body: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"for ({self.index} in {self.array}) {{ {self.body} }}; {self.rest}"


@dataclass(frozen=True)
class ForOf(Term):
    """Element loop: for (const var of array) body; rest"""

    var: str
    array: Term
    body: Term
    rest: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"for (const {self.var} of {self.array}) {{ {self.body} }}; {self.rest}"


# =============================================================================
# Arrays and maps
# =============================================================================


@dataclass(frozen=True)
class ArrayNew(Term):
    """Empty array with an explicit type: <T[]>[]"""

    type: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"<{self.type}>[]"


@dataclass(frozen=True)
class ArrayExt(Term):
    """Array extended by one element: [...array, value]"""

    array: Term
    value: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"[...{self.array}, {self.value}]"


@dataclass(frozen=True)
class MapNew(Term):
    """Empty map with an explicit type: <Record<string, T>>{}"""

    type: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"<{self.type}>{{}}"


@dataclass(frozen=True)
class MapCopy(Term):
    """Shallow copy of a map: { ...map }"""

    map: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{{ ...{self.map} }}"


@dataclass(frozen=True)
class MapExt(Term):
    """Map extended by one entry: { ...map, [key]: value }"""

    map: Term
    key: Term
    value: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{{ ...{self.map}, [{self.key}]: {self.value} }}"


@dataclass(frozen=True)
class MapIn(Term):
    """Key membership: key in map"""

    map: Term
    key: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.key} in {self.map})"


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class PropertyTerm:
    """Record or variant field initialiser: name: term"""

    name: str
    term: Term

    def __str__(self) -> str:
        return f"{self.name}: {self.term}"


@dataclass(frozen=True)
class RecordNew(Term):
    """Record literal: { s0: t0, ... }"""

    props: tuple[PropertyTerm, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "{ " + ", ".join(str(p) for p in self.props) + " }"


@dataclass(frozen=True)
class RecordExt(Term):
    """Record spread with added or overridden fields: { ...record, s0: t0, ... }"""

    record: Term
    props: tuple[PropertyTerm, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        fields = [f"...{self.record}"] + [str(p) for p in self.props]
        return "{ " + ", ".join(fields) + " }"


@dataclass(frozen=True)
class Member(Term):
    """Member access: obj.name"""

    obj: Term
    name: str
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.obj}.{self.name}"


@dataclass(frozen=True)
class Index(Term):
    """Indexing: base[index]"""

    base: Term
    index: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.base}[{self.index}]"


# =============================================================================
# Tagged unions
# =============================================================================


@dataclass(frozen=True)
class UnionNew(Term):
    """Tagged union value: <as_type>{ tag: "label", s0: t0, ... }"""

    label: str
    props: tuple[PropertyTerm, ...]
    as_type: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        fields = [f'tag: "{self.label}"'] + [str(p) for p in self.props]
        return f"<{self.as_type}>{{ " + ", ".join(fields) + " }"


@dataclass(frozen=True)
class UnionWiden(Term):
    """Widening of a union value to a union with more variants: <as_type>term"""

    term: Term
    as_type: Type
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"<{self.as_type}>{self.term}"


@dataclass(frozen=True)
class Clause:
    """Switch clause: case "label": body"""

    label: str
    body: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f'case "{self.label}": {self.body}'


@dataclass(frozen=True)
class Switch(Term):
    """Discrimination on a union-typed variable: switch (var_name.tag) { ... }

    default is None when the switch has no default clause, in which case
    the clauses must cover every variant.
    """

    var_name: str
    clauses: tuple[Clause, ...]
    default: Term | None = None
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        parts = [str(c) for c in self.clauses]
        if self.default is not None:
            parts.append(f"default: {self.default}")
        return f"switch ({self.var_name}.tag) {{ " + "; ".join(parts) + " }"


# =============================================================================
# Polymorphism
# =============================================================================


@dataclass(frozen=True)
class TAbs(Term):
    """Type abstraction: <X0, ...>body"""

    type_params: tuple[str, ...]
    body: Term
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"<{', '.join(self.type_params)}>{self.body}"


@dataclass(frozen=True)
class TApp(Term):
    """Type application: func<T0, ...>"""

    func: Term
    type_args: tuple[Type, ...]
    location: SourceLocation | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.func}<{', '.join(str(t) for t in self.type_args)}>"


# Export the term union for type checking
TermRepr = Union[
    BoolLit,
    NumberLit,
    StringLit,
    Undefined,
    If,
    Arith,
    Compare,
    Not,
    Var,
    Func,
    Call,
    Seq,
    Const,
    Assign,
    RecFunc,
    For,
    ForOf,
    ArrayNew,
    ArrayExt,
    MapNew,
    MapCopy,
    MapExt,
    MapIn,
    RecordNew,
    RecordExt,
    Member,
    Index,
    UnionNew,
    UnionWiden,
    Switch,
    TAbs,
    TApp,
]
