"""Core language: AST, types, and type checker."""

from tinyts.core.aliases import TypeAlias, expand_aliases
from tinyts.core.ast import (
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
from tinyts.core.checker import TypeChecker, typecheck
from tinyts.core.context import Context
from tinyts.core.equiv import is_subtype, join, type_eq, type_eq_naive
from tinyts.core.errors import (
    ArityMismatch,
    InconsistentBranches,
    MalformedAnnotation,
    NonExhaustiveUnion,
    ResourceExhausted,
    TypeCheckError,
    TypeMismatch,
    UnknownIdentifier,
    UnknownMember,
)
from tinyts.core.narrowing import narrow
from tinyts.core.subst import fresh_name, instantiate, simplify, substitute, unfold
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

__all__ = [
    # AST
    "Term",
    "BoolLit",
    "NumberLit",
    "StringLit",
    "Undefined",
    "If",
    "Arith",
    "Compare",
    "Not",
    "Var",
    "Func",
    "Call",
    "Seq",
    "Const",
    "Assign",
    "RecFunc",
    "For",
    "ForOf",
    "ArrayNew",
    "ArrayExt",
    "MapNew",
    "MapCopy",
    "MapExt",
    "MapIn",
    "PropertyTerm",
    "RecordNew",
    "RecordExt",
    "Member",
    "Index",
    "UnionNew",
    "UnionWiden",
    "Clause",
    "Switch",
    "TAbs",
    "TApp",
    # Types
    "Type",
    "Param",
    "Property",
    "Variant",
    "TypeBool",
    "TypeNumber",
    "TypeString",
    "TypeUnknown",
    "TypeOptional",
    "TypeArray",
    "TypeMap",
    "TypeArrow",
    "TypeRecord",
    "TypeUnion",
    "TypeRec",
    "TypeVar",
    "TypeForall",
    "TypeRef",
    # Context
    "Context",
    # Substitution
    "fresh_name",
    "substitute",
    "unfold",
    "simplify",
    "instantiate",
    # Aliases
    "TypeAlias",
    "expand_aliases",
    # Equivalence
    "type_eq_naive",
    "type_eq",
    "is_subtype",
    "join",
    # Narrowing
    "narrow",
    # Checker
    "TypeChecker",
    "typecheck",
    # Errors
    "TypeCheckError",
    "TypeMismatch",
    "UnknownIdentifier",
    "ArityMismatch",
    "UnknownMember",
    "NonExhaustiveUnion",
    "InconsistentBranches",
    "MalformedAnnotation",
    "ResourceExhausted",
]
