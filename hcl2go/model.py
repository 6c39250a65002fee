"""Program model - the typed node graph handed to the generator.

Architecture:
    Source -> Parser/Binder (external) -> [Program] -> Middleend -> [ir.Module] -> Backend -> Go

The upstream binder produces fully-typed, already-linearized nodes. Nothing in
this package reorders nodes or writes back into their expressions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal as KindLiteral


# ============================================================
# TYPES
#
# All types are immutable and hashable.
# ============================================================


@dataclass(frozen=True)
class Type:
    """Base for all types. Abstract."""


@dataclass(frozen=True)
class Primitive(Type):
    """Primitive types.

    | Kind    | Go (plain)    | Go (input)          |
    |---------|---------------|---------------------|
    | string  | string        | pulumi.StringInput  |
    | int     | int           | pulumi.IntInput     |
    | number  | float64       | pulumi.Float64Input |
    | bool    | bool          | pulumi.BoolInput    |
    | dynamic | interface{}   | pulumi.Input        |
    """

    kind: KindLiteral["string", "int", "number", "bool", "dynamic"]


STRING = Primitive("string")
INT = Primitive("int")
NUMBER = Primitive("number")
BOOL = Primitive("bool")
DYNAMIC = Primitive("dynamic")


@dataclass(frozen=True)
class ListType(Type):
    """Homogeneous list."""

    element: Type


@dataclass(frozen=True)
class MapType(Type):
    """String-keyed map with homogeneous values."""

    element: Type


@dataclass(frozen=True)
class ObjectType(Type):
    """Record with named properties.

    token names a schema object type (pkg:mod:Type) when the object maps onto
    a generated SDK args struct; anonymous objects have an empty token.
    """

    properties: tuple[tuple[str, Type], ...] = ()
    token: str = ""

    def property(self, name: str) -> Type | None:
        for prop_name, prop_type in self.properties:
            if prop_name == name:
                return prop_type
        return None


@dataclass(frozen=True)
class OutputType(Type):
    """Eventual value produced by a resource."""

    element: Type


@dataclass(frozen=True)
class InputType(Type):
    """Value accepted by an SDK input: either a plain value or an output."""

    element: Type


def resolve_element(typ: Type) -> Type:
    """Strip any Input/Output wrappers."""
    while isinstance(typ, (InputType, OutputType)):
        typ = typ.element
    return typ


def is_dynamic(typ: Type | None) -> bool:
    return typ is None or resolve_element(typ) == DYNAMIC


# ============================================================
# EXPRESSIONS
#
# Closed set. Every expression carries its resolved type.
# ============================================================


@dataclass(kw_only=True)
class Expr:
    """Base for all expressions. Abstract.

    Invariants:
    - typ is fully resolved before lowering begins
    """

    typ: Type


@dataclass
class Literal(Expr):
    """Literal string, number, bool or null."""

    value: str | int | float | bool | None


@dataclass
class Traversal(Expr):
    """Reference to a named node, optionally followed by attribute accesses.

    `bucket.website.endpoint` is Traversal("bucket", ["website", "endpoint"]).
    """

    root: str
    path: list[str] = field(default_factory=list)


@dataclass
class ObjectCons(Expr):
    """Object construction: { key = value, ... }. Item order is preserved."""

    items: list[tuple[str, Expr]]


@dataclass
class TupleCons(Expr):
    """List construction: [a, b, ...]."""

    elements: list[Expr]


@dataclass
class Call(Expr):
    """Function call by name."""

    name: str
    args: list[Expr]


@dataclass
class Conditional(Expr):
    """Ternary conditional: cond ? then_expr : else_expr.

    Go has no conditional expression; lowering always spills this into a
    temporary computed by an if/else statement.
    """

    cond: Expr
    then_expr: Expr
    else_expr: Expr


@dataclass
class BinaryOp(Expr):
    """Binary operation. op uses Go spelling (==, !=, &&, ||, +, ...)."""

    op: str
    left: Expr
    right: Expr


@dataclass
class UnaryOp(Expr):
    """Unary operation: ! or -."""

    op: str
    operand: Expr


@dataclass
class Convert(Expr):
    """Input wrapping inserted by lowering. typ is the destination InputType.

    Never produced by the binder.
    """

    expr: Expr


@dataclass
class TempRef(Expr):
    """Reference to a spilled temporary. Never produced by the binder."""

    name: str


def children(expr: Expr) -> list[Expr]:
    """Direct sub-expressions in evaluation order."""
    if isinstance(expr, (Literal, Traversal, TempRef)):
        return []
    if isinstance(expr, ObjectCons):
        return [value for _, value in expr.items]
    if isinstance(expr, TupleCons):
        return list(expr.elements)
    if isinstance(expr, Call):
        return list(expr.args)
    if isinstance(expr, Conditional):
        return [expr.cond, expr.then_expr, expr.else_expr]
    if isinstance(expr, BinaryOp):
        return [expr.left, expr.right]
    if isinstance(expr, UnaryOp):
        return [expr.operand]
    if isinstance(expr, Convert):
        return [expr.expr]
    raise TypeError("unknown expression: " + type(expr).__name__)


def walk(expr: Expr) -> list[Expr]:
    """All expressions in the tree, pre-order."""
    result: list[Expr] = [expr]
    for child in children(expr):
        result.extend(walk(child))
    return result


# ============================================================
# NODES
# ============================================================


@dataclass
class Attribute:
    """One input attribute of a resource."""

    name: str
    value: Expr


@dataclass
class Node:
    """Base for program nodes. Abstract."""

    name: str

    def expressions(self) -> list[Expr]:
        raise NotImplementedError


@dataclass
class Resource(Node):
    """Resource declaration.

    token is `pkg:module:Type`; the module part may carry a trailing
    `/member` segment (`aws:s3/bucket:Bucket`) which is dropped.
    """

    token: str
    inputs: list[Attribute] = field(default_factory=list)
    input_type: ObjectType = field(default_factory=ObjectType)

    def expressions(self) -> list[Expr]:
        return [attr.value for attr in self.inputs]

    def decompose_token(self) -> tuple[str, str, str]:
        """Split the token into (package, module, type name)."""
        return decompose_token(self.token)


@dataclass
class OutputVariable(Node):
    """Stack output."""

    value: Expr
    typ: Type

    def expressions(self) -> list[Expr]:
        return [self.value]


@dataclass
class LocalVariable(Node):
    """Local binding."""

    value: Expr
    typ: Type

    def expressions(self) -> list[Expr]:
        return [self.value]


def decompose_token(token: str) -> tuple[str, str, str]:
    """Split `pkg:mod/member:Type` into ("pkg", "mod", "Type").

    Tokens with fewer than three parts keep the missing parts empty.
    """
    parts = token.split(":")
    while len(parts) < 3:
        parts.append("")
    pkg, mod, typ = parts[0], parts[1], ":".join(parts[2:])
    slash = mod.find("/")
    if slash >= 0:
        mod = mod[:slash]
    return (pkg, mod, typ)


# ============================================================
# PROGRAM
# ============================================================


@dataclass(frozen=True)
class Package:
    """Provider package metadata."""

    name: str
    major_version: int


@dataclass
class Program:
    """Linearized node list plus package metadata.

    Invariants:
    - nodes are in dependency order
    - node names are unique
    """

    nodes: list[Node]
    packages: list[Package] = field(default_factory=list)

    def package(self, name: str) -> Package | None:
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        return None

    def node_names(self) -> set[str]:
        return {n.name for n in self.nodes}
