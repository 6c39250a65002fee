"""Statement IR - the procedural program produced by the middleend.

Statements reference lowered expressions from model.py. The Go backend
renders them without further analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .model import Expr, Type


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(kw_only=True)
class Stmt:
    """Base for all statements. Abstract.

    node names the program node the statement was emitted for (empty for
    the fixed program framing).
    """

    node: str = ""


@dataclass
class VarDecl(Stmt):
    """Declaration without initializer: `var name T`.

    is_input selects the SDK input flavor of typ when rendering.
    """

    name: str
    typ: Type
    is_input: bool = False


@dataclass
class Assign(Stmt):
    """Assignment to an already declared variable: `name = value`."""

    name: str
    value: Expr


@dataclass
class Define(Stmt):
    """Short declaration: `name := value`."""

    name: str
    value: Expr


@dataclass
class If(Stmt):
    """Two-branch conditional statement."""

    cond: Expr
    then_body: list[Stmt]
    else_body: list[Stmt] = field(default_factory=list)


@dataclass
class FallibleCall(Stmt):
    """Call returning (results..., err): `a, err := call`.

    Invariants:
    - always immediately followed by ErrorCheck in the same body
    """

    targets: list[str]
    call: Expr


@dataclass
class ErrorCheck(Stmt):
    """`if err != nil { return err }`."""


@dataclass
class Export(Stmt):
    """Stack output: `ctx.Export("name", value)`."""

    name: str
    value: Expr


@dataclass
class Return(Stmt):
    """Return from the program body. value None renders `return nil`."""

    value: Expr | None = None


# ============================================================
# EXPRESSIONS USED ONLY BY STATEMENTS
# ============================================================


@dataclass
class NewResource(Expr):
    """Resource construction call `mod.NewType(ctx, "name", args)`.

    args is None when the resource has no inputs, otherwise the ordered
    (property, lowered value) pairs of the args struct.
    """

    module: str
    type_name: str
    resource_name: str
    args: list[tuple[str, Expr]] | None


@dataclass
class MarshalJSON(Expr):
    """`json.Marshal(value)`; produces ([]byte, error)."""

    value: Expr


@dataclass
class BytesToString(Expr):
    """`string(name)` over a byte slice variable."""

    name: str


# ============================================================
# MODULE
# ============================================================


@dataclass
class Module:
    """A whole generated program.

    Invariants:
    - utility_imports and provider_imports are sorted and disjoint
    - body holds node statements in node order, framing excluded
    """

    runtime_import: str
    utility_imports: list[str] = field(default_factory=list)
    provider_imports: list[str] = field(default_factory=list)
    body: list[Stmt] = field(default_factory=list)
