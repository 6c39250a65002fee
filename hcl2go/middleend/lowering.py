"""Expression lowering: input conversions and temporary spilling.

Go has no conditional expression, and json.Marshal returns an error that
must be checked before its result is used. Lowering rewrites an expression
so both constructs become references to temporaries; the temporaries are
returned as descriptors, in evaluation order, for the temp emitter to turn
into statements placed immediately before the consuming statement.

In input context (a value feeding a resource argument) plain values are
also wrapped in Convert so the backend renders them as SDK inputs.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..context import Translation
from ..functions import INPUT_FUNCTIONS, INVOKE, TO_JSON
from ..model import (
    DYNAMIC,
    STRING,
    BinaryOp,
    Call,
    Conditional,
    Convert,
    Expr,
    InputType,
    ListType,
    Literal,
    MapType,
    ObjectCons,
    ObjectType,
    OutputType,
    Traversal,
    TempRef,
    TupleCons,
    Type,
    UnaryOp,
    is_dynamic,
    resolve_element,
)


# ============================================================
# TEMP DESCRIPTORS
# ============================================================


@dataclass
class ConditionalTemp:
    """`var name T; if cond { name = then } else { name = else }`.

    is_input is True when the branches were lowered for an SDK input, in
    which case typ is declared with its input flavor.
    """

    name: str
    cond: Expr
    then_expr: Expr
    else_expr: Expr
    typ: Type
    is_input: bool = False


@dataclass
class SerializationTemp:
    """`bytes_name, err := json.Marshal(value); ...; name := string(bytes_name)`."""

    name: str
    bytes_name: str
    value: Expr


Temp = ConditionalTemp | SerializationTemp


# ============================================================
# UNWRAPPING
# ============================================================


def strip_inputs(expr: Expr) -> Expr:
    """Remove every input conversion, keeping the raw structural value."""
    if isinstance(expr, Convert):
        return strip_inputs(expr.expr)
    if isinstance(expr, (Literal, Traversal, TempRef)):
        return expr
    if isinstance(expr, ObjectCons):
        return ObjectCons([(k, strip_inputs(v)) for k, v in expr.items], typ=expr.typ)
    if isinstance(expr, TupleCons):
        return TupleCons([strip_inputs(e) for e in expr.elements], typ=expr.typ)
    if isinstance(expr, Call):
        return Call(expr.name, [strip_inputs(a) for a in expr.args], typ=expr.typ)
    if isinstance(expr, Conditional):
        return Conditional(
            strip_inputs(expr.cond),
            strip_inputs(expr.then_expr),
            strip_inputs(expr.else_expr),
            typ=expr.typ,
        )
    if isinstance(expr, BinaryOp):
        return BinaryOp(expr.op, strip_inputs(expr.left), strip_inputs(expr.right), typ=expr.typ)
    if isinstance(expr, UnaryOp):
        return UnaryOp(expr.op, strip_inputs(expr.operand), typ=expr.typ)
    raise TypeError("unknown expression: " + type(expr).__name__)


# ============================================================
# LOWERING
# ============================================================


def lower_expression(
    ctx: Translation, expr: Expr, typ: Type | None, is_input: bool, subject: str = ""
) -> tuple[Expr, list[Temp]]:
    """Lower expr for a destination of type typ.

    subject names the node being lowered in any diagnostics.

    Returns the rewritten expression and the temporaries it references,
    ordered so that each temp precedes any temp that uses it.
    """
    lowerer = _Lowerer(ctx, subject)
    result = lowerer.lower(expr, typ, is_input)
    return (result, lowerer.temps)


def _shape(dest: Type | None, actual: Type) -> Type:
    """Destination shape: the expected type unless it says nothing."""
    if dest is None or is_dynamic(dest):
        return resolve_element(actual)
    return resolve_element(dest)


def _member_type(shape: Type, key: str | None) -> Type:
    """Destination type of a member of an object, map or list."""
    if isinstance(shape, ObjectType) and key is not None:
        prop = shape.property(key)
        return prop if prop is not None else DYNAMIC
    if isinstance(shape, (MapType, ListType)):
        return shape.element
    return DYNAMIC


def conditional_type(expr: Conditional, dest: Type | None) -> Type:
    """Result type of a spilled conditional.

    The expected type wins; a dynamic expectation falls back to the
    then-branch, following nested conditionals.
    """
    if dest is not None and not is_dynamic(dest):
        return resolve_element(dest)
    then_expr = expr.then_expr
    if isinstance(then_expr, Conditional) and is_dynamic(then_expr.typ):
        return conditional_type(then_expr, None)
    if not is_dynamic(then_expr.typ):
        return resolve_element(then_expr.typ)
    return resolve_element(expr.typ)


class _Lowerer:
    """Single lowering invocation; collects temps in evaluation order."""

    def __init__(self, ctx: Translation, subject: str = "") -> None:
        self.ctx = ctx
        self.subject = subject
        self.temps: list[Temp] = []

    def lower(self, expr: Expr, dest: Type | None, is_input: bool) -> Expr:
        if isinstance(expr, Literal):
            if expr.value is None:
                return expr
            return self._wrap(Literal(expr.value, typ=expr.typ), dest, is_input)
        if isinstance(expr, (Traversal, TempRef)):
            return self._wrap(expr, dest, is_input)
        if isinstance(expr, ObjectCons):
            shape = _shape(dest, expr.typ)
            items = [(k, self.lower(v, _member_type(shape, k), is_input)) for k, v in expr.items]
            return self._wrap(ObjectCons(items, typ=expr.typ), dest, is_input)
        if isinstance(expr, TupleCons):
            shape = _shape(dest, expr.typ)
            elem = _member_type(shape, None)
            elements = [self.lower(e, elem, is_input) for e in expr.elements]
            return self._wrap(TupleCons(elements, typ=expr.typ), dest, is_input)
        if isinstance(expr, Call):
            return self._lower_call(expr, dest, is_input)
        if isinstance(expr, Conditional):
            return self._spill_conditional(expr, dest, is_input)
        if isinstance(expr, BinaryOp):
            left = self.lower(expr.left, None, False)
            right = self.lower(expr.right, None, False)
            return self._wrap(BinaryOp(expr.op, left, right, typ=expr.typ), dest, is_input)
        if isinstance(expr, UnaryOp):
            operand = self.lower(expr.operand, None, False)
            return self._wrap(UnaryOp(expr.op, operand, typ=expr.typ), dest, is_input)
        if isinstance(expr, Convert):
            return self.lower(expr.expr, expr.typ, True)
        raise TypeError("unknown expression: " + type(expr).__name__)

    def _wrap(self, expr: Expr, dest: Type | None, is_input: bool) -> Expr:
        """Wrap a plain value for an SDK input."""
        if not is_input:
            return expr
        if isinstance(expr.typ, (InputType, OutputType)):
            return expr
        return Convert(expr, typ=InputType(_shape(dest, expr.typ)))

    def _lower_call(self, call: Call, dest: Type | None, is_input: bool) -> Expr:
        if call.name == TO_JSON:
            return self._spill_serialization(call, is_input)
        args = [self.lower(a, None, False) for a in call.args]
        lowered = Call(call.name, args, typ=call.typ)
        if call.name in INPUT_FUNCTIONS or call.name == INVOKE:
            return lowered
        return self._wrap(lowered, dest, is_input)

    def _spill_conditional(self, expr: Conditional, dest: Type | None, is_input: bool) -> Expr:
        typ = conditional_type(expr, dest)
        cond = self.lower(expr.cond, None, False)
        then_expr = self.lower(expr.then_expr, typ, is_input)
        else_expr = self.lower(expr.else_expr, typ, is_input)
        name = self.ctx.names.fresh("tmp")
        self.temps.append(ConditionalTemp(name, cond, then_expr, else_expr, typ, is_input))
        ref_typ: Type = InputType(typ) if is_input else typ
        return TempRef(name, typ=ref_typ)

    def _spill_serialization(self, call: Call, is_input: bool) -> Expr:
        if len(call.args) != 1:
            self.ctx.diagnostics.add_error(
                self.subject, "toJSON expects exactly one argument, got " + str(len(call.args))
            )
            return Literal("", typ=STRING)
        arg = call.args[0]
        value = self.lower(arg, arg.typ, is_input)
        if self.ctx.options.unwrap_serialized_inputs:
            value = strip_inputs(value)
        name = self.ctx.names.fresh("json")
        bytes_name = "tmp" + name.upper()
        if self.ctx.names.is_taken(bytes_name):
            bytes_name = self.ctx.names.fresh("tmpJSON")
        else:
            self.ctx.names.reserve(bytes_name)
        self.temps.append(SerializationTemp(name, bytes_name, value))
        return self._wrap(TempRef(name, typ=STRING), STRING, is_input)
