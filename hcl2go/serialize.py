"""Conversion between programs, statement IR and JSON-compatible dicts.

The JSON program format is what the CLI reads:

    {"packages": [{"name": "aws", "version": 2}],
     "nodes": [{"kind": "resource", "name": "b", "token": "aws:s3/bucket:Bucket",
                "inputType": T, "inputs": {"acl": E}},
               {"kind": "output", "name": "o", "type": T, "value": E},
               {"kind": "local", "name": "l", "type": T, "value": E}]}

Types T: "string" | "int" | "number" | "bool" | "dynamic" | {"list": T} |
{"map": T} | {"object": {name: T}, "token": str} | {"output": T} | {"input": T}.

Expressions E: {"literal": v} | {"ref": "a.b"} | {"object": {k: E}} |
{"tuple": [E]} | {"call": name, "args": [E]} | {"conditional": [E, E, E]} |
{"binary": op, "left": E, "right": E} | {"unary": op, "operand": E}, each
with an optional "type": T.
"""

from __future__ import annotations

from .ir import Module, Stmt
from .model import (
    BOOL,
    DYNAMIC,
    INT,
    NUMBER,
    STRING,
    Attribute,
    BinaryOp,
    Call,
    Conditional,
    Convert,
    Expr,
    InputType,
    ListType,
    Literal,
    LocalVariable,
    MapType,
    Node,
    ObjectCons,
    ObjectType,
    OutputType,
    OutputVariable,
    Package,
    Primitive,
    Program,
    Resource,
    TempRef,
    Traversal,
    TupleCons,
    Type,
    UnaryOp,
)

_PRIMITIVES: dict[str, Type] = {
    "string": STRING,
    "int": INT,
    "number": NUMBER,
    "bool": BOOL,
    "dynamic": DYNAMIC,
}

_BOOL_OPS: frozenset[str] = frozenset({"==", "!=", "<", "<=", ">", ">=", "&&", "||"})


class ProgramFormatError(Exception):
    """Malformed JSON program, with the location of the offending value."""

    def __init__(self, msg: str, path: str):
        self.msg: str = msg
        self.path: str = path
        super().__init__(path + ": " + msg)


# ============================================================
# JSON -> PROGRAM
# ============================================================


def _expect_dict(obj: object, path: str) -> dict[str, object]:
    if not isinstance(obj, dict):
        raise ProgramFormatError("expected an object", path)
    return obj


def _expect_list(obj: object, path: str) -> list[object]:
    if not isinstance(obj, list):
        raise ProgramFormatError("expected an array", path)
    return obj


def _expect_str(obj: object, path: str) -> str:
    if not isinstance(obj, str):
        raise ProgramFormatError("expected a string", path)
    return obj


def type_from_json(obj: object, path: str = "$") -> Type:
    """Parse a type."""
    if isinstance(obj, str):
        if obj not in _PRIMITIVES:
            raise ProgramFormatError("unknown type '" + obj + "'", path)
        return _PRIMITIVES[obj]
    d = _expect_dict(obj, path)
    if "list" in d:
        return ListType(type_from_json(d["list"], path + ".list"))
    if "map" in d:
        return MapType(type_from_json(d["map"], path + ".map"))
    if "output" in d:
        return OutputType(type_from_json(d["output"], path + ".output"))
    if "input" in d:
        return InputType(type_from_json(d["input"], path + ".input"))
    if "object" in d:
        props = _expect_dict(d["object"], path + ".object")
        properties = tuple(
            (name, type_from_json(t, path + ".object." + name)) for name, t in props.items()
        )
        token = _expect_str(d.get("token", ""), path + ".token")
        return ObjectType(properties, token)
    raise ProgramFormatError("unknown type form", path)


def _literal_type(value: object) -> Type:
    if value is None:
        return DYNAMIC
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return NUMBER
    return STRING


def expr_from_json(obj: object, path: str = "$") -> Expr:
    """Parse an expression. Missing types are derived from the operands."""
    d = _expect_dict(obj, path)
    declared: Type | None = None
    if "type" in d:
        declared = type_from_json(d["type"], path + ".type")
    if "literal" in d:
        value = d["literal"]
        if value is not None and not isinstance(value, (str, int, float, bool)):
            raise ProgramFormatError("literal must be a scalar", path + ".literal")
        return Literal(value, typ=declared if declared is not None else _literal_type(value))
    if "ref" in d:
        parts = _expect_str(d["ref"], path + ".ref").split(".")
        if parts[0] == "":
            raise ProgramFormatError("empty reference", path + ".ref")
        return Traversal(parts[0], parts[1:], typ=declared if declared is not None else DYNAMIC)
    if "object" in d:
        raw = _expect_dict(d["object"], path + ".object")
        items = [(k, expr_from_json(v, path + ".object." + k)) for k, v in raw.items()]
        if declared is None:
            declared = ObjectType(tuple((k, v.typ) for k, v in items))
        return ObjectCons(items, typ=declared)
    if "tuple" in d:
        raw_list = _expect_list(d["tuple"], path + ".tuple")
        elements = [expr_from_json(e, path + ".tuple[" + str(i) + "]") for i, e in enumerate(raw_list)]
        if declared is None:
            declared = ListType(elements[0].typ if elements else DYNAMIC)
        return TupleCons(elements, typ=declared)
    if "call" in d:
        name = _expect_str(d["call"], path + ".call")
        raw_args = _expect_list(d.get("args", []), path + ".args")
        args = [expr_from_json(a, path + ".args[" + str(i) + "]") for i, a in enumerate(raw_args)]
        return Call(name, args, typ=declared if declared is not None else DYNAMIC)
    if "conditional" in d:
        parts_list = _expect_list(d["conditional"], path + ".conditional")
        if len(parts_list) != 3:
            raise ProgramFormatError("conditional needs [cond, then, else]", path + ".conditional")
        cond = expr_from_json(parts_list[0], path + ".conditional[0]")
        then_expr = expr_from_json(parts_list[1], path + ".conditional[1]")
        else_expr = expr_from_json(parts_list[2], path + ".conditional[2]")
        return Conditional(
            cond, then_expr, else_expr, typ=declared if declared is not None else then_expr.typ
        )
    if "binary" in d:
        op = _expect_str(d["binary"], path + ".binary")
        left = expr_from_json(d.get("left"), path + ".left")
        right = expr_from_json(d.get("right"), path + ".right")
        if declared is None:
            declared = BOOL if op in _BOOL_OPS else left.typ
        return BinaryOp(op, left, right, typ=declared)
    if "unary" in d:
        op = _expect_str(d["unary"], path + ".unary")
        operand = expr_from_json(d.get("operand"), path + ".operand")
        if declared is None:
            declared = BOOL if op == "!" else operand.typ
        return UnaryOp(op, operand, typ=declared)
    raise ProgramFormatError("unknown expression form", path)


def node_from_json(obj: object, path: str) -> Node:
    d = _expect_dict(obj, path)
    kind = _expect_str(d.get("kind"), path + ".kind")
    name = _expect_str(d.get("name"), path + ".name")
    if kind == "resource":
        token = _expect_str(d.get("token"), path + ".token")
        raw_inputs = _expect_dict(d.get("inputs", {}), path + ".inputs")
        inputs = [
            Attribute(k, expr_from_json(v, path + ".inputs." + k)) for k, v in raw_inputs.items()
        ]
        if "inputType" in d:
            input_type = type_from_json(d["inputType"], path + ".inputType")
            if not isinstance(input_type, ObjectType):
                raise ProgramFormatError("inputType must be an object type", path + ".inputType")
        else:
            input_type = ObjectType(tuple((a.name, a.value.typ) for a in inputs))
        return Resource(name, token, inputs, input_type)
    if kind == "output" or kind == "local":
        value = expr_from_json(d.get("value"), path + ".value")
        typ = value.typ
        if "type" in d:
            typ = type_from_json(d["type"], path + ".type")
        if kind == "output":
            return OutputVariable(name, value, typ)
        return LocalVariable(name, value, typ)
    raise ProgramFormatError("unknown node kind '" + kind + "'", path + ".kind")


def program_from_dict(obj: object) -> Program:
    """Build a Program from its JSON form."""
    d = _expect_dict(obj, "$")
    packages: list[Package] = []
    for i, p in enumerate(_expect_list(d.get("packages", []), "$.packages")):
        ppath = "$.packages[" + str(i) + "]"
        pd = _expect_dict(p, ppath)
        version = pd.get("version", 1)
        if not isinstance(version, int) or isinstance(version, bool):
            raise ProgramFormatError("version must be an integer", ppath + ".version")
        packages.append(Package(_expect_str(pd.get("name"), ppath + ".name"), version))
    nodes: list[Node] = []
    seen: set[str] = set()
    for i, n in enumerate(_expect_list(d.get("nodes", []), "$.nodes")):
        node = node_from_json(n, "$.nodes[" + str(i) + "]")
        if node.name in seen:
            raise ProgramFormatError("duplicate node name '" + node.name + "'", "$.nodes[" + str(i) + "]")
        seen.add(node.name)
        nodes.append(node)
    return Program(nodes, packages)


# ============================================================
# PROGRAM -> JSON
# ============================================================


def type_to_json(typ: Type) -> object:
    if isinstance(typ, Primitive):
        return typ.kind
    if isinstance(typ, ListType):
        return {"list": type_to_json(typ.element)}
    if isinstance(typ, MapType):
        return {"map": type_to_json(typ.element)}
    if isinstance(typ, OutputType):
        return {"output": type_to_json(typ.element)}
    if isinstance(typ, InputType):
        return {"input": type_to_json(typ.element)}
    if isinstance(typ, ObjectType):
        d: dict[str, object] = {"object": {k: type_to_json(t) for k, t in typ.properties}}
        if typ.token != "":
            d["token"] = typ.token
        return d
    raise TypeError("unknown type: " + type(typ).__name__)


def expr_to_json(expr: Expr) -> dict[str, object]:
    d: dict[str, object]
    if isinstance(expr, Literal):
        d = {"literal": expr.value}
    elif isinstance(expr, Traversal):
        d = {"ref": ".".join([expr.root] + expr.path)}
    elif isinstance(expr, ObjectCons):
        d = {"object": {k: expr_to_json(v) for k, v in expr.items}}
    elif isinstance(expr, TupleCons):
        d = {"tuple": [expr_to_json(e) for e in expr.elements]}
    elif isinstance(expr, Call):
        d = {"call": expr.name, "args": [expr_to_json(a) for a in expr.args]}
    elif isinstance(expr, Conditional):
        d = {
            "conditional": [
                expr_to_json(expr.cond),
                expr_to_json(expr.then_expr),
                expr_to_json(expr.else_expr),
            ]
        }
    elif isinstance(expr, BinaryOp):
        d = {"binary": expr.op, "left": expr_to_json(expr.left), "right": expr_to_json(expr.right)}
    elif isinstance(expr, UnaryOp):
        d = {"unary": expr.op, "operand": expr_to_json(expr.operand)}
    elif isinstance(expr, Convert):
        d = {"convert": expr_to_json(expr.expr)}
    elif isinstance(expr, TempRef):
        d = {"temp": expr.name}
    else:
        raise TypeError("unknown expression: " + type(expr).__name__)
    d["type"] = type_to_json(expr.typ)
    return d


def program_to_dict(program: Program) -> dict[str, object]:
    nodes: list[object] = []
    for node in program.nodes:
        if isinstance(node, Resource):
            nodes.append(
                {
                    "kind": "resource",
                    "name": node.name,
                    "token": node.token,
                    "inputType": type_to_json(node.input_type),
                    "inputs": {a.name: expr_to_json(a.value) for a in node.inputs},
                }
            )
        elif isinstance(node, (OutputVariable, LocalVariable)):
            nodes.append(
                {
                    "kind": "output" if isinstance(node, OutputVariable) else "local",
                    "name": node.name,
                    "type": type_to_json(node.typ),
                    "value": expr_to_json(node.value),
                }
            )
        else:
            raise TypeError("unknown node: " + type(node).__name__)
    return {
        "packages": [{"name": p.name, "version": p.major_version} for p in program.packages],
        "nodes": nodes,
    }


# ============================================================
# STATEMENT IR -> JSON
# ============================================================


def serialize(obj: object) -> object:
    """Recursively serialize statement IR to a JSON-compatible structure."""
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (list, tuple)):
        return [serialize(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): serialize(v) for k, v in obj.items()}
    if isinstance(obj, Type):
        return type_to_json(obj)
    if isinstance(obj, (Stmt, Module)) or (isinstance(obj, Expr) and not _is_source_expr(obj)):
        d: dict[str, object] = {"_type": type(obj).__name__}
        for name, value in vars(obj).items():
            if name == "node" and value == "":
                continue
            d[name] = serialize(value)
        return d
    if isinstance(obj, Expr):
        return expr_to_json(obj)
    raise TypeError("cannot serialize " + type(obj).__name__)


def _is_source_expr(obj: object) -> bool:
    return isinstance(
        obj,
        (Literal, Traversal, ObjectCons, TupleCons, Call, Conditional, BinaryOp, UnaryOp, Convert, TempRef),
    )
