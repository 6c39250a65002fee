"""GoBackend: statement IR -> Go program text.

Pure syntax emission - no analysis. Lowering has already removed every
conditional expression and toJSON call, inserted input conversions and
computed the import sets; this module only spells things in Go.

The program framing is fixed:

    package main
    import ( <utility> <blank> <runtime> <providers> )
    func main() {
        pulumi.Run(func(ctx *pulumi.Context) error {
            <body>
            return nil
        })
    }
    <helpers used by body>
"""

from __future__ import annotations

from ..functions import INPUT_FUNCTIONS
from ..ir import (
    Assign,
    BytesToString,
    Define,
    ErrorCheck,
    Export,
    FallibleCall,
    If,
    MarshalJSON,
    Module,
    NewResource,
    Return,
    Stmt,
    VarDecl,
)
from ..model import (
    DYNAMIC,
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
    Primitive,
    TempRef,
    Traversal,
    TupleCons,
    Type,
    UnaryOp,
    decompose_token,
    resolve_element,
)
from .util import Emitter, escape_string, go_module_name, go_to_camel, go_to_pascal

# Go operator precedence (higher number = tighter binding).
# From go.dev/ref/spec#Operator_precedence
_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 3,
    "<=": 3,
    ">": 3,
    ">=": 3,
    "+": 4,
    "-": 4,
    "*": 5,
    "/": 5,
    "%": 5,
}

# SDK name stem for each primitive kind: pulumi.String, pulumi.StringInput, ...
_SDK_STEMS: dict[str, str] = {
    "string": "String",
    "int": "Int",
    "number": "Float64",
    "bool": "Bool",
}

_PLAIN_TYPES: dict[str, str] = {
    "string": "string",
    "int": "int",
    "number": "float64",
    "bool": "bool",
    "dynamic": "interface{}",
}

# Resource properties exposed as methods rather than fields
_METHOD_PROPERTIES: dict[str, str] = {"id": "ID", "urn": "URN"}


def _prec(op: str) -> int:
    return _PRECEDENCE.get(op, 6)


def _is_comparison(op: str) -> bool:
    return op in ("==", "!=", "<", "<=", ">", ">=")


def _sdk_stem(typ: Type) -> str:
    """SDK stem for a primitive type, "" for anything else."""
    if isinstance(typ, Primitive):
        return _SDK_STEMS.get(typ.kind, "")
    return ""


def plain_type_name(typ: Type) -> str:
    """Go type of a plain (non-SDK) value."""
    typ = resolve_element(typ)
    if isinstance(typ, Primitive):
        return _PLAIN_TYPES.get(typ.kind, "interface{}")
    if isinstance(typ, ListType):
        return "[]" + plain_type_name(typ.element)
    if isinstance(typ, MapType):
        return "map[string]" + plain_type_name(typ.element)
    return "map[string]interface{}" if isinstance(typ, ObjectType) else "interface{}"


def _collection_stem(typ: Type) -> str:
    """SDK stem for a list or map type: StringArray, IntMap, Array, Map."""
    if isinstance(typ, ListType):
        return _sdk_stem(resolve_element(typ.element)) + "Array"
    if isinstance(typ, MapType):
        return _sdk_stem(resolve_element(typ.element)) + "Map"
    return ""


def _args_struct(token: str) -> tuple[str, str]:
    """(Go package, struct stem) for a schema object token."""
    pkg, mod, name = decompose_token(token)
    return (go_module_name(pkg, mod), go_to_pascal(name))


def _package_identifiers(module: Module) -> set[str]:
    """Identifiers bound by the import block, plus the entry point's ctx and err."""
    names = {"pulumi", "ctx", "err"}
    for path in module.utility_imports + module.provider_imports:
        names.add(path.rsplit("/", 1)[-1])
    return names


def argument_type_name(typ: Type, is_input: bool) -> str:
    """Go type for a variable holding a value of typ.

    Outputs keep their output type; input context declares the SDK input
    interface; otherwise the plain Go type.
    """
    if isinstance(typ, OutputType):
        elem = resolve_element(typ.element)
        stem = _sdk_stem(elem) or _collection_stem(elem)
        return "pulumi." + (stem if stem else "Any") + "Output"
    elem = resolve_element(typ)
    if not is_input and not isinstance(typ, InputType):
        return plain_type_name(elem)
    if isinstance(elem, ObjectType):
        if elem.token != "":
            mod, name = _args_struct(elem.token)
            return mod + "." + name + "Input"
        return "pulumi.MapInput"
    stem = _sdk_stem(elem) or _collection_stem(elem)
    return "pulumi." + stem + "Input"


class GoBackend:
    """Emit Go code from a statement Module."""

    def __init__(self) -> None:
        self._emitter = Emitter()
        self._err_declared: bool = False
        self._packages: set[str] = set()

    def emit(self, module: Module) -> str:
        """Emit the whole program."""
        # Two-pass: emit body first, then prepend header; helpers follow main
        self._emitter = Emitter()
        self._err_declared = False
        self._packages = _package_identifiers(module)
        self._emitter.indent = 2
        for stmt in module.body:
            self._emit_stmt(stmt)
        self._emit_stmt(Return())
        body = self._emitter.output()
        self._emitter = Emitter()
        self._emit_header(module)
        header = self._emitter.output()
        self._emitter = Emitter()
        self._line("\t})")
        self._line("}")
        self._emit_helpers(body)
        footer = self._emitter.output()
        return header + body + footer

    def _emit_header(self, module: Module) -> None:
        """Package clause, import block, entry point opening."""
        self._line("package main")
        self._line("")
        self._line("import (")
        self._emitter.indent += 1
        for imp in module.utility_imports:
            self._line(f'"{imp}"')
        if module.utility_imports:
            self._line("")
        self._line(f'"{module.runtime_import}"')
        for imp in module.provider_imports:
            self._line(f'"{imp}"')
        self._emitter.indent -= 1
        self._line(")")
        self._line("")
        self._line("func main() {")
        self._line("\tpulumi.Run(func(ctx *pulumi.Context) error {")

    # Each helper: (trigger substring, Go source)
    _HELPERS: list[tuple[str, str]] = [
        (
            "readFileOrPanic(",
            """func readFileOrPanic(path string) string {
	data, err := ioutil.ReadFile(path)
	if err != nil {
		panic(err.Error())
	}
	return string(data)
}""",
        ),
        (
            "readDirOrPanic(",
            """func readDirOrPanic(path string) []string {
	entries, err := ioutil.ReadDir(path)
	if err != nil {
		panic(err.Error())
	}
	var names []string
	for _, entry := range entries {
		names = append(names, entry.Name())
	}
	return names
}""",
        ),
    ]

    def _emit_helpers(self, body: str) -> None:
        for trigger, source in self._HELPERS:
            if trigger in body:
                self._line("")
                for text in source.split("\n"):
                    self._emitter.lines.append(text)

    # ============================================================
    # STATEMENT EMISSION
    # ============================================================

    def _emit_stmt(self, stmt: Stmt) -> None:
        """Emit a statement."""
        if isinstance(stmt, VarDecl):
            self._line(f"var {self._name(stmt.name)} {argument_type_name(stmt.typ, stmt.is_input)}")
        elif isinstance(stmt, Assign):
            self._line(f"{self._name(stmt.name)} = {self._emit_expr(stmt.value)}")
        elif isinstance(stmt, Define):
            self._emit_stmt_Define(stmt)
        elif isinstance(stmt, If):
            self._emit_stmt_If(stmt)
        elif isinstance(stmt, FallibleCall):
            self._emit_stmt_FallibleCall(stmt)
        elif isinstance(stmt, ErrorCheck):
            self._line("if err != nil {")
            self._emitter.indent += 1
            self._line("return err")
            self._emitter.indent -= 1
            self._line("}")
        elif isinstance(stmt, Export):
            self._line(f'ctx.Export("{escape_string(stmt.name)}", {self._emit_exported(stmt.value)})')
        elif isinstance(stmt, Return):
            value = self._emit_expr(stmt.value) if stmt.value is not None else "nil"
            self._line(f"return {value}")
        else:
            raise TypeError("unknown statement: " + type(stmt).__name__)

    def _emit_stmt_Define(self, stmt: Define) -> None:
        value = self._emit_expr(stmt.value)
        if stmt.name == "_":
            self._line(f"_ = {value}")
        else:
            self._line(f"{self._name(stmt.name)} := {value}")

    def _emit_stmt_If(self, stmt: If) -> None:
        self._line(f"if {self._emit_expr(stmt.cond)} {{")
        self._emitter.indent += 1
        for s in stmt.then_body:
            self._emit_stmt(s)
        self._emitter.indent -= 1
        if stmt.else_body:
            self._line("} else {")
            self._emitter.indent += 1
            for s in stmt.else_body:
                self._emit_stmt(s)
            self._emitter.indent -= 1
        self._line("}")

    def _emit_stmt_FallibleCall(self, stmt: FallibleCall) -> None:
        targets = [self._name(t) for t in stmt.targets]
        # `:=` needs at least one new name on the left
        fresh = not self._err_declared or any(t != "_" for t in targets)
        op = ":=" if fresh else "="
        self._err_declared = True
        lhs = ", ".join(targets + ["err"])
        self._line(f"{lhs} {op} {self._emit_expr(stmt.call)}")

    def _emit_exported(self, value: Expr) -> str:
        """ctx.Export takes an SDK input; wrap plain values."""
        if isinstance(value, Convert) or isinstance(value.typ, (InputType, OutputType)):
            return self._emit_expr(value)
        if isinstance(value, Literal) and value.value is None:
            return "nil"
        return self._emit_input(value, resolve_element(value.typ))

    # ============================================================
    # EXPRESSION EMISSION
    # ============================================================

    def _name(self, name: str) -> str:
        if name == "_":
            return name
        ident = go_to_camel(name)
        # Bindings must not shadow an imported package
        if ident in self._packages:
            return ident + "_"
        return ident

    def _maybe_paren(self, expr: Expr, parent_op: str, is_left: bool) -> str:
        """Emit expr, adding parens if its precedence requires it."""
        s = self._emit_expr(expr)
        if isinstance(expr, BinaryOp):
            # Go doesn't allow chained comparisons
            if _is_comparison(parent_op) and _is_comparison(expr.op):
                return f"({s})"
            child_prec = _prec(expr.op)
            parent_prec = _prec(parent_op)
            if not is_left:
                if child_prec <= parent_prec:
                    return f"({s})"
            else:
                if child_prec < parent_prec:
                    return f"({s})"
        return s

    def _emit_expr(self, expr: Expr) -> str:
        """Emit an expression and return Go code string."""
        if isinstance(expr, Literal):
            return self._emit_expr_Literal(expr)
        if isinstance(expr, Traversal):
            return self._emit_expr_Traversal(expr)
        if isinstance(expr, TempRef):
            return self._name(expr.name)
        if isinstance(expr, ObjectCons):
            go_type = plain_type_name(expr.typ)
            if not go_type.startswith("map[string]"):
                go_type = "map[string]interface{}"
            return f"{go_type}{{{self._emit_entries(expr.items)}}}"
        if isinstance(expr, TupleCons):
            go_type = plain_type_name(expr.typ)
            if not go_type.startswith("[]"):
                go_type = "[]interface{}"
            elements = ", ".join(self._emit_expr(e) for e in expr.elements)
            return f"{go_type}{{{elements}}}"
        if isinstance(expr, Call):
            return self._emit_expr_Call(expr)
        if isinstance(expr, BinaryOp):
            left = self._maybe_paren(expr.left, expr.op, is_left=True)
            right = self._maybe_paren(expr.right, expr.op, is_left=False)
            return f"{left} {expr.op} {right}"
        if isinstance(expr, UnaryOp):
            operand = self._emit_expr(expr.operand)
            if isinstance(expr.operand, BinaryOp):
                operand = f"({operand})"
            return f"{expr.op}{operand}"
        if isinstance(expr, Convert):
            return self._emit_input(expr.expr, resolve_element(expr.typ))
        if isinstance(expr, NewResource):
            return self._emit_expr_NewResource(expr)
        if isinstance(expr, MarshalJSON):
            return f"json.Marshal({self._emit_expr(expr.value)})"
        if isinstance(expr, BytesToString):
            return f"string({self._name(expr.name)})"
        if isinstance(expr, Conditional):
            raise ValueError("conditional expression reached the Go backend unlowered")
        raise TypeError("unknown expression: " + type(expr).__name__)

    def _emit_expr_Literal(self, expr: Literal) -> str:
        value = expr.value
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return f'"{escape_string(value)}"'
        if isinstance(value, float):
            return repr(value)
        return str(value)

    def _emit_expr_Traversal(self, expr: Traversal) -> str:
        parts = [self._name(expr.root)]
        for attr in expr.path:
            if attr in _METHOD_PROPERTIES:
                parts.append(_METHOD_PROPERTIES[attr] + "()")
            else:
                parts.append(go_to_pascal(attr))
        return ".".join(parts)

    def _emit_input(self, inner: Expr, shape: Type) -> str:
        """Emit inner converted to the SDK input for shape."""
        if isinstance(shape, ObjectType):
            if isinstance(inner, ObjectCons):
                if shape.token != "":
                    mod, name = _args_struct(shape.token)
                    fields = ", ".join(
                        f"{go_to_pascal(k)}: {self._emit_member(v, shape.property(k) or DYNAMIC)}"
                        for k, v in inner.items
                    )
                    return f"&{mod}.{name}Args{{{fields}}}"
                entries = ", ".join(
                    f'"{escape_string(k)}": {self._emit_member(v, shape.property(k) or DYNAMIC)}'
                    for k, v in inner.items
                )
                return f"pulumi.Map{{{entries}}}"
            return f"pulumi.Any({self._emit_expr(inner)})"
        if isinstance(shape, (ListType, MapType)):
            stem = _collection_stem(shape)
            if isinstance(inner, TupleCons) and isinstance(shape, ListType):
                elements = ", ".join(self._emit_member(e, shape.element) for e in inner.elements)
                return f"pulumi.{stem}{{{elements}}}"
            if isinstance(inner, ObjectCons) and isinstance(shape, MapType):
                entries = ", ".join(
                    f'"{escape_string(k)}": {self._emit_member(v, shape.element)}' for k, v in inner.items
                )
                return f"pulumi.{stem}{{{entries}}}"
            if stem not in ("Array", "Map"):
                return f"pulumi.To{stem}({self._emit_expr(inner)})"
            return f"pulumi.Any({self._emit_expr(inner)})"
        stem = _sdk_stem(shape)
        if stem == "":
            return f"pulumi.Any({self._emit_expr(inner)})"
        return f"pulumi.{stem}({self._emit_expr(inner)})"

    def _emit_member(self, value: Expr, shape: Type) -> str:
        """Member of an SDK collection or args struct: must itself be an input."""
        if isinstance(value, Convert) or isinstance(value.typ, (InputType, OutputType)):
            return self._emit_expr(value)
        if isinstance(value, Call) and value.name in INPUT_FUNCTIONS:
            return self._emit_expr(value)
        if isinstance(value, Literal) and value.value is None:
            return "nil"
        shape = resolve_element(shape)
        if shape == DYNAMIC:
            shape = resolve_element(value.typ)
        return self._emit_input(value, shape)

    def _emit_entries(self, items: list[tuple[str, Expr]]) -> str:
        return ", ".join(f'"{escape_string(k)}": {self._emit_expr(v)}' for k, v in items)

    def _emit_fields(self, items: list[tuple[str, Expr]]) -> str:
        return ", ".join(f"{go_to_pascal(k)}: {self._emit_expr(v)}" for k, v in items)

    def _emit_expr_NewResource(self, expr: NewResource) -> str:
        head = f'{expr.module}.New{expr.type_name}(ctx, "{escape_string(expr.resource_name)}", '
        if expr.args is None:
            return head + "nil)"
        lines = [head + f"&{expr.module}.{expr.type_name}Args{{"]
        for name, value in expr.args:
            lines.append(f"{go_to_pascal(name)}: {self._emit_expr(value)},")
        lines.append("})")
        return "\n".join(lines)

    def _emit_expr_Call(self, expr: Call) -> str:
        args = [self._emit_expr(a) for a in expr.args]
        name = expr.name
        if name == "invoke":
            return self._emit_invoke(expr)
        if name == "fileAsset" and len(args) == 1:
            return f"pulumi.NewFileAsset({args[0]})"
        if name == "fileArchive" and len(args) == 1:
            return f"pulumi.NewFileArchive({args[0]})"
        if name == "readFile" and len(args) == 1:
            return f"readFileOrPanic({args[0]})"
        if name == "readDir" and len(args) == 1:
            return f"readDirOrPanic({args[0]})"
        if name == "toBase64" and len(args) == 1:
            return f"base64.StdEncoding.EncodeToString([]byte({args[0]}))"
        if name == "mimeType" and len(args) == 1:
            return f"mime.TypeByExtension(path.Ext({args[0]}))"
        if name == "sha1" and len(args) == 1:
            return f'fmt.Sprintf("%x", sha1.Sum([]byte({args[0]})))'
        if name == "length" and len(args) == 1:
            return f"len({args[0]})"
        if name == "element" and len(args) == 2:
            return f"{args[0]}[{args[1]}]"
        if name == "split" and len(args) == 2:
            return f"strings.Split({args[1]}, {args[0]})"
        if name == "join" and len(args) == 2:
            return f"strings.Join({args[1]}, {args[0]})"
        return f"{go_to_pascal(name)}({', '.join(args)})"

    def _emit_invoke(self, expr: Call) -> str:
        """`mod.Fn(ctx, &mod.FnArgs{...}, nil)` for invoke("pkg:mod/fn:fn", {...})."""
        token = expr.args[0].value if expr.args and isinstance(expr.args[0], Literal) else None
        if not isinstance(token, str):
            raise ValueError("invoke requires a literal function token")
        pkg, mod, fn = decompose_token(token)
        module = go_module_name(pkg, mod)
        func = go_to_pascal(fn)
        args = "nil"
        if len(expr.args) > 1:
            arg = expr.args[1]
            if isinstance(arg, ObjectCons):
                args = f"&{module}.{func}Args{{{self._emit_fields(arg.items)}}}"
            else:
                args = self._emit_expr(arg)
        return f"{module}.{func}(ctx, {args}, nil)"

    # ============================================================
    # OUTPUT HELPERS
    # ============================================================

    def _line(self, text: str) -> None:
        """Emit a line with current indentation."""
        self._emitter.line(text)


def emit_go(module: Module) -> str:
    """Render a statement module to (unformatted) Go source."""
    return GoBackend().emit(module)
