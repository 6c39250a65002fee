"""Tests for node emission and whole-module construction."""

from hcl2go.context import Translation
from hcl2go.ir import (
    Define,
    ErrorCheck,
    Export,
    FallibleCall,
    If,
    NewResource,
    Stmt,
    VarDecl,
)
from hcl2go.middleend import build_module
from hcl2go.middleend.nodes import DISCARD, gen_node, referenced_names
from hcl2go.model import (
    BOOL,
    DYNAMIC,
    STRING,
    Attribute,
    Call,
    Conditional,
    Convert,
    InputType,
    ListType,
    Literal,
    LocalVariable,
    ObjectCons,
    ObjectType,
    OutputType,
    OutputVariable,
    Package,
    Program,
    Resource,
    TempRef,
    Traversal,
    TupleCons,
)


def _gen(node, packages=None) -> tuple[list[Stmt], Translation]:
    ctx = Translation(Program([node], packages or [Package("aws", 2)]))
    return (gen_node(ctx, node), ctx)


def _assert_checks_adjacent(stmts: list[Stmt]) -> None:
    for i, s in enumerate(stmts):
        if isinstance(s, FallibleCall):
            assert isinstance(stmts[i + 1], ErrorCheck)


# ============================================================
# SCENARIOS
# ============================================================


def test_resource_without_inputs() -> None:
    stmts, _ = _gen(Resource("bucket", "aws:s3/bucket:Bucket"))
    assert len(stmts) == 2
    call = stmts[0]
    assert isinstance(call, FallibleCall)
    assert call.targets == ["bucket"]
    assert call.call == NewResource("s3", "Bucket", "bucket", None, typ=DYNAMIC)
    assert isinstance(stmts[1], ErrorCheck)


def test_output_with_conditional() -> None:
    value = Conditional(
        Traversal("flag", typ=BOOL),
        Literal("a", typ=STRING),
        Literal("b", typ=STRING),
        typ=STRING,
    )
    stmts, _ = _gen(OutputVariable("result", value, STRING))
    assert [type(s) for s in stmts] == [VarDecl, If, Export]
    assert stmts[0].name == "tmp0"
    assert stmts[2].value == TempRef("tmp0", typ=STRING)


def test_local_with_serialization() -> None:
    record = ObjectCons(
        [
            ("Version", Literal("2012-10-17", typ=STRING)),
            (
                "Statement",
                TupleCons(
                    [ObjectCons([("Effect", Literal("Allow", typ=STRING))], typ=ObjectType())],
                    typ=ListType(DYNAMIC),
                ),
            ),
        ],
        typ=ObjectType(),
    )
    value = Call("toJSON", [record], typ=STRING)
    stmts, _ = _gen(LocalVariable("policy", value, STRING))
    assert [type(s) for s in stmts] == [FallibleCall, ErrorCheck, Define, Define]
    assert stmts[0].targets == ["tmpJSON0"]
    assert stmts[2].name == "json0"
    assert stmts[3] == Define("policy", TempRef("json0", typ=STRING), node="policy")


# ============================================================
# RESOURCES
# ============================================================


def test_resource_inputs_become_args_in_order() -> None:
    itype = ObjectType((("bucket", STRING), ("acl", STRING)))
    node = Resource(
        "obj",
        "aws:s3/bucketObject:BucketObject",
        [
            Attribute("bucket", Traversal("site", ["id"], typ=OutputType(STRING))),
            Attribute("acl", Literal("private", typ=STRING)),
        ],
        itype,
    )
    stmts, ctx = _gen(node)
    call = stmts[0].call
    assert [name for name, _ in call.args] == ["bucket", "acl"]
    assert call.args[0][1] == Traversal("site", ["id"], typ=OutputType(STRING))
    assert call.args[1][1] == Convert(Literal("private", typ=STRING), typ=InputType(STRING))
    assert len(ctx.diagnostics) == 0


def test_unknown_input_property_warns() -> None:
    node = Resource(
        "b", "aws:s3/bucket:Bucket", [Attribute("colour", Literal("red", typ=STRING))]
    )
    stmts, ctx = _gen(node)
    warnings = ctx.diagnostics.warnings()
    assert len(warnings) == 1
    assert warnings[0].subject == "b"
    assert "colour" in warnings[0].summary
    assert stmts[0].call.args[0][1] == Convert(Literal("red", typ=STRING), typ=InputType(STRING))


def test_input_temps_precede_construction() -> None:
    value = Conditional(
        Traversal("flag", typ=BOOL),
        Literal("public-read", typ=STRING),
        Literal("private", typ=STRING),
        typ=STRING,
    )
    node = Resource(
        "b", "aws:s3/bucket:Bucket", [Attribute("acl", value)], ObjectType((("acl", STRING),))
    )
    stmts, _ = _gen(node)
    assert [type(s) for s in stmts] == [VarDecl, If, FallibleCall, ErrorCheck]
    assert stmts[0].is_input
    assert stmts[2].call.args == [("acl", TempRef("tmp0", typ=InputType(STRING)))]


def test_original_node_is_not_rewritten() -> None:
    value = Literal("private", typ=STRING)
    node = Resource("b", "aws:s3/bucket:Bucket", [Attribute("acl", value)])
    _gen(node)
    assert node.inputs[0].value is value


# ============================================================
# LOCALS
# ============================================================


def test_invoke_local_is_fallible() -> None:
    call = Call(
        "invoke",
        [Literal("aws:index/getRegion:getRegion", typ=STRING), ObjectCons([], typ=ObjectType())],
        typ=DYNAMIC,
    )
    stmts, _ = _gen(LocalVariable("region", call, DYNAMIC))
    assert [type(s) for s in stmts] == [FallibleCall, ErrorCheck]
    assert stmts[0].targets == ["region"]


def test_plain_local_is_defined() -> None:
    stmts, _ = _gen(LocalVariable("name", Literal("x", typ=STRING), STRING))
    assert stmts == [Define("name", Literal("x", typ=STRING), node="name")]


# ============================================================
# MODULE
# ============================================================


def _program() -> Program:
    return Program(
        [
            LocalVariable("enabled", Literal(True, typ=BOOL), BOOL),
            Resource(
                "site",
                "aws:s3/bucket:Bucket",
                [
                    Attribute(
                        "acl",
                        Conditional(
                            Traversal("enabled", typ=BOOL),
                            Literal("public-read", typ=STRING),
                            Literal("private", typ=STRING),
                            typ=STRING,
                        ),
                    ),
                    Attribute(
                        "policy",
                        Call("toJSON", [ObjectCons([], typ=ObjectType())], typ=STRING),
                    ),
                ],
                ObjectType((("acl", STRING), ("policy", STRING))),
            ),
            Resource("log", "aws:s3/bucket:Bucket"),
            OutputVariable("endpoint", Traversal("site", ["websiteEndpoint"], typ=OutputType(STRING)), STRING),
        ],
        [Package("aws", 2)],
    )


def test_referenced_names() -> None:
    assert referenced_names(_program().nodes) == {"enabled", "site"}


def test_unreferenced_bindings_discarded() -> None:
    module = build_module(Translation(_program()))
    calls = [s for s in module.body if isinstance(s, FallibleCall) and isinstance(s.call, NewResource)]
    assert [c.targets for c in calls] == [["site"], [DISCARD]]


def test_module_imports() -> None:
    module = build_module(Translation(_program()))
    assert module.utility_imports == ["encoding/json"]
    assert module.provider_imports == ["github.com/pulumi/pulumi-aws/sdk/v2/go/aws/s3"]


def test_every_fallible_call_is_checked() -> None:
    module = build_module(Translation(_program()))
    _assert_checks_adjacent(module.body)


def test_node_order_preserved() -> None:
    module = build_module(Translation(_program()))
    order: list[str] = []
    for s in module.body:
        if s.node not in order:
            order.append(s.node)
    assert order == ["enabled", "site", "log", "endpoint"]


def test_temps_declared_before_use() -> None:
    module = build_module(Translation(_program()))
    declared: set[str] = set()
    for s in module.body:
        if isinstance(s, VarDecl):
            declared.add(s.name)
        elif isinstance(s, Define):
            declared.add(s.name)
        elif isinstance(s, FallibleCall):
            if isinstance(s.call, NewResource):
                for _, value in s.call.args or []:
                    if isinstance(value, TempRef):
                        assert value.name in declared
                    if isinstance(value, Convert) and isinstance(value.expr, TempRef):
                        assert value.expr.name in declared
            declared.update(s.targets)
    assert {"tmp0", "json0"} <= declared
