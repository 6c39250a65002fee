"""Tests for the JSON program format and IR serialization."""

import pytest

from hcl2go.context import Translation
from hcl2go.middleend import build_module
from hcl2go.model import (
    BOOL,
    DYNAMIC,
    INT,
    NUMBER,
    STRING,
    BinaryOp,
    Call,
    Conditional,
    InputType,
    ListType,
    Literal,
    LocalVariable,
    MapType,
    ObjectType,
    OutputType,
    OutputVariable,
    Resource,
    Traversal,
    UnaryOp,
)
from hcl2go.serialize import (
    ProgramFormatError,
    expr_from_json,
    program_from_dict,
    program_to_dict,
    serialize,
    type_from_json,
)

PROGRAM = {
    "packages": [{"name": "aws", "version": 2}],
    "nodes": [
        {"kind": "local", "name": "prod", "value": {"literal": True}},
        {
            "kind": "resource",
            "name": "site",
            "token": "aws:s3/bucket:Bucket",
            "inputType": {"object": {"acl": "string", "tags": {"map": "string"}}},
            "inputs": {
                "acl": {
                    "conditional": [{"ref": "prod", "type": "bool"}, {"literal": "private"}, {"literal": "public-read"}],
                    "type": "string",
                },
                "tags": {"object": {"env": {"literal": "dev"}}, "type": {"map": "string"}},
            },
        },
        {
            "kind": "output",
            "name": "endpoint",
            "type": "string",
            "value": {"ref": "site.websiteEndpoint", "type": {"output": "string"}},
        },
    ],
}


def test_types() -> None:
    assert type_from_json("number") == NUMBER
    assert type_from_json({"list": {"map": "int"}}) == ListType(MapType(INT))
    assert type_from_json({"input": {"output": "bool"}}) == InputType(OutputType(BOOL))
    obj = type_from_json({"object": {"a": "string"}, "token": "aws:s3/X:X"})
    assert obj == ObjectType((("a", STRING),), "aws:s3/X:X")


def test_literal_types_default_from_value() -> None:
    assert expr_from_json({"literal": "x"}).typ == STRING
    assert expr_from_json({"literal": 1}).typ == INT
    assert expr_from_json({"literal": 1.5}).typ == NUMBER
    assert expr_from_json({"literal": False}).typ == BOOL
    assert expr_from_json({"literal": None}).typ == DYNAMIC
    assert expr_from_json({"literal": 1, "type": "number"}).typ == NUMBER


def test_reference_path() -> None:
    assert expr_from_json({"ref": "a.b.c"}) == Traversal("a", ["b", "c"], typ=DYNAMIC)


def test_operator_types_derived() -> None:
    cmp = expr_from_json({"binary": "==", "left": {"literal": 1}, "right": {"literal": 2}})
    assert isinstance(cmp, BinaryOp)
    assert cmp.typ == BOOL
    total = expr_from_json({"binary": "+", "left": {"literal": 1}, "right": {"literal": 2}})
    assert total.typ == INT
    neg = expr_from_json({"unary": "!", "operand": {"ref": "flag"}})
    assert isinstance(neg, UnaryOp)
    assert neg.typ == BOOL


def test_program_from_dict() -> None:
    program = program_from_dict(PROGRAM)
    assert [p.name for p in program.packages] == ["aws"]
    assert program.package("aws").major_version == 2
    prod, site, endpoint = program.nodes
    assert isinstance(prod, LocalVariable)
    assert prod.typ == BOOL
    assert isinstance(site, Resource)
    assert [a.name for a in site.inputs] == ["acl", "tags"]
    assert isinstance(site.inputs[0].value, Conditional)
    assert site.input_type.property("tags") == MapType(STRING)
    assert isinstance(endpoint, OutputVariable)
    assert endpoint.value == Traversal("site", ["websiteEndpoint"], typ=OutputType(STRING))


def test_missing_input_type_built_from_inputs() -> None:
    program = program_from_dict(
        {"nodes": [{"kind": "resource", "name": "b", "token": "t:m:T", "inputs": {"n": {"literal": 1}}}]}
    )
    assert program.nodes[0].input_type == ObjectType((("n", INT),))


def test_round_trip() -> None:
    program = program_from_dict(PROGRAM)
    assert program_from_dict(program_to_dict(program)) == program


def test_call_arguments() -> None:
    call = expr_from_json({"call": "join", "args": [{"literal": ","}, {"ref": "xs"}], "type": "string"})
    assert isinstance(call, Call)
    assert call.args[0] == Literal(",", typ=STRING)


@pytest.mark.parametrize(
    "data,path",
    [
        ([], "$"),
        ({"nodes": {}}, "$.nodes"),
        ({"nodes": [{"kind": "module", "name": "m"}]}, "$.nodes[0].kind"),
        ({"nodes": [{"kind": "local", "name": "l", "value": {"bogus": 1}}]}, "$.nodes[0].value"),
        (
            {"nodes": [{"kind": "resource", "name": "r", "token": "t", "inputs": {"acl": {"literal": []}}}]},
            "$.nodes[0].inputs.acl.literal",
        ),
        ({"nodes": [{"kind": "output", "name": "o", "type": "float", "value": {"literal": 1}}]}, "$.nodes[0].type"),
        ({"packages": [{"name": "aws", "version": "2"}]}, "$.packages[0].version"),
        ({"nodes": [{"kind": "local", "name": "l", "value": {"conditional": [{"literal": 1}]}}]}, "$.nodes[0].value.conditional"),
    ],
)
def test_format_errors(data, path) -> None:
    with pytest.raises(ProgramFormatError) as exc:
        program_from_dict(data)
    assert exc.value.path == path


def test_duplicate_node_names_rejected() -> None:
    data = {
        "nodes": [
            {"kind": "local", "name": "a", "value": {"literal": 1}},
            {"kind": "local", "name": "a", "value": {"literal": 2}},
        ]
    }
    with pytest.raises(ProgramFormatError) as exc:
        program_from_dict(data)
    assert exc.value.path == "$.nodes[1]"


def test_serialize_module() -> None:
    module = build_module(Translation(program_from_dict(PROGRAM)))
    data = serialize(module)
    assert data["_type"] == "Module"
    assert data["provider_imports"] == ["github.com/pulumi/pulumi-aws/sdk/v2/go/aws/s3"]
    kinds = [s["_type"] for s in data["body"]]
    assert kinds == ["Define", "VarDecl", "If", "FallibleCall", "ErrorCheck", "Export"]
    assert data["body"][0]["node"] == "prod"
    assert data["body"][1]["typ"] == "string"
    assert data["body"][3]["call"]["_type"] == "NewResource"
