"""Tests for temp emission."""

import pytest

from hcl2go.ir import Assign, BytesToString, Define, ErrorCheck, FallibleCall, If, MarshalJSON, VarDecl
from hcl2go.middleend.lowering import ConditionalTemp, SerializationTemp
from hcl2go.middleend.temps import gen_temps
from hcl2go.model import BOOL, STRING, Literal, TempRef, Traversal


def test_conditional_temp_declares_then_assigns() -> None:
    cond = Traversal("flag", typ=BOOL)
    a = Literal("a", typ=STRING)
    b = Literal("b", typ=STRING)
    stmts = gen_temps([ConditionalTemp("tmp0", cond, a, b, STRING)], "out")
    assert stmts == [
        VarDecl("tmp0", STRING, False, node="out"),
        If(cond, [Assign("tmp0", a, node="out")], [Assign("tmp0", b, node="out")], node="out"),
    ]


def test_serialization_temp_marshals_checks_converts() -> None:
    value = Literal("x", typ=STRING)
    stmts = gen_temps([SerializationTemp("json0", "tmpJSON0", value)])
    assert [type(s) for s in stmts] == [FallibleCall, ErrorCheck, Define]
    call = stmts[0]
    assert call.targets == ["tmpJSON0"]
    assert isinstance(call.call, MarshalJSON)
    assert call.call.value == value
    assert stmts[2].name == "json0"
    assert stmts[2].value == BytesToString("tmpJSON0", typ=STRING)


def test_order_is_preserved() -> None:
    cond = Traversal("flag", typ=BOOL)
    temps = [
        ConditionalTemp("tmp0", cond, Literal("a", typ=STRING), Literal("b", typ=STRING), STRING),
        SerializationTemp("json0", "tmpJSON0", TempRef("tmp0", typ=STRING)),
    ]
    stmts = gen_temps(temps)
    assert [type(s) for s in stmts] == [VarDecl, If, FallibleCall, ErrorCheck, Define]


def test_empty() -> None:
    assert gen_temps([]) == []


def test_unknown_temp_raises() -> None:
    with pytest.raises(TypeError):
        gen_temps([object()])
