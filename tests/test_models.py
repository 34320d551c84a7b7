"""Tests for graph definition models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from dsp_gen import (
    BinOpDef,
    CallDef,
    ConstantDef,
    DelayDef,
    EmitConfig,
    GraphDef,
    LoopDef,
)


class TestNodeDefs:
    def test_constant_defaults(self) -> None:
        c = ConstantDef(id="c", value=1.0)
        assert c.op == "constant"
        assert c.name is None

    def test_binop_ops(self) -> None:
        for op in ("add", "sub", "mul", "div", "mod"):
            assert BinOpDef(id="x", op=op, a="a", b=1.0).op == op

    def test_binop_rejects_unknown_op(self) -> None:
        with pytest.raises(ValidationError):
            BinOpDef(id="x", op="pow", a="a", b="b")  # type: ignore[arg-type]

    def test_loop_defaults(self) -> None:
        loop = LoopDef(id="l", end=8, body="b")
        assert (loop.start, loop.end) == (0, 8)

    def test_int_literal_becomes_float(self) -> None:
        node = BinOpDef(id="x", op="add", a="a", b=2)
        assert node.b == 2.0


class TestGraphDef:
    def test_defaults(self) -> None:
        g = GraphDef(name="g", output="x")
        assert g.nodes == []
        assert g.prelude == []
        assert g.config == EmitConfig()

    def test_discriminated_union_from_json(self) -> None:
        data = {
            "name": "g",
            "output": "z",
            "nodes": [
                {"id": "c", "op": "constant", "value": 440},
                {"id": "s", "op": "call", "func": "sin", "arg": "c"},
                {"id": "m", "op": "mul", "a": "s", "b": 0.5},
                {"id": "z", "op": "delay", "input": "m"},
                {"id": "l", "op": "loop", "start": 0, "end": 2, "body": "c"},
            ],
        }
        g = GraphDef.model_validate(data)
        kinds = [type(n) for n in g.nodes]
        assert kinds == [ConstantDef, CallDef, BinOpDef, DelayDef, LoopDef]

    def test_unknown_op_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GraphDef.model_validate(
                {"name": "g", "output": "x", "nodes": [{"id": "x", "op": "nope"}]}
            )

    def test_json_round_trip(self, shared_graph: GraphDef) -> None:
        text = shared_graph.model_dump_json()
        assert GraphDef.model_validate(json.loads(text)) == shared_graph

    def test_config_block(self) -> None:
        g = GraphDef.model_validate(
            {"name": "g", "output": "x", "config": {"routine_name": "tick"}}
        )
        assert g.config.routine_name == "tick"
        assert g.config.output_name == "output"


class TestEmitConfig:
    def test_defaults(self) -> None:
        cfg = EmitConfig()
        assert cfg.routine_name == "process"
        assert cfg.output_name == "output"
        assert cfg.index_name == "i"
        assert cfg.indent == "\t"
        assert cfg.persistent_state is True
        assert cfg.declare_globals is False

    def test_routine_names(self) -> None:
        names = EmitConfig(index_name="n").routine_names()
        assert set(names) == {"process", "output", "n", "numFrames", "offset", "max"}
