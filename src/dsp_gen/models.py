from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from dsp_gen.config import EmitConfig

# Type alias for operand references: either a node ID or a literal float.
Ref = Union[str, float]


# ---------------------------------------------------------------------------
# Node definitions (discriminated union on "op")
# ---------------------------------------------------------------------------


class ConstantDef(BaseModel):
    id: str
    op: Literal["constant"] = "constant"
    value: float
    name: str | None = None  # base name for the emitted symbol, defaults to id


class BinOpDef(BaseModel):
    id: str
    op: Literal["add", "sub", "mul", "div", "mod"]
    a: Ref
    b: Ref


class CallDef(BaseModel):
    id: str
    op: Literal["call"] = "call"
    func: str
    arg: Ref


class LoopDef(BaseModel):
    id: str
    op: Literal["loop"] = "loop"
    start: int = 0
    end: int
    body: str  # node ID generated once per iteration


class DelayDef(BaseModel):
    id: str
    op: Literal["delay"] = "delay"
    input: Ref  # value stored for the next sample


# Discriminated union of all node definitions
NodeDef = Annotated[
    Union[
        ConstantDef,
        BinOpDef,
        CallDef,
        LoopDef,
        DelayDef,
    ],
    Field(discriminator="op"),
]


# ---------------------------------------------------------------------------
# Top-level graph
# ---------------------------------------------------------------------------


class GraphDef(BaseModel):
    name: str
    output: str  # node ID written to the output slot
    nodes: list[NodeDef] = []
    # node IDs generated before the output expression, e.g. loops nobody consumes
    prelude: list[str] = []
    config: EmitConfig = EmitConfig()
