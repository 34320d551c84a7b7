from __future__ import annotations

from collections.abc import Iterator

import pytest

from dsp_gen import (
    BinOpDef,
    CallDef,
    ConstantDef,
    DelayDef,
    GraphDef,
    LoopDef,
    NamingAuthority,
    reset_default_authority,
)


@pytest.fixture(autouse=True)
def fresh_default_authority() -> Iterator[NamingAuthority]:
    """Give every test its own process-default naming authority."""
    yield reset_default_authority()
    reset_default_authority()


@pytest.fixture
def names() -> NamingAuthority:
    return NamingAuthority()


@pytest.fixture
def delay_graph() -> GraphDef:
    """One-sample delay of a constant 440.0."""
    return GraphDef(
        name="delay",
        output="z1",
        nodes=[
            ConstantDef(id="frequency", value=440.0),
            DelayDef(id="z1", input="frequency"),
        ],
    )


@pytest.fixture
def shared_graph() -> GraphDef:
    """(frequency + sin(phase)) * frequency -- frequency feeds two parents."""
    return GraphDef(
        name="shared",
        output="scaled",
        nodes=[
            ConstantDef(id="frequency", value=440.0),
            ConstantDef(id="phase", value=10.0),
            CallDef(id="s", func="sin", arg="phase"),
            BinOpDef(id="sum", op="add", a="frequency", b="s"),
            BinOpDef(id="scaled", op="mul", a="sum", b="frequency"),
        ],
    )


@pytest.fixture
def loop_graph() -> GraphDef:
    """A delay run four times per sample inside a loop, reading the same constant."""
    return GraphDef(
        name="looped",
        output="gain",
        prelude=["rep"],
        nodes=[
            ConstantDef(id="gain", value=0.5),
            ConstantDef(id="x", value=1.0),
            DelayDef(id="z", input="x"),
            LoopDef(id="rep", start=0, end=4, body="z"),
        ],
    )
