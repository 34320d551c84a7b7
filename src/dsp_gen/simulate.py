"""Reference evaluation of node graphs with numpy.

Statements run in the same order the generator emits them: dependencies
first, each node once, loop bodies inside their loop. Delay state starts at
zero and persists from one sample to the next, like the file-scope state of
the generated routine.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Callable, Union

import numpy as np

from dsp_gen.lower import lower_program
from dsp_gen.models import GraphDef
from dsp_gen.naming import NamingAuthority
from dsp_gen.nodes import Constant, Function, Loop, Node, Operator, SampleDelay

_Env = dict[str, np.float32]
_Step = Callable[[_Env, _Env], None]
_Program = list[Union[_Step, tuple[int, "_Program"]]]

_OPERATOR_FUNCS: dict[str, Callable[[np.float32, np.float32], np.float32]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "%": np.fmod,
}

_CALL_FUNCS: dict[str, Callable[[np.float32], np.float32]] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "tanh": np.tanh,
    "exp": np.exp,
    "log": np.log,
    "abs": np.abs,
    "sqrt": np.sqrt,
    "floor": np.floor,
    "ceil": np.ceil,
}


def simulate(graph: GraphDef, n_samples: int) -> np.ndarray:
    """Lower graph and evaluate n_samples output samples."""
    root, prelude = lower_program(graph, NamingAuthority())
    return simulate_node(root, n_samples, prelude)


def simulate_node(root: Node, n_samples: int, prelude: Sequence[Node] = ()) -> np.ndarray:
    """Evaluate the routine generated for root over n_samples samples.

    Raises ValueError for calls to functions with no numpy counterpart.
    """
    if not root.produces_value:
        raise ValueError(f"Root {type(root).__name__} '{root.result}' produces no value")

    program: _Program = []
    done: set[int] = set()
    for node in prelude:
        _schedule(node, program, done)
    _schedule(root, program, done)

    state: _Env = {}
    out = np.zeros(n_samples, dtype=np.float32)
    with np.errstate(all="ignore"):
        for n in range(n_samples):
            env: _Env = {}
            _run(program, env, state)
            out[n] = env[root.result]
    return out


def _run(program: _Program, env: _Env, state: _Env) -> None:
    for step in program:
        if isinstance(step, tuple):
            count, body = step
            for _ in range(count):
                _run(body, env, state)
        else:
            step(env, state)


def _schedule(node: Node, program: _Program, done: set[int]) -> None:
    if isinstance(node, Loop):
        if id(node) in done:
            return
        done.add(id(node))
        body: _Program = []
        if node.body is None:
            raise ValueError(f"Loop '{node.result}' has no body")
        _schedule(node.body, body, done)
        program.append((max(node.end - node.start, 0), body))
        return

    for child in node.children():
        _schedule(child, program, done)
    if id(node) in done:
        return
    done.add(id(node))
    program.append(_step(node))


def _step(node: Node) -> _Step:
    r = node.result

    if isinstance(node, Constant):
        value = np.float32(node.value)

        def const(env: _Env, state: _Env) -> None:
            env[r] = value

        return const

    if isinstance(node, Operator):
        func = _OPERATOR_FUNCS[node.symbol]
        lhs, rhs = node.lhs, node.rhs
        if lhs is None or rhs is None:
            raise ValueError(f"{type(node).__name__} '{r}' is missing an operand")
        a, b = lhs.result, rhs.result

        def binop(env: _Env, state: _Env) -> None:
            env[r] = np.float32(func(env[a], env[b]))

        return binop

    if isinstance(node, Function):
        if node.name not in _CALL_FUNCS:
            raise ValueError(f"Cannot simulate call to unknown function '{node.name}'")
        call_func = _CALL_FUNCS[node.name]
        if node.arg is None:
            raise ValueError(f"Function '{r}' has no arg")
        arg = node.arg.result

        def call(env: _Env, state: _Env) -> None:
            env[r] = np.float32(call_func(env[arg]))

        return call

    if isinstance(node, SampleDelay):
        if node.input is None:
            raise ValueError(f"SampleDelay '{r}' has no input")
        s, inp = node.state, node.input.result

        def delay(env: _Env, state: _Env) -> None:
            env[r] = state.get(s, np.float32(0.0))
            state[s] = env[inp]

        return delay

    raise TypeError(f"Cannot simulate node type {type(node).__name__}")
