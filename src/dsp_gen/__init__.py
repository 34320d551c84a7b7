"""dsp-gen: emit per-sample processing routines from DSP expression graphs."""

from dsp_gen.builder import Builder, generate_source
from dsp_gen.compile import compile_graph, compile_graph_to_file
from dsp_gen.config import EmitConfig
from dsp_gen.layout import Layout
from dsp_gen.lower import lower_graph, lower_program, lower_root
from dsp_gen.models import (
    BinOpDef,
    CallDef,
    ConstantDef,
    DelayDef,
    GraphDef,
    LoopDef,
    NodeDef,
    Ref,
)
from dsp_gen.naming import NamingAuthority, default_authority, reset_default_authority
from dsp_gen.nodes import (
    OPERATORS,
    Add,
    Constant,
    Div,
    Function,
    Loop,
    Mod,
    Mult,
    Node,
    Operator,
    SampleDelay,
    Sub,
    UnwiredNodeError,
    iter_nodes,
    state_nodes,
)
from dsp_gen.validate import GraphValidationError, validate_config, validate_graph
from dsp_gen.visualize import graph_to_dot, graph_to_dot_file

__all__ = [
    "OPERATORS",
    "Add",
    "BinOpDef",
    "Builder",
    "CallDef",
    "Constant",
    "ConstantDef",
    "DelayDef",
    "Div",
    "EmitConfig",
    "Function",
    "GraphDef",
    "GraphValidationError",
    "Layout",
    "Loop",
    "LoopDef",
    "Mod",
    "Mult",
    "NamingAuthority",
    "Node",
    "NodeDef",
    "Operator",
    "Ref",
    "SampleDelay",
    "Sub",
    "UnwiredNodeError",
    "compile_graph",
    "compile_graph_to_file",
    "default_authority",
    "generate_source",
    "graph_to_dot",
    "graph_to_dot_file",
    "iter_nodes",
    "lower_graph",
    "lower_program",
    "lower_root",
    "reset_default_authority",
    "state_nodes",
    "validate_config",
    "validate_graph",
]
