"""Top-level generation pass: routine prologue, root expression, epilogue."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Callable

from dsp_gen.config import EmitConfig
from dsp_gen.layout import Layout
from dsp_gen.naming import NamingAuthority
from dsp_gen.nodes import Node, SampleDelay, state_nodes

logger = logging.getLogger(__name__)

_Writer = Callable[[str], None]


class Builder:
    """Emits one complete ``process`` routine for one root expression.

    ``prelude`` nodes are generated inside the sample loop before the root;
    this is how nodes whose results nobody consumes (loops) get emitted.
    """

    def __init__(
        self, config: EmitConfig | None = None, *, names: NamingAuthority | None = None
    ) -> None:
        self.config = config or EmitConfig()
        self.names = names

    def build(
        self, root: Node, layout: Layout, w: _Writer, prelude: Sequence[Node] = ()
    ) -> None:
        if not root.produces_value:
            raise ValueError(
                f"Root {type(root).__name__} '{root.result}' produces no value to write to "
                f"{self.config.output_name}"
            )

        cfg = self.config
        idx = cfg.index_name
        ws = layout.whitespace()

        self._emit_declarations([*prelude, root], layout, w)

        logger.debug("generating %s for root %r at depth %d", cfg.routine_name, root, layout.depth)
        w(f"{ws}void {cfg.routine_name}(size_t numFrames, size_t offset) {{")
        with layout.block():
            w(f"{layout.whitespace()}const auto max = offset + numFrames;")
            w(f"{layout.whitespace()}for (auto {idx} = offset; {idx} < max; {idx}++) {{")
            with layout.block():
                for node in prelude:
                    node.generate(layout, w)
                root.generate(layout, w)
                w(f"{layout.whitespace()}{cfg.output_name}[{idx}] = {root.result};")
            w(f"{layout.whitespace()}}}")
        w(f"{ws}}}")

    def _emit_declarations(self, roots: list[Node], layout: Layout, w: _Writer) -> None:
        ws = layout.whitespace()
        wrote = False
        if self.config.declare_globals:
            if self.names is None:
                raise ValueError("declare_globals requires the NamingAuthority used for the graph")
            self.names.emit_global_declarations(lambda line: w(ws + line))
            wrote = True
        elif self.config.persistent_state:
            for delay in _collect_state(roots):
                w(f"{ws}float {delay.state};")
                wrote = True
        if wrote:
            w("")


def _collect_state(roots: list[Node]) -> list[SampleDelay]:
    seen: set[int] = set()
    out: list[SampleDelay] = []
    for root in roots:
        for delay in state_nodes(root):
            if id(delay) not in seen:
                seen.add(id(delay))
                out.append(delay)
    return out


def generate_source(
    root: Node,
    *,
    config: EmitConfig | None = None,
    names: NamingAuthority | None = None,
    prelude: Sequence[Node] = (),
) -> str:
    """Run one generation pass over root and return the emitted text."""
    cfg = config or EmitConfig()
    lines: list[str] = []
    layout = Layout(unit=cfg.indent)
    Builder(cfg, names=names).build(root, layout, lines.append, prelude)
    return "\n".join(lines) + "\n"
