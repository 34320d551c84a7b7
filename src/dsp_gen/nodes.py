"""Expression graph nodes and the emit-once generation protocol.

Every node gets its ``result`` name from a :class:`NamingAuthority` when it is
constructed. ``generate(layout, w)`` walks the node's prerequisites first and
then writes the node's own statements, at most once per node instance, so a
sub-expression wired into several parents is computed a single time and all
parents refer to the same result name.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Callable

from dsp_gen.layout import Layout
from dsp_gen.naming import NamingAuthority, default_authority

_Writer = Callable[[str], None]

_DECL = "const float"


class UnwiredNodeError(ValueError):
    """A node was generated while one of its required children was unset or unusable."""


def _float_lit(v: float) -> str:
    """Format a float as a fixed-point literal with six decimals (``440.000000``)."""
    return f"{v:f}"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class Node:
    """Base of all graph nodes.

    Subclasses list their child reference attributes in ``_child_fields`` and
    implement ``_emit``; the walk order and the emit-once guard live here.
    """

    produces_value = True
    _child_fields: tuple[str, ...] = ()

    def __init__(self, base: str, *, names: NamingAuthority | None = None) -> None:
        authority = names if names is not None else default_authority()
        self._result = authority.get_unique_name(base)
        self.generated = False

    @property
    def result(self) -> str:
        return self._result

    def children(self) -> list[Node]:
        """Return the wired child nodes, in generation order."""
        out: list[Node] = []
        for field_name in self._child_fields:
            child = getattr(self, field_name)
            if child is not None:
                out.append(child)
        return out

    def generate(self, layout: Layout, w: _Writer) -> None:
        for dep in self._prerequisites():
            dep.generate(layout, w)
        if not self.generated:
            self._emit(layout, w)
        self.generated = True

    def _prerequisites(self) -> list[Node]:
        return [self._require(field_name) for field_name in self._child_fields]

    def _require(self, field_name: str, *, value: bool = True) -> Node:
        child = getattr(self, field_name)
        if child is None:
            raise UnwiredNodeError(f"{type(self).__name__} '{self.result}' has no {field_name}")
        if value and not child.produces_value:
            raise UnwiredNodeError(
                f"{type(self).__name__} '{self.result}' field '{field_name}' "
                f"references {type(child).__name__} '{child.result}', which produces no value"
            )
        return child

    def _emit(self, layout: Layout, w: _Writer) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.result!r})"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class Constant(Node):
    def __init__(self, name: str, value: float, *, names: NamingAuthority | None = None) -> None:
        super().__init__(name, names=names)
        self.value = float(value)

    def _emit(self, layout: Layout, w: _Writer) -> None:
        w(f"{layout.whitespace()}{_DECL} {self.result} = {_float_lit(self.value)};")


class Operator(Node):
    """Binary infix operator; ``symbol`` and ``default_name`` are fixed per subclass."""

    symbol = ""
    default_name = ""
    _child_fields = ("lhs", "rhs")

    def __init__(
        self,
        lhs: Node | None = None,
        rhs: Node | None = None,
        *,
        name: str | None = None,
        names: NamingAuthority | None = None,
    ) -> None:
        super().__init__(name or self.default_name, names=names)
        self.lhs = lhs
        self.rhs = rhs

    def _emit(self, layout: Layout, w: _Writer) -> None:
        lhs, rhs = self._require("lhs"), self._require("rhs")
        w(f"{layout.whitespace()}{_DECL} {self.result} = {lhs.result} {self.symbol} {rhs.result};")


class Add(Operator):
    symbol = "+"
    default_name = "add_result"


class Sub(Operator):
    symbol = "-"
    default_name = "sub_result"


class Mult(Operator):
    symbol = "*"
    default_name = "mult_result"


class Div(Operator):
    symbol = "/"
    default_name = "div_result"


class Mod(Operator):
    symbol = "%"
    default_name = "mod_result"


OPERATORS: dict[str, type[Operator]] = {
    "add": Add,
    "sub": Sub,
    "mul": Mult,
    "div": Div,
    "mod": Mod,
}


class Function(Node):
    """Call of ``name`` on a single argument; result is named ``<name>_result``."""

    _child_fields = ("arg",)

    def __init__(
        self, name: str, arg: Node | None = None, *, names: NamingAuthority | None = None
    ) -> None:
        super().__init__(name + "_result", names=names)
        self.name = name
        self.arg = arg

    def _emit(self, layout: Layout, w: _Writer) -> None:
        arg = self._require("arg")
        w(f"{layout.whitespace()}{_DECL} {self.result} = {self.name}({arg.result});")


class Loop(Node):
    """Counted loop over ``[start, end)`` running ``body`` once per iteration.

    The result name is the loop counter; a loop produces no value. The body
    is generated inside the block, not before the header.
    """

    produces_value = False
    _child_fields = ("body",)

    def __init__(
        self,
        start: int,
        end: int,
        body: Node | None = None,
        *,
        names: NamingAuthority | None = None,
    ) -> None:
        super().__init__("loop_index", names=names)
        self.start = start
        self.end = end
        self.body = body

    def _prerequisites(self) -> list[Node]:
        return []

    def _emit(self, layout: Layout, w: _Writer) -> None:
        body = self._require("body", value=False)
        idx = self.result
        ws = layout.whitespace()
        w(f"{ws}for (int {idx} = {self.start}; {idx} < {self.end}; {idx}++) {{")
        with layout.block():
            body.generate(layout, w)
        w(f"{ws}}}")


class SampleDelay(Node):
    """One-sample delay (z^-1).

    Reads ``state`` into ``result`` before writing the current input into
    ``state``. ``state`` must live outside the per-call routine.
    """

    _child_fields = ("input",)

    def __init__(self, input: Node | None = None, *, names: NamingAuthority | None = None) -> None:
        authority = names if names is not None else default_authority()
        super().__init__("z1_result", names=authority)
        self.state = authority.get_unique_name("delay_state")
        self.input = input

    def _emit(self, layout: Layout, w: _Writer) -> None:
        inp = self._require("input")
        ws = layout.whitespace()
        w(f"{ws}{_DECL} {self.result} = {self.state};")
        w(f"{ws}{self.state} = {inp.result};")


# ---------------------------------------------------------------------------
# Graph walks
# ---------------------------------------------------------------------------


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node reachable from root once, dependencies before dependents."""
    seen: set[int] = set()

    def visit(node: Node) -> Iterator[Node]:
        if id(node) in seen:
            return
        seen.add(id(node))
        for child in node.children():
            yield from visit(child)
        yield node

    yield from visit(root)


def state_nodes(root: Node) -> list[SampleDelay]:
    """Return the SampleDelay nodes reachable from root, in walk order."""
    return [node for node in iter_nodes(root) if isinstance(node, SampleDelay)]
