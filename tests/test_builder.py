"""Tests for the top-level generation pass."""

from __future__ import annotations

import pytest

from dsp_gen import (
    Add,
    Builder,
    Constant,
    EmitConfig,
    Layout,
    Loop,
    NamingAuthority,
    SampleDelay,
    generate_source,
)

DELAY_PROGRAM = """\
float delay_state;

void process(size_t numFrames, size_t offset) {
	const auto max = offset + numFrames;
	for (auto i = offset; i < max; i++) {
		const float frequency = 440.000000;
		const float z1_result = delay_state;
		delay_state = frequency;
		output[i] = z1_result;
	}
}
"""


def _delay(names: NamingAuthority) -> SampleDelay:
    frequency = Constant("frequency", 440.0, names=names)
    return SampleDelay(frequency, names=names)


class TestExampleProgram:
    def test_delay_of_constant(self, names: NamingAuthority) -> None:
        assert generate_source(_delay(names), names=names) == DELAY_PROGRAM

    def test_statement_order(self, names: NamingAuthority) -> None:
        lines = generate_source(_delay(names)).splitlines()
        stripped = [line.strip() for line in lines]
        order = [
            "void process(size_t numFrames, size_t offset) {",
            "const float frequency = 440.000000;",
            "const float z1_result = delay_state;",
            "delay_state = frequency;",
            "output[i] = z1_result;",
        ]
        positions = [stripped.index(s) for s in order]
        assert positions == sorted(positions)
        assert stripped[-2:] == ["}", "}"]


class TestBuild:
    def test_depth_restored(self, names: NamingAuthority) -> None:
        layout = Layout()
        Builder().build(_delay(names), layout, [].append)
        assert layout.depth == 0

    def test_relative_to_caller_depth(self, names: NamingAuthority) -> None:
        c = Constant("k", 1.0, names=names)
        layout = Layout(depth=1)
        lines: list[str] = []
        Builder().build(c, layout, lines.append)
        assert layout.depth == 1
        assert lines[0] == "\tvoid process(size_t numFrames, size_t offset) {"
        assert "\t\t\tconst float k = 1.000000;" in lines
        assert "\t\t\toutput[i] = k;" in lines
        assert lines[-1] == "\t}"

    def test_stateless_graph_has_no_declarations(self, names: NamingAuthority) -> None:
        c1 = Constant("a", 1.0, names=names)
        c2 = Constant("b", 2.0, names=names)
        code = generate_source(Add(c1, c2, names=names))
        assert code.startswith("void process(")
        assert "\t\tconst float add_result = a + b;\n\t\toutput[i] = add_result;\n" in code

    def test_loop_root_rejected(self, names: NamingAuthority) -> None:
        loop = Loop(0, 2, Constant("a", 1.0, names=names), names=names)
        lines: list[str] = []
        with pytest.raises(ValueError, match="produces no value"):
            Builder().build(loop, Layout(), lines.append)
        assert lines == []

    def test_prelude_loop(self, names: NamingAuthority) -> None:
        c = Constant("x", 1.0, names=names)
        loop = Loop(0, 4, SampleDelay(c, names=names), names=names)
        gain = Constant("gain", 0.5, names=names)
        code = generate_source(gain, prelude=[loop])
        assert code == (
            "float delay_state;\n"
            "\n"
            "void process(size_t numFrames, size_t offset) {\n"
            "\tconst auto max = offset + numFrames;\n"
            "\tfor (auto i = offset; i < max; i++) {\n"
            "\t\tfor (int loop_index = 0; loop_index < 4; loop_index++) {\n"
            "\t\t\tconst float x = 1.000000;\n"
            "\t\t\tconst float z1_result = delay_state;\n"
            "\t\t\tdelay_state = x;\n"
            "\t\t}\n"
            "\t\tconst float gain = 0.500000;\n"
            "\t\toutput[i] = gain;\n"
            "\t}\n"
            "}\n"
        )

    def test_prelude_shares_with_root(self, names: NamingAuthority) -> None:
        c = Constant("x", 1.0, names=names)
        d = SampleDelay(c, names=names)
        add = Add(d, c, names=names)
        lines = generate_source(add, prelude=[d]).splitlines()
        assert lines.count("float delay_state;") == 1
        assert lines.count("\t\tconst float x = 1.000000;") == 1
        assert lines.count("\t\tconst float z1_result = delay_state;") == 1


class TestConfig:
    def test_custom_names(self, names: NamingAuthority) -> None:
        cfg = EmitConfig(routine_name="render", output_name="out", index_name="n")
        code = generate_source(_delay(names), config=cfg)
        assert "void render(size_t numFrames, size_t offset) {" in code
        assert "for (auto n = offset; n < max; n++) {" in code
        assert "out[n] = z1_result;" in code

    def test_indent_unit(self, names: NamingAuthority) -> None:
        code = generate_source(_delay(names), config=EmitConfig(indent="    "))
        assert "\n        delay_state = frequency;\n" in code

    def test_without_persistent_state(self, names: NamingAuthority) -> None:
        code = generate_source(_delay(names), config=EmitConfig(persistent_state=False))
        assert code.startswith("void process(")
        assert "float delay_state;" not in code

    def test_one_declaration_per_delay(self, names: NamingAuthority) -> None:
        c = Constant("x", 1.0, names=names)
        d1 = SampleDelay(c, names=names)
        d2 = SampleDelay(d1, names=names)
        lines = generate_source(Add(d1, d2, names=names)).splitlines()
        assert lines[:3] == [f"float {d1.state};", f"float {d2.state};", ""]

    def test_declare_globals(self, names: NamingAuthority) -> None:
        root = _delay(names)
        code = generate_source(root, config=EmitConfig(declare_globals=True), names=names)
        head = code.split("\n\n", 1)[0].splitlines()
        assert head == ["float delay_state;", "float frequency;", "float z1_result;"]

    def test_declare_globals_needs_authority(self, names: NamingAuthority) -> None:
        with pytest.raises(ValueError, match="NamingAuthority"):
            generate_source(_delay(names), config=EmitConfig(declare_globals=True))
