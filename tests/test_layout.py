from __future__ import annotations

import pytest

from dsp_gen import Layout


class TestWhitespace:
    def test_depth_zero_is_empty(self) -> None:
        assert Layout().whitespace() == ""

    def test_one_tab_per_level(self) -> None:
        assert Layout(depth=3).whitespace() == "\t\t\t"

    def test_custom_unit(self) -> None:
        assert Layout(depth=2, unit="    ").whitespace() == "        "


class TestDepth:
    def test_indent_outdent_pair(self) -> None:
        layout = Layout(depth=1)
        layout.indent()
        assert layout.depth == 2
        layout.outdent()
        assert layout.depth == 1

    def test_block_restores_depth(self) -> None:
        layout = Layout(depth=2)
        with layout.block() as inner:
            assert inner is layout
            assert layout.depth == 3
            with layout.block():
                assert layout.whitespace() == "\t" * 4
        assert layout.depth == 2

    def test_block_restores_depth_on_error(self) -> None:
        layout = Layout()
        with pytest.raises(RuntimeError):
            with layout.block():
                raise RuntimeError("boom")
        assert layout.depth == 0
