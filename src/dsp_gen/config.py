"""Emitter dialect configuration."""

from __future__ import annotations

from pydantic import BaseModel


class EmitConfig(BaseModel):
    """Names and switches for the emitted ``process`` routine.

    The defaults produce the reference dialect::

        void process(size_t numFrames, size_t offset) {
        	const auto max = offset + numFrames;
        	for (auto i = offset; i < max; i++) {
        		...
        		output[i] = <result>;
        	}
        }
    """

    routine_name: str = "process"
    output_name: str = "output"
    index_name: str = "i"
    indent: str = "\t"
    # Declare SampleDelay state at file scope so it survives between calls
    persistent_state: bool = True
    # Emit ``float <name>;`` for every name the authority issued
    declare_globals: bool = False

    def routine_names(self) -> list[str]:
        """Identifiers the routine itself defines; generated names must avoid them."""
        return [
            self.routine_name,
            self.output_name,
            self.index_name,
            "numFrames",
            "offset",
            "max",
        ]
