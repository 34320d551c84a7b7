"""One-sample delay of a constant, built directly from runtime nodes."""

from dsp_gen import Constant, EmitConfig, NamingAuthority, SampleDelay, generate_source

config = EmitConfig()
names = NamingAuthority(reserved=config.routine_names())
frequency = Constant("frequency", 440.0, names=names)
delay = SampleDelay(frequency, names=names)

if __name__ == "__main__":
    print(generate_source(delay, config=config, names=names), end="")
