"""Run, verify, watch and track small compiler-checked Rust exercises."""

__version__ = "5.5.1"