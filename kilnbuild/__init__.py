"""Source resolution, build plans, content-hashed caching, Verilator compilation and diagnostics for SystemVerilog designs."""

__version__ = "0.4.0"