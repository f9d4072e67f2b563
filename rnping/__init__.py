"""Layer 4 ping toolkit: target and port range parsing, result processors and loggers, and a TCP stub server."""

__version__ = "0.1.0"