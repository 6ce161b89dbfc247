"""A stack-based bytecode virtual machine with an assembler, tables and a mark-and-sweep collector."""

__version__ = "0.1.0"