"""Command line construction for the QF-Test runner.

- ArgumentList: token list with ENFORCE/DROP/OVERWRITE/DEFAULT presets
- CommandLineAssembler: argument list bound to a binary and run mode
"""

from .arguments import AppendState, ArgumentList, PresetType, tokenize
from .assembler import CommandLineAssembler, RunMode

__all__ = [
    "AppendState",
    "ArgumentList",
    "PresetType",
    "tokenize",
    "CommandLineAssembler",
    "RunMode",
]
