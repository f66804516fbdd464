"""Compiler command line parsing."""

from .parser import (
    CommandLineArgument,
    classify_parts,
    enumerate_command_line_parts,
    parse_command_line,
)

__all__ = [
    "CommandLineArgument",
    "classify_parts",
    "enumerate_command_line_parts",
    "parse_command_line",
]
