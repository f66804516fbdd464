"""Compiler command line tokenizer and argument classifier.

The build engine logs each compiler call as one shell-escaped string, e.g.:

    /usr/bin/dotnet exec "/sdk/Roslyn/csc.dll" /noconfig /reference:"A B.dll" Program.cs

Tokenizing is quote-aware (not a plain split on whitespace) and classifying
separates ``/name:value`` switches from positional arguments.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

WHITESPACE = frozenset(" \t\n\v\f\r")


@dataclass(frozen=True)
class CommandLineArgument:
    """One classified command line argument.

    ``switch`` is None for positional arguments; ``value`` is None for bare
    switches such as ``/optimize``.
    """

    switch: str | None
    value: str | None = None

    @property
    def is_positional(self) -> bool:
        return self.switch is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"switch": self.switch, "value": self.value}


def enumerate_command_line_parts(command_line: str) -> Iterator[str]:
    """Split a command line into whitespace-delimited, quote-aware parts.

    Rules:
    - Whitespace outside quotes ends the current part
    - A double quote toggles quoting and is dropped
    - ``\\"`` is an escaped literal quote, any other backslash is kept as-is
      together with the character after it

    Unterminated quotes and a trailing backslash are tolerated.

    Args:
        command_line: Raw command line text

    Yields:
        Non-empty parts in order
    """
    part: list[str] = []
    in_quote = False
    chars = iter(command_line)

    for c in chars:
        if c == "\\":
            following = next(chars, None)
            if following == '"':
                part.append('"')
            else:
                part.append(c)
                if following is not None:
                    part.append(following)
        elif c in WHITESPACE:
            if in_quote:
                part.append(c)
            elif part:
                yield "".join(part)
                part.clear()
        elif c == '"':
            in_quote = not in_quote
        else:
            part.append(c)

    if part:
        yield "".join(part)


def classify_parts(parts: Iterable[str]) -> list[CommandLineArgument]:
    """Classify command line parts into switches and positional arguments.

    The first part is always the invoked program.

    Args:
        parts: Parts as produced by enumerate_command_line_parts

    Returns:
        Ordered argument list (empty if there are no parts)
    """
    iterator = iter(parts)
    program = next(iterator, None)
    if program is None:
        return []

    args = [CommandLineArgument(None, program)]
    for part in iterator:
        if part.startswith("/"):
            value_start = part.find(":")
            if 0 <= value_start < len(part) - 1:
                args.append(CommandLineArgument(part[1:value_start], part[value_start + 1:]))
            elif value_start >= 0:
                # Trailing colon, no value
                args.append(CommandLineArgument(part[1:value_start]))
            else:
                args.append(CommandLineArgument(part[1:]))
        else:
            args.append(CommandLineArgument(None, part))

    return args


def parse_command_line(command_line: str) -> list[CommandLineArgument]:
    """Tokenize and classify a compiler command line."""
    return classify_parts(enumerate_command_line_parts(command_line))
