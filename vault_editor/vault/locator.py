"""Locate inline vault blocks and plain scalars in YAML-like text.

This is a structural scan, not a YAML parser. A vault block is a header
line such as ``password: !vault |`` followed by lines indented deeper
than the header. Line numbers are 1-based, like an editor cursor.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence


HEADER_RE = re.compile(r"^\s*([A-Za-z0-9_-]+):\s*!vault\s*\|?-?\s*$")
INDENTED_RE = re.compile(r"^\s+\S")
BLANK_RE = re.compile(r"^\s*$")
SCALAR_RE = re.compile(r"^(\s*)([A-Za-z0-9_-]+):\s*(.*?)\s*$")


def _indent_of(line: str) -> str:
    """Leading whitespace of a line."""
    return line[: len(line) - len(line.lstrip())]


@dataclass(frozen=True)
class VaultBlock:
    """An inline encrypted value: header line plus indented ciphertext."""

    key: str
    start_line: int  # header line
    end_line: int  # last ciphertext or blank continuation line
    content: tuple[str, ...]

    @property
    def content_indent(self) -> str:
        """Indentation of the first ciphertext line, reused on reinsertion."""
        return _indent_of(self.content[0]) if self.content else ""


@dataclass(frozen=True)
class VaultDocument:
    """A file that ansible-vault recognises as encrypted in its entirety."""

    path: Path
    line_count: int

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class PlainScalar:
    """A single-line ``key: value`` pair that could be vaulted in place."""

    line: int
    indent: str
    key: str
    value: str


def find_vault_block(lines: Sequence[str], line: int) -> Optional[VaultBlock]:
    """
    Find the inline vault block at or around a line.

    The line may be the header itself or any indented line below it.
    Scanning upward stops at the first non-blank, non-indented line that
    is not a header.

    Args:
        lines: Document lines without line terminators
        line: 1-based line number

    Returns:
        VaultBlock, or None if no block contains the position
    """
    if line < 1 or line > len(lines):
        return None

    header_line: Optional[int] = None
    key: Optional[str] = None
    current = lines[line - 1]

    if match := HEADER_RE.match(current):
        header_line, key = line, match.group(1)
    elif INDENTED_RE.match(current):
        for number in range(line - 1, 0, -1):
            candidate = lines[number - 1]
            if match := HEADER_RE.match(candidate):
                header_line, key = number, match.group(1)
                break
            if not BLANK_RE.match(candidate) and not candidate[:1].isspace():
                break

    if header_line is None or key is None:
        return None

    vault_indent = len(_indent_of(lines[header_line - 1]))
    content: list[str] = []
    end_line = header_line

    for number in range(header_line + 1, len(lines) + 1):
        candidate = lines[number - 1]
        if INDENTED_RE.match(candidate):
            if len(_indent_of(candidate)) <= vault_indent:
                break
            content.append(candidate)
            end_line = number
        elif BLANK_RE.match(candidate):
            end_line = number
        else:
            break

    # A bare header with nothing under it is not a block
    if not content:
        return None

    return VaultBlock(
        key=key,
        start_line=header_line,
        end_line=end_line,
        content=tuple(content),
    )


def find_plain_scalar(lines: Sequence[str], line: int) -> Optional[PlainScalar]:
    """
    Find a plain ``key: value`` scalar on a line.

    Lines that are already vaulted, or that carry no value, do not match.

    Args:
        lines: Document lines without line terminators
        line: 1-based line number

    Returns:
        PlainScalar, or None
    """
    if line < 1 or line > len(lines):
        return None

    match = SCALAR_RE.match(lines[line - 1])
    if not match:
        return None

    indent, key, value = match.groups()
    if not value or "!vault" in value:
        return None

    return PlainScalar(line=line, indent=indent, key=key, value=value)
