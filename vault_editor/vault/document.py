"""Documents that hold vault blocks.

The edit session only needs to read all lines, replace a line range and
reload. Ranges are 0-based and half-open, like list slices.

Lines are split on ``\\n`` only, and each line keeps its own ending on
disk, so a replacement never touches bytes outside its range.
"""

import re
from pathlib import Path
from typing import Optional, Protocol, Sequence


LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


def _segments(text: str) -> list[str]:
    """Split text into lines that still carry their terminators."""
    return LINE_RE.findall(text)


def _strip_ending(segment: str) -> str:
    if segment.endswith("\r\n"):
        return segment[:-2]
    if segment.endswith("\n"):
        return segment[:-1]
    return segment


def _line_ending(segments: Sequence[str]) -> str:
    """The first terminator used in segments, LF if none."""
    for segment in segments:
        if segment.endswith("\r\n"):
            return "\r\n"
        if segment.endswith("\n"):
            return "\n"
    return "\n"


def split_lines(text: str) -> list[str]:
    """Split text into lines without terminators, breaking on ``\\n`` only."""
    return [_strip_ending(segment) for segment in _segments(text)]


def replace_line_range(text: str, start: int, end: int, new_lines: Sequence[str]) -> str:
    """
    Replace lines [start, end) of text, leaving every other byte alone.

    New lines take the ending of the lines they replace (or the document's
    first ending). An unterminated last line stays unterminated.
    """
    segments = _segments(text)
    newline = _line_ending(segments[start:end] or segments)
    replacement = [line + newline for line in new_lines]

    open_tail = bool(segments) and not segments[-1].endswith("\n")
    if open_tail and replacement and end >= len(segments):
        if start >= len(segments):
            segments[-1] += newline
        replacement[-1] = new_lines[-1]

    segments[start:end] = replacement
    return "".join(segments)


def _read_raw(path: Path) -> str:
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


class Document(Protocol):
    """The buffer interface an edit session works against."""

    path: Optional[Path]

    def get_lines(self) -> list[str]: ...

    def replace_lines(self, start: int, end: int, new_lines: Sequence[str]) -> None: ...

    def reload(self) -> None: ...


class TextDocument:
    """In-memory document, optionally associated with a path."""

    def __init__(self, lines: Sequence[str], path: Optional[Path] = None, newline: str = "\n"):
        self._lines = list(lines)
        self.path = Path(path) if path else None
        self.newline = newline

    @classmethod
    def from_text(cls, text: str, path: Optional[Path] = None) -> "TextDocument":
        return cls(split_lines(text), path, newline=_line_ending(_segments(text)))

    @property
    def text(self) -> str:
        return self.newline.join(self._lines)

    def get_lines(self) -> list[str]:
        return list(self._lines)

    def replace_lines(self, start: int, end: int, new_lines: Sequence[str]) -> None:
        self._lines[start:end] = list(new_lines)

    def reload(self) -> None:
        """Re-read from disk when backed by a file."""
        if self.path is not None and self.path.exists():
            text = _read_raw(self.path)
            self._lines = split_lines(text)
            self.newline = _line_ending(_segments(text))


class FileDocument:
    """
    Document stored on disk.

    Every read goes to the file and every replacement rewrites it whole,
    so no stale line references survive between calls. Line endings are
    read and written untranslated.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_lines(self) -> list[str]:
        return split_lines(_read_raw(self.path))

    def replace_lines(self, start: int, end: int, new_lines: Sequence[str]) -> None:
        text = replace_line_range(_read_raw(self.path), start, end, new_lines)
        self.path.write_text(text, encoding="utf-8", newline="")

    def reload(self) -> None:
        """Nothing is cached; reads always hit the disk."""
        pass
