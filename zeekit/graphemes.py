"""Grapheme cluster navigation, display width and whitespace cleanup."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass
from itertools import accumulate

import regex
from wcwidth import wcwidth

from .text import Rope

_GRAPHEME = regex.compile(r"\X")
_NOT_RUST_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")


def _as_str(text: str | Rope) -> str:
    return text if isinstance(text, str) else str(text)


def _is_whitespace(character: str) -> bool:
    return character.isspace() and character not in _NOT_RUST_WHITESPACE


def width(tab_width: int, text: str | Rope) -> int:
    """Display width of ``text`` in terminal columns, counting tabs as ``tab_width``."""
    content = _as_str(text)
    if content == "\t":
        return tab_width
    return content.count("\t") * tab_width + sum(
        max(wcwidth(character), 0) for character in content
    )


@dataclass(frozen=True)
class RopeGrapheme:
    """One extended grapheme cluster and its byte span in the source text."""

    text: str
    byte_start: int
    byte_end: int

    def __str__(self) -> str:
        return self.text


def rope_graphemes(text: str | Rope) -> Iterator[RopeGrapheme]:
    """Yield the grapheme clusters of ``text`` in order."""
    byte_start = 0
    for match in _GRAPHEME.finditer(_as_str(text)):
        cluster = match.group()
        byte_end = byte_start + len(cluster.encode("utf-8"))
        yield RopeGrapheme(cluster, byte_start, byte_end)
        byte_start = byte_end


def _boundaries(content: str) -> list[int]:
    lengths = (len(match.group()) for match in _GRAPHEME.finditer(content))
    return list(accumulate(lengths, initial=0))


def _check_char_index(content: str, char_index: int) -> None:
    if not 0 <= char_index <= len(content):
        raise IndexError(
            f"char index {char_index} out of range for text of length {len(content)}"
        )


def prev_grapheme_boundary(text: str | Rope, char_index: int, n: int = 1) -> int:
    """The ``n``-th grapheme boundary before ``char_index`` (0 at the start)."""
    content = _as_str(text)
    _check_char_index(content, char_index)
    bounds = _boundaries(content)
    position = char_index
    for _ in range(n):
        index = bisect_left(bounds, position)
        if index == 0:
            return 0
        position = bounds[index - 1]
    return position


def next_grapheme_boundary(text: str | Rope, char_index: int, n: int = 1) -> int:
    """The ``n``-th grapheme boundary after ``char_index`` (the length at the end)."""
    content = _as_str(text)
    _check_char_index(content, char_index)
    bounds = _boundaries(content)
    position = char_index
    for _ in range(n):
        index = bisect_right(bounds, position)
        if index == len(bounds):
            return len(content)
        position = bounds[index]
    return position


def strip_trailing_whitespace(text: str | Rope) -> Rope:
    """Return a copy with trailing whitespace and trailing blank lines removed.

    A final newline is appended if the result has more than one char and
    does not end with one.
    """
    result = Rope(_as_str(text))
    trailing_empty_line = True
    for line_index in reversed(range(result.len_lines())):
        start = result.line_to_char(line_index)
        if line_index + 1 < result.len_lines():
            end = result.line_to_char(line_index + 1)
        else:
            end = result.len_chars()
        if start == end:
            continue

        cursor = end - 1
        while cursor > start:
            cursor -= 1
            if _is_whitespace(result.char(cursor)):
                result.remove(cursor, cursor + 1)
            else:
                trailing_empty_line = False
                break
        if trailing_empty_line and cursor == start:
            result.remove(start, result.len_chars())

    length = result.len_chars()
    if length > 1 and result.char(length - 1) != "\n":
        result.insert_char(length, "\n")
    return result