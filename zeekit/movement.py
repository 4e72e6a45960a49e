"""Cursor movement over a text buffer: by grapheme, line, word and paragraph."""

from __future__ import annotations

import string
from collections.abc import Callable
from enum import Enum

from .cursor import Cursor
from .graphemes import (
    next_grapheme_boundary,
    prev_grapheme_boundary,
    rope_graphemes,
    width,
)
from .text import Rope

_ASCII_PUNCTUATION = frozenset(string.punctuation)
_NOT_UNICODE_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")


class Direction(Enum):
    """The movement direction."""

    FORWARD = "forward"
    BACKWARD = "backward"


def _place(text: Rope, cursor: Cursor, grapheme_start: int) -> None:
    cursor.start = grapheme_start
    cursor.end = next_grapheme_boundary(text, grapheme_start)
    cursor.visual_horizontal_offset = None


def move_horizontally(
    text: Rope, cursor: Cursor, direction: Direction, count: int
) -> None:
    """Move the cursor by ``count`` grapheme clusters."""
    if direction is Direction.FORWARD:
        grapheme_start = next_grapheme_boundary(text, cursor.start, count)
    else:
        grapheme_start = prev_grapheme_boundary(text, cursor.start, count)
    _place(text, cursor, grapheme_start)


def move_vertically(
    text: Rope, cursor: Cursor, tab_width: int, direction: Direction, count: int
) -> None:
    """Move the cursor by ``count`` lines, keeping its visual column if possible."""
    max_line_index = max(text.len_lines() - 1, 0)
    current_line_index = text.char_to_line(cursor.start)

    if direction is Direction.FORWARD:
        if current_line_index == max_line_index:
            # On the last line, moving down goes to the end of the line.
            move_to_end_of_line(text, cursor)
            return
        new_line_index = min(current_line_index + count, max_line_index)
    elif current_line_index > 0:
        new_line_index = max(current_line_index - count, 0)
    else:
        return

    if cursor.visual_horizontal_offset is None:
        current_line_start = text.line_to_char(current_line_index)
        cursor.visual_horizontal_offset = width(
            tab_width, text.slice(current_line_start, cursor.start)
        )
    current_visual_x = cursor.visual_horizontal_offset

    new_visual_x = 0
    char_offset = text.line_to_char(new_line_index)
    for grapheme in rope_graphemes(text.line(new_line_index)):
        grapheme_width = width(tab_width, grapheme.text)
        if new_visual_x + grapheme_width > current_visual_x or grapheme.text == "\n":
            break
        char_offset += len(grapheme.text)
        new_visual_x += grapheme_width

    cursor.start = char_offset
    cursor.end = next_grapheme_boundary(text, char_offset)


def move_word(text: Rope, cursor: Cursor, direction: Direction, count: int) -> None:
    """Move the cursor by ``count`` words."""
    step = move_forward_word if direction is Direction.FORWARD else move_backward_word
    for _ in range(count):
        step(text, cursor)


def move_forward_word(text: Rope, cursor: Cursor) -> None:
    """Move the cursor to the end of the current or next word."""
    length = text.len_chars()
    first_word_character = _skip_while_forward(
        text, cursor.start, lambda c: not _is_word_character(c)
    )
    if first_word_character is None:
        first_word_character = length
    grapheme_start = _skip_while_forward(text, first_word_character, _is_word_character)
    if grapheme_start is None:
        grapheme_start = length
    _place(text, cursor, grapheme_start)


def move_backward_word(text: Rope, cursor: Cursor) -> None:
    """Move the cursor to the start of the current or previous word."""
    first_word_character = _skip_while_backward(
        text, cursor.start, lambda c: not _is_word_character(c)
    )
    if first_word_character is None:
        first_word_character = 0
    grapheme_start = _skip_while_backward(text, first_word_character, _is_word_character)
    if grapheme_start is None:
        grapheme_start = 0
    _place(text, cursor, grapheme_start)


def move_paragraph(
    text: Rope, cursor: Cursor, direction: Direction, count: int
) -> None:
    """Move the cursor by ``count`` paragraphs."""
    step = (
        move_forward_paragraph
        if direction is Direction.FORWARD
        else move_backward_paragraph
    )
    for _ in range(count):
        step(text, cursor)


def _is_blank(line: str) -> bool:
    return all(_is_whitespace(character) for character in line)


def move_forward_paragraph(text: Rope, cursor: Cursor) -> None:
    """Move the cursor to the next blank line, or the end of the text."""
    current_line = text.char_to_line(cursor.start)
    start = next(
        (
            text.line_to_char(current_line + index + 1)
            for index, line in enumerate(text.lines_at(current_line + 1))
            if _is_blank(line)
        ),
        text.len_chars(),
    )
    _place(text, cursor, start)


def move_backward_paragraph(text: Rope, cursor: Cursor) -> None:
    """Move the cursor back towards the previous blank line, or the start."""
    current_line = text.char_to_line(cursor.start)
    first = max(current_line - 1, 0)
    preceding = list(text.lines_at(0))[:first]
    start = next(
        (
            text.line_to_char(max(current_line - (index + 1), 0))
            for index, line in enumerate(reversed(preceding))
            if _is_blank(line)
        ),
        0,
    )
    _place(text, cursor, start)


def move_to_start_of_line(text: Rope, cursor: Cursor) -> None:
    """Move the cursor to the beginning of its line."""
    line_start = text.line_to_char(text.char_to_line(cursor.start))
    _place(text, cursor, line_start)


def move_to_end_of_line(text: Rope, cursor: Cursor) -> None:
    """Move the cursor onto the newline ending its line, or past the last char."""
    line_index = text.char_to_line(cursor.start)
    line = text.line(line_index)
    line_start = text.line_to_char(line_index)
    range_end = line_start + len(line)

    if not line or line[-1] != "\n":
        range_start = range_end
    else:
        range_start = max(range_end - 1, 0)

    cursor.start = range_start
    cursor.end = range_end
    cursor.visual_horizontal_offset = None


def move_to_start_of_buffer(text: Rope, cursor: Cursor) -> None:
    """Move the cursor to the beginning of the text."""
    _place(text, cursor, 0)


def move_to_end_of_buffer(text: Rope, cursor: Cursor) -> None:
    """Move the cursor past the last char of the text."""
    length = text.len_chars()
    cursor.start = length
    cursor.end = length
    cursor.visual_horizontal_offset = None


def _skip_while_forward(
    text: Rope, position: int, predicate: Callable[[str], bool]
) -> int | None:
    return next(
        (
            position + index
            for index, character in enumerate(text.slice(position))
            if not predicate(character)
        ),
        None,
    )


def _skip_while_backward(
    text: Rope, position: int, predicate: Callable[[str], bool]
) -> int | None:
    return next(
        (
            max(position - index, 0)
            for index, character in enumerate(reversed(text.slice(0, position)))
            if not predicate(character)
        ),
        None,
    )


def _is_whitespace(character: str) -> bool:
    return character.isspace() and character not in _NOT_UNICODE_WHITESPACE


def _is_word_character(character: str) -> bool:
    return character == "_" or (
        not _is_whitespace(character) and character not in _ASCII_PUNCTUATION
    )