"""User cursors over a text buffer, with selection and editing operations."""

from __future__ import annotations

from collections.abc import Iterable

from .diff import DeleteOperation, OpaqueDiff
from .graphemes import next_grapheme_boundary, prev_grapheme_boundary, width
from .text import Rope


class Cursor:
    """A cursor in a text buffer.

    ``start`` and ``end`` delimit the grapheme cluster under the cursor, as
    char indices aligned to grapheme boundaries. ``anchor`` is where a
    selection began, if one is active. ``visual_horizontal_offset`` remembers
    the desired screen column for vertical movement.
    """

    __slots__ = ("start", "end", "anchor", "visual_horizontal_offset")

    def __init__(self, start: int = 0, end: int = 0) -> None:
        self.start = start
        self.end = end
        self.anchor: int | None = None
        self.visual_horizontal_offset: int | None = None

    @classmethod
    def with_range(cls, start: int, end: int) -> Cursor:
        return cls(start, end)

    @classmethod
    def end_of_buffer(cls, text: Rope) -> Cursor:
        """A cursor over the last grapheme cluster of ``text``."""
        length = text.len_chars()
        return cls(prev_grapheme_boundary(text, length), length)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cursor):
            return NotImplemented
        return (
            self.start == other.start
            and self.end == other.end
            and self.anchor == other.anchor
            and self.visual_horizontal_offset == other.visual_horizontal_offset
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Cursor(start={self.start}, end={self.end}, anchor={self.anchor}, "
            f"visual_horizontal_offset={self.visual_horizontal_offset})"
        )

    def _reset(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        self.anchor = None
        self.visual_horizontal_offset = None

    def is_empty(self) -> bool:
        return self.end <= self.start

    def selection(self) -> tuple[int, int]:
        """The selected char range, or the cursor's own range without a selection."""
        if self.anchor is not None and self.anchor > self.start:
            return self.start, self.anchor
        if self.anchor is not None and self.anchor < self.start:
            return self.anchor, self.start
        return self.start, self.end

    def column_offset(self, tab_width: int, text: Rope) -> int:
        """Display column of the cursor within its line."""
        line_start = text.line_to_char(text.char_to_line(self.start))
        return width(tab_width, text.slice(line_start, self.start))

    def reconcile(self, new_text: Rope, diff: OpaqueDiff) -> None:
        """Adjust the cursor after ``diff`` was applied to produce ``new_text``."""
        old_length = diff.old_char_length
        new_length = diff.new_char_length
        modified_start = diff.char_index
        modified_end = max(old_length, new_length)

        if modified_start >= self.end:
            return

        if modified_end <= self.start:
            if old_length > new_length:
                change = old_length - new_length
                self.start = max(self.start - change, 0)
                self.end = max(self.end - change, 0)
            else:
                change = new_length - old_length
                self.start += change
                self.end += change

        grapheme_start = prev_grapheme_boundary(
            new_text, min(self.end, new_text.len_chars())
        )
        self.start = grapheme_start
        self.end = next_grapheme_boundary(new_text, grapheme_start)

    def begin_selection(self) -> None:
        self.anchor = self.start

    def clear_selection(self) -> None:
        self.anchor = None

    def select_all(self, text: Rope) -> None:
        self.start = 0
        self.end = next_grapheme_boundary(text, 0)
        self.visual_horizontal_offset = None
        self.anchor = text.len_chars()

    # Editing

    def insert_char(self, text: Rope, character: str) -> OpaqueDiff:
        self.clear_selection()
        text.insert_char(self.start, character)
        return OpaqueDiff(
            text.char_to_byte(self.start),
            0,
            len(character.encode("utf-8")),
            self.start,
            0,
            1,
        )

    def insert_chars(self, text: Rope, characters: Iterable[str]) -> OpaqueDiff:
        self.clear_selection()
        inserted = "".join(characters)
        text.insert(self.start, inserted)
        return OpaqueDiff(
            text.char_to_byte(self.start),
            0,
            len(inserted.encode("utf-8")),
            self.start,
            0,
            len(inserted),
        )

    def delete_forward(self, text: Rope) -> DeleteOperation:
        length = text.len_chars()
        if length == 0 or length == self.start:
            return DeleteOperation.empty()

        byte_start = text.char_to_byte(self.start)
        byte_end = text.char_to_byte(self.end)
        diff = OpaqueDiff(
            byte_start,
            byte_end - byte_start,
            0,
            self.start,
            self.end - self.start,
            0,
        )
        text.remove(self.start, self.end)

        grapheme_start = self.start
        grapheme_end = next_grapheme_boundary(text, grapheme_start)
        deleted = text.slice(grapheme_start, grapheme_end)
        self._reset(grapheme_start, grapheme_end)
        return DeleteOperation(diff, deleted)

    def delete_backward(self, text: Rope) -> DeleteOperation:
        if self.start <= 0:
            return DeleteOperation.empty()
        grapheme_start = prev_grapheme_boundary(text, self.start, 1)
        self.start = grapheme_start
        self.end = next_grapheme_boundary(text, grapheme_start)
        self.visual_horizontal_offset = None
        return self.delete_forward(text)

    def delete_line(self, text: Rope) -> DeleteOperation:
        if text.len_chars() == 0:
            return DeleteOperation.empty()

        line_index = text.char_to_line(self.start)
        delete_start = text.line_to_char(line_index)
        delete_end = text.line_to_char(line_index + 1)
        deleted = text.slice(delete_start, delete_end)
        byte_start = text.char_to_byte(delete_start)
        diff = OpaqueDiff(
            byte_start,
            text.char_to_byte(delete_end) - byte_start,
            0,
            delete_start,
            delete_end - delete_start,
            0,
        )
        text.remove(delete_start, delete_end)

        grapheme_start = text.line_to_char(
            min(line_index, max(text.len_lines() - 2, 0))
        )
        grapheme_end = next_grapheme_boundary(text, grapheme_start)
        self._reset(grapheme_start, grapheme_end)
        return DeleteOperation(diff, deleted)

    def delete_selection(self, text: Rope) -> DeleteOperation:
        if text.len_chars() == 0:
            return DeleteOperation.empty()

        selection_start, selection_end = self.selection()
        deleted = text.slice(selection_start, selection_end)
        byte_start = text.char_to_byte(selection_start)
        diff = OpaqueDiff(
            byte_start,
            text.char_to_byte(selection_end) - byte_start,
            0,
            selection_start,
            selection_end - selection_start,
            0,
        )
        text.remove(selection_start, selection_end)

        grapheme_start = min(
            self.start, prev_grapheme_boundary(text, text.len_chars())
        )
        grapheme_end = next_grapheme_boundary(text, grapheme_start)
        self._reset(grapheme_start, grapheme_end)
        return DeleteOperation(diff, deleted)

    def sync(self, current_text: Rope, new_text: Rope) -> None:
        """Move the cursor to the same line and column in a replaced text."""
        current_line = current_text.char_to_line(self.start)
        current_line_offset = self.start - current_text.line_to_char(current_line)

        new_line = min(current_line, max(new_text.len_lines() - 1, 0))
        new_line_offset = min(
            current_line_offset, max(len(new_text.line(new_line)) - 1, 0)
        )
        grapheme_end = next_grapheme_boundary(
            new_text, new_text.line_to_char(new_line) + new_line_offset
        )
        grapheme_start = prev_grapheme_boundary(new_text, grapheme_end)
        self._reset(grapheme_start, grapheme_end)