"""A mutable text buffer addressed by character, byte and line indices."""

from __future__ import annotations

from collections.abc import Iterator


class Rope:
    """Mutable text with conversions between char, byte and line indices.

    Lines are separated by ``"\\n"``. A text with ``k`` newlines has ``k + 1``
    lines; the last one may be empty.
    """

    __slots__ = ("_text",)

    def __init__(self, text: str | Rope = "") -> None:
        self._text = str(text)

    # Sizes

    def len_chars(self) -> int:
        return len(self._text)

    def len_bytes(self) -> int:
        return len(self._text.encode("utf-8"))

    def len_lines(self) -> int:
        return self._text.count("\n") + 1

    # Bounds checks

    def _check_char_index(self, char_index: int) -> None:
        if not 0 <= char_index <= len(self._text):
            raise IndexError(
                f"char index {char_index} out of range for text of length {len(self._text)}"
            )

    def _check_range(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(
                f"char range {start}..{end} out of range for text of length {len(self._text)}"
            )

    # Index conversions

    def char(self, char_index: int) -> str:
        if not 0 <= char_index < len(self._text):
            raise IndexError(
                f"char index {char_index} out of range for text of length {len(self._text)}"
            )
        return self._text[char_index]

    def char_to_byte(self, char_index: int) -> int:
        self._check_char_index(char_index)
        return len(self._text[:char_index].encode("utf-8"))

    def byte_to_char(self, byte_index: int) -> int:
        """Index of the char containing ``byte_index`` (or the end of text)."""
        encoded = self._text.encode("utf-8")
        if not 0 <= byte_index <= len(encoded):
            raise IndexError(
                f"byte index {byte_index} out of range for text of {len(encoded)} bytes"
            )
        return len(encoded[:byte_index].decode("utf-8", errors="ignore"))

    def char_to_line(self, char_index: int) -> int:
        self._check_char_index(char_index)
        return self._text.count("\n", 0, char_index)

    def line_to_char(self, line_index: int) -> int:
        """Char index where a line starts; ``len_lines()`` maps to the end."""
        line_count = self.len_lines()
        if not 0 <= line_index <= line_count:
            raise IndexError(
                f"line index {line_index} out of range for text of {line_count} lines"
            )
        if line_index == line_count:
            return len(self._text)
        position = 0
        for _ in range(line_index):
            position = self._text.index("\n", position) + 1
        return position

    # Lines

    def _lines(self) -> list[str]:
        *complete, last = self._text.split("\n")
        return [line + "\n" for line in complete] + [last]

    def line(self, line_index: int) -> str:
        """The text of a line, including its trailing newline if any."""
        lines = self._lines()
        if not 0 <= line_index < len(lines):
            raise IndexError(
                f"line index {line_index} out of range for text of {len(lines)} lines"
            )
        return lines[line_index]

    def lines_at(self, line_index: int) -> Iterator[str]:
        """Iterate over the lines starting with ``line_index``."""
        lines = self._lines()
        if not 0 <= line_index <= len(lines):
            raise IndexError(
                f"line index {line_index} out of range for text of {len(lines)} lines"
            )
        return iter(lines[line_index:])

    # Slicing and editing

    def slice(self, start: int, end: int | None = None) -> str:
        if end is None:
            end = len(self._text)
        self._check_range(start, end)
        return self._text[start:end]

    def insert(self, char_index: int, text: str) -> None:
        self._check_char_index(char_index)
        self._text = self._text[:char_index] + str(text) + self._text[char_index:]

    def insert_char(self, char_index: int, character: str) -> None:
        if len(character) != 1:
            raise ValueError(f"expected a single character, got {character!r}")
        self.insert(char_index, character)

    def remove(self, start: int, end: int) -> None:
        self._check_range(start, end)
        self._text = self._text[:start] + self._text[end:]

    def copy(self) -> Rope:
        return Rope(self._text)

    # Dunder protocol

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Rope({self._text!r})"

    def __len__(self) -> int:
        return len(self._text)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Rope):
            return self._text == other._text
        if isinstance(other, str):
            return self._text == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]