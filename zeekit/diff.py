"""Descriptions of edits applied to a text buffer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OpaqueDiff:
    """Location and size of an edit, in both bytes and chars."""

    byte_index: int = 0
    old_byte_length: int = 0
    new_byte_length: int = 0
    char_index: int = 0
    old_char_length: int = 0
    new_char_length: int = 0

    @classmethod
    def empty(cls) -> OpaqueDiff:
        return cls()

    def is_empty(self) -> bool:
        return self == OpaqueDiff.empty()

    def reverse(self) -> OpaqueDiff:
        """The diff that undoes this one."""
        return OpaqueDiff(
            byte_index=self.byte_index,
            old_byte_length=self.new_byte_length,
            new_byte_length=self.old_byte_length,
            char_index=self.char_index,
            old_char_length=self.new_char_length,
            new_char_length=self.old_char_length,
        )


@dataclass
class DeleteOperation:
    """A deletion: its diff and the text that was removed."""

    diff: OpaqueDiff = field(default_factory=OpaqueDiff.empty)
    deleted: str = ""

    @classmethod
    def empty(cls) -> DeleteOperation:
        return cls()