"""An undo tree of text revisions."""

from __future__ import annotations

from dataclasses import dataclass, field

from .cursor import Cursor
from .diff import OpaqueDiff
from .movement import move_to_start_of_buffer
from .text import Rope


def _clone_cursor(cursor: Cursor) -> Cursor:
    clone = Cursor.with_range(cursor.start, cursor.end)
    clone.anchor = cursor.anchor
    clone.visual_horizontal_offset = cursor.visual_horizontal_offset
    return clone


@dataclass
class Reference:
    """A link to another revision and the diff that leads there."""

    index: int
    diff: OpaqueDiff


@dataclass
class Revision:
    """A saved state of the text with its cursor and links in the tree."""

    text: Rope
    cursor: Cursor
    parent: Reference | None = None
    children: list[Reference] = field(default_factory=list)
    redo_index: int = 0


def _root_revision(text: Rope) -> Revision:
    cursor = Cursor()
    move_to_start_of_buffer(text, cursor)
    return Revision(text=text, cursor=cursor)


class EditTree:
    """A tree of revisions with a mutable staged text at the head."""

    def __init__(self, text: Rope | str = "") -> None:
        text = Rope(str(text))
        self.revisions: list[Revision] = [_root_revision(text.copy())]
        self.head_index = 0
        self._staged = text
        self.has_staged_changes = False

    def __str__(self) -> str:
        return str(self._staged)

    def next_child(self) -> None:
        """Select the next branch to redo into."""
        head = self.revisions[self.head_index]
        if head.redo_index < max(len(head.children) - 1, 0):
            head.redo_index += 1

    def previous_child(self) -> None:
        """Select the previous branch to redo into."""
        head = self.revisions[self.head_index]
        if head.redo_index > 0:
            head.redo_index -= 1

    def create_revision(self, diff: OpaqueDiff, cursor: Cursor) -> None:
        """Save the staged text as a new child of the head and move to it."""
        new_index = len(self.revisions)
        self.revisions.append(
            Revision(
                text=self._staged.copy(),
                cursor=_clone_cursor(cursor),
                parent=Reference(index=self.head_index, diff=diff.reverse()),
            )
        )
        head = self.revisions[self.head_index]
        head.children.append(Reference(index=new_index, diff=diff))
        head.redo_index = len(head.children) - 1
        self.head_index = new_index
        self.has_staged_changes = False

    def undo(self) -> tuple[OpaqueDiff, Cursor] | None:
        """Move to the parent revision; ``None`` at the root."""
        parent = self.revisions[self.head_index].parent
        if parent is None:
            return None
        previous = self.revisions[parent.index]
        self._staged = previous.text.copy()
        self.head_index = parent.index
        self.has_staged_changes = False
        return parent.diff, _clone_cursor(previous.cursor)

    def redo(self) -> tuple[OpaqueDiff, Cursor] | None:
        """Move to the selected child revision; ``None`` if there is none."""
        head = self.revisions[self.head_index]
        if not 0 <= head.redo_index < len(head.children):
            return None
        reference = head.children[head.redo_index]
        target = self.revisions[reference.index]
        self._staged = target.text.copy()
        self.has_staged_changes = False
        self.head_index = reference.index
        return reference.diff, _clone_cursor(target.cursor)

    def staged(self) -> Rope:
        """The current text, for reading."""
        return self._staged

    def staged_mut(self) -> Rope:
        """The current text, for editing; marks the tree as having staged changes."""
        self.has_staged_changes = True
        return self._staged


@dataclass
class FormattedRevision:
    """Layout position of a revision when drawing the tree."""

    transform: tuple[int, int] = (0, 0)
    current_branch: bool = True


def format_revision(
    revisions: list[Revision],
    formatted: list[FormattedRevision],
    index: int,
    transform: tuple[int, int],
    current_branch: bool,
) -> int:
    """Lay out the subtree rooted at ``index``; return its width."""
    formatted[index].transform = transform
    formatted[index].current_branch = current_branch

    revision = revisions[index]
    subtree_width = 0
    for child_index, child in enumerate(revision.children):
        if child_index > 0:
            subtree_width += 8
        subtree_width += format_revision(
            revisions,
            formatted,
            child.index,
            (transform[0] + subtree_width, transform[1] + 2),
            current_branch and child_index == revision.redo_index,
        )
    return subtree_width


def format_tree(tree: EditTree) -> list[FormattedRevision]:
    """Lay out every revision of ``tree``."""
    formatted = [FormattedRevision() for _ in tree.revisions]
    format_revision(tree.revisions, formatted, 0, (0, 0), True)
    return formatted