from zeekit.cursor import Cursor
from zeekit.diff import OpaqueDiff
from zeekit.text import Rope
from zeekit.tree import EditTree, FormattedRevision, format_tree


def append(tree, text):
    staged = tree.staged_mut()
    staged.insert(staged.len_chars(), text)


def test_insert_with_revisions_and_no_undo():
    tree = EditTree(Rope())
    tree.staged_mut().insert(0, "The flowers are...")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    append(tree, " so...\n")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    append(tree, "dunno.")
    assert str(tree) == "The flowers are... so...\ndunno."


def test_undo_at_root_has_no_effect():
    tree = EditTree(Rope("The flowers are violet.\n"))
    assert str(tree) == "The flowers are violet.\n"
    assert tree.undo() is None
    assert str(tree) == "The flowers are violet.\n"


def test_insert_and_undo():
    tree = EditTree(Rope())
    tree.staged_mut().insert(0, "The flowers are...")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    append(tree, " so...\n")
    append(tree, "dunno.")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    assert str(tree) == "The flowers are... so...\ndunno."
    tree.undo()
    assert str(tree) == "The flowers are..."

    append(tree, " violet.")
    assert str(tree) == "The flowers are... violet."


def test_undo_redo_idempotent():
    tree = EditTree(Rope())
    tree.staged_mut().insert(0, "The flowers are...")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    append(tree, " so...\n")
    append(tree, "dunno.")
    tree.create_revision(OpaqueDiff.empty(), Cursor.end_of_buffer(tree.staged()))

    assert str(tree) == "The flowers are... so...\ndunno."
    tree.undo()
    assert str(tree) == "The flowers are..."
    tree.redo()
    assert str(tree) == "The flowers are... so...\ndunno."
    tree.undo()
    assert str(tree) == "The flowers are..."
    tree.undo()
    assert str(tree) == ""


def test_undo_returns_reversed_diff_and_parent_cursor():
    tree = EditTree(Rope("abc"))
    append(tree, "de")
    diff = OpaqueDiff(3, 0, 2, 3, 0, 2)
    tree.create_revision(diff, Cursor.with_range(4, 5))

    undone_diff, cursor = tree.undo()
    assert undone_diff == diff.reverse()
    assert cursor == Cursor.with_range(0, 1)

    redone_diff, cursor = tree.redo()
    assert redone_diff == diff
    assert cursor == Cursor.with_range(4, 5)
    assert str(tree) == "abcde"


def test_redo_without_children_returns_none():
    tree = EditTree(Rope("abc"))
    assert tree.redo() is None
    assert str(tree) == "abc"


def test_staged_mut_marks_changes_and_revision_clears_them():
    tree = EditTree(Rope("x"))
    assert tree.has_staged_changes is False
    tree.staged_mut().insert(1, "y")
    assert tree.has_staged_changes is True
    tree.create_revision(OpaqueDiff.empty(), Cursor())
    assert tree.has_staged_changes is False


def test_edits_after_undo_do_not_change_saved_revisions():
    tree = EditTree(Rope("a"))
    append(tree, "b")
    tree.create_revision(OpaqueDiff.empty(), Cursor())
    tree.undo()
    append(tree, "zzz")
    tree.undo()
    assert str(tree) == "a"
    tree.redo()
    assert str(tree) == "ab"


def test_branches_and_child_selection():
    tree = EditTree(Rope(""))
    append(tree, "first")
    tree.create_revision(OpaqueDiff.empty(), Cursor())
    tree.undo()
    append(tree, "second")
    tree.create_revision(OpaqueDiff.empty(), Cursor())
    tree.undo()

    assert tree.revisions[0].redo_index == 1
    tree.next_child()
    assert tree.revisions[0].redo_index == 1
    tree.previous_child()
    assert tree.revisions[0].redo_index == 0
    tree.previous_child()
    assert tree.revisions[0].redo_index == 0

    tree.redo()
    assert str(tree) == "first"
    tree.undo()
    tree.next_child()
    tree.redo()
    assert str(tree) == "second"


def test_format_tree_layout():
    tree = EditTree(Rope(""))
    append(tree, "first")
    tree.create_revision(OpaqueDiff.empty(), Cursor())
    tree.undo()
    append(tree, "second")
    tree.create_revision(OpaqueDiff.empty(), Cursor())

    assert format_tree(tree) == [
        FormattedRevision((0, 0), True),
        FormattedRevision((0, 2), False),
        FormattedRevision((8, 2), True),
    ]


def test_format_tree_single_revision():
    tree = EditTree(Rope("text"))
    assert format_tree(tree) == [FormattedRevision((0, 0), True)]