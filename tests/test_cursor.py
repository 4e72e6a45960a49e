import pytest

from zeekit.cursor import Cursor
from zeekit.diff import DeleteOperation, OpaqueDiff
from zeekit.text import Rope

TEXT = """
Basic Latin
    ! " # $ % & ' ( ) *+,-./012ABCDEFGHI` a m  t u v z { | } ~
CJK
    豈 更 車 Ⅷ
"""

MULTI_CHAR_EMOJI = "👨\u200d👨\u200d👧\u200d👧"


def text_with_cursor(content):
    text = Rope(content)
    cursor = Cursor()
    cursor.delete_backward  # cursor starts at the beginning
    cursor.end = 1 if text.len_chars() else 0
    return text, cursor


def test_text_with_cursor_helper_matches_start_position():
    text, cursor = text_with_cursor("")
    assert cursor == Cursor()
    text, cursor = text_with_cursor("abc")
    assert cursor == Cursor.with_range(0, 1)


def test_sync_with_empty():
    current_text = Rope("Buy a milk goat\nAt the market\n")
    new_text = Rope("")
    cursor = Cursor.with_range(4, 5)
    cursor.sync(current_text, new_text)
    assert cursor == Cursor()


def test_sync_keeps_line_and_column():
    current_text = Rope("abc\ndefgh\n")
    new_text = Rope("xyz\nuv\n")
    cursor = Cursor.with_range(8, 9)
    cursor.sync(current_text, new_text)
    assert cursor == Cursor.with_range(5, 6)


def test_delete_forward_at_the_end():
    text, cursor = text_with_cursor(TEXT)
    expected = text.copy()
    cursor = Cursor.with_range(text.len_chars(), text.len_chars())
    operation = cursor.delete_forward(text)
    assert text == expected
    assert operation.diff.is_empty()


def test_delete_forward_empty_text():
    text, cursor = text_with_cursor("")
    cursor.delete_forward(text)
    assert cursor == Cursor()


def test_delete_forward_at_the_begining():
    text, cursor = text_with_cursor("// Hello world!\n\n")
    for _ in range(3):
        cursor.delete_forward(text)
    assert text == Rope("Hello world!\n\n")


def test_delete_forward_diff():
    text = Rope("héllo")
    cursor = Cursor.with_range(1, 2)
    operation = cursor.delete_forward(text)
    assert text == "hllo"
    assert operation.diff == OpaqueDiff(1, 2, 0, 1, 1, 0)
    assert cursor == Cursor.with_range(1, 2)


def test_delete_backward_at_the_end():
    text = Rope("// Hello world!\n")
    cursor = Cursor.with_range(text.len_chars(), text.len_chars())
    cursor.delete_backward(text)
    assert text == Rope("// Hello world!")
    cursor.delete_backward(text)
    assert text == Rope("// Hello world")


def test_delete_backward_empty_text():
    text, cursor = text_with_cursor("")
    cursor.delete_backward(text)
    assert cursor == Cursor()


def test_delete_backward_at_the_begining():
    text, cursor = text_with_cursor("// Hello world!\n")
    expected = text.copy()
    operation = cursor.delete_backward(text)
    assert text == expected
    assert operation == DeleteOperation.empty()


def test_end_of_buffer_covers_whole_grapheme():
    text = Rope(MULTI_CHAR_EMOJI)
    assert Cursor.end_of_buffer(text) == Cursor.with_range(0, text.len_chars())


def test_is_empty():
    assert Cursor().is_empty()
    assert not Cursor.with_range(0, 1).is_empty()


def test_selection_without_anchor_is_range():
    cursor = Cursor.with_range(2, 3)
    assert cursor.selection() == (2, 3)


def test_selection_orders_anchor_and_start():
    cursor = Cursor.with_range(5, 6)
    cursor.begin_selection()
    cursor.start, cursor.end = 1, 2
    assert cursor.selection() == (1, 5)
    cursor.start, cursor.end = 8, 9
    assert cursor.selection() == (5, 8)
    cursor.clear_selection()
    assert cursor.selection() == (8, 9)


def test_select_all():
    text = Rope("abc")
    cursor = Cursor.with_range(2, 3)
    cursor.select_all(text)
    assert (cursor.start, cursor.end) == (0, 1)
    assert cursor.selection() == (0, 3)


def test_column_offset_counts_tabs():
    text = Rope("a\tb\ncd")
    assert Cursor.with_range(3, 4).column_offset(4, text) == 6
    assert Cursor.with_range(5, 6).column_offset(4, text) == 1


def test_insert_char_multibyte():
    text = Rope("abc")
    cursor = Cursor.with_range(1, 2)
    cursor.begin_selection()
    diff = cursor.insert_char(text, "é")
    assert text == "aébc"
    assert diff == OpaqueDiff(1, 0, 2, 1, 0, 1)
    assert cursor.anchor is None


def test_insert_chars():
    text = Rope("ab")
    cursor = Cursor.with_range(0, 1)
    diff = cursor.insert_chars(text, iter(["日", "本"]))
    assert text == "日本ab"
    assert diff == OpaqueDiff(0, 0, 6, 0, 0, 2)


def test_delete_line():
    text = Rope("one\ntwo\nthree")
    cursor = Cursor.with_range(5, 6)
    operation = cursor.delete_line(text)
    assert text == "one\nthree"
    assert operation.deleted == "two\n"
    assert operation.diff == OpaqueDiff(4, 4, 0, 4, 4, 0)
    assert cursor == Cursor.with_range(0, 1)


def test_delete_line_empty_text():
    text = Rope("")
    cursor = Cursor()
    assert cursor.delete_line(text) == DeleteOperation.empty()
    assert text == ""


def test_delete_selection():
    text = Rope("hello world")
    cursor = Cursor.with_range(5, 6)
    cursor.begin_selection()
    cursor.start, cursor.end = 0, 1
    operation = cursor.delete_selection(text)
    assert text == " world"
    assert operation.deleted == "hello"
    assert operation.diff == OpaqueDiff(0, 5, 0, 0, 5, 0)
    assert cursor == Cursor.with_range(0, 1)


def test_reconcile_shifts_after_insert_before_cursor():
    new_text = Rope("abhello")
    cursor = Cursor.with_range(3, 4)
    cursor.reconcile(new_text, OpaqueDiff(0, 0, 2, 0, 0, 2))
    assert cursor == Cursor.with_range(5, 6)


def test_reconcile_ignores_edit_after_cursor():
    new_text = Rope("hello world!!")
    cursor = Cursor.with_range(1, 2)
    cursor.reconcile(new_text, OpaqueDiff(11, 0, 2, 11, 0, 2))
    assert cursor == Cursor.with_range(1, 2)


def test_out_of_range_cursor_raises():
    text = Rope("ab")
    cursor = Cursor.with_range(5, 6)
    with pytest.raises(IndexError):
        cursor.column_offset(4, text)