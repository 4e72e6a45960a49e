"""Text buffers, grapheme-aware cursors and movement, undo trees, highlighting rules, editing modes and grammar building."""

__version__ = "0.1.0"