"""Selectors that match chains of syntax tree node kinds.

A selector such as ``pair > string:nth-child(0)`` names a node kind and its
ancestors from outermost to innermost, with optional sibling positions.
Several selectors can be given at once, separated by commas.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Optional, TypeVar

NTH_CHILD_ANY = -1
_NTH_CHILD_MAX = 2**15 - 1

_MULTISPACE = " \t\r\n"
_ASCII_DIGITS = "0123456789"
_NTH_CHILD_OPEN = ":nth-child("
_ESCAPE = "\\"
_ESCAPABLE = '\\"'

T = TypeVar("T")


class HighlightError(Exception):
    """Base class for errors raised while building highlight rules."""


class SelectorSyntaxError(HighlightError):
    """A selector string could not be parsed."""

    def __init__(self) -> None:
        super().__init__("Invalid selector syntax.")


class NodeKindNotFoundError(HighlightError):
    """A selector names a node kind that the language does not have."""

    def __init__(self, node_kind: str) -> None:
        super().__init__(
            f"Node kind `{node_kind}` does not exist in the supplied language."
        )
        self.node_kind = node_kind


class RegexSyntaxError(HighlightError):
    """A scope pattern holds an invalid regular expression."""

    def __init__(self, error: Exception) -> None:
        super().__init__(f"Invalid regex syntax: {error}")
        self.error = error


@dataclass(frozen=True)
class Selector:
    """A compiled selector, innermost node first.

    ``node_kinds`` holds selector node ids; ``nth_children`` holds the
    required sibling index for each node, or ``NTH_CHILD_ANY``.
    """

    node_kinds: tuple[int, ...]
    nth_children: tuple[int, ...]


@dataclass
class NodeSelectorRaw:
    """One node in a parsed selector: its kind name and optional position."""

    node_kind: str
    nth_child: Optional[int] = None


@dataclass
class SelectorRaw:
    """A parsed selector, outermost node first."""

    node_selectors: list[NodeSelectorRaw] = field(default_factory=list)


def map_node_kind_names(
    node_kind_id_for_name: Mapping[str, int], selector: SelectorRaw
) -> Selector:
    """Resolve node kind names to ids, reversing to innermost-first order."""
    node_kinds: list[int] = []
    nth_children: list[int] = []
    for node_selector in reversed(selector.node_selectors):
        try:
            node_kind = node_kind_id_for_name[node_selector.node_kind]
        except KeyError:
            raise NodeKindNotFoundError(node_selector.node_kind) from None
        nth_child = node_selector.nth_child
        if nth_child is None:
            nth_child = NTH_CHILD_ANY
        elif nth_child > _NTH_CHILD_MAX:
            raise ValueError(f"nth-child index {nth_child} is too large")
        node_kinds.append(node_kind)
        nth_children.append(nth_child)
    return Selector(tuple(node_kinds), tuple(nth_children))


# Parsing. Each parser takes the text and a position and returns the new
# position with the parsed value, or None when it does not match.


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _MULTISPACE:
        pos += 1
    return pos


def _escaped(text: str, pos: int) -> Optional[int]:
    """End of a run of plain or backslash-escaped chars starting at ``pos``."""
    start = pos
    while pos < len(text):
        plain_end = pos
        while plain_end < len(text) and text[plain_end] not in _ESCAPABLE:
            plain_end += 1
        if plain_end > pos:
            pos = plain_end
            continue
        if text[pos] == _ESCAPE:
            if pos + 1 >= len(text) or text[pos + 1] not in _ESCAPABLE:
                return None
            pos += 2
            continue
        if pos == start:
            return None
        return pos
    return pos


def _identifier(text: str, pos: int) -> Optional[tuple[int, str]]:
    if pos < len(text) and text[pos] == '"':
        end = _escaped(text, pos + 1)
        if end is not None and end < len(text) and text[end] == '"':
            return end + 1, text[pos + 1 : end]
    end = pos
    while end < len(text) and (text[end].isalnum() or text[end] in "_-"):
        end += 1
    if end == pos:
        return None
    return end, text[pos:end]


def _node_selector(text: str, pos: int) -> Optional[tuple[int, NodeSelectorRaw]]:
    pos = _skip_space(text, pos)
    parsed = _identifier(text, pos)
    if parsed is None:
        return None
    pos, node_kind = parsed

    nth_child = None
    if text.startswith(_NTH_CHILD_OPEN, pos):
        digits_start = pos + len(_NTH_CHILD_OPEN)
        digits_end = digits_start
        while digits_end < len(text) and text[digits_end] in _ASCII_DIGITS:
            digits_end += 1
        if digits_end > digits_start and text.startswith(")", digits_end):
            nth_child = int(text[digits_start:digits_end])
            pos = digits_end + 1
    return pos, NodeSelectorRaw(node_kind, nth_child)


def _separated_list(
    text: str,
    pos: int,
    separator: str,
    item: Callable[[str, int], Optional[tuple[int, T]]],
) -> Optional[tuple[int, list[T]]]:
    first = item(text, pos)
    if first is None:
        return pos, []
    next_pos, value = first
    if next_pos == pos:
        return None
    values = [value]
    pos = next_pos
    while True:
        after_separator = _skip_space(text, pos)
        if after_separator >= len(text) or text[after_separator] != separator:
            return pos, values
        parsed = item(text, after_separator + 1)
        if parsed is None:
            return pos, values
        pos, value = parsed
        values.append(value)


def _selector(text: str, pos: int) -> Optional[tuple[int, SelectorRaw]]:
    parsed = _separated_list(text, pos, ">", _node_selector)
    if parsed is None:
        return None
    pos, node_selectors = parsed
    return pos, SelectorRaw(node_selectors)


def _selectors(text: str, pos: int) -> Optional[tuple[int, list[SelectorRaw]]]:
    return _separated_list(text, pos, ",", _selector)


def parse_identifier(text: str) -> tuple[str, str]:
    """Parse a bare or double-quoted node kind; return (remaining, identifier)."""
    parsed = _identifier(text, 0)
    if parsed is None:
        raise SelectorSyntaxError()
    pos, identifier = parsed
    return text[pos:], identifier


def parse_node_selector(text: str) -> tuple[str, NodeSelectorRaw]:
    """Parse one node selector; return (remaining, node selector)."""
    parsed = _node_selector(text, 0)
    if parsed is None:
        raise SelectorSyntaxError()
    pos, node_selector = parsed
    return text[pos:], node_selector


def parse_selectors(text: str) -> tuple[str, list[SelectorRaw]]:
    """Parse comma separated selectors; return (remaining, selectors)."""
    parsed = _selectors(text, 0)
    if parsed is None:
        raise SelectorSyntaxError()
    pos, selectors = parsed
    return text[pos:], selectors


def parse(text: str) -> list[SelectorRaw]:
    """Parse comma separated selectors, dropping empty ones."""
    _, selectors = parse_selectors(text)
    return [selector for selector in selectors if selector.node_selectors]