"""Highlighting rules mapping syntax tree node selectors to scopes."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from .selector import (
    RegexSyntaxError,
    Selector,
    map_node_kind_names,
    parse,
)

_MAX_NODE_KINDS = 2**16


@dataclass(frozen=True)
class Scope:
    """A highlighting scope name such as ``keyword.control``."""

    name: str


class ScopePattern(ABC):
    """Chooses a scope for a node, possibly depending on its text."""

    @abstractmethod
    def matches(self, content: str) -> Optional[Scope]:
        """The scope for a node with this text, or ``None``."""


@dataclass(frozen=True)
class AllPattern(ScopePattern):
    """Always yields its scope."""

    scopes: Scope

    def matches(self, content: str) -> Optional[Scope]:
        return self.scopes


@dataclass(frozen=True)
class ExactPattern(ScopePattern):
    """Yields its scope when the node text equals ``exact``."""

    exact: str
    scopes: Scope

    def matches(self, content: str) -> Optional[Scope]:
        return self.scopes if content == self.exact else None


@dataclass(frozen=True, eq=False)
class RegexPattern(ScopePattern):
    """Yields its scope when the regex matches anywhere in the node text."""

    regex: re.Pattern
    scopes: Scope

    def matches(self, content: str) -> Optional[Scope]:
        return self.scopes if self.regex.search(content) else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegexPattern):
            return NotImplemented
        return self.regex.pattern == other.regex.pattern and self.scopes == other.scopes

    def __hash__(self) -> int:
        return hash((self.regex.pattern, self.scopes))


@dataclass(frozen=True)
class PatternList(ScopePattern):
    """Yields the scope of the first pattern that matches."""

    patterns: tuple[ScopePattern, ...]

    def matches(self, content: str) -> Optional[Scope]:
        for pattern in self.patterns:
            scope = pattern.matches(content)
            if scope is not None:
                return scope
        return None


def parse_scope_pattern(value: Any) -> ScopePattern:
    """Build a scope pattern from decoded JSON.

    A string is a scope for every node; ``{"exact", "scopes"}`` and
    ``{"match", "scopes"}`` objects test the node text; a list tries each
    pattern in turn.
    """
    if isinstance(value, str):
        return AllPattern(Scope(value))
    if isinstance(value, dict):
        scopes = value.get("scopes")
        if isinstance(scopes, str):
            exact = value.get("exact")
            if isinstance(exact, str):
                return ExactPattern(exact, Scope(scopes))
            regex = value.get("match")
            if isinstance(regex, str):
                try:
                    compiled = re.compile(regex)
                except re.error as error:
                    raise RegexSyntaxError(error) from error
                return RegexPattern(compiled, Scope(scopes))
    elif isinstance(value, list):
        return PatternList(tuple(parse_scope_pattern(item) for item in value))
    raise ValueError(f"not a valid scope pattern: {value!r}")


@dataclass(frozen=True)
class HighlightRule:
    """Selectors and the scope pattern applied to nodes they select."""

    selectors: tuple[Selector, ...]
    scope: ScopePattern


@dataclass
class HighlightRules:
    """Compiled highlighting rules for one language."""

    name: str
    node_id_to_selector_id: dict[int, int]
    rules: list[HighlightRule] = field(default_factory=list)

    def get_selector_node_id(self, node_kind_id: int) -> int:
        """Selector id for a node kind id; unknown ids get an id of their own."""
        return self.node_id_to_selector_id.get(
            node_kind_id, len(self.node_id_to_selector_id)
        )

    def matches(
        self,
        node_stack: Sequence[int],
        nth_children: Sequence[int],
        content: str,
    ) -> Optional[Scope]:
        """The scope for the innermost node of ``node_stack``.

        ``node_stack`` holds selector node ids from the node outwards to the
        root and ``nth_children`` the sibling index of each. The selector that
        matches closest to the node wins; ties go to the longer selector.
        """
        if not node_stack:
            return None

        distance_to_match: Optional[int] = None
        num_nodes_match = 0
        scope: Optional[Scope] = None
        for rule in self.rules:
            rule_scope = rule.scope.matches(content)
            if rule_scope is None:
                continue

            for selector in rule.selectors:
                kinds = selector.node_kinds
                span = len(kinds)
                if span > len(node_stack):
                    continue

                last_start = len(node_stack) - span
                if distance_to_match is not None:
                    last_start = min(last_start, distance_to_match)
                for start in range(last_start + 1):
                    if tuple(node_stack[start : start + span]) != kinds:
                        continue

                    if any(
                        wanted >= 0 and wanted != actual
                        for wanted, actual in zip(
                            selector.nth_children, nth_children[start : start + span]
                        )
                    ):
                        continue

                    if start == distance_to_match and num_nodes_match > span:
                        break

                    distance_to_match = start
                    num_nodes_match = span
                    scope = rule_scope
                    break

        return scope


def build_node_to_selector_id_maps(
    node_kinds: Sequence[str],
) -> tuple[dict[str, int], dict[int, int]]:
    """Map node kind names and node kind ids to selector ids.

    ``node_kinds[i]`` is the name of node kind id ``i``. Several ids may share
    a name; they all get the same selector id.
    """
    if len(node_kinds) > _MAX_NODE_KINDS:
        raise ValueError(f"too many node kinds: {len(node_kinds)}")
    name_to_selector_id: dict[str, int] = {}
    id_to_selector_id: dict[int, int] = {}
    for node_id, node_name in enumerate(node_kinds):
        selector_id = name_to_selector_id.setdefault(
            node_name, len(name_to_selector_id)
        )
        id_to_selector_id[node_id] = selector_id
    return name_to_selector_id, id_to_selector_id


@dataclass
class RawHighlightRules:
    """Highlighting rules as written: selector strings mapped to scope patterns."""

    name: str
    scopes: dict[str, ScopePattern] = field(default_factory=dict)

    @classmethod
    def from_json(cls, source: str) -> RawHighlightRules:
        data = json.loads(source)
        if not isinstance(data, Mapping):
            raise ValueError("highlight rules must be a JSON object")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("highlight rules need a string `name`")
        raw_scopes = data.get("scopes", {})
        if not isinstance(raw_scopes, Mapping):
            raise ValueError("`scopes` must be a JSON object")
        scopes = {
            selector: parse_scope_pattern(pattern)
            for selector, pattern in raw_scopes.items()
        }
        return cls(name=name, scopes=scopes)

    def compile(self, node_kinds: Sequence[str]) -> HighlightRules:
        """Resolve the selectors against a language's node kind names."""
        name_to_selector_id, id_to_selector_id = build_node_to_selector_id_maps(
            node_kinds
        )
        rules = [
            HighlightRule(
                selectors=tuple(
                    map_node_kind_names(name_to_selector_id, raw)
                    for raw in parse(selector_text)
                ),
                scope=scope,
            )
            for selector_text, scope in self.scopes.items()
        ]
        return HighlightRules(
            name=self.name,
            node_id_to_selector_id=id_to_selector_id,
            rules=rules,
        )


def parse_rules(node_kinds: Sequence[str], source: str) -> HighlightRules:
    """Read JSON highlighting rules and compile them for ``node_kinds``."""
    return RawHighlightRules.from_json(source).compile(node_kinds)