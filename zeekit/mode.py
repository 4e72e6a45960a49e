"""Editing modes: how files of a given kind are edited."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Union

from .config import (
    CommentConfig,
    FilenamePattern,
    GrammarConfig,
    IndentationConfig,
    ModeConfig,
)


@dataclass(eq=False)
class Mode:
    """An editing mode. Two modes are equal when their names are."""

    name: str
    scope: str
    injection_regex: str = ""
    patterns: list[FilenamePattern] = field(default_factory=list)
    comment: Optional[CommentConfig] = None
    indentation: IndentationConfig = field(default_factory=IndentationConfig)
    grammar: Optional[GrammarConfig] = None

    @classmethod
    def from_config(cls, config: ModeConfig) -> Mode:
        return cls(
            name=config.name,
            scope=config.scope,
            injection_regex=config.injection_regex,
            patterns=list(config.patterns),
            comment=config.comment,
            indentation=config.indentation,
            grammar=config.grammar,
        )

    @classmethod
    def default(cls) -> Mode:
        """The plain text mode."""
        return cls(name="Plain", scope="plaintext")

    def matches_by_filename(self, filename: Union[str, os.PathLike]) -> bool:
        return any(pattern.matches(filename) for pattern in self.patterns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mode):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)