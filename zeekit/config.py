"""Configuration of editing modes: file patterns, indentation and grammars."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Optional, Union

_CONFIG_DIR_ENV = "ZEE_CONFIG_DIR"
_MANIFEST_DIR_ENV = "CARGO_MANIFEST_DIR"
_APP_DIR_NAME = "zee"


class IndentationUnit(Enum):
    """What one level of indentation is made of."""

    SPACE = "Space"
    TAB = "Tab"

    def to_char(self) -> str:
        return " " if self is IndentationUnit.SPACE else "\t"


@dataclass(frozen=True)
class IndentationConfig:
    """Indentation width and unit for a mode."""

    width: int = 4
    unit: IndentationUnit = IndentationUnit.SPACE

    def to_char(self) -> str:
        return self.unit.to_char()

    def char_count(self) -> int:
        """Number of characters in one level of indentation."""
        return self.width if self.unit is IndentationUnit.SPACE else 1

    def tab_width(self) -> int:
        return self.width


@dataclass(frozen=True)
class CommentConfig:
    """The token that starts a line comment."""

    token: str


class _PatternKind(Enum):
    SUFFIX = "Suffix"
    NAME = "Name"


@dataclass(frozen=True)
class FilenamePattern:
    """Matches a file by the end of its name or by its whole name."""

    kind: _PatternKind
    value: str

    @classmethod
    def suffix(cls, suffix: str) -> FilenamePattern:
        return cls(_PatternKind.SUFFIX, str(suffix))

    @classmethod
    def name(cls, name: str) -> FilenamePattern:
        return cls(_PatternKind.NAME, str(name))

    def matches(self, filename: Union[str, os.PathLike]) -> bool:
        file_name = PurePath(filename).name
        if file_name in ("", ".."):
            return False
        if self.kind is _PatternKind.SUFFIX:
            return file_name.endswith(self.value)
        return file_name == self.value


@dataclass(frozen=True)
class LocalSource:
    """A grammar whose sources are in a local directory."""

    path: Path


@dataclass(frozen=True)
class GitSource:
    """A grammar fetched from a git remote at a fixed revision."""

    remote: str
    revision: str
    path: Optional[Path] = None


@dataclass(frozen=True)
class GrammarConfig:
    """Identifier and source location of a tree-sitter grammar."""

    grammar_id: str
    source: Union[LocalSource, GitSource]


@dataclass
class ModeConfig:
    """Configuration of one editing mode."""

    name: str
    scope: str
    injection_regex: str
    patterns: list[FilenamePattern]
    indentation: IndentationConfig
    comment: Optional[CommentConfig] = None
    grammar: Optional[GrammarConfig] = field(default=None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModeConfig:
        """Build a mode from decoded configuration data.

        Unknown fields are rejected. ``comment`` and ``grammar`` may be left out.
        """
        _check_fields(
            data,
            "mode",
            allowed={
                "name",
                "scope",
                "injection_regex",
                "patterns",
                "comment",
                "indentation",
                "grammar",
            },
            required={"name", "scope", "injection_regex", "patterns", "indentation"},
        )
        patterns = data["patterns"]
        if not isinstance(patterns, list):
            raise ValueError(f"mode patterns must be a list, got {patterns!r}")
        comment = data.get("comment")
        grammar = data.get("grammar")
        return cls(
            name=_string(data["name"], "mode name"),
            scope=_string(data["scope"], "mode scope"),
            injection_regex=_string(data["injection_regex"], "mode injection_regex"),
            patterns=[_parse_pattern(pattern) for pattern in patterns],
            indentation=_parse_indentation(data["indentation"]),
            comment=None if comment is None else _parse_comment(comment),
            grammar=None if grammar is None else _parse_grammar(grammar),
        )


def _check_fields(
    data: Any, what: str, allowed: set[str], required: set[str]
) -> None:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a mapping, got {data!r}")
    unknown = set(data) - allowed
    if unknown:
        names = ", ".join(sorted(map(str, unknown)))
        raise ValueError(f"unknown field(s) in {what}: {names}")
    missing = required - set(data)
    if missing:
        raise ValueError(f"missing field(s) in {what}: {', '.join(sorted(missing))}")


def _string(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string, got {value!r}")
    return value


def _variant(data: Any, what: str) -> tuple[str, Any]:
    if not isinstance(data, Mapping) or len(data) != 1:
        raise ValueError(f"{what} must be a mapping with a single variant, got {data!r}")
    ((tag, payload),) = data.items()
    return tag, payload


def _parse_pattern(data: Any) -> FilenamePattern:
    tag, value = _variant(data, "filename pattern")
    try:
        kind = _PatternKind(tag)
    except ValueError:
        raise ValueError(f"unknown filename pattern variant {tag!r}") from None
    return FilenamePattern(kind, _string(value, "filename pattern"))


def _parse_indentation(data: Any) -> IndentationConfig:
    _check_fields(data, "indentation", allowed={"width", "unit"}, required={"width", "unit"})
    width = data["width"]
    if isinstance(width, bool) or not isinstance(width, int) or width < 0:
        raise ValueError(f"indentation width must be a non-negative integer, got {width!r}")
    unit = data["unit"]
    if not isinstance(unit, IndentationUnit):
        try:
            unit = IndentationUnit(unit)
        except ValueError:
            raise ValueError(f"unknown indentation unit {unit!r}") from None
    return IndentationConfig(width=width, unit=unit)


def _parse_comment(data: Any) -> CommentConfig:
    _check_fields(data, "comment", allowed={"token"}, required={"token"})
    return CommentConfig(_string(data["token"], "comment token"))


def _parse_grammar(data: Any) -> GrammarConfig:
    _check_fields(data, "grammar", allowed={"id", "source"}, required={"id", "source"})
    tag, payload = _variant(data["source"], "grammar source")
    source: Union[LocalSource, GitSource]
    if tag == "Local":
        _check_fields(payload, "local grammar source", allowed={"path"}, required={"path"})
        source = LocalSource(Path(_string(payload["path"], "grammar path")))
    elif tag == "Git":
        _check_fields(
            payload,
            "git grammar source",
            allowed={"git", "rev", "path"},
            required={"git", "rev"},
        )
        subpath = payload.get("path")
        source = GitSource(
            remote=_string(payload["git"], "grammar remote"),
            revision=_string(payload["rev"], "grammar revision"),
            path=None if subpath is None else Path(_string(subpath, "grammar path")),
        )
    else:
        raise ValueError(f"unknown grammar source variant {tag!r}")
    return GrammarConfig(grammar_id=_string(data["id"], "grammar id"), source=source)


def _home() -> Optional[Path]:
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def _user_config_dir() -> Optional[Path]:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None
    if sys.platform == "darwin":
        home = _home()
        return home / "Library" / "Application Support" if home else None
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    home = _home()
    return home / ".config" if home else None


def config_dir() -> Path:
    """The directory holding configuration, grammars and queries.

    Taken from ``ZEE_CONFIG_DIR`` if set, then from the workspace of a
    development build, then the user's config directory, and finally the
    directory of the running executable.
    """
    env_dir = os.environ.get(_CONFIG_DIR_ENV)
    if env_dir is not None:
        return Path(env_dir)

    manifest_dir = os.environ.get(_MANIFEST_DIR_ENV)
    if manifest_dir is not None:
        return Path(manifest_dir).parent / "config"

    user_dir = _user_config_dir()
    if user_dir is not None:
        return user_dir / _APP_DIR_NAME

    if sys.executable:
        return Path(sys.executable).parent
    raise RuntimeError("Could not get the path of the current executable")