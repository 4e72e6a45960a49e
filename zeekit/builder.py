"""Fetching and compiling tree-sitter grammars and installing their queries."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TypeVar, Union

from . import git
from .config import GitSource, GrammarConfig, LocalSource, ModeConfig, config_dir

BUILD_DIR = "build"
GRAMMAR_DIR = "grammars"
LIBRARY_DIR = "lib"
QUERY_DIR = "queries"
QUERY_NAMES = ("highlights", "indents", "locals", "injections")

_IS_WINDOWS = os.name == "nt"
LIBRARY_EXTENSION = "dll" if _IS_WINDOWS else "so"

_logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]
T = TypeVar("T")


class BuildError(Exception):
    """A grammar could not be fetched or built."""


@dataclass(frozen=True)
class ScannerSource:
    """The external scanner of a grammar and whether it is C++."""

    path: Path
    cpp: bool


@dataclass(frozen=True)
class TreeSitterPaths:
    """Locations of a grammar's generated sources."""

    source: Path
    parser: Path
    scanner: Optional[ScannerSource]

    @classmethod
    def from_repo(
        cls, repo: PathLike, relative: Optional[PathLike] = None
    ) -> TreeSitterPaths:
        """Find the parser and optional scanner under ``repo`` (or its subpath)."""
        root = Path(repo)
        if relative is not None:
            root = root / relative
        source = root / "src"
        parser = source / "parser.c"

        scanner: Optional[ScannerSource] = None
        c_scanner = source / "scanner.c"
        cpp_scanner = c_scanner.with_suffix(".cc")
        if c_scanner.exists():
            scanner = ScannerSource(c_scanner, cpp=False)
        elif cpp_scanner.exists():
            scanner = ScannerSource(cpp_scanner, cpp=True)
        return cls(source=source, parser=parser, scanner=scanner)

    def should_recompile(self, library_path: PathLike) -> bool:
        """True if the library is missing or older than any of its sources."""
        library_path = Path(library_path)
        if not library_path.exists():
            return True
        library_mtime = _mtime(library_path)
        if _mtime(self.parser) > library_mtime:
            return True
        if self.scanner is not None and _mtime(self.scanner.path) > library_mtime:
            return True
        return False


def _mtime(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError as error:
        raise BuildError(
            f"Failed to compare source and library timestamps: {error}"
        ) from error


def tree_sitter_source_dir(grammar_id: str) -> Path:
    """Where the sources of a fetched grammar are kept."""
    return config_dir() / BUILD_DIR / f"tree-sitter-{grammar_id}"


def tree_sitter_query_dir(grammar_id: str) -> Path:
    """Where the queries of a grammar are installed."""
    return config_dir() / GRAMMAR_DIR / QUERY_DIR / grammar_id


def tree_sitter_library_dir() -> Path:
    """Where compiled grammar libraries are installed."""
    return config_dir() / GRAMMAR_DIR / LIBRARY_DIR


def tree_sitter_library_name(grammar_id: str) -> str:
    return f"tree-sitter-{grammar_id}"


def tree_sitter_library_path(grammar_id: str) -> Path:
    """The path of the compiled library of a grammar."""
    name = f"{tree_sitter_library_name(grammar_id)}.{LIBRARY_EXTENSION}"
    return tree_sitter_library_dir() / name


def _log_on_error(grammar_id: str, error: Exception) -> None:
    _logger.error("%12s %s %s", "Error", grammar_id, error)


def copy_tree_sitter_queries(
    grammar_id: str, source: PathLike, defaults: Optional[PathLike] = None
) -> None:
    """Install a grammar's queries without overwriting existing ones.

    A query is taken from ``defaults/queries/<grammar_id>/`` if present there,
    otherwise from the ``queries`` directory of the grammar's sources.
    """
    query_dir_dest = tree_sitter_query_dir(grammar_id)
    try:
        query_dir_dest.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise BuildError(
            f"Could not create grammar queries directory {query_dir_dest}"
        ) from error

    for query_name in QUERY_NAMES:
        query_filename = f"{query_name}.scm"
        query_dest = query_dir_dest / query_filename

        if query_dest.exists():
            _logger.debug(
                "%12s %s %s query; already exists %s",
                "Skip",
                grammar_id,
                query_name,
                query_dest,
            )
            continue

        if defaults is not None:
            query_override = Path(defaults) / QUERY_DIR / grammar_id / query_filename
            if query_override.is_file():
                _logger.debug(
                    "%12s %s query %s; using packaged override for %s",
                    "Copying",
                    grammar_id,
                    query_name,
                    query_dest,
                )
                try:
                    query_dest.write_bytes(query_override.read_bytes())
                except OSError as error:
                    _log_on_error(grammar_id, error)
                continue

        query_src = Path(source) / QUERY_DIR / query_filename
        if query_src.exists():
            try:
                shutil.copyfile(query_src, query_dest)
            except OSError as error:
                _log_on_error(
                    grammar_id,
                    BuildError(f"Could not copy {query_src} -> {query_dest}: {error}"),
                )
        else:
            _logger.debug(
                "%12s %s %s query %s", "Missing", grammar_id, query_name, query_src
            )


def _compiler() -> list[str]:
    configured = os.environ.get("CXX")
    if configured:
        return shlex.split(configured)
    return ["cl.exe"] if _IS_WINDOWS else ["c++"]


def _compile_command(paths: TreeSitterPaths, library_path: Path) -> list[str]:
    command = _compiler()
    if _IS_WINDOWS:
        command += ["/nologo", "/O2", "/LD", f"/I{paths.source}", str(paths.parser)]
        if paths.scanner is not None:
            command.append(str(paths.scanner.path))
        command.append(f"/out:{library_path}")
        return command

    command += [
        "-O3",
        "-w",
        "-shared",
        "-I",
        str(paths.source),
        "-fPIC",
        "-fno-exceptions",
        "-xc",
        str(paths.parser),
        "-o",
        str(library_path),
    ]
    if paths.scanner is not None:
        if paths.scanner.cpp:
            command.append("-xc++")
        else:
            command += ["-xc", "-std=c99"]
        command.append(str(paths.scanner.path))
    return command


def build_tree_sitter_library(grammar_id: str, paths: TreeSitterPaths) -> bool:
    """Compile a grammar into a shared library; False if it was up to date."""
    library_path = tree_sitter_library_path(grammar_id)
    if not paths.should_recompile(library_path):
        return False

    _logger.info("%12s %s grammar %s", "Building", grammar_id, library_path)

    command = _compile_command(paths, library_path)
    command_str = " ".join(command)
    _logger.debug("%12s %s %s", "Running", grammar_id, command_str)
    try:
        output = subprocess.run(command, capture_output=True, check=False)
    except OSError as error:
        raise BuildError(
            f"Failed to run C compiler. Command: {command_str}"
        ) from error
    if output.returncode != 0:
        raise BuildError(
            "Parser compilation failed:\n"
            f"Command: {command_str}\n"
            f"Stdout: {output.stdout.decode('utf-8', errors='replace')}\n"
            f"Stderr: {output.stderr.decode('utf-8', errors='replace')}"
        )
    return True


def fetch_grammar(grammar: GrammarConfig) -> bool:
    """Check out a git grammar at its configured revision.

    Returns True if anything was downloaded; local grammars are never fetched.
    """
    source = grammar.source
    if not isinstance(source, GitSource):
        return False
    remote, revision = source.remote, source.revision

    grammar_dir = tree_sitter_source_dir(grammar.grammar_id)
    try:
        grammar_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise BuildError(f"Could not create grammar directory {grammar_dir}") from error

    try:
        if not (grammar_dir / ".git").is_dir():
            git.run(grammar_dir, ["init"])

        remote_changed = git.get_remote_url(grammar_dir) != remote
        if remote_changed:
            git.set_remote(grammar_dir, remote)

        revision_changed = remote_changed or git.get_revision(grammar_dir) != revision
        if revision_changed:
            git.run(grammar_dir, ["fetch", "--depth", "1", "origin", revision])
            git.run(grammar_dir, ["checkout", revision])
            _logger.info(
                "%12s %s grammar %s#%s",
                "Downloading",
                grammar.grammar_id,
                remote,
                revision[:8],
            )
    except (git.GitError, OSError) as error:
        raise BuildError(str(error)) from error

    return revision_changed


def build_grammar(grammar: GrammarConfig, defaults: Optional[PathLike] = None) -> bool:
    """Install a grammar's queries and compile it; False if it was up to date."""
    source = grammar.source
    subpath: Optional[Path]
    if isinstance(source, LocalSource):
        grammar_dir, subpath = Path(source.path), None
    else:
        grammar_dir, subpath = tree_sitter_source_dir(grammar.grammar_id), source.path

    library_dir = tree_sitter_library_dir()
    try:
        library_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise BuildError(
            f"Could not create tree sitter library directory: {library_dir}"
        ) from error

    try:
        is_empty = next(grammar_dir.iterdir(), None) is None
    except OSError as error:
        raise BuildError(f"Failed to read directory {grammar_dir}.") from error
    if is_empty:
        raise BuildError(f"Directory {grammar_dir} is empty.")

    copy_tree_sitter_queries(grammar.grammar_id, grammar_dir, defaults)

    paths = TreeSitterPaths.from_repo(grammar_dir, subpath)
    try:
        return build_tree_sitter_library(grammar.grammar_id, paths)
    except BuildError as error:
        raise BuildError(
            f"Failed to build tree sitter library for `{grammar.grammar_id}` "
            f"in {grammar_dir}: {error}"
        ) from error


def _fetch_and_build(config: ModeConfig, defaults: Optional[PathLike]) -> None:
    grammar = config.grammar
    if grammar is None:
        return
    fetched = fetch_grammar(grammar)
    built = build_grammar(grammar, defaults)
    _logger.info(
        "%12s %s grammar",
        "Installed" if fetched or built else "Up to date",
        grammar.grammar_id,
    )


def fetch_and_build_tree_sitter_parsers(
    mode_configs: Iterable[ModeConfig], defaults: Optional[PathLike] = None
) -> None:
    """Fetch and build the grammars of all modes in parallel.

    The first failure is raised once all builds have finished.
    """
    configs = list(mode_configs)
    if not configs:
        return
    with ThreadPoolExecutor() as executor:
        futures = [
            executor.submit(_fetch_and_build, config, defaults) for config in configs
        ]
    for future in futures:
        future.result()