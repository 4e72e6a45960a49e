"""Running git commands in a working directory."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

REMOTE_NAME = "origin"
GIT_COMMAND = "git"

PathLike = Union[str, os.PathLike]


class GitError(Exception):
    """A git command exited with a failure status."""


def run(current_dir: PathLike, args: Iterable[str]) -> str:
    """Run git with ``args`` in ``current_dir`` and return its trimmed stdout."""
    command = [GIT_COMMAND, *(os.fspath(arg) for arg in args)]
    env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
    output = subprocess.run(
        command, cwd=Path(current_dir), env=env, capture_output=True, check=False
    )
    stdout = output.stdout.decode("utf-8", errors="replace")
    if output.returncode != 0:
        stderr = output.stderr.decode("utf-8", errors="replace")
        raise GitError(
            f"Git command failed: {' '.join(command)}\nStdout: {stdout}\nStderr: {stderr}"
        )
    return stdout.rstrip()


def _run_or_none(current_dir: PathLike, args: Iterable[str]) -> Optional[str]:
    try:
        return run(current_dir, args)
    except (GitError, OSError):
        return None


def get_revision(current_dir: PathLike) -> Optional[str]:
    """The commit checked out in ``current_dir``, or ``None``."""
    return _run_or_none(current_dir, ["rev-parse", "HEAD"])


def get_remote_url(current_dir: PathLike) -> Optional[str]:
    """The URL of the ``origin`` remote, or ``None``."""
    return _run_or_none(current_dir, ["remote", "get-url", REMOTE_NAME])


def set_remote(current_dir: PathLike, remote_url: str) -> str:
    """Point ``origin`` at ``remote_url``, adding the remote if it is missing."""
    try:
        return run(current_dir, ["remote", "set-url", REMOTE_NAME, remote_url])
    except (GitError, OSError):
        return run(current_dir, ["remote", "add", REMOTE_NAME, remote_url])