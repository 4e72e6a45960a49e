"""Clipboards holding text copied in the editor."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod


class Clipboard(ABC):
    """A place to put and take text."""

    @abstractmethod
    def get_contents(self) -> str:
        """The text on the clipboard."""

    @abstractmethod
    def set_contents(self, contents: str) -> None:
        """Replace the text on the clipboard."""


class LocalClipboard(Clipboard):
    """A clipboard kept in memory, safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._contents = ""

    def get_contents(self) -> str:
        with self._lock:
            return self._contents

    def set_contents(self, contents: str) -> None:
        with self._lock:
            self._contents = contents


def create() -> Clipboard:
    """Create the editor's clipboard."""
    return LocalClipboard()