"""Filename-keyed table of the documents held in memory."""

from __future__ import annotations

import threading
from typing import Iterator

from .model import Document
from .protocol import FILE_NAME_SIZE

_TRAILING_WHITESPACE = " \t\n\r"


def trim_key(name: str) -> str:
    """Clip a filename to the stored name length and drop trailing whitespace."""
    return name[: FILE_NAME_SIZE - 1].rstrip(_TRAILING_WHITESPACE)


class FileTable:
    """Maps filenames to documents.

    Documents are stored under their own filename as given; lookups and
    removals trim trailing whitespace from the name asked for first.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Document] = {}
        self._lock = threading.Lock()

    def add(self, document: Document) -> None:
        """Store a document under its filename, replacing any earlier entry."""
        with self._lock:
            self._entries[document.info.filename] = document

    def get(self, filename: str) -> Document | None:
        """Return the document stored for a filename, or None."""
        with self._lock:
            return self._entries.get(trim_key(filename))

    def remove(self, filename: str) -> Document | None:
        """Drop the entry for a filename and return it, or None if absent."""
        with self._lock:
            return self._entries.pop(trim_key(filename), None)

    def __contains__(self, filename: object) -> bool:
        if not isinstance(filename, str):
            return False
        with self._lock:
            return trim_key(filename) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Document]:
        with self._lock:
            return iter(list(self._entries.values()))