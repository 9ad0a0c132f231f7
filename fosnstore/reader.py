"""Rendering of a document's content as text."""

from __future__ import annotations

from .model import Document
from .protocol import ErrorCode, StorageError
from .registry import FileTable


def document_text(document: Document, delimiter: str = " ") -> str:
    """Join words with spaces and non-empty sentences with the delimiter."""
    with document.rwlock.read():
        return delimiter.join(
            " ".join(sentence.words)
            for sentence in document.sentences
            if sentence.words
        )


def _lookup(filename: str, table: FileTable) -> Document:
    document = table.get(filename)
    if document is None:
        raise StorageError(ErrorCode.FILE_NOT_FOUND, filename)
    return document


def read_file(filename: str, table: FileTable) -> str:
    """Return a file's content with sentences separated by spaces."""
    return document_text(_lookup(filename, table), " ")


def read_file_for_exec(filename: str, table: FileTable) -> str:
    """Return a file's content with one sentence per line."""
    return document_text(_lookup(filename, table), "\n")