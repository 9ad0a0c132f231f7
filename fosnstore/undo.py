"""Single-level undo history for stored documents."""

from __future__ import annotations

import contextlib
import os
from dataclasses import fields
from pathlib import Path
from typing import Union

from .codec import encode_document, load_document, save_document
from .model import Document, MetaData, Sentence, UserAccess
from .protocol import ErrorCode, StorageError
from .registry import FileTable

PathLike = Union[str, "os.PathLike[str]"]

UNDO_SUFFIX = ".undo"


def copy_document(document: Document) -> Document:
    """Return an independent deep copy of a document's metadata and content."""
    src = document.info
    info = MetaData(
        filename=src.filename,
        created=src.created,
        modified=src.modified,
        last_accessed=src.last_accessed,
        owner=src.owner,
        wordcount=src.wordcount,
        charcount=src.charcount,
        lastmodifiedby=src.lastmodifiedby,
        users_with_access=[
            UserAccess(ua.username, ua.access_type, ua.last_access)
            for ua in src.users_with_access
        ],
    )
    sentences = [Sentence(list(sentence.words)) for sentence in document.sentences]
    return Document(info=info, sentences=sentences)


def _swap_metadata(first: MetaData, second: MetaData) -> None:
    """Exchange the values of two metadata records, keeping both objects."""
    for meta_field in fields(MetaData):
        name = meta_field.name
        held = getattr(first, name)
        setattr(first, name, getattr(second, name))
        setattr(second, name, held)


class UndoManager:
    """Keeps the previous state of each file, in memory and on disk."""

    def __init__(
        self,
        storage_dir: PathLike,
        files: FileTable,
        history: FileTable | None = None,
    ) -> None:
        self.storage_dir = Path(storage_dir)
        self.files = files
        self.history = history if history is not None else FileTable()

    def undo_path(self, filename: str) -> Path:
        """Path of the on-disk undo state for a file."""
        return self.storage_dir / f"{filename}{UNDO_SUFFIX}"

    def _document_path(self, filename: str) -> Path:
        return self.storage_dir / filename

    def save_undo_state(self, filename: str) -> None:
        """Record the current state of a file so the next change can be undone.

        Only one level is kept: any earlier undo state is discarded. A file
        not held in memory is loaded from the storage directory first.
        """
        current = self.files.get(filename)
        if current is None:
            current = load_document(self._document_path(filename))
            self.files.add(current)

        self.history.remove(filename)
        undo_file = self.undo_path(filename)
        with contextlib.suppress(OSError):
            undo_file.unlink()

        with current.rwlock.read():
            previous = copy_document(current)

        self.history.add(previous)

        # The in-memory copy stays usable even if it cannot be persisted.
        with contextlib.suppress(OSError):
            undo_file.write_bytes(encode_document(previous))

    def undo_last_change(self, filename: str) -> None:
        """Restore a file to its recorded previous state."""
        current = self.files.get(filename)
        if current is None:
            raise StorageError(ErrorCode.FILE_NOT_FOUND, filename)

        undo_file = self.undo_path(filename)
        previous = self.history.get(filename)
        if previous is None:
            try:
                previous = load_document(undo_file)
            except StorageError as exc:
                raise StorageError(ErrorCode.NO_UNDO_HISTORY, filename) from exc

        with current.rwlock.write():
            current.sentences, previous.sentences = (
                previous.sentences,
                current.sentences,
            )
            _swap_metadata(current.info, previous.info)

        self.history.remove(filename)

        with contextlib.suppress(StorageError):
            save_document(current, self._document_path(filename))

        with contextlib.suppress(OSError):
            undo_file.unlink()