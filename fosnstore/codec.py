"""Binary on-disk format for stored documents."""

from __future__ import annotations

import os
import struct
from pathlib import Path
from typing import Union

from .model import Document, MetaData, Sentence, UserAccess
from .protocol import FILE_NAME_SIZE, AccessType, ErrorCode, StorageError
from .registry import FileTable

MAGIC = b"FOSN"

_SIZE = struct.Struct("<Q")
_TIME = struct.Struct("<q")
_INT = struct.Struct("<i")

PathLike = Union[str, "os.PathLike[str]"]


def _fixed(text: str) -> bytes:
    raw = text.encode("utf-8")[: FILE_NAME_SIZE - 1]
    return raw.ljust(FILE_NAME_SIZE, b"\0")


def _counted(text: str) -> bytes:
    raw = text.encode("utf-8") + b"\0"
    return _SIZE.pack(len(raw)) + raw


def encode_document(document: Document) -> bytes:
    """Serialise a document into its binary file form."""
    info = document.info
    parts = [
        MAGIC,
        _fixed(info.filename),
        _TIME.pack(info.created),
        _TIME.pack(info.modified),
        _TIME.pack(info.last_accessed),
        _fixed(info.owner),
        _SIZE.pack(info.wordcount),
        _SIZE.pack(info.charcount),
        _fixed(info.lastmodifiedby),
        _SIZE.pack(len(info.users_with_access)),
    ]
    for ua in info.users_with_access:
        parts.append(_counted(ua.username))
        parts.append(_INT.pack(int(ua.access_type)))
        parts.append(_TIME.pack(ua.last_access))
    parts.append(_SIZE.pack(len(document.sentences)))
    for sentence in document.sentences:
        parts.append(_SIZE.pack(len(sentence.words)))
        parts.extend(_counted(word) for word in sentence.words)
    return b"".join(parts)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if count < 0 or end > len(self._data):
            raise StorageError(ErrorCode.FILE_METADATA_CORRUPT, "truncated data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.take(fmt.size))[0]

    def fixed(self) -> str:
        raw = self.take(FILE_NAME_SIZE)
        return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")

    def counted(self) -> str:
        length = self.unpack(_SIZE)
        if length == 0:
            raise StorageError(ErrorCode.FILE_METADATA_CORRUPT, "empty string field")
        raw = self.take(length)
        return raw[:-1].split(b"\0", 1)[0].decode("utf-8", errors="replace")


def decode_document(data: bytes) -> Document:
    """Rebuild a document from its binary file form."""
    cursor = _Cursor(data)
    if cursor.take(len(MAGIC)) != MAGIC:
        raise StorageError(ErrorCode.FILE_METADATA_CORRUPT, "bad magic")
    info = MetaData(filename=cursor.fixed())
    info.created = cursor.unpack(_TIME)
    info.modified = cursor.unpack(_TIME)
    info.last_accessed = cursor.unpack(_TIME)
    info.owner = cursor.fixed()
    info.wordcount = cursor.unpack(_SIZE)
    info.charcount = cursor.unpack(_SIZE)
    info.lastmodifiedby = cursor.fixed()

    for _ in range(cursor.unpack(_SIZE)):
        username = cursor.counted()
        raw_type = cursor.unpack(_INT)
        try:
            access_type = AccessType(raw_type)
        except ValueError:
            raise StorageError(
                ErrorCode.FILE_METADATA_CORRUPT, f"bad access type {raw_type}"
            ) from None
        info.users_with_access.append(
            UserAccess(username, access_type, cursor.unpack(_TIME))
        )

    sentences = []
    for _ in range(cursor.unpack(_SIZE)):
        word_count = cursor.unpack(_SIZE)
        sentences.append(Sentence([cursor.counted() for _ in range(word_count)]))
    return Document(info=info, sentences=sentences)


def save_document(document: Document, path: PathLike) -> None:
    """Write a document to disk in binary form."""
    with document.rwlock.read():
        data = encode_document(document)
    try:
        Path(path).write_bytes(data)
    except OSError as exc:
        raise StorageError(ErrorCode.FILE_WRITE_FAILED, str(path)) from exc


def load_document(path: PathLike) -> Document:
    """Read a document stored in binary form."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise StorageError(ErrorCode.FILE_READ_FAILED, str(path)) from exc
    return decode_document(data)


def finalize_write_atomic(filename: str, table: FileTable) -> None:
    """Persist a document by writing a swap file and renaming it into place."""
    document = table.get(filename)
    if document is None:
        document = load_document(filename)
        table.add(document)

    swap_path = f"{filename}.swap"
    save_document(document, swap_path)
    try:
        os.replace(swap_path, filename)
    except OSError as exc:
        try:
            os.unlink(swap_path)
        except OSError:
            pass
        raise StorageError(ErrorCode.FILE_WRITE_FAILED, filename) from exc