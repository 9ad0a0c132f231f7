"""In-memory structures for stored documents and their metadata."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from .protocol import AccessType


class _ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass
class UserAccess:
    """A user's access entry on a file."""

    username: str
    access_type: AccessType = AccessType.READ
    last_access: int = 0


@dataclass
class MetaData:
    """Metadata kept for every stored file."""

    filename: str
    created: int = 0
    modified: int = 0
    last_accessed: int = 0
    owner: str = ""
    wordcount: int = 0
    charcount: int = 0
    lastmodifiedby: str = ""
    users_with_access: list[UserAccess] = field(default_factory=list)
    folder: str = "/"


@dataclass
class Sentence:
    """A sentence: an ordered list of words guarded by its own write lock."""

    words: list[str] = field(default_factory=list)
    lock: threading.Lock = field(
        default_factory=threading.Lock, compare=False, repr=False
    )


@dataclass
class Document:
    """A stored file: metadata plus its sentences."""

    info: MetaData
    sentences: list[Sentence] = field(default_factory=list)
    mutex: threading.Lock = field(
        default_factory=threading.Lock, compare=False, repr=False
    )
    rwlock: _ReadWriteLock = field(
        default_factory=_ReadWriteLock, compare=False, repr=False
    )
    readcount: int = field(default=0, compare=False)
    writecount: int = field(default=0, compare=False)

    @classmethod
    def new(cls, filename: str) -> "Document":
        """Create an empty document with the given filename."""
        return cls(info=MetaData(filename=filename))

    @property
    def filename(self) -> str:
        return self.info.filename

    def find_access(self, username: str) -> UserAccess | None:
        """Return the access entry for a user, or None."""
        return next(
            (ua for ua in self.info.users_with_access if ua.username == username),
            None,
        )


@dataclass
class WordUpdate:
    """A pending insertion of content at a word index."""

    word_index: int
    content: str


@dataclass
class AccessRequest:
    """A user's pending request for access to a file."""

    filename: str
    requester: str
    requested_at: int = 0
    access_type: AccessType = AccessType.READ


@dataclass
class CheckpointMeta:
    """Metadata describing a named checkpoint of a file."""

    checkpoint_name: str
    filename: str
    created: int = 0
    created_by: str = ""