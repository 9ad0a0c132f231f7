"""Start-up of the storage server: loading stored files and registering with the name server."""

from __future__ import annotations

import os
import socket
from pathlib import Path
from typing import Iterable, Union

from .codec import load_document
from .model import Document
from .protocol import (
    END_FILE_LIST,
    FILE,
    FILE_LIST,
    FILE_NAME_SIZE,
    REGISTER_SS,
    REGISTERED,
    ErrorCode,
    StorageError,
)
from .registry import FileTable

PathLike = Union[str, "os.PathLike[str]"]

STORAGE_DIRECTORY = "./storage_current"
SS_INFO_FILENAME = "storage_server_info.txt"
DIRECTORY_PERMISSIONS = 0o755
RESPONSE_BUFFER_SIZE = 256
UNDO_SUFFIX = ".undo"


def append_file(path: PathLike, text: str) -> str:
    """Return ``text`` followed by the whole content of the file at ``path``."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(ErrorCode.FILE_READ_FAILED, str(path)) from exc
    return text + content


def _file_line(document: Document) -> str:
    meta = document.info
    line = (
        f"{FILE}|{meta.filename}|{meta.owner}|{meta.wordcount}|{meta.charcount}"
        f"|{meta.created}|{meta.modified}|{meta.last_accessed}|{meta.lastmodifiedby}"
    )
    if meta.users_with_access:
        line += "|" + ",".join(
            f"{ua.username}:{int(ua.access_type)}:{ua.last_access}"
            for ua in meta.users_with_access
        )
    return line + "\n"


def format_file_list(documents: Iterable[Document | None]) -> str:
    """Render the text file list that is sent to the name server."""
    present = [d for d in documents if d is not None and d.info is not None]
    lines = [f"{FILE_LIST}\n", f"{len(present)}\n"]
    lines.extend(_file_line(document) for document in present)
    lines.append(f"{END_FILE_LIST}\n")
    return "".join(lines)


def _load_undo_state(path: Path, history: FileTable | None) -> None:
    try:
        previous = load_document(path)
    except StorageError:
        return
    previous.info.filename = path.name[: -len(UNDO_SUFFIX)]
    if history is not None:
        history.add(previous)


def _load_regular(path: Path, files: FileTable) -> Document | None:
    try:
        document = load_document(path)
    except StorageError:
        return None

    entry_name = path.name[: FILE_NAME_SIZE - 1]
    old_name = document.info.filename
    if old_name != entry_name:
        # The directory entry is the source of truth for the name.
        if files.get(old_name) is document:
            files.remove(old_name)
        document.info.filename = entry_name
    files.add(document)
    return document


def load_storage(
    storage_dir: PathLike, files: FileTable, history: FileTable | None = None
) -> list[Document]:
    """Load every stored file from the storage directory.

    The directory is created if missing. Files ending in ``.undo`` go into
    ``history`` under their original name; other regular files go into
    ``files``. Files that cannot be decoded are skipped. Returns the loaded
    documents in directory order, without duplicate names.
    """
    directory = Path(storage_dir)
    try:
        directory.mkdir(mode=DIRECTORY_PERMISSIONS, parents=True, exist_ok=True)
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise StorageError(ErrorCode.FOLDER_CREATE_FAILED, str(directory)) from exc

    loaded: dict[str, Document] = {}
    for entry in entries:
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue

        name = entry.name
        if len(name) > len(UNDO_SUFFIX) and name.endswith(UNDO_SUFFIX):
            _load_undo_state(entry, history)
            continue

        document = _load_regular(entry, files)
        if document is not None and document.info.filename not in loaded:
            loaded[document.info.filename] = document
    return list(loaded.values())


def register_with_ns(
    ns_ip: str, ns_port: int, client_port: int, filepath: PathLike
) -> tuple[str, int]:
    """Register with the name server, sending the file list read from ``filepath``.

    Returns the local address and port of the registration connection.
    Raises StorageError when the name server cannot be reached or does not
    confirm the registration.
    """
    try:
        sock = socket.create_connection((ns_ip, ns_port))
    except OSError as exc:
        raise StorageError(
            ErrorCode.CONNECTION_FAILED, f"{ns_ip}:{ns_port}"
        ) from exc

    with sock:
        local_ip, local_port = sock.getsockname()[:2]
        message = append_file(
            filepath, f"{REGISTER_SS} {local_ip} {local_port} {client_port}\n"
        )
        try:
            sock.sendall(message.encode("utf-8"))
            raw = sock.recv(RESPONSE_BUFFER_SIZE - 1)
        except OSError as exc:
            raise StorageError(ErrorCode.CONNECTION_LOST, "registration") from exc

    if not raw:
        raise StorageError(
            ErrorCode.NAME_SERVER_UNAVAILABLE, "no response from name server"
        )
    response = raw.decode("utf-8", errors="replace")
    for sep in "\r\n":
        response = response.split(sep, 1)[0]
    if REGISTERED not in response:
        raise StorageError(
            ErrorCode.NAME_SERVER_UNAVAILABLE, f"name server replied: {response}"
        )
    return local_ip, local_port


class StorageServer:
    """Holds the stored files and brings the server up."""

    def __init__(
        self,
        storage_dir: PathLike = STORAGE_DIRECTORY,
        info_path: PathLike = SS_INFO_FILENAME,
    ) -> None:
        self.storage_dir = Path(storage_dir)
        self.info_path = Path(info_path)
        self.files = FileTable()
        self.history = FileTable()
        self.documents: list[Document] = []
        self.ss_ip: str | None = None

    def load(self) -> list[Document]:
        """Load the stored files and undo states from disk."""
        self.documents = load_storage(self.storage_dir, self.files, self.history)
        return self.documents

    def write_info_file(self) -> str:
        """Write the file list for the name server and return its text."""
        text = format_file_list(self.documents)
        try:
            self.info_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StorageError(
                ErrorCode.DATA_PERSISTENCE_FAILED, str(self.info_path)
            ) from exc
        return text

    def init(self, ns_ip: str, ns_port: int, client_port: int) -> None:
        """Load files, write the info file and register with the name server."""
        self.load()
        self.write_info_file()
        self.ss_ip, _ = register_with_ns(
            ns_ip, ns_port, client_port, self.info_path
        )