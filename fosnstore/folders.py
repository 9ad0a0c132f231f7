"""Folder creation, file moves and the persisted folder list."""

from __future__ import annotations

import contextlib
import os
import re
import time
from pathlib import Path
from typing import Union

from .codec import finalize_write_atomic
from .protocol import FILE_NAME_SIZE, ErrorCode, StorageError
from .registry import FileTable
from .serverlog import ServerLog

PathLike = Union[str, "os.PathLike[str]"]

FOLDERS_FILE = "folders.dat"
FOLDER_MARKER_PREFIX = ".folder_"
_RECORD_PREFIX = "FOLDER|"
_TRAILING_WHITESPACE = " \t\n\r"


def normalize_folder(path: str) -> str:
    """Make a folder path absolute, clip it and drop trailing whitespace."""
    if not path.startswith("/"):
        path = "/" + path
    return path[: FILE_NAME_SIZE - 1].rstrip(_TRAILING_WHITESPACE)


def marker_path(storage_dir: PathLike, folder: str) -> Path:
    """Path of the marker file that records a folder."""
    return Path(storage_dir) / (FOLDER_MARKER_PREFIX + folder.replace("/", "_"))


def save_folders(storage_dir: PathLike) -> int:
    """Collect every folder marker into the folder list file; return the count."""
    directory = Path(storage_dir)
    try:
        markers = sorted(
            entry
            for entry in directory.iterdir()
            if entry.name.startswith(FOLDER_MARKER_PREFIX) and entry.is_file()
        )
    except OSError as exc:
        raise StorageError(ErrorCode.DATA_PERSISTENCE_FAILED, str(directory)) from exc

    records = []
    for marker in markers:
        try:
            with marker.open(encoding="utf-8") as handle:
                line = handle.readline()
        except OSError:
            continue
        if line:
            records.append(line)

    try:
        (directory / FOLDERS_FILE).write_text("".join(records), encoding="utf-8")
    except OSError as exc:
        raise StorageError(ErrorCode.DATA_PERSISTENCE_FAILED, FOLDERS_FILE) from exc
    return len(records)


def load_folders(storage_dir: PathLike) -> int:
    """Recreate folder markers from the folder list file; return the count.

    A missing list file means no folders besides the root.
    """
    directory = Path(storage_dir)
    try:
        lines = (directory / FOLDERS_FILE).read_text(encoding="utf-8").splitlines()
    except OSError:
        return 0

    count = 0
    for line in lines:
        if not line.startswith(_RECORD_PREFIX):
            continue
        fields = [f for f in re.split(r"[|\n]", line[len(_RECORD_PREFIX):]) if f]
        if len(fields) < 3:
            continue
        path, creator, stamp = fields[:3]
        try:
            marker_path(directory, path).write_text(
                f"FOLDER|{path}|{creator}|{stamp}\n", encoding="utf-8"
            )
        except OSError:
            continue
        count += 1
    return count


def create_folder(
    storage_dir: PathLike, folder: str, username: str, log: ServerLog | None = None
) -> str:
    """Create a folder and return its normalised path."""
    folder_path = normalize_folder(folder)
    if len(folder_path) <= 1:
        raise StorageError(ErrorCode.INVALID_FOLDER_NAME, folder)

    marker = marker_path(storage_dir, folder_path)
    try:
        with marker.open("x", encoding="utf-8") as handle:
            handle.write(f"FOLDER|{folder_path}|{username}|{int(time.time())}\n")
    except FileExistsError:
        raise StorageError(ErrorCode.FOLDER_ALREADY_EXISTS, folder_path) from None
    except OSError as exc:
        raise StorageError(ErrorCode.FOLDER_CREATE_FAILED, folder_path) from exc

    with contextlib.suppress(StorageError):
        save_folders(storage_dir)

    if log is not None:
        log.file_operation("CREATEFOLDER", folder_path, username, "Folder created")
    return folder_path


def move_file(
    table: FileTable,
    filename: str,
    username: str,
    target: str,
    log: ServerLog | None = None,
) -> str:
    """Move a file owned by ``username`` into another folder; return that folder."""
    document = table.get(filename)
    if document is None:
        raise StorageError(ErrorCode.FILE_NOT_FOUND, filename)
    if document.info.owner != username:
        raise StorageError(ErrorCode.NOT_OWNER, filename)

    target_folder = normalize_folder(target)
    if len(target_folder) <= 1:
        target_folder = "/"

    with document.rwlock.write():
        if document.info.folder == target_folder:
            raise StorageError(
                ErrorCode.INVALID_OPERATION, "Cannot move to the same folder"
            )
        document.info.folder = target_folder
        document.info.modified = int(time.time())
        document.info.lastmodifiedby = username

    try:
        finalize_write_atomic(document.info.filename, table)
    except StorageError as exc:
        raise StorageError(ErrorCode.DATA_PERSISTENCE_FAILED, filename) from exc

    if log is not None:
        log.file_operation("MOVE", filename, username, "Moved to folder")
    return target_folder