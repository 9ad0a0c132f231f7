"""Text listings of stored files for the VIEW and INFO commands."""

from __future__ import annotations

import os
import time
from typing import Iterable

from .model import Document
from .protocol import AccessType, ErrorCode, StorageError, ViewMode

_TIME_FORMAT = "%Y-%m-%d %H:%M"
_MAX_TRACKED_NAMES = 1000
_UNDO_SUFFIX = ".undo"

_RULE = "---------------------------------------------------------\n"
_HEADER = (
    _RULE
    + "|  Filename  | Words | Chars | Last Access Time | Owner |\n"
    + "|------------|-------|-------|------------------|-------|\n"
)


def _format_time(stamp: int) -> str:
    return time.strftime(_TIME_FORMAT, time.localtime(stamp))


def _has_access(document: Document, user: str) -> bool:
    return document.info.owner == user or document.find_access(user) is not None


def _is_listable(name: str) -> bool:
    if not name:
        return False
    return not (len(name) > len(_UNDO_SUFFIX) and name.endswith(_UNDO_SUFFIX))


def view_all_files(documents: Iterable[Document | None], user: str, mode: int) -> str:
    """Return the VIEW listing of files for a user.

    Without the "all" flag only files the user owns or has access to are
    listed; the "long" flag gives a table with counts and access times.
    Empty names, undo states and repeated names are left out.
    """
    show_all = mode in (ViewMode.ALL, ViewMode.ALL_LONG)
    show_details = mode in (ViewMode.LONG, ViewMode.ALL_LONG)

    lines: list[str] = []
    if show_details:
        lines.append(_HEADER)

    seen: set[str] = set()
    file_count = 0
    for document in documents:
        if document is None or document.info is None:
            continue
        info = document.info
        name = info.filename
        if not _is_listable(name) or name in seen:
            continue
        if len(seen) < _MAX_TRACKED_NAMES:
            seen.add(name)

        if not show_all and not _has_access(document, user):
            continue

        if show_details:
            access_time = info.last_accessed if info.last_accessed > 0 else info.modified
            lines.append(
                f"| {name:<10} | {info.wordcount:5d} | {info.charcount:5d} | "
                f"{_format_time(access_time):>16} | {info.owner:<5} |\n"
            )
        else:
            lines.append(f"--> {name}\n")
        file_count += 1

    if show_details and file_count > 0:
        lines.append(_RULE)
    return "".join(lines)


def file_info(document: Document) -> str:
    """Return the INFO report for a file.

    The size is taken from the file of that name on disk; a missing file
    raises StorageError.
    """
    info = document.info
    try:
        size = os.path.getsize(info.filename)
    except OSError as exc:
        raise StorageError(ErrorCode.FILE_READ_FAILED, info.filename) from exc

    lines = [
        f"--> File: {info.filename}\n",
        f"--> Created: {_format_time(info.created)}\n",
        f"--> Last Modified: {_format_time(info.modified)}\n",
        f"--> Owner: {info.owner}\n",
        f"--> Size: {size} bytes\n",
        f"--> Word Count: {info.wordcount}\n",
        f"--> Character Count: {info.charcount}\n",
        f"--> Last Modified By: {info.lastmodifiedby}\n",
    ]

    entries = [f"{info.owner} (RW)"]
    for ua in info.users_with_access:
        if ua.username == info.owner:
            continue
        kind = "RW" if ua.access_type == AccessType.WRITE else "R"
        entry = f"{ua.username} ({kind})"
        if ua.last_access > 0:
            entry += f" [last: {_format_time(ua.last_access)}]"
        entries.append(entry)
    lines.append(f"--> Access: {', '.join(entries)}\n")
    return "".join(lines)