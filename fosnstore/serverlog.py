"""Request, response and file-operation log for the storage server."""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_LOG_FILE = "storage_server.log"
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ServerLog:
    """Appends log lines to a file and optionally echoes them to stdout."""

    def __init__(self, path: PathLike = DEFAULT_LOG_FILE, echo: bool = True) -> None:
        self.path = Path(path)
        self.echo = echo
        self._lock = threading.Lock()

    def _emit(self, body: str) -> str:
        stamp = time.strftime(_TIME_FORMAT, time.localtime())
        line = f"[{stamp}] [SS] {body}"
        with self._lock:
            try:
                with self.path.open("a", encoding="utf-8") as log_file:
                    log_file.write(line + "\n")
            except OSError:
                pass
            if self.echo:
                print(line)
        return line

    def request(
        self, op: str, user: str, ip: str, port: int, details: str | None = None
    ) -> str:
        """Log a request received from a client and return the line written."""
        body = f"REQUEST: {op} | User: {user} | IP: {ip} | Port: {port}"
        if details:
            body += f" | Details: {details}"
        return self._emit(body)

    def response(self, op: str, user: str, ip: str, port: int, status: str) -> str:
        """Log a response sent to a client and return the line written."""
        return self._emit(
            f"RESPONSE: {op} | User: {user} | IP: {ip} | Port: {port} | Status: {status}"
        )

    def file_operation(
        self, event_type: str, filename: str, user: str, details: str | None = None
    ) -> str:
        """Log a file event such as a lock, undo or checkpoint."""
        body = f"FILE_OP: {event_type} | File: {filename} | User: {user}"
        if details:
            body += f" | Details: {details}"
        return self._emit(body)