"""Protocol constants, command and error codes shared by the storage server."""

from __future__ import annotations

from enum import IntEnum

MAX_DATA = 2048
FILE_NAME_SIZE = 256
USERNAME_SIZE = 64

MIN_PORT_NUMBER = 1
MAX_PORT_NUMBER = 65535

STOP = "STOP"
ETIRW = "ETIRW"
REGISTERED = "REGISTERED"
SS_INFO_PREFIX = "SS_INFO|"
REGISTER_SS = "REGISTER SS"
FILE_LIST = "FILE_LIST"
FILE = "FILE"
END_FILE_LIST = "END_FILE_LIST"
METADATA = "METADATA"
METADATA_SUCCESS = "SUCCESS"
METADATA_FAILURE = "FAILURE"


class CommandCode(IntEnum):
    """Opcodes carried in a request packet."""

    VIEW = 1
    READ = 2
    CREATE = 3
    WRITE = 4
    UNDO = 5
    INFO = 6
    DELETE = 7
    STREAM = 8
    LIST = 9
    ADDACCESS = 10
    REMACCESS = 11
    EXEC = 12
    CHECKPOINT = 13
    LISTCHECKPOINTS = 14
    VIEWCHECKPOINT = 15
    REVERT = 16
    REQUESTACCESS = 17
    VIEWREQUESTS = 18
    APPROVE = 19
    REJECT = 20


class AccessType(IntEnum):
    """Kind of access a user holds on a file."""

    READ = 0
    WRITE = 1


class ViewMode(IntEnum):
    """Flags for the VIEW command."""

    USER_ONLY = 0
    ALL = 1
    LONG = 2
    ALL_LONG = 3

    @property
    def show_all(self) -> bool:
        return self in (ViewMode.ALL, ViewMode.ALL_LONG)

    @property
    def show_details(self) -> bool:
        return self in (ViewMode.LONG, ViewMode.ALL_LONG)


class ErrorCode(IntEnum):
    """Error codes used throughout the system."""

    SUCCESS = 0

    UNAUTHORIZED_ACCESS = 100
    READ_ACCESS_DENIED = 101
    WRITE_ACCESS_DENIED = 102
    NOT_OWNER = 103
    ACCESS_ALREADY_GRANTED = 104
    ACCESS_NOT_FOUND = 105
    USER_IS_OWNER = 106
    USER_NOT_FOUND = 107

    FILE_NOT_FOUND = 200
    FILE_ALREADY_EXISTS = 201
    FILE_CREATE_FAILED = 202
    FILE_DELETE_FAILED = 203
    FILE_READ_FAILED = 204
    FILE_WRITE_FAILED = 205
    FILE_LOCKED = 206
    INVALID_FILENAME = 207
    FILE_IS_BEING_WRITTEN = 208

    SENTENCE_INDEX_OUT_OF_RANGE = 300
    WORD_INDEX_OUT_OF_RANGE = 301
    SENTENCE_LOCKED = 302
    INVALID_SENTENCE_INDEX = 303
    INVALID_WORD_INDEX = 304
    SENTENCE_INDEX_NEGATIVE = 305

    RESOURCE_LOCKED = 400
    CONCURRENT_WRITE_CONFLICT = 401
    OPERATION_TIMEOUT = 402

    STORAGE_SERVER_UNAVAILABLE = 500
    NAME_SERVER_UNAVAILABLE = 501
    CONNECTION_FAILED = 502
    CONNECTION_LOST = 503
    NETWORK_ERROR = 504
    SERVER_ERROR = 505
    MEMORY_ALLOCATION_FAILED = 506

    INVALID_COMMAND = 600
    INVALID_PARAMETERS = 601
    INVALID_OPERATION = 602
    MISSING_PARAMETERS = 603
    INVALID_USERNAME = 604
    INVALID_ACCESS_MODE = 605

    NO_UNDO_HISTORY = 700
    CHECKPOINT_NOT_FOUND = 701
    CHECKPOINT_CREATE_FAILED = 702
    CHECKPOINT_REVERT_FAILED = 703
    FILE_METADATA_CORRUPT = 704
    DATA_PERSISTENCE_FAILED = 705
    FOLDER_CREATE_FAILED = 706
    FOLDER_ALREADY_EXISTS = 707
    INVALID_FOLDER_NAME = 708

    ACCESS_REQUEST_NOT_FOUND = 800
    ACCESS_REQUEST_ALREADY_EXISTS = 801
    CANNOT_REQUEST_OWN_ACCESS = 802

    UNKNOWN_ERROR = 900
    OPERATION_FAILED = 901
    INTERNAL_ERROR = 902
    NOT_IMPLEMENTED = 903


_MESSAGES = {
    ErrorCode.SUCCESS: "Operation successful",
    ErrorCode.UNAUTHORIZED_ACCESS: "Unauthorized access",
    ErrorCode.READ_ACCESS_DENIED: "Read access denied",
    ErrorCode.WRITE_ACCESS_DENIED: "Write access denied",
    ErrorCode.NOT_OWNER: "Not file owner",
    ErrorCode.ACCESS_ALREADY_GRANTED: "Access already granted",
    ErrorCode.ACCESS_NOT_FOUND: "Access not found",
    ErrorCode.USER_IS_OWNER: "User is already the owner",
    ErrorCode.USER_NOT_FOUND: "User not found",
    ErrorCode.FILE_NOT_FOUND: "File not found",
    ErrorCode.FILE_ALREADY_EXISTS: "File already exists",
    ErrorCode.FILE_CREATE_FAILED: "File creation failed",
    ErrorCode.FILE_DELETE_FAILED: "File deletion failed",
    ErrorCode.FILE_READ_FAILED: "File read failed",
    ErrorCode.FILE_WRITE_FAILED: "File write failed",
    ErrorCode.FILE_LOCKED: "File is locked",
    ErrorCode.INVALID_FILENAME: "Invalid filename",
    ErrorCode.FILE_IS_BEING_WRITTEN: "File is being written",
    ErrorCode.SENTENCE_INDEX_OUT_OF_RANGE: "Sentence index out of range",
    ErrorCode.WORD_INDEX_OUT_OF_RANGE: "Word index out of range",
    ErrorCode.SENTENCE_LOCKED: "Sentence is locked",
    ErrorCode.INVALID_SENTENCE_INDEX: "Invalid sentence index",
    ErrorCode.INVALID_WORD_INDEX: "Invalid word index",
    ErrorCode.SENTENCE_INDEX_NEGATIVE: "Sentence index cannot be negative",
    ErrorCode.RESOURCE_LOCKED: "Resource is locked",
    ErrorCode.CONCURRENT_WRITE_CONFLICT: "Concurrent write conflict",
    ErrorCode.OPERATION_TIMEOUT: "Operation timeout",
    ErrorCode.STORAGE_SERVER_UNAVAILABLE: "Storage server unavailable",
    ErrorCode.NAME_SERVER_UNAVAILABLE: "Name server unavailable",
    ErrorCode.CONNECTION_FAILED: "Connection failed",
    ErrorCode.CONNECTION_LOST: "Connection lost",
    ErrorCode.NETWORK_ERROR: "Network error",
    ErrorCode.SERVER_ERROR: "Server error",
    ErrorCode.MEMORY_ALLOCATION_FAILED: "Memory allocation failed",
    ErrorCode.INVALID_COMMAND: "Invalid command",
    ErrorCode.INVALID_PARAMETERS: "Invalid parameters",
    ErrorCode.INVALID_OPERATION: "Invalid operation",
    ErrorCode.MISSING_PARAMETERS: "Missing parameters",
    ErrorCode.INVALID_USERNAME: "Invalid username",
    ErrorCode.INVALID_ACCESS_MODE: "Invalid access mode",
    ErrorCode.NO_UNDO_HISTORY: "No undo history available",
    ErrorCode.CHECKPOINT_NOT_FOUND: "Checkpoint not found",
    ErrorCode.CHECKPOINT_CREATE_FAILED: "Checkpoint creation failed",
    ErrorCode.CHECKPOINT_REVERT_FAILED: "Checkpoint revert failed",
    ErrorCode.FILE_METADATA_CORRUPT: "File metadata corrupt",
    ErrorCode.DATA_PERSISTENCE_FAILED: "Data persistence failed",
    ErrorCode.FOLDER_CREATE_FAILED: "Folder creation failed",
    ErrorCode.FOLDER_ALREADY_EXISTS: "Folder already exists",
    ErrorCode.INVALID_FOLDER_NAME: "Invalid folder name",
    ErrorCode.ACCESS_REQUEST_NOT_FOUND: "Access request not found",
    ErrorCode.ACCESS_REQUEST_ALREADY_EXISTS: "Access request already exists",
    ErrorCode.CANNOT_REQUEST_OWN_ACCESS: "Cannot request own access",
    ErrorCode.UNKNOWN_ERROR: "Unknown error",
    ErrorCode.OPERATION_FAILED: "Operation failed",
    ErrorCode.INTERNAL_ERROR: "Internal error",
    ErrorCode.NOT_IMPLEMENTED: "Not implemented",
}

_UNKNOWN_CODE = "Unknown error code"


def error_message(code: int) -> str:
    """Return the human-readable message for an error code."""
    return _MESSAGES.get(code, _UNKNOWN_CODE)


class StorageError(Exception):
    """An operation failed with one of the protocol's error codes."""

    def __init__(self, code: int, detail: str | None = None) -> None:
        try:
            self.code: int = ErrorCode(code)
        except ValueError:
            self.code = code
        self.detail = detail
        self.message = error_message(code)
        text = f"{self.message}: {detail}" if detail else self.message
        super().__init__(text)