"""Storage-server core for a distributed, sentence-structured document store."""

__version__ = "0.1.0"

__all__ = [
    "codec",
    "editing",
    "fifo",
    "folders",
    "listing",
    "model",
    "protocol",
    "reader",
    "registration",
    "registry",
    "serverlog",
    "undo",
]