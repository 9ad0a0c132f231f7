# fosnstore

The storage side of a small distributed document store. A document is a list
of sentences, and each sentence is a list of words. This package keeps
documents in memory and on disk in a compact binary format, inserts words with
automatic sentence splitting, keeps one level of undo, renders the text of
listing and info replies, manages folder markers, and registers a storage
server's file list with a name server over TCP.

It has no dependencies outside the standard library.

## Modules

- `fosnstore.protocol`: `CommandCode`, `AccessType` (`READ`, `WRITE`),
  `ViewMode` (`USER_ONLY`, `ALL`, `LONG`, `ALL_LONG`), the numbered
  `ErrorCode` values with `error_message(code)`, and `StorageError`, the
  exception raised for failures. `StorageError.code` holds the `ErrorCode`
  (or the raw integer if it is not a known code). `StorageError.message` holds
  the text for that code, and `StorageError.detail` holds any extra detail.
- `fosnstore.model`: dataclasses `Document`, `MetaData`, `Sentence`,
  `UserAccess`, `WordUpdate`, `AccessRequest` and `CheckpointMeta`.
  `Document.new(filename)` makes an empty document, and
  `Document.find_access(username)` returns that user's `UserAccess` or `None`.
- `fosnstore.fifo`: `Queue`, a FIFO whose `dequeue()` and `peek()` return
  `None` when it is empty.
- `fosnstore.registry`: `FileTable` maps filenames to documents. `get`,
  `remove` and `in` clip the name asked for to 255 characters and drop
  trailing whitespace (`trim_key`). `add` stores a document under its own
  filename.
- `fosnstore.codec`: `encode_document` / `decode_document` convert to and from
  the binary format (magic `FOSN`, little-endian fields). `save_document` /
  `load_document` write and read files. `finalize_write_atomic(filename,
  table)` writes `<filename>.swap` and renames it over `filename`.
- `fosnstore.reader`: `document_text(document, delimiter)`. `read_file` joins
  sentences with spaces, and `read_file_for_exec` joins them with newlines.
  Empty sentences are skipped.
- `fosnstore.editing`: `split_at_delimiters`, `ends_with_delimiter`,
  `apply_queued_updates(document, sentence_index, updates)` and
  `write_file(filename, sentence_index, word_index, data, table)`. A word
  ending in `.`, `!` or `?` ends a sentence. A delimiter inside single or
  double quotes does not split.
- `fosnstore.undo`: `UndoManager(storage_dir, files, history)` keeps one
  previous state per file, in its `history` table and in a `<name>.undo` file
  in the storage directory. It offers `save_undo_state(filename)`,
  `undo_last_change(filename)` and `undo_path(filename)`. `copy_document`
  makes a deep copy.
- `fosnstore.serverlog`: `ServerLog(path, echo)` appends `REQUEST`,
  `RESPONSE` and `FILE_OP` lines with a timestamp to a log file (default
  `storage_server.log`). With `echo=True` it also prints each line. Every
  method returns the line it wrote.
- `fosnstore.listing`: `view_all_files(documents, user, mode)` returns the
  VIEW listing, either plain or as a table, and `file_info(document)` returns
  the INFO report. For the report, the size is read from the file named
  `document.info.filename`.
- `fosnstore.folders`: `normalize_folder`, `marker_path`,
  `create_folder(storage_dir, folder, username, log)`,
  `move_file(table, filename, username, target, log)`, and `save_folders` /
  `load_folders`. The last two write and read `folders.dat` in the storage
  directory.
- `fosnstore.registration`: `append_file`, `format_file_list`,
  `load_storage`, `register_with_ns`, and `StorageServer` with `load()`,
  `write_info_file()` and `init(ns_ip, ns_port, client_port)`.

## Example

```python
from fosnstore.model import Document
from fosnstore.registry import FileTable
from fosnstore.editing import write_file
from fosnstore.reader import read_file, read_file_for_exec

table = FileTable()
table.add(Document.new("notes.txt"))

write_file("notes.txt", 0, 0, "Hello world. Second line", table)
print(read_file("notes.txt", table))
# Hello world. Second line
print(read_file_for_exec("notes.txt", table))
# Hello world.
# Second line
```

The `.` after `world` ends the first sentence, so the document holds
`["Hello", "world."]` and `["Second", "line"]`.

If a file is missing from the table, `write_file` loads it from the path given
as `filename`. An out-of-range sentence index raises `StorageError` with
`ErrorCode.SENTENCE_INDEX_OUT_OF_RANGE`. A sentence that another writer holds
raises `ErrorCode.SENTENCE_LOCKED`.

## Bringing a server up

```python
from fosnstore.registration import StorageServer

server = StorageServer("./storage_current", "storage_server_info.txt")
server.init("127.0.0.1", 8081, 9100)
```

`init` does four things in order:

1. It loads every regular file in the storage directory, creating the
   directory if needed. `.undo` files go into `server.history`, and other
   files go into `server.files`.
2. It writes the `FILE_LIST ... END_FILE_LIST` info file.
3. It sends `REGISTER SS <ip> <port> <client_port>` followed by that file to
   the name server.
4. It expects a reply containing `REGISTERED`. Otherwise it raises
   `StorageError`.

## What this package does not do

- It does not listen for client connections or dispatch client commands. It
  provides the operations and reply texts, but no network server or request
  handlers.
- It has no command-line program.
- It does not implement creating or deleting files, granting or removing
  access, access requests, checkpoints or streaming. `AccessRequest` and
  `CheckpointMeta` are plain data records only.
- The binary file format does not include `MetaData.folder`. The folder that
  `move_file` sets is therefore not kept across a reload.

## Tests

Install the package with its `test` extra, then run `pytest` from the project
directory.