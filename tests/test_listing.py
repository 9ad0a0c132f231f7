import pytest

from fosnstore.listing import file_info, view_all_files
from fosnstore.model import Document, UserAccess
from fosnstore.protocol import AccessType, ErrorCode, StorageError, ViewMode


def _doc(name, owner, users=(), words=0, chars=0):
    document = Document.new(name)
    document.info.owner = owner
    document.info.wordcount = words
    document.info.charcount = chars
    document.info.users_with_access = [UserAccess(u, t) for u, t in users]
    return document


@pytest.fixture
def documents():
    return [
        _doc("a.txt", "alice"),
        _doc("b.txt", "bob", users=[("alice", AccessType.READ)]),
        _doc("c.txt", "carol"),
    ]


def test_user_only_lists_owned_and_shared(documents):
    out = view_all_files(documents, "alice", ViewMode.USER_ONLY)
    assert out == "--> a.txt\n--> b.txt\n"


def test_all_lists_every_file(documents):
    out = view_all_files(documents, "alice", ViewMode.ALL)
    assert out.splitlines() == ["--> a.txt", "--> b.txt", "--> c.txt"]


def test_duplicates_empty_names_and_undo_are_skipped(documents):
    extra = [_doc("a.txt", "alice"), _doc("", "alice"), _doc("a.txt.undo", "alice"), None]
    out = view_all_files(documents + extra, "alice", ViewMode.ALL)
    assert out.count("--> a.txt\n") == 1
    assert ".undo" not in out
    assert len(out.splitlines()) == len(documents)


def test_long_view_has_header_rows_and_footer(documents):
    documents[0].info.wordcount = 3
    documents[0].info.charcount = 10
    out = view_all_files(documents, "alice", ViewMode.LONG)
    lines = out.splitlines()
    assert lines[0] == "-" * 57
    assert lines[1] == "|  Filename  | Words | Chars | Last Access Time | Owner |"
    assert lines[-1] == lines[0]
    assert lines[3].startswith("| a.txt      |     3 |    10 |")
    assert lines[3].endswith("| alice |")
    assert len(lines) == 3 + 2 + 1


def test_long_view_without_files_has_no_footer():
    out = view_all_files([_doc("x", "bob")], "alice", ViewMode.LONG)
    assert out.splitlines()[-1] == "|------------|-------|-------|------------------|-------|"
    assert len(out.splitlines()) == 3


def test_unknown_mode_lists_only_accessible_files(documents):
    assert view_all_files(documents, "carol", 7) == "--> c.txt\n"


def test_file_info_report(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "notes.txt").write_bytes(b"hello")
    document = _doc(
        "notes.txt",
        "alice",
        users=[("alice", AccessType.WRITE), ("bob", AccessType.READ), ("eve", AccessType.WRITE)],
        words=1,
        chars=5,
    )
    document.info.lastmodifiedby = "bob"
    document.info.users_with_access[2].last_access = 1_700_000_000
    out = file_info(document)
    lines = out.splitlines()
    assert lines[0] == "--> File: notes.txt"
    assert "--> Owner: alice" in lines
    assert "--> Size: 5 bytes" in lines
    assert "--> Word Count: 1" in lines
    assert "--> Character Count: 5" in lines
    assert "--> Last Modified By: bob" in lines
    assert lines[-1].startswith("--> Access: alice (RW), bob (R), eve (RW) [last: ")


def test_file_info_missing_file_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(StorageError) as info:
        file_info(_doc("absent.txt", "alice"))
    assert info.value.code == ErrorCode.FILE_READ_FAILED