import pytest

from fosnstore.codec import save_document
from fosnstore.editing import (
    apply_queued_updates,
    ends_with_delimiter,
    split_at_delimiters,
    write_file,
)
from fosnstore.model import Document, Sentence, WordUpdate
from fosnstore.protocol import ErrorCode, StorageError
from fosnstore.reader import document_text, read_file
from fosnstore.registry import FileTable


def _doc(*sentences):
    document = Document.new("doc.txt")
    document.sentences = [Sentence(list(words)) for words in sentences]
    return document


def _words(document):
    return [s.words for s in document.sentences]


@pytest.mark.parametrize(
    "content, expected",
    [
        ("AAD.", ["AAD."]),
        ("e.g.", ["e.", "g."]),
        ('echo "test."', ['echo "test."']),
        ("???", ["?", "?", "?"]),
        ("..", [".", "."]),
        ("", [""]),
        ("plain", ["plain"]),
    ],
)
def test_split_at_delimiters_examples(content, expected):
    assert split_at_delimiters(content) == expected


@pytest.mark.parametrize("content", ["a.b!c?d", "x'y.z'w.", "...", "no delims", '"a.b'])
def test_split_parts_rejoin_to_content(content):
    assert "".join(split_at_delimiters(content)) == content


@pytest.mark.parametrize("word, expected", [
    ("end.", True), ("wow!", True), ("why?", True),
    ("word", False), ("", False), (None, False), ('"a."', False),
])
def test_ends_with_delimiter(word, expected):
    assert ends_with_delimiter(word) is expected


def test_apply_splits_sentences_and_keeps_text():
    document = _doc()
    apply_queued_updates(document, 0, [WordUpdate(0, "Hi there. How are you?")])
    assert _words(document) == [["Hi", "there."], ["How", "are", "you?"], []]
    assert document_text(document) == "Hi there. How are you?"


def test_apply_word_after_delimiter_starts_new_sentence():
    document = _doc(["Done."])
    apply_queued_updates(document, 0, [WordUpdate(1, "next")])
    assert _words(document) == [["Done."], ["next"]]


def test_apply_delimited_word_in_middle_splits_rest():
    document = _doc(["a", "b"])
    apply_queued_updates(document, 0, [WordUpdate(1, "x.")])
    assert _words(document) == [["a", "x."], ["b"]]


def test_apply_skips_out_of_range_and_negative_indexes():
    document = _doc(["a", "b"])
    apply_queued_updates(
        document, 0, [WordUpdate(3, "late"), WordUpdate(-1, "neg")]
    )
    assert _words(document) == [["a", "b"]]


def test_apply_creates_missing_sentences():
    document = _doc()
    apply_queued_updates(document, 2, [WordUpdate(0, "w")])
    assert _words(document) == [[], [], ["w"]]


def test_apply_keeps_quoted_delimiters():
    document = _doc()
    apply_queued_updates(document, 0, [WordUpdate(0, 'echo "a.b"')])
    assert _words(document) == [["echo", '"a.b"']]


def test_apply_collapses_repeated_spaces():
    document = _doc()
    apply_queued_updates(document, 0, [WordUpdate(0, "one   two")])
    assert _words(document) == [["one", "two"]]


def test_apply_batch_targets_original_sentence_index():
    document = _doc(["a"])
    apply_queued_updates(
        document, 0, [WordUpdate(1, "b."), WordUpdate(0, "z")]
    )
    assert _words(document) == [["z", "a", "b."], []]


def test_write_file_inserts_and_reads_back():
    table = FileTable()
    table.add(Document.new("f.txt"))
    write_file("f.txt", 0, 0, "Hello world.", table)
    assert read_file("f.txt", table) == "Hello world."
    document = table.get("f.txt")
    assert _words(document) == [["Hello", "world."], []]
    assert document.writecount == 0


def test_write_file_rejects_negative_indexes():
    table = FileTable()
    table.add(Document.new("f.txt"))
    with pytest.raises(StorageError) as info:
        write_file("f.txt", -1, 0, "x", table)
    assert info.value.code == ErrorCode.SENTENCE_INDEX_NEGATIVE
    with pytest.raises(StorageError) as info:
        write_file("f.txt", 0, -1, "x", table)
    assert info.value.code == ErrorCode.INVALID_WORD_INDEX


def test_write_file_sentence_index_out_of_range():
    table = FileTable()
    table.add(Document.new("f.txt"))
    with pytest.raises(StorageError) as info:
        write_file("f.txt", 1, 0, "x", table)
    assert info.value.code == ErrorCode.SENTENCE_INDEX_OUT_OF_RANGE
    assert table.get("f.txt").sentences == []


def test_write_file_locked_sentence():
    table = FileTable()
    document = _doc(["a"])
    table.add(document)
    document.sentences[0].lock.acquire()
    try:
        with pytest.raises(StorageError) as info:
            write_file("doc.txt", 0, 0, "x", table)
    finally:
        document.sentences[0].lock.release()
    assert info.value.code == ErrorCode.SENTENCE_LOCKED
    assert document.writecount == 0
    assert _words(document) == [["a"]]


def test_write_file_releases_sentence_lock():
    table = FileTable()
    document = _doc(["a"])
    table.add(document)
    write_file("doc.txt", 0, 1, "b", table)
    assert document.sentences[0].lock.acquire(blocking=False)
    document.sentences[0].lock.release()
    assert _words(document) == [["a", "b"]]


def test_write_file_loads_missing_document_from_disk(tmp_path):
    path = str(tmp_path / "stored.txt")
    original = Document.new(path)
    original.sentences = [Sentence(["first"])]
    save_document(original, path)

    table = FileTable()
    write_file(path, 0, 1, "second", table)
    assert path in table
    assert _words(table.get(path)) == [["first", "second"]]


def test_write_file_missing_everywhere_raises(tmp_path):
    table = FileTable()
    with pytest.raises(StorageError) as info:
        write_file(str(tmp_path / "absent"), 0, 0, "x", table)
    assert info.value.code == ErrorCode.FILE_READ_FAILED