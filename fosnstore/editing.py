"""Word insertion into documents, with sentences split at delimiters."""

from __future__ import annotations

from typing import Iterable

from .codec import load_document
from .model import Document, Sentence, WordUpdate
from .protocol import ErrorCode, StorageError
from .registry import FileTable

SENTENCE_DELIMITERS = ".!?"
_QUOTES = "\"'"


def split_at_delimiters(content: str) -> list[str]:
    """Split content after every sentence delimiter that is not inside quotes.

    Each delimiter stays with the text before it, so ``"e.g."`` becomes
    ``["e.", "g."]`` while ``'echo "test."'`` stays whole.
    """
    if not content:
        return [""]

    parts: list[str] = []
    start = 0
    quote: str | None = None
    for i, ch in enumerate(content):
        if ch in _QUOTES:
            if quote is None:
                quote = ch
            elif ch == quote:
                quote = None
            continue
        if quote is None and ch in SENTENCE_DELIMITERS:
            parts.append(content[start:i + 1])
            start = i + 1

    if start < len(content):
        parts.append(content[start:])
    return parts or [content]


def ends_with_delimiter(word: str | None) -> bool:
    """Tell whether a word ends with '.', '!' or '?'."""
    return bool(word) and word[-1] in SENTENCE_DELIMITERS


def _split_sentence(document: Document, index: int, at: int) -> Sentence:
    """Move the words of sentence ``index`` from ``at`` onward into a new sentence after it."""
    working = document.sentences[index]
    tail = Sentence(working.words[at:])
    del working.words[at:]
    document.sentences.insert(index + 1, tail)
    return tail


def apply_queued_updates(
    document: Document, sentence_index: int, updates: Iterable[WordUpdate]
) -> None:
    """Apply word insertions to one sentence of a document.

    Every update targets the sentence at ``sentence_index`` as it stands when
    the update is applied. Its content is split on spaces and at sentence
    delimiters; a sentence is split wherever a word ending in a delimiter is
    followed by another word. Updates with a negative word index, or one
    past the end of the target sentence, are skipped. The caller holds the
    sentence's lock.
    """
    for update in updates:
        if update is None or update.content is None or update.word_index < 0:
            continue

        while sentence_index >= len(document.sentences):
            document.sentences.append(Sentence())

        target = document.sentences[sentence_index]
        if update.word_index > len(target.words):
            continue

        insert_position = update.word_index
        working_index = sentence_index
        working = target

        for token in (t for t in update.content.split(" ") if t):
            for part in split_at_delimiters(token):
                if not part:
                    continue
                working.words.insert(insert_position, part)
                insert_position += 1

                if insert_position >= 2 and ends_with_delimiter(
                    working.words[insert_position - 2]
                ):
                    working = _split_sentence(
                        document, working_index, insert_position - 1
                    )
                    working_index += 1
                    insert_position = 1

                if ends_with_delimiter(working.words[insert_position - 1]):
                    working = _split_sentence(document, working_index, insert_position)
                    working_index += 1
                    insert_position = 0


def write_file(
    filename: str,
    sentence_index: int,
    word_index: int,
    data: str,
    table: FileTable,
) -> None:
    """Insert ``data`` at a word position of a sentence in a stored file.

    The file is loaded from disk into the table if it is not held yet. The
    sentence index may be at most the current number of sentences; writing
    one past the end starts a new sentence.
    """
    if sentence_index < 0:
        raise StorageError(ErrorCode.SENTENCE_INDEX_NEGATIVE, str(sentence_index))
    if word_index < 0:
        raise StorageError(ErrorCode.INVALID_WORD_INDEX, str(word_index))

    document = table.get(filename)
    if document is None:
        document = load_document(filename)
        table.add(document)

    sentence_count = len(document.sentences)
    if sentence_index > sentence_count:
        raise StorageError(
            ErrorCode.SENTENCE_INDEX_OUT_OF_RANGE,
            f"{sentence_index} (file has {sentence_count} sentences)",
        )

    while len(document.sentences) <= sentence_index:
        document.sentences.append(Sentence())
    sentence = document.sentences[sentence_index]

    with document.mutex:
        document.writecount += 1
        if not sentence.lock.acquire(blocking=False):
            document.writecount -= 1
            raise StorageError(ErrorCode.SENTENCE_LOCKED, str(sentence_index))

    try:
        with document.rwlock.write():
            apply_queued_updates(
                document, sentence_index, [WordUpdate(word_index, data)]
            )
    finally:
        with document.mutex:
            document.writecount -= 1
            sentence.lock.release()