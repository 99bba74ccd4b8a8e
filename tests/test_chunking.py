from __future__ import annotations

import pytest

from labelsnip.core.chunking import DEFAULT_MAX_CHUNK_CHARS, split_text

TEXT = (
    "It was the best of times, it was the worst of times, it was the age of wisdom, "
    "it was the age of foolishness, it was the epoch of belief, it was the epoch of incredulity."
)


@pytest.mark.parametrize("max_chars", [1, 5, 12, 30, 80, 1000])
def test_chunks_preserve_word_sequence(max_chars: int) -> None:
    chunks = split_text(TEXT, max_chars=max_chars)
    rejoined = [w for c in chunks for w in c.split()]
    assert rejoined == TEXT.split()


@pytest.mark.parametrize("max_chars", [5, 12, 30, 80])
def test_chunks_respect_budget_unless_single_long_word(max_chars: int) -> None:
    for chunk in split_text(TEXT, max_chars=max_chars):
        assert len(chunk) <= max_chars or len(chunk.split()) == 1


def test_chunks_are_greedy() -> None:
    # each chunk is full: the first word of the next one would not have fit
    chunks = split_text(TEXT, max_chars=30)
    for current, nxt in zip(chunks, chunks[1:]):
        assert len(current) + 1 + len(nxt.split()[0]) > 30


def test_single_short_word_is_one_chunk() -> None:
    assert split_text("hello", max_chars=10) == ["hello"]


def test_long_word_is_kept_whole() -> None:
    word = "x" * 25
    assert split_text(f"a {word} b", max_chars=10) == ["a", word, "b"]


def test_exact_fit() -> None:
    assert split_text("abcd efgh ij", max_chars=9) == ["abcd efgh", "ij"]


def test_whitespace_is_collapsed_and_not_leading() -> None:
    chunks = split_text("  one\ttwo\n\nthree   four ", max_chars=9)
    assert chunks == ["one two", "three", "four"]
    assert all(c and not c.startswith(" ") for c in chunks)


@pytest.mark.parametrize("text", ["", "   ", "\n\t \n"])
def test_empty_input_yields_no_chunks(text: str) -> None:
    assert split_text(text) == []


def test_default_budget() -> None:
    text = " ".join(["word"] * 1000)  # 4999 chars
    chunks = split_text(text)
    assert len(chunks) == 3
    assert all(len(c) <= DEFAULT_MAX_CHUNK_CHARS for c in chunks)


def test_non_positive_budget_rejected() -> None:
    with pytest.raises(ValueError):
        split_text("a b", max_chars=0)
