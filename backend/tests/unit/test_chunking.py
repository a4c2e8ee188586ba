"""Unit tests for text chunking, token estimation and indexing text formatting."""

import pytest

from portfolio_rag.application.interfaces import TokenEstimator
from portfolio_rag.application.services.chunking import (
    TextChunker,
    chunk_text,
    estimate_token_count,
    format_content_for_indexing,
)


def _sentences(count: int) -> list[str]:
    # Each sentence is 34 characters → 9 estimated tokens.
    return [f"This is sentence {i:02d} of the sample." for i in range(count)]


# ── estimate_token_count ─────────────────────────────────────────────


def test_estimate_token_count_empty_is_zero():
    assert estimate_token_count("") == 0


def test_estimate_token_count_rounds_up():
    assert estimate_token_count("abcd") == 1
    assert estimate_token_count("abcde") == 2
    assert estimate_token_count("a" * 400) == 100


def test_estimate_token_count_is_monotonic():
    counts = [estimate_token_count("x" * n) for n in range(200)]
    assert counts == sorted(counts)


# ── chunk_text ───────────────────────────────────────────────────────


def test_short_text_yields_single_unchanged_chunk():
    chunks = chunk_text("Short sentence only.", 500, 50)

    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].content == "Short sentence only."
    assert chunks[0].token_count == 5
    assert (chunks[0].start_position, chunks[0].end_position) == (0, 20)


def test_short_multi_sentence_text_keeps_original_whitespace():
    text = "Title: Gali\n\nContent: A RAG engine. It ships fast!\n\nTags: python, rag"

    chunks = chunk_text(text)

    assert len(chunks) == 1
    assert chunks[0].content == text


def test_surrounding_whitespace_is_trimmed_but_offsets_point_into_input():
    text = "\n  Leading and trailing. Spaces kept inside.  \n"

    chunks = chunk_text(text)

    assert len(chunks) == 1
    assert chunks[0].content == "Leading and trailing. Spaces kept inside."
    assert text[chunks[0].start_position:chunks[0].end_position] == chunks[0].content
    assert chunks[0].start_position == 3


def test_empty_and_whitespace_text_yield_no_chunks():
    assert chunk_text("") == []
    assert chunk_text("   \n\t ") == []


def test_long_text_is_split_with_contiguous_indexes():
    text = " ".join(_sentences(12))

    chunks = chunk_text(text, chunk_size=30, overlap=10)

    assert len(chunks) > 1
    assert [c.index for c in chunks] == list(range(len(chunks)))
    for chunk in chunks:
        assert chunk.token_count <= 30
        assert text[chunk.start_position:chunk.end_position] == chunk.content


def test_first_chunk_packs_sentences_greedily():
    sentences = _sentences(6)
    text = " ".join(sentences)

    chunks = chunk_text(text, chunk_size=30, overlap=10)

    # 3 × 9 = 27 tokens fit, a fourth sentence would make 36.
    assert chunks[0].content == " ".join(sentences[:3])
    assert chunks[0].token_count == 27


def test_consecutive_chunks_share_an_overlapping_sentence():
    sentences = _sentences(12)
    text = " ".join(sentences)

    chunks = chunk_text(text, chunk_size=30, overlap=10)

    for previous, current in zip(chunks, chunks[1:]):
        first_sentence = next(s for s in sentences if current.content.startswith(s))
        assert first_sentence in previous.content


def test_overlap_seeds_whole_sentences_until_budget_met():
    sentences = _sentences(6)
    text = " ".join(sentences)

    chunks = chunk_text(text, chunk_size=30, overlap=10)

    # Walking back from sentence 2: 9 tokens < 10, so sentence 1 is taken too.
    assert chunks[1].content.startswith(sentences[1])
    assert chunks[1].content == " ".join(sentences[1:4])


def test_zero_overlap_partitions_sentences():
    sentences = _sentences(9)
    text = " ".join(sentences)

    chunks = chunk_text(text, chunk_size=30, overlap=0)

    assert [c.content for c in chunks] == [
        " ".join(sentences[0:3]),
        " ".join(sentences[3:6]),
        " ".join(sentences[6:9]),
    ]


def test_oversized_sentence_becomes_its_own_chunk():
    long_sentence = "This sentence is far longer than the tiny budget allows it to be."
    text = f"Tiny one. {long_sentence} Tiny two."

    chunks = chunk_text(text, chunk_size=5, overlap=0)

    assert long_sentence in [c.content for c in chunks]
    assert chunks[-1].content == "Tiny two."


def test_splits_on_exclamation_and_question_marks():
    text = "Is this a question? Yes! It is."

    chunks = chunk_text(text, chunk_size=1, overlap=0)

    assert [c.content for c in chunks] == ["Is this a question?", "Yes!", "It is."]


def test_custom_estimator_drives_chunk_budget():
    class WordEstimator(TokenEstimator):
        def estimate(self, text: str) -> int:
            return len(text.split())

    chunker = TextChunker(chunk_size=4, overlap=0, estimator=WordEstimator())

    chunks = chunker.chunk("One two. Three four. Five six.")

    assert [c.content for c in chunks] == ["One two. Three four.", "Five six."]
    assert chunks[0].token_count == 4


@pytest.mark.parametrize("chunk_size, overlap", [(0, 0), (-1, 10), (100, -1)])
def test_invalid_budgets_are_rejected(chunk_size: int, overlap: int):
    with pytest.raises(ValueError):
        TextChunker(chunk_size, overlap)


# ── format_content_for_indexing ──────────────────────────────────────


def test_format_content_with_title_and_body():
    text = format_content_for_indexing("Portfolio Site", "A React front end.")

    assert text == "Title: Portfolio Site\n\nContent: A React front end."


def test_format_content_includes_additional_fields_in_order():
    text = format_content_for_indexing(
        "Chat Agent",
        "Answers questions about projects.",
        {"Technologies": ["TypeScript", "pgvector"], "Status": "live"},
    )

    assert text.split("\n\n") == [
        "Title: Chat Agent",
        "Content: Answers questions about projects.",
        "Technologies: TypeScript, pgvector",
        "Status: live",
    ]
