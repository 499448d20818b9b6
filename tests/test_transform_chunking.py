from __future__ import annotations

from vellum.text.chunking import chunk_paragraphs, longest_paragraph_words, merge_chunks
from vellum.text.citations import clean_orphaned_brackets, is_bibliography_line
from vellum.text.transform import (
    count_changed_lines,
    count_lines,
    remove_line_range,
    remove_line_ranges,
    remove_matching_lines,
    remove_patterns_inline,
)


def test_line_range_removal_is_half_open() -> None:
    text = "\n".join(f"line {i}" for i in range(10))
    result = remove_line_range(text, 2, 5)
    assert result.split("\n") == ["line 0", "line 1", "line 5", "line 6", "line 7", "line 8", "line 9"]
    assert remove_line_range(text, 5, 5) == text


def test_overlapping_ranges_are_merged() -> None:
    text = "\n".join(f"line {i}" for i in range(10))
    result = remove_line_ranges(text, [(6, 8), (1, 3), (2, 4)])
    assert result.split("\n") == ["line 0", "line 4", "line 5", "line 8", "line 9"]


def test_matching_lines_respect_skip_predicate() -> None:
    text = "Body text\n  12  \nKeep 13\n14"
    result, removed = remove_matching_lines(
        text, [r"\d+"], skip_line=lambda line: line == "14"
    )
    assert removed == 1
    assert result == "Body text\nKeep 13\n14"


def test_inline_removal_counts_matches() -> None:
    text = "As shown [1], and again [2, 3].\nNothing here."
    result, count = remove_patterns_inline(text, [r"\s?\[\d+(?:,\s*\d+)*\]"])
    assert count == 2
    assert result == "As shown, and again.\nNothing here."


def test_counts() -> None:
    assert count_lines("") == 0
    assert count_lines("a\nb\n") == 3
    assert count_changed_lines("a\nb\nc", "a\nc") == 1
    assert count_changed_lines("a\nb", "b\na") == 0


def test_chunks_never_split_paragraphs() -> None:
    paragraphs = [" ".join(["word"] * 40) for _ in range(10)]
    text = "\n\n".join(paragraphs)

    chunks = chunk_paragraphs(text, target_words=100)
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
    assert all(chunk.word_count <= 100 for chunk in chunks)
    assert sum(len(chunk.paragraphs) for chunk in chunks) == 10
    assert merge_chunks(reversed(chunks)) == text


def test_oversized_paragraph_is_its_own_chunk() -> None:
    text = "short one\n\n" + " ".join(["long"] * 300) + "\n\nshort two"
    chunks = chunk_paragraphs(text, target_words=100)
    assert len(chunks) == 3
    assert chunks[1].word_count == 300
    assert longest_paragraph_words(text) == 300


def test_citation_helpers() -> None:
    assert is_bibliography_line("Smith, John. The Long Book. London: Press, 1999.")
    assert not is_bibliography_line("As Smith argued, the river was long.")
    assert clean_orphaned_brackets("A claim () stands [ ] here .") == "A claim stands here."
