"""Paragraph-bounded chunking for oracle rewrite steps."""

import re
from dataclasses import dataclass
from typing import List, Sequence

_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n+")


@dataclass(frozen=True)
class TextChunk:
    """A run of whole paragraphs."""

    index: int
    text: str
    word_count: int

    @property
    def paragraphs(self) -> List[str]:
        return split_paragraphs(self.text)


def split_paragraphs(text: str) -> List[str]:
    return [p.strip("\n") for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]


def longest_paragraph_words(text: str) -> int:
    return max((len(p.split()) for p in split_paragraphs(text)), default=0)


def chunk_paragraphs(text: str, target_words: int) -> List[TextChunk]:
    """Group paragraphs into chunks of at most ``target_words`` words.

    A paragraph longer than the target becomes a chunk of its own; chunks
    never split a paragraph.

    Args:
        text: Text to chunk
        target_words: Soft word limit per chunk

    Returns:
        Chunks in document order
    """
    chunks: List[TextChunk] = []
    current: List[str] = []
    current_words = 0

    for paragraph in split_paragraphs(text):
        words = len(paragraph.split())
        if current and current_words + words > target_words:
            chunks.append(_make_chunk(len(chunks), current, current_words))
            current, current_words = [], 0
        current.append(paragraph)
        current_words += words

    if current:
        chunks.append(_make_chunk(len(chunks), current, current_words))
    return chunks


def _make_chunk(index: int, paragraphs: List[str], words: int) -> TextChunk:
    return TextChunk(index=index, text="\n\n".join(paragraphs), word_count=words)


def merge_chunks(chunks: Sequence[TextChunk]) -> str:
    """Reassemble chunks in index order with blank-line separators."""
    ordered = sorted(chunks, key=lambda chunk: chunk.index)
    return "\n\n".join(chunk.text.strip("\n") for chunk in ordered if chunk.text.strip())
