"""
Knowledge Chunker

Splits the knowledge text into overlapping passages for embedding.

Each chunk is a contiguous slice of the source text. Consecutive chunks share
exactly ``chunk_overlap`` characters, no chunk exceeds ``chunk_size``, and the
first chunk followed by every later chunk minus its overlap prefix rebuilds
the source exactly.
"""

from __future__ import annotations

from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field


# Preferred cut points, strongest first.
SEPARATORS: Sequence[str] = ("\n\n", "\n", ".", " ")


class Chunk(BaseModel):
    """
    A bounded slice of the knowledge text.
    """

    text: str = Field(..., min_length=1)
    source_offset: int = Field(
        ...,
        ge=0,
        description="Character offset of the chunk's first character in the source.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def end_offset(self) -> int:
        return self.source_offset + len(self.text)


def _find_cut(text: str, start: int, min_end: int, max_end: int) -> int:
    """
    Return the end offset for a chunk starting at ``start``.

    The cut lands right after the strongest separator whose end falls in
    ``(min_end, max_end]``; without one it is a hard cut at ``max_end``.
    """
    window = text[start:max_end]
    for sep in SEPARATORS:
        idx = window.rfind(sep)
        if idx == -1:
            continue
        end = start + idx + len(sep)
        if end > min_end:
            return end
    return max_end


def chunk_text(
    text: str,
    chunk_size: int = 600,
    chunk_overlap: int = 100,
) -> List[Chunk]:
    """
    Split ``text`` into overlapping chunks.

    Parameters
    ----------
    text : str
        Source text.

    chunk_size : int
        Maximum characters per chunk.

    chunk_overlap : int
        Characters shared by each pair of adjacent chunks.

    Returns
    -------
    List[Chunk]
        Ordered chunks covering the whole text; empty for empty input.

    Raises
    ------
    ValueError
        If ``chunk_size <= 0`` or ``chunk_overlap`` is not in ``[0, chunk_size)``.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not 0 <= chunk_overlap < chunk_size:
        raise ValueError("chunk_overlap must be in [0, chunk_size)")

    chunks: List[Chunk] = []
    start = 0
    length = len(text)

    while start < length:
        max_end = start + chunk_size
        if max_end >= length:
            chunks.append(Chunk(text=text[start:], source_offset=start))
            break

        # The next chunk starts at end - overlap, so end must clear the overlap
        # to guarantee progress.
        end = _find_cut(text, start, start + chunk_overlap, max_end)
        chunks.append(Chunk(text=text[start:end], source_offset=start))
        start = end - chunk_overlap

    return chunks


def stitch_chunks(chunks: Sequence[Chunk], chunk_overlap: int) -> str:
    """Rebuild the source text from chunks produced with ``chunk_overlap``."""
    if not chunks:
        return ""
    parts = [chunks[0].text]
    parts.extend(chunk.text[chunk_overlap:] for chunk in chunks[1:])
    return "".join(parts)
