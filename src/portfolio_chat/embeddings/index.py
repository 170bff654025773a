"""
Ephemeral FAISS Vector Index

An in-memory cosine-similarity index over knowledge chunks. One index is
built per chat request and dropped with it; nothing is persisted or shared
across requests, so no locking is needed.

Key Properties
--------------
- Cosine similarity via inner product over L2-normalised vectors
- Deterministic ranking: descending score, ties broken by chunk order
- Strong validation of vectors and chunks
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import faiss
import numpy as np

from ..knowledge.chunker import Chunk


RetrievalResult = List[Tuple[Chunk, float]]


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class VectorIndexError(RuntimeError):
    """Raised when the index cannot be built or queried."""


# ---------------------------------------------------------------------
# FAISS Index Wrapper
# ---------------------------------------------------------------------

class VectorIndex:
    """
    Flat inner-product FAISS index pairing each chunk with its vector.

    Use :meth:`build` rather than the constructor.
    """

    def __init__(self, chunks: Sequence[Chunk], index: Optional[faiss.IndexFlatIP]) -> None:
        self._chunks: List[Chunk] = list(chunks)
        self._index = index

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_embeddings(
        embeddings: Sequence[Sequence[float]],
        chunks: Sequence[Chunk],
    ) -> int:
        if len(embeddings) != len(chunks):
            raise VectorIndexError(
                "Embedding count does not match chunk count."
            )

        dim = len(embeddings[0])
        if dim == 0:
            raise VectorIndexError("Embedding vectors must be non-empty.")

        for i, emb in enumerate(embeddings):
            if len(emb) != dim:
                raise VectorIndexError(
                    f"Inconsistent embedding dimensionality at index {i}."
                )
        return dim

    @staticmethod
    def _as_normalised(vectors: Sequence[Sequence[float]]) -> np.ndarray:
        array = np.ascontiguousarray(vectors, dtype="float32")
        # Zero vectors stay zero and score 0 against everything.
        faiss.normalize_L2(array)
        return array

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        chunks: Sequence[Chunk],
        embeddings: Sequence[Sequence[float]],
    ) -> "VectorIndex":
        """
        Create an index from chunks and their embeddings (same order).

        An empty chunk list yields an empty index.

        Raises
        ------
        VectorIndexError
            On count or dimensionality mismatch, or if FAISS rejects the vectors.
        """
        if not chunks and not embeddings:
            return cls([], None)

        dim = cls._validate_embeddings(embeddings, chunks)

        index = faiss.IndexFlatIP(dim)
        try:
            index.add(cls._as_normalised(embeddings))
        except Exception as exc:
            raise VectorIndexError(
                f"Failed to add vectors to FAISS: {type(exc).__name__}"
            ) from exc

        return cls(chunks, index)

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def dimension(self) -> int:
        return self._index.d if self._index is not None else 0

    def query(
        self,
        query_emb: Sequence[float],
        k: int = 4,
    ) -> RetrievalResult:
        """
        Return up to ``k`` (chunk, cosine similarity) pairs, best first.

        All vectors are scored, then ranked by descending similarity with
        ties kept in chunk order, so repeated queries give identical results.
        """
        if self._index is None or k <= 0:
            return []

        if len(query_emb) != self._index.d:
            raise VectorIndexError(
                f"Query dimension {len(query_emb)} does not match index "
                f"dimension {self._index.d}."
            )

        q = self._as_normalised([query_emb])

        try:
            scores, idxs = self._index.search(q, self._index.ntotal)
        except Exception as exc:
            raise VectorIndexError(
                f"FAISS search failed: {type(exc).__name__}"
            ) from exc

        ranked = sorted(
            (
                (float(score), int(idx))
                for score, idx in zip(scores[0], idxs[0])
                if idx != -1
            ),
            key=lambda pair: (-pair[0], pair[1]),
        )

        return [(self._chunks[idx], score) for score, idx in ranked[:k]]
