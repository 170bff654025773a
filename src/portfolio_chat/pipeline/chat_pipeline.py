"""
Chat Pipeline: Retrieval-Augmented Question Answering

Turns one question into one grounded answer. The pipeline is single-pass and
keeps no state between calls:

1. ValidateInput  - reject blank questions
2. BuildIndex     - chunk the knowledge text, embed the chunks, index them
3. Embed          - embed the question
4. Retrieve       - top-k cosine similarity search
5. Generate       - ask the chat model, grounded in the retrieved chunks

Every step runs sequentially. Provider and index failures are translated to
ProviderError here; the HTTP layer only ever sees the ChatError taxonomy.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import Settings
from ..core.errors import InputValidationError, ProviderError
from ..embeddings.embedder import EmbeddingError, EmbeddingProvider
from ..embeddings.index import RetrievalResult, VectorIndex, VectorIndexError
from ..knowledge.chunker import chunk_text
from ..knowledge.document import load_knowledge
from ..llm.client import AnswerGenerator, GenerationError
from .providers import build_embedder, build_generator

logger = logging.getLogger("chat.pipeline")


class ChatPipeline:
    """
    Retrieval-augmented answer pipeline for a single request.

    Providers default to the ones configured in ``settings`` and are
    resolved lazily, so a missing API key surfaces as ConfigError only
    after the question has been validated.
    """

    def __init__(
        self,
        settings: Settings,
        embedder: Optional[EmbeddingProvider] = None,
        generator: Optional[AnswerGenerator] = None,
        knowledge: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._embedder = embedder
        self._generator = generator
        self._knowledge = knowledge

    # ------------------------------------------------------------------
    # Lazy dependencies
    # ------------------------------------------------------------------

    @property
    def knowledge(self) -> str:
        if self._knowledge is None:
            self._knowledge = load_knowledge(self._settings.knowledge_path)
        return self._knowledge

    @property
    def embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = build_embedder(self._settings)
        return self._embedder

    @property
    def generator(self) -> AnswerGenerator:
        if self._generator is None:
            self._generator = build_generator(self._settings)
        return self._generator

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(question: Optional[str]) -> str:
        if not isinstance(question, str) or not question.strip():
            raise InputValidationError("question is missing or blank")
        return question.strip()

    async def _build_index(self, embedder: EmbeddingProvider) -> VectorIndex:
        chunks = chunk_text(
            self.knowledge,
            chunk_size=self._settings.chunk_size,
            chunk_overlap=self._settings.chunk_overlap,
        )
        vectors = await embedder.embed([c.text for c in chunks], task="document")
        return VectorIndex.build(chunks, vectors)

    async def _retrieve(
        self,
        question: str,
        embedder: EmbeddingProvider,
    ) -> RetrievalResult:
        try:
            index = await self._build_index(embedder)
            query_vector = await embedder.embed_query(question)
            results = index.query(query_vector, k=self._settings.top_k)
        except (EmbeddingError, VectorIndexError) as exc:
            raise ProviderError(f"Retrieval failed: {exc}") from exc

        logger.info(
            "Retrieved %d of %d chunks (top score %.3f)",
            len(results),
            len(index),
            results[0][1] if results else 0.0,
        )
        return results

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def retrieve(self, question: Optional[str]) -> RetrievalResult:
        """
        Run ValidateInput through Retrieve and return the ranked chunks.

        Raises
        ------
        InputValidationError, ConfigError, ProviderError
        """
        question = self._validate(question)
        return await self._retrieve(question, self.embedder)

    async def answer(self, question: Optional[str]) -> str:
        """
        Answer ``question`` from the knowledge text.

        Raises
        ------
        InputValidationError
            Blank or non-string question.
        ConfigError
            The selected provider has no API key.
        ProviderError
            Embedding, indexing or generation failed.
        """
        question = self._validate(question)

        # Resolve both providers before any network call
        embedder = self.embedder
        generator = self.generator

        results = await self._retrieve(question, embedder)
        context = [chunk for chunk, _score in results]

        try:
            answer = await generator.generate(question, context)
        except GenerationError as exc:
            raise ProviderError(f"Generation failed: {exc}") from exc

        return answer
