"""
Chat pipeline tests with in-process provider doubles.
"""

from unittest.mock import AsyncMock

import pytest

from portfolio_chat.config import Settings
from portfolio_chat.core.errors import ConfigError, InputValidationError, ProviderError
from portfolio_chat.embeddings.embedder import EmbeddingError, GoogleEmbedder, OpenAIEmbedder
from portfolio_chat.llm.client import GeminiChatClient, GenerationError, OpenAIChatClient
from portfolio_chat.pipeline.chat_pipeline import ChatPipeline
from portfolio_chat.pipeline.providers import build_embedder, build_generator


KNOWLEDGE = "Mushtaq is a developer. He knows React and Node."


class TestChatPipeline:
    """Tests for the retrieve-then-generate flow."""

    @pytest.mark.asyncio
    async def test_end_to_end_example(self, test_settings, keyword_embedder, echo_generator):
        pipeline = ChatPipeline(
            test_settings,
            embedder=keyword_embedder,
            generator=echo_generator,
            knowledge=KNOWLEDGE,
        )

        results = await pipeline.retrieve("What does he know?")
        answer = await pipeline.answer("What does he know?")

        assert "React and Node" in results[0][0].text
        assert answer
        question, context = echo_generator.calls[0]
        assert question == "What does he know?"
        assert "React and Node" in context[0].text

    @pytest.mark.asyncio
    async def test_retrieval_prefers_matching_chunk(self, test_settings, keyword_embedder, echo_generator):
        settings = test_settings.model_copy(update={"chunk_size": 30, "chunk_overlap": 5})
        pipeline = ChatPipeline(
            settings,
            embedder=keyword_embedder,
            generator=echo_generator,
            knowledge=KNOWLEDGE,
        )

        results = await pipeline.retrieve("What does he know?")

        assert len(results) == 2
        assert results[0][0].text == "oper. He knows React and Node."
        assert results[0][1] > results[1][1]

    @pytest.mark.asyncio
    async def test_chunks_and_question_embedded_with_tasks(self, test_settings, keyword_embedder, echo_generator):
        pipeline = ChatPipeline(
            test_settings,
            embedder=keyword_embedder,
            generator=echo_generator,
            knowledge=KNOWLEDGE,
        )

        await pipeline.answer("  What does he know?  ")

        assert keyword_embedder.calls == [
            ([KNOWLEDGE], "document"),
            (["What does he know?"], "query"),
        ]

    @pytest.mark.asyncio
    async def test_top_k_limits_context(self, test_settings, keyword_embedder, echo_generator):
        settings = test_settings.model_copy(update={"chunk_size": 60, "chunk_overlap": 10, "top_k": 2})
        pipeline = ChatPipeline(settings, embedder=keyword_embedder, generator=echo_generator)

        await pipeline.answer("Where is he based?")

        _, context = echo_generator.calls[0]
        assert len(context) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", [None, "", "   ", 42])
    async def test_blank_question_rejected(self, test_settings, question):
        embedder = AsyncMock()
        generator = AsyncMock()
        pipeline = ChatPipeline(test_settings, embedder=embedder, generator=generator)

        with pytest.raises(InputValidationError):
            await pipeline.answer(question)

        embedder.embed.assert_not_called()
        generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_embedding_failure_becomes_provider_error(self, test_settings, echo_generator):
        embedder = AsyncMock()
        embedder.embed.side_effect = EmbeddingError("Embedding generation failed: ConnectError")
        pipeline = ChatPipeline(test_settings, embedder=embedder, generator=echo_generator)

        with pytest.raises(ProviderError) as excinfo:
            await pipeline.answer("What does he know?")

        assert isinstance(excinfo.value.__cause__, EmbeddingError)
        assert echo_generator.calls == []

    @pytest.mark.asyncio
    async def test_generation_failure_becomes_provider_error(self, test_settings, keyword_embedder):
        generator = AsyncMock()
        generator.generate.side_effect = GenerationError("No answer candidates")
        pipeline = ChatPipeline(test_settings, embedder=keyword_embedder, generator=generator)

        with pytest.raises(ProviderError):
            await pipeline.answer("What does he know?")

    @pytest.mark.asyncio
    async def test_missing_key_is_config_error(self):
        settings = Settings(_env_file=None, llm_provider="openai", openai_api_key=None)
        pipeline = ChatPipeline(settings, knowledge=KNOWLEDGE)

        with pytest.raises(ConfigError):
            await pipeline.answer("What does he know?")

    @pytest.mark.asyncio
    async def test_validation_runs_before_config_check(self):
        settings = Settings(_env_file=None, llm_provider="openai", openai_api_key=None)
        pipeline = ChatPipeline(settings, knowledge=KNOWLEDGE)

        with pytest.raises(InputValidationError):
            await pipeline.answer("")


class TestProviderFactory:
    """Tests for settings-driven provider construction."""

    def test_google_defaults(self, test_settings):
        embedder = build_embedder(test_settings)
        generator = build_generator(test_settings)

        assert isinstance(embedder, GoogleEmbedder)
        assert embedder.model == "text-embedding-004"
        assert isinstance(generator, GeminiChatClient)
        assert generator.model == "gemini-1.5-flash"
        assert generator.temperature == 0.2

    def test_openai_with_model_overrides(self):
        settings = Settings(
            _env_file=None,
            llm_provider="openai",
            openai_api_key="sk-test",
            embedding_model="text-embedding-3-large",
            chat_model="gpt-4o",
        )

        embedder = build_embedder(settings)
        generator = build_generator(settings)

        assert isinstance(embedder, OpenAIEmbedder)
        assert embedder.model == "text-embedding-3-large"
        assert isinstance(generator, OpenAIChatClient)
        assert generator.model == "gpt-4o"

    def test_blank_key_is_missing(self):
        settings = Settings(_env_file=None, llm_provider="google", google_api_key="   ")

        with pytest.raises(ConfigError, match="GOOGLE_API_KEY"):
            build_embedder(settings)

    def test_overlap_must_be_smaller_than_chunk_size(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, chunk_size=100, chunk_overlap=100)
