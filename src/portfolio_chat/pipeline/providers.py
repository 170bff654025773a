"""
Provider Factory

Builds the configured embedding provider and answer generator from settings.
This is where a missing credential becomes a ConfigError.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..config import Settings
from ..core.errors import ConfigError
from ..embeddings.embedder import EmbeddingProvider, GoogleEmbedder, OpenAIEmbedder
from ..llm.client import AnswerGenerator, GeminiChatClient, OpenAIChatClient


# provider -> (embedding model, chat model)
DEFAULT_MODELS: Dict[str, Tuple[str, str]] = {
    "google": ("text-embedding-004", "gemini-1.5-flash"),
    "openai": ("text-embedding-3-small", "gpt-4o-mini"),
}

_KEY_ENV = {"google": "GOOGLE_API_KEY", "openai": "OPENAI_API_KEY"}


def _require_api_key(settings: Settings) -> str:
    provider = settings.llm_provider
    api_key = settings.api_key_for(provider)
    if api_key is None:
        raise ConfigError(f"{_KEY_ENV[provider]} is not configured")
    return api_key


def build_embedder(settings: Settings) -> EmbeddingProvider:
    """
    Raises
    ------
    ConfigError
        If the selected provider has no API key.
    """
    api_key = _require_api_key(settings)
    model = settings.embedding_model or DEFAULT_MODELS[settings.llm_provider][0]

    if settings.llm_provider == "google":
        return GoogleEmbedder(
            api_key=api_key,
            model=model,
            base_url=settings.google_api_base_url,
            timeout=settings.provider_timeout,
        )
    return OpenAIEmbedder(
        api_key=api_key,
        model=model,
        base_url=settings.openai_api_base_url,
        timeout=settings.provider_timeout,
    )


def build_generator(settings: Settings) -> AnswerGenerator:
    """
    Raises
    ------
    ConfigError
        If the selected provider has no API key.
    """
    api_key = _require_api_key(settings)
    model = settings.chat_model or DEFAULT_MODELS[settings.llm_provider][1]

    if settings.llm_provider == "google":
        return GeminiChatClient(
            api_key=api_key,
            model=model,
            base_url=settings.google_api_base_url,
            temperature=settings.temperature,
            timeout=settings.provider_timeout,
        )
    return OpenAIChatClient(
        api_key=api_key,
        model=model,
        base_url=settings.openai_api_base_url,
        temperature=settings.temperature,
        timeout=settings.provider_timeout,
    )
