from ..config import Settings, settings
from ..pipeline.chat_pipeline import ChatPipeline


def get_settings() -> Settings:
    return settings


def get_pipeline() -> ChatPipeline:
    # A fresh pipeline per request; it holds no cross-request state.
    return ChatPipeline(settings)
