from typing import Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Provider selection; the matching API key is checked per request
    llm_provider: Literal["google", "openai"] = "google"

    google_api_key: Optional[SecretStr] = None
    google_api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    openai_api_key: Optional[SecretStr] = None
    openai_api_base_url: str = "https://api.openai.com/v1"

    # Unset means "use the provider's default model"
    embedding_model: Optional[str] = None
    chat_model: Optional[str] = None
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    provider_timeout: float = Field(default=60.0, gt=0)

    # Chunking / retrieval
    chunk_size: int = Field(default=600, gt=0)
    chunk_overlap: int = Field(default=100, ge=0)
    top_k: int = Field(default=4, ge=1)

    knowledge_path: Optional[str] = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    def api_key_for(self, provider: str) -> Optional[str]:
        """Return the plain-text key for ``provider``, or None if unset/blank."""
        secret = self.google_api_key if provider == "google" else self.openai_api_key
        if secret is None:
            return None
        value = secret.get_secret_value().strip()
        return value or None


settings = Settings()
