from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API metadata
    api_name: str = "Research Synthesizer API"
    api_version: str = "1.0.0"
    service_name: str = "research-synthesizer"

    # Server config
    host: str = "0.0.0.0"
    port: int = Field(default=4203, validation_alias=AliasChoices("PORT", "port"))

    # LLM provider settings (local/open-source via Ollama)
    llm_provider: str = "ollama"  # "ollama" or "dummy"
    llm_model: str = Field(
        default="qwen3:8b-q8_0",
        validation_alias=AliasChoices("OLLAMA_MODEL", "llm_model"),
    )
    llm_temperature: float = 0.2
    llm_num_predict: int = 2048

    # Ollama config
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias=AliasChoices("OLLAMA_URL", "ollama_base_url"),
    )

    # Timeouts (seconds)
    fetch_timeout_s: float = 20.0
    inference_timeout_s: float = 180.0
    health_timeout_s: float = 3.0

    # Size limits
    max_body_bytes: int = 4 * 1024 * 1024
    max_source_chars: int = 12_000
    max_prompt_source_chars: int = 64_000
    fetch_concurrency: int = 4

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance so we don't re-parse env vars on every import.
    """
    return Settings()
