from functools import lru_cache

from research_synth.core.config import get_settings

from .base import LLMClient
from .dummy import DummyLLMClient
from .ollama import OllamaLLMClient


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    """
    Return a singleton LLM client based on current settings.

    Supported providers:
    - 'dummy' (or 'dev'): offline client returning canned JSON reports
    - 'ollama': local Ollama server via HTTP
    """
    settings = get_settings()
    provider = settings.llm_provider.lower()

    if provider in {"dummy", "dev"}:
        return DummyLLMClient(model=settings.llm_model)

    if provider == "ollama":
        return OllamaLLMClient(
            base_url=settings.ollama_base_url,
            model=settings.llm_model,
            timeout_s=settings.inference_timeout_s,
            health_timeout_s=settings.health_timeout_s,
            default_options={
                "temperature": settings.llm_temperature,
                "num_predict": settings.llm_num_predict,
            },
        )

    raise ValueError(
        f"Unsupported LLM provider: {provider!r}. "
        "Currently supported: 'dummy', 'ollama'."
    )
