from .base import JSON_SYSTEM_PROMPT, TEXT_SYSTEM_PROMPT, LLMClient, system_prompt_for
from .dummy import DummyLLMClient
from .factory import get_llm_client
from .ollama import OllamaLLMClient

__all__ = [
    "LLMClient",
    "DummyLLMClient",
    "OllamaLLMClient",
    "get_llm_client",
    "system_prompt_for",
    "JSON_SYSTEM_PROMPT",
    "TEXT_SYSTEM_PROMPT",
]
