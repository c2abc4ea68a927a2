from abc import ABC, abstractmethod
from typing import Any, Mapping

JSON_SYSTEM_PROMPT = (
    "You are a research analyst. Respond ONLY with valid JSON. No markdown, "
    "no backticks, no commentary before or after."
)
TEXT_SYSTEM_PROMPT = "You are a research analyst. Be concise and factual."


def system_prompt_for(expect_json: bool) -> str:
    return JSON_SYSTEM_PROMPT if expect_json else TEXT_SYSTEM_PROMPT


class LLMClient(ABC):
    """
    Minimal interface for an LLM client.

    Concrete implementations (dummy, Ollama) implement this interface so the
    synthesizer never depends on a specific provider's API.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def generate(
        self,
        *,
        prompt: str,
        system: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Generate a single text completion given a prompt.

        'options' can carry provider-specific knobs (temperature, max_tokens,
        top_p, etc.). Implementations should treat unknown options leniently.

        Raises InferenceUnavailable when the provider cannot be reached or
        answers with an error status.
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[str]:
        """
        Names of the models the provider can serve. Used as a health check,
        so it raises InferenceUnavailable rather than returning an empty list
        when the provider is down.
        """
        ...
