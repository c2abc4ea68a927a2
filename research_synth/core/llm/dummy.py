import json
import re
from typing import Any, Mapping

from .base import LLMClient

_SOURCE_HEADER = re.compile(r"^--- SOURCE (\d+): (.*) ---$", re.MULTILINE)


class DummyLLMClient(LLMClient):
    """
    Dev/test implementation of LLMClient that does not call any real model.

    Useful for:
    - unit tests
    - local dev when you don't want to run Ollama

    It answers synthesis prompts with a well-formed JSON report built from
    the source headers found in the prompt.
    """

    def __init__(self, model: str = "dummy-model") -> None:
        self._model = model

    @property
    def provider_name(self) -> str:
        return "dummy"

    @property
    def model_name(self) -> str:
        return self._model

    async def generate(
        self,
        *,
        prompt: str,
        system: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        headers = _SOURCE_HEADER.findall(prompt)

        sources = [
            {
                "id": int(number) - 1,
                "label": label,
                "summary": f"[dummy summary of {label}]",
                "quality": "medium",
            }
            for number, label in headers
        ]

        report = {
            "synthesis": (
                f"[dummy synthesis from {self.provider_name}:{self.model_name}] "
                f"{len(sources)} sources were compared."
            ),
            "keyThemes": ["theme 1", "theme 2", "theme 3"],
            "consensus": ["The sources cover a shared subject."],
            "contradictions": [],
            "sources": sources,
            "confidence": 0.5,
        }
        return json.dumps(report)

    async def list_models(self) -> list[str]:
        return [self._model]
