import asyncio
import logging
from typing import Any, Mapping

import httpx

from research_synth.core.exceptions import InferenceUnavailable

from .base import LLMClient

logger = logging.getLogger(__name__)


class OllamaLLMClient(LLMClient):
    """
    LLMClient implementation for a local Ollama instance.

    Expects an Ollama server running (by default) on http://localhost:11434.

    API reference (simplified):
    - POST /api/generate
      { "model": "...", "prompt": "...", "system": "...", "stream": false,
        "options": { "temperature": 0.2, "num_predict": 2048 } }
    - GET /api/tags
      { "models": [ { "name": "..." }, ... ] }
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        timeout_s: float = 180.0,
        health_timeout_s: float = 3.0,
        default_options: Mapping[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout_s = timeout_s
        self._health_timeout_s = health_timeout_s
        self._default_options = dict(default_options or {})
        # Injected in tests; None means the real network
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model

    def _client(self, timeout_s: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout_s, transport=self._transport)

    async def generate(
        self,
        *,
        prompt: str,
        system: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
        }
        if system:
            payload["system"] = system

        model_options = _build_model_options({**self._default_options, **(options or {})})
        if model_options:
            payload["options"] = model_options

        url = f"{self._base_url}/api/generate"

        async def post() -> Any:
            async with self._client(self._timeout_s) as client:
                res = await client.post(url, json=payload)
                res.raise_for_status()
                return res.json()

        try:
            # httpx timeouts apply per read, not to the whole exchange
            data = await asyncio.wait_for(post(), self._timeout_s)
        except asyncio.TimeoutError as exc:
            logger.error("Ollama did not answer within %gs", self._timeout_s)
            raise InferenceUnavailable(f"Ollama timed out after {self._timeout_s:g}s") from exc
        except httpx.HTTPStatusError as exc:
            logger.error("Ollama returned HTTP %s", exc.response.status_code)
            raise InferenceUnavailable(f"Ollama error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Ollama request failed: %s", exc)
            raise InferenceUnavailable(f"Ollama request failed: {exc!r}") from exc
        except ValueError as exc:
            raise InferenceUnavailable("Ollama returned a non-JSON body") from exc

        # For non-streaming, Ollama returns a single JSON with a 'response' field.
        response_text = data.get("response") if isinstance(data, dict) else None
        if response_text is None:
            return ""
        if not isinstance(response_text, str):
            response_text = str(response_text)

        return response_text.strip()

    async def list_models(self) -> list[str]:
        url = f"{self._base_url}/api/tags"

        async def get() -> Any:
            async with self._client(self._health_timeout_s) as client:
                res = await client.get(url)
                res.raise_for_status()
                return res.json()

        try:
            data = await asyncio.wait_for(get(), self._health_timeout_s)
        except asyncio.TimeoutError as exc:
            raise InferenceUnavailable(
                f"Ollama unreachable: no answer within {self._health_timeout_s:g}s"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise InferenceUnavailable(f"Ollama unreachable: {exc!r}") from exc

        models = data.get("models", []) if isinstance(data, dict) else []
        return [m["name"] for m in models if isinstance(m, dict) and "name" in m]


def _build_model_options(options: Mapping[str, Any]) -> dict[str, Any]:
    # Allow some basic knobs without being too strict.
    out: dict[str, Any] = {}

    temperature = options.get("temperature")
    if isinstance(temperature, (int, float)) and not isinstance(temperature, bool):
        out["temperature"] = float(temperature)

    num_predict = options.get("max_tokens") or options.get("num_predict")
    if isinstance(num_predict, int) and not isinstance(num_predict, bool):
        out["num_predict"] = num_predict

    top_p = options.get("top_p")
    if isinstance(top_p, (int, float)) and not isinstance(top_p, bool):
        out["top_p"] = float(top_p)

    return out
