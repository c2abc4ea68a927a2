"""Shared fixtures: settings, a scripted LLM client and fake HTTP transports."""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

import httpx
import pytest
from fastapi.testclient import TestClient

from research_synth.api.dependencies import get_synthesizer
from research_synth.core.config import Settings, get_settings
from research_synth.core.llm import LLMClient, get_llm_client
from research_synth.main import app
from research_synth.services.synthesizer import ResearchSynthesizer

ARTICLE_HTML = """<html><head><title>Solar</title><style>body{color:red}</style>
<script>var tracking = 1;</script></head>
<body><nav>Home | About</nav><header>Site header</header>
<p>Solar capacity grew by 30% in 2023 &amp; costs fell.</p>
<aside>Related links</aside><footer>Copyright</footer></body></html>"""


class ScriptedLLMClient(LLMClient):
    """LLM client that replays a fixed reply (or error) and records prompts."""

    def __init__(
        self,
        reply: str | Callable[[str], str] = "{}",
        *,
        error: Exception | None = None,
        models_error: Exception | None = None,
    ) -> None:
        self.reply = reply
        self.error = error
        self.models_error = models_error
        self.calls: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def model_name(self) -> str:
        return "scripted-model"

    async def generate(
        self,
        *,
        prompt: str,
        system: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        self.calls.append({"prompt": prompt, "system": system, "options": dict(options or {})})
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply

    async def list_models(self) -> list[str]:
        if self.models_error is not None:
            raise self.models_error
        return [self.model_name]


def model_reply(**overrides: Any) -> str:
    report: dict[str, Any] = {
        "synthesis": "Both sources describe rapid solar growth.",
        "keyThemes": ["growth", "cost", "policy"],
        "consensus": ["Solar is growing"],
        "contradictions": ["Sources disagree on the pace"],
        "sources": [
            {"id": 0, "label": "Model label 0", "summary": "First.", "quality": "high"},
            {"id": 1, "label": "Model label 1", "summary": "Second.", "quality": "low"},
        ],
        "confidence": 0.85,
    }
    report.update(overrides)
    return json.dumps(report)


def html_transport(routes: Mapping[str, httpx.Response | Exception]) -> httpx.MockTransport:
    """MockTransport answering by URL; unknown URLs get a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        outcome = routes.get(str(request.url))
        if outcome is None:
            return httpx.Response(404, text="not found")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.MockTransport(handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(llm_provider="dummy", log_json=False)


@pytest.fixture
def llm() -> ScriptedLLMClient:
    return ScriptedLLMClient(reply=model_reply())


@pytest.fixture
def web_routes() -> dict[str, httpx.Response | Exception]:
    """Mutable URL -> response map consulted by the fake web in API tests."""
    return {}


@pytest.fixture
def client(settings, llm, web_routes):
    """Test client with settings, LLM and outbound HTTP all faked."""

    def synthesizer_override() -> ResearchSynthesizer:
        return ResearchSynthesizer(
            settings=settings,
            llm=llm,
            http_client=httpx.AsyncClient(transport=html_transport(web_routes)),
        )

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_synthesizer] = synthesizer_override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
