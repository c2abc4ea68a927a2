from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from research_synth.core.config import Settings
from research_synth.core.llm import LLMClient, system_prompt_for
from research_synth.schemas.synthesis import SourceSummary, SynthesisResult, SynthesizeRequest
from research_synth.services.json_recovery import recover_json_object
from research_synth.services.prompt_builder import build_synthesis_prompt
from research_synth.services.source_fetcher import FetchedSource, fetch_sources

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.7
QUALITIES = ("high", "medium", "low")


@dataclass(frozen=True)
class ResearchSynthesizer:
    """
    Drives one /synthesize request: fetch, prompt, infer, recover, normalize.

    Validation happens before this object is involved. InferenceUnavailable
    and UnparseableResponse propagate to the caller; per-source fetch
    failures never do.
    """

    settings: Settings
    llm: LLMClient
    http_client: httpx.AsyncClient | None = None

    async def synthesize(self, request: SynthesizeRequest) -> SynthesisResult:
        started = time.perf_counter()
        source_count = len(request.sources)

        logger.info("Fetching %d sources", source_count, extra={"source_count": source_count})
        fetched = await fetch_sources(
            request.sources,
            settings=self.settings,
            client=self.http_client,
        )

        failed = sum(1 for s in fetched if s.failed)
        if failed:
            logger.warning("%d of %d sources failed to fetch", failed, source_count)

        prompt = build_synthesis_prompt(
            fetched,
            topic=request.topic,
            depth=request.depth,
            max_total_chars=self.settings.max_prompt_source_chars,
        )

        logger.info(
            "Requesting synthesis from %s:%s (%d prompt chars)",
            self.llm.provider_name,
            self.llm.model_name,
            len(prompt),
        )
        raw = await self.llm.generate(
            prompt=prompt,
            system=system_prompt_for(expect_json=True),
            options={
                "temperature": self.settings.llm_temperature,
                "num_predict": self.settings.llm_num_predict,
            },
        )

        parsed = recover_json_object(raw)

        result = normalize_result(
            parsed,
            fetched,
            topic=request.topic,
            depth=request.depth,
        )
        result.processing_time_ms = int((time.perf_counter() - started) * 1000)

        logger.info("Synthesis completed in %d ms", result.processing_time_ms)
        return result


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []

    out: list[str] = []
    for item in value:
        if isinstance(item, str):
            if item.strip():
                out.append(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            out.append(str(item))
    return out


def _as_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE

    try:
        number = float(value)
    except OverflowError:
        # JSON integers are unbounded
        number = math.inf if value > 0 else -math.inf

    if math.isnan(number):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, number))


def _match_model_sources(raw_sources: Any, count: int) -> list[dict[str, Any]]:
    """
    Line the model's per-source entries up with our fetched sources.

    An entry with an in-range integer id claims that slot; remaining entries
    fill the still-empty slots by position.
    """
    slots: list[dict[str, Any] | None] = [None] * count
    if not isinstance(raw_sources, list):
        return [{} for _ in range(count)]

    entries = [e for e in raw_sources if isinstance(e, dict)]
    unplaced: list[tuple[int, dict[str, Any]]] = []

    for position, entry in enumerate(entries):
        entry_id = entry.get("id")
        if (
            isinstance(entry_id, int)
            and not isinstance(entry_id, bool)
            and 0 <= entry_id < count
            and slots[entry_id] is None
        ):
            slots[entry_id] = entry
        else:
            unplaced.append((position, entry))

    for position, entry in unplaced:
        if position < count and slots[position] is None:
            slots[position] = entry

    return [slot or {} for slot in slots]


def _summarize_source(entry: dict[str, Any], source: FetchedSource) -> SourceSummary:
    quality = entry.get("quality")
    if quality not in QUALITIES:
        quality = "low" if source.failed else "medium"

    label = entry.get("label")
    url = entry.get("url")

    return SourceSummary(
        id=source.id,
        label=label if isinstance(label, str) and label.strip() else source.label,
        summary=_as_text(entry.get("summary")),
        quality=quality,
        url=url if isinstance(url, str) and url.strip() else source.url,
    )


def normalize_result(
    parsed: dict[str, Any],
    fetched: Sequence[FetchedSource],
    *,
    topic: str | None,
    depth: str,
) -> SynthesisResult:
    """
    Merge the recovered model JSON with fetch metadata into a SynthesisResult.

    The model output is untrusted: every field falls back to a default, and
    the sources list always has one entry per fetched source in id order.
    """
    entries = _match_model_sources(parsed.get("sources"), len(fetched))

    return SynthesisResult(
        synthesis=_as_text(parsed.get("synthesis")),
        key_themes=_as_text_list(parsed.get("keyThemes")),
        consensus=_as_text_list(parsed.get("consensus")),
        contradictions=_as_text_list(parsed.get("contradictions")),
        sources=[_summarize_source(entry, source) for entry, source in zip(entries, fetched)],
        confidence=_as_confidence(parsed.get("confidence")),
        topic=topic,
        depth=depth,
        source_count=len(fetched),
    )
