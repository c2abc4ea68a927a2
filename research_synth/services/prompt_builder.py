from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from research_synth.services.source_fetcher import FetchedSource

DEFAULT_MAX_TOTAL_CHARS: Final[int] = 64_000

DEPTH_GUIDANCE: Final[dict[str, str]] = {
    "brief": "Be concise. Synthesis should be 2–3 paragraphs. List 3–5 key themes.",
    "detailed": (
        "Provide deep analysis. Synthesis should be 3–5 paragraphs. "
        "List 5–8 key themes, multiple consensus and contradiction points."
    ),
}

QUALITY_RUBRIC: Final[str] = """Evaluate each source's quality as:
- "high": detailed, specific, well-sourced content
- "medium": general but relevant content
- "low": thin, vague, or retrieval-failed content"""

OUTPUT_SHAPE: Final[str] = """{
  "synthesis": "Overall synthesis text covering the main findings across all sources...",
  "keyThemes": ["theme 1", "theme 2", "theme 3"],
  "consensus": ["Point sources generally agree on", "Another area of agreement"],
  "contradictions": ["Source A says X but Source B says Y", "..."],
  "sources": [
    { "id": 0, "label": "Source 1 label", "summary": "1–2 sentence summary", "quality": "high" },
    { "id": 1, "label": "Source 2 label", "summary": "1–2 sentence summary", "quality": "medium" }
  ],
  "confidence": 0.80
}"""


def _compact(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max(0, max_chars - 15)].rstrip() + " ...[truncated]"


def _source_texts(sources: Sequence[FetchedSource], max_total_chars: int) -> list[str]:
    texts = [s.text for s in sources]
    if not texts or sum(len(t) for t in texts) <= max_total_chars:
        return texts

    # Over budget: every source gets an equal share
    share = max_total_chars // len(texts)
    return [_compact(t, share) for t in texts]


def format_source_block(position: int, source: FetchedSource, text: str) -> str:
    body = text or f"[FETCH ERROR: {source.error or 'no content'}]"
    return f"--- SOURCE {position}: {source.label} ---\n{body}\n"


def build_synthesis_prompt(
    sources: Sequence[FetchedSource],
    *,
    topic: str | None = None,
    depth: str = "brief",
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS,
) -> str:
    """
    Assemble the single instruction prompt sent to the model.

    Sources are embedded in order under numbered delimiters; failed fetches
    appear as a FETCH ERROR marker so the model can grade them "low".
    """
    topic_line = f"Research Topic / Focus Question: {topic}\n\n" if topic else ""
    depth_instructions = DEPTH_GUIDANCE.get(depth, DEPTH_GUIDANCE["brief"])

    texts = _source_texts(sources, max_total_chars)
    source_docs = "\n".join(
        format_source_block(idx, source, text)
        for idx, (source, text) in enumerate(zip(sources, texts), start=1)
    )

    return f"""{topic_line}You are synthesizing {len(sources)} research sources into a structured analysis.

{depth_instructions}

{QUALITY_RUBRIC}

SOURCES:
{source_docs}

Return ONLY a JSON object with this exact structure, with no text before or after it:
{OUTPUT_SHAPE}"""
