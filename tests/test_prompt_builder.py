"""Tests for synthesis prompt assembly."""

from research_synth.services.prompt_builder import build_synthesis_prompt
from research_synth.services.source_fetcher import FetchedSource

SOURCES = [
    FetchedSource(id=0, label="Source 1 (https://example.com/a)", text="Alpha body text.", url="https://example.com/a"),
    FetchedSource(id=1, label="Source 2", text="", url="https://example.com/b", error="HTTP 500 fetching https://example.com/b"),
    FetchedSource(id=2, label="Field notes", text="Gamma body text."),
]


def test_topic_line_only_when_topic_given():
    with_topic = build_synthesis_prompt(SOURCES, topic="Is solar cheaper than coal?")
    without_topic = build_synthesis_prompt(SOURCES, topic=None)

    assert with_topic.startswith("Research Topic / Focus Question: Is solar cheaper than coal?\n\n")
    assert "Research Topic" not in without_topic


def test_depth_guidance():
    brief = build_synthesis_prompt(SOURCES, depth="brief")
    detailed = build_synthesis_prompt(SOURCES, depth="detailed")

    assert "2–3 paragraphs" in brief
    assert "3–5 key themes" in brief
    assert "3–5 paragraphs" in detailed
    assert "5–8 key themes" in detailed
    assert "multiple consensus and contradiction points" in detailed


def test_quality_rubric_present():
    prompt = build_synthesis_prompt(SOURCES)

    assert '"high": detailed, specific, well-sourced content' in prompt
    assert '"medium": general but relevant content' in prompt
    assert '"low": thin, vague, or retrieval-failed content' in prompt


def test_sources_are_numbered_labeled_and_ordered():
    prompt = build_synthesis_prompt(SOURCES)

    first = prompt.index("--- SOURCE 1: Source 1 (https://example.com/a) ---\nAlpha body text.")
    second = prompt.index("--- SOURCE 2: Source 2 ---\n[FETCH ERROR: HTTP 500 fetching https://example.com/b]")
    third = prompt.index("--- SOURCE 3: Field notes ---\nGamma body text.")
    assert first < second < third
    assert "You are synthesizing 3 research sources" in prompt


def test_output_shape_is_spelled_out():
    prompt = build_synthesis_prompt(SOURCES)

    assert "Return ONLY a JSON object" in prompt
    for key in ('"synthesis"', '"keyThemes"', '"consensus"', '"contradictions"', '"sources"', '"confidence"', '"quality"'):
        assert key in prompt


def test_combined_source_budget_is_shared_evenly():
    big = [
        FetchedSource(id=i, label=f"Source {i + 1}", text=chr(ord("a") + i) * 12_000)
        for i in range(4)
    ]

    prompt = build_synthesis_prompt(big, max_total_chars=20_000)

    for i in range(4):
        letter = chr(ord("a") + i)
        assert letter * 4_000 in prompt
        assert letter * 5_001 not in prompt
    assert prompt.count("...[truncated]") == 4


def test_under_budget_sources_are_untouched():
    prompt = build_synthesis_prompt(SOURCES, max_total_chars=1_000)

    assert "[truncated]" not in prompt
