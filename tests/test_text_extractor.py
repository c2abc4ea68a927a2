"""Tests for HTML to plain text extraction."""

import re

import pytest

from research_synth.services.web_fetcher import MAX_SOURCE_CHARS, extract_text_from_html

from conftest import ARTICLE_HTML

TAG_PATTERN = re.compile(r"<[^>]+>")


def test_removes_noise_blocks_and_their_contents():
    text = extract_text_from_html(ARTICLE_HTML)

    assert "Solar capacity grew by 30% in 2023 & costs fell." in text
    for noise in ("tracking", "color:red", "Home | About", "Site header", "Related links", "Copyright"):
        assert noise not in text


def test_decodes_common_entities():
    html = "<p>a &amp; b &lt;c&gt; &quot;d&quot; &#39;e&#39; f&nbsp;g</p>"

    text = extract_text_from_html(html)

    assert "a & b" in text
    assert '"d"' in text
    assert "'e'" in text
    assert "f\xa0g" in text or "f g" in text


def test_entity_encoded_markup_does_not_survive_as_tags():
    text = extract_text_from_html("<p>before &lt;b&gt;bold&lt;/b&gt; after</p>")

    assert TAG_PATTERN.search(text) is None
    assert "bold" in text


def test_collapses_whitespace_runs_and_trims():
    text = extract_text_from_html("<div>\n\n  one   <span>two</span>\t\t three  </div>\n")

    assert text == "one two three"


@pytest.mark.parametrize(
    "plain",
    [
        "Plain research notes about battery chemistry.",
        "Line one\nLine two with AT&T and 5 > 3.",
        "x" * 20_000,
    ],
)
def test_idempotent_on_plain_text(plain):
    once = extract_text_from_html(plain)

    assert extract_text_from_html(once) == once


def test_output_is_capped():
    html = "<p>" + ("word " * 10_000) + "</p>"

    text = extract_text_from_html(html)

    assert len(text) <= MAX_SOURCE_CHARS


def test_malformed_markup_degrades_gracefully():
    text = extract_text_from_html("<div><p>unclosed <b>bold <script>evil()")

    assert "unclosed" in text
    assert "evil" not in text
    assert TAG_PATTERN.search(text) is None


def test_empty_input():
    assert extract_text_from_html("") == ""
