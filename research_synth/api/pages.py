"""Static documents served by the system routes: schema, skill doc, UI."""

from typing import Any

from research_synth.core.config import Settings
from research_synth.schemas.synthesis import MAX_SOURCES, MIN_CONTENT_CHARS, MIN_SOURCES


def build_schema_document(settings: Settings) -> dict[str, Any]:
    return {
        "service": settings.api_name,
        "version": settings.api_version,
        "endpoints": {
            "synthesize": {
                "method": "POST",
                "path": "/synthesize",
                "description": (
                    f"Synthesize {MIN_SOURCES}–{MAX_SOURCES} sources "
                    "into a structured research analysis"
                ),
                "request": {
                    "sources": {
                        "type": "array",
                        "required": True,
                        "minItems": MIN_SOURCES,
                        "maxItems": MAX_SOURCES,
                        "items": {
                            "type": {"type": "string", "enum": ["url", "text"]},
                            "content": {
                                "type": "string",
                                "minLength": MIN_CONTENT_CHARS,
                                "description": "URL or raw text",
                            },
                            "label": {
                                "type": "string",
                                "required": False,
                                "description": "Display name for the source",
                            },
                        },
                    },
                    "topic": {
                        "type": "string",
                        "required": False,
                        "description": "Focus question or topic",
                    },
                    "depth": {
                        "type": "string",
                        "enum": ["brief", "detailed"],
                        "default": "brief",
                    },
                },
                "response": {
                    "synthesis": "string: overall synthesis paragraphs",
                    "keyThemes": "string[]: main themes across all sources",
                    "consensus": "string[]: points where sources agree",
                    "contradictions": "string[]: points where sources disagree or contradict",
                    "sources": "array: {id, label, summary, quality: high|medium|low, url}",
                    "confidence": "number 0–1: synthesis confidence",
                    "topic": "string|null: the topic used",
                    "depth": "string: depth used",
                    "sourceCount": "number",
                    "processingTimeMs": "number",
                },
                "errors": {
                    "400": "{error}: invalid request body",
                    "413": "{error}: request body larger than 4 MB",
                    "500": "{error, raw}: model output could not be parsed",
                    "503": "{error, detail}: inference service unavailable",
                },
            },
            "health": {"method": "GET", "path": "/health"},
            "schema": {"method": "GET", "path": "/schema"},
            "skill": {"method": "GET", "path": "/skill.md"},
            "ui": {"method": "GET", "path": "/"},
        },
    }


def render_skill_doc(settings: Settings) -> str:
    base_url = f"http://localhost:{settings.port}"
    return f"""# Research Synthesizer API

## What It Does
Multi-source research synthesis. Give it {MIN_SOURCES}–{MAX_SOURCES} URLs or \
text snippets and it returns a structured synthesis: key themes, consensus points,
contradictions, per-source summaries and an overall analysis, all via local Ollama
inference.

## Base URL
{base_url}

## Core Endpoint

### POST /synthesize

**Request:**
```json
{{
  "sources": [
    {{ "type": "url", "content": "https://example.com/article" }},
    {{ "type": "text", "content": "Raw text content...", "label": "Interview notes" }}
  ],
  "topic": "What are the main arguments for X?",
  "depth": "brief"
}}
```

Fields:
- `sources` (required): {MIN_SOURCES}–{MAX_SOURCES} items. Each has `type` \
("url" | "text"), `content` (at least 10 characters) and an optional `label`.
- `topic` (optional): focus question or research topic.
- `depth` (optional): "brief" (default) | "detailed". Detailed is deeper and slower.

**Response:**
```json
{{
  "synthesis": "Overall synthesis paragraph...",
  "keyThemes": ["theme1", "theme2"],
  "consensus": ["Point all sources agree on"],
  "contradictions": ["Source A says X but source B says Y"],
  "sources": [
    {{ "id": 0, "label": "Source 1", "summary": "...", "quality": "high", "url": null }}
  ],
  "confidence": 0.82,
  "topic": "What are...",
  "depth": "brief",
  "sourceCount": 2,
  "processingTimeMs": 4200
}}
```

**Errors:** `400 {{error}}` bad input, `413 {{error}}` body over 4 MB, `503 {{error, detail}}` model service down
(safe to retry), `500 {{error, raw}}` model reply was not parseable JSON.

## Other Endpoints
- `GET /health`: status and model availability
- `GET /schema`: machine-readable contract
- `GET /`: browser UI

## Notes
- Uses local Ollama ({settings.llm_model})
- URL sources are fetched and text-extracted automatically; a source that fails
  to fetch is still reported, usually with quality "low"
- Each source is capped at {settings.max_source_chars:,} characters
- Quality scores: high / medium / low based on content density
- Processing time scales with source count and depth
"""


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Research Synthesizer</title>
  <style>
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body { font-family: system-ui, sans-serif; background: #0f1117; color: #e1e4e8; padding: 2rem; }
    h1 { font-size: 1.7rem; color: #58a6ff; margin-bottom: 0.3rem; }
    .subtitle { color: #8b949e; margin-bottom: 1.5rem; }
    .card { background: #161b22; border: 1px solid #30363d; border-radius: 8px; padding: 1.2rem; margin-bottom: 1.2rem; }
    label { display: block; font-size: 0.8rem; color: #8b949e; text-transform: uppercase; margin-bottom: 0.4rem; }
    input, textarea, select { width: 100%; background: #0d1117; border: 1px solid #30363d; border-radius: 6px; color: #e1e4e8; padding: 0.5rem; font: inherit; }
    .row { display: flex; gap: 0.5rem; margin-bottom: 0.6rem; }
    .row select { width: 90px; }
    .row textarea { flex: 1; min-height: 56px; }
    button { background: #21262d; border: 1px solid #30363d; color: #58a6ff; border-radius: 6px; padding: 0.45rem 0.9rem; cursor: pointer; }
    #go { background: #238636; color: #fff; }
    #go:disabled { opacity: 0.5; }
    .title { color: #58a6ff; font-size: 0.8rem; text-transform: uppercase; margin: 1rem 0 0.4rem; }
    .tag { display: inline-block; border: 1px solid #30363d; border-radius: 12px; padding: 0.15rem 0.6rem; margin: 0.15rem; color: #79c0ff; }
    .src { border: 1px solid #21262d; border-radius: 6px; padding: 0.6rem; margin-bottom: 0.5rem; }
    .q-high { color: #56d364; } .q-medium { color: #e3b341; } .q-low { color: #f85149; }
    pre { white-space: pre-wrap; font-size: 0.8rem; color: #8b949e; max-height: 50vh; overflow-y: auto; }
    .error { color: #f85149; }
  </style>
</head>
<body>
  <h1>Research Synthesizer</h1>
  <p class="subtitle">Multi-source synthesis with a local model</p>

  <div class="card">
    <label for="topic">Topic / focus question (optional)</label>
    <input id="topic" type="text" placeholder="e.g. What are the main arguments for renewable energy adoption?">
  </div>

  <div class="card">
    <label>Sources (2–8 URLs or text)</label>
    <div id="sources"></div>
    <button type="button" id="add">+ Add source</button>
    <select id="depth" style="width:120px">
      <option value="brief">Brief</option>
      <option value="detailed">Detailed</option>
    </select>
    <button type="button" id="go">Synthesize</button>
    <span id="status"></span>
  </div>

  <div class="card" id="resultCard" hidden>
    <div id="rich"></div>
    <div class="title">Raw JSON</div>
    <pre id="raw"></pre>
  </div>

  <script>
    const MAX_SOURCES = 8, MIN_SOURCES = 2;

    function esc(s) {
      return String(s ?? '').replace(/&/g, '&amp;').replace(/</g, '&lt;')
        .replace(/>/g, '&gt;').replace(/"/g, '&quot;');
    }

    function addRow() {
      const rows = document.querySelectorAll('#sources .row');
      if (rows.length >= MAX_SOURCES) return;
      const row = document.createElement('div');
      row.className = 'row';
      row.innerHTML = '<select><option value="url">URL</option><option value="text">Text</option></select>'
        + '<textarea placeholder="https://example.com or paste text..."></textarea>'
        + '<button type="button">&#x2715;</button>';
      row.querySelector('button').addEventListener('click', () => {
        if (document.querySelectorAll('#sources .row').length > MIN_SOURCES) row.remove();
      });
      document.getElementById('sources').appendChild(row);
    }

    function list(title, items) {
      if (!items || !items.length) return '';
      return '<div class="title">' + title + '</div><ul style="padding-left:1.4rem">'
        + items.map(x => '<li>' + esc(x) + '</li>').join('') + '</ul>';
    }

    function render(data) {
      let html = '';
      if (data.synthesis) html += '<div class="title">Synthesis</div><p>' + esc(data.synthesis) + '</p>';
      if (data.keyThemes && data.keyThemes.length) {
        html += '<div class="title">Key themes</div>'
          + data.keyThemes.map(x => '<span class="tag">' + esc(x) + '</span>').join('');
      }
      html += list('Consensus', data.consensus);
      html += list('Contradictions', data.contradictions);
      if (data.sources && data.sources.length) {
        html += '<div class="title">Sources</div>' + data.sources.map(s =>
          '<div class="src"><strong>' + esc(s.label) + '</strong> <span class="q-' + esc(s.quality) + '">'
          + esc(s.quality) + '</span><p>' + esc(s.summary) + '</p></div>').join('');
      }
      html += '<p style="color:#484f58;margin-top:1rem">Confidence: '
        + Math.round((data.confidence || 0) * 100) + '% · ' + data.sourceCount + ' sources · '
        + data.processingTimeMs + ' ms</p>';
      return html;
    }

    async function synthesize() {
      const sources = [...document.querySelectorAll('#sources .row')].map(r => ({
        type: r.querySelector('select').value,
        content: r.querySelector('textarea').value.trim(),
      })).filter(s => s.content.length > 0);

      const status = document.getElementById('status');
      if (sources.length < MIN_SOURCES) { status.textContent = 'Add at least 2 sources.'; return; }

      const go = document.getElementById('go');
      go.disabled = true;
      status.textContent = 'Processing…';

      try {
        const topic = document.getElementById('topic').value.trim();
        const res = await fetch('/synthesize', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ sources, topic: topic || undefined, depth: document.getElementById('depth').value }),
        });
        const data = await res.json();
        document.getElementById('raw').textContent = JSON.stringify(data, null, 2);
        document.getElementById('rich').innerHTML = res.ok
          ? render(data)
          : '<p class="error">' + esc(data.error) + (data.detail ? ': ' + esc(data.detail) : '') + '</p>';
        document.getElementById('resultCard').hidden = false;
        status.textContent = '';
      } catch (e) {
        status.textContent = 'Error: ' + e.message;
      } finally {
        go.disabled = false;
      }
    }

    document.getElementById('add').addEventListener('click', addRow);
    document.getElementById('go').addEventListener('click', synthesize);
    addRow(); addRow();
  </script>
</body>
</html>
"""
