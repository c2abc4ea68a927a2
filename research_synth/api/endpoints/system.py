import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from research_synth.api.pages import INDEX_HTML, build_schema_document, render_skill_doc
from research_synth.core.config import Settings, get_settings
from research_synth.core.exceptions import InferenceUnavailable
from research_synth.core.llm import LLMClient, get_llm_client
from research_synth.schemas.synthesis import MAX_SOURCES, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    llm: LLMClient = Depends(get_llm_client),
) -> HealthResponse:
    """
    Service health plus a check of the inference service's model list.
    """
    try:
        await llm.list_models()
        connected = True
    except InferenceUnavailable as exc:
        logger.warning("Health check failed: %s", exc)
        connected = False

    return HealthResponse(
        status="ok" if connected else "degraded",
        service=settings.service_name,
        version=settings.api_version,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        model=llm.model_name,
        ollama="connected" if connected else "unreachable",
        max_sources=MAX_SOURCES,
    )


@router.get("/schema")
async def get_schema(settings: Settings = Depends(get_settings)) -> dict:
    return build_schema_document(settings)


@router.get("/skill.md", response_class=PlainTextResponse)
async def get_skill_doc(settings: Settings = Depends(get_settings)) -> str:
    return render_skill_doc(settings)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> str:
    return INDEX_HTML
