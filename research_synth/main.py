import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from research_synth.api.router import api_router
from research_synth.core.config import get_settings
from research_synth.core.exceptions import InferenceUnavailable, UnparseableResponse
from research_synth.core.logging import setup_logging
from research_synth.middleware.body_limit import BodySizeLimitMiddleware
from research_synth.middleware.request_logging import RequestLoggingMiddleware
from research_synth.services.validation import describe_request_errors

settings = get_settings()

setup_logging(level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_name,
    version=settings.api_version,
)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

# CORS: the API is meant to be called by agents and browsers from anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = describe_request_errors(exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(InferenceUnavailable)
async def inference_unavailable_handler(
    request: Request, exc: InferenceUnavailable
) -> JSONResponse:
    logger.error("Inference unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "LLM unavailable", "detail": str(exc)},
    )


@app.exception_handler(UnparseableResponse)
async def unparseable_response_handler(
    request: Request, exc: UnparseableResponse
) -> JSONResponse:
    logger.warning("Unparseable model response (%d chars kept)", len(exc.raw))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Failed to parse LLM response", "raw": exc.raw},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    logger.info(
        "Research synthesizer on http://%s:%d, model %s via %s",
        settings.host,
        settings.port,
        settings.llm_model,
        settings.ollama_base_url,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
