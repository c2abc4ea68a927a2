from fastapi import APIRouter, Depends, status

from research_synth.api.dependencies import get_synthesizer
from research_synth.schemas.synthesis import ErrorResponse, SynthesisResult, SynthesizeRequest
from research_synth.services.synthesizer import ResearchSynthesizer

router = APIRouter(tags=["synthesis"])


@router.post(
    "/synthesize",
    response_model=SynthesisResult,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body"},
        413: {"model": ErrorResponse, "description": "Request body too large"},
        500: {"model": ErrorResponse, "description": "Model output could not be parsed"},
        503: {"model": ErrorResponse, "description": "Inference service unavailable"},
    },
)
async def synthesize(
    payload: SynthesizeRequest,
    synthesizer: ResearchSynthesizer = Depends(get_synthesizer),
) -> SynthesisResult:
    """
    Synthesize 2–8 sources (URLs or raw text) into a structured analysis.
    """
    return await synthesizer.synthesize(payload)
