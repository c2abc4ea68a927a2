from fastapi import Depends

from research_synth.core.config import Settings, get_settings
from research_synth.core.llm import LLMClient, get_llm_client
from research_synth.services.synthesizer import ResearchSynthesizer


def get_synthesizer(
    settings: Settings = Depends(get_settings),
    llm: LLMClient = Depends(get_llm_client),
) -> ResearchSynthesizer:
    """
    FastAPI dependency that wires settings and the LLM client into a
    synthesizer for the current request.
    """
    return ResearchSynthesizer(settings=settings, llm=llm)
