from fastapi import APIRouter

from research_synth.api.endpoints import synthesize, system

api_router = APIRouter()

api_router.include_router(synthesize.router)

# Health, docs and the browser UI (unversioned)
api_router.include_router(system.router)
