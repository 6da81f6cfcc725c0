from fastapi import APIRouter

from . import hydraulics

api_router = APIRouter()
api_router.include_router(hydraulics.router, prefix="/hydraulics", tags=["hydraulics"])
