"""
Health check endpoints.
"""
from fastapi import APIRouter
from donor_reports.schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")
