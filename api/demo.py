"""Demo endpoint that calls an external HTTP service."""

from urllib.parse import urlparse
import requests
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from core.config import settings
from core.logging import log

router = APIRouter(tags=["Default"])


class DemoResponse(BaseModel):
    """Demo call response model."""
    message: str
    data: int


class DemoErrorResponse(BaseModel):
    """Demo call failure model."""
    error: str


@router.get(
    "/api",
    response_model=DemoResponse,
    summary="Call a demo external API (httpbin.org)",
    responses={500: {"model": DemoErrorResponse, "description": "External API call failed"}},
)
def call_demo_api():
    """Calls the configured demo service and reports its HTTP status.
    
    Runs in the worker thread pool since ``requests`` blocks.
    """
    url = settings.DEMO_API_URL
    try:
        resp = requests.get(url, timeout=settings.DEMO_API_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        log.error(f"Error calling external API: {str(e)}")
        return JSONResponse(
            status_code=500,
            content=DemoErrorResponse(error="Failed to call external API").model_dump(),
        )
    
    return DemoResponse(
        message=f"Demo API called ({urlparse(url).netloc or url})",
        data=resp.status_code,
    )
