"""
AI Proxy Endpoint

FastAPI router for /api/gemini. Holds no credential itself: the model
backend is injected, so the key never leaves the server process.
Pure transport: JSON in, handler, JSON out, CORS headers on every response.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inference import ModelBackend
from infra import get_model_backend

from .handler import handle_question

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["AI Proxy"])

GEMINI_PATH = "/api/gemini"
METHOD_NOT_ALLOWED = "Method not allowed"

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


def _json(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=CORS_HEADERS)


# ============================================================================
# PRE-FLIGHT
# ============================================================================

@router.options("/gemini")
async def gemini_preflight() -> Response:
    """Answer CORS pre-flight without touching the backend."""
    return Response(status_code=200, headers=CORS_HEADERS)


# ============================================================================
# QUESTION ANSWERING
# ============================================================================

@router.post("/gemini")
async def gemini_proxy(
    request: Request,
    backend: ModelBackend = Depends(get_model_backend),
) -> JSONResponse:
    """
    Answer a farmer's question through the upstream model.

    Expected payload:
    {
        "question": "How to increase wheat yield?",
        "imageBase64": "<optional base64 JPEG>"
    }

    Returns:
        200 {"success": true, "answer": "...", "metadata": {"model", "timestamp"}}
        400 {"error": "Question is required"}
        500 configuration / no-content / internal errors
        upstream status forwarded as {"error", "status", "kind"}
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Request body is not valid JSON")
        payload = None

    # backend.generate() blocks on requests; keep it off the event loop
    result = await run_in_threadpool(handle_question, payload, backend)
    return _json(result.status_code, result.body)


# ============================================================================
# OTHER METHODS
# ============================================================================

async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    App-level HTTPException handler.

    Any method other than OPTIONS/POST on /api/gemini gets the JSON error
    body and CORS headers; every other HTTP error keeps FastAPI's default.
    """
    if exc.status_code == 405 and request.url.path == GEMINI_PATH:
        return _json(405, {"error": METHOD_NOT_ALLOWED})
    return await http_exception_handler(request, exc)
