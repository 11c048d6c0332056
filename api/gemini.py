"""
Gemini Dispatch Endpoint

POST /api/gemini  {"prompt": "..."}

Keeps the API keys on the server. This module is I/O only: it validates the
body, runs the dispatcher and maps its single result onto HTTP.

  Ok{text}                 -> 200 {"text": ...}
  AllLimited{n}            -> 429 {"error": ..., "retryDelay": n} + Retry-After: n
  Error{message}           -> 500 {"error": message}
  bad / missing prompt     -> 400 {"error": ...}
  any other method         -> 405 {"error": "Method not allowed"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dispatcher import AllLimited, Dispatcher, DispatchResult, Error, Ok

from .schemas import ErrorResponse, GenerateRequest, GenerateResponse, RateLimitedResponse

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["gemini"])

INVALID_PROMPT_MESSAGE = 'Missing or invalid "prompt".'


def get_dispatcher(request: Request) -> Dispatcher:
    """Dispatcher attached at startup, or the process-wide bootstrap one."""
    dispatcher: Optional[Dispatcher] = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        from infra import bootstrap_infrastructure

        dispatcher = bootstrap_infrastructure().get_dispatcher()
        request.app.state.dispatcher = dispatcher
    return dispatcher


def render_result(result: DispatchResult) -> JSONResponse:
    """Map a DispatchResult onto status code, headers and body."""
    if isinstance(result, Ok):
        return JSONResponse(
            content=GenerateResponse(text=result.text).model_dump(),
            status_code=200,
        )

    if isinstance(result, AllLimited):
        delay = result.retry_after_seconds
        return JSONResponse(
            content=RateLimitedResponse(retryDelay=delay).model_dump(),
            status_code=429,
            headers={"Retry-After": str(delay)},
        )

    if isinstance(result, Error):
        return JSONResponse(
            content=ErrorResponse(error=result.message).model_dump(),
            status_code=500,
        )

    raise TypeError(f"Unknown dispatch result: {result!r}")


@router.post("/gemini")
async def generate(request: Request):
    """
    Generate text for a prompt, failing over across the configured API keys.

    Expected payload:
    {
        "prompt": "..."
    }
    """
    try:
        try:
            body = await request.json()
            payload = GenerateRequest.model_validate(body)
        except (ValueError, ValidationError):
            # ValueError covers empty / non-JSON bodies
            logger.info("Rejected /api/gemini request: missing or invalid prompt")
            return JSONResponse(
                content=ErrorResponse(error=INVALID_PROMPT_MESSAGE).model_dump(),
                status_code=400,
            )

        dispatcher = get_dispatcher(request)

        # Credential attempts block on the network; keep them off the event loop
        result = await run_in_threadpool(dispatcher.dispatch, payload.prompt)
        return render_result(result)

    except Exception as e:
        logger.error(f"Gemini handler fatal error: {type(e).__name__}", exc_info=True)
        return JSONResponse(
            content=ErrorResponse(error=str(e) or "Internal error").model_dump(),
            status_code=500,
        )


@router.api_route(
    "/gemini",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def method_not_allowed():
    """Only POST is accepted."""
    return JSONResponse(
        content=ErrorResponse(error="Method not allowed").model_dump(),
        status_code=405,
        headers={"Allow": "POST"},
    )
