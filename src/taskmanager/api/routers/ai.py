from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..generation import GenerationError, InvalidApiKeyError, TextGenerator, get_generator
from ..schemas import GenerateRequest, GenerateResponse
from ..settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
)


def _error(status_code: int, error: str, message: str = "") -> JSONResponse:
    content = {"error": error, "success": False}
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


# PUBLIC_INTERFACE
@router.post(
    "/generate",
    response_model=GenerateResponse,
    summary="Generate Text",
    description=(
        "Forward a prompt and the caller's API key to the generative model and return the text. "
        "Performs no retries; callers decide whether to retry."
    ),
    responses={
        200: {"description": "Text generated"},
        400: {"description": "API key missing"},
        401: {"description": "API key rejected by the AI service"},
        500: {"description": "AI service failure; message carries the upstream error"},
        503: {"description": "AI service temporarily unavailable (model loading/overloaded)"},
    },
)
async def generate(payload: GenerateRequest, generator: TextGenerator = Depends(get_generator)):
    """
    AI proxy endpoint.

    Returns:
        {"generatedText": str, "success": true} on success, otherwise
        {"error": str, "message": str, "success": false}.
    """
    api_key = (payload.api_key or "").strip()
    if not api_key:
        return _error(status.HTTP_400_BAD_REQUEST, "API key is required")

    max_tokens = payload.max_tokens or get_settings().ai_default_max_tokens
    try:
        text = await generator.generate(payload.prompt, api_key, max_tokens)
    except InvalidApiKeyError as exc:
        logger.warning("AI proxy rejected key: %s", exc.message)
        return _error(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid Gemini API key",
            "Please check your API key at https://aistudio.google.com/app/apikey",
        )
    except GenerationError as exc:
        logger.error("AI proxy error: %s", exc.message)
        if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "AI service unavailable", exc.message)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate AI response", exc.message)

    return GenerateResponse(generated_text=text)
