"""Multi-model chat API routes (placeholders).

Provides:
    GET  /chat/models         — Providers and their default models.
    POST /chat/conversations  — Allocate a conversation id (not persisted).
    POST /chat                — Echo the prompt and the selected models.
"""

import logging
import uuid

from fastapi import APIRouter, Request

from ai_tools.exceptions import ValidationError
from ai_tools.services.providers import DEFAULT_MODELS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/models", summary="List available models")
async def list_models():
    return {
        "models": [
            {"provider": provider, "model": model} for provider, model in DEFAULT_MODELS.items()
        ]
    }


@router.post("/conversations", summary="Create a conversation")
async def create_conversation():
    return {"conversationId": uuid.uuid4().hex}


@router.post("", summary="Multi-model chat")
async def chat(request: Request):
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError(
            "Invalid JSON", errors=[{"field": "body", "reason": "body is not valid JSON"}]
        ) from exc
    if not isinstance(body, dict):
        raise ValidationError(
            "Invalid JSON", errors=[{"field": "body", "reason": "expected a JSON object"}]
        )

    return {
        "receivedPrompt": body.get("prompt"),
        "selectedModels": body.get("models") or [],
    }
