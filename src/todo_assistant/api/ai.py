"""AI provider API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from todo_assistant.factory import get_provider_manager
from todo_assistant.providers.base import ProviderError, UnsupportedOperationError
from todo_assistant.providers.manager import ProviderManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai")

ManagerDep = Annotated[ProviderManager, Depends(get_provider_manager)]


class ProviderInfoResponse(BaseModel):
    """API response model for provider info."""

    name: str
    available: bool
    models: list[str]


class SwitchProviderRequest(BaseModel):
    """Request model for switching the active provider."""

    name: str


class ChatMessage(BaseModel):
    """One message of a completion request."""

    role: str
    content: str


class CompleteRequest(BaseModel):
    """Request model for a raw completion."""

    messages: list[ChatMessage] = Field(min_length=1)
    provider: str | None = None
    model: str | None = None
    temperature: float | None = None


class CompleteResponse(BaseModel):
    """API response model for a raw completion."""

    content: str
    usage: dict[str, int]
    provider: str
    model: str


@router.get("/provider", response_model=ProviderInfoResponse)
async def get_provider(manager: ManagerDep) -> ProviderInfoResponse:
    """Describe the active provider."""
    info = manager.get_provider_info()
    return ProviderInfoResponse(name=info.name, available=info.available, models=info.models)


@router.get("/providers", response_model=list[ProviderInfoResponse])
async def list_providers(manager: ManagerDep) -> list[ProviderInfoResponse]:
    """List available providers."""
    return [
        ProviderInfoResponse(name=info.name, available=info.available, models=info.models)
        for info in manager.get_available_providers()
    ]


@router.post("/provider", response_model=ProviderInfoResponse)
async def switch_provider(
    request: SwitchProviderRequest, manager: ManagerDep
) -> ProviderInfoResponse:
    """Switch the active provider; unknown names select the rule-based provider."""
    info = manager.switch_provider(request.name)
    return ProviderInfoResponse(name=info.name, available=info.available, models=info.models)


@router.post("/complete", response_model=CompleteResponse)
async def complete(request: CompleteRequest, manager: ManagerDep) -> CompleteResponse:
    """Run a raw chat completion (no fallback).

    Raises:
        HTTPException: 400 if the provider cannot complete, 502 if the provider call fails
    """
    try:
        result = await manager.complete(
            [m.model_dump() for m in request.messages],
            provider=request.provider,
            model=request.model,
            temperature=request.temperature,
        )
    except UnsupportedOperationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ProviderError as e:
        logger.error(f"Completion failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    return CompleteResponse(
        content=result.content, usage=result.usage, provider=result.provider, model=result.model
    )
