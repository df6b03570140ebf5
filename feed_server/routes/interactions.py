"""Interaction recording and privacy clear-history endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from feedrank.models.interaction import WRITE_TYPES

from ..models import ClearHistoryResponse, InteractionRequest, InteractionResponse
from ..state import get_state
from ..utils import to_interaction

logger = logging.getLogger(__name__)

interactions_router = APIRouter()
users_router = APIRouter()


@interactions_router.post("", response_model=InteractionResponse, status_code=201)
async def record_interaction(request: InteractionRequest):
    """Append one interaction; like/dislike/save also drop the cached profile."""
    state = get_state()
    interaction = to_interaction(request)
    recorded = await state.service.record_interaction(interaction)
    if not recorded:
        raise HTTPException(status_code=503, detail="Interaction store unavailable")
    return InteractionResponse(
        recorded=True,
        invalidates_profile=interaction.type in WRITE_TYPES,
    )


@users_router.delete("/{user_id}/history", response_model=ClearHistoryResponse)
async def clear_history(user_id: str):
    """Delete every stored interaction and the cached profile for user_id."""
    state = get_state()
    try:
        removed = await state.service.clear_history(user_id)
    except Exception as e:
        logger.warning("[routes] CLEAR_HISTORY_FAILED user=%s err=%s", user_id, e)
        raise HTTPException(status_code=503, detail="Interaction store unavailable")
    return ClearHistoryResponse(user_id=user_id, removed=removed)
