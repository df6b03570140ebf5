"""Request/response Pydantic models for the HTTP routes."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from feedrank.models.interaction import InteractionType


class InteractionRequest(BaseModel):
    user_id: str = Field(min_length=1)
    item_id: str = Field(min_length=1)
    type: InteractionType
    timestamp: Optional[datetime] = None


class InteractionResponse(BaseModel):
    recorded: bool
    invalidates_profile: bool


class ClearHistoryResponse(BaseModel):
    user_id: str
    removed: int


class HealthResponse(BaseModel):
    status: str
    indexes: Dict[str, int]
    cache_backend: str
    index_backend: str
    corpus_items: int
