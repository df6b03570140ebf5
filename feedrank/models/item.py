"""
Item model — typed representation of a rankable item (article or short video).

Used by the profile builder, candidate index, and ranking stages instead of raw
store documents. Built from corpus dicts via Item.model_validate(d).
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Embedding(BaseModel):
    """A fixed-dimension embedding vector."""

    model_config = ConfigDict(frozen=True)

    dimension: int
    values: List[float]

    @model_validator(mode="before")
    @classmethod
    def _from_list(cls, data: Any) -> Any:
        # Corpus documents usually store the bare vector
        if isinstance(data, (list, tuple)):
            return {"dimension": len(data), "values": list(data)}
        if isinstance(data, dict) and "dimension" not in data and "values" in data:
            return {**data, "dimension": len(data["values"])}
        return data

    @model_validator(mode="after")
    def _dimension_matches(self):
        if len(self.values) != self.dimension:
            raise ValueError(
                f"Embedding declares dimension {self.dimension} but has {len(self.values)} values"
            )
        return self


class EngagementCounters(BaseModel):
    """Engagement counters maintained by external writers; read-only here."""

    views: int = 0
    likes: int = 0
    dislikes: int = 0
    saves: int = 0
    completion_rate: float = 0.0


class Item(BaseModel):
    """
    Item payload used across the ranking stages.

    embedding is the full model output; reduced_embedding is an optional
    lower-dimension copy (e.g. PCA) produced by the ingestion pipeline.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    item_type: str = "article"
    embedding: Optional[Embedding] = None
    reduced_embedding: Optional[Embedding] = None
    source: str = ""
    categories: List[str] = Field(default_factory=list)
    published_at: datetime
    counters: EngagementCounters = Field(default_factory=EngagementCounters)

    @field_validator("published_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("categories")
    @classmethod
    def _ordered_unique(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(c for c in value if c))


def ensure_items(items: List[Union[Dict[str, Any], "Item"]]) -> List["Item"]:
    """Convert list of dicts or Items to list of Item models for the pipeline."""
    return [Item.model_validate(i) if isinstance(i, dict) else i for i in items]
