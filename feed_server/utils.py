"""Pure helpers: ranking config loading, request → model conversion."""

import json
from pathlib import Path
from typing import Optional

from feedrank.models.config import RankingConfig
from feedrank.models.interaction import Interaction
from feedrank.utils.scores import utc_now

from .models import InteractionRequest


def load_ranking_config(
    path: Optional[Path] = None,
    index_dimension: Optional[int] = None,
) -> RankingConfig:
    """
    RankingConfig from an optional JSON file merged over defaults.

    index_dimension (INDEX_DIMENSION) wins over the file.
    """
    raw = {}
    if path is not None:
        with open(path) as f:
            raw = json.load(f)
    if index_dimension is not None:
        raw = {**raw, "index_dimension": index_dimension}
    return RankingConfig.from_dict(raw)


def to_interaction(request: InteractionRequest) -> Interaction:
    """Build an Interaction from a request body; a missing timestamp means now."""
    return Interaction(
        user_id=request.user_id,
        item_id=request.item_id,
        type=request.type,
        timestamp=request.timestamp or utc_now(),
    )
