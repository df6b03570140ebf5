"""Feed endpoint: one page of ranked items plus the continuation cursor."""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from feedrank.models.feed import FeedResult, FeedStatus, FeedStrategy

from ..state import get_state

router = APIRouter()


@router.get("", response_model=FeedResult)
async def get_feed(
    user_id: Optional[str] = Query(None, description="Omit for the anonymous (trending) feed"),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    limit: Optional[int] = Query(None, description="Page size; clamped to the configured maximum"),
    strategy: FeedStrategy = Query(FeedStrategy.PERSONALIZED),
    item_type: str = Query("article"),
):
    """
    Return one feed page.

    An invalid or expired cursor restarts the feed. When no content can be served
    at all, the body carries status "unavailable" with HTTP 503.
    """
    state = get_state()
    result = await state.service.get_feed(
        user_id or None, cursor=cursor, limit=limit, strategy=strategy, item_type=item_type
    )
    if result.status == FeedStatus.UNAVAILABLE:
        return JSONResponse(status_code=503, content=result.model_dump(mode="json"))
    return result
