"""Root and health endpoints."""

from fastapi import APIRouter

from ..models import HealthResponse
from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "feedrank API",
        "version": "0.1.0",
        "status": "ready" if state.indexes.stats() else "indexing",
        "endpoints": {
            "feed": ["/api/feed"],
            "interactions": ["/api/interactions"],
            "users": ["/api/users/{user_id}/history"],
            "health": ["/api/health"],
        },
    }


@router.get("/api/health", response_model=HealthResponse)
def health():
    state = get_state()
    indexes = state.indexes.stats()
    return HealthResponse(
        status="healthy" if any(indexes.values()) else "degraded",
        indexes=indexes,
        cache_backend=type(state.cache).__name__,
        index_backend=state.index_backend,
        corpus_items=len(state.corpus) if hasattr(state.corpus, "__len__") else -1,
    )
