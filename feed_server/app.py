"""
feedrank API — FastAPI app factory.

Use: uvicorn feed_server.app:app
Or:  from feed_server import app
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .routes import register_routes
from .state import AppState, get_state, set_state


def create_app(state: Optional[AppState] = None, build_indexes: bool = True) -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup. A given state replaces the global one."""
    if state is not None:
        set_state(state)
    app = FastAPI(
        title="feedrank API",
        description="Personalized content ranking with cursor-based infinite scroll",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup():
        config = get_state().config if state is not None else get_config()
        logging.basicConfig(
            level=getattr(logging, config.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        _, errors = config.validate()
        for err in errors:
            print(f"[startup] WARNING: {err}")
        app_state = get_state()
        print(f"[startup] Ranking config: index_dimension={app_state.ranking_config.index_dimension}")
        if build_indexes:
            app_state.start_index_build()
            print(f"[startup] Index build started for {config.item_types}")

    return app


app = create_app()
