#!/usr/bin/env python3
"""
feedrank API server — entrypoint for uvicorn feed_server.server:app.

For uvicorn feed_server:app use feed_server/__init__.py (exposes app from feed_server.app).
"""

from .app import app


def main() -> None:
    import uvicorn

    from .config import get_config

    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
