"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from a .env file using python-dotenv.
"""

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Data source: "json" (ITEMS_JSON_PATH / INTERACTIONS_JSON_PATH) | None (empty in-memory stores)
    data_source: Optional[str] = None
    items_json_path: Optional[Path] = None
    interactions_json_path: Optional[Path] = None

    # Collaborators: unset URL → in-process implementation
    redis_url: Optional[str] = None
    qdrant_url: Optional[str] = None

    # Cursor signing secret; a random one is generated when unset (cursors die with the process)
    cursor_secret: Optional[str] = None

    # Ranking parameters: optional JSON file merged over defaults, optional dimension override
    ranking_config_path: Optional[Path] = None
    index_dimension: Optional[int] = None

    # Item types that get a candidate index at startup
    item_types: List[str] = field(default_factory=lambda: ["article"])

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_source = os.getenv("DATA_SOURCE", "").strip().lower() or None
        if data_source and data_source != "json":
            data_source = None

        def _path_env(key: str) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return None
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        dim = os.getenv("INDEX_DIMENSION")
        item_types = [t.strip() for t in os.getenv("ITEM_TYPES", "article").split(",") if t.strip()]
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            data_source=data_source,
            items_json_path=_path_env("ITEMS_JSON_PATH"),
            interactions_json_path=_path_env("INTERACTIONS_JSON_PATH"),
            redis_url=os.getenv("REDIS_URL") or None,
            qdrant_url=os.getenv("QDRANT_URL") or None,
            cursor_secret=os.getenv("CURSOR_SECRET") or None,
            ranking_config_path=_path_env("RANKING_CONFIG_PATH"),
            index_dimension=int(dim) if dim else None,
            item_types=item_types or ["article"],
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.data_source == "json":
            if not self.items_json_path:
                errors.append("DATA_SOURCE=json requires ITEMS_JSON_PATH")
            elif not self.items_json_path.exists():
                errors.append(f"Items JSON not found: {self.items_json_path}")

        if self.ranking_config_path and not self.ranking_config_path.exists():
            errors.append(f"Ranking config not found: {self.ranking_config_path}")

        if self.index_dimension is not None and self.index_dimension <= 0:
            errors.append(f"INDEX_DIMENSION must be positive, got {self.index_dimension}")

        return len(errors) == 0, errors

    def resolved_cursor_secret(self) -> str:
        if not self.cursor_secret:
            logger.warning("[config] CURSOR_SECRET not set; generating a per-process secret")
            self.cursor_secret = secrets.token_urlsafe(32)
        return self.cursor_secret


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
