"""Runtime settings read from the environment (and a local .env file)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_RECONCILE_INTERVAL = 0.5
DEFAULT_BUFFER_CAP = 2
DEFAULT_CHAT_RESULTS_CAP = 3
DEFAULT_INDEX_NAME = "travel_destinations"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _default_wishlist_path() -> Path:
    return Path.home() / ".vibe_planner" / "wishlist.json"


@dataclass
class Settings:
    reconcile_interval: float = DEFAULT_RECONCILE_INTERVAL
    buffer_cap: int = DEFAULT_BUFFER_CAP
    chat_results_cap: int = DEFAULT_CHAT_RESULTS_CAP
    wishlist_path: Path = field(default_factory=_default_wishlist_path)
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    algolia_app_id: Optional[str] = None
    algolia_search_key: Optional[str] = None
    algolia_index_name: str = DEFAULT_INDEX_NAME
    openai_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        raw_path = os.getenv("VIBE_PLANNER_WISHLIST_PATH")
        raw_origins = os.getenv("VIBE_PLANNER_ALLOWED_ORIGINS") or "*"
        origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        return cls(
            reconcile_interval=_float_env("VIBE_PLANNER_RECONCILE_INTERVAL", DEFAULT_RECONCILE_INTERVAL),
            buffer_cap=_int_env("VIBE_PLANNER_BUFFER_CAP", DEFAULT_BUFFER_CAP),
            chat_results_cap=_int_env("VIBE_PLANNER_CHAT_RESULTS_CAP", DEFAULT_CHAT_RESULTS_CAP),
            wishlist_path=Path(raw_path).expanduser() if raw_path else _default_wishlist_path(),
            allowed_origins=origins or ["*"],
            algolia_app_id=os.getenv("ALGOLIA_APP_ID"),
            algolia_search_key=os.getenv("ALGOLIA_SEARCH_KEY"),
            algolia_index_name=os.getenv("ALGOLIA_INDEX_NAME") or DEFAULT_INDEX_NAME,
            openai_api_key=os.getenv("OPENAI_API_KEY"),
        )
