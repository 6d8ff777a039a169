"""Wishlist storage.

The wishlist outlives a session, so it is kept in a small JSON file (the
desktop counterpart of browser local storage). Reading never raises: a
missing, unreadable or corrupted file is an empty wishlist.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from vibe_planner.config import Settings
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import WishlistItem

logger = get_logger(__name__)

WISHLIST_STORAGE_VERSION = 1
_ITEMS_ADAPTER: TypeAdapter = TypeAdapter(List[WishlistItem])

PathLike = Union[str, Path]


def _resolve(path: Optional[PathLike]) -> Path:
    return Path(path) if path is not None else Settings.from_env().wishlist_path


def load_wishlist(path: Optional[PathLike] = None) -> List[WishlistItem]:
    target = _resolve(path)
    try:
        raw = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError):
        logger.warning("Could not read wishlist storage at %s", target, exc_info=True)
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Wishlist storage at %s is not valid JSON; starting empty", target)
        return []

    # accept both the versioned envelope and a bare list
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        logger.warning("Wishlist storage at %s has an unexpected shape; starting empty", target)
        return []

    try:
        items = _ITEMS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        logger.warning("Wishlist storage at %s is corrupted (%d errors); starting empty", target, exc.error_count())
        return []

    by_id: Dict[str, WishlistItem] = {}
    for item in items:
        by_id[item.city.object_id] = item
    return list(by_id.values())


def save_wishlist(items: Iterable[WishlistItem], path: Optional[PathLike] = None) -> None:
    target = _resolve(path)
    payload = {
        "version": WISHLIST_STORAGE_VERSION,
        "items": [item.model_dump(mode="json", by_alias=True) for item in items],
    }
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(target)
    except OSError:
        logger.warning("Could not write wishlist storage at %s", target, exc_info=True)


def clear_wishlist(path: Optional[PathLike] = None) -> None:
    target = _resolve(path)
    try:
        target.unlink()
    except FileNotFoundError:
        return
    except OSError:
        logger.warning("Could not remove wishlist storage at %s", target, exc_info=True)
