"""Notebook state persistence."""

from __future__ import annotations

import json
import logging
from typing import Optional

from .models import AppState, Note, PersistedState, Segment

logger = logging.getLogger(__name__)

STATE_KEY = "study-note-app-state-v1"


def save_state(store, state: AppState, key: str = STATE_KEY) -> bool:
    try:
        payload = json.dumps(state.to_payload(), ensure_ascii=False)
        store.set_item(key, payload)
    except (TypeError, ValueError, OSError) as exc:
        logger.warning("Failed to persist state: %s", exc)
        return False
    logger.debug("State persisted (%s segments, %s notes)", len(state.segments), len(state.notes))
    return True


def load_state(store, key: str = STATE_KEY) -> Optional[PersistedState]:
    try:
        cached = store.get_item(key)
    except OSError as exc:
        logger.warning("Failed to read state: %s", exc)
        return None
    if not cached:
        return None

    try:
        parsed = json.loads(cached)
        if not isinstance(parsed, dict):
            raise ValueError(f"expected an object, got {type(parsed).__name__}")
        loaded = PersistedState()
        if parsed.get("title"):
            loaded.title = str(parsed["title"])
        if isinstance(parsed.get("segments"), list):
            loaded.segments = [Segment.from_dict(item) for item in parsed["segments"]]
        if isinstance(parsed.get("notes"), dict):
            loaded.notes = {
                str(segment_id): Note.from_dict(item)
                for segment_id, item in parsed["notes"].items()
            }
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Failed to load state: %s", exc)
        return None
    return loaded
