"""JSON-backed store for run history and user settings.

The pipeline never touches this module; callers pass values out of it
explicitly. Subscribers are called with ``(key, value)`` after every change;
history changes are reported under the ``"history"`` key.
"""

import json
import logging
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any

from verbamind.models import GenerationResult, SpeechHistoryItem, SpeechParams

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"
DEFAULT_HISTORY_LIMIT = 50

Subscriber = Callable[[str, Any], None]


class HistoryStore:
    def __init__(self, path: Path, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._path = path
        self._limit = history_limit
        self._settings: dict[str, Any] = {}
        self._history: list[SpeechHistoryItem] = []
        self._subscribers: list[Subscriber] = []
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            settings = dict(raw.get("settings", {}))
            history = [SpeechHistoryItem.from_dict(item) for item in raw.get(HISTORY_KEY, [])]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("History file %s is corrupt, starting empty: %s", self._path, exc)
            return
        self._settings = settings
        self._history = history

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "settings": self._settings,
            HISTORY_KEY: [item.to_dict() for item in self._history],
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)

    def _notify(self, key: str, value: Any) -> None:
        for callback in list(self._subscribers):
            callback(key, value)

    # --- settings ---

    def get(self, key: str, default: Any = None) -> Any:
        if key == HISTORY_KEY:
            return self.items()
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key == HISTORY_KEY:
            raise KeyError("Use add/remove/clear to change history")
        self._settings[key] = value
        self._save()
        self._notify(key, value)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # --- history ---

    def items(self) -> list[SpeechHistoryItem]:
        """Newest first."""
        return list(self._history)

    def add(self, params: SpeechParams, result: GenerationResult) -> SpeechHistoryItem:
        item = SpeechHistoryItem(id=uuid.uuid4().hex, params=params, result=result)
        self._history = [item, *self._history][: self._limit]
        self._save()
        self._notify(HISTORY_KEY, self.items())
        return item

    def remove(self, item_id: str) -> bool:
        before = len(self._history)
        self._history = [item for item in self._history if item.id != item_id]
        if len(self._history) == before:
            return False
        self._save()
        self._notify(HISTORY_KEY, self.items())
        return True

    def clear(self) -> None:
        self._history = []
        self._save()
        self._notify(HISTORY_KEY, [])
