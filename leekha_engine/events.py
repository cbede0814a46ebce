"""Game notifications and a small listener registry."""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[["GameEvent", dict[str, Any]], None]


class GameEvent(str, Enum):
    """Notifications emitted by the game loop. Payloads are plain dicts."""

    GAME_INITIALIZED = "game_initialized"
    GAME_STARTED = "game_started"
    ROUND_START = "round_start"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"
    HANDS_DEALT = "hands_dealt"
    HAND_UPDATED = "hand_updated"
    CARD_PLAYED = "card_played"
    TRICK_COMPLETE = "trick_complete"
    TRICK_PILE_CLEAR = "trick_pile_clear"
    TURN_CHANGED = "turn_changed"
    SCORE_UPDATED = "score_updated"
    PASS_PHASE_START = "pass_phase_start"
    PASS_PHASE_COMPLETE = "pass_phase_complete"
    SELECTION_REQUESTED = "selection_requested"
    SELECTION_CLOSED = "selection_closed"
    INVALID_MOVE = "invalid_move"
    ERROR_OCCURRED = "error_occurred"


class EventEmitter:
    """Fan-out of game events to fire-and-forget listeners.

    A listener registered for ``None`` receives every event. A failing
    listener is logged and does not affect the others or the game.
    """

    def __init__(self):
        self._listeners: dict[GameEvent | None, list[Listener]] = defaultdict(list)

    def on(self, event: GameEvent | None, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners[event].append(listener)
        return lambda: self.off(event, listener)

    def once(self, event: GameEvent, listener: Listener) -> None:
        def wrapper(ev: GameEvent, payload: dict[str, Any]) -> None:
            self.off(event, wrapper)
            listener(ev, payload)

        self.on(event, wrapper)

    def off(self, event: GameEvent | None, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def emit(self, event: GameEvent, payload: dict[str, Any] | None = None) -> None:
        payload = payload or {}
        for listener in [*self._listeners.get(event, []), *self._listeners.get(None, [])]:
            try:
                listener(event, payload)
            except Exception:
                logger.exception(f"Listener for {event.value} failed")

    def listener_count(self, event: GameEvent | None = None) -> int:
        return len(self._listeners.get(event, []))

    def remove_all_listeners(self, event: GameEvent | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
