"""Game session management for the web API.

Each session runs one ``LeekhaGame`` as a background task. Seat 0 is the
local human, fed through a ``SelectionBroker``; the other three seats are
bots. Requests from the client resolve the broker's pending selection and
the game task carries on until it needs the human again.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from leekha_engine.cards import Card
from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent
from leekha_engine.game import LeekhaGame
from leekha_engine.seats import BotSeat, HumanSeat
from leekha_engine.selection import SelectionBroker
from strategies.factory import StrategyFactory

logger = logging.getLogger(__name__)

HUMAN_SEAT = 0
BOT_NAMES = ("East", "Partner", "West")


@dataclass
class GameSession:
    """An active game session."""

    id: str
    strategy_name: str
    game: LeekhaGame
    broker: SelectionBroker
    created_at: datetime
    history: list[dict] = field(default_factory=list)
    task: asyncio.Task | None = None

    # Callbacks for WebSocket notifications
    _listeners: list[Callable[[dict], None]] = field(default_factory=list)

    @property
    def is_game_over(self) -> bool:
        return self.game.is_game_over

    @property
    def pending(self):
        return self.broker.pending(HUMAN_SEAT)

    @property
    def is_idle(self) -> bool:
        """True when the game waits on the human or has stopped."""
        return (
            self.pending is not None
            or self.is_game_over
            or (self.task is not None and self.task.done())
        )

    def start(self) -> None:
        self.game.events.on(None, self._record)
        self.task = asyncio.create_task(self._run(), name=f"leekha-{self.id}")

    async def stop(self) -> None:
        # The game task must be gone before its requests are cancelled
        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        self.broker.cancel_all("session closed")

    async def wait_until_idle(self, timeout: float = 5.0) -> bool:
        """Wait until the human must act or the game has stopped."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self.is_idle:
            if loop.time() >= deadline:
                logger.warning(f"Session {self.id} still busy after {timeout}s")
                return False
            await asyncio.sleep(0.01)
        return True

    def play(self, card_id: str) -> None:
        """Submit the human's card. Raises ``SelectionError`` or ``ValueError``."""
        self.broker.submit_card(HUMAN_SEAT, Card.from_id(card_id))

    def pass_cards(self, card_ids: list[str]) -> None:
        """Submit the human's three pass cards."""
        self.broker.submit_pass(HUMAN_SEAT, [Card.from_id(c) for c in card_ids])

    def add_listener(self, callback: Callable[[dict], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[dict], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, event: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Session {self.id} listener failed on {event['type']}")

    def _record(self, event: GameEvent, payload: dict[str, Any]) -> None:
        # Other seats' hands never leave the server
        if event is GameEvent.HAND_UPDATED and payload["seat"] != HUMAN_SEAT:
            payload = {"seat": payload["seat"], "hand_size": len(payload["hand"])}
        record = {
            "type": event.value,
            "data": payload,
            "timestamp": datetime.now().isoformat(),
        }
        self.history.append(record)
        self._notify_listeners(record)

    async def _run(self) -> None:
        try:
            outcome = await self.game.play_game()
            logger.info(f"Session {self.id} finished: seat {outcome.loser} lost")
        except asyncio.CancelledError:
            logger.info(f"Session {self.id} cancelled")
            raise
        except Exception as e:
            logger.exception(f"Session {self.id} game loop failed")
            self._notify_listeners({"type": "error", "data": {"message": str(e)}})

    def to_client_state(self) -> dict:
        """Table state as seen from the human seat."""
        game = self.game
        pending = self.pending
        round_state = game.round
        return {
            "game_id": self.id,
            "phase": game.phase.name,
            "round_number": game.round_number,
            "dealer": game.dealer,
            "leader": round_state.leader if round_state else None,
            "current_turn": game.current_turn,
            "hearts_broken": game.tracker.state.hearts_broken,
            "hand": [_card_to_dict(c) for c in game.hands[HUMAN_SEAT]],
            "trick": [{"seat": seat, "card": _card_to_dict(card)} for seat, card in game.trick],
            "players": [
                {
                    "seat": i,
                    "name": seat.name,
                    "is_human": i == HUMAN_SEAT,
                    "score": game.scores[i],
                    "round_points": round_state.points[i] if round_state else 0,
                    "hand_size": len(game.hands[i]),
                }
                for i, seat in enumerate(game.seats)
            ],
            "pending": pending.to_dict() if pending else None,
            "is_game_over": self.is_game_over,
            "loser": game.loser,
            "losing_team": game.loser % 2 if game.loser is not None else None,
        }


def _card_to_dict(card: Card) -> dict:
    return {
        "id": card.id,
        "rank": card.rank.symbol,
        "suit": card.suit.letter,
        "suit_symbol": card.suit.symbol,
        "display": str(card),
        "points": card.points,
    }


def _seat_params(params: dict[str, Any] | None, seat: int) -> dict[str, Any]:
    """Per-seat strategy params, with any shared seed offset by the seat."""
    seat_params = dict(params or {})
    if seat_params.get("seed") is not None:
        seat_params["seed"] = int(seat_params["seed"]) + seat
    return seat_params


class GameSessionManager:
    """Manages all active game sessions."""

    def __init__(self):
        self._sessions: dict[str, GameSession] = {}

    async def create_session(
        self,
        strategy_name: str | None = None,
        strategy_params: dict[str, Any] | None = None,
        seed: int | None = None,
        score_limit: int | None = None,
        player_name: str = "You",
    ) -> GameSession:
        """Create a session and start its game. Raises ValueError on bad options."""
        strategy_name = strategy_name or StrategyFactory.DEFAULT
        overrides: dict[str, Any] = {}
        if seed is not None:
            overrides["seed"] = seed
        if score_limit is not None:
            overrides["score_limit"] = score_limit
        config = GameConfig.from_env(**overrides)

        session_id = str(uuid.uuid4())
        events = EventEmitter()
        broker = SelectionBroker(events)
        seats = [HumanSeat(player_name, broker, timeout=config.selection_timeout)]
        for offset, name in enumerate(BOT_NAMES, start=1):
            strategy = StrategyFactory().create(strategy_name, _seat_params(strategy_params, offset))
            seats.append(BotSeat.for_strategy(strategy, offset, name=name))

        session = GameSession(
            id=session_id,
            strategy_name=strategy_name,
            game=LeekhaGame(seats, config=config, events=events),
            broker=broker,
            created_at=datetime.now(),
        )
        self._sessions[session_id] = session
        session.start()
        logger.info(f"Created session {session_id} against {strategy_name}")
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    async def delete_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.stop()
        logger.info(f"Deleted session {session_id}")
        return True

    async def shutdown(self) -> None:
        for session_id in list(self._sessions):
            await self.delete_session(session_id)

    def list_sessions(self) -> list[dict]:
        return [
            {
                "id": s.id,
                "created_at": s.created_at.isoformat(),
                "strategy": s.strategy_name,
                "round_number": s.game.round_number,
                "phase": s.game.phase.name,
                "is_game_over": s.is_game_over,
                "scores": list(s.game.scores),
                "loser": s.game.loser,
            }
            for s in self._sessions.values()
        ]


# Global session manager instance
session_manager = GameSessionManager()
