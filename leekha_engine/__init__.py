"""Leekha card game engine."""

from leekha_engine.cards import Card, Rank, Suit, QUEEN_OF_SPADES, TEN_OF_DIAMONDS
from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent
from leekha_engine.game import GameOutcome, GamePhase, GameSetupError, LeekhaGame, RoundResult
from leekha_engine.tracker import CardTracker, TrackerState

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "QUEEN_OF_SPADES",
    "TEN_OF_DIAMONDS",
    "GameConfig",
    "EventEmitter",
    "GameEvent",
    "GameOutcome",
    "GamePhase",
    "GameSetupError",
    "LeekhaGame",
    "RoundResult",
    "CardTracker",
    "TrackerState",
]
