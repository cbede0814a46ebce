"""Tests for the event emitter and game configuration."""

import pytest

from leekha_engine.config import GameConfig
from leekha_engine.events import EventEmitter, GameEvent


class TestEventEmitter:
    def test_listener_receives_event_and_payload(self):
        events = EventEmitter()
        seen = []
        events.on(GameEvent.CARD_PLAYED, lambda event, payload: seen.append((event, payload)))
        events.emit(GameEvent.CARD_PLAYED, {"seat": 1})
        events.emit(GameEvent.TRICK_COMPLETE, {"winner": 1})
        assert seen == [(GameEvent.CARD_PLAYED, {"seat": 1})]

    def test_wildcard_listener(self):
        events = EventEmitter()
        seen = []
        events.on(None, lambda event, payload: seen.append(event))
        events.emit(GameEvent.ROUND_START, {})
        events.emit(GameEvent.GAME_OVER)
        assert seen == [GameEvent.ROUND_START, GameEvent.GAME_OVER]

    def test_unsubscribe(self):
        events = EventEmitter()
        seen = []
        unsubscribe = events.on(GameEvent.ROUND_END, lambda event, payload: seen.append(event))
        unsubscribe()
        events.emit(GameEvent.ROUND_END, {})
        assert seen == []
        assert events.listener_count(GameEvent.ROUND_END) == 0

    def test_once(self):
        events = EventEmitter()
        seen = []
        events.once(GameEvent.TURN_CHANGED, lambda event, payload: seen.append(payload["seat"]))
        events.emit(GameEvent.TURN_CHANGED, {"seat": 1})
        events.emit(GameEvent.TURN_CHANGED, {"seat": 2})
        assert seen == [1]

    def test_failing_listener_is_isolated(self, caplog):
        events = EventEmitter()
        seen = []

        def broken(event, payload):
            raise RuntimeError("listener bug")

        events.on(GameEvent.SCORE_UPDATED, broken)
        events.on(GameEvent.SCORE_UPDATED, lambda event, payload: seen.append(event))
        events.emit(GameEvent.SCORE_UPDATED, {})
        assert seen == [GameEvent.SCORE_UPDATED]
        assert "listener bug" in caplog.text

    def test_remove_all_listeners(self):
        events = EventEmitter()
        events.on(GameEvent.GAME_OVER, lambda event, payload: None)
        events.on(GameEvent.ROUND_END, lambda event, payload: None)
        events.remove_all_listeners(GameEvent.GAME_OVER)
        assert events.listener_count(GameEvent.GAME_OVER) == 0
        assert events.listener_count(GameEvent.ROUND_END) == 1
        events.remove_all_listeners()
        assert events.listener_count(GameEvent.ROUND_END) == 0


class TestGameConfig:
    def test_defaults(self):
        config = GameConfig()
        assert config.score_limit == 101
        assert config.selection_timeout == 60.0
        assert config.turn_delay == 0.0
        assert config.seed is None

    @pytest.mark.parametrize("kwargs", [
        {"score_limit": 0},
        {"selection_timeout": 0},
        {"turn_delay": -1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            GameConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LEEKHA_SCORE_LIMIT", "50")
        monkeypatch.setenv("LEEKHA_SELECTION_TIMEOUT", "0")
        monkeypatch.setenv("LEEKHA_TURN_DELAY", "0.5")
        config = GameConfig.from_env(seed=3)
        assert config.score_limit == 50
        assert config.selection_timeout is None
        assert config.turn_delay == 0.5
        assert config.seed == 3

    def test_overrides_beat_environment(self, monkeypatch):
        monkeypatch.setenv("LEEKHA_SCORE_LIMIT", "50")
        assert GameConfig.from_env(score_limit=70).score_limit == 70
