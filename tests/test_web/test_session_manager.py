"""Tests for game sessions outside of HTTP."""

import asyncio

from leekha_engine.selection import SelectionKind
from web.api.session_manager import GameSessionManager, _seat_params


async def session_awaiting_card(manager):
    session = await manager.create_session(strategy_name="simple", seed=7)
    await session.wait_until_idle()
    session.pass_cards([card.id for card in session.pending.legal[:3]])
    await session.wait_until_idle()
    return session


class TestStop:
    def test_delete_while_card_pending(self):
        async def scenario():
            manager = GameSessionManager()
            session = await session_awaiting_card(manager)
            assert session.pending.kind is SelectionKind.CARD

            hand = list(session.game.hands[0])
            tricks = session.game.tracker.state.tricks_played
            seen = len(session.history)

            deleted = await asyncio.wait_for(manager.delete_session(session.id), timeout=2.0)
            await asyncio.sleep(0.05)
            return session, deleted, hand, tricks, session.history[seen:]

        session, deleted, hand, tricks, later = asyncio.run(scenario())
        assert deleted
        assert session.task.cancelled()
        assert session.game.hands[0] == hand
        assert session.game.tracker.state.tricks_played == tricks
        assert not any(record["type"] == "card_played" for record in later)
        assert not any(record["type"] == "error_occurred" for record in later)
        assert session.pending is None

    def test_shutdown_stops_every_session(self):
        async def scenario():
            manager = GameSessionManager()
            sessions = [await session_awaiting_card(manager) for _ in range(2)]
            await asyncio.wait_for(manager.shutdown(), timeout=2.0)
            return manager, sessions

        manager, sessions = asyncio.run(scenario())
        assert manager.list_sessions() == []
        assert all(session.task.done() for session in sessions)


class TestBotSeeds:
    def test_seed_offset_per_seat(self):
        assert [_seat_params({"seed": 5}, seat)["seed"] for seat in (1, 2, 3)] == [6, 7, 8]

    def test_params_without_seed_untouched(self):
        params = {"risky_lead": 100}
        assert _seat_params(params, 2) == params
        assert _seat_params(None, 1) == {}

    def test_random_bots_get_distinct_streams(self):
        async def scenario():
            manager = GameSessionManager()
            session = await manager.create_session(strategy_name="random", strategy_params={"seed": 3}, seed=1)
            await session.wait_until_idle()
            bots = [session.game.seats[seat].strategy for seat in (1, 2, 3)]
            draws = [bot._rng.random() for bot in bots]
            await manager.shutdown()
            return draws

        draws = asyncio.run(scenario())
        assert len(set(draws)) == 3
