"""Seat implementations: where the game loop gets each player's decisions."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leekha_engine.rules import PASS_COUNT, fallback_pass
from leekha_engine.selection import SelectionError

if TYPE_CHECKING:
    from leekha_engine.adapter import BotAdapter
    from leekha_engine.cards import Card
    from leekha_engine.rules import Play
    from leekha_engine.selection import InputProvider
    from leekha_engine.tracker import TrackerState
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TableView:
    """Read-only view of the table handed to a seat for one decision."""

    seat: int
    hand: tuple[Card, ...]
    trick: tuple[Play, ...]
    scores: tuple[int, ...]
    round_number: int
    tracker: TrackerState

    @property
    def is_leading(self) -> bool:
        return not self.trick


class Seat(ABC):
    """A player at the table.

    ``last_fallback`` names the reason the most recent decision was replaced
    by a default (e.g. "timeout"), or is None if the seat chose normally.
    """

    is_human = False

    def __init__(self, name: str):
        self._name = name
        self.last_fallback: str | None = None

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    async def request_card(self, view: TableView, legal: list[Card]) -> Card:
        ...

    @abstractmethod
    async def request_pass(self, view: TableView) -> list[Card]:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class BotSeat(Seat):
    """Seat driven synchronously by a strategy through a ``BotAdapter``."""

    def __init__(self, name: str, adapter: BotAdapter):
        super().__init__(name)
        self.adapter = adapter

    @classmethod
    def for_strategy(cls, strategy: Strategy, seat: int, name: str | None = None) -> BotSeat:
        from leekha_engine.adapter import BotAdapter

        return cls(name or f"{strategy.name} #{seat}", BotAdapter(strategy, seat))

    @property
    def strategy(self) -> Strategy:
        return self.adapter.strategy

    async def request_card(self, view: TableView, legal: list[Card]) -> Card:
        card = self.adapter.choose_card(view, legal)
        self.last_fallback = self.adapter.last_fallback
        return card

    async def request_pass(self, view: TableView) -> list[Card]:
        cards = self.adapter.choose_pass(view)
        self.last_fallback = self.adapter.last_fallback
        return cards


class HumanSeat(Seat):
    """Seat that awaits an external ``InputProvider``.

    A choice that does not arrive within ``timeout`` seconds, or whose
    request is cancelled, is replaced by a legal default.
    """

    is_human = True

    def __init__(self, name: str, provider: InputProvider, timeout: float | None = None):
        super().__init__(name)
        self.provider = provider
        self.timeout = timeout

    async def request_card(self, view: TableView, legal: list[Card]) -> Card:
        self.last_fallback = None
        try:
            return await self._await(self.provider.select_card(view.seat, view.hand, legal))
        except asyncio.TimeoutError:
            self.last_fallback = "timeout"
        except SelectionError as e:
            self.last_fallback = "cancelled"
            logger.info(f"Seat {view.seat} card selection ended: {e}")
        logger.warning(f"Seat {view.seat} ({self.name}) defaulted to {legal[0]} ({self.last_fallback})")
        return legal[0]

    async def request_pass(self, view: TableView) -> list[Card]:
        self.last_fallback = None
        try:
            return await self._await(
                self.provider.select_pass(view.seat, view.hand, PASS_COUNT)
            )
        except asyncio.TimeoutError:
            self.last_fallback = "timeout"
        except SelectionError as e:
            self.last_fallback = "cancelled"
            logger.info(f"Seat {view.seat} pass selection ended: {e}")
        cards = fallback_pass(view.hand)
        logger.warning(
            f"Seat {view.seat} ({self.name}) defaulted to passing "
            f"{', '.join(str(c) for c in cards)} ({self.last_fallback})"
        )
        return cards

    async def _await(self, coro):
        if self.timeout is None:
            return await coro
        return await asyncio.wait_for(coro, self.timeout)
