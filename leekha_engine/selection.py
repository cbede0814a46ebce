"""Awaitable human card selection.

A ``SelectionBroker`` is the bridge between the game loop (which awaits a
choice) and a front end (which submits it). Each seat has at most one
outstanding request; opening a new one cancels the old one.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence

from leekha_engine.events import GameEvent
from leekha_engine.rules import PASS_COUNT

if TYPE_CHECKING:
    from leekha_engine.cards import Card
    from leekha_engine.events import EventEmitter

logger = logging.getLogger(__name__)


class SelectionKind(str, Enum):
    CARD = "card"
    PASS = "pass"


class SelectionError(Exception):
    """Base class for selection failures."""

    pass


class SelectionCancelledError(SelectionError):
    """The pending request was cancelled or replaced by a newer one."""

    pass


class InvalidSelectionError(SelectionError):
    """The submitted cards do not satisfy the pending request."""

    pass


class NoPendingSelectionError(SelectionError):
    """Nothing is waiting for this seat's input."""

    pass


@dataclass
class SelectionRequest:
    """One outstanding request for input from a seat."""

    seat: int
    kind: SelectionKind
    hand: tuple[Card, ...]
    legal: tuple[Card, ...]
    count: int
    future: asyncio.Future = field(repr=False)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.monotonic)

    @property
    def done(self) -> bool:
        return self.future.done()

    def resolve(self, value: Any) -> None:
        if not self.future.done():
            self.future.set_result(value)

    def cancel(self, reason: str) -> None:
        if not self.future.done():
            self.future.set_exception(SelectionCancelledError(reason))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "seat": self.seat,
            "kind": self.kind.value,
            "count": self.count,
            "legal": [card.id for card in self.legal],
        }


class InputProvider(ABC):
    """Source of human decisions for a ``HumanSeat``."""

    @abstractmethod
    async def select_card(self, seat: int, hand: Sequence[Card], legal: Sequence[Card]) -> Card:
        """Return one card out of ``legal``."""
        ...

    @abstractmethod
    async def select_pass(self, seat: int, hand: Sequence[Card], count: int) -> list[Card]:
        """Return ``count`` distinct cards out of ``hand``."""
        ...


class SelectionBroker(InputProvider):
    """Input provider fed by external submissions (web API, tests)."""

    def __init__(self, events: EventEmitter | None = None):
        self._events = events
        self._pending: dict[int, SelectionRequest] = {}

    def pending(self, seat: int) -> SelectionRequest | None:
        request = self._pending.get(seat)
        if request is None or request.done:
            return None
        return request

    def pending_requests(self) -> list[SelectionRequest]:
        return [r for r in self._pending.values() if not r.done]

    async def select_card(self, seat: int, hand: Sequence[Card], legal: Sequence[Card]) -> Card:
        request = self._open(seat, SelectionKind.CARD, hand, legal, 1)
        return await self._wait(request)

    async def select_pass(self, seat: int, hand: Sequence[Card], count: int = PASS_COUNT) -> list[Card]:
        request = self._open(seat, SelectionKind.PASS, hand, hand, count)
        return await self._wait(request)

    def submit_card(self, seat: int, card: Card) -> None:
        """Resolve the seat's pending card request.

        Raises:
            NoPendingSelectionError: No card request is waiting for this seat.
            InvalidSelectionError: The card is not one of the legal choices.
        """
        request = self._require(seat, SelectionKind.CARD)
        if card not in request.legal:
            raise InvalidSelectionError(f"{card} is not a legal play for seat {seat}")
        request.resolve(card)

    def submit_pass(self, seat: int, cards: Sequence[Card]) -> None:
        """Resolve the seat's pending pass request with distinct cards from hand."""
        request = self._require(seat, SelectionKind.PASS)
        chosen = list(cards)
        if len(chosen) != request.count or len(set(chosen)) != request.count:
            raise InvalidSelectionError(
                f"Seat {seat} must pass exactly {request.count} distinct cards"
            )
        missing = [card for card in chosen if card not in request.hand]
        if missing:
            raise InvalidSelectionError(
                f"Cards not in hand: {', '.join(str(c) for c in missing)}"
            )
        request.resolve(chosen)

    def cancel(self, seat: int, reason: str = "cancelled") -> bool:
        """Cancel the seat's pending request. Returns False if none was pending."""
        request = self.pending(seat)
        if request is None:
            return False
        request.cancel(reason)
        return True

    def cancel_all(self, reason: str = "cancelled") -> None:
        for request in self.pending_requests():
            request.cancel(reason)

    def _open(
        self,
        seat: int,
        kind: SelectionKind,
        hand: Sequence[Card],
        legal: Sequence[Card],
        count: int,
    ) -> SelectionRequest:
        previous = self.pending(seat)
        if previous is not None:
            logger.warning(f"Seat {seat} opened a new {kind.value} request; cancelling {previous.id}")
            previous.cancel("superseded")

        request = SelectionRequest(
            seat=seat,
            kind=kind,
            hand=tuple(hand),
            legal=tuple(legal),
            count=count,
            future=asyncio.get_running_loop().create_future(),
        )
        self._pending[seat] = request
        self._emit(GameEvent.SELECTION_REQUESTED, request.to_dict())
        return request

    async def _wait(self, request: SelectionRequest) -> Any:
        outcome = "resolved"
        try:
            return await request.future
        except (asyncio.CancelledError, SelectionCancelledError):
            outcome = "cancelled"
            raise
        finally:
            if self._pending.get(request.seat) is request:
                del self._pending[request.seat]
            self._emit(
                GameEvent.SELECTION_CLOSED,
                {"id": request.id, "seat": request.seat, "outcome": outcome},
            )

    def _require(self, seat: int, kind: SelectionKind) -> SelectionRequest:
        request = self.pending(seat)
        if request is None or request.kind != kind:
            raise NoPendingSelectionError(f"No pending {kind.value} selection for seat {seat}")
        return request

    def _emit(self, event: GameEvent, payload: dict[str, Any]) -> None:
        if self._events is not None:
            self._events.emit(event, payload)
