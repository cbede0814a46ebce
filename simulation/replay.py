"""Replay a single bot decision from a debug snapshot.

A snapshot is the dict returned by ``LeekhaGame.debug_snapshot()`` (also
served by the web API's debug endpoint). Rebuilding the table from it lets
a strategy be re-run on the exact position where it misplayed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from leekha_engine.adapter import BotAdapter
from leekha_engine.cards import Card
from leekha_engine.rules import get_valid_moves
from leekha_engine.seats import TableView
from leekha_engine.tracker import TrackerState

if TYPE_CHECKING:
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


def view_from_snapshot(snapshot: dict[str, Any], seat: int | None = None) -> TableView:
    """Rebuild the table view one seat saw when the snapshot was taken.

    Args:
        snapshot: Debug snapshot dict.
        seat: Seat to rebuild; defaults to the seat whose turn it was.

    Raises:
        ValueError: If no seat is given and the snapshot has no current turn.
    """
    if seat is None:
        seat = snapshot.get("current_turn")
    if seat is None:
        raise ValueError("Snapshot has no current turn; pass a seat explicitly")

    hand = tuple(sorted(Card.from_id(card_id) for card_id in snapshot["current_hands"][seat]))
    trick = tuple((play["seat"], Card.from_id(play["card"])) for play in snapshot.get("trick", []))
    return TableView(
        seat=seat,
        hand=hand,
        trick=trick,
        scores=tuple(snapshot.get("scores", (0, 0, 0, 0))),
        round_number=snapshot.get("round_number", 1),
        tracker=TrackerState.from_dict(snapshot["card_tracker"]),
    )


def replay_decision(
    snapshot: dict[str, Any],
    strategy: Strategy,
    seat: int | None = None,
) -> dict[str, Any]:
    """Re-run ``strategy`` on the position captured in ``snapshot``.

    Returns:
        Dict with the seat, decision kind, legal cards, chosen card ids, the
        context the strategy saw and the fallback reason if one was needed.
    """
    view = view_from_snapshot(snapshot, seat)
    adapter = BotAdapter(strategy, view.seat)

    if snapshot.get("phase") == "PASSING":
        chosen = adapter.choose_pass(view)
        legal = list(view.hand)
    else:
        legal = get_valid_moves(view.hand, view.trick)
        chosen = [adapter.choose_card(view, legal)]

    decision = adapter.last_decision or {}
    context = decision.get("context")
    if adapter.last_fallback:
        logger.warning(f"{strategy.name} fell back ({adapter.last_fallback}) at seat {view.seat}")

    return {
        "seat": view.seat,
        "strategy": strategy.name,
        "kind": decision.get("kind"),
        "hand": [card.id for card in view.hand],
        "legal": [card.id for card in legal],
        "chosen": [card.id for card in chosen],
        "fallback": adapter.last_fallback,
        "context": asdict(context) if context is not None else None,
    }
