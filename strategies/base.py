"""Base strategy interface for Leekha players."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strategies.context import FollowContext, LeadContext, PassContext
    from strategies.tokens import Hand


class Strategy(ABC):
    """Abstract base class for player strategies.

    Strategies see only their own hand (four suit-grouped token lists,
    ascending) and an immutable context. They return tokens; the adapter
    validates them and maps them back to cards.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy."""
        ...

    @abstractmethod
    def choose_pass(self, hand: Hand, ctx: PassContext) -> list[str]:
        """Select exactly three distinct tokens from the hand to pass.

        Args:
            hand: Own hand as [hearts, spades, diamonds, clubs] token lists.
            ctx: Scores and own seat.

        Returns:
            Three tokens present in the hand.
        """
        ...

    @abstractmethod
    def choose_lead(self, hand: Hand, ctx: LeadContext) -> str:
        """Select the card to lead the trick."""
        ...

    @abstractmethod
    def choose_follow(self, hand: Hand, ctx: FollowContext) -> str:
        """Select the card to play after the trick has been led.

        Must follow the lead suit when holding it, and discard Q♠ or 10♦
        when void in the lead suit while holding either.
        """
        ...
