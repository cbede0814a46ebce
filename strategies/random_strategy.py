"""Random strategy for baseline testing."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from strategies.base import Strategy
from strategies.tokens import flatten, legal_tokens

if TYPE_CHECKING:
    from strategies.context import FollowContext, LeadContext, PassContext
    from strategies.tokens import Hand


class RandomStrategy(Strategy):
    """Strategy that selects legal cards uniformly at random.

    Useful as a baseline and for smoke testing.
    """

    def __init__(self, seed: int | None = None):
        """Initialize the random strategy.

        Args:
            seed: Optional random seed for reproducibility.
        """
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def name(self) -> str:
        return "Random"

    def choose_pass(self, hand: Hand, ctx: PassContext) -> list[str]:
        return self._rng.sample(flatten(hand), 3)

    def choose_lead(self, hand: Hand, ctx: LeadContext) -> str:
        return self._rng.choice(list(ctx.legal) or legal_tokens(hand))

    def choose_follow(self, hand: Hand, ctx: FollowContext) -> str:
        return self._rng.choice(list(ctx.legal) or legal_tokens(hand, ctx.lead_suit))

    def reset_seed(self, seed: int | None = None) -> None:
        """Reset the random number generator with a new seed."""
        self._seed = seed
        self._rng = random.Random(seed)
