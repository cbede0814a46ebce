"""Game strategies for Leekha."""

from strategies.base import Strategy
from strategies.context import FollowContext, LeadContext, PassContext, TrickPhase
from strategies.factory import StrategyFactory
from strategies.heuristic import HeuristicStrategy, HeuristicWeights
from strategies.random_strategy import RandomStrategy

__all__ = [
    "Strategy",
    "RandomStrategy",
    "HeuristicStrategy",
    "HeuristicWeights",
    "StrategyFactory",
    "PassContext",
    "LeadContext",
    "FollowContext",
    "TrickPhase",
]
