"""Strategy lookup by name."""

from __future__ import annotations

from typing import Any

from strategies.base import Strategy


class StrategyFactory:
    """Factory for creating strategy instances."""

    AVAILABLE_STRATEGIES = {
        "simple": "Danger-scored heuristic (solo play)",
        "team": "Partner-aware heuristic",
        "probabilistic": "Team heuristic weighted by card-counting probabilities",
        "random": "Random legal cards (baseline)",
    }

    DEFAULT = "simple"

    def create(self, name: str | None = None, params: dict[str, Any] | None = None) -> Strategy:
        """Create a strategy instance."""
        params = params or {}
        name_lower = (name or self.DEFAULT).lower()

        match name_lower:
            case "random":
                from strategies.random_strategy import RandomStrategy
                return RandomStrategy(seed=params.get("seed"))

            case "simple" | "team" | "probabilistic":
                from dataclasses import replace

                from strategies.heuristic import PRESETS, HeuristicStrategy
                overrides = {k: v for k, v in params.items() if k != "seed"}
                try:
                    weights = replace(PRESETS[name_lower], **overrides)
                except TypeError as e:
                    raise ValueError(f"Invalid weights for {name_lower}: {e}") from e
                return HeuristicStrategy(weights)

            case _:
                raise ValueError(f"Unknown strategy: {name}")

    def list_strategies(self) -> dict[str, str]:
        """List available strategies with descriptions."""
        return self.AVAILABLE_STRATEGIES.copy()
