"""Blackjack table rules enforced by the round engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleSet:
    """
    Blackjack table rules configuration.

    The strategy tables assume S17 with double after split, 3:2 naturals,
    split aces receiving one card, and no surrender or insurance.
    """

    # Shoe configuration
    num_decks: int = 6
    reshuffle_threshold: int = 52  # Regenerate the shoe below this many cards

    # Betting limits
    min_bet: int = 1
    max_bet: int = 10000

    # Dealer rules
    dealer_hits_soft_17: bool = False  # S17

    # Double down rules
    double_after_split: bool = True  # DAS

    # Split rules
    hit_split_aces: bool = False  # Split aces get exactly one card
    max_splits: int = 1  # Splits allowed per round

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if not 0 <= self.reshuffle_threshold < self.num_decks * 52:
            raise ValueError("reshuffle_threshold must be between 0 and the shoe size")
        if self.min_bet < 1:
            raise ValueError("min_bet must be at least 1")
        if self.max_bet < self.min_bet:
            raise ValueError("max_bet must not be below min_bet")
        if self.max_splits not in (0, 1):
            raise ValueError("max_splits must be 0 or 1")

    @classmethod
    def single_deck(cls) -> "RuleSet":
        """Single deck, regenerated only when empty."""
        return cls(num_decks=1, reshuffle_threshold=0)
