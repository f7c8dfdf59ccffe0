"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

from core.cards import Card


@dataclass(frozen=True)
class HandValue:
    """Best total of a hand and whether an Ace still counts as 11."""

    total: int
    soft: bool


class HandClass(Enum):
    """Initial two-card hand categories used by the training filter."""

    PAIRS = "pairs"
    SOFT = "soft"
    HARD = "hard"
    UNKNOWN = "unknown"


def evaluate_hand(cards: Sequence[Card]) -> HandValue:
    """
    Calculate the best hand value.

    Every Ace starts at 11 and is downgraded to 1, one at a time, while the
    total is over 21. The hand is soft if at least one Ace is still high.

    Raises:
        ValueError: if ``cards`` is empty
    """
    if not cards:
        raise ValueError("Cannot evaluate an empty hand")

    total = 0
    high_aces = 0

    for card in cards:
        if card.is_ace:
            high_aces += 1
        total += card.value

    while total > 21 and high_aces > 0:
        total -= 10
        high_aces -= 1

    return HandValue(total=total, soft=high_aces > 0)


def is_pair(cards: Sequence[Card]) -> bool:
    """Two cards of the same rank, or two ten-value cards."""
    return len(cards) == 2 and cards[0].rank_equals(cards[1])


def is_ten_pair(cards: Sequence[Card]) -> bool:
    """Two ten-value cards (10/10, 10/J, Q/K, ...). These are never split."""
    return len(cards) == 2 and cards[0].is_ten_value and cards[1].is_ten_value


def is_blackjack(cards: Sequence[Card]) -> bool:
    """A natural: exactly two cards totalling 21."""
    return len(cards) == 2 and evaluate_hand(cards).total == 21


def classify_initial_hand(
    cards: Sequence[Card],
    ten_pairs_as_hard: bool = False,
) -> HandClass:
    """
    Classify an initial two-card hand as pairs, soft or hard.

    Args:
        cards: The player's cards
        ten_pairs_as_hard: Classify ten-value pairs as HARD instead of PAIRS.
            The deal filter uses this so that "pairs" practice only yields
            hands worth splitting.

    Returns:
        UNKNOWN unless exactly two cards are given
    """
    if len(cards) != 2:
        return HandClass.UNKNOWN
    if is_pair(cards):
        if ten_pairs_as_hard and is_ten_pair(cards):
            return HandClass.HARD
        return HandClass.PAIRS
    return HandClass.SOFT if evaluate_hand(cards).soft else HandClass.HARD


@dataclass
class Hand:
    """A blackjack hand with its wager and play-state flags."""

    cards: list[Card] = field(default_factory=list)
    wager: int = 0
    is_doubled: bool = False
    is_split_hand: bool = False
    is_split_aces: bool = False
    is_finished: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    @property
    def value(self) -> int:
        """Best total. Requires at least one card."""
        return evaluate_hand(self.cards).total

    @property
    def is_soft(self) -> bool:
        """Check if the hand is soft (has an ace counted as 11)."""
        return evaluate_hand(self.cards).soft

    @property
    def is_hard(self) -> bool:
        return not self.is_soft

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self.cards)

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return bool(self.cards) and self.value > 21

    @property
    def is_pair(self) -> bool:
        return is_pair(self.cards)

    @property
    def is_ten_pair(self) -> bool:
        return is_ten_pair(self.cards)

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the hand."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        if not self.cards:
            return "(empty)"
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, wager={self.wager})"
