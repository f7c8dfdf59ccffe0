"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Deck, Shoe, ShoeState, Rank, Suit, new_shoe, draw_card
from core.hand import (
    Hand,
    HandClass,
    HandValue,
    evaluate_hand,
    is_pair,
    is_blackjack,
    classify_initial_hand,
)
from core.settlement import Outcome, Settlement, RoundSettlement, settle, settle_round

__all__ = [
    "Card",
    "Deck",
    "Shoe",
    "ShoeState",
    "Rank",
    "Suit",
    "new_shoe",
    "draw_card",
    "Hand",
    "HandClass",
    "HandValue",
    "evaluate_hand",
    "is_pair",
    "is_blackjack",
    "classify_initial_hand",
    "Outcome",
    "Settlement",
    "RoundSettlement",
    "settle",
    "settle_round",
]
