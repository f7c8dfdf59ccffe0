"""Wager settlement for finished blackjack hands."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from core.cards import Card
from core.hand import Hand, evaluate_hand, is_blackjack


class Outcome(Enum):
    """How a player hand resolved against the dealer."""

    BLACKJACK = "blackjack"
    PUSH = "push"
    BUST = "bust"
    DEALER_BUST = "dealer_bust"
    WIN = "win"
    LOSE = "lose"


@dataclass(frozen=True)
class Settlement:
    """
    Result of settling one hand.

    ``delta`` is the total amount returned to the player, stake included:
    0 is a loss, ``wager`` a push, ``2 * wager`` an even-money win.
    """

    outcome: Outcome
    delta: int
    wager: int
    player_total: int
    dealer_total: int

    @property
    def net(self) -> int:
        return self.delta - self.wager

    def describe(self) -> str:
        """Player-facing result line."""
        totals = f"(You: {self.player_total}, Dealer: {self.dealer_total})"
        messages = {
            Outcome.BLACKJACK: f"Blackjack! {totals} +${self.net}",
            Outcome.PUSH: f"Push. {totals}",
            Outcome.BUST: f"Busted. {totals} -${self.wager}",
            Outcome.DEALER_BUST: f"Dealer busts! {totals} +${self.net}",
            Outcome.WIN: f"You win! {totals} +${self.net}",
            Outcome.LOSE: f"You lose. {totals} -${self.wager}",
        }
        return messages[self.outcome]


def settle(
    player_cards: Sequence[Card],
    dealer_cards: Sequence[Card],
    wager: int,
) -> Settlement:
    """
    Settle a finished player hand against the finished dealer hand.

    Naturals are checked first, then a player bust (which loses even if the
    dealer also busts), then a dealer bust, then the totals. A natural only
    beats a non-natural 21 through the first rule; a dealer natural against
    a player's drawn 21 compares as equal totals and pushes.

    Raises:
        ValueError: on an empty hand or a negative wager
    """
    if wager < 0:
        raise ValueError("Wager cannot be negative")

    player_total = evaluate_hand(player_cards).total
    dealer_total = evaluate_hand(dealer_cards).total
    player_bj = is_blackjack(player_cards)
    dealer_bj = is_blackjack(dealer_cards)

    if player_bj and not dealer_bj:
        outcome, delta = Outcome.BLACKJACK, wager * 5 // 2
    elif player_bj and dealer_bj:
        outcome, delta = Outcome.PUSH, wager
    elif player_total > 21:
        outcome, delta = Outcome.BUST, 0
    elif dealer_total > 21:
        outcome, delta = Outcome.DEALER_BUST, wager * 2
    elif player_total > dealer_total:
        outcome, delta = Outcome.WIN, wager * 2
    elif player_total < dealer_total:
        outcome, delta = Outcome.LOSE, 0
    else:
        outcome, delta = Outcome.PUSH, wager

    return Settlement(
        outcome=outcome,
        delta=delta,
        wager=wager,
        player_total=player_total,
        dealer_total=dealer_total,
    )


@dataclass(frozen=True)
class RoundSettlement:
    """Per-hand settlements of a round and their sums."""

    results: tuple[Settlement, ...]

    @property
    def total_return(self) -> int:
        return sum(r.delta for r in self.results)

    @property
    def total_wager(self) -> int:
        return sum(r.wager for r in self.results)

    @property
    def net(self) -> int:
        """Bankroll change for the round."""
        return self.total_return - self.total_wager


PlayerHand = Union[Hand, tuple[Sequence[Card], int]]


def settle_round(
    hands: Sequence[PlayerHand],
    dealer_cards: Sequence[Card],
) -> RoundSettlement:
    """Settle every player hand independently with its own wager."""
    results = []
    for hand in hands:
        if isinstance(hand, Hand):
            cards, wager = hand.cards, hand.wager
        else:
            cards, wager = hand
        results.append(settle(cards, dealer_cards, wager))
    return RoundSettlement(results=tuple(results))
