"""Basic strategy tables for blackjack (S17, DAS, no surrender)."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Sequence

from core.cards import Card
from core.hand import evaluate_hand, is_pair


class Action(Enum):
    """Possible player actions."""

    HIT = auto()
    STAND = auto()
    DOUBLE = auto()
    SPLIT = auto()

    # Conditional action (fallback if primary not allowed)
    DOUBLE_OR_HIT = auto()  # Double if allowed, else hit

    def __str__(self) -> str:
        return self.name.replace("_", "/")


# Type aliases for clarity
DealerUpcard = int  # 2-11 (11 = Ace)
TableEntry = tuple[Action, str]
Table = Mapping[tuple[int, int], TableEntry]

DEALER_UPCARDS = range(2, 12)
DOUBLE_UNAVAILABLE = "Double not available: hit."


@dataclass(frozen=True)
class ActionFlags:
    """What the player may legally do with the hand. Both fields required."""

    can_double: bool
    can_split: bool


@dataclass(frozen=True)
class Recommendation:
    """Recommended action and the chart rule behind it."""

    action: Action
    reason: str


@dataclass(frozen=True)
class Assessment:
    """A player's chosen action scored against the recommendation."""

    chosen: Action
    recommended: Action
    reason: str

    @property
    def is_correct(self) -> bool:
        return self.chosen == self.recommended

    @property
    def text(self) -> str:
        verdict = "Correct" if self.is_correct else "Incorrect"
        return f"{verdict} – {self.reason}"


def _fill(
    table: dict[tuple[int, int], TableEntry],
    key: int,
    dealers: Sequence[int] | range,
    action: Action,
    reason: str,
) -> None:
    for dealer in dealers:
        table[(key, dealer)] = (action, reason)


def _others(dealers: Sequence[int] | range) -> list[int]:
    return [d for d in DEALER_UPCARDS if d not in dealers]


class BasicStrategy:
    """
    Basic strategy lookup tables.

    Pre-computed dictionaries for O(1) lookup, keyed by
    ``(hand key, dealer upcard value)``. The hand key is the pair card value
    for the pair table and the hand total for the soft and hard tables.
    """

    def __init__(self) -> None:
        self._hard_table = self._build_hard_table()
        self._soft_table = self._build_soft_table()
        self._pair_table = self._build_pair_table()

    def recommend(
        self,
        player_cards: Sequence[Card],
        dealer_upcard: Card | None,
        flags: ActionFlags,
    ) -> Recommendation:
        """
        Get the basic strategy action for a hand.

        Pairs are checked first (only when splitting is allowed), then soft
        totals, then hard totals. The first table with an entry wins.

        Raises:
            ValueError: if fewer than two player cards or no dealer upcard
        """
        if len(player_cards) < 2:
            raise ValueError("Strategy needs at least two player cards")
        if dealer_upcard is None:
            raise ValueError("Strategy needs the dealer upcard")

        dealer = dealer_upcard.value
        hand = evaluate_hand(player_cards)

        if flags.can_split and is_pair(player_cards):
            entry = self._pair_table.get((player_cards[0].value, dealer))
            if entry:
                return self._resolve(entry, flags)

        if hand.soft:
            entry = self._soft_table.get((hand.total, dealer))
            if entry:
                return self._resolve(entry, flags)

        entry = self._hard_table.get((hand.total, dealer))
        if entry:
            return self._resolve(entry, flags)

        # Totals outside the chart (busted hands)
        return Recommendation(Action.STAND, "Hard 17+ stand.")

    def _resolve(self, entry: TableEntry, flags: ActionFlags) -> Recommendation:
        """Resolve a conditional double based on what's allowed."""
        action, reason = entry
        if action == Action.DOUBLE_OR_HIT:
            if flags.can_double:
                return Recommendation(Action.DOUBLE, reason)
            return Recommendation(Action.HIT, DOUBLE_UNAVAILABLE)
        return Recommendation(action, reason)

    def _build_hard_table(self) -> Table:
        """Build hard totals strategy table."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE_OR_HIT

        table: dict[tuple[int, int], TableEntry] = {}

        # Hard 4-8: Always hit
        for total in range(4, 9):
            _fill(table, total, DEALER_UPCARDS, H, "Hard 8 or less: hit.")

        # Hard 9
        _fill(table, 9, range(3, 7), D, "Hard 9 double vs 3–6.")
        _fill(table, 9, _others(range(3, 7)), H, "Otherwise hit.")

        # Hard 10
        _fill(table, 10, range(2, 10), D, "Hard 10 double vs 2–9.")
        _fill(table, 10, _others(range(2, 10)), H, "Otherwise hit.")

        # Hard 11
        _fill(table, 11, DEALER_UPCARDS, D, "Hard 11 double vs any.")

        # Hard 12
        _fill(table, 12, range(4, 7), S, "Hard 12 stand vs 4–6.")
        _fill(table, 12, _others(range(4, 7)), H, "Otherwise hit.")

        # Hard 13-16
        for total in range(13, 17):
            _fill(table, total, range(2, 7), S, "Hard 13–16 stand vs 2–6.")
            _fill(table, total, _others(range(2, 7)), H, "Otherwise hit.")

        # Hard 17+: Always stand
        for total in range(17, 22):
            _fill(table, total, DEALER_UPCARDS, S, "Hard 17+ stand.")

        return table

    def _build_soft_table(self) -> Table:
        """Build soft totals strategy table. Soft 12 (A,A) has no entry."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE_OR_HIT

        table: dict[tuple[int, int], TableEntry] = {}

        # Soft 13-14 (A,2 / A,3)
        for total in (13, 14):
            _fill(table, total, (5, 6), D, "A2–A3 double vs 5–6.")
            _fill(table, total, _others((5, 6)), H, "Otherwise hit.")

        # Soft 15-16 (A,4 / A,5)
        for total in (15, 16):
            _fill(table, total, range(4, 7), D, "A4–A5 double vs 4–6.")
            _fill(table, total, _others(range(4, 7)), H, "Otherwise hit.")

        # Soft 17 (A,6)
        _fill(table, 17, range(3, 7), D, "A6 double vs 3–6.")
        _fill(table, 17, _others(range(3, 7)), H, "Otherwise hit.")

        # Soft 18 (A,7)
        _fill(table, 18, range(3, 7), D, "A7 double vs 3–6.")
        _fill(table, 18, (2, 7, 8), S, "A7 stand vs 2,7,8.")
        _fill(table, 18, (9, 10, 11), H, "A7 hit vs 9,10,A.")

        # Soft 19-21: Always stand
        for total in range(19, 22):
            _fill(table, total, DEALER_UPCARDS, S, "A8+ stand.")

        return table

    def _build_pair_table(self) -> Table:
        """Build pair splitting strategy table, keyed by the pair card value."""
        H = Action.HIT
        S = Action.STAND
        P = Action.SPLIT

        table: dict[tuple[int, int], TableEntry] = {}

        # Pair of Aces and 8s: Always split
        _fill(table, 11, DEALER_UPCARDS, P, "Split A,A always.")
        _fill(table, 8, DEALER_UPCARDS, P, "Split 8,8 always.")

        # Ten-value pairs: Never split
        _fill(table, 10, DEALER_UPCARDS, S, "10-value pair: stand.")

        # Pair of 9s
        nines = [2, 3, 4, 5, 6, 8, 9]
        _fill(table, 9, nines, P, "9,9 split vs 2–9 except 7.")
        _fill(table, 9, _others(nines), S, "9,9 stand vs 7,10,A.")

        # Pair of 7s
        _fill(table, 7, range(2, 8), P, "7,7 split vs 2–7.")
        _fill(table, 7, _others(range(2, 8)), H, "7,7 otherwise hit.")

        # Pair of 6s
        _fill(table, 6, range(2, 7), P, "6,6 split vs 2–6.")
        _fill(table, 6, _others(range(2, 7)), H, "6,6 otherwise hit.")

        # Pair of 4s
        _fill(table, 4, (5, 6), P, "4,4 split vs 5–6.")
        _fill(table, 4, _others((5, 6)), H, "4,4 otherwise hit.")

        # Pair of 2s and 3s
        for rank in (2, 3):
            _fill(table, rank, range(2, 8), P, "3,3 & 2,2 split vs 2–7.")
            _fill(table, rank, _others(range(2, 8)), H, "Otherwise hit.")

        # Pair of 5s is hit here, not played as a hard 10 double
        _fill(table, 5, DEALER_UPCARDS, H, "Unlisted pair: hit.")

        return table

    @property
    def hard_table(self) -> Table:
        """Return the hard totals strategy table."""
        return self._hard_table

    @property
    def soft_table(self) -> Table:
        """Return the soft totals strategy table."""
        return self._soft_table

    @property
    def pair_table(self) -> Table:
        """Return the pair splitting strategy table."""
        return self._pair_table


_default_strategy = BasicStrategy()


def recommend(
    player_cards: Sequence[Card],
    dealer_upcard: Card | None,
    flags: ActionFlags,
) -> Recommendation:
    """Recommend an action for ``player_cards`` against ``dealer_upcard``."""
    return _default_strategy.recommend(player_cards, dealer_upcard, flags)


def score_action(
    chosen: Action,
    player_cards: Sequence[Card],
    dealer_upcard: Card | None,
    flags: ActionFlags,
) -> Assessment:
    """Score a player's chosen action against the recommendation."""
    advice = recommend(player_cards, dealer_upcard, flags)
    return Assessment(chosen=chosen, recommended=advice.action, reason=advice.reason)
