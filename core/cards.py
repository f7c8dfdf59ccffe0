"""Card, Deck, and Shoe classes - immutable card representations."""

import itertools
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from random import Random
from typing import Iterator

logger = logging.getLogger(__name__)

_card_serial = itertools.count(1)


class Suit(Enum):
    """Card suits. Display only, never part of value logic."""

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    """Card ranks, valued by their external string encoding."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self.value in ("J", "Q", "K"):
            return 10
        return int(self.value)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank is in the ten-value group (10, J, Q, K)."""
        return self.blackjack_value == 10


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    ``deck_index`` and ``uid`` identify a physical card in a shoe (for UI
    animation keys) and take no part in equality or hashing.
    """

    rank: Rank
    suit: Suit
    deck_index: int = field(default=0, compare=False)
    uid: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    def rank_equals(self, other: "Card") -> bool:
        """Same rank, or both in the ten-value group."""
        return self.rank == other.rank or (self.is_ten_value and other.is_ten_value)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10D'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str == "T":
            rank_str = "10"

        suit_map = {
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        try:
            rank = Rank(rank_str)
        except ValueError:
            raise ValueError(f"Invalid rank: {rank_str}") from None
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank, suit_map[suit_str])


def _make_card(rank: Rank, suit: Suit, deck_index: int) -> Card:
    serial = next(_card_serial)
    return Card(rank, suit, deck_index=deck_index, uid=f"{rank}{suit}-{deck_index}-{serial}")


def build_cards(num_decks: int) -> list[Card]:
    """Build ``num_decks`` ordered decks, each card tagged with its deck copy."""
    return [
        _make_card(rank, suit, deck_index)
        for deck_index in range(num_decks)
        for suit in Suit
        for rank in Rank
    ]


def _default_threshold(num_decks: int) -> int:
    return 52 if num_decks > 1 else 0


class Deck:
    """A standard 52-card deck."""

    def __init__(self, rng: Random | None = None) -> None:
        """Initialize a new, shuffled deck."""
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()
        self.shuffle()

    def reset(self) -> None:
        """Reset deck to all 52 cards in order."""
        self._cards = build_cards(1)

    def shuffle(self) -> None:
        """Shuffle the deck."""
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """Draw a card from the top of the deck."""
        if not self._cards:
            raise IndexError("Cannot draw from empty deck")
        return self._cards.pop()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)


class Shoe:
    """A multi-deck shoe that regenerates itself instead of running dry."""

    def __init__(
        self,
        num_decks: int = 6,
        reshuffle_threshold: int | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a shoe with multiple decks.

        Args:
            num_decks: Number of decks in the shoe (typically 6)
            reshuffle_threshold: Regenerate the shoe before a draw when fewer
                cards than this remain. Defaults to one deck for multi-deck
                shoes and to 0 (only when empty) for a single deck.
            rng: Random number generator for shuffling
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        if reshuffle_threshold is None:
            reshuffle_threshold = _default_threshold(num_decks)
        if not 0 <= reshuffle_threshold < num_decks * 52:
            raise ValueError("reshuffle_threshold must be between 0 and the shoe size")

        self._num_decks = num_decks
        self._reshuffle_threshold = reshuffle_threshold
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self._generation = 0
        self.shuffle()

    def reset(self) -> None:
        """Reset shoe to all cards from all decks, in order."""
        self._cards = build_cards(self._num_decks)

    def shuffle(self) -> None:
        """Rebuild and shuffle all cards in the shoe."""
        self.reset()
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """Draw a card, regenerating a fresh shoe first if it is running low."""
        if self.needs_shuffle:
            self.shuffle()
            self._generation += 1
            logger.debug(
                "Regenerated %d-deck shoe (generation %d)",
                self._num_decks,
                self._generation,
            )
        return self._cards.pop()

    @property
    def needs_shuffle(self) -> bool:
        """Check if the shoe is empty or below the reshuffle threshold."""
        return not self._cards or len(self._cards) < self._reshuffle_threshold

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt from the current shoe."""
        return self.total_cards - len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the total number of cards in a full shoe."""
        return self._num_decks * 52

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    @property
    def reshuffle_threshold(self) -> int:
        return self._reshuffle_threshold

    @property
    def generation(self) -> int:
        """Number of times the shoe has been regenerated by ``draw``."""
        return self._generation

    def snapshot(self) -> "ShoeState":
        """Return the current contents as an immutable ``ShoeState``."""
        return ShoeState(
            cards=tuple(self._cards),
            num_decks=self._num_decks,
            reshuffle_threshold=self._reshuffle_threshold,
            generation=self._generation,
        )

    def restore(self, state: "ShoeState") -> None:
        """Replace the contents with a previously taken snapshot."""
        if state.num_decks != self._num_decks:
            raise ValueError("Snapshot deck count does not match this shoe")
        self._cards = list(state.cards)
        self._reshuffle_threshold = state.reshuffle_threshold
        self._generation = state.generation

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)


@dataclass(frozen=True)
class ShoeState:
    """Immutable shoe contents; the last element is the next card drawn."""

    cards: tuple[Card, ...]
    num_decks: int
    reshuffle_threshold: int
    generation: int = 0

    def __len__(self) -> int:
        return len(self.cards)


def new_shoe(
    num_decks: int,
    rng: Random,
    reshuffle_threshold: int | None = None,
) -> ShoeState:
    """Build a freshly shuffled shoe of ``num_decks`` decks."""
    if num_decks < 1:
        raise ValueError("Shoe must have at least 1 deck")
    if reshuffle_threshold is None:
        reshuffle_threshold = _default_threshold(num_decks)
    if not 0 <= reshuffle_threshold < num_decks * 52:
        raise ValueError("reshuffle_threshold must be between 0 and the shoe size")

    cards = build_cards(num_decks)
    rng.shuffle(cards)
    return ShoeState(
        cards=tuple(cards),
        num_decks=num_decks,
        reshuffle_threshold=reshuffle_threshold,
    )


def draw_card(state: ShoeState, rng: Random) -> tuple[Card, ShoeState]:
    """
    Draw one card without mutating ``state``.

    A fresh shoe is generated from ``rng`` first when ``state`` is empty or
    holds fewer cards than its reshuffle threshold.
    """
    if not state.cards or len(state.cards) < state.reshuffle_threshold:
        fresh = new_shoe(state.num_decks, rng, state.reshuffle_threshold)
        state = replace(fresh, generation=state.generation + 1)
        logger.debug("Regenerated shoe state (generation %d)", state.generation)
    return state.cards[-1], replace(state, cards=state.cards[:-1])
