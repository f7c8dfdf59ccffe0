"""Card builders and a scripted shoe shared by the test modules."""

from random import Random

from hypothesis import strategies as st

from core.cards import Card, Shoe, Rank, Suit
from core.game import TrainerGame


def cards(*ranks: str) -> list[Card]:
    """Build cards from rank strings, alternating suits."""
    suits = list(Suit)
    return [Card(Rank(r), suits[i % len(suits)]) for i, r in enumerate(ranks)]


def card(rank: str) -> Card:
    return Card(Rank(rank), Suit.CLUBS)


class StackedShoe(Shoe):
    """Shoe that deals a scripted sequence before falling back to random cards."""

    def __init__(self, ranks: list[str], rng: Random | None = None) -> None:
        super().__init__(num_decks=6, rng=rng or Random(0))
        self._script = cards(*ranks)

    def draw(self) -> Card:
        if self._script:
            return self._script.pop(0)
        return super().draw()


def stack_game(game: TrainerGame, ranks: list[str]) -> TrainerGame:
    """Script the shoe: player, player, dealer up, dealer hole, then draws."""
    game.shoe = StackedShoe(ranks)
    return game


def stacked_game(ranks: list[str], **kwargs) -> TrainerGame:
    """A seeded game whose shoe deals ``ranks`` first."""
    return stack_game(TrainerGame(rng=Random(0), **kwargs), ranks)


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=6):
    """Generate a random list of cards."""
    return draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
