"""Pytest fixtures for blackjack trainer tests."""

import pytest
from random import Random


from core.cards import Deck, Shoe
from core.hand import Hand
from core.strategy import BasicStrategy, RuleSet
from core.game import TrainerGame
from tests.helpers import cards


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    return Deck(rng=rng)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    return Shoe(num_decks=6, rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards=cards("A", "K"), wager=100)


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards=cards("A", "6"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards=cards("10", "6"))


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand(cards=cards("8", "8"))


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards=cards("10", "6", "K"))


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def basic_strategy():
    """Basic strategy tables."""
    return BasicStrategy()


@pytest.fixture
def game(rng):
    """A new game instance."""
    return TrainerGame(initial_bankroll=1000, rng=rng)


