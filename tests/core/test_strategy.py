"""Tests for basic strategy."""

import pytest
from hypothesis import given, strategies as st

from core.strategy import Action, ActionFlags, Assessment, BasicStrategy, recommend, score_action
from core.strategy.basic import DOUBLE_UNAVAILABLE
from tests.helpers import card, cards, card_strategy

ALL = ActionFlags(can_double=True, can_split=True)
NO_DOUBLE = ActionFlags(can_double=False, can_split=True)
NO_SPLIT = ActionFlags(can_double=True, can_split=False)
NEITHER = ActionFlags(can_double=False, can_split=False)

UPCARDS = ["2", "3", "4", "5", "6", "7", "8", "9", "10", "A"]


def action_for(player, dealer, flags=ALL):
    return recommend(cards(*player), card(dealer), flags).action


class TestHardTotals:
    """Tests for hard total strategy."""

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_hard_17_plus_always_stand(self, dealer):
        """Hard 17+ should always stand."""
        assert action_for(["10", "7"], dealer) == Action.STAND
        assert action_for(["10", "9"], dealer) == Action.STAND

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_hard_8_or_less_always_hit(self, dealer):
        assert action_for(["5", "3"], dealer) == Action.HIT

    def test_hard_16_vs_dealer_10(self):
        """Hard 16 vs 10 should hit."""
        advice = recommend(cards("10", "6"), card("10"), ALL)
        assert advice.action == Action.HIT
        assert advice.reason == "Otherwise hit."

    def test_hard_13_to_16_vs_2_to_6(self):
        for total in (["10", "3"], ["9", "5"], ["10", "5"], ["9", "7"]):
            for dealer in ["2", "3", "4", "5", "6"]:
                assert action_for(total, dealer) == Action.STAND

    def test_hard_12(self):
        assert action_for(["10", "2"], "3") == Action.HIT
        assert action_for(["10", "2"], "4") == Action.STAND
        assert action_for(["10", "2"], "6") == Action.STAND
        assert action_for(["10", "2"], "7") == Action.HIT

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_hard_11_double_vs_any(self, dealer):
        advice = recommend(cards("6", "5"), card(dealer), ALL)
        assert advice.action == Action.DOUBLE
        assert advice.reason == "Hard 11 double vs any."

    def test_hard_10(self):
        assert action_for(["6", "4"], "9") == Action.DOUBLE
        assert action_for(["6", "4"], "10") == Action.HIT
        assert action_for(["6", "4"], "A") == Action.HIT

    def test_hard_9(self):
        assert action_for(["5", "4"], "2") == Action.HIT
        assert action_for(["5", "4"], "3") == Action.DOUBLE
        assert action_for(["5", "4"], "6") == Action.DOUBLE
        assert action_for(["5", "4"], "7") == Action.HIT

    def test_multi_card_hard_total(self):
        assert action_for(["5", "4", "3", "4"], "10") == Action.HIT
        assert action_for(["2", "3", "4", "8"], "10") == Action.STAND


class TestSoftTotals:
    """Tests for soft total strategy."""

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_soft_19_plus_stand(self, dealer):
        assert action_for(["A", "8"], dealer) == Action.STAND
        assert action_for(["A", "9"], dealer) == Action.STAND

    def test_soft_18(self):
        """Soft 18 (A-7) splits three ways."""
        assert action_for(["A", "7"], "2") == Action.STAND
        assert action_for(["A", "7"], "3") == Action.DOUBLE
        assert action_for(["A", "7"], "6") == Action.DOUBLE
        assert action_for(["A", "7"], "7") == Action.STAND
        assert action_for(["A", "7"], "8") == Action.STAND
        assert action_for(["A", "7"], "9") == Action.HIT
        assert action_for(["A", "7"], "10") == Action.HIT
        assert action_for(["A", "7"], "A") == Action.HIT

    def test_soft_18_vs_6_without_double_hits(self):
        """A blocked double degrades to hit, never stand."""
        advice = recommend(cards("A", "7"), card("6"), NO_DOUBLE)
        assert advice.action == Action.HIT
        assert advice.reason == DOUBLE_UNAVAILABLE

    def test_soft_17(self):
        assert action_for(["A", "6"], "2") == Action.HIT
        assert action_for(["A", "6"], "3") == Action.DOUBLE
        assert action_for(["A", "6"], "7") == Action.HIT

    def test_soft_15_16(self):
        for player in (["A", "4"], ["A", "5"]):
            assert action_for(player, "3") == Action.HIT
            assert action_for(player, "4") == Action.DOUBLE
            assert action_for(player, "6") == Action.DOUBLE
            assert action_for(player, "7") == Action.HIT

    def test_soft_13_14(self):
        for player in (["A", "2"], ["A", "3"]):
            assert action_for(player, "4") == Action.HIT
            assert action_for(player, "5") == Action.DOUBLE
            assert action_for(player, "6") == Action.DOUBLE
            assert action_for(player, "7") == Action.HIT

    def test_multi_ace_soft_total(self):
        """A,A,6 is soft 18, looked up by its evaluated total."""
        assert action_for(["A", "A", "6"], "2") == Action.STAND
        assert action_for(["A", "A", "6"], "9") == Action.HIT

    def test_soft_12_falls_through_to_hard(self):
        """Unsplittable A,A is soft 12 and reads the hard 12 row."""
        advice = recommend(cards("A", "A"), card("5"), NO_SPLIT)
        assert advice.action == Action.STAND
        assert advice.reason == "Hard 12 stand vs 4–6."
        assert action_for(["A", "A"], "2", NO_SPLIT) == Action.HIT


class TestPairs:
    """Tests for pair splitting strategy."""

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_always_split_aces_and_eights(self, dealer):
        assert action_for(["A", "A"], dealer) == Action.SPLIT
        assert action_for(["8", "8"], dealer) == Action.SPLIT

    @pytest.mark.parametrize("player", [["10", "10"], ["K", "Q"], ["J", "10"]])
    def test_never_split_tens(self, player):
        advice = recommend(cards(*player), card("6"), ALL)
        assert advice.action == Action.STAND
        assert advice.reason == "10-value pair: stand."

    def test_nines(self):
        assert action_for(["9", "9"], "2") == Action.SPLIT
        assert action_for(["9", "9"], "7") == Action.STAND
        assert action_for(["9", "9"], "8") == Action.SPLIT
        assert action_for(["9", "9"], "9") == Action.SPLIT
        assert action_for(["9", "9"], "10") == Action.STAND
        assert action_for(["9", "9"], "A") == Action.STAND

    def test_sevens_and_sixes(self):
        assert action_for(["7", "7"], "7") == Action.SPLIT
        assert action_for(["7", "7"], "8") == Action.HIT
        assert action_for(["6", "6"], "6") == Action.SPLIT
        assert action_for(["6", "6"], "7") == Action.HIT

    def test_fours(self):
        assert action_for(["4", "4"], "4") == Action.HIT
        assert action_for(["4", "4"], "5") == Action.SPLIT
        assert action_for(["4", "4"], "6") == Action.SPLIT
        assert action_for(["4", "4"], "7") == Action.HIT

    def test_twos_and_threes(self):
        for rank in ("2", "3"):
            assert action_for([rank, rank], "2") == Action.SPLIT
            assert action_for([rank, rank], "7") == Action.SPLIT
            assert action_for([rank, rank], "8") == Action.HIT

    @pytest.mark.parametrize("dealer", UPCARDS)
    def test_fives_hit(self, dealer):
        """5,5 hits against every upcard instead of playing as hard 10."""
        advice = recommend(cards("5", "5"), card(dealer), ALL)
        assert advice.action == Action.HIT
        assert advice.reason == "Unlisted pair: hit."

    def test_pair_without_split_uses_totals(self):
        """When splitting is unavailable a pair plays as its total."""
        assert action_for(["8", "8"], "10", NO_SPLIT) == Action.HIT
        assert action_for(["8", "8"], "6", NO_SPLIT) == Action.STAND
        assert action_for(["5", "5"], "6", NO_SPLIT) == Action.DOUBLE
        assert action_for(["5", "5"], "6", NEITHER) == Action.HIT


class TestStrategyContract:
    """Tests for errors and properties of the engine."""

    def test_requires_two_cards(self):
        with pytest.raises(ValueError):
            recommend(cards("10"), card("6"), ALL)

    def test_requires_upcard(self):
        with pytest.raises(ValueError):
            recommend(cards("10", "6"), None, ALL)

    def test_tables_cover_every_upcard(self, basic_strategy):
        for total in range(4, 22):
            for dealer in range(2, 12):
                assert (total, dealer) in basic_strategy.hard_table
        for total in range(13, 22):
            for dealer in range(2, 12):
                assert (total, dealer) in basic_strategy.soft_table
        assert (12, 5) not in basic_strategy.soft_table

    @given(st.lists(card_strategy(), min_size=2, max_size=5), card_strategy(), st.booleans(), st.booleans())
    def test_deterministic(self, player, dealer, can_double, can_split):
        flags = ActionFlags(can_double=can_double, can_split=can_split)
        assert recommend(player, dealer, flags) == recommend(player, dealer, flags)

    @given(st.lists(card_strategy(), min_size=2, max_size=5), card_strategy(), st.booleans())
    def test_blocked_actions_never_recommended(self, player, dealer, can_split):
        advice = recommend(player, dealer, ActionFlags(can_double=False, can_split=can_split))
        assert advice.action != Action.DOUBLE
        if not can_split:
            assert advice.action != Action.SPLIT


class TestScoreAction:
    """Tests for scoring a chosen action."""

    def test_correct_choice(self):
        assessment = score_action(Action.STAND, cards("10", "7"), card("9"), ALL)
        assert assessment == Assessment(Action.STAND, Action.STAND, "Hard 17+ stand.")
        assert assessment.is_correct
        assert assessment.text == "Correct – Hard 17+ stand."

    def test_incorrect_choice(self):
        assessment = score_action(Action.STAND, cards("10", "6"), card("10"), ALL)
        assert not assessment.is_correct
        assert assessment.recommended == Action.HIT
        assert assessment.text == "Incorrect – Otherwise hit."

    def test_custom_strategy_instance(self):
        strategy = BasicStrategy()
        assert strategy.recommend(cards("A", "A"), card("10"), ALL).reason == "Split A,A always."
