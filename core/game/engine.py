"""Blackjack training round engine with state machine."""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Callable, Iterable

from transitions import Machine

from core.cards import Card, Shoe
from core.hand import Hand, HandClass, classify_initial_hand
from core.settlement import settle_round
from core.strategy.basic import Action, ActionFlags, Assessment, Recommendation, recommend, score_action
from core.strategy.rules import RuleSet
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.history import DecisionRecord, HandResult, RoundRecord, TrainingHistory
from core.game.state import GameState

logger = logging.getLogger(__name__)

TRAINABLE_TYPES = frozenset({HandClass.PAIRS, HandClass.SOFT, HandClass.HARD})

# Two-card draws attempted before the deal filter gives up
FILTER_ATTEMPTS = 600


@dataclass
class PlayerState:
    """Player state during a round."""

    hands: list[Hand] = field(default_factory=list)
    current_hand_index: int = 0
    bankroll: int = 1000
    splits: int = 0

    @property
    def current_hand(self) -> Hand | None:
        """Get the current active hand."""
        if 0 <= self.current_hand_index < len(self.hands):
            return self.hands[self.current_hand_index]
        return None

    @property
    def total_wager(self) -> int:
        return sum(h.wager for h in self.hands)

    def add_hand(self, wager: int = 0) -> Hand:
        """Add a new hand."""
        hand = Hand(wager=wager)
        self.hands.append(hand)
        return hand

    def reset_hands(self) -> None:
        """Reset all hands for a new round."""
        self.hands.clear()
        self.current_hand_index = 0
        self.splits = 0


class TrainerGame:
    """
    Single-seat blackjack trainer using a state machine.

    Every player action is scored against basic strategy before it is
    applied. Communication happens through events and return values only.
    """

    # State machine states
    STATES = [s.value for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "place_bet", "source": "waiting_for_bet", "dest": "dealing"},
        {"trigger": "deal_cards", "source": "dealing", "dest": "player_turn"},
        {"trigger": "natural_dealt", "source": "dealing", "dest": "resolving"},
        {"trigger": "player_action", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "player_busts_all", "source": "player_turn", "dest": "resolving"},
        {"trigger": "dealer_plays", "source": "dealer_turn", "dest": "resolving"},
        {"trigger": "resolve", "source": "resolving", "dest": "round_complete"},
        {"trigger": "new_round", "source": "round_complete", "dest": "waiting_for_bet"},
        {"trigger": "end_game", "source": "*", "dest": "game_over"},
    ]

    def __init__(
        self,
        rules: RuleSet | None = None,
        initial_bankroll: int = 1000,
        allowed_types: Iterable[HandClass] | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new training game.

        Args:
            rules: Table rules (uses defaults if not provided)
            initial_bankroll: Starting bankroll
            allowed_types: Initial hand categories the deal filter may produce
            rng: Random number generator for reproducible games
        """
        self.rules = rules or RuleSet()
        self.shoe = Shoe(
            num_decks=self.rules.num_decks,
            reshuffle_threshold=self.rules.reshuffle_threshold,
            rng=rng,
        )

        self.allowed_types = self._validate_types(allowed_types)
        self.player = PlayerState(bankroll=initial_bankroll)
        self.dealer_hand = Hand()
        self.dealer_revealed = False
        self.events = EventEmitter()
        self.history = TrainingHistory()
        self.last_assessment: Assessment | None = None
        self.last_round: RoundRecord | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_for_bet",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @staticmethod
    def _validate_types(allowed_types: Iterable[HandClass] | None) -> frozenset[HandClass]:
        if allowed_types is None:
            return TRAINABLE_TYPES
        types = frozenset(allowed_types)
        if not types:
            raise ValueError("Select at least one hand type")
        if not types <= TRAINABLE_TYPES:
            raise ValueError(f"Untrainable hand types: {sorted(t.value for t in types - TRAINABLE_TYPES)}")
        return types

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState(self._machine_state)

    @property
    def dealer_upcard(self) -> Card | None:
        return self.dealer_hand.cards[0] if self.dealer_hand.cards else None

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def bet(self, amount: int) -> bool:
        """
        Place a bet to start a new round.

        The wager leaves the bankroll immediately; settlement pays back the
        full returned amount.

        Args:
            amount: Bet amount

        Returns:
            True if bet was accepted
        """
        if self.state != GameState.WAITING_FOR_BET:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message="Bankroll below table minimum" if self.state.is_terminal else "Cannot bet in current state",
                state=self.state.name,
            )
            return False

        if amount < self.rules.min_bet or amount > self.rules.max_bet:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message=f"Bet must be between {self.rules.min_bet} and {self.rules.max_bet}",
            )
            return False

        if amount > self.player.bankroll:
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=amount,
                available=self.player.bankroll,
            )
            return False

        # Reset for new round
        self.player.reset_hands()
        self.dealer_hand = Hand()
        self.dealer_revealed = False
        self.last_assessment = None

        self.player.bankroll -= amount
        self.player.add_hand(wager=amount)

        self.events.emit_new(EventType.BET_PLACED, amount=amount)
        self.place_bet()  # Trigger state transition

        return self._deal_initial_cards()

    def _deal_initial_cards(self) -> bool:
        """Deal the filtered player hand, then the dealer's two cards."""
        player_hand = self.player.current_hand
        if player_hand is None:
            return False

        for card in self._draw_filtered_pair():
            player_hand.add_card(card)
            self._emit_card(card, player_hand)
        self._deal_card_to_hand(self.dealer_hand)
        self._deal_card_to_hand(self.dealer_hand, face_up=False)

        self.events.emit_new(EventType.ROUND_STARTED)
        logger.info("Round started: player %s, dealer shows %s", player_hand, self.dealer_upcard)

        player_bj = player_hand.is_blackjack
        dealer_bj = self.dealer_hand.is_blackjack

        if player_bj:
            self.events.emit_new(EventType.PLAYER_BLACKJACK)
        if dealer_bj:
            self.events.emit_new(EventType.DEALER_BLACKJACK)

        # Naturals end the round before the player can act
        if player_bj or dealer_bj:
            player_hand.is_finished = True
            self.natural_dealt()
            self._reveal_dealer()
            return self._resolve_round()

        self.deal_cards()  # Move to player turn
        return True

    def _draw_filtered_pair(self) -> list[Card]:
        """Draw two-card hands until one matches the allowed hand types."""
        for _ in range(FILTER_ATTEMPTS):
            candidate = [self._draw(), self._draw()]
            if classify_initial_hand(candidate, ten_pairs_as_hard=True) in self.allowed_types:
                return candidate
        logger.warning("Deal filter found no %s hand; dealing unfiltered", sorted(t.value for t in self.allowed_types))
        return [self._draw(), self._draw()]

    def _draw(self) -> Card:
        generation = self.shoe.generation
        card = self.shoe.draw()
        if self.shoe.generation != generation:
            self.events.emit_new(EventType.SHOE_SHUFFLED, generation=self.shoe.generation)
        return card

    def _emit_card(self, card: Card, hand: Hand, face_up: bool = True) -> None:
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            card_id=card.uid if face_up else None,
            hand="dealer" if hand is self.dealer_hand else "player",
            hand_value=hand.value if face_up and hand is not self.dealer_hand else None,
        )

    def _deal_card_to_hand(self, hand: Hand, face_up: bool = True) -> Card:
        """Deal a card to a hand."""
        card = self._draw()
        hand.add_card(card)
        self._emit_card(card, hand, face_up)
        return card

    def _reveal_dealer(self) -> None:
        self.dealer_revealed = True
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.dealer_hand.cards[1]),
            hand_value=self.dealer_hand.value,
        )

    def action_flags(self, hand: Hand) -> ActionFlags:
        """
        Flags passed to the strategy engine for ``hand``.

        Split eligibility here includes ten-value pairs so the advice names
        the pair rule, even though the engine refuses to split them.
        """
        return ActionFlags(
            can_double=self._double_allowed(hand),
            can_split=self._split_affordable(hand),
        )

    def hint(self) -> Recommendation | None:
        """Basic strategy advice for the active hand."""
        hand = self.player.current_hand
        if self.state != GameState.PLAYER_TURN or hand is None:
            return None
        return recommend(hand.cards, self.dealer_upcard, self.action_flags(hand))

    def _assess(self, hand: Hand, action: Action) -> Assessment:
        """Score the chosen action before it changes the hand."""
        upcard = self.dealer_upcard
        if upcard is None:
            raise RuntimeError("No dealer upcard to assess against")
        assessment = score_action(action, hand.cards, upcard, self.action_flags(hand))
        self.last_assessment = assessment
        self.history.record_decision(
            DecisionRecord(
                action=action.name,
                recommended=assessment.recommended.name,
                reason=assessment.reason,
                is_correct=assessment.is_correct,
                player_total=hand.value,
                is_soft=hand.is_soft,
                is_pair=hand.is_pair,
                dealer_upcard="A" if upcard.is_ace else str(upcard.value),
            )
        )
        self.events.emit_new(
            EventType.ACTION_ASSESSED,
            action=action.name,
            correct=assessment.is_correct,
            text=assessment.text,
        )
        return assessment

    def _reject(self, action: str) -> bool:
        self.events.emit_new(EventType.INVALID_ACTION, message=f"Cannot {action}")
        return False

    def hit(self) -> bool:
        """Player hits (takes another card)."""
        if not self.can_hit:
            return self._reject("hit")

        hand = self.player.current_hand
        if hand is None:
            return self._reject("hit")
        self._assess(hand, Action.HIT)

        self._deal_card_to_hand(hand)
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=hand.value)

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=self.player.current_hand_index)

        if hand.value >= 21:
            hand.is_finished = True
            return self._advance_to_next_hand()

        self.player_action()  # Stay in player turn
        return True

    def stand(self) -> bool:
        """Player stands (keeps current hand)."""
        if not self.can_stand:
            return self._reject("stand")

        hand = self.player.current_hand
        if hand is None:
            return self._reject("stand")
        self._assess(hand, Action.STAND)

        hand.is_finished = True
        self.events.emit_new(EventType.PLAYER_STAND, hand_value=hand.value)
        return self._advance_to_next_hand()

    def double_down(self) -> bool:
        """Player doubles down: wager doubles once and exactly one card follows."""
        if self.state != GameState.PLAYER_TURN:
            return self._reject("double")

        hand = self.player.current_hand
        if hand is None or not self._double_allowed(hand):
            if hand is not None and hand.wager > self.player.bankroll:
                self.events.emit_new(EventType.INSUFFICIENT_FUNDS)
                return False
            return self._reject("double")

        self._assess(hand, Action.DOUBLE)

        self.player.bankroll -= hand.wager
        hand.wager *= 2
        hand.is_doubled = True

        self._deal_card_to_hand(hand)
        hand.is_finished = True
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_value=hand.value,
            new_wager=hand.wager,
        )

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=self.player.current_hand_index)

        return self._advance_to_next_hand()

    def split(self) -> bool:
        """Player splits a pair into two hands, each carrying the original wager."""
        if not self.can_split:
            hand = self.player.current_hand
            if hand is not None and hand.is_pair and hand.wager > self.player.bankroll:
                self.events.emit_new(EventType.INSUFFICIENT_FUNDS)
                return False
            return self._reject("split")

        index = self.player.current_hand_index
        hand = self.player.hands[index]
        self._assess(hand, Action.SPLIT)

        self.player.bankroll -= hand.wager
        self.player.splits += 1

        children = []
        for card in hand.cards:
            child = Hand(
                cards=[card],
                wager=hand.wager,
                is_split_hand=True,
                is_split_aces=card.is_ace,
            )
            self._deal_card_to_hand(child)
            # Split aces receive exactly one card
            if child.is_split_aces and not self.rules.hit_split_aces:
                child.is_finished = True
            children.append(child)

        self.player.hands[index:index + 1] = children

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand1_value=children[0].value,
            hand2_value=children[1].value,
        )
        return self._advance_to_next_hand()

    def _advance_to_next_hand(self) -> bool:
        """Move to the next unfinished hand or to the dealer."""
        hands = self.player.hands
        index = self.player.current_hand_index
        while index < len(hands) and hands[index].is_finished:
            index += 1
        self.player.current_hand_index = index

        if index < len(hands):
            self.player_action()
            return True

        if all(h.is_busted for h in hands):
            self.player_busts_all()
            self._reveal_dealer()
            return self._resolve_round()

        self.player_done()
        return self._play_dealer()

    def _play_dealer(self) -> bool:
        """Dealer reveals and draws to 17."""
        self._reveal_dealer()

        while self._dealer_should_hit():
            self._deal_card_to_hand(self.dealer_hand)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self.dealer_plays()
        return self._resolve_round()

    def _dealer_should_hit(self) -> bool:
        """Determine if dealer should hit."""
        value = self.dealer_hand.value
        if value < 17:
            return True
        if value == 17 and self.dealer_hand.is_soft and self.rules.dealer_hits_soft_17:
            return True
        return False

    def _resolve_round(self) -> bool:
        """Settle every hand, pay the bankroll and record the round."""
        settlement = settle_round(self.player.hands, self.dealer_hand.cards)
        self.player.bankroll += settlement.total_return

        for i, result in enumerate(settlement.results):
            self.events.emit_new(
                EventType.HAND_SETTLED,
                hand_index=i,
                outcome=result.outcome.value,
                delta=result.delta,
                text=result.describe(),
            )

        self.last_round = self.history.record_round(
            RoundRecord(
                dealer_cards=[str(c) for c in self.dealer_hand.cards],
                hands=[
                    HandResult(
                        cards=[str(c) for c in hand.cards],
                        wager=result.wager,
                        outcome=result.outcome.value,
                        delta=result.delta,
                        text=result.describe(),
                    )
                    for hand, result in zip(self.player.hands, settlement.results)
                ],
                total_wager=settlement.total_wager,
                total_return=settlement.total_return,
                net=settlement.net,
            )
        )

        self.events.emit_new(
            EventType.ROUND_ENDED,
            result=settlement.net,
            bankroll=self.player.bankroll,
        )
        logger.info(
            "Round settled: net %+d, bankroll %d",
            settlement.net,
            self.player.bankroll,
        )

        self.resolve()

        if self.player.bankroll < self.rules.min_bet:
            self.events.emit_new(EventType.GAME_ENDED, reason="bankrupt")
            self.end_game()
            return True

        self.new_round()
        return True

    def _double_allowed(self, hand: Hand) -> bool:
        if len(hand.cards) != 2 or hand.is_doubled or hand.is_finished:
            return False
        if hand.is_split_aces and not self.rules.hit_split_aces:
            return False
        if hand.is_split_hand and not self.rules.double_after_split:
            return False
        return hand.wager <= self.player.bankroll

    def _split_affordable(self, hand: Hand) -> bool:
        return (
            hand.is_pair
            and not hand.is_finished
            and self.player.splits < self.rules.max_splits
            and hand.wager <= self.player.bankroll
        )

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        if self.state != GameState.PLAYER_TURN:
            return False
        hand = self.player.current_hand
        if hand is None or hand.is_finished:
            return False
        if hand.is_split_aces and not self.rules.hit_split_aces:
            return False
        return hand.value < 21

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        if self.state != GameState.PLAYER_TURN:
            return False
        hand = self.player.current_hand
        return hand is not None and not hand.is_finished

    @property
    def can_double(self) -> bool:
        """Check if doubling is allowed."""
        if self.state != GameState.PLAYER_TURN:
            return False
        hand = self.player.current_hand
        return hand is not None and self._double_allowed(hand)

    @property
    def can_split(self) -> bool:
        """Check if splitting is allowed. Ten-value pairs are never split."""
        if self.state != GameState.PLAYER_TURN:
            return False
        hand = self.player.current_hand
        return hand is not None and not hand.is_ten_pair and self._split_affordable(hand)
