"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

from config import config
from core.cards import Card, Rank, Suit

RankStr = Literal["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
SuitStr = Literal["♠", "♥", "♦", "♣"]
ActionStr = Literal["HIT", "STAND", "DOUBLE", "SPLIT"]
HandTypeStr = Literal["pairs", "soft", "hard"]


# Card schemas
class CardIn(BaseModel):
    """Card in its external encoding."""

    rank: RankStr
    suit: SuitStr = "♠"

    def to_card(self) -> Card:
        return Card(Rank(self.rank), Suit(self.suit))


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int
    id: str = ""


# Core (stateless) schemas
class EvaluateRequest(BaseModel):
    """Request to evaluate a hand."""

    cards: list[CardIn] = Field(..., min_length=1)


class EvaluateResponse(BaseModel):
    """Hand evaluation result."""

    total: int
    soft: bool
    is_pair: bool
    is_blackjack: bool
    classification: Literal["pairs", "soft", "hard", "unknown"]


class RecommendRequest(BaseModel):
    """Request for a basic strategy recommendation. Both flags are required."""

    player_cards: list[CardIn] = Field(..., min_length=2)
    dealer_upcard: CardIn
    can_double: bool
    can_split: bool


class RecommendResponse(BaseModel):
    """Basic strategy recommendation."""

    action: ActionStr
    reason: str


class SettleRequest(BaseModel):
    """Request to settle one finished hand."""

    player_cards: list[CardIn] = Field(..., min_length=1)
    dealer_cards: list[CardIn] = Field(..., min_length=1)
    wager: int = Field(..., ge=0)


class SettleResponse(BaseModel):
    """Settlement of one hand."""

    outcome: Literal["blackjack", "push", "bust", "dealer_bust", "win", "lose"]
    delta: int
    text: str


class HandWager(BaseModel):
    """A finished player hand and its wager."""

    cards: list[CardIn] = Field(..., min_length=1)
    wager: int = Field(..., ge=0)


class SettleRoundRequest(BaseModel):
    """Request to settle all hands of a round."""

    hands: list[HandWager] = Field(..., min_length=1)
    dealer_cards: list[CardIn] = Field(..., min_length=1)


class SettleRoundResponse(BaseModel):
    """Settlement of a round."""

    results: list[SettleResponse]
    total_return: int
    total_wager: int
    net: int


# Game schemas
class NewGameRequest(BaseModel):
    """Options for a new training game."""

    allowed_types: list[HandTypeStr] = Field(
        default_factory=lambda: ["pairs", "soft", "hard"], min_length=1
    )


class BetRequest(BaseModel):
    """Request to place a bet."""

    amount: int = Field(default_factory=lambda: config.game.default_bet, ge=1, description="Bet amount")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand", "double", "split"]


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    is_finished: bool
    wager: int


class AssessmentResponse(BaseModel):
    """Feedback on the last player action."""

    action: ActionStr
    recommended: ActionStr
    correct: bool
    text: str


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    player_hands: list[HandResponse]
    current_hand_index: int
    dealer_hand: HandResponse
    dealer_showing: CardResponse | None
    bankroll: int
    can_hit: bool
    can_stand: bool
    can_double: bool
    can_split: bool
    last_assessment: AssessmentResponse | None = None
    last_round_messages: list[str] = []


class HistoryEntryResponse(BaseModel):
    """One settled round."""

    id: str
    timestamp: str
    dealer_cards: list[str]
    hands: list[dict]
    total_wager: int
    total_return: int
    net: int


class HistoryResponse(BaseModel):
    """Session history and decision accuracy."""

    rounds: list[HistoryEntryResponse]
    total_decisions: int
    correct_decisions: int
    accuracy: float
    net_result: int
    mistakes: list[dict]


# Training schemas
class StrategyDrillRequest(BaseModel):
    """Request for strategy drill."""

    allowed_types: list[HandTypeStr] = Field(
        default_factory=lambda: ["pairs", "soft", "hard"], min_length=1
    )
    seed: int | None = None


class StrategyDrillResponse(BaseModel):
    """Strategy drill hand. The answer is kept server-side until verified."""

    player_cards: list[CardResponse]
    player_value: int
    is_soft: bool
    is_pair: bool
    hand_type: HandTypeStr
    dealer_upcard: CardResponse


class StrategyVerifyRequest(BaseModel):
    """A chosen action for the last drill of this session."""

    action: ActionStr


class StrategyVerifyResponse(BaseModel):
    """Strategy drill verification result."""

    correct: bool
    correct_action: ActionStr
    reason: str
    text: str
