"""Stateless endpoints over the pure strategy core."""

from fastapi import APIRouter

from api.schemas import (
    EvaluateRequest,
    EvaluateResponse,
    RecommendRequest,
    RecommendResponse,
    SettleRequest,
    SettleResponse,
    SettleRoundRequest,
    SettleRoundResponse,
)
from core.hand import classify_initial_hand, evaluate_hand, is_blackjack, is_pair
from core.settlement import Settlement, settle, settle_round
from core.strategy import ActionFlags, recommend

router = APIRouter()


def _settlement_response(result: Settlement) -> SettleResponse:
    return SettleResponse(
        outcome=result.outcome.value,
        delta=result.delta,
        text=result.describe(),
    )


@router.post("/evaluate")
async def evaluate(request: EvaluateRequest) -> EvaluateResponse:
    """Total, softness and classification of a hand."""
    cards = [c.to_card() for c in request.cards]
    value = evaluate_hand(cards)
    return EvaluateResponse(
        total=value.total,
        soft=value.soft,
        is_pair=is_pair(cards),
        is_blackjack=is_blackjack(cards),
        classification=classify_initial_hand(cards).value,
    )


@router.post("/recommend")
async def get_recommendation(request: RecommendRequest) -> RecommendResponse:
    """Basic strategy recommendation for a hand against a dealer upcard."""
    advice = recommend(
        [c.to_card() for c in request.player_cards],
        request.dealer_upcard.to_card(),
        ActionFlags(can_double=request.can_double, can_split=request.can_split),
    )
    return RecommendResponse(action=advice.action.name, reason=advice.reason)


@router.post("/settle")
async def settle_hand(request: SettleRequest) -> SettleResponse:
    """Settle one finished hand."""
    result = settle(
        [c.to_card() for c in request.player_cards],
        [c.to_card() for c in request.dealer_cards],
        request.wager,
    )
    return _settlement_response(result)


@router.post("/settle-round")
async def settle_hands(request: SettleRoundRequest) -> SettleRoundResponse:
    """Settle every hand of a round (e.g. after a split) and sum the results."""
    round_result = settle_round(
        [([c.to_card() for c in h.cards], h.wager) for h in request.hands],
        [c.to_card() for c in request.dealer_cards],
    )
    return SettleRoundResponse(
        results=[_settlement_response(r) for r in round_result.results],
        total_return=round_result.total_return,
        total_wager=round_result.total_wager,
        net=round_result.net,
    )
