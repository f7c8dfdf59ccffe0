"""Training drill API endpoints."""

from random import Random
from fastapi import APIRouter, Depends, HTTPException
from typing import Annotated

from api.schemas import (
    CardResponse,
    StrategyDrillRequest,
    StrategyDrillResponse,
    StrategyVerifyRequest,
    StrategyVerifyResponse,
)
from api.session import SESSION_KEY_DRILL, load_session_value, require_session, save_session_value
from core.cards import Card, Deck
from core.hand import HandClass, classify_initial_hand, evaluate_hand, is_pair
from core.strategy import Action, ActionFlags, score_action

router = APIRouter()


def _card_response(card: Card) -> CardResponse:
    return CardResponse(rank=str(card.rank), suit=str(card.suit), value=card.value, id=card.uid)


def _deal_drill_hand(
    rng: Random,
    allowed: set[HandClass],
) -> tuple[list[Card], Card, HandClass]:
    """Deal a two-card hand of an allowed type plus a dealer upcard."""
    while True:
        deck = Deck(rng=rng)
        player_cards = [deck.draw(), deck.draw()]
        hand_type = classify_initial_hand(player_cards, ten_pairs_as_hard=True)
        if hand_type in allowed:
            return player_cards, deck.draw(), hand_type


@router.post("/strategy/drill")
async def strategy_drill(
    request: StrategyDrillRequest,
    session_id: Annotated[str, Depends(require_session)],
) -> StrategyDrillResponse:
    """Generate a first-decision strategy drill."""
    rng = Random(request.seed)
    allowed = {HandClass(t) for t in request.allowed_types}
    player_cards, dealer_upcard, hand_type = _deal_drill_hand(rng, allowed)

    # The answer stays server-side until verified
    await save_session_value(
        session_id,
        SESSION_KEY_DRILL,
        {
            "player_cards": [str(c) for c in player_cards],
            "dealer_upcard": str(dealer_upcard),
        },
    )

    value = evaluate_hand(player_cards)
    return StrategyDrillResponse(
        player_cards=[_card_response(c) for c in player_cards],
        player_value=value.total,
        is_soft=value.soft,
        is_pair=is_pair(player_cards),
        hand_type=hand_type.value,
        dealer_upcard=_card_response(dealer_upcard),
    )


@router.post("/strategy/verify")
async def verify_strategy(
    request: StrategyVerifyRequest,
    session_id: Annotated[str, Depends(require_session)],
) -> StrategyVerifyResponse:
    """Score the chosen action for the session's current drill."""
    drill = await load_session_value(session_id, SESSION_KEY_DRILL)
    if drill is None:
        raise HTTPException(status_code=404, detail="No strategy drill in progress")

    # A fresh two-card hand may always double or split
    assessment = score_action(
        Action[request.action],
        [Card.from_string(c) for c in drill["player_cards"]],
        Card.from_string(drill["dealer_upcard"]),
        ActionFlags(can_double=True, can_split=True),
    )
    return StrategyVerifyResponse(
        correct=assessment.is_correct,
        correct_action=assessment.recommended.name,
        reason=assessment.reason,
        text=assessment.text,
    )
