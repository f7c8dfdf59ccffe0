"""Game API endpoints."""

import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Header
from typing import Annotated, Any

from api.schemas import (
    ActionRequest,
    AssessmentResponse,
    BetRequest,
    CardResponse,
    GameStateResponse,
    HandResponse,
    HistoryEntryResponse,
    HistoryResponse,
    NewGameRequest,
    RecommendResponse,
)
from api.session import (
    SESSION_KEY_GAME,
    create_session,
    extract_session_id,
    get_session_store,
    load_session_value,
    require_session,
    save_session_value,
)
from config import config
from core.cards import Card, Rank, ShoeState, Suit
from core.game import GameState, TrainerGame, TrainingHistory
from core.hand import Hand, HandClass
from core.strategy import Action, Assessment, RuleSet

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory game cache (for performance, backed by session store)
_games: dict[str, TrainerGame] = {}


def _default_rules() -> RuleSet:
    return RuleSet(
        num_decks=config.game.num_decks,
        reshuffle_threshold=config.game.reshuffle_threshold,
        min_bet=config.game.min_bet,
        max_bet=config.game.max_bet,
    )


def _serialize_card(card: Card) -> dict[str, Any]:
    """Serialize a card to a dict."""
    return {
        "rank": card.rank.value,
        "suit": card.suit.value,
        "deck": card.deck_index,
        "uid": card.uid,
    }


def _deserialize_card(data: dict[str, Any]) -> Card:
    """Deserialize a card from a dict."""
    return Card(
        Rank(data["rank"]),
        Suit(data["suit"]),
        deck_index=data.get("deck", 0),
        uid=data.get("uid", ""),
    )


def _serialize_hand(hand: Hand) -> dict[str, Any]:
    """Serialize a hand to a dict."""
    return {
        "cards": [_serialize_card(c) for c in hand.cards],
        "wager": hand.wager,
        "is_doubled": hand.is_doubled,
        "is_split_hand": hand.is_split_hand,
        "is_split_aces": hand.is_split_aces,
        "is_finished": hand.is_finished,
    }


def _deserialize_hand(data: dict[str, Any]) -> Hand:
    """Deserialize a hand from a dict."""
    return Hand(
        cards=[_deserialize_card(c) for c in data["cards"]],
        wager=data["wager"],
        is_doubled=data["is_doubled"],
        is_split_hand=data["is_split_hand"],
        is_split_aces=data["is_split_aces"],
        is_finished=data["is_finished"],
    )


def _serialize_game(game: TrainerGame) -> dict[str, Any]:
    """Serialize game state for session storage."""
    shoe = game.shoe.snapshot()
    assessment = game.last_assessment
    return {
        "state": game._machine_state,
        "bankroll": game.player.bankroll,
        "current_hand_index": game.player.current_hand_index,
        "splits": game.player.splits,
        "allowed_types": sorted(t.value for t in game.allowed_types),
        "shoe": {
            "cards": [_serialize_card(c) for c in shoe.cards],
            "num_decks": shoe.num_decks,
            "reshuffle_threshold": shoe.reshuffle_threshold,
            "generation": shoe.generation,
        },
        "player_hands": [_serialize_hand(h) for h in game.player.hands],
        "dealer_hand": _serialize_hand(game.dealer_hand),
        "dealer_revealed": game.dealer_revealed,
        "last_assessment": (
            {
                "chosen": assessment.chosen.name,
                "recommended": assessment.recommended.name,
                "reason": assessment.reason,
            }
            if assessment
            else None
        ),
        "history": game.history.to_dict(),
        "rules": asdict(game.rules),
    }


def _deserialize_game(data: dict[str, Any]) -> TrainerGame:
    """Restore game from session data."""
    game = TrainerGame(
        rules=RuleSet(**data["rules"]),
        initial_bankroll=data["bankroll"],
        allowed_types=[HandClass(t) for t in data["allowed_types"]],
    )

    # Restore state machine state
    game._machine_state = data["state"]

    # Restore player state
    game.player.current_hand_index = data["current_hand_index"]
    game.player.splits = data["splits"]
    game.player.hands = [_deserialize_hand(h) for h in data["player_hands"]]

    # Restore dealer hand
    game.dealer_hand = _deserialize_hand(data["dealer_hand"])
    game.dealer_revealed = data["dealer_revealed"]

    # Restore shoe cards
    shoe = data["shoe"]
    game.shoe.restore(
        ShoeState(
            cards=tuple(_deserialize_card(c) for c in shoe["cards"]),
            num_decks=shoe["num_decks"],
            reshuffle_threshold=shoe["reshuffle_threshold"],
            generation=shoe["generation"],
        )
    )

    if data["last_assessment"]:
        game.last_assessment = Assessment(
            chosen=Action[data["last_assessment"]["chosen"]],
            recommended=Action[data["last_assessment"]["recommended"]],
            reason=data["last_assessment"]["reason"],
        )
    game.history = TrainingHistory.from_dict(data["history"])
    if game.history.rounds:
        game.last_round = game.history.rounds[0]

    return game


async def _load_game(session_id: str) -> TrainerGame | None:
    """Load game from session store."""
    data = await load_session_value(session_id, SESSION_KEY_GAME)
    return _deserialize_game(data) if data else None


async def _save_game(session_id: str, game: TrainerGame) -> None:
    """Save game to session store."""
    await save_session_value(session_id, SESSION_KEY_GAME, _serialize_game(game))


def _new_game(allowed_types: list[str] | None = None) -> TrainerGame:
    return TrainerGame(
        rules=_default_rules(),
        initial_bankroll=config.game.starting_bankroll,
        allowed_types=[HandClass(t) for t in allowed_types] if allowed_types else None,
    )


async def _evict_expired_games() -> None:
    """Drop cached games whose session has expired from the store."""
    store = await get_session_store()
    expired = [sid for sid in _games if not await store.exists(sid)]
    for sid in expired:
        del _games[sid]
    if expired:
        logger.debug("Evicted %d cached games", len(expired))


async def _get_game(session_id: str) -> TrainerGame:
    """Get or create a game for the session."""
    store = await get_session_store()
    if not await store.exists(session_id):
        _games.pop(session_id, None)
    elif session_id in _games:
        return _games[session_id]

    # Try to load from session store
    game = await _load_game(session_id)
    if game is not None:
        _games[session_id] = game
        return game

    # Create new game
    game = _new_game()
    _games[session_id] = game
    await _save_game(session_id, game)
    return game


def _card_to_response(card: Card) -> CardResponse:
    return CardResponse(
        rank=str(card.rank),
        suit=str(card.suit),
        value=card.value,
        id=card.uid,
    )


def _hand_to_response(hand: Hand) -> HandResponse:
    """Convert a Hand to HandResponse."""
    return HandResponse(
        cards=[_card_to_response(c) for c in hand.cards],
        value=hand.value if hand.cards else 0,
        is_soft=hand.is_soft if hand.cards else False,
        is_blackjack=hand.is_blackjack,
        is_busted=hand.is_busted,
        is_finished=hand.is_finished,
        wager=hand.wager,
    )


def _game_state_response(game: TrainerGame) -> GameStateResponse:
    """Convert game state to response. The hole card stays hidden until revealed."""
    dealer_showing = None
    if game.dealer_upcard is not None:
        dealer_showing = _card_to_response(game.dealer_upcard)

    dealer_hand = game.dealer_hand
    if not game.dealer_revealed and dealer_hand.cards:
        dealer_hand = Hand(cards=dealer_hand.cards[:1])

    assessment = None
    if game.last_assessment is not None:
        assessment = AssessmentResponse(
            action=game.last_assessment.chosen.name,
            recommended=game.last_assessment.recommended.name,
            correct=game.last_assessment.is_correct,
            text=game.last_assessment.text,
        )

    messages = []
    if game.last_round is not None and game.state != GameState.PLAYER_TURN:
        messages = [h.text for h in game.last_round.hands]

    return GameStateResponse(
        state=game.state.name,
        player_hands=[_hand_to_response(h) for h in game.player.hands],
        current_hand_index=game.player.current_hand_index,
        dealer_hand=_hand_to_response(dealer_hand),
        dealer_showing=dealer_showing,
        bankroll=game.player.bankroll,
        can_hit=game.can_hit,
        can_stand=game.can_stand,
        can_double=game.can_double,
        can_split=game.can_split,
        last_assessment=assessment,
        last_round_messages=messages,
    )


@router.post("/new")
async def new_game(
    request: NewGameRequest | None = None,
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new game session."""
    if session_id is None or extract_session_id(session_id) is None:
        session_id = await create_session()

    await _evict_expired_games()
    allowed = request.allowed_types if request else None
    game = _new_game(allowed)
    _games[session_id] = game
    await _save_game(session_id, game)
    logger.info("New game for session %s", session_id[:8])

    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Depends(require_session)],
) -> GameStateResponse:
    """Get current game state."""
    game = await _get_game(session_id)
    return _game_state_response(game)


@router.post("/bet")
async def place_bet(
    request: BetRequest,
    session_id: Annotated[str, Depends(require_session)],
) -> GameStateResponse:
    """Place a bet and deal cards."""
    game = await _get_game(session_id)

    if not game.bet(request.amount):
        raise HTTPException(status_code=400, detail="Invalid bet")

    await _save_game(session_id, game)
    return _game_state_response(game)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Depends(require_session)],
) -> GameStateResponse:
    """Execute a player action."""
    game = await _get_game(session_id)

    actions = {
        "hit": game.hit,
        "stand": game.stand,
        "double": game.double_down,
        "split": game.split,
    }

    if not actions[request.action]():
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    await _save_game(session_id, game)
    return _game_state_response(game)


@router.get("/hint")
async def get_hint(
    session_id: Annotated[str, Depends(require_session)],
) -> RecommendResponse:
    """Basic strategy advice for the active hand."""
    game = await _get_game(session_id)
    advice = game.hint()
    if advice is None:
        raise HTTPException(status_code=400, detail="No hand to advise on")
    return RecommendResponse(action=advice.action.name, reason=advice.reason)


@router.get("/history")
async def get_history(
    session_id: Annotated[str, Depends(require_session)],
) -> HistoryResponse:
    """Settled rounds and decision accuracy for the session."""
    game = await _get_game(session_id)
    history = game.history
    return HistoryResponse(
        rounds=[
            HistoryEntryResponse(
                id=r.id,
                timestamp=r.timestamp,
                dealer_cards=r.dealer_cards,
                hands=[asdict(h) for h in r.hands],
                total_wager=r.total_wager,
                total_return=r.total_return,
                net=r.net,
            )
            for r in history.rounds
        ],
        total_decisions=history.total_decisions,
        correct_decisions=history.correct_decisions,
        accuracy=history.accuracy,
        net_result=history.net_result,
        mistakes=[asdict(m) for m in history.mistake_breakdown()],
    )
