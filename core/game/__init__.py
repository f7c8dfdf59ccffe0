"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameState
from core.game.history import DecisionRecord, RoundRecord, TrainingHistory
from core.game.engine import TrainerGame, PlayerState

__all__ = [
    "GameEvent",
    "EventType",
    "GameState",
    "DecisionRecord",
    "RoundRecord",
    "TrainingHistory",
    "TrainerGame",
    "PlayerState",
]
