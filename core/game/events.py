"""Events published by the training round engine."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Things a trainer front end may want to animate or report."""

    # Round flow
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    GAME_ENDED = auto()
    BET_PLACED = auto()

    # Shoe
    CARD_DEALT = auto()
    SHOE_SHUFFLED = auto()

    # Player decisions, each scored before it is applied
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    ACTION_ASSESSED = auto()

    # Dealer
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()

    # Results
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    HAND_SETTLED = auto()

    # Rejected requests
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()


REJECTIONS = frozenset({EventType.INVALID_ACTION, EventType.INSUFFICIENT_FUNDS})


@dataclass(frozen=True)
class GameEvent:
    """One engine event and its payload."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_rejection(self) -> bool:
        return self.event_type in REJECTIONS

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """Dispatches events to handlers registered per type, or for every type under ``None``."""

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def emit(self, event: GameEvent) -> None:
        """Deliver to type-specific handlers first, then to catch-all ones."""
        if event.is_rejection:
            logger.info("Rejected request: %s", event)
        for handler in self._handlers.get(event.event_type, []) + self._handlers.get(None, []):
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data and emit it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event
