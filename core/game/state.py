"""Round states of the training engine."""

from enum import Enum


class GameState(Enum):
    """
    States of one trainer seat, valued by their state machine names.

    A round runs WAITING_FOR_BET, DEALING, PLAYER_TURN, DEALER_TURN,
    RESOLVING, ROUND_COMPLETE and back to WAITING_FOR_BET. Naturals jump
    from DEALING to RESOLVING, as does a turn where every hand busted.
    GAME_OVER is terminal.
    """

    WAITING_FOR_BET = "waiting_for_bet"
    DEALING = "dealing"
    PLAYER_TURN = "player_turn"
    DEALER_TURN = "dealer_turn"
    RESOLVING = "resolving"
    ROUND_COMPLETE = "round_complete"
    GAME_OVER = "game_over"

    @property
    def is_terminal(self) -> bool:
        return self is GameState.GAME_OVER

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
