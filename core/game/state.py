"""Round phase and hand state enumerations."""

from enum import Enum, auto


class RoundPhase(Enum):
    """
    Table state machine states.

    Flow: WAITING_FOR_BETS → DEALING → PLAYER_TURNS → DEALER_TURN → SETTLING → ROUND_COMPLETE
    """

    WAITING_FOR_BETS = auto()
    DEALING = auto()
    PLAYER_TURNS = auto()
    DEALER_TURN = auto()
    SETTLING = auto()
    ROUND_COMPLETE = auto()

    # Terminal: everybody left or the cards ran out
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class HandState(Enum):
    """
    Per-hand action states.

    A hand waits for actions until it busts, stands, doubles, or is a
    split ace, all of which are terminal.
    """

    AWAITING_ACTION = auto()
    BUSTED = auto()
    STANDING = auto()
    DOUBLED = auto()
    AUTO_STANDING = auto()

    @property
    def is_terminal(self) -> bool:
        return self != HandState.AWAITING_ACTION

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
