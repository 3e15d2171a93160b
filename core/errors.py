"""Exceptions raised by the blackjack engine."""

from typing import Any


class BlackjackError(Exception):
    """Base class for engine errors."""


class OutOfCards(BlackjackError):
    """Neither the shoe nor the discard pile holds a card to deal.

    Fatal for the game session: the round orchestrator ends the session
    when it sees this.
    """

    def __init__(self, message: str = "No cards left to deal or shuffle") -> None:
        super().__init__(message)


class InvalidAction(BlackjackError):
    """An action was requested outside its precondition.

    Recoverable. Nothing was mutated; the caller should ask again.
    """

    def __init__(self, action: Any, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot {action}: {reason}")


class InvalidBet(BlackjackError, ValueError):
    """The bet collaborator broke its contract (bet outside [min_bet, chips])."""

    def __init__(self, name: str, amount: int, chips: int, minimum: int = 1) -> None:
        self.name = name
        self.amount = amount
        self.chips = chips
        self.minimum = minimum
        super().__init__(
            f"Bet of {amount} for {name} is outside the allowed range {minimum}..{chips}"
        )
