"""Game engine and state management."""

from core.game.actions import Action, ActionEngine, HandSummary, HandTurn
from core.game.events import EventEmitter, GameEvent, EventType
from core.game.settlement import HandResult, Outcome
from core.game.state import HandState, RoundPhase
from core.game.engine import BlackjackTable, RoundSummary

__all__ = [
    "Action",
    "ActionEngine",
    "HandSummary",
    "HandTurn",
    "EventEmitter",
    "GameEvent",
    "EventType",
    "HandResult",
    "Outcome",
    "HandState",
    "RoundPhase",
    "BlackjackTable",
    "RoundSummary",
]
