"""
Table events.

The engine never prints. Everything a player should see at the table is
published here as a GameEvent carrying plain data, and a display sink
subscribed to the emitter decides how to show it.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5000


class EventType(Enum):
    """What happened at the table."""

    # Session
    GAME_STARTED = auto()
    GAME_ENDED = auto()
    PLAYER_SEATED = auto()
    PLAYER_LEFT = auto()

    # Shoe upkeep
    SHOE_REBUILT = auto()
    SHOE_RESHUFFLED = auto()

    # Opening a round
    ROUND_STARTED = auto()
    BET_PLACED = auto()
    CARD_DEALT = auto()
    PLAYER_BLACKJACK = auto()
    DEALER_BLACKJACK = auto()
    ACTION_PHASE_SKIPPED = auto()

    # Player decisions
    PLAYER_TURN_STARTED = auto()
    HAND_STARTED = auto()
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    SPLIT_ACES_STAND = auto()
    HAND_TWENTY_ONE = auto()
    PLAYER_BUSTS = auto()
    INVALID_ACTION = auto()

    # Dealer play
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # Closing a round
    HAND_SETTLED = auto()
    ROUND_ENDED = auto()


@dataclass(frozen=True)
class GameEvent:
    """One table event. Payload values are plain data, never display text."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# A display sink is any callable that accepts events
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Publishes table events to subscribed handlers.

    Handlers registered for a specific type run before catch-all handlers.
    The most recent events are kept so tests and late subscribers can look
    back at what happened.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._by_type: defaultdict[EventType, list[EventHandler]] = defaultdict(list)
        self._catch_all: list[EventHandler] = []
        self._recent: deque[GameEvent] = deque(maxlen=history_limit)

    def _handlers_for(self, event_type: EventType | None) -> list[EventHandler]:
        return self._catch_all if event_type is None else self._by_type[event_type]

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> EventHandler:
        """
        Register a handler.

        Args:
            handler: Called with every matching event
            event_type: Only deliver this type, or every event if None

        Returns:
            The handler, so this can be used as a decorator
        """
        self._handlers_for(event_type).append(handler)
        return handler

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers_for(event_type)
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        self._recent.append(event)
        logger.debug("%s", event)
        for handler in [*self._by_type.get(event.event_type, ()), *self._catch_all]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data, publish it and return it."""
        event = GameEvent(event_type, data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the recorded events, oldest first."""
        return list(self._recent)

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return the recorded events of one type."""
        return [e for e in self._recent if e.event_type == event_type]

    def clear_history(self) -> None:
        self._recent.clear()
