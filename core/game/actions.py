"""Player actions and the per-hand action engine."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from transitions import Machine

from core.cards import Card, Shoe
from core.errors import InvalidAction
from core.game.events import EventEmitter, EventType
from core.game.state import HandState
from core.hand import BLACKJACK, Hand
from core.player import Player

logger = logging.getLogger(__name__)


class Action(Enum):
    """Player decisions, keyed by their console shortcut."""

    HIT = "H"
    STAND = "S"
    DOUBLE = "D"
    SPLIT = "P"

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class HandSummary:
    """What the action collaborator is shown before choosing."""

    player_name: str
    hand_index: int
    cards: tuple[Card, ...]
    score: int
    bet: int
    chips: int
    is_split_result: bool
    dealer_upcard: Card | None = None

    @classmethod
    def of(
        cls,
        player: Player,
        hand_index: int,
        hand: Hand,
        dealer_upcard: Card | None = None,
    ) -> "HandSummary":
        return cls(
            player_name=player.name,
            hand_index=hand_index,
            cards=tuple(hand.cards),
            score=hand.value,
            bet=hand.bet,
            chips=player.chips,
            is_split_result=hand.is_split_result,
            dealer_upcard=dealer_upcard,
        )


ActionInput = Callable[[HandSummary, frozenset[Action]], Action]


class HandTurn:
    """
    A hand being played, with its action state machine.

    Hit and split keep the hand awaiting action; every other trigger
    leads to a terminal state.
    """

    STATES = [s.name.lower() for s in HandState]

    TRANSITIONS = [
        {"trigger": "take_card", "source": "awaiting_action", "dest": "awaiting_action"},
        {"trigger": "split_pair", "source": "awaiting_action", "dest": "awaiting_action"},
        {"trigger": "bust", "source": "awaiting_action", "dest": "busted"},
        {"trigger": "stand", "source": "awaiting_action", "dest": "standing"},
        {"trigger": "double_down", "source": "awaiting_action", "dest": "doubled"},
        {"trigger": "auto_stand", "source": "awaiting_action", "dest": "auto_standing"},
    ]

    def __init__(self, hand: Hand) -> None:
        self.hand = hand
        self.has_split = False
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="awaiting_action",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> HandState:
        """Get current hand state as enum."""
        return HandState[self._machine_state.upper()]  # type: ignore

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def __repr__(self) -> str:
        return f"HandTurn({self.hand!r}, state={self.state.name})"


class ActionEngine:
    """
    Drives hit, stand, double and split for one player's hands.

    Hands are played by position. A split inserts the new hand directly
    after the one being played, so it comes up next.
    """

    def __init__(self, shoe: Shoe, events: EventEmitter) -> None:
        self.shoe = shoe
        self.events = events

    def available_actions(self, player: Player, turn: HandTurn) -> frozenset[Action]:
        """Return the actions that can be taken on a hand right now."""
        if turn.is_terminal:
            return frozenset()
        actions = {Action.HIT, Action.STAND}
        if self._double_refusal(player, turn) is None:
            actions.add(Action.DOUBLE)
        if self._split_refusal(player, turn) is None:
            actions.add(Action.SPLIT)
        return frozenset(actions)

    def _double_refusal(self, player: Player, turn: HandTurn) -> str | None:
        hand = turn.hand
        if len(hand) != 2:
            return "double down is only allowed on the first two cards"
        if not player.can_afford(hand.bet):
            return "not enough chips to double down"
        return None

    def _split_refusal(self, player: Player, turn: HandTurn) -> str | None:
        hand = turn.hand
        if not hand.is_pair:
            return "split needs exactly two cards of the same rank"
        if hand.is_split_result or turn.has_split:
            return "a hand can only be split once"
        if not player.can_afford(hand.bet):
            return "not enough chips to split"
        return None

    def resolve_on_entry(self, player: Player, turns: list[HandTurn], index: int) -> bool:
        """
        Settle a hand that needs no decision: bust or exactly 21.

        Returns:
            True if the hand reached a terminal state
        """
        turn = turns[index]
        value = turn.hand.value
        if value > BLACKJACK:
            turn.bust()
            self.events.emit_new(
                EventType.PLAYER_BUSTS,
                player=player.name,
                hand_index=index,
                hand_value=value,
            )
            return True
        if value == BLACKJACK:
            turn.stand()
            self.events.emit_new(
                EventType.HAND_TWENTY_ONE,
                player=player.name,
                hand_index=index,
                natural=turn.hand.is_natural,
            )
            return True
        return False

    def apply(
        self,
        player: Player,
        turns: list[HandTurn],
        index: int,
        action: Action,
    ) -> None:
        """
        Apply one action to the hand at ``turns[index]``.

        Raises:
            InvalidAction: if the action's precondition does not hold.
                Neither the hand nor the chips are touched in that case.
        """
        turn = turns[index]
        if turn.is_terminal:
            raise InvalidAction(action, f"hand is already {turn.state}")

        if action == Action.HIT:
            self._hit(player, turns, index)
        elif action == Action.STAND:
            turn.stand()
            self.events.emit_new(
                EventType.PLAYER_STAND,
                player=player.name,
                hand_index=index,
                hand_value=turn.hand.value,
            )
        elif action == Action.DOUBLE:
            self._double(player, turns, index)
        elif action == Action.SPLIT:
            self._split(player, turns, index)
        else:
            raise InvalidAction(action, "unknown action")

    def _deal_to(self, player: Player, hand: Hand, index: int) -> Card:
        card = self.shoe.deal()
        hand.add_card(card)
        logger.debug("Dealt %s to %s hand %d", card, player.name, index)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            hand=player.name,
            dealer=False,
            hand_index=index,
            hand_value=hand.value,
        )
        return card

    def _hit(self, player: Player, turns: list[HandTurn], index: int) -> None:
        turn = turns[index]
        self._deal_to(player, turn.hand, index)
        turn.take_card()
        self.events.emit_new(
            EventType.PLAYER_HIT,
            player=player.name,
            hand_index=index,
            hand_value=turn.hand.value,
        )
        self.resolve_on_entry(player, turns, index)

    def _double(self, player: Player, turns: list[HandTurn], index: int) -> None:
        turn = turns[index]
        refusal = self._double_refusal(player, turn)
        if refusal is not None:
            raise InvalidAction(Action.DOUBLE, refusal)

        hand = turn.hand
        player.chips -= hand.bet
        hand.bet *= 2
        hand.is_doubled = True
        logger.info("%s doubles down, bet now %d", player.name, hand.bet)

        self._deal_to(player, hand, index)
        turn.double_down()
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            player=player.name,
            hand_index=index,
            hand_value=hand.value,
            new_bet=hand.bet,
        )
        if hand.is_busted:
            self.events.emit_new(
                EventType.PLAYER_BUSTS,
                player=player.name,
                hand_index=index,
                hand_value=hand.value,
            )

    def _split(self, player: Player, turns: list[HandTurn], index: int) -> None:
        turn = turns[index]
        refusal = self._split_refusal(player, turn)
        if refusal is not None:
            raise InvalidAction(Action.SPLIT, refusal)

        hand = turn.hand
        split_aces = hand.cards[0].is_ace
        player.chips -= hand.bet
        sibling = Hand(bet=hand.bet, is_split_result=True)
        sibling.add_card(hand.cards.pop(1))
        logger.info("%s splits %s, extra bet %d", player.name, sibling.cards[0].rank, hand.bet)

        player.hands.insert(index + 1, sibling)
        sibling_turn = HandTurn(sibling)
        turns.insert(index + 1, sibling_turn)
        turn.has_split = True

        self._deal_to(player, hand, index)
        self._deal_to(player, sibling, index + 1)
        turn.split_pair()
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            player=player.name,
            hand_index=index,
            hand1_value=hand.value,
            hand2_value=sibling.value,
            bet=hand.bet,
        )

        if split_aces:
            turn.auto_stand()
            sibling_turn.auto_stand()
            self.events.emit_new(
                EventType.SPLIT_ACES_STAND,
                player=player.name,
                hand_indexes=[index, index + 1],
            )

    def play_hand(
        self,
        player: Player,
        turns: list[HandTurn],
        index: int,
        action_input: ActionInput,
        dealer_upcard: Card | None = None,
    ) -> HandState:
        """
        Play the hand at ``turns[index]`` until it is finished.

        Unavailable choices are reported with an INVALID_ACTION event and
        the collaborator is asked again.
        """
        turn = turns[index]
        if turn.is_terminal:
            return turn.state

        self.events.emit_new(
            EventType.HAND_STARTED,
            player=player.name,
            hand_index=index,
            bet=turn.hand.bet,
            cards=[str(c) for c in turn.hand.cards],
            hand_value=turn.hand.value,
        )

        while not self.resolve_on_entry(player, turns, index):
            available = self.available_actions(player, turn)
            summary = HandSummary.of(player, index, turn.hand, dealer_upcard)
            action = action_input(summary, available)
            try:
                if action not in available:
                    raise InvalidAction(action, "action is not available for this hand")
                self.apply(player, turns, index, action)
            except InvalidAction as exc:
                logger.debug("Rejected %s for %s: %s", action, player.name, exc.reason)
                self.events.emit_new(
                    EventType.INVALID_ACTION,
                    player=player.name,
                    hand_index=index,
                    action=str(action),
                    message=exc.reason,
                )
            if turn.is_terminal:
                break

        return turn.state

    def play_player(
        self,
        player: Player,
        action_input: ActionInput,
        dealer_upcard: Card | None = None,
    ) -> list[HandTurn]:
        """Play every hand a player holds, including hands created by splits."""
        self.events.emit_new(
            EventType.PLAYER_TURN_STARTED,
            player=player.name,
            chips=player.chips,
        )
        turns = [HandTurn(hand) for hand in player.hands]
        index = 0
        while index < len(turns):
            self.play_hand(player, turns, index, action_input, dealer_upcard)
            index += 1
        return turns
