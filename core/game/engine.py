"""Blackjack table: the round orchestrator with its state machine."""

import logging
from collections import deque
from dataclasses import dataclass, field
from random import Random
from typing import Callable

from transitions import Machine, MachineError

from config import GameConfig, config
from core.cards import Card, Shoe
from core.errors import OutOfCards
from core.game.actions import ActionEngine, ActionInput
from core.game.dealer import play_dealer
from core.game.events import EventEmitter, EventHandler, EventType
from core.game.settlement import HandResult, settle_round
from core.game.state import RoundPhase
from core.hand import Hand
from core.player import Dealer, Player

logger = logging.getLogger(__name__)

# Bet collaborator: (player name, current chips) -> bet in 1..chips
BetInput = Callable[[str, int], int]


@dataclass
class RoundSummary:
    """What happened in one round."""

    round_number: int
    dealer_score: int
    dealer_natural: bool
    results: list[HandResult] = field(default_factory=list)
    standings: list[tuple[str, int, int]] = field(default_factory=list)

    def net_for(self, name: str) -> int:
        """Return a player's chip change over the round."""
        for player_name, _, net in self.standings:
            if player_name == name:
                return net
        raise KeyError(name)


class BlackjackTable:
    """
    A blackjack table: seated players, the dealer, the shoe and turn order.

    This is the game session. Every component call gets the shoe and event
    emitter from here; nothing is global. Communication with the outside
    happens through the bet and action collaborators and through events.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundPhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "start_deal", "source": "waiting_for_bets", "dest": "dealing"},
        {"trigger": "start_player_turns", "source": "dealing", "dest": "player_turns"},
        {"trigger": "start_dealer_turn", "source": "player_turns", "dest": "dealer_turn"},
        {"trigger": "start_settlement", "source": "dealer_turn", "dest": "settling"},
        {"trigger": "finish_round", "source": "settling", "dest": "round_complete"},
        {"trigger": "new_round", "source": "round_complete", "dest": "waiting_for_bets"},
        {"trigger": "end_game", "source": "*", "dest": "game_over"},
    ]

    def __init__(
        self,
        rules: GameConfig | None = None,
        rng: Random | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a table.

        Args:
            rules: Table rules (uses the global configuration if not provided)
            rng: Random number generator for reproducible games
            shoe: A prepared shoe; a freshly built and shuffled one otherwise
        """
        self.rules = rules or config.game
        self.events = EventEmitter()

        if shoe is None:
            shoe = Shoe(
                num_decks=self.rules.num_decks,
                rng=rng,
                shuffle_method=self.rules.shuffle_method,
            )
            shoe.shuffle()
        self.shoe = shoe
        self.shoe.on_reshuffle = self._announce_reshuffle

        self.players: list[Player] = []
        self.dealer = Dealer()
        self.turn_order: deque[Player] = deque()
        self.round_number = 0
        self._next_player_id = 1
        self.actions = ActionEngine(self.shoe, self.events)

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_for_bets",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundPhase:
        """Get current round phase as enum."""
        return RoundPhase[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    def _announce_reshuffle(self, cards: int) -> None:
        self.events.emit_new(EventType.SHOE_RESHUFFLED, cards=cards)

    def seat(self, name: str) -> Player:
        """
        Seat a new player with the starting chip stack.

        Raises:
            ValueError: if the table is full
        """
        if len(self.players) >= self.rules.max_players:
            raise ValueError(f"Table is full ({self.rules.max_players} players)")

        player_id = self._next_player_id
        self._next_player_id += 1
        player = Player(
            player_id=player_id,
            name=name.strip() or f"Player {player_id}",
            chips=self.rules.starting_chips,
        )
        self.players.append(player)
        self.events.emit_new(
            EventType.PLAYER_SEATED,
            player=player.name,
            player_id=player.player_id,
            chips=player.chips,
        )
        return player

    def start_session(self) -> None:
        """Announce the start of play to subscribers."""
        self.events.emit_new(
            EventType.GAME_STARTED,
            players=[p.name for p in self.players],
            cards_in_shoe=len(self.shoe),
        )

    def end_session(self, reason: str) -> None:
        """Close the table and announce the final standings."""
        if self.state != RoundPhase.GAME_OVER:
            self.events.emit_new(
                EventType.GAME_ENDED,
                reason=reason,
                standings=[(p.name, p.chips) for p in self.standings()],
            )
            self.end_game()

    def remove_broke_players(self) -> list[Player]:
        """Unseat players who cannot cover the minimum bet."""
        broke = [p for p in self.players if not p.can_afford(self.rules.min_bet)]
        for player in broke:
            self.players.remove(player)
            self.events.emit_new(EventType.PLAYER_LEFT, player=player.name)
        return broke

    def standings(self) -> list[Player]:
        """Return the seated players, richest first."""
        return sorted(self.players, key=lambda p: p.chips, reverse=True)

    @property
    def is_over(self) -> bool:
        """Check if no seated player can still bet."""
        return not any(p.can_afford(self.rules.min_bet) for p in self.players)

    def play_round(self, bet_input: BetInput, action_input: ActionInput) -> RoundSummary:
        """
        Play one full round: bets, deal, player actions, dealer, settlement.

        Raises:
            OutOfCards: if a card was needed and none exist; the table is
                moved to GAME_OVER before this propagates
            InvalidBet: if the bet collaborator returns an out-of-range bet;
                no chips or hands are touched in that case
            MachineError: if the table is not waiting for bets
        """
        try:
            return self._play_round(bet_input, action_input)
        except OutOfCards:
            logger.error("Out of cards in round %d, ending the session", self.round_number)
            self.end_session("out_of_cards")
            raise

    def _play_round(self, bet_input: BetInput, action_input: ActionInput) -> RoundSummary:
        if self.state != RoundPhase.WAITING_FOR_BETS:
            raise MachineError(f"Cannot start a round while in {self.state}")
        stale = [p.name for p in self.players if p.hands]
        if stale:
            raise RuntimeError(f"Hands left over from an unfinished round: {stale}")

        self.round_number += 1
        self._check_shoe()

        if self.dealer.hand.cards:
            self.shoe.discard(self.dealer.hand)

        opening_chips = {p.player_id: p.chips for p in self.players}
        self.events.emit_new(
            EventType.ROUND_STARTED,
            round=self.round_number,
            cards_in_shoe=len(self.shoe),
        )

        self._collect_bets(bet_input)
        self.start_deal()
        self._deal_initial_cards()

        self.start_player_turns()
        self._play_turns(action_input)

        self.start_dealer_turn()
        dealer_score = play_dealer(
            self.dealer,
            self.shoe,
            self.events,
            stands_on=self.rules.dealer_stands_on,
        )
        dealer_natural = self.dealer.hand.is_natural

        self.start_settlement()
        results = settle_round(
            self.players,
            self.dealer,
            self.shoe,
            self.events,
            payout=self.rules.blackjack_payout,
        )

        summary = RoundSummary(
            round_number=self.round_number,
            dealer_score=dealer_score,
            dealer_natural=dealer_natural,
            results=results,
            standings=[
                (p.name, p.chips, p.chips - opening_chips[p.player_id])
                for p in self.players
            ],
        )
        self.finish_round()
        self.events.emit_new(
            EventType.ROUND_ENDED,
            round=self.round_number,
            standings=summary.standings,
        )
        self.new_round()
        return summary

    def _check_shoe(self) -> None:
        threshold = self.rules.reshuffle_threshold
        if self.shoe.needs_rebuild(threshold):
            remaining = len(self.shoe)
            self.shoe.rebuild(self.rules.num_decks)
            self.events.emit_new(
                EventType.SHOE_REBUILT,
                previous_cards=remaining,
                cards=len(self.shoe),
                num_decks=self.rules.num_decks,
            )

    def _collect_bets(self, bet_input: BetInput) -> None:
        """
        Ask each player who can cover the minimum for a bet, then place them.

        Every amount is checked before any chips move, so a rejected bet
        leaves the whole table untouched.
        """
        minimum = self.rules.min_bet
        wagers: list[tuple[Player, int]] = []
        for player in self.players:
            if not player.can_afford(minimum):
                continue
            amount = bet_input(player.name, player.chips)
            player.check_bet(amount, minimum)
            wagers.append((player, amount))

        if not wagers:
            raise ValueError("No player at the table can place a bet")

        self.turn_order.clear()
        for player, amount in wagers:
            player.place_bet(amount, minimum)
            self.events.emit_new(
                EventType.BET_PLACED,
                player=player.name,
                amount=amount,
                chips=player.chips,
            )
            self.turn_order.append(player)

    def _deal_card_to_hand(
        self,
        hand: Hand,
        owner: str,
        dealer: bool = False,
        face_up: bool = True,
    ) -> Card:
        card = self.shoe.deal()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand=owner,
            dealer=dealer,
            hand_index=0,
            hand_value=hand.value if face_up else None,
        )
        return card

    def _deal_initial_cards(self) -> None:
        """Deal two rounds: every queued player, then the dealer (hole card face down)."""
        for face_up in (True, False):
            for player in self.turn_order:
                self._deal_card_to_hand(player.hands[0], player.name)
            self._deal_card_to_hand(
                self.dealer.hand, self.dealer.name, dealer=True, face_up=face_up
            )

        for player in self.turn_order:
            if player.hands[0].is_natural:
                self.events.emit_new(EventType.PLAYER_BLACKJACK, player=player.name)

    def _play_turns(self, action_input: ActionInput) -> None:
        dealer_natural = self.dealer.hand.is_natural
        if dealer_natural:
            self.events.emit_new(EventType.DEALER_BLACKJACK)

        while self.turn_order:
            player = self.turn_order.popleft()
            if dealer_natural:
                self.events.emit_new(EventType.ACTION_PHASE_SKIPPED, player=player.name)
                continue
            self.actions.play_player(player, action_input, self.dealer.upcard)
