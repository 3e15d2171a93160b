"""Tests for the event emitter and the round phases."""

import pytest
from transitions import MachineError

from core.game import (
    BlackjackTable,
    EventEmitter,
    EventType,
    GameEvent,
    HandState,
    RoundPhase,
)


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_subscribe_to_one_type(self, events):
        received = []
        events.subscribe(received.append, EventType.CARD_DEALT)

        events.emit_new(EventType.CARD_DEALT, card="A♠")
        events.emit_new(EventType.PLAYER_HIT, player="Alice")

        assert [e.event_type for e in received] == [EventType.CARD_DEALT]
        assert received[0].data == {"card": "A♠"}

    def test_subscribe_to_everything(self, events):
        received = []
        events.subscribe(received.append)

        events.emit_new(EventType.ROUND_STARTED, round=1)
        events.emit_new(EventType.ROUND_ENDED, round=1)

        assert len(received) == 2

    def test_unsubscribe(self, events):
        received = []
        events.subscribe(received.append, EventType.BET_PLACED)
        events.unsubscribe(received.append, EventType.BET_PLACED)
        events.unsubscribe(print, EventType.BET_PLACED)

        events.emit_new(EventType.BET_PLACED, amount=10)

        assert received == []

    def test_history_and_filtering(self):
        emitter = EventEmitter()
        emitter.emit_new(EventType.DEALER_HITS, card="5♣")
        emitter.emit_new(EventType.DEALER_STANDS, hand_value=18)
        emitter.emit_new(EventType.DEALER_HITS, card="2♦")

        assert len(emitter.history) == 3
        assert [e.data["card"] for e in emitter.of_type(EventType.DEALER_HITS)] == ["5♣", "2♦"]

        emitter.clear_history()
        assert emitter.history == []

    def test_history_is_a_copy(self, events):
        events.emit_new(EventType.GAME_STARTED)
        events.history.clear()
        assert len(events.history) == 1

    def test_history_is_bounded(self):
        emitter = EventEmitter(history_limit=2)
        for n in range(3):
            emitter.emit_new(EventType.ROUND_STARTED, round=n)
        assert [e["round"] for e in emitter.history] == [1, 2]

    def test_subscribe_as_decorator(self, events):
        seen = []

        @events.subscribe
        def record(event):
            seen.append(event.get("player", "nobody"))

        events.emit_new(EventType.PLAYER_LEFT, player="Bob")
        events.emit_new(EventType.GAME_ENDED, reason="quit")

        assert seen == ["Bob", "nobody"]

    def test_typed_handlers_run_before_catch_all(self, events):
        order = []
        events.subscribe(lambda e: order.append("any"))
        events.subscribe(lambda e: order.append("typed"), EventType.PLAYER_HIT)

        events.emit_new(EventType.PLAYER_HIT)

        assert order == ["typed", "any"]

    def test_event_str(self):
        event = GameEvent(EventType.PLAYER_STAND, {"player": "Alice"})
        assert str(event) == "PLAYER_STAND: {'player': 'Alice'}"


ROUND_FLOW = [
    ("start_deal", RoundPhase.DEALING),
    ("start_player_turns", RoundPhase.PLAYER_TURNS),
    ("start_dealer_turn", RoundPhase.DEALER_TURN),
    ("start_settlement", RoundPhase.SETTLING),
    ("finish_round", RoundPhase.ROUND_COMPLETE),
    ("new_round", RoundPhase.WAITING_FOR_BETS),
]


class TestPhases:
    """Tests for the table's round phases and the hand states."""

    @pytest.fixture
    def idle_table(self, table_rules, shoe_of):
        return BlackjackTable(rules=table_rules, shoe=shoe_of())

    def test_round_flow(self, idle_table):
        for trigger, phase in ROUND_FLOW:
            getattr(idle_table, trigger)()
            assert idle_table.state == phase

    @pytest.mark.parametrize("steps", range(len(ROUND_FLOW)))
    def test_any_phase_can_end_the_game(self, idle_table, steps):
        for trigger, _ in ROUND_FLOW[:steps]:
            getattr(idle_table, trigger)()
        idle_table.end_game()
        assert idle_table.state == RoundPhase.GAME_OVER

    def test_out_of_order_trigger_is_rejected(self, idle_table):
        with pytest.raises(MachineError):
            idle_table.start_settlement()
        assert idle_table.state == RoundPhase.WAITING_FOR_BETS

    def test_game_over_is_final(self, idle_table):
        idle_table.end_game()
        with pytest.raises(MachineError):
            idle_table.new_round()

    def test_terminal_hand_states(self):
        assert not HandState.AWAITING_ACTION.is_terminal
        assert all(s.is_terminal for s in HandState if s != HandState.AWAITING_ACTION)

    def test_str(self):
        assert str(RoundPhase.WAITING_FOR_BETS) == "Waiting For Bets"
        assert str(HandState.AUTO_STANDING) == "Auto Standing"
