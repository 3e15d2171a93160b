"""Tests for console prompts and event rendering."""

import pytest

from cli.console import ConsoleIO, ConsoleRenderer
from core.cards import Card
from core.game import Action, EventType, GameEvent, HandSummary, RoundSummary
from core.player import Player


def console(*answers):
    """ConsoleIO fed from a list of answers, collecting printed lines."""
    replies = list(answers)
    lines = []
    io = ConsoleIO(input_fn=lambda prompt: replies.pop(0), output_fn=lines.append)
    return io, lines


@pytest.fixture
def summary():
    return HandSummary(
        player_name="Alice",
        hand_index=0,
        cards=(Card.from_string("8S"), Card.from_string("8H")),
        score=16,
        bet=10,
        chips=990,
        is_split_result=False,
        dealer_upcard=Card.from_string("9D"),
    )


class TestConsoleIO:
    """Tests for the prompts."""

    def test_player_count_reasks_until_in_range(self):
        io, _ = console("0", "four", "2")
        assert io.ask_player_count(1, 3) == 2

    def test_names(self):
        io, _ = console(" Alice ", "Bob")
        assert io.ask_names(2) == ["Alice", "Bob"]

    def test_bet_reasks_on_invalid_amount(self):
        io, lines = console("0", "5000", "x", "25")
        assert io.ask_bet("Alice", 1000) == 25
        assert lines.count("Invalid bet. Must be between $1 and $1000.") == 3

    def test_bet_respects_table_minimum(self):
        replies = ["10", "25"]
        lines = []
        io = ConsoleIO(input_fn=lambda prompt: replies.pop(0), output_fn=lines.append, min_bet=25)
        assert io.ask_bet("Alice", 1000) == 25
        assert lines == ["Invalid bet. Must be between $25 and $1000."]

    def test_action_accepts_lowercase(self, summary):
        io, lines = console("h")
        assert io.ask_action(summary, frozenset({Action.HIT, Action.STAND})) == Action.HIT
        assert lines[0] == "Current Hand Score (16): [ 8♠ 8♥ ]"
        assert lines[1] == "Actions: (H)it / (S)tand"

    def test_action_rejects_unavailable_choice(self, summary):
        io, lines = console("P", "Q", "S")
        assert io.ask_action(summary, frozenset({Action.HIT, Action.STAND})) == Action.STAND
        assert lines.count("Invalid or unavailable action.") == 2

    def test_all_actions_offered(self, summary):
        io, lines = console("D")
        assert io.ask_action(summary, frozenset(Action)) == Action.DOUBLE
        assert lines[1] == "Actions: (H)it / (S)tand / S(P)lit / (D)ouble Down"

    def test_play_again(self):
        io, _ = console("y", "n")
        assert io.ask_play_again()
        assert not io.ask_play_again()

    def test_round_summary(self):
        io, lines = console()
        io.show_round_summary(
            RoundSummary(
                round_number=1,
                dealer_score=19,
                dealer_natural=False,
                standings=[("Alice", 1010, 10), ("Bob", 990, -10)],
            )
        )
        assert "  Alice - Chips: $1010 (+10 this round)" in lines
        assert "  Bob - Chips: $990 (-10 this round)" in lines

    def test_final_standings(self):
        io, lines = console()
        io.show_final_standings([Player(player_id=1, name="Alice", chips=1200)])
        assert "Player 1 (Alice) - Chips: $1200" in lines
        assert lines[-1] == "Goodbye!"


class TestConsoleRenderer:
    """Tests for turning events into text."""

    def test_silent_events(self):
        renderer = ConsoleRenderer(output_fn=pytest.fail)
        renderer(GameEvent(EventType.BET_PLACED, {"player": "Alice", "amount": 10, "chips": 990}))

    def test_player_cards_are_silent(self):
        renderer = ConsoleRenderer()
        event = GameEvent(
            EventType.CARD_DEALT,
            {"card": "8♠", "hand": "Alice", "dealer": False, "hand_index": 0, "hand_value": 8},
        )
        assert renderer.format(event) is None

    def test_dealer_cards(self):
        renderer = ConsoleRenderer()
        up = GameEvent(EventType.CARD_DEALT, {"card": "9♦", "hand": "Dealer", "dealer": True, "hand_value": 9})
        hole = GameEvent(EventType.CARD_DEALT, {"card": "??", "hand": "Dealer", "dealer": True, "hand_value": None})
        assert renderer.format(up) == "Dealer's upcard: 9♦"
        assert renderer.format(hole) == "Dealer's hole card is dealt face down."

    def test_player_called_dealer_stays_silent(self):
        renderer = ConsoleRenderer()
        event = GameEvent(
            EventType.CARD_DEALT,
            {"card": "8♠", "hand": "Dealer", "dealer": False, "hand_index": 0, "hand_value": 8},
        )
        assert renderer.format(event) is None

    def test_settlement_lines(self):
        renderer = ConsoleRenderer()
        data = {
            "player": "Alice",
            "hand_index": 0,
            "bet": 10,
            "player_score": 21,
            "dealer_score": 18,
            "returned": 25,
            "net": 15,
            "chips": 1015,
        }
        text = renderer.format(GameEvent(EventType.HAND_SETTLED, dict(data, outcome="BLACKJACK")))
        assert "Settlement for Alice's hand (Score: 21)" in text
        assert "$15 won (Total return: $25)" in text

        text = renderer.format(GameEvent(EventType.HAND_SETTLED, dict(data, outcome="WIN", returned=20)))
        assert "Player Wins (21 > 18). Wins $10." in text

    def test_out_of_cards_message(self):
        lines = []
        renderer = ConsoleRenderer(output_fn=lines.append)
        renderer(GameEvent(EventType.GAME_ENDED, {"reason": "out_of_cards", "standings": []}))
        renderer(GameEvent(EventType.GAME_ENDED, {"reason": "players_quit", "standings": []}))
        assert lines == ["CRITICAL GAME ERROR: No cards left to deal or shuffle!"]

    def test_dealer_reveal(self):
        renderer = ConsoleRenderer()
        text = renderer.format(
            GameEvent(
                EventType.DEALER_REVEALS,
                {"cards": ["9♦", "7♣"], "hand_value": 16, "natural": False},
            )
        )
        assert "DEALER'S PLAY" in text
        assert text.endswith("Full Hand (16): [ 9♦ 7♣ ]")
