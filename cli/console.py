"""Terminal prompts and event rendering for the blackjack table."""

from typing import Any, Callable

from core.game.actions import Action, HandSummary
from core.game.engine import RoundSummary
from core.game.events import EventType, GameEvent
from core.player import Player

RULE_WIDTH = 50

ACTION_LABELS = {
    Action.HIT: "(H)it",
    Action.STAND: "(S)tand",
    Action.SPLIT: "S(P)lit",
    Action.DOUBLE: "(D)ouble Down",
}

OUTCOME_MESSAGES = {
    "BUST": "Player BUSTS. Bet of ${bet} lost.",
    "PUSH_NATURALS": "PUSH (Natural vs. Natural). Bet of ${bet} returned.",
    "BLACKJACK": "NATURAL BLACKJACK! Wins 1.5x. ${won} won (Total return: ${returned}).",
    "DEALER_BUST": "Dealer BUSTS ({dealer_score}). Player wins ${bet}.",
    "DEALER_BLACKJACK": "Dealer has NATURAL BLACKJACK. Bet of ${bet} lost.",
    "WIN": "Player Wins ({player_score} > {dealer_score}). Wins ${bet}.",
    "LOSE": "Dealer Wins ({dealer_score} > {player_score}). Bet of ${bet} lost.",
    "PUSH": "PUSH ({player_score} vs. {dealer_score}). Bet of ${bet} returned.",
}


class ConsoleIO:
    """
    Console prompts for the table's bet and action collaborators.

    Input and output functions are injectable so the prompts can be driven
    from tests.
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        min_bet: int = 1,
    ) -> None:
        self._input = input_fn
        self._output = output_fn
        self.min_bet = min_bet

    def say(self, text: str = "") -> None:
        self._output(text)

    def _ask_int(self, prompt: str) -> int | None:
        raw = self._input(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            return None

    def ask_player_count(self, minimum: int = 1, maximum: int = 3) -> int:
        """Ask until a player count within range is given."""
        while True:
            count = self._ask_int(f"Enter number of players ({minimum}-{maximum}): ")
            if count is not None and minimum <= count <= maximum:
                return count

    def ask_names(self, count: int) -> list[str]:
        return [self._input(f"Enter name for Player {i}: ").strip() for i in range(1, count + 1)]

    def ask_bet(self, name: str, chips: int) -> int:
        """Ask until the bet is within min_bet..chips."""
        while True:
            bet = self._ask_int(f"{name} (Chips: ${chips}), place your bet: ")
            if bet is not None and self.min_bet <= bet <= chips:
                return bet
            self.say(f"Invalid bet. Must be between ${self.min_bet} and ${chips}.")

    def ask_action(self, summary: HandSummary, available: frozenset[Action]) -> Action:
        """Show the hand and ask until one of the offered actions is chosen."""
        cards = " ".join(str(c) for c in summary.cards)
        self.say(f"Current Hand Score ({summary.score}): [ {cards} ]")
        offered = [action for action in ACTION_LABELS if action in available]
        self.say("Actions: " + " / ".join(ACTION_LABELS[a] for a in offered))
        while True:
            choice = self._input("Choose action > ").strip().upper()
            for action in offered:
                if choice == action.value:
                    return action
            self.say("Invalid or unavailable action.")

    def ask_play_again(self) -> bool:
        return self._input("Play another round? (Y/N): ").strip().upper() == "Y"

    def show_round_summary(self, summary: RoundSummary) -> None:
        self.say("\n" + "*" * RULE_WIDTH)
        self.say("Round Summary:")
        for name, chips, net in summary.standings:
            self.say(f"  {name} - Chips: ${chips} ({net:+d} this round)")
        self.say("*" * RULE_WIDTH)

    def show_final_standings(self, players: list[Player]) -> None:
        self.say("\nThank you for playing Blackjack. Final Chip Counts:")
        for player in players:
            self.say(str(player))
        self.say("Goodbye!")


class ConsoleRenderer:
    """Display sink that turns table events into console lines."""

    def __init__(self, output_fn: Callable[[str], None] = print) -> None:
        self._output = output_fn
        self._formatters: dict[EventType, Callable[[dict[str, Any]], str | None]] = {
            EventType.ROUND_STARTED: lambda d: _banner("=", "NEW ROUND STARTING"),
            EventType.SHOE_REBUILT: lambda d: (
                f"Deck size ({d['previous_cards']}) is low. Performing full reshuffle."
            ),
            EventType.SHOE_RESHUFFLED: lambda d: "\n--- Reshuffling Discard Pile ---",
            EventType.CARD_DEALT: self._card_dealt,
            EventType.HAND_STARTED: lambda d: (
                f"\n--- {d['player']}'s Turn (Hand Bet: ${d['bet']}) ---"
            ),
            EventType.PLAYER_HIT: lambda d: f"{d['player']} hits. Hand is now {d['hand_value']}.",
            EventType.PLAYER_BUSTS: lambda d: f"Hand Busted! ({d['hand_value']})",
            EventType.HAND_TWENTY_ONE: lambda d: "Hand is 21! Standing.",
            EventType.PLAYER_DOUBLE: lambda d: (
                f"{d['player']} Doubles Down! Bet is now ${d['new_bet']}. "
                f"Final Hand Score: ({d['hand_value']})"
            ),
            EventType.PLAYER_SPLIT: lambda d: (
                f"Splitting Hand. Placing additional ${d['bet']} bet."
            ),
            EventType.SPLIT_ACES_STAND: lambda d: (
                "Split Aces: Only one card is dealt to each. Must stand."
            ),
            EventType.PLAYER_BLACKJACK: lambda d: f"{d['player']} has a natural blackjack!",
            EventType.DEALER_BLACKJACK: lambda d: "\n**DEALER NATURAL BLACKJACK!**",
            EventType.ACTION_PHASE_SKIPPED: lambda d: (
                f"\n{d['player']}: Dealer has a Natural. Skip action phase."
            ),
            EventType.INVALID_ACTION: lambda d: f"Cannot do that: {d['message']}.",
            EventType.DEALER_REVEALS: lambda d: (
                _banner("-", "DEALER'S PLAY")
                + f"\nDealer reveals hole card. Full Hand ({d['hand_value']}): "
                + f"[ {' '.join(d['cards'])} ]"
            ),
            EventType.DEALER_HITS: lambda d: (
                f"Dealer Hits (score < 17). Draws {d['card']}, now {d['hand_value']}."
            ),
            EventType.DEALER_STANDS: lambda d: f"Dealer Stands at {d['hand_value']}.",
            EventType.DEALER_BUSTS: lambda d: f"Dealer busts with {d['hand_value']}.",
            EventType.HAND_SETTLED: self._hand_settled,
            EventType.PLAYER_LEFT: lambda d: (
                f"\n{d['player']} is out of chips and leaves the game."
            ),
            EventType.GAME_ENDED: lambda d: (
                "CRITICAL GAME ERROR: No cards left to deal or shuffle!"
                if d["reason"] == "out_of_cards"
                else None
            ),
        }

    def __call__(self, event: GameEvent) -> None:
        line = self.format(event)
        if line is not None:
            self._output(line)

    def format(self, event: GameEvent) -> str | None:
        """Return the console text for an event, or None for silent events."""
        formatter = self._formatters.get(event.event_type)
        if formatter is None:
            return None
        return formatter(event.data)

    @staticmethod
    def _card_dealt(d: dict[str, Any]) -> str | None:
        # Player cards show up in the hand prompts
        if not d["dealer"]:
            return None
        if d["card"] == "??":
            return "Dealer's hole card is dealt face down."
        return f"Dealer's upcard: {d['card']}"

    @staticmethod
    def _hand_settled(d: dict[str, Any]) -> str:
        message = OUTCOME_MESSAGES[d["outcome"]].format(won=d["returned"] - d["bet"], **d)
        return (
            f"\n--- Settlement for {d['player']}'s hand (Score: {d['player_score']}) ---\n"
            f"{message}"
        )


def _banner(char: str, title: str) -> str:
    rule = char * RULE_WIDTH
    return f"\n{rule}\n{title.center(RULE_WIDTH)}\n{rule}"
