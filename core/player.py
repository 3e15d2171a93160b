"""Players and the dealer seated at a table."""

from dataclasses import dataclass, field

from core.cards import Card
from core.errors import InvalidBet
from core.hand import Hand


@dataclass
class Player:
    """A seated player with a chip balance and the hands of the current round."""

    player_id: int
    name: str
    chips: int = 1000
    hands: list[Hand] = field(default_factory=list)

    def check_bet(self, amount: int, minimum: int = 1) -> None:
        """
        Raises:
            InvalidBet: if amount is not within minimum..chips
        """
        if amount < minimum or amount > self.chips:
            raise InvalidBet(self.name, amount, self.chips, minimum)

    def place_bet(self, amount: int, minimum: int = 1) -> Hand:
        """
        Open a new hand with ``amount`` wagered, deducting it from chips.

        Raises:
            InvalidBet: if amount is not within minimum..chips
        """
        self.check_bet(amount, minimum)
        self.chips -= amount
        hand = Hand(bet=amount)
        self.hands.append(hand)
        return hand

    def can_afford(self, amount: int) -> bool:
        return self.chips >= amount

    def remove_empty_hands(self) -> None:
        """Drop hands that hold no cards."""
        self.hands = [hand for hand in self.hands if hand.cards]

    def __str__(self) -> str:
        return f"Player {self.player_id} ({self.name}) - Chips: ${self.chips}"


class Dealer(Player):
    """The house: one hand, no chips, no betting."""

    def __init__(self) -> None:
        super().__init__(player_id=0, name="Dealer", chips=0, hands=[Hand()])

    @property
    def hand(self) -> Hand:
        return self.hands[0]

    @property
    def upcard(self) -> Card | None:
        """Return the face-up card, or None before the deal."""
        return self.hand.cards[0] if self.hand.cards else None

    def place_bet(self, amount: int, minimum: int = 1) -> Hand:
        raise TypeError("The dealer does not bet")
