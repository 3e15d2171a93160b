"""Hand scoring for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable

from core.cards import Card

BLACKJACK = 21


def score(cards: Iterable[Card]) -> int:
    """
    Calculate the best blackjack score for a set of cards.

    Aces start at 11 and are downgraded to 1, one at a time, while the
    total is over 21. A total still over 21 once every ace counts 1 is a bust.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        else:
            total += card.value

    total += aces * 11

    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_natural(hand: "Hand") -> bool:
    """Check for an untouched two-card 21 that did not come from a split."""
    return (
        len(hand.cards) == 2
        and score(hand.cards) == BLACKJACK
        and not hand.is_split_result
    )


@dataclass
class Hand:
    """A blackjack hand with its wager."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    is_split_result: bool = False
    is_doubled: bool = False

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    @property
    def value(self) -> int:
        """Return the best score of the hand."""
        return score(self.cards)

    @property
    def is_soft(self) -> bool:
        """Check if an ace is being counted as 11."""
        hard = sum(1 if card.is_ace else card.value for card in self.cards)
        return self.value != hard

    @property
    def is_natural(self) -> bool:
        return is_natural(self)

    @property
    def is_busted(self) -> bool:
        return self.value > BLACKJACK

    @property
    def is_pair(self) -> bool:
        """Check if the hand is exactly two cards of the same rank."""
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    @property
    def is_live(self) -> bool:
        """Check if the hand still carries a wager."""
        return self.bet > 0

    def __len__(self) -> int:
        return len(self.cards)

    def __str__(self) -> str:
        if self.is_busted:
            status = "BUST"
        elif self.is_natural:
            status = "BLACKJACK"
        elif self.is_soft:
            status = f"soft {self.value}"
        else:
            status = str(self.value)
        return f"{' '.join(map(str, self.cards))} ({status})"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, bet={self.bet}, value={self.value})"
