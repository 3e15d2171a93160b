"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Shoe, Rank, Suit
from core.errors import BlackjackError, InvalidAction, InvalidBet, OutOfCards
from core.hand import Hand, is_natural, score
from core.player import Dealer, Player

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "score",
    "is_natural",
    "Player",
    "Dealer",
    "BlackjackError",
    "OutOfCards",
    "InvalidAction",
    "InvalidBet",
]
