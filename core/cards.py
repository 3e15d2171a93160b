"""Card and Shoe classes - immutable cards and the dealing shoe."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Literal

from core.errors import OutOfCards

if TYPE_CHECKING:
    from core.hand import Hand

logger = logging.getLogger(__name__)

ShuffleMethod = Literal["relocate", "fisher_yates"]

CARDS_PER_DECK = 52


class Suit(Enum):
    """Card suits."""

    SPADES = auto()
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the nominal blackjack value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card. Equal when rank and suit match."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the nominal blackjack value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '10♥', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {str(rank): rank for rank in Rank}
        rank_map["T"] = Rank.TEN

        suit_map = {
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


class Shoe:
    """
    The dealing shoe and its discard pile.

    The front of the shoe (index 0) is the next card dealt. The discard
    pile is a stack: the last card pushed is the first one drained back
    into the shoe on a reshuffle.
    """

    def __init__(
        self,
        num_decks: int = 4,
        rng: Random | None = None,
        shuffle_method: ShuffleMethod = "relocate",
        on_reshuffle: Callable[[int], None] | None = None,
    ) -> None:
        """
        Initialize a shoe loaded with unshuffled decks.

        Args:
            num_decks: Number of 52-card decks to load
            rng: Random number generator for shuffling
            shuffle_method: "relocate" (default) or "fisher_yates"
            on_reshuffle: Called with the card count whenever the discard
                pile is shuffled back in to satisfy a deal
        """
        if shuffle_method not in ("relocate", "fisher_yates"):
            raise ValueError(f"Unknown shuffle method: {shuffle_method}")

        self._rng = rng or Random()
        self._shuffle_method = shuffle_method
        self.on_reshuffle = on_reshuffle
        self._cards: list[Card] = []
        self._discard: list[Card] = []
        self._num_decks = 0
        self.build(num_decks)

    @classmethod
    def stacked(cls, cards: Iterable[Card], rng: Random | None = None) -> "Shoe":
        """Create a shoe that deals exactly ``cards``, in order."""
        shoe = cls(num_decks=0, rng=rng)
        shoe._cards = list(cards)
        return shoe

    def build(self, num_decks: int) -> None:
        """Empty the shoe and discard pile, then load ``num_decks`` fresh decks."""
        if num_decks < 0:
            raise ValueError("Number of decks cannot be negative")

        self._num_decks = num_decks
        self._discard.clear()
        self._cards = [
            Card(rank, suit)
            for _ in range(num_decks)
            for suit in Suit
            for rank in Rank
        ]

    def shuffle(self) -> None:
        """Shuffle the cards currently in the shoe."""
        if not self._cards:
            return
        if self._shuffle_method == "fisher_yates":
            self._rng.shuffle(self._cards)
        else:
            self._relocate_shuffle()

    def _relocate_shuffle(self) -> None:
        # 2N relocations: pull a random card, push it back at a random
        # position of the shortened sequence (len == end of the sequence).
        n = len(self._cards)
        for _ in range(n * 2):
            card = self._cards.pop(self._rng.randrange(n))
            self._cards.insert(self._rng.randrange(n), card)

    def deal(self) -> Card:
        """
        Deal the front card of the shoe.

        An empty shoe is refilled from the discard pile and shuffled first.

        Raises:
            OutOfCards: if no cards remain in either the shoe or the pile
        """
        if not self._cards:
            self._reshuffle_discards()
            if not self._cards:
                logger.error("Shoe and discard pile are both empty")
                raise OutOfCards()
        return self._cards.pop(0)

    def _reshuffle_discards(self) -> None:
        while self._discard:
            self._cards.append(self._discard.pop())
        self.shuffle()
        if self._cards:
            logger.info("Reshuffled %d discarded cards into the shoe", len(self._cards))
            if self.on_reshuffle is not None:
                self.on_reshuffle(len(self._cards))

    def discard(self, hand: "Hand") -> None:
        """Move a hand's cards onto the discard pile and clear its bet."""
        self._discard.extend(hand.cards)
        hand.cards.clear()
        hand.bet = 0

    def needs_rebuild(self, threshold: int) -> bool:
        """Check if fewer than ``threshold`` cards are left to deal."""
        return len(self._cards) < threshold

    def rebuild(self, num_decks: int) -> None:
        """Replace the shoe and discard pile with freshly shuffled decks."""
        logger.info(
            "Shoe down to %d cards, rebuilding with %d decks",
            len(self._cards),
            num_decks,
        )
        self.build(num_decks)
        self.shuffle()

    def peek_discard(self) -> Card | None:
        """Return the top of the discard pile without removing it."""
        return self._discard[-1] if self._discard else None

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards left in the shoe."""
        return len(self._cards)

    @property
    def discard_count(self) -> int:
        """Return the number of cards on the discard pile."""
        return len(self._discard)

    @property
    def total_cards(self) -> int:
        """Return the cards held by the shoe and discard pile together."""
        return len(self._cards) + len(self._discard)

    @property
    def num_decks(self) -> int:
        """Return the number of decks loaded by the last build."""
        return self._num_decks

    @property
    def full_size(self) -> int:
        """Return the card count of a freshly built shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def shuffle_method(self) -> ShuffleMethod:
        return self._shuffle_method

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
