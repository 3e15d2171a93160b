"""Settling player hands against the dealer."""

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from enum import Enum, auto

from core.cards import Shoe
from core.game.events import EventEmitter, EventType
from core.hand import BLACKJACK, Hand
from core.player import Dealer, Player

logger = logging.getLogger(__name__)

BLACKJACK_PAYOUT = 1.5


class Outcome(Enum):
    """How a hand was resolved, in order of precedence."""

    BUST = auto()
    PUSH_NATURALS = auto()
    BLACKJACK = auto()
    DEALER_BUST = auto()
    DEALER_BLACKJACK = auto()
    WIN = auto()
    LOSE = auto()
    PUSH = auto()

    @property
    def is_win(self) -> bool:
        return self in (Outcome.BLACKJACK, Outcome.DEALER_BUST, Outcome.WIN)

    @property
    def is_push(self) -> bool:
        return self in (Outcome.PUSH_NATURALS, Outcome.PUSH)


@dataclass(frozen=True)
class HandResult:
    """The outcome of one settled hand."""

    player_name: str
    hand_index: int
    outcome: Outcome
    bet: int
    player_score: int
    dealer_score: int
    returned: int

    @property
    def net(self) -> int:
        """Chips won (positive) or lost (negative) on this hand."""
        return self.returned - self.bet


def blackjack_winnings(bet: int, payout: float = BLACKJACK_PAYOUT) -> int:
    """Return the natural's winnings, truncated to whole chips."""
    amount = Decimal(bet) * Decimal(str(payout))
    return int(amount.to_integral_value(rounding=ROUND_DOWN))


def resolve(hand: Hand, dealer_hand: Hand) -> Outcome:
    """
    Decide a hand against the dealer. The first matching rule wins.
    """
    player_score = hand.value
    dealer_score = dealer_hand.value
    player_natural = hand.is_natural
    dealer_natural = dealer_hand.is_natural

    if player_score > BLACKJACK:
        return Outcome.BUST
    if player_natural and dealer_natural:
        return Outcome.PUSH_NATURALS
    if player_natural:
        return Outcome.BLACKJACK
    if dealer_score > BLACKJACK:
        return Outcome.DEALER_BUST
    if dealer_natural:
        return Outcome.DEALER_BLACKJACK
    if player_score > dealer_score:
        return Outcome.WIN
    if player_score < dealer_score:
        return Outcome.LOSE
    return Outcome.PUSH


def amount_returned(outcome: Outcome, bet: int, payout: float = BLACKJACK_PAYOUT) -> int:
    """Return the chips handed back for a resolved bet (stake included)."""
    if outcome == Outcome.BLACKJACK:
        return bet + blackjack_winnings(bet, payout)
    if outcome.is_win:
        return bet * 2
    if outcome.is_push:
        return bet
    return 0


def settle_hand(
    player: Player,
    hand: Hand,
    dealer_hand: Hand,
    shoe: Shoe,
    hand_index: int = 0,
    payout: float = BLACKJACK_PAYOUT,
) -> HandResult:
    """
    Resolve a live hand, credit the player and discard the hand.

    The stake was taken when the bet was placed, so a loss credits nothing.
    """
    outcome = resolve(hand, dealer_hand)
    returned = amount_returned(outcome, hand.bet, payout)
    result = HandResult(
        player_name=player.name,
        hand_index=hand_index,
        outcome=outcome,
        bet=hand.bet,
        player_score=hand.value,
        dealer_score=dealer_hand.value,
        returned=returned,
    )
    player.chips += returned
    shoe.discard(hand)
    logger.info(
        "%s hand %d: %s (bet %d, returned %d)",
        player.name,
        hand_index,
        outcome.name,
        result.bet,
        returned,
    )
    return result


def settle_round(
    players: list[Player],
    dealer: Dealer,
    shoe: Shoe,
    events: EventEmitter,
    payout: float = BLACKJACK_PAYOUT,
) -> list[HandResult]:
    """
    Settle every live hand at the table, then clear the dealer's hand.

    Hands without a bet are discarded with no effect on chips.
    """
    results: list[HandResult] = []
    for player in players:
        for index, hand in enumerate(player.hands):
            if not hand.is_live:
                shoe.discard(hand)
                continue
            result = settle_hand(player, hand, dealer.hand, shoe, index, payout)
            results.append(result)
            events.emit_new(
                EventType.HAND_SETTLED,
                player=player.name,
                hand_index=index,
                outcome=result.outcome.name,
                bet=result.bet,
                player_score=result.player_score,
                dealer_score=result.dealer_score,
                returned=result.returned,
                net=result.net,
                chips=player.chips,
            )
        player.remove_empty_hands()

    shoe.discard(dealer.hand)
    return results
