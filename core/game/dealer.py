"""The dealer's fixed drawing policy."""

import logging

from core.cards import Shoe
from core.game.events import EventEmitter, EventType
from core.player import Dealer

logger = logging.getLogger(__name__)

DEALER_STANDS_ON = 17


def dealer_should_hit(dealer: Dealer, stands_on: int = DEALER_STANDS_ON) -> bool:
    """The dealer draws strictly below ``stands_on``, soft totals included."""
    return dealer.hand.value < stands_on


def play_dealer(
    dealer: Dealer,
    shoe: Shoe,
    events: EventEmitter,
    stands_on: int = DEALER_STANDS_ON,
) -> int:
    """
    Reveal the hole card and draw until the dealer stands.

    A natural is revealed and left alone.

    Returns:
        The dealer's final score
    """
    hand = dealer.hand
    events.emit_new(
        EventType.DEALER_REVEALS,
        cards=[str(c) for c in hand.cards],
        hand_value=hand.value,
        natural=hand.is_natural,
    )

    if hand.is_natural:
        return hand.value

    while dealer_should_hit(dealer, stands_on):
        card = shoe.deal()
        hand.add_card(card)
        logger.debug("Dealer draws %s, now %d", card, hand.value)
        events.emit_new(
            EventType.DEALER_HITS,
            card=str(card),
            hand_value=hand.value,
        )

    if hand.is_busted:
        events.emit_new(EventType.DEALER_BUSTS, hand_value=hand.value)
    else:
        events.emit_new(EventType.DEALER_STANDS, hand_value=hand.value)
    return hand.value
