"""Pytest fixtures for blackjack tests."""

import pytest
from random import Random

from config import GameConfig
from core.cards import Card, Shoe
from core.game import Action, ActionEngine, BlackjackTable, EventEmitter
from core.hand import Hand
from core.player import Dealer, Player


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 4-deck shoe."""
    s = Shoe(num_decks=4, rng=rng)
    s.shuffle()
    return s


@pytest.fixture
def events():
    return EventEmitter()


@pytest.fixture
def hand_of():
    """Factory for hands built from card codes like 'AS', '10H'."""

    def make(*codes, bet=0, split=False):
        return Hand(
            cards=[Card.from_string(c) for c in codes],
            bet=bet,
            is_split_result=split,
        )

    return make


@pytest.fixture
def shoe_of(rng):
    """Factory for shoes that deal the given card codes in order."""

    def make(*codes):
        return Shoe.stacked((Card.from_string(c) for c in codes), rng=rng)

    return make


@pytest.fixture
def player():
    """A player holding the default 1000 chips."""
    return Player(player_id=1, name="Alice", chips=1000)


@pytest.fixture
def dealer():
    return Dealer()


@pytest.fixture
def engine_for(events):
    """Factory for an action engine dealing from a stacked shoe."""

    def make(shoe):
        return ActionEngine(shoe, events)

    return make


@pytest.fixture
def table_rules():
    """Rules that never rebuild the shoe, so stacked decks are dealt as given."""
    return GameConfig(reshuffle_threshold=0, shuffle_method="relocate")


@pytest.fixture
def stacked_table(table_rules, shoe_of):
    """Factory for a table with seated players and a stacked shoe."""

    def make(codes, names=("Alice",)):
        table = BlackjackTable(rules=table_rules, shoe=shoe_of(*codes))
        for name in names:
            table.seat(name)
        return table

    return make


@pytest.fixture
def table(rng):
    """A table with one seated player and a normally built shoe."""
    t = BlackjackTable(rules=GameConfig(shuffle_method="relocate"), rng=rng)
    t.seat("Alice")
    return t


def scripted(*actions):
    """Action collaborator that replays a fixed list of actions."""
    queue = list(actions)

    def choose(summary, available):
        return queue.pop(0)

    choose.remaining = queue
    return choose


@pytest.fixture
def script():
    """Factory for scripted action collaborators."""
    return scripted


@pytest.fixture
def always_stand():
    return lambda summary, available: Action.STAND


@pytest.fixture
def flat_bet():
    """Bet collaborator that always wagers 10."""
    return lambda name, chips: 10
