"""Play blackjack at the terminal."""

import argparse
import dataclasses
import logging
import sys
from random import Random

from cli.console import ConsoleIO, ConsoleRenderer
from config import AppConfig, config
from core.errors import OutOfCards
from core.game.engine import BlackjackTable

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-player casino blackjack against the dealer.")
    parser.add_argument("--players", type=int, help="Number of players (skips the prompt)")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible shoe")
    parser.add_argument(
        "--shuffle",
        choices=["relocate", "fisher_yates"],
        help="Shuffle algorithm for the shoe",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default from BLACKJACK_LOG_LEVEL)",
    )
    return parser


def configure_logging(app_config: AppConfig, level: str | None = None) -> None:
    """Send engine logs to stderr so they stay out of the game transcript."""
    logging.basicConfig(
        level=level or ("DEBUG" if app_config.debug else app_config.logging.level),
        format=app_config.logging.format,
        stream=sys.stderr,
    )


def create_table(app_config: AppConfig, seed: int | None = None, shuffle: str | None = None) -> BlackjackTable:
    rules = app_config.game
    if shuffle is not None:
        rules = dataclasses.replace(rules, shuffle_method=shuffle)
    seed = seed if seed is not None else app_config.seed
    rng = Random(seed) if seed is not None else None
    return BlackjackTable(rules=rules, rng=rng)


def run_game(table: BlackjackTable, io: ConsoleIO, players: int | None = None) -> int:
    """
    Seat the players and play rounds until they stop or go broke.

    Returns:
        Process exit status: 0 on a normal finish, 1 if the cards ran out
    """
    rules = table.rules
    io.say("### Welcome to Blackjack Casino ###")
    if players is None or not rules.min_players <= players <= rules.max_players:
        players = io.ask_player_count(rules.min_players, rules.max_players)
    for name in io.ask_names(players):
        table.seat(name)

    table.start_session()
    status = 0
    reason = "players_quit"
    while True:
        table.remove_broke_players()
        if not table.players:
            io.say("\nAll players are out of chips. Game Over.")
            reason = "all_players_broke"
            break
        try:
            summary = table.play_round(io.ask_bet, io.ask_action)
        except OutOfCards:
            status = 1
            break
        io.show_round_summary(summary)
        if not io.ask_play_again():
            break

    table.end_session(reason)
    io.show_final_standings(table.standings())
    return status


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(config, args.log_level)

    table = create_table(config, seed=args.seed, shuffle=args.shuffle)
    table.subscribe(ConsoleRenderer())
    logger.info("Starting table with %d cards in the shoe", len(table.shoe))
    return run_game(table, ConsoleIO(min_bet=table.rules.min_bet), args.players)


if __name__ == "__main__":
    sys.exit(main())
