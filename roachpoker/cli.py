"""
Command line interface for roachpoker.

``roachpoker simulate`` plays bot-vs-bot games through the engine and prints a
summary; ``roachpoker verify`` replays every game stored in a SQLite database
and checks it against its recorded history.
"""

from typing import Any, Dict, List, Optional
import argparse
import asyncio
import logging
import random
import sys

import pandas as pd

from roachpoker.bots import RandomBot
from roachpoker.engine import RoachPokerEngine
from roachpoker.errors import RoachPokerError
from roachpoker.game.replay import verify_replay
from roachpoker.game.statistics import calculate_game_statistics
from roachpoker.game.validation import validate_game_state
from roachpoker.storage import GameRepository, InMemoryGameStore, SQLiteGameStore

logger = logging.getLogger(__name__)

PLAYER_IDS = ("alice", "bob")

SUMMARY_COLUMNS = [
    "game_id",
    "seed",
    "winner_id",
    "loser_id",
    "losing_creature_type",
    "rounds",
    "passes",
    "version",
]


async def run_simulation(
    games: int,
    store: GameRepository,
    config: Optional[Dict[str, Any]] = None,
    seed: Optional[int] = None,
    bluff_rate: float = 0.3,
    pass_rate: float = 0.2,
) -> pd.DataFrame:
    """
    Play ``games`` bot-vs-bot games and summarise them.

    Args:
        games: Number of games to play
        store: Repository the games are saved to
        config: Rule settings for the engine
        seed: Seed for every random choice of the run (unseeded if None)
        bluff_rate: Bluff probability of both bots
        pass_rate: Pass-back probability of both bots

    Returns:
        DataFrame with one row per game and the columns in SUMMARY_COLUMNS
    """
    rng = random.Random(seed)
    engine = RoachPokerEngine(store, config=config, rng=rng)
    await engine.initialize()

    rows: List[Dict[str, Any]] = []
    try:
        for _ in range(games):
            created = await engine.create_game(*PLAYER_IDS)
            if not created.ok:
                raise RuntimeError(f"Could not create game: {created.error}")
            state = created.state

            bots = [
                RandomBot(
                    pid,
                    random.Random(rng.randrange(2**32)),
                    bluff_rate=bluff_rate,
                    pass_rate=pass_rate,
                )
                for pid in PLAYER_IDS
            ]
            while state.is_in_progress:
                action = next(a for a in (bot.act(state) for bot in bots) if a)
                result = await engine.submit(state.id, action, state.version)
                if not result.ok:
                    raise RuntimeError(f"Bot action rejected: {result.error}")
                state = result.state

            stats = calculate_game_statistics(state)
            loser = state.get_player(state.loser_id)
            rows.append(
                {
                    "game_id": state.id,
                    "seed": state.seed,
                    "winner_id": state.winner_id,
                    "loser_id": state.loser_id,
                    "losing_creature_type": (
                        loser.losing_creature_type.value
                        if loser and loser.losing_creature_type
                        else None
                    ),
                    "rounds": stats.total_rounds,
                    "passes": stats.total_passes,
                    "version": state.version,
                }
            )
            logger.debug("Finished game %s in %d rounds", state.id, stats.total_rounds)
    finally:
        await engine.shutdown()

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def verify_store(store: SQLiteGameStore) -> List[str]:
    """
    Replay and validate every stored game.

    Returns:
        One line per problem found; empty if every game checks out
    """
    problems = []
    for game_id in store.list_games():
        state = store.load_game(game_id)
        check = verify_replay(state)
        for difference in check.differences:
            problems.append(f"{game_id}: replay {difference}")
        for error in validate_game_state(state).errors:
            problems.append(f"{game_id}: {error}")
    return problems


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="roachpoker", description="Cockroach Poker simulations and tools."
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="play bot-vs-bot games")
    simulate.add_argument(
        "-g",
        "--games",
        type=int,
        default=10,
        help="number of games to play (default: 10)",
    )
    simulate.add_argument(
        "-s", "--seed", type=int, default=None, help="seed for the whole run"
    )
    simulate.add_argument(
        "--win-condition",
        type=int,
        default=3,
        help="cards of one creature that lose the game (default: 3)",
    )
    simulate.add_argument(
        "--max-passes",
        type=int,
        default=3,
        help="times one card may be passed back (default: 3)",
    )
    simulate.add_argument(
        "--bluff-rate",
        type=float,
        default=0.3,
        help="probability that a bot lies about its card (default: 0.3)",
    )
    simulate.add_argument(
        "--pass-rate",
        type=float,
        default=0.2,
        help="probability that a bot passes a card back (default: 0.2)",
    )
    simulate.add_argument(
        "--db", default=None, help="SQLite file to store games in (default: memory)"
    )

    verify = subparsers.add_parser("verify", help="replay stored games")
    verify.add_argument("db", help="SQLite file written by simulate --db")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "verify":
        store = SQLiteGameStore(args.db)
        try:
            problems = verify_store(store)
        finally:
            store.close()
        for line in problems:
            print(line)
        if problems:
            return 1
        print("All stored games replay cleanly")
        return 0

    store = SQLiteGameStore(args.db) if args.db else InMemoryGameStore()
    config = {"win_condition": args.win_condition, "max_passes": args.max_passes}
    try:
        summary = asyncio.run(
            run_simulation(
                args.games,
                store,
                config=config,
                seed=args.seed,
                bluff_rate=args.bluff_rate,
                pass_rate=args.pass_rate,
            )
        )
    except (RoachPokerError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        store.close()

    print(summary.to_string(index=False))
    print()
    print("Losses by creature:")
    print(summary["losing_creature_type"].value_counts().to_string())
    print()
    print("Wins:")
    print(summary["winner_id"].value_counts().to_string())
    print(f"Average rounds per game: {summary['rounds'].mean():.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
