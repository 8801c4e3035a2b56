import argparse
import asyncio
import logging
from typing import List, Optional

from arbiter.cards import seeded_deck_source
from arbiter.collaborators import Collaborators
from arbiter.models import GameConfig, Seat
from .server import TableHost

logging.basicConfig(level=logging.INFO)

DEFAULT_STACK = 1_000


def parse_player(raw: str) -> Seat:
    name, _, stack = raw.partition(":")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError("player name required")
    try:
        amount = int(stack) if stack else DEFAULT_STACK
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid stack for {name}: {stack}")
    if amount <= 0:
        raise argparse.ArgumentTypeError(f"stack for {name} must be positive")
    return Seat(player_id=name, stack=amount)


def build_parser() -> argparse.ArgumentParser:
    # The first --player holds the dealer button.
    parser = argparse.ArgumentParser(description="Host a single hold'em hand over WebSocket")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--antes", type=int, default=0, help="Accepted for reporting; not collected")
    parser.add_argument(
        "--time-limit",
        type=int,
        default=15_000,
        help="Action time limit in milliseconds (0 disables the fallback check/fold)",
    )
    parser.add_argument(
        "--pace-delay-ms",
        type=int,
        default=1000,
        help="Delay after each deal, board reveal and payout (milliseconds)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Deck seed for a replayable hand")
    parser.add_argument(
        "--player",
        dest="players",
        action="append",
        type=parse_player,
        required=True,
        metavar="NAME[:STACK]",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if len(args.players) < 2:
        parser.error("at least two --player entries are required")

    try:
        config = GameConfig(
            small_blind=args.sb,
            big_blind=args.bb,
            antes=args.antes,
            time_limit_ms=args.time_limit,
        )
        collaborators = Collaborators()
        if args.seed is not None:
            collaborators.make_deck = seeded_deck_source(args.seed)
        server = TableHost(args.players, config, collaborators, pace_delay=args.pace_delay_ms / 1000)
    except ValueError as exc:
        parser.error(str(exc))

    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
