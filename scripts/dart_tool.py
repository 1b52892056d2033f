"""
Command-line helper for the scoring engine.

Usage:
    python scripts/dart_tool.py score 0 -60
    python scripts/dart_tool.py checkout 121 --darts 3
    python scripts/dart_tool.py decode <share-string>
    python scripts/dart_tool.py encode history.yaml --id game-1700000000000
"""
import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dartkeeper.core import Config
from dartkeeper.board import ScoreResolver
from dartkeeper.game import CheckoutSolver, HistoryStore
from dartkeeper.codec import RecordCodec, CodecError
import logging

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Darts scoring engine tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: built-in defaults)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Resolve a board coordinate")
    score.add_argument("x", type=float, help="X offset from center (100 = board edge)")
    score.add_argument("y", type=float, help="Y offset from center, positive = down")

    checkout = subparsers.add_parser("checkout", help="Suggest a checkout route")
    checkout.add_argument("score", type=int, help="Remaining score")
    checkout.add_argument("--darts", type=int, default=3, help="Darts left (default: 3)")

    decode = subparsers.add_parser("decode", help="Decode a share string")
    decode.add_argument("text", help="Share string")

    encode = subparsers.add_parser("encode", help="Encode a stored game as a share string")
    encode.add_argument("history", type=Path, help="History YAML written by HistoryStore")
    encode.add_argument("--id", dest="record_id", default=None,
                        help="Record id (default: newest game)")
    encode.add_argument("--version", type=int, default=None,
                        help="Payload version (default: current)")

    return parser.parse_args()


def cmd_score(args, config: Config) -> int:
    outcome = ScoreResolver.from_config(config).resolve(args.x, args.y)
    print(f"{outcome.label}: {outcome.value} points")
    return 0


def cmd_checkout(args, config: Config) -> int:
    guide = CheckoutSolver.from_config(config).solve(args.score, args.darts)
    if guide is None:
        print(f"No checkout for {args.score} with {args.darts} dart(s)")
        return 1

    kind = "Setup" if guide.is_setup else "Checkout"
    print(f"{kind}: {' '.join(guide.labels)}")
    if guide.final_options:
        print(f"Any of: {', '.join(step.label for step in guide.final_options)}")
    return 0


def cmd_decode(args, config: Config) -> int:
    try:
        record = RecordCodec.from_config(config).decode(args.text)
    except CodecError as e:
        logger.error(f"Cannot decode share string: {e}")
        return 1

    print(f"{record.type.value} game, {record.winner}, final score {record.final_score}")
    if record.target_score is not None:
        print(f"Target: {record.target_score}")
    for round_record in record.rounds:
        labels = " ".join(t.label for t in round_record.throws)
        print(f"  R{round_record.round:>2}: {labels:<20} → {round_record.score_after}")
    if record.stats:
        print(f"Stats: {record.stats.to_dict()}")
    return 0


def cmd_encode(args, config: Config) -> int:
    store = HistoryStore.load(args.history)
    if not len(store):
        logger.error(f"No games in {args.history}")
        return 1

    record = store.get(args.record_id) if args.record_id else store.records[0]
    if record is None:
        logger.error(f"Game not found: {args.record_id}")
        return 1

    print(RecordCodec.from_config(config).encode(record, version=args.version))
    return 0


COMMANDS = {
    "score": cmd_score,
    "checkout": cmd_checkout,
    "decode": cmd_decode,
    "encode": cmd_encode,
}


def main():
    """Main entry point."""
    args = parse_args()
    config = Config(args.config)
    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
