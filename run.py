#!/usr/bin/env python3
"""
Nura command console
Entry point for resolving voice/text commands from the terminal.

Usage:
    python run.py                                   # Interactive prompt (one utterance per line)
    python run.py --text "ok nura abre el menú de órdenes"
    python run.py --locale es --strategy soundex    # Force locale and scoring strategy
    python run.py --explain                         # Resolve only, never dispatch
    echo "ok nura borra la orden quince" | python run.py
"""
import sys
import json
import argparse
from nura.core.logger import init_logger, get_logger, set_quiet_mode
from nura.core.config import Config
from nura.core.event_bus import format_event
from nura.core.intent_matcher import STRATEGY_WEIGHTS

# REPL commands that toggle quiet mode without restarting
QUIET_COMMANDS = {":quiet": True, ":verbose": False}


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Nura - bilingual voice/text command console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py --text "ok nura abre el menú de órdenes"
  python run.py --text "ok nura delete order 3"   # then type "yes" at the prompt
  python run.py --threshold 0.8 --show-ranking
  python run.py --require-wake-word
        """
    )

    parser.add_argument(
        "--text",
        type=str,
        default=None,
        help="Resolve a single utterance and exit"
    )

    parser.add_argument(
        "--locale",
        type=str,
        default=Config.LOCALE,
        help=f"Locale: auto, es, en, es-419 (default: {Config.LOCALE})"
    )

    parser.add_argument(
        "--strategy",
        type=str,
        default=Config.MATCH_STRATEGY,
        choices=sorted(STRATEGY_WEIGHTS),
        help=f"Similarity strategy (default: {Config.MATCH_STRATEGY})"
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=Config.MATCH_THRESHOLD,
        help=f"Match threshold between 0 and 1 (default: {Config.MATCH_THRESHOLD})"
    )

    parser.add_argument(
        "--explain",
        action="store_true",
        default=Config.EXPLAIN_MODE,
        help="Explain mode: resolve intents without dispatching them"
    )

    parser.add_argument(
        "--require-wake-word",
        action="store_true",
        default=Config.REQUIRE_WAKE_WORD,
        help="Ignore utterances that do not start with a wake phrase"
    )

    parser.add_argument(
        "--show-ranking",
        action="store_true",
        help="Print the candidate ranking of every resolution"
    )

    parser.add_argument(
        "--show-events",
        action="store_true",
        help="Print dispatched events as they are emitted"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=Config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {Config.LOG_LEVEL})"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        default=Config.QUIET_MODE,
        help="Hide per-stage debug tags"
    )

    return parser.parse_args(argv)


def _print_resolution(client, result, show_ranking):
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    if show_ranking:
        for candidate in client.get_last_ranking()[:5]:
            print(f"  {candidate.score:.3f}  {candidate.intent:<24} {candidate.pattern}")


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    init_logger(args.log_level, quiet_mode=args.quiet)
    logger = get_logger()

    from nura.core.client import NuraClient

    try:
        client = NuraClient(
            locale=args.locale,
            explain_mode=args.explain,
            require_wake_word=args.require_wake_word,
        )
        client.set_threshold(args.threshold)
        client.set_strategy(args.strategy)
    except ValueError as e:
        logger.error(f"Invalid setting: {e}")
        return 2

    if args.show_events:
        client.event_bus.on("*", lambda event: print(format_event(event)))

    if args.text is not None:
        _print_resolution(client, client.process(args.text), args.show_ranking)
        return 0

    interactive = sys.stdin.isatty()
    if interactive:
        print("\n" + "=" * 60)
        print("  Nura command console")
        print("=" * 60)
        print(f"  Wake phrases: {', '.join(Config.get_wake_words())}")
        print(f"  Locale: {args.locale}")
        print(f"  Strategy: {args.strategy} (threshold {args.threshold})")
        print(f"  Explain mode: {args.explain}")
        print("  Type :quiet or :verbose to toggle pipeline logs")
        print("=" * 60 + "\n")

    try:
        while True:
            try:
                line = input("nura> " if interactive else "")
            except EOFError:
                break
            if not line.strip():
                continue
            if line.strip() in QUIET_COMMANDS:
                set_quiet_mode(QUIET_COMMANDS[line.strip()])
                continue
            _print_resolution(client, client.process(line), args.show_ranking)
    except KeyboardInterrupt:
        logger.info("\nShutdown requested by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
