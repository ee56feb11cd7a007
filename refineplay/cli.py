"""CLI entry point for refinement playback."""

import argparse
import asyncio
import logging
import sys
import textwrap
from pathlib import Path

from refineplay.catalog import catalog_for
from refineplay.config import load_config
from refineplay.engine import RefinementEngine
from refineplay.errors import InvalidPass, UnknownProblem
from refineplay.metrics import format_metrics, key_insight, pass_label
from refineplay.presentation import ConsolePresenter
from refineplay.scheduler import PlaybackScheduler
from refineplay.timeline import render_timeline, write_timeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refinement playback")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="List available problems")

    # play command
    play_parser = sub.add_parser("play", help="Animate a problem's refinement passes")
    play_parser.add_argument("problem", nargs="?", help="Problem key (default from config)")
    play_parser.add_argument("--passes", type=int, default=None, help="Number of passes to show")
    play_parser.add_argument("--speed", type=float, default=None, help="Speed multiplier")
    play_parser.add_argument(
        "--pause-ms", type=float, default=None,
        help="Dwell time after each pass, in milliseconds",
    )
    play_parser.add_argument(
        "--html", type=Path, default=None,
        help="Write an HTML timeline of the played passes when done",
    )

    # show command
    show_parser = sub.add_parser("show", help="Show one pass in detail")
    show_parser.add_argument("problem", help="Problem key")
    show_parser.add_argument("pass_number", type=int, help="1-based pass number")

    # timeline command
    timeline_parser = sub.add_parser("timeline", help="Export a static HTML timeline")
    timeline_parser.add_argument("problem", help="Problem key")
    timeline_parser.add_argument("--passes", type=int, default=None, help="Number of passes to include")
    timeline_parser.add_argument("-o", "--output", type=Path, required=True, help="Output HTML path")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    catalog = catalog_for(config)

    try:
        if args.command == "list":
            if not catalog:
                print("No problems available.")
                return 1
            for key, problem in catalog.items():
                print(f"  {key:<14} {problem.title} ({problem.pass_count} passes)")
                print(f"  {'':<14} {problem.description}")

        elif args.command == "play":
            engine = RefinementEngine(catalog, config.playback)
            engine.init_problem(
                args.problem or config.default_problem,
                config.playback.default_passes if args.passes is None else args.passes,
            )
            if args.speed is not None:
                engine.set_speed(args.speed)
            scheduler = PlaybackScheduler(engine, ConsolePresenter(), pause_ms=args.pause_ms)
            completed = asyncio.run(scheduler.run())
            if args.html:
                path = write_timeline(engine, args.html)
                print(f"Timeline: {path}")
            return 0 if completed else 1

        elif args.command == "show":
            problem = catalog.get(args.problem)
            index = args.pass_number - 1
            if not 0 <= index < problem.pass_count:
                raise InvalidPass(
                    f"{problem.key} has passes 1-{problem.pass_count}, got {args.pass_number}"
                )
            p = problem.passes[index]
            m = format_metrics(p)
            print(f"{problem.title}: {pass_label(index, problem.pass_count)}")
            print()
            print(p.output)
            print()
            print("Model critique:")
            print(textwrap.indent(p.critique, "  "))
            print()
            print(
                f"Clarity {m.clarity}% | Correctness {m.correctness}% | "
                f"Structure {m.structure}% | Errors {m.errors} | Average {m.average}%"
            )
            print(f"Key insight: {key_insight(args.pass_number)}")

        elif args.command == "timeline":
            problem = catalog.get(args.problem)
            count = problem.pass_count if args.passes is None else max(1, args.passes)
            passes = problem.passes[:count]
            args.output.write_text(render_timeline(problem, passes), encoding="utf-8")
            print(f"Timeline: {args.output}")

        else:
            parser.print_help()
    except (UnknownProblem, InvalidPass) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
