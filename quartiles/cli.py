"""
Command line for the Quartiles solver.

Usage:
    quartiles [-d DIR] [-n NAME] generate
    quartiles [-d DIR] [-n NAME] solve FRAGMENT... [--tick-ms N] [--stream] [-q]
    quartiles serve [--port N]

Examples:
    quartiles generate
    quartiles solve azz th ss tru ref fu ra nih cro mat wo sh re rds tic il lly zz is ment
    quartiles -d ~/words -n scrabble solve ... --stream --highlight-ms 200

`generate` builds (or refreshes) the binary dictionary `<NAME>.dict` next to
`<NAME>.txt`. `solve` takes the 20 fragments row by row (4 per row, 5 rows),
prints every word found, one per line, in discovery order, and reports
whether the five quartiles were recovered.
"""
import argparse
import logging
import sys
import time
from pathlib import Path

from quartiles.dictionary import Dictionary, InvalidDictionaryData
from quartiles.metrics import StageTimer
from quartiles.settings import effective_log_level, settings
from quartiles.solver import InvalidPuzzle, Solver

logger = logging.getLogger("quartiles")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNSOLVED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quartiles", description="Quartiles puzzle solver")
    parser.add_argument("-d", "--directory", default=str(settings.DICTIONARY_DIR),
                        help=f"Directory holding the dictionary files (default: {settings.DICTIONARY_DIR})")
    parser.add_argument("-n", "--dictionary", default=settings.DICTIONARY_NAME,
                        help=f"Dictionary name, sans extension (default: {settings.DICTIONARY_NAME})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at debug level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("generate", help="Write the binary dictionary and exit")

    solve = sub.add_parser("solve", help="Solve a puzzle given its 20 fragments")
    solve.add_argument("fragments", nargs="+", metavar="FRAGMENT",
                       help="The 20 grid fragments, row by row")
    solve.add_argument("--tick-ms", type=int, default=settings.TICK_MS,
                       help=f"Time slice per solver tick in ms (default: {settings.TICK_MS})")
    solve.add_argument("--stream", action="store_true",
                       help="Echo each word to stderr as it is discovered")
    solve.add_argument("--highlight-ms", type=int, default=settings.HIGHLIGHT_MS,
                       help=f"Pause after each streamed word in ms (default: {settings.HIGHLIGHT_MS})")
    solve.add_argument("-q", "--quiet", action="store_true",
                       help="Suppress the solution on stdout")

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=settings.PORT)

    return parser


def _open_dictionary(args) -> Dictionary:
    timer = StageTimer("dictionary")
    with timer.stage("open"):
        dictionary = Dictionary.open(args.directory, args.dictionary)
    timer.log_summary()
    return dictionary


def run_generate(args) -> int:
    dictionary = _open_dictionary(args)
    logger.info("Dictionary %s/%s.dict ready (%d words)", args.directory, args.dictionary, len(dictionary))
    return EXIT_OK


def run_solve(args) -> int:
    dictionary = _open_dictionary(args)
    solver = Solver(dictionary, [fragment.lower() for fragment in args.fragments])

    timer = StageTimer("solve")
    while not solver.is_finished():
        with timer.stage("solve"):
            path = solver.solve(args.tick_ms / 1000)
        if path is not None and args.stream:
            print(solver.word(path), file=sys.stderr, flush=True)
            if args.highlight_ms:
                with timer.stage("highlight"):
                    time.sleep(args.highlight_ms / 1000)
    timer.log_summary()

    if not args.quiet:
        for word in solver.solution():
            print(word)

    quartiles = solver.quartiles()
    if quartiles is not None:
        print(f"solved: {' '.join(solver.word(p) for p in quartiles)}", file=sys.stderr)
        return EXIT_OK
    print("no solution found", file=sys.stderr)
    return EXIT_UNSOLVED


def run_serve(args) -> int:
    import uvicorn

    uvicorn.run("quartiles.server:app", host=args.host, port=args.port)
    return EXIT_OK


COMMANDS = {
    "generate": run_generate,
    "solve": run_solve,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level="DEBUG" if args.verbose else effective_log_level(settings),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "serve":
        # The service reads its dictionary location from settings.
        settings.DICTIONARY_DIR = Path(args.directory)
        settings.DICTIONARY_NAME = args.dictionary
        return run_serve(args)

    try:
        return COMMANDS[args.command](args)
    except (OSError, InvalidDictionaryData) as e:
        print(f"Error: failed to open dictionary {args.directory}/{args.dictionary}: {e}", file=sys.stderr)
        return EXIT_ERROR
    except InvalidPuzzle as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
