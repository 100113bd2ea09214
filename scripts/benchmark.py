"""
Benchmark for the Quartiles solver.

Usage:
    python -m scripts.benchmark [--directory DIR] [--dictionary NAME] [--rounds N]

Examples:
    python -m scripts.benchmark
    python -m scripts.benchmark --directory ~/words --dictionary english --rounds 10

This will:
  1. Ensure both <NAME>.txt and the binary cache <NAME>.dict exist
  2. Time parsing the text word list
  3. Time loading the binary cache (which should be the faster of the two)
  4. Time a full solve of a canonical puzzle and check that it is solved
"""
import argparse
import logging
import statistics
import sys
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quartiles.dictionary import Dictionary
from quartiles.metrics import StageTimer
from quartiles.settings import settings
from quartiles.solver import Solver

CANONICAL_PUZZLE = [
    "azz", "th", "ss", "tru",
    "ref", "fu", "ra", "nih",
    "cro", "mat", "wo", "sh",
    "re", "rds", "tic", "il",
    "lly", "zz", "is", "ment",
]


def main():
    parser = argparse.ArgumentParser(description="Quartiles Solver Benchmark")
    parser.add_argument("--directory", type=str, default=str(settings.DICTIONARY_DIR),
                        help=f"Dictionary directory (default: {settings.DICTIONARY_DIR})")
    parser.add_argument("--dictionary", type=str, default=settings.DICTIONARY_NAME,
                        help=f"Dictionary name (default: {settings.DICTIONARY_NAME})")
    parser.add_argument("--rounds", type=int, default=5,
                        help="Rounds per benchmark (default: 5)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    directory = Path(args.directory)
    txt_path = directory / f"{args.dictionary}.txt"
    dict_path = directory / f"{args.dictionary}.dict"
    if not txt_path.exists():
        print(f"Error: {txt_path} does not exist")
        sys.exit(1)

    # Ensure that both the text and binary files exist.
    dictionary = Dictionary.open(directory, args.dictionary)
    if not dict_path.exists():
        dictionary.serialize_to_file(dict_path)
    print(f"Dictionary: {txt_path} ({len(dictionary)} words)")

    results: dict[str, list[float]] = {"read_from_file": [], "deserialize_from_file": [], "solve": []}
    for round_no in range(args.rounds):
        timer = StageTimer(f"round {round_no + 1}")
        with timer.stage("read_from_file"):
            Dictionary.read_from_file(txt_path)
        with timer.stage("deserialize_from_file"):
            Dictionary.deserialize_from_file(dict_path)
        with timer.stage("solve"):
            solver = Solver(dictionary, CANONICAL_PUZZLE).solve_fully()
        if not solver.is_solved():
            print("Error: canonical puzzle was not solved; is the dictionary complete?")
            sys.exit(1)
        for name, elapsed in timer.timings.items():
            results[name].append(elapsed)

    print()
    print(f"{'benchmark':<24}{'median ms':>12}{'min ms':>12}{'max ms':>12}")
    for name, samples in results.items():
        print(f"{name:<24}{statistics.median(samples):>12.1f}{min(samples):>12.1f}{max(samples):>12.1f}")

    text_ms = statistics.median(results["read_from_file"])
    binary_ms = statistics.median(results["deserialize_from_file"])
    print()
    print(f"Binary cache speedup: {text_ms / binary_ms:.2f}x" if binary_ms else "Binary cache speedup: n/a")


if __name__ == "__main__":
    main()
