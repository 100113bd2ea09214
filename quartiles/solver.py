from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from quartiles.dictionary import Dictionary

logger = logging.getLogger("quartiles")

GRID_COLUMNS = 4
GRID_ROWS = 5
FRAGMENT_COUNT = GRID_COLUMNS * GRID_ROWS
PATH_LENGTH = 4
MAX_FRAGMENT_LENGTH = 8


class FragmentPathError(Exception):
    """Base class for the control-flow signals of the path algebra."""


class PathOverflow(FragmentPathError):
    def __str__(self):
        return "fragment path is already full"


class PathUnderflow(FragmentPathError):
    def __str__(self):
        return "fragment path is already empty"


class IndexOverflow(FragmentPathError):
    def __str__(self):
        return "fragment index is already at maximum"


class CannotIncrementEmpty(FragmentPathError):
    def __str__(self):
        return "fragment path is empty"


class InvalidPuzzle(ValueError):
    pass


@dataclass(frozen=True)
class FragmentPath:
    """Up to four distinct fragment indices denoting a candidate word.

    Slots fill left to right and vacate right to left. Every transition
    returns a new path; a path produced by a transition is always disjoint.
    """

    slots: tuple[int | None, ...] = (None,) * PATH_LENGTH

    @classmethod
    def of(cls, *indices: int) -> FragmentPath:
        if len(indices) > PATH_LENGTH:
            raise PathOverflow()
        return cls(tuple(indices) + (None,) * (PATH_LENGTH - len(indices)))

    def __iter__(self) -> Iterator[int]:
        return (index for index in self.slots if index is not None)

    def __len__(self) -> int:
        return sum(1 for index in self.slots if index is not None)

    def __getitem__(self, slot: int) -> int | None:
        return self.slots[slot]

    def __repr__(self):
        return f"FragmentPath({list(self)})"

    def is_empty(self) -> bool:
        return self.slots[0] is None

    def is_full(self) -> bool:
        return self.slots[PATH_LENGTH - 1] is not None

    def _rightmost(self) -> int:
        # -1 when empty
        return len(self) - 1

    def append(self) -> FragmentPath:
        """Descend: occupy the next slot with the smallest unused index."""
        if self.is_full():
            raise PathOverflow()
        used = set(self)
        index = 0
        while index in used:
            index += 1
        slots = list(self.slots)
        slots[self._rightmost() + 1] = index
        return FragmentPath(tuple(slots))

    def increment(self) -> FragmentPath:
        """Advance the rightmost index to the next value unused by the other slots."""
        rightmost = self._rightmost()
        if rightmost < 0:
            raise CannotIncrementEmpty()
        used = set(self.slots[:rightmost])
        ceiling = FRAGMENT_COUNT - 1
        while ceiling in used:
            ceiling -= 1
        value = self.slots[rightmost]
        while True:
            if value >= ceiling:
                raise IndexOverflow()
            value += 1
            if value not in used:
                break
        slots = list(self.slots)
        slots[rightmost] = value
        return FragmentPath(tuple(slots))

    def pop(self) -> FragmentPath:
        if self.is_empty():
            raise PathUnderflow()
        slots = list(self.slots)
        slots[self._rightmost()] = None
        return FragmentPath(tuple(slots))

    def pop_and_increment(self) -> FragmentPath:
        """Backtrack: drop the rightmost index and advance the one before it,
        retreating further while that level is exhausted.

        Raises ``PathUnderflow`` for an empty path and ``CannotIncrementEmpty``
        once every level is exhausted.
        """
        path = self
        while True:
            path = path.pop()
            try:
                return path.increment()
            except IndexOverflow:
                continue

    def is_disjoint(self) -> bool:
        indices = list(self)
        return len(indices) == len(set(indices))

    def word(self, fragments: Sequence[str]) -> str:
        return "".join(fragments[index] for index in self)


class Solver:
    """Resumable search for every dictionary word formed from 1-4 fragments.

    The search walks ``FragmentPath`` space depth-first, descending only while
    the candidate text is a dictionary prefix. Call ``solve`` repeatedly with a
    time budget to run it in slices, or ``solve_fully`` to run it to the end.
    """

    def __init__(self, dictionary: Dictionary, fragments: Sequence[str]):
        self.dictionary = dictionary
        self.fragments: tuple[str, ...] = validate_fragments(fragments)
        self._path = FragmentPath()
        self._solution: list[FragmentPath] = []
        self._finished = False

    @property
    def path(self) -> FragmentPath:
        return self._path

    def is_finished(self) -> bool:
        return self._finished

    def is_solved(self) -> bool:
        # Only meaningful once the search space is exhausted
        if not self._finished:
            return False
        return self.quartiles() is not None

    def quartiles(self) -> list[FragmentPath] | None:
        """Five full paths with distinct words that together use every fragment once.

        Returns None if the discovered full words admit no such partition,
        which happens when the grid was mistyped or is not a real puzzle.
        """
        full_paths = [path for path in self._solution if path.is_full()]
        words = [self.word(path) for path in full_paths]
        if len(set(words)) < FRAGMENT_COUNT // PATH_LENGTH:
            return None

        masks = [sum(1 << index for index in path) for path in full_paths]
        complete = (1 << FRAGMENT_COUNT) - 1

        def cover(used: int, chosen: list[int]) -> list[int] | None:
            if used == complete:
                return chosen
            # The lowest free fragment must be covered by one of the remaining paths.
            free = ~used & complete
            lowest = free & -free
            chosen_words = {words[i] for i in chosen}
            for i, mask in enumerate(masks):
                if mask & lowest and not mask & used and words[i] not in chosen_words:
                    found = cover(used | mask, chosen + [i])
                    if found is not None:
                        return found
            return None

        chosen = cover(0, [])
        if chosen is None:
            return None
        return [full_paths[i] for i in chosen]

    def solve(self, max_duration: float) -> FragmentPath | None:
        """Advance the search for at most ``max_duration`` seconds.

        Returns as soon as a word is discovered, with its path; otherwise
        returns None when the budget runs out or the search space is
        exhausted. A word found on the very last candidate is recorded in
        ``solution`` but not returned. At least one candidate is always examined, so a zero
        budget still makes progress. Check ``is_finished`` to learn whether
        more work remains.
        """
        if self._finished:
            return None

        start_time = time.perf_counter()
        while True:
            start_path = self._path
            word = self.word(start_path)
            found = None

            if not start_path.is_empty() and self.dictionary.contains(word):
                logger.debug("found word: %s", word)
                self._solution.append(start_path)
                found = start_path

            if self.dictionary.contains_prefix(word):
                try:
                    self._path = start_path.append()
                except PathOverflow:
                    pass

            if self._path == start_path:
                try:
                    self._path = _advance(start_path)
                except CannotIncrementEmpty:
                    logger.debug("exhausted search space (%d words)", len(self._solution))
                    self._finished = True
                    return None

            if self._path == start_path:
                raise RuntimeError(f"solver failed to make progress: {start_path!r} => {word!r}")

            if found is not None:
                return found

            if time.perf_counter() - start_time >= max_duration:
                return None

    def solve_fully(self) -> Solver:
        while not self._finished:
            self.solve(math.inf)
        return self

    def word(self, path: FragmentPath) -> str:
        return path.word(self.fragments)

    def solution_paths(self) -> list[FragmentPath]:
        return list(self._solution)

    def solution(self) -> list[str]:
        return [self.word(path) for path in self._solution]


def _advance(path: FragmentPath) -> FragmentPath:
    """Next sibling at the same depth, or backtrack when this depth is exhausted."""
    try:
        return path.increment()
    except IndexOverflow:
        return path.pop_and_increment()


def validate_fragments(fragments: Sequence[str]) -> tuple[str, ...]:
    if isinstance(fragments, str):
        raise InvalidPuzzle("fragments must be a sequence of strings, not a string")
    fragments = tuple(fragments)
    if len(fragments) != FRAGMENT_COUNT:
        raise InvalidPuzzle(
            f"expected {FRAGMENT_COUNT} fragments ({GRID_COLUMNS}x{GRID_ROWS} grid), got {len(fragments)}"
        )
    for index, fragment in enumerate(fragments):
        if not isinstance(fragment, str) or not fragment.isalpha() or len(fragment) > MAX_FRAGMENT_LENGTH:
            raise InvalidPuzzle(
                f"fragment {index} must be 1-{MAX_FRAGMENT_LENGTH} letters, got {fragment!r}"
            )
    return fragments
