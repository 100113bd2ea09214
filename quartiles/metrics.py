import logging
import time
from contextlib import contextmanager

logger = logging.getLogger("quartiles")


class StageTimer:
    """Wall-clock milliseconds per named stage of one run (a solve, a load, a benchmark round)."""

    def __init__(self, label: str = "run"):
        self.label = label
        self.timings: dict[str, float] = {}
        self._start = time.perf_counter()

    @contextmanager
    def stage(self, name: str):
        t0 = time.perf_counter()
        try:
            yield
        finally:
            # Repeated stages accumulate, so a stage can wrap each tick of a loop.
            elapsed_ms = (time.perf_counter() - t0) * 1000
            self.timings[name] = round(self.timings.get(name, 0.0) + elapsed_ms, 1)
            logger.debug("%s stage=%s elapsed=%.1fms", self.label, name, elapsed_ms)

    @property
    def total_ms(self) -> float:
        return round((time.perf_counter() - self._start) * 1000, 1)

    def summary(self) -> dict:
        return {**self.timings, "total": self.total_ms}

    def log_summary(self):
        stages = " ".join(f"{name}={ms}ms" for name, ms in self.timings.items())
        logger.info("%s %s total=%.1fms", self.label, stages, self.total_ms)
