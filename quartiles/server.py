import asyncio
import logging
import uuid
from collections import OrderedDict

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from quartiles.dictionary import Dictionary
from quartiles.settings import effective_log_level, settings
from quartiles.solver import FragmentPath, InvalidPuzzle, Solver, validate_fragments

logging.basicConfig(level=effective_log_level(settings), format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("quartiles")

# Populated at startup
_dictionary: Dictionary | None = None
_puzzles: "OrderedDict[str, Solver]" = OrderedDict()

# Upper bound on a single tick, which runs on the event loop
MAX_TICK_MS = 1000


class PuzzleRequest(BaseModel):
    fragments: list[str]

    @field_validator("fragments")
    @classmethod
    def check_fragments(cls, v: list[str]) -> list[str]:
        v = [fragment.strip().lower() for fragment in v]
        try:
            validate_fragments(v)
        except InvalidPuzzle as e:
            raise ValueError(str(e)) from e
        return v


def _path_json(path: FragmentPath) -> list[int]:
    return list(path)


def _solver_state(solver: Solver) -> dict:
    quartiles = solver.quartiles() if solver.is_finished() else None
    return {
        "fragments": list(solver.fragments),
        "finished": solver.is_finished(),
        "solved": solver.is_solved(),
        "words": solver.solution(),
        "paths": [_path_json(p) for p in solver.solution_paths()],
        "quartiles": [solver.word(p) for p in quartiles] if quartiles else None,
    }


async def _solve_cooperatively(solver: Solver, tick_seconds: float):
    """Run the solver to exhaustion one tick at a time, yielding to the event loop between ticks."""
    while not solver.is_finished():
        solver.solve(tick_seconds)
        await asyncio.sleep(0)


def create_app() -> FastAPI:
    from contextlib import asynccontextmanager

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        global _dictionary

        logger.info("Loading dictionary %s from %s", settings.DICTIONARY_NAME, settings.DICTIONARY_DIR)
        _dictionary = Dictionary.open(settings.DICTIONARY_DIR, settings.DICTIONARY_NAME)
        logger.info("Dictionary loaded (%d words)", len(_dictionary))

        yield

        _puzzles.clear()
        _dictionary = None

    application = FastAPI(title="Quartiles Solver", lifespan=lifespan)

    @application.get("/health")
    async def health():
        return {"status": "ok", "dictionary_loaded": _dictionary is not None}

    @application.post("/solve")
    async def solve(req: PuzzleRequest):
        from quartiles.metrics import StageTimer

        timer = StageTimer("solve")
        with timer.stage("solve"):
            solver = Solver(_dictionary, req.fragments)
            await _solve_cooperatively(solver, settings.TICK_MS / 1000)
        timer.log_summary()
        logger.info("Found %d words (solved=%s)", len(solver.solution()), solver.is_solved())

        return JSONResponse({
            **_solver_state(solver),
            "word_count": len(solver.solution()),
            "processing_time": timer.total_ms,
            "stage_timings": timer.summary(),
        })

    @application.post("/puzzles", status_code=201)
    async def create_puzzle(req: PuzzleRequest):
        puzzle_id = uuid.uuid4().hex
        _puzzles[puzzle_id] = Solver(_dictionary, req.fragments)
        while len(_puzzles) > max(settings.MAX_PUZZLES, 1):
            evicted, _ = _puzzles.popitem(last=False)
            logger.info("Evicted puzzle %s", evicted)
        logger.info("Created puzzle %s", puzzle_id)
        return {"id": puzzle_id, "fragments": req.fragments}

    def _get_puzzle(puzzle_id: str) -> Solver:
        solver = _puzzles.get(puzzle_id)
        if solver is None:
            raise HTTPException(404, f"Unknown puzzle: {puzzle_id}")
        return solver

    @application.post("/puzzles/{puzzle_id}/tick")
    async def tick_puzzle(puzzle_id: str, ms: int | None = Query(None, ge=0, le=MAX_TICK_MS)):
        solver = _get_puzzle(puzzle_id)
        budget = min(settings.TICK_MS if ms is None else ms, MAX_TICK_MS)
        path = solver.solve(budget / 1000)
        return {
            "word": solver.word(path) if path is not None else None,
            "path": _path_json(path) if path is not None else None,
            "finished": solver.is_finished(),
            "solved": solver.is_solved(),
            "word_count": len(solver.solution_paths()),
        }

    @application.get("/puzzles/{puzzle_id}")
    async def get_puzzle(puzzle_id: str):
        return {"id": puzzle_id, **_solver_state(_get_puzzle(puzzle_id))}

    @application.delete("/puzzles/{puzzle_id}", status_code=204)
    async def delete_puzzle(puzzle_id: str):
        _get_puzzle(puzzle_id)
        del _puzzles[puzzle_id]

    @application.get("/api/settings")
    async def api_get_settings():
        from quartiles.settings import get_editable_settings, EDITABLE_FIELDS
        values = get_editable_settings(settings)
        field_types = {k: v.__name__ for k, v in EDITABLE_FIELDS.items()}
        return JSONResponse({"settings": values, "field_types": field_types})

    @application.post("/api/settings")
    async def api_post_settings(request: Request):
        from quartiles.settings import update_settings, get_editable_settings
        body = await request.json()
        if not isinstance(body, dict):
            return JSONResponse({"errors": {"body": "expected a JSON object"}}, status_code=400)
        errors = update_settings(settings, **body)
        if errors:
            return JSONResponse({"updated": get_editable_settings(settings), "errors": errors}, status_code=400)
        logger.setLevel(effective_log_level(settings))
        logger.info("Settings updated: %s", body)
        return JSONResponse({"updated": get_editable_settings(settings)})

    return application


app = create_app()
