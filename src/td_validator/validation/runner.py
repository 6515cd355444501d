"""Validation pipeline.

Drives one Thing through the stages as an explicit state machine:

    LOADED -> PARSED -> CLASSIFIED -> SCHEMA_CHECKED -> SEMANTIC_CHECKED -> DONE

Each state has one transition function. A failing parse or schema stage
jumps straight to DONE, leaving the remaining stages Skipped. There are no
loops and no retries, so every stage runs at most once per Thing.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from td_validator.core.enums import PipelineState, StageName, StageStatus
from td_validator.core.utils import elapsed_ms
from .checks import JsonLdProcessor
from .checks.json_syntax import parse_json
from .checks.jsonld import PyLdProcessor, validate_jsonld
from .checks.schema import validate_schema
from .checks.thing_type import check_thing_type
from .config import ValidationConfig
from .models import StageResult, Thing

logger = logging.getLogger(__name__)

# Stage that runs when leaving each state
_STAGE_FOR_STATE = {
    PipelineState.LOADED: StageName.JSON,
    PipelineState.CLASSIFIED: StageName.SCHEMA,
    PipelineState.SCHEMA_CHECKED: StageName.JSONLD,
}

# Conversions allowed to run at once, sized like the default thread pool
JSONLD_WORKERS = min(32, (os.cpu_count() or 1) + 4)

Transition = Callable[[Thing], Awaitable[PipelineState]]


class Pipeline:
    """Validation pipeline for a run.

    Args:
        config: Run options; ``offline`` and ``jsonld_timeout`` are used here.
        processor: JSON-LD engine. Defaults to PyLD with the configured
            timeout applied to remote context requests.

    A Pipeline belongs to one event loop; create one per run.

    Examples:
        >>> pipeline = Pipeline(ValidationConfig(offline=True))
        >>> asyncio.run(pipeline.validate(thing))
        True
    """

    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        processor: Optional[JsonLdProcessor] = None,
    ) -> None:
        self.config = config or ValidationConfig()
        if processor is None and not self.config.offline:
            processor = PyLdProcessor(timeout=self.config.jsonld_timeout)
        self.processor = processor
        self._jsonld_slots = asyncio.Semaphore(JSONLD_WORKERS)
        self._transitions: Dict[PipelineState, Transition] = {
            PipelineState.LOADED: self._parse,
            PipelineState.PARSED: self._classify,
            PipelineState.CLASSIFIED: self._check_schema,
            PipelineState.SCHEMA_CHECKED: self._check_semantics,
            PipelineState.SEMANTIC_CHECKED: self._finish,
        }

    async def validate(self, thing: Thing) -> bool:
        """Run a loaded Thing through every applicable stage.

        Never raises for problems with the document: every failure ends up
        in ``thing.report``. Returns ``thing.overall_valid``.
        """
        if thing.state != PipelineState.LOADED:
            raise ValueError(f"{thing.title} was already validated (state {thing.state.value})")

        start = time.perf_counter()
        while thing.state != PipelineState.DONE:
            state = thing.state
            try:
                thing.state = await self._transitions[state](thing)
            except Exception as e:  # noqa: BLE001 - one document must not abort the run
                self._record_crash(thing, state, e)
                thing.state = PipelineState.DONE

        thing.overall_valid = thing.compute_overall_valid()
        thing.elapsed_ms = elapsed_ms(start)
        logger.debug(
            "%s: %s in %.1f ms",
            thing.title,
            "valid" if thing.overall_valid else "invalid",
            thing.elapsed_ms,
        )
        return thing.overall_valid

    async def validate_all(self, things: Sequence[Thing]) -> List[bool]:
        """Validate every Thing concurrently; returns once all are done."""
        return list(await asyncio.gather(*(self.validate(thing) for thing in things)))

    async def _parse(self, thing: Thing) -> PipelineState:
        if parse_json(thing):
            return PipelineState.PARSED
        return PipelineState.DONE

    async def _classify(self, thing: Thing) -> PipelineState:
        check_thing_type(thing)
        return PipelineState.CLASSIFIED

    async def _check_schema(self, thing: Thing) -> PipelineState:
        if validate_schema(thing):
            return PipelineState.SCHEMA_CHECKED
        return PipelineState.DONE

    async def _check_semantics(self, thing: Thing) -> PipelineState:
        if self.config.offline:
            logger.debug("%s: offline, JSON-LD validation skipped", thing.title)
        else:
            await validate_jsonld(
                thing, self.processor, self.config.jsonld_timeout, self._jsonld_slots
            )
        return PipelineState.SEMANTIC_CHECKED

    async def _finish(self, thing: Thing) -> PipelineState:
        return PipelineState.DONE

    @staticmethod
    def _record_crash(thing: Thing, state: PipelineState, e: Exception) -> None:
        logger.exception("Unexpected error validating %s (state %s)", thing.title, state.value)
        stage = _STAGE_FOR_STATE.get(state)
        if stage is None or thing.status(stage) != StageStatus.SKIPPED:
            # Results are never overwritten; blame the first stage not yet settled
            stage = next((s for s in StageName if thing.status(s) == StageStatus.SKIPPED), None)
        if stage is not None:
            message = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            thing.record(stage, StageResult(StageStatus.INVALID, 0.0, message))


async def validate_thing(
    thing: Thing,
    config: Optional[ValidationConfig] = None,
    processor: Optional[JsonLdProcessor] = None,
) -> bool:
    """Validate a single Thing. See Pipeline.validate."""
    return await Pipeline(config, processor).validate(thing)


async def validate_things(
    things: Sequence[Thing],
    config: Optional[ValidationConfig] = None,
    processor: Optional[JsonLdProcessor] = None,
) -> List[bool]:
    """Validate Things concurrently with a shared pipeline."""
    return await Pipeline(config, processor).validate_all(things)


__all__ = ["Pipeline", "validate_thing", "validate_things"]
