"""Validation data models.

This module defines core data structures for validation results:
- StageResult: Outcome of a single validation stage
- Thing: One document being validated, with its per-stage report
- ValidationRun: Aggregated results for every document of one invocation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from td_validator.core.enums import PipelineState, StageName, StageStatus, ThingKind
from td_validator.exceptions import ReadError

_MESSAGE_STATUSES = (StageStatus.INVALID, StageStatus.WARNING)


@dataclass(frozen=True)
class StageResult:
    """Result of a single validation stage.

    Attributes:
        status: Outcome of the stage.
        elapsed_ms: Time spent in this stage only, in milliseconds.
        message: Diagnostic from the underlying checker. Present only for
            Invalid and Warning results.

    Examples:
        >>> StageResult(StageStatus.INVALID, 0.4, "Expecting value: line 1 column 1 (char 0)")
        >>> StageResult(StageStatus.VALID, 1.2)
    """

    status: StageStatus
    elapsed_ms: float = 0.0
    message: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.status in _MESSAGE_STATUSES and not self.message:
            raise ValueError(f"{self.status.value} result requires a message")
        if self.status not in _MESSAGE_STATUSES and self.message is not None:
            raise ValueError(f"{self.status.value} result must not carry a message")
        if self.elapsed_ms < 0:
            raise ValueError("elapsed_ms must be non-negative")


SKIPPED = StageResult(StageStatus.SKIPPED)


def _empty_report() -> Dict[StageName, StageResult]:
    return {stage: SKIPPED for stage in StageName}


@dataclass
class Thing:
    """A single document moving through the validation pipeline.

    Created by the loader with every stage Skipped, mutated in place by the
    stage functions, and read-only once ``state`` is DONE.

    Attributes:
        path: Location of the source document.
        raw_content: The original text exactly as read.
        parsed: Decoded JSON value, None until parsing succeeds.
        kind: TD or TM. Defaults to TD, reclassified after parsing.
        report: Result for each stage; all four stages always present.
        overall_valid: None until the pipeline is done.
        elapsed_ms: Total pipeline time for this document.
        state: Current pipeline state.
    """

    path: Path
    raw_content: str
    parsed: Any = None
    kind: ThingKind = ThingKind.TD
    report: Dict[StageName, StageResult] = field(default_factory=_empty_report)
    overall_valid: Optional[bool] = None
    elapsed_ms: float = 0.0
    state: PipelineState = PipelineState.LOADED
    _recorded: Set[StageName] = field(default_factory=set, repr=False, compare=False)

    @property
    def title(self) -> str:
        """Display label: the document's file name."""
        return self.path.name

    @property
    def is_tm(self) -> bool:
        return self.kind == ThingKind.TM

    @property
    def is_done(self) -> bool:
        return self.state == PipelineState.DONE

    def record(self, stage: StageName, result: StageResult) -> None:
        """Store the result of a stage.

        Raises:
            ValueError: If the stage was already recorded or the Thing is done.
        """
        if self.is_done:
            raise ValueError(f"{self.title}: pipeline finished, cannot record {stage.value}")
        if stage in self._recorded:
            raise ValueError(f"{self.title}: result for {stage.value} already recorded")
        self._recorded.add(stage)
        self.report[stage] = result

    def status(self, stage: StageName) -> StageStatus:
        return self.report[stage].status

    def compute_overall_valid(self) -> bool:
        """True iff no stage reported Invalid. Warnings and skips do not count."""
        return all(r.status != StageStatus.INVALID for r in self.report.values())

    def get_messages(self) -> Dict[StageName, str]:
        """Diagnostics of every Invalid or Warning stage, in pipeline order."""
        return {stage: r.message for stage, r in self.report.items() if r.message}

    def has_warnings(self) -> bool:
        return any(r.status == StageStatus.WARNING for r in self.report.values())


@dataclass
class ValidationRun:
    """Aggregated results of validating a set of documents.

    Attributes:
        things: Validated documents, in input order.
        missing_paths: Inputs that did not exist.
        read_errors: Documents that were found but could not be read.

    Examples:
        >>> run = ValidationRun(things=[thing1, thing2])
        >>> run.has_errors()
        False
        >>> run.exit_code()
        0
    """

    things: List[Thing] = field(default_factory=list)
    missing_paths: List[Path] = field(default_factory=list)
    read_errors: List[ReadError] = field(default_factory=list)

    @property
    def document_count(self) -> int:
        """Number of documents found, readable or not."""
        return len(self.things) + len(self.read_errors)

    def get_failed_things(self) -> List[Thing]:
        return [t for t in self.things if t.overall_valid is False]

    def get_warning_things(self) -> List[Thing]:
        """Valid documents that still carry a warning."""
        return [t for t in self.things if t.overall_valid and t.has_warnings()]

    def count_by_status(self, stage: StageName) -> Dict[StageStatus, int]:
        """Count results of one stage across all documents.

        Returns:
            Mapping with an entry for every status, zero when unused.
        """
        counts = {status: 0 for status in StageStatus}
        for thing in self.things:
            counts[thing.status(stage)] += 1
        return counts

    def has_errors(self) -> bool:
        """Check if any document failed validation or could not be read."""
        return bool(self.read_errors) or bool(self.get_failed_things())

    def exit_code(self, allow_empty: bool = False) -> int:
        """Process exit status for this run.

        Args:
            allow_empty: Treat a run without any document as success.

        Returns:
            0 if every document is valid, 1 otherwise.
        """
        if self.document_count == 0:
            return 0 if allow_empty else 1
        return 1 if self.has_errors() else 0

    def summary(self) -> str:
        """Generate a concise text summary of the run.

        Examples:
            >>> print(run.summary())
            Validated 3 documents: 2 valid (1 with warnings), 1 invalid
        """
        total = len(self.things)
        failed = len(self.get_failed_things())
        warned = len(self.get_warning_things())
        noun = "document" if total == 1 else "documents"
        text = f"Validated {total} {noun}: {total - failed} valid"
        if warned:
            text += f" ({warned} with warnings)"
        text += f", {failed} invalid"
        if self.read_errors:
            text += f", {len(self.read_errors)} unreadable"
        if self.missing_paths:
            text += f", {len(self.missing_paths)} missing paths"
        return text


__all__ = ["StageResult", "SKIPPED", "Thing", "ValidationRun"]
