"""Report generation for validation runs.

Three outputs are produced from completed Things:
- a console table, one row per document
- a JUnit XML document (one suite per document, one case per stage) for CI
- a detailed JSON report
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from td_validator import __version__
from td_validator.core.enums import StageName, StageStatus
from .models import SKIPPED, StageResult, Thing, ValidationRun

logger = logging.getLogger(__name__)

STAGE_COLUMNS: Dict[StageName, str] = {
    StageName.JSON: "JSON",
    StageName.SCHEMA: "Schema",
    StageName.DEFAULTS: "Defaults",
    StageName.JSONLD: "JSON-LD",
}

VALID_MARK = "✔"
INVALID_MARK = "✘"


def _overall_mark(thing: Thing) -> str:
    return VALID_MARK if thing.overall_valid else INVALID_MARK


def build_table(things: Iterable[Thing]) -> pd.DataFrame:
    """Summarize Things as a table.

    Returns:
        DataFrame with columns File, Type, one column per stage holding the
        status symbol, Time (ms) and Valid.
    """
    rows = []
    for thing in things:
        row = {"File": thing.title, "Type": thing.kind.value}
        for stage, column in STAGE_COLUMNS.items():
            row[column] = thing.status(stage).symbol
        row["Time (ms)"] = int(round(thing.elapsed_ms))
        row["Valid"] = _overall_mark(thing)
        rows.append(row)
    columns = ["File", "Type", *STAGE_COLUMNS.values(), "Time (ms)", "Valid"]
    return pd.DataFrame(rows, columns=columns)


def format_table(things: Iterable[Thing]) -> str:
    """Render the results table for the console."""
    return build_table(things).to_string(index=False)


# ============================================================================
# JUNIT XML
# ============================================================================


def _seconds(ms: float) -> str:
    return f"{ms / 1000.0:.3f}"


def _add_testcase(suite: ET.Element, classname: str, stage: StageName, result: StageResult) -> None:
    case = ET.SubElement(
        suite,
        "testcase",
        name=stage.value,
        classname=classname,
        time=_seconds(result.elapsed_ms),
    )
    if result.status == StageStatus.INVALID:
        failure = ET.SubElement(case, "failure", message=result.message or "")
        failure.text = result.message
    elif result.status == StageStatus.WARNING:
        error = ET.SubElement(case, "error", message=result.message or "")
        error.text = result.message
    elif result.status == StageStatus.SKIPPED:
        ET.SubElement(case, "skipped")


# (title, stage results, elapsed ms) for one <testsuite>
_Suite = Tuple[str, Dict[StageName, StageResult], float]


def _junit_suites(run: ValidationRun) -> List[_Suite]:
    suites: List[_Suite] = [(t.title, t.report, t.elapsed_ms) for t in run.things]
    # An unreadable document fails at the json stage and runs nothing else
    for error in run.read_errors:
        report = {stage: SKIPPED for stage in StageName}
        report[StageName.JSON] = StageResult(StageStatus.INVALID, 0.0, str(error))
        suites.append((error.path.name, report, 0.0))
    return suites


def _set_counts(element: ET.Element, suites: Sequence[_Suite]) -> None:
    counts = {status: 0 for status in StageStatus}
    for _, report, _ in suites:
        for result in report.values():
            counts[result.status] += 1
    element.set("tests", str(len(suites) * len(StageName)))
    element.set("failures", str(counts[StageStatus.INVALID]))
    element.set("errors", str(counts[StageStatus.WARNING]))
    element.set("skipped", str(counts[StageStatus.SKIPPED]))
    element.set("time", _seconds(sum(elapsed for _, _, elapsed in suites)))


def build_junit_report(run: ValidationRun) -> ET.ElementTree:
    """Build a JUnit XML report.

    One ``<testsuite>`` per input document and one ``<testcase>`` per stage.
    Invalid maps to ``<failure>``, Warning to ``<error>``, Skipped to
    ``<skipped>``; a Valid stage is a passing test case. Documents that
    could not be read get a suite whose json case fails with the read error.
    """
    suites = _junit_suites(run)
    root = ET.Element("testsuites", name="td-validator")
    _set_counts(root, suites)
    timestamp = datetime.now().isoformat(timespec="seconds")
    for title, report, elapsed in suites:
        suite = ET.SubElement(root, "testsuite", name=title, timestamp=timestamp)
        _set_counts(suite, [(title, report, elapsed)])
        for stage, result in report.items():
            _add_testcase(suite, title, stage, result)
    ET.indent(root)
    return ET.ElementTree(root)


def write_junit_report(run: ValidationRun, path: Path) -> Path:
    """Write the JUnit XML report to ``path`` and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_junit_report(run).write(path, encoding="utf-8", xml_declaration=True)
    logger.info("JUnit report saved: %s", path)
    return path


# ============================================================================
# JSON
# ============================================================================


def _thing_to_dict(thing: Thing) -> Dict:
    messages = thing.get_messages()
    stages = {}
    for stage, result in thing.report.items():
        entry = {"status": result.status.value, "time_ms": round(result.elapsed_ms, 3)}
        if stage in messages:
            entry["message"] = messages[stage]
        stages[stage.value] = entry
    return {
        "file": str(thing.path),
        "title": thing.title,
        "kind": thing.kind.value,
        "valid": thing.overall_valid,
        "time_ms": round(thing.elapsed_ms, 3),
        "stages": stages,
    }


def build_json_report(run: ValidationRun, offline: bool = False) -> str:
    """Generate a detailed JSON report of a run.

    Returns:
        Formatted JSON string with metadata, summary counts and the results
        of every stage of every document.
    """
    failed = run.get_failed_things()
    stage_counts: Dict[str, Dict[str, int]] = {}
    for stage in StageName:
        stage_counts[stage.value] = {
            status.value: count for status, count in run.count_by_status(stage).items()
        }

    report_data = {
        "metadata": {
            "validator_version": __version__,
            "generated_at": datetime.now().isoformat(),
            "offline": offline,
        },
        "summary": {
            "documents": run.document_count,
            "valid": len(run.things) - len(failed),
            "invalid": len(failed),
            "with_warnings": len(run.get_warning_things()),
            "unreadable": len(run.read_errors),
            "missing_paths": [str(p) for p in run.missing_paths],
            "stages": stage_counts,
        },
        "things": [_thing_to_dict(thing) for thing in run.things],
        "read_errors": [{"file": str(e.path), "reason": e.reason} for e in run.read_errors],
    }
    return json.dumps(report_data, indent=2, ensure_ascii=False)


def write_json_report(run: ValidationRun, path: Path, offline: bool = False) -> Path:
    """Write the JSON report to ``path`` and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(build_json_report(run, offline=offline))
    logger.info("JSON report saved: %s", path)
    return path


__all__: List[str] = [
    "STAGE_COLUMNS",
    "build_table",
    "format_table",
    "build_junit_report",
    "write_junit_report",
    "build_json_report",
    "write_json_report",
]
