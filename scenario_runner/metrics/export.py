"""Turn worker results into measurement points."""

from collections.abc import Sequence
from datetime import datetime, timezone

from scenario_runner.context import RunContext
from scenario_runner.metrics.line_protocol import FieldValue, Point
from scenario_runner.models.result import WorkerResult
from scenario_runner.results import count_outcomes


def result_point(
    result: WorkerResult, context: RunContext, measurement: str, now: datetime
) -> Point:
    """One point per scenario, stamped with its finish time when known."""
    fields: dict[str, FieldValue] = {
        "duration": float(result.duration or 0.0),
        "success": 1 if result.outcome == "success" else 0,
    }
    if result.exit_code is not None:
        fields["exit_code"] = result.exit_code

    return Point(
        measurement=measurement,
        tags={
            "scenario": result.scenario,
            "branch": context.branch,
            "revision": context.revision,
            "outcome": result.outcome,
        },
        fields=fields,
        timestamp=result.finished_at or now,
    )


def result_points(
    results: Sequence[WorkerResult],
    context: RunContext,
    measurement: str,
    now: datetime | None = None,
) -> Sequence[Point]:
    """Points for every result of a run."""
    now = now or datetime.now(timezone.utc)
    return [result_point(result, context, measurement, now) for result in results]


def summary_point(
    results: Sequence[WorkerResult],
    context: RunContext,
    measurement: str,
    now: datetime | None = None,
) -> Point:
    """Run totals, written to ``<measurement>_summary``."""
    return Point(
        measurement=f"{measurement}_summary",
        tags={"branch": context.branch, "revision": context.revision},
        fields=dict(count_outcomes(results)),
        timestamp=now or datetime.now(timezone.utc),
    )
