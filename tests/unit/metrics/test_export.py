"""Tests for turning results into points."""

from datetime import datetime, timezone

from scenario_runner.context import RunContext
from scenario_runner.metrics.export import result_points, summary_point
from scenario_runner.testing.factories import WorkerResultFactory

CONTEXT = RunContext(revision="abc1234", branch="main")
NOW = datetime(2099, 1, 1, tzinfo=timezone.utc)


def test_result_points() -> None:
    """One tagged point per result."""
    finished = datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc)
    results = [
        WorkerResultFactory.build(
            scenario="smoke",
            outcome="success",
            duration=12.5,
            exit_code=0,
            finished_at=finished,
        ),
        WorkerResultFactory.build(
            scenario="slow", outcome="indeterminate", duration=None, exit_code=None
        ),
    ]

    points = result_points(results, CONTEXT, "scenario_results", now=NOW)

    assert points[0].tags == {
        "scenario": "smoke",
        "branch": "main",
        "revision": "abc1234",
        "outcome": "success",
    }
    assert points[0].fields == {"duration": 12.5, "success": 1, "exit_code": 0}
    assert points[0].timestamp == finished
    assert points[1].fields == {"duration": 0.0, "success": 0}
    assert points[1].timestamp == NOW


def test_summary_point() -> None:
    """Counts outcomes into a summary measurement."""
    results = [
        WorkerResultFactory.build(outcome="success"),
        WorkerResultFactory.build(outcome="failure"),
    ]

    point = summary_point(results, CONTEXT, "scenario_results", now=NOW)

    assert point.measurement == "scenario_results_summary"
    assert point.fields == {"total": 2, "passed": 1, "failed": 1, "indeterminate": 0}
    assert point.to_line("s").startswith(
        "scenario_results_summary,branch=main,revision=abc1234 "
    )
