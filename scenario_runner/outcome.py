"""Classify worker output into an outcome."""

from scenario_runner.models.result import Outcome

SUCCESS_MARKER = "SUCCESS"
FAILURE_MARKER = "FAILURE"


def classify_output(output: str) -> Outcome:
    """Classify output by the success and failure markers it contains.

    Exactly one line with the success marker and none with the failure marker
    is a success, and symmetrically for failure. No markers, both markers, or
    a repeated marker cannot be told apart and are indeterminate.
    """
    lines = output.splitlines()
    successes = sum(1 for line in lines if SUCCESS_MARKER in line)
    failures = sum(1 for line in lines if FAILURE_MARKER in line)

    if successes == 1 and failures == 0:
        return "success"
    if failures == 1 and successes == 0:
        return "failure"
    return "indeterminate"


def classify(output: str, exit_code: int | None) -> Outcome:
    """Classify a worker by its output, falling back to its exit code.

    The exit code only decides when the markers are indeterminate and the
    worker has actually exited.
    """
    outcome = classify_output(output)
    if outcome != "indeterminate" or exit_code is None:
        return outcome
    return "success" if exit_code == 0 else "failure"
