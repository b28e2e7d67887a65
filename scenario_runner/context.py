"""Run identity derived from the source revision and branch."""

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from scenario_runner.process import run_command

log = logging.getLogger(__name__)

MAX_NAME_LENGTH = 63
MAX_RUN_ID_LENGTH = 40
DIGEST_LENGTH = 8

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]+")


def sanitize_name(value: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Lowercase a value and reduce it to ``[a-z0-9-]``.

    The result is valid as a docker container name fragment, a kubernetes
    pod name and a label value.
    """
    cleaned = _INVALID_NAME_CHARS.sub("-", value.lower()).strip("-")
    return cleaned[:max_length].rstrip("-")


def scenario_slug(scenario: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Name-safe form of a scenario name that is unique per scenario.

    Names that survive sanitizing unchanged and fit are used as they are.
    Anything else gets a short digest of the raw name appended, so
    ``foo_bar`` and ``foo-bar``, or two long names with a common prefix,
    never map to the same slug.
    """
    cleaned = sanitize_name(scenario, max_length=len(scenario))
    if cleaned == scenario and len(cleaned) <= max_length:
        return cleaned

    digest = hashlib.sha256(scenario.encode()).hexdigest()[:DIGEST_LENGTH]
    prefix = cleaned[: max_length - DIGEST_LENGTH - 1].rstrip("-")
    return f"{prefix}-{digest}" if prefix else digest


@dataclass(frozen=True, kw_only=True)
class RunContext:
    """Identity of one invocation batch.

    Every worker spawned for the batch carries ``run_id`` so the batch can be
    found again later (results, progress, cleanup).
    """

    revision: str
    branch: str

    @property
    def run_id(self) -> str:
        """Short revision and branch, sanitized."""
        return sanitize_name(
            f"{self.revision[:7]}-{self.branch}", max_length=MAX_RUN_ID_LENGTH
        )

    def worker_name(self, scenario: str) -> str:
        """Name of the worker running ``scenario`` in this run.

        The run ID suffix is always kept whole; only the scenario part is
        shortened.
        """
        suffix = f"-{self.run_id}"
        return f"{scenario_slug(scenario, MAX_NAME_LENGTH - len(suffix))}{suffix}"


async def resolve_run_context(
    repo_path: Path,
    revision: str | None = None,
    branch: str | None = None,
) -> RunContext:
    """Build the run context, asking git for whatever was not supplied.

    Args:
        repo_path: Path to the source repository
        revision: Revision override (e.g. from CI environment)
        branch: Branch override (e.g. from CI environment)

    Returns:
        The run context for this invocation.

    Raises:
        CommandError: If git cannot resolve HEAD

    """
    if revision is None:
        revision = await run_command(
            "git", "rev-parse", "--short", "HEAD", cwd=repo_path
        )
    if branch is None:
        branch = await run_command(
            "git", "rev-parse", "--abbrev-ref", "HEAD", cwd=repo_path
        )

    context = RunContext(revision=revision, branch=branch)
    log.debug("Resolved run context: run_id=%s", context.run_id)
    return context
