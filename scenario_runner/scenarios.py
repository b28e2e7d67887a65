"""Enumerate the scenarios to run."""

import logging
from collections.abc import Collection, Sequence
from pathlib import Path

log = logging.getLogger(__name__)


def load_skip_list(skip_list_file: Path) -> frozenset[str]:
    """Read scenario names to skip.

    One name per line; blank lines and lines starting with ``#`` are ignored.
    A missing file means nothing is skipped.
    """
    if not skip_list_file.exists():
        log.info("No skip list at %s", skip_list_file)
        return frozenset()

    names = set()
    for line in skip_list_file.read_text().splitlines():
        name = line.strip()
        if name and not name.startswith("#"):
            names.add(name)
    return frozenset(names)


def list_scenarios(scenarios_dir: Path, suffix: str = ".py") -> Sequence[str]:
    """List scenario names found in a directory, sorted.

    A scenario is a file ending in ``suffix``; its name is the file name
    without the suffix. Names starting with ``_`` are helpers, not scenarios.
    """
    names = [
        path.name.removesuffix(suffix)
        for path in scenarios_dir.iterdir()
        if path.is_file() and path.name.endswith(suffix)
    ]
    return sorted(name for name in names if name and not name.startswith("_"))


def filter_skipped(
    scenarios: Sequence[str], skip_list: Collection[str]
) -> Sequence[str]:
    """Drop skipped scenarios by exact name, keeping the order of the rest."""
    return [scenario for scenario in scenarios if scenario not in skip_list]


def select_scenarios(
    scenarios_dir: Path, skip_list_file: Path, suffix: str = ".py"
) -> Sequence[str]:
    """Scenarios in the directory minus those in the skip list."""
    skip_list = load_skip_list(skip_list_file)
    scenarios = filter_skipped(list_scenarios(scenarios_dir, suffix), skip_list)
    log.info(
        "Selected %d scenario(s), %d skipped", len(scenarios), len(skip_list)
    )
    return scenarios
