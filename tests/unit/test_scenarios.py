"""Tests for scenario selection."""

from pathlib import Path

import pytest

from scenario_runner.scenarios import (
    filter_skipped,
    list_scenarios,
    load_skip_list,
    select_scenarios,
)


@pytest.fixture
def scenarios_dir(tmp_path: Path) -> Path:
    """Create a scenarios directory with a few entries."""
    directory = tmp_path / "scenarios"
    directory.mkdir()
    for name in ["name_register.py", "atlas_ping.py", "_helpers.py", "README.md"]:
        (directory / name).write_text("")
    (directory / "data.py").mkdir()
    return directory


def test_lists_scenarios_sorted(scenarios_dir: Path) -> None:
    """Lists stems of matching files, sorted, skipping helpers and dirs."""
    assert list_scenarios(scenarios_dir) == ["atlas_ping", "name_register"]


def test_lists_with_custom_suffix(scenarios_dir: Path) -> None:
    """Uses the configured suffix."""
    assert list_scenarios(scenarios_dir, suffix=".md") == ["README"]


def test_load_skip_list_ignores_comments(tmp_path: Path) -> None:
    """Skips comments and blank lines, strips whitespace."""
    skip_file = tmp_path / "skip-list.txt"
    skip_file.write_text("# flaky on CI\nname_register\n\n  atlas_ping  \n#atlas\n")

    assert load_skip_list(skip_file) == {"name_register", "atlas_ping"}


def test_load_skip_list_missing_file(tmp_path: Path) -> None:
    """A missing skip list skips nothing."""
    assert load_skip_list(tmp_path / "missing.txt") == frozenset()


def test_filter_skipped_is_exact_and_keeps_order() -> None:
    """Only exact names are dropped; order of the rest is preserved."""
    scenarios = ["c", "name", "a", "name_register", "b"]

    assert filter_skipped(scenarios, {"name", "zzz"}) == [
        "c",
        "a",
        "name_register",
        "b",
    ]


def test_filter_skipped_treats_names_literally() -> None:
    """Skip entries are not patterns."""
    assert filter_skipped(["abc", "a.c"], {"a.c", "a*"}) == ["abc"]


def test_select_scenarios(scenarios_dir: Path, tmp_path: Path) -> None:
    """Combines listing and skip list."""
    skip_file = tmp_path / "skip-list.txt"
    skip_file.write_text("atlas_ping\n")

    assert select_scenarios(scenarios_dir, skip_file) == ["name_register"]
