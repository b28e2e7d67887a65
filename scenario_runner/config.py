"""Runner settings, loaded from SCENARIO_* environment variables."""

from collections.abc import Sequence
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORKER_COMMAND = ("python", "-m", "scenarios.run", "{scenario}")


class RunnerSettings(BaseSettings):
    """Settings shared by every subcommand.

    ``worker_command`` is read as a JSON list from the environment; each item
    may reference ``{scenario}``. ``revision`` and ``branch`` override what
    git reports, which is useful on CI runners with a detached HEAD.
    """

    model_config = SettingsConfigDict(env_prefix="SCENARIO_", extra="ignore")

    repo_path: Path = Path(".")
    scenarios_dir: Path = Path("scenarios")
    scenario_suffix: str = ".py"
    skip_list_file: Path = Path("skip-list.txt")
    image: str = "scenario-runner:latest"
    dockerfile: Path = Path("Dockerfile")
    build_context: Path = Path(".")
    worker_command: Sequence[str] = DEFAULT_WORKER_COMMAND
    concurrency: int = Field(default=4, ge=1)
    poll_interval: float = Field(default=5, gt=0)
    tail_lines: int = Field(default=200, ge=1)
    output_dir: Path = Path("scenario-output")
    results_file: Path = Path("scenario-results.lp")
    revision: str | None = None
    branch: str | None = None

    def command_for(self, scenario: str) -> list[str]:
        """Render the worker command for a scenario."""
        return [part.format(scenario=scenario) for part in self.worker_command]
