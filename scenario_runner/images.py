"""Build and push the scenario image."""

import logging

from scenario_runner.config import RunnerSettings
from scenario_runner.context import RunContext
from scenario_runner.process import run_command

log = logging.getLogger(__name__)


async def build_image(
    settings: RunnerSettings, context: RunContext, docker: str = "docker"
) -> None:
    """Build the scenario image, passing the run's revision and branch."""
    log.info("Building image %s from %s", settings.image, settings.dockerfile)
    await run_command(
        docker,
        "build",
        "--tag",
        settings.image,
        "--file",
        str(settings.dockerfile),
        "--build-arg",
        f"GIT_REVISION={context.revision}",
        "--build-arg",
        f"GIT_BRANCH={context.branch}",
        str(settings.build_context),
    )
    log.info("Built image %s", settings.image)


async def push_image(settings: RunnerSettings, docker: str = "docker") -> None:
    """Push the scenario image to its registry."""
    log.info("Pushing image %s", settings.image)
    await run_command(docker, "push", settings.image)
    log.info("Pushed image %s", settings.image)
