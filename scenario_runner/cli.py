"""CLI entry point for the scenario runner."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from scenario_runner.artifacts import cleanup_files, save_outputs
from scenario_runner.config import RunnerSettings
from scenario_runner.context import RunContext, resolve_run_context
from scenario_runner.images import build_image, push_image
from scenario_runner.launcher import BoundedLauncher
from scenario_runner.metrics.config import InfluxConfig
from scenario_runner.metrics.export import result_points, summary_point
from scenario_runner.metrics.sink import (
    InfluxSink,
    MetricsWriteError,
    write_import_file,
)
from scenario_runner.models.result import WorkerExit, WorkerResult
from scenario_runner.process import CommandError
from scenario_runner.progress import get_progress
from scenario_runner.results import collect_results, count_outcomes
from scenario_runner.runtimes.base import WorkerRuntime
from scenario_runner.runtimes.docker import DockerConfig
from scenario_runner.runtimes.kubernetes import KubernetesConfig, KubernetesRuntime
from scenario_runner.runtimes.loading import (
    RuntimeNotFoundError,
    load_runtime_manifest,
)
from scenario_runner.scenarios import select_scenarios

LOCAL_RUNTIME = "docker"
REMOTE_RUNTIME = "kubernetes"

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
    "indeterminate": "❔",
}

COMMANDS: Mapping[str, str] = {
    "build-image": "Build the scenario image",
    "push-image": "Push the scenario image",
    "run-all-local": "Run every scenario in local docker containers",
    "run-one-local": "Run one scenario in a local docker container",
    "results-local": "Show results of the current run on docker",
    "write-local": "Write results of the current run on docker to InfluxDB",
    "progress-local": "Show progress of the current run on docker",
    "cleanup-files-local": "Remove saved outputs and the results file",
    "cleanup-docker-local": "Remove the docker containers of the current run",
    "run-all-remote": "Run every scenario as pods on the cluster",
    "run-one-remote": "Run one scenario as a pod on the cluster",
    "results-remote": "Show results of the current run on the cluster",
    "progress-remote": "Show progress of the current run on the cluster",
    "cleanup-remote": "Delete the pods of the current run",
    "pods-remote": "List pods in the configured namespace",
    "nodes-remote": "List cluster nodes",
}

SINGLE_SCENARIO_COMMANDS = frozenset(["run-one-local", "run-one-remote"])

EXPECTED_ERRORS = (CommandError, MetricsWriteError, RuntimeNotFoundError)


def log_launch_summary(log: logging.Logger, exits: Sequence[WorkerExit]) -> None:
    """Log how each launched worker ended."""
    log.info("=" * 80)
    log.info("Launch Summary:")
    log.info("=" * 80)

    for worker_exit in exits:
        if worker_exit.error is not None:
            log.info("❗ %s: %s", worker_exit.scenario, worker_exit.error)
        else:
            log.info(
                "%s: exited with code %s", worker_exit.scenario, worker_exit.exit_code
            )


def log_results_summary(log: logging.Logger, results: Sequence[WorkerResult]) -> None:
    """Log a formatted summary of scenario results."""
    log.info("=" * 80)
    log.info("Scenario Results Summary:")
    log.info("=" * 80)

    for result in results:
        symbol = STATUS_SYMBOLS.get(result.outcome, "?")
        duration = f"{result.duration:.2f}s" if result.duration is not None else "n/a"
        log.info("%s %s: %s (%s)", symbol, result.scenario, result.outcome, duration)

    counts = count_outcomes(results)
    log.info(
        "%d passed, %d failed, %d indeterminate of %d",
        counts["passed"],
        counts["failed"],
        counts["indeterminate"],
        counts["total"],
    )


def format_output(results: Sequence[WorkerResult]) -> dict[str, Any]:
    """Format scenario results for JSON output."""
    all_results = [
        {
            "scenario": result.scenario,
            "worker": result.worker_name,
            "outcome": result.outcome,
            "exit_code": result.exit_code,
            "duration": result.duration,
            "started_at": result.started_at.isoformat() if result.started_at else None,
            "finished_at": (
                result.finished_at.isoformat() if result.finished_at else None
            ),
        }
        for result in results
    ]
    return {**count_outcomes(results), "results": all_results}


async def run_all(
    runtime: WorkerRuntime, settings: RunnerSettings, context: RunContext
) -> int:
    """Launch every selected scenario and wait for all of them."""
    log = logging.getLogger("scenario_runner")
    scenarios = select_scenarios(
        settings.scenarios_dir, settings.skip_list_file, settings.scenario_suffix
    )
    launcher = BoundedLauncher(
        runtime=runtime,
        image=settings.image,
        command_for=settings.command_for,
        concurrency=settings.concurrency,
        poll_interval=settings.poll_interval,
    )
    exits = await launcher.launch_all(context, scenarios)
    log_launch_summary(log, exits)
    return 1 if any(e.error is not None for e in exits) else 0


async def run_one(
    runtime: WorkerRuntime,
    settings: RunnerSettings,
    context: RunContext,
    scenario: str,
) -> int:
    """Launch a single scenario and wait for it."""
    log = logging.getLogger("scenario_runner")
    launcher = BoundedLauncher(
        runtime=runtime,
        image=settings.image,
        command_for=settings.command_for,
        concurrency=1,
        poll_interval=settings.poll_interval,
    )
    worker_exit = await launcher.launch_one(context, scenario)
    log_launch_summary(log, [worker_exit])
    return 1 if worker_exit.error is not None else 0


async def show_results(
    runtime: WorkerRuntime, settings: RunnerSettings, context: RunContext
) -> int:
    """Print results of the run and save each worker's output tail."""
    log = logging.getLogger("scenario_runner")
    results, outputs = await collect_results(
        runtime, context.run_id, settings.tail_lines
    )
    save_outputs(settings.output_dir, outputs)
    log_results_summary(log, results)
    print(json.dumps(format_output(results), indent=2))
    return 1 if any(r.outcome == "failure" for r in results) else 0


async def write_results(
    runtime: WorkerRuntime,
    settings: RunnerSettings,
    context: RunContext,
    influx_config: InfluxConfig,
) -> int:
    """Export results of the run to InfluxDB through an import file."""
    log = logging.getLogger("scenario_runner")
    results, _ = await collect_results(runtime, context.run_id, settings.tail_lines)
    if not results:
        log.info("No results for run %s, nothing to write", context.run_id)
        return 0

    points = result_points(results, context, influx_config.measurement)
    write_import_file(
        settings.results_file,
        influx_config.database,
        points,
        influx_config.precision,
    )

    async with InfluxSink.from_config(influx_config) as sink:
        imported = await sink.import_file(settings.results_file)
        await sink.write_point(
            summary_point(results, context, influx_config.measurement)
        )

    log.info("Wrote %d result(s) to %s", imported, influx_config.database)
    return 0


async def show_progress(
    runtime: WorkerRuntime, settings: RunnerSettings, context: RunContext
) -> int:
    """Print how many scenarios of the run have finished."""
    total = len(
        select_scenarios(
            settings.scenarios_dir, settings.skip_list_file, settings.scenario_suffix
        )
    )
    progress = await get_progress(runtime, context.run_id, total)
    print(progress.describe())
    return 0


async def cleanup_workers(runtime: WorkerRuntime, context: RunContext) -> int:
    """Remove every worker of the run."""
    log = logging.getLogger("scenario_runner")
    handles = await runtime.list_workers(context.run_id)
    await asyncio.gather(*(runtime.remove(handle) for handle in handles))
    log.info("Removed %d worker(s) of run %s", len(handles), context.run_id)
    return 0


async def query_cluster(command: str) -> int:
    """Print pod or node names, one per line."""
    async with KubernetesRuntime.from_config(KubernetesConfig()) as runtime:
        if command == "pods-remote":
            names = await runtime.list_pods()
        else:
            names = await runtime.list_nodes()
    for name in names:
        print(name)
    return 0


async def run(
    command: str, settings: RunnerSettings, scenario: str | None = None
) -> int:
    """Run a subcommand and return exit code."""
    log = logging.getLogger("scenario_runner")

    if command == "cleanup-files-local":
        cleanup_files(settings.output_dir, settings.results_file)
        return 0

    if command in ("pods-remote", "nodes-remote"):
        return await query_cluster(command)

    context = await resolve_run_context(
        settings.repo_path, settings.revision, settings.branch
    )
    log.info(
        "Run %s (revision=%s, branch=%s)",
        context.run_id,
        context.revision,
        context.branch,
    )

    if command == "build-image":
        await build_image(settings, context, docker=DockerConfig().binary)
        return 0
    if command == "push-image":
        await push_image(settings, docker=DockerConfig().binary)
        return 0

    runtime_key = LOCAL_RUNTIME if command.endswith("-local") else REMOTE_RUNTIME
    log.info("Loading runtime: %s", runtime_key)
    manifest = load_runtime_manifest(runtime_key)

    async with manifest.runtime_factory(manifest.config_cls()) as runtime:
        match command:
            case "run-all-local" | "run-all-remote":
                return await run_all(runtime, settings, context)
            case "run-one-local" | "run-one-remote" if scenario is not None:
                return await run_one(runtime, settings, context, scenario)
            case "results-local" | "results-remote":
                return await show_results(runtime, settings, context)
            case "write-local":
                return await write_results(runtime, settings, context, InfluxConfig())
            case "progress-local" | "progress-remote":
                return await show_progress(runtime, settings, context)
            case "cleanup-docker-local" | "cleanup-remote":
                return await cleanup_workers(runtime, context)

    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per command."""
    parser = argparse.ArgumentParser(
        prog="scenario-runner",
        description="Run integration scenarios on docker or kubernetes",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    for name, help_text in COMMANDS.items():
        subparser = subparsers.add_parser(name, help=help_text)
        if name in SINGLE_SCENARIO_COMMANDS:
            subparser.add_argument("name", help="Scenario to run")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    settings = RunnerSettings()
    try:
        exit_code = asyncio.run(
            run(args.command, settings, scenario=getattr(args, "name", None))
        )
    except EXPECTED_ERRORS as exc:
        logging.getLogger("scenario_runner").error("%s", exc)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
