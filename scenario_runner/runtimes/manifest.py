"""Runtime manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic_settings import BaseSettings

from scenario_runner.runtimes.base import WorkerRuntime


@dataclass(frozen=True, kw_only=True)
class RuntimeManifest[ConfigT: BaseSettings]:
    """Manifest describing a runtime plugin.

    The manifest contains references to the configuration class and the
    runtime factory so runtimes can be loaded lazily by key. The configuration
    class reads its own environment variables when instantiated without
    arguments.
    """

    config_cls: type[ConfigT]
    runtime_factory: Callable[[ConfigT], AbstractAsyncContextManager[WorkerRuntime]]
