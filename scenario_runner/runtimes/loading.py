"""Discovery of worker runtimes registered as package entry points."""

from importlib.metadata import entry_points
from typing import Any

from scenario_runner.runtimes.manifest import RuntimeManifest

ENTRY_POINT_GROUP = "scenario_runner.runtimes"


class RuntimeNotFoundError(LookupError):
    """No runtime is registered under the requested name."""


def load_runtime_manifest(key: str) -> RuntimeManifest[Any]:
    """Resolve the runtime registered as ``key``.

    The CLI asks for ``docker`` for ``-local`` commands and ``kubernetes``
    for ``-remote`` ones. Other packages can add runtimes to the
    ``scenario_runner.runtimes`` group.

    Raises:
        RuntimeNotFoundError: If nothing is registered under ``key``

    """
    registered = {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}
    if key not in registered:
        installed = ", ".join(sorted(registered)) or "none"
        raise RuntimeNotFoundError(
            f"No worker runtime named {key!r} is installed (installed: {installed})"
        )

    manifest: RuntimeManifest[Any] = registered[key].load()
    return manifest
