"""Thin async wrapper around external command-line tools."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

log = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = tuple(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"{' '.join(self.command)} failed with exit code {returncode}: {stderr}"
        )


async def run_command(
    *args: str,
    cwd: Path | None = None,
    check: bool = True,
) -> str:
    """Run a command and return its decoded stdout.

    Args:
        *args: Program and arguments
        cwd: Working directory for the command
        check: Raise CommandError on a non-zero exit code

    Returns:
        Standard output with surrounding whitespace stripped.

    Raises:
        CommandError: If the command fails and ``check`` is set

    """
    log.debug("Running: %s", " ".join(args))
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    returncode = process.returncode if process.returncode is not None else -1

    if check and returncode != 0:
        raise CommandError(args, returncode, stderr.decode(errors="replace").strip())

    return stdout.decode(errors="replace").strip()


async def run_command_output(*args: str) -> tuple[int, str]:
    """Run a command and return its exit code with stdout and stderr merged.

    Used where the interesting text may land on either stream, such as
    container and pod logs.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    stdout, _ = await process.communicate()
    returncode = process.returncode if process.returncode is not None else -1
    return returncode, stdout.decode(errors="replace")
