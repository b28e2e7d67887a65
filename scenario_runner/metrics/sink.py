"""Write-only InfluxDB sink."""

import logging
from collections.abc import AsyncGenerator, Iterable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from itertools import batched
from pathlib import Path

import aiohttp

from scenario_runner.metrics.config import InfluxConfig
from scenario_runner.metrics.line_protocol import Point, Precision

log = logging.getLogger(__name__)


class MetricsWriteError(RuntimeError):
    """Raised when InfluxDB rejects a write."""


def read_import_file(path: Path) -> list[str]:
    """Read the data lines of a line protocol import file.

    Blank lines and ``#`` lines (``# DML``, ``# CONTEXT-DATABASE: ...``)
    are skipped.
    """
    return [
        line
        for line in (raw.strip() for raw in path.read_text().splitlines())
        if line and not line.startswith("#")
    ]


def write_import_file(
    path: Path,
    database: str,
    points: Iterable[Point],
    precision: Precision = "s",
) -> int:
    """Write points to an import file in the ``influx -import`` format.

    Returns:
        Number of points written

    """
    lines = [point.to_line(precision) for point in points]
    header = ["# DML", f"# CONTEXT-DATABASE: {database}"]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(header + lines) + "\n")
    log.info("Wrote %d point(s) to %s", len(lines), path)
    return len(lines)


@dataclass(frozen=True, kw_only=True)
class InfluxSink:
    """Writes line protocol to the InfluxDB 1.x HTTP API."""

    config: InfluxConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: InfluxConfig
    ) -> AsyncGenerator["InfluxSink", None]:
        """Create sink with managed session lifecycle."""
        auth = None
        if config.username is not None:
            password = config.password.get_secret_value() if config.password else ""
            auth = aiohttp.BasicAuth(config.username, password)

        async with aiohttp.ClientSession(base_url=config.url, auth=auth) as session:
            yield cls(config=config, session=session)

    async def write_lines(self, lines: Sequence[str]) -> None:
        """Write already formatted lines in a single request.

        Raises:
            MetricsWriteError: If InfluxDB does not answer 204

        """
        if not lines:
            return

        params = {"db": self.config.database, "precision": self.config.precision}
        async with self.session.post(
            "/write", params=params, data="\n".join(lines).encode()
        ) as response:
            if response.status != 204:
                text = await response.text()
                raise MetricsWriteError(
                    f"Failed to write {len(lines)} point(s): {response.status} {text}"
                )

        log.debug("Wrote %d point(s) to %s", len(lines), self.config.database)

    async def write(self, points: Iterable[Point]) -> None:
        """Write points in a single request."""
        await self.write_lines([p.to_line(self.config.precision) for p in points])

    async def write_point(self, point: Point) -> None:
        """Write one point."""
        await self.write([point])

    async def import_file(self, path: Path) -> int:
        """Bulk-import a line protocol file in batches.

        Returns:
            Number of points imported

        """
        lines = read_import_file(path)
        for batch in batched(lines, self.config.batch_size):
            await self.write_lines(batch)

        log.info("Imported %d point(s) from %s", len(lines), path)
        return len(lines)
