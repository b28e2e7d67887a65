"""Export of scenario results to InfluxDB."""

from scenario_runner.metrics.config import InfluxConfig
from scenario_runner.metrics.line_protocol import Point
from scenario_runner.metrics.sink import InfluxSink, MetricsWriteError

__all__ = ["InfluxConfig", "InfluxSink", "MetricsWriteError", "Point"]
