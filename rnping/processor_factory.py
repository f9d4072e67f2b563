"""Builds the set of result processors a configuration asks for."""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

from rnping.config import PingResultProcessorConfig
from rnping.console_logger import ConsoleLogger
from rnping.csv_logger import CsvLogger
from rnping.json_logger import JsonLogger
from rnping.latency_bucket_logger import LatencyBucketLogger
from rnping.latency_scatter_logger import LatencyScatterLogger
from rnping.processor import PingResultProcessor
from rnping.result_scatter_logger import ResultScatterLogger
from rnping.text_logger import TextLogger


def create_ping_result_processors(
    config: PingResultProcessorConfig,
    extra_processors: Optional[Iterable[PingResultProcessor]],
    ping_stop_event,
) -> list[PingResultProcessor]:
    """Create the console logger, the configured loggers, then the extra processors."""
    common_config = dataclasses.replace(config.common_config)

    # The console logger is always present to keep the user informed.
    processors: list[PingResultProcessor] = [
        ConsoleLogger(common_config, ping_stop_event, config.exit_on_fail, config.exit_failure_reason)
    ]

    if config.csv_log_path is not None:
        processors.append(CsvLogger(common_config, config.csv_log_path))
    if config.json_log_path is not None:
        processors.append(JsonLogger(common_config, config.json_log_path))
    if config.text_log_path is not None:
        processors.append(TextLogger(common_config, config.text_log_path))
    if config.show_result_scatter:
        processors.append(ResultScatterLogger(common_config))
    if config.show_latency_scatter:
        processors.append(LatencyScatterLogger(common_config))
    if config.latency_buckets is not None:
        processors.append(LatencyBucketLogger(common_config, config.latency_buckets))

    processors.extend(extra_processors or ())
    return processors