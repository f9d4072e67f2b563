import threading

import pytest

from rnping.config import PingResultProcessorCommonConfig, PingResultProcessorConfig, QuietLevel
from rnping.processor import PingResultProcessor
from rnping.processor_factory import create_ping_result_processors


class _Recorder(PingResultProcessor):
    name = "Recorder"

    def __init__(self, common_config):
        super().__init__(common_config)
        self.results = []

    def process_ping_result(self, ping_result):
        self.results.append(ping_result)


def _config(quiet_level=QuietLevel.NONE, **overrides):
    values = dict(
        common_config=PingResultProcessorCommonConfig(quiet_level=quiet_level),
        exit_on_fail=False,
        exit_failure_reason=None,
        csv_log_path=None,
        json_log_path=None,
        text_log_path=None,
        show_result_scatter=False,
        show_latency_scatter=False,
        latency_buckets=None,
    )
    values.update(overrides)
    return PingResultProcessorConfig(**values)


def _close_all(processors):
    for processor in processors:
        if hasattr(processor, "_file"):
            processor._file.close()


def test_create_ping_result_processor_should_work_with_empty_config():
    processors = create_ping_result_processors(_config(), [], threading.Event())
    assert len(processors) == 1
    assert processors[0].name == "ConsoleLogger"


def test_create_ping_result_processor_should_work_with_valid_config(tmp_path):
    config = _config(
        quiet_level=QuietLevel.NO_PING_RESULT,
        csv_log_path=tmp_path / "ping_result_factory_tests" / "log.csv",
        json_log_path=tmp_path / "ping_result_factory_tests" / "log.json",
        text_log_path=tmp_path / "ping_result_factory_tests" / "log.txt",
        show_result_scatter=True,
        show_latency_scatter=True,
        latency_buckets=[0.1, 0.5, 1.0, 10.0],
    )
    processors = create_ping_result_processors(config, [], threading.Event())
    try:
        assert len(processors) == 7
        assert [p.name for p in processors] == [
            "ConsoleLogger",
            "CsvLogger",
            "JsonLogger",
            "TextLogger",
            "ResultScatterLogger",
            "LatencyScatterLogger",
            "LatencyBucketLogger",
        ]
        assert (tmp_path / "ping_result_factory_tests" / "log.csv").exists()
    finally:
        _close_all(processors)


def test_extra_processors_are_appended_last():
    common = PingResultProcessorCommonConfig(quiet_level=QuietLevel.NONE)
    extra = _Recorder(common)
    processors = create_ping_result_processors(_config(show_result_scatter=True), [extra], threading.Event())
    assert [p.name for p in processors] == ["ConsoleLogger", "ResultScatterLogger", "Recorder"]
    assert processors[-1] is extra


def test_processors_share_quiet_level():
    processors = create_ping_result_processors(
        _config(quiet_level=QuietLevel.NO_OUTPUT, show_latency_scatter=True), None, threading.Event()
    )
    assert len(processors) == 2
    assert all(p.has_quiet_level(QuietLevel.NO_OUTPUT) for p in processors)


def test_exit_on_fail_without_reason_is_rejected():
    with pytest.raises(ValueError):
        create_ping_result_processors(_config(exit_on_fail=True), [], threading.Event())