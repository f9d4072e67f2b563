import math
from datetime import datetime, timezone
from ipaddress import ip_address

from rnping.config import PingResultProcessorCommonConfig, QuietLevel
from rnping.dto import PingResultDto
from rnping.latency_scatter_logger import (
    COUNT_PER_ROW,
    LatencyHits,
    LatencyScatterLogger,
    format_latency_hits,
)

TIME = datetime(2021, 7, 6, 9, 10, 11, 12000, tzinfo=timezone.utc)
NOT_TESTED = "    -    "


def _dto(source_port=8080, is_warmup=False, is_succeeded=False, rtt=0.0, is_timed_out=False,
         preparation_error="", ping_error=""):
    return PingResultDto(
        utc_time=TIME,
        worker_id=1,
        protocol="TCP",
        target_ip=ip_address("1.2.3.4"),
        target_port=443,
        source_ip=ip_address("5.6.7.8"),
        source_port=source_port,
        is_warmup=is_warmup,
        is_succeeded=is_succeeded,
        rtt_in_ms=rtt,
        is_timed_out=is_timed_out,
        preparation_error=preparation_error,
        ping_error=ping_error,
        handshake_error="",
        disconnect_error="",
    )


def _logger(quiet_level=QuietLevel.NONE):
    return LatencyScatterLogger(PingResultProcessorCommonConfig(quiet_level=quiet_level))


def test_convert_result_info_to_string_should_work():
    results = [
        LatencyHits(0, [math.nan] * COUNT_PER_ROW),
        LatencyHits(0b1, [12.34, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]),
        LatencyHits(0b11110, [0.0, math.nan, 12.34, 345.67, 234.56, 0.0, 0.0, 0.0, 0.0, 0.0]),
    ]

    assert [format_latency_hits(x) for x in results] == [
        "    -        -        -        -        -        -        -        -        -        -    ",
        "  12.34      -        -        -        -        -        -        -        -        -    ",
        "    -        X      12.34   345.67   234.56      -        -        -        -        -    ",
    ]


def test_repeated_port_starts_new_iteration():
    logger = _logger()
    logger.process_ping_result(_dto(rtt=1000.0, is_timed_out=True))
    logger.process_ping_result(_dto(ping_error="connect failed"))

    assert len(logger.ping_history) == 2
    first = logger.ping_history[0][8080]
    second = logger.ping_history[1][8080]
    assert first.bitmask == 1 and first.results[0] == 1000.0
    assert second.bitmask == 1 and math.isnan(second.results[0])
    assert format_latency_hits(second) == "    X    " + NOT_TESTED * 9


def test_warmup_and_preparation_errors_are_skipped():
    logger = _logger()
    logger.process_ping_result(_dto(is_warmup=True, is_succeeded=True, rtt=10.0))
    logger.process_ping_result(_dto(preparation_error="address in use"))
    assert logger.ping_history == [{}]


def test_quiet_summary_skips_processing(capsys):
    logger = _logger(quiet_level=QuietLevel.NO_PING_SUMMARY)
    logger.process_ping_result(_dto(is_succeeded=True, rtt=10.0))
    logger.rundown()
    assert logger.ping_history == [{}]
    assert capsys.readouterr().out == ""


def test_rundown_prints_map(capsys):
    logger = _logger()
    logger.process_ping_result(_dto(is_succeeded=True, rtt=12.34))
    logger.process_ping_result(_dto(ping_error="connect failed"))
    logger.rundown()

    lines = capsys.readouterr().out.splitlines()
    assert "=== Latency scatter map (in milliseconds) ===" in lines
    assert ' Iter # | Src Port | Results ("X" = Fail, "-" = Not Tested)' in lines
    assert "--------+----------+-" + "".join(f"----{i}----" for i in range(10)) in lines
    assert lines[-2] == "      0 |     8080 |   12.34  " + NOT_TESTED * 9
    assert lines[-1] == "      1 |     8080 |     X    " + NOT_TESTED * 9