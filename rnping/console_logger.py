"""Processor that reports results and a summary on the console."""

from __future__ import annotations

import logging
import time
from ipaddress import IPv6Address
from typing import Optional

from rnping.config import PingResultProcessorCommonConfig, QuietLevel
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor

_log = logging.getLogger(__name__)


def _format_endpoint(ip, port: int) -> str:
    if isinstance(ip, IPv6Address):
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


class ConsoleLogger(PingResultProcessor):
    """Prints each result, keeps connect statistics and can stop pings on failure."""

    name = "ConsoleLogger"

    def __init__(
        self,
        common_config: PingResultProcessorCommonConfig,
        ping_stop_event,
        exit_on_fail: bool,
        exit_failure_reason: Optional[list],
    ) -> None:
        super().__init__(common_config)
        if exit_on_fail and exit_failure_reason is None:
            raise ValueError("exit_failure_reason is required when exit_on_fail is set")
        self.ping_stop_event = ping_stop_event
        self.exit_on_fail = exit_on_fail
        self.exit_failure_reason = exit_failure_reason
        self._last_flush: Optional[float] = None

        self.protocol: Optional[str] = None
        self.target: Optional[str] = None
        self.ping_count = 0
        self.success_count = 0
        self.failure_count = 0
        self.handshake_failed_count = 0
        self.disconnect_failed_count = 0
        self.min_latency_in_us: Optional[int] = None
        self.max_latency_in_us: Optional[int] = None
        self.average_latency_in_us = 0.0

    def _update_statistics(self, result: PingResultDto) -> None:
        if result.is_warmup or result.preparation_error:
            return

        if self.target is None:
            self.protocol = result.protocol
            self.target = _format_endpoint(result.target_ip, result.target_port)

        self.ping_count += 1
        if result.is_succeeded:
            self.success_count += 1
        else:
            self.failure_count += 1

        if result.handshake_error:
            self.handshake_failed_count += 1
        elif result.disconnect_error:
            self.disconnect_failed_count += 1

        latency = round(result.rtt_in_ms * 1000)
        if latency == 0:
            return

        self.min_latency_in_us = latency if self.min_latency_in_us is None else min(latency, self.min_latency_in_us)
        self.max_latency_in_us = latency if self.max_latency_in_us is None else max(latency, self.max_latency_in_us)
        self.average_latency_in_us += (latency - self.average_latency_in_us) / self.ping_count

    def _counting_only(self) -> bool:
        return self.common_config.quiet_level in (QuietLevel.NO_PING_RESULT, QuietLevel.NO_PING_SUMMARY)

    def _output_result(self, result: PingResultDto) -> None:
        if self._counting_only():
            self._output_ping_count(force=False)
            return
        if not self.has_quiet_level(QuietLevel.NO_PING_RESULT):
            print(result.to_console_log())

    def _output_ping_count(self, force: bool) -> None:
        now = time.monotonic()
        if self._last_flush is not None and not force and now - self._last_flush < 1.0:
            return
        self._last_flush = now
        print(f"\r{self.ping_count} pings finished.", end="", flush=True)

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        if not self.has_quiet_level(QuietLevel.NO_OUTPUT):
            self._update_statistics(ping_result)

        self._output_result(ping_result)

        if self.exit_on_fail and not ping_result.is_succeeded and not ping_result.preparation_error:
            _log.debug("Ping failure received, stopping pings: %r", ping_result)
            self.exit_failure_reason[:] = [ping_result]
            self.ping_stop_event.set()

    def rundown(self) -> None:
        if self._counting_only():
            self._output_ping_count(force=True)
            print()

        if not self.has_quiet_level(QuietLevel.NO_OUTPUT) and self.exit_on_fail and self.exit_failure_reason:
            print("Ping failure received! Exiting...")

        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY) or self.target is None:
            return

        print(f"\n=== Connect statistics for {self.protocol} {self.target} ===")

        warnings = []
        if self.handshake_failed_count > 0:
            warnings.append(f"App Handshake Failed = {self.handshake_failed_count}")
        if self.disconnect_failed_count > 0:
            warnings.append(f"Disconnect Failed = {self.disconnect_failed_count}")
        warning = f" ({', '.join(warnings)})" if warnings else ""

        failure_rate = self.failure_count * 100.0 / self.ping_count
        print(
            f"- Connects: Sent = {self.ping_count}, Succeeded = {self.success_count}{warning}, "
            f"Failed = {self.failure_count} ({failure_rate:.2f}%)."
        )

        if self.min_latency_in_us is None:
            print("- Round trip time: Minimum = 0ms, Maximum = 0ms, Average = 0ms.")
        else:
            print(
                f"- Round trip time: Minimum = {self.min_latency_in_us / 1000:.2f}ms, "
                f"Maximum = {self.max_latency_in_us / 1000:.2f}ms, "
                f"Average = {self.average_latency_in_us / 1000:.2f}ms."
            )