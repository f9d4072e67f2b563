"""Processor that counts results per latency bucket."""

from __future__ import annotations

import math
from typing import Sequence

from rnping.config import PingResultProcessorCommonConfig, QuietLevel
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor


def _latency_in_us(result: PingResultDto) -> int:
    return round(result.rtt_in_ms * 1000)


class LatencyBucketLogger(PingResultProcessor):
    """Counts results by latency range and prints the table at rundown.

    The configured values, in milliseconds, separate the buckets: each is the
    exclusive upper bound of one bucket, and a last bucket takes everything
    above the final value. Timed out and failed pings are counted apart.
    """

    name = "LatencyBucketLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig, buckets: Sequence[float]) -> None:
        super().__init__(common_config)
        if len(buckets) < 1:
            raise ValueError("At least one latency bucket is required")
        self.buckets_in_us: list[float] = [max(0, int(b * 1000.0)) for b in buckets]
        self.buckets_in_us.append(math.inf)

        self.total_hit_count = 0
        self.bucket_hit_counts = [0] * len(self.buckets_in_us)
        self.timed_out_hit_count = 0
        self.failed_hit_count = 0

    def update_statistics(self, ping_result: PingResultDto) -> None:
        """Count one result, ignoring warmups and local preparation failures."""
        if ping_result.is_warmup or ping_result.preparation_error:
            return

        self.total_hit_count += 1
        if ping_result.is_timed_out:
            self.timed_out_hit_count += 1
        elif ping_result.ping_error:
            self.failed_hit_count += 1
        else:
            self._track_latency(_latency_in_us(ping_result))

    def _track_latency(self, latency_in_us: int) -> None:
        index = next(i for i, bound in enumerate(self.buckets_in_us) if latency_in_us < bound)
        self.bucket_hit_counts[index] += 1

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return
        self.update_statistics(ping_result)

    def rundown(self) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return

        separator = f"{'+':->17}------------ "
        print("\n=== Latency buckets (in milliseconds) ===\n")
        print(f"{'Latency Range':>15} | Count")
        print(separator)

        last = len(self.buckets_in_us) - 1
        for index, (bound, count) in enumerate(zip(self.buckets_in_us, self.bucket_hit_counts)):
            if index < last:
                label = f"< {bound / 1000.0:.2f}ms"
            else:
                label = f">= {self.buckets_in_us[index - 1] / 1000.0:.2f}ms"
            print(f"{label:>15} | {count}")

        print(f"{'Timed Out':>15} | {self.timed_out_hit_count}")
        print(f"{'Failed':>15} | {self.failed_hit_count}")
        print(separator)
        print(f"{'Total':>15} | {self.total_hit_count}")