"""Processor that maps latencies by source port and iteration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from rnping.config import PingResultProcessorCommonConfig, QuietLevel
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor

COUNT_PER_ROW = 10
SCATTER_SYMBOL_NOT_TESTED = "    -    "
SCATTER_SYMBOL_FAILED = "    X    "


@dataclass
class LatencyHits:
    """Latencies in milliseconds for one row of ports; ``bitmask`` marks tested ports."""

    bitmask: int = 0
    results: list[float] = field(default_factory=lambda: [math.nan] * COUNT_PER_ROW)


def format_latency_hits(hits: LatencyHits) -> str:
    """Render a row of latencies, one nine-character cell per port."""
    cells = []
    for index, latency in enumerate(hits.results):
        if not hits.bitmask & (1 << index):
            cells.append(SCATTER_SYMBOL_NOT_TESTED)
        elif math.isnan(latency):
            cells.append(SCATTER_SYMBOL_FAILED)
        else:
            cells.append(f"{latency:^9.2f}")
    return "".join(cells)


class LatencyScatterLogger(PingResultProcessor):
    """Records the latency of every source port, starting a new iteration on repeats."""

    name = "LatencyScatterLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig) -> None:
        super().__init__(common_config)
        self.ping_history: list[dict[int, LatencyHits]] = [{}]

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return
        if ping_result.is_warmup or ping_result.preparation_error:
            return

        port = ping_result.source_port
        row = (port // COUNT_PER_ROW) * COUNT_PER_ROW
        col = port % COUNT_PER_ROW
        bit = 1 << col

        hits = self.ping_history[-1].setdefault(row, LatencyHits())
        if hits.bitmask & bit:
            # Port already tested in this iteration: a new iteration starts.
            hits = LatencyHits()
            self.ping_history.append({row: hits})

        hits.bitmask |= bit
        if not ping_result.ping_error:
            hits.results[col] = round(ping_result.rtt_in_ms * 1000) / 1000.0

    def rundown(self) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return

        print("\n=== Latency scatter map (in milliseconds) ===\n")
        print(
            f"{'Iter #':>7} | {'Src Port':>8} | Results "
            f'("{SCATTER_SYMBOL_FAILED.strip()}" = Fail, "{SCATTER_SYMBOL_NOT_TESTED.strip()}" = Not Tested)'
        )
        columns = "".join(f"{i:-^9}" for i in range(COUNT_PER_ROW))
        print(f"{'+':->9}{'+':->11}-{columns}")

        for iteration_index, iteration in enumerate(self.ping_history):
            for port_bucket in sorted(iteration):
                print(f"{iteration_index:>7} | {port_bucket:>8} | {format_latency_hits(iteration[port_bucket])}")