"""Processor that maps ping outcomes by source port and iteration."""

from __future__ import annotations

from rnping.config import PingResultProcessorCommonConfig, QuietLevel
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor

COUNT_PER_ROW = 20
SCATTER_SYMBOL_NOT_TESTED_YET = "."
SCATTER_SYMBOL_PASSED = "O"
SCATTER_SYMBOL_FAILED = "X"
SCATTER_SYMBOL_PREPARE_FAILED = "-"
SCATTER_SYMBOL_HANDSHAKE_FAILED = "H"
SCATTER_SYMBOL_DISCONNECT_FAILED = "D"


def format_result_hits(hits: list[str]) -> str:
    """Render a row of result symbols in groups of five."""
    groups = ("".join(hits[start:start + 5]) for start in range(0, COUNT_PER_ROW, 5))
    return " ".join(groups)


def _result_symbol(result: PingResultDto) -> str:
    if result.preparation_error:
        return SCATTER_SYMBOL_PREPARE_FAILED
    if result.ping_error:
        return SCATTER_SYMBOL_FAILED
    if result.handshake_error:
        return SCATTER_SYMBOL_HANDSHAKE_FAILED
    if result.disconnect_error:
        return SCATTER_SYMBOL_DISCONNECT_FAILED
    return SCATTER_SYMBOL_PASSED


class ResultScatterLogger(PingResultProcessor):
    """Records the outcome of every source port, starting a new iteration on repeats."""

    name = "ResultScatterLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig) -> None:
        super().__init__(common_config)
        self.ping_history: list[dict[int, list[str]]] = [{}]

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return
        if ping_result.is_warmup:
            return

        port = ping_result.source_port
        row = (port // COUNT_PER_ROW) * COUNT_PER_ROW
        index = port % COUNT_PER_ROW
        symbol = _result_symbol(ping_result)

        hits = self.ping_history[-1].setdefault(row, [SCATTER_SYMBOL_NOT_TESTED_YET] * COUNT_PER_ROW)
        if hits[index] != SCATTER_SYMBOL_NOT_TESTED_YET:
            # Port already tested in this iteration: a new iteration starts.
            hits = [SCATTER_SYMBOL_NOT_TESTED_YET] * COUNT_PER_ROW
            self.ping_history.append({row: hits})

        hits[index] = symbol

    def rundown(self) -> None:
        if self.has_quiet_level(QuietLevel.NO_PING_SUMMARY):
            return

        print("\n=== Ping result scatter map ===")
        print(
            f'("{SCATTER_SYMBOL_PASSED}" = Ok, "{SCATTER_SYMBOL_FAILED}" = Fail, '
            f'"{SCATTER_SYMBOL_NOT_TESTED_YET}" = Not tested yet, '
            f'"{SCATTER_SYMBOL_PREPARE_FAILED}" = Preparation failed, '
            f'"{SCATTER_SYMBOL_HANDSHAKE_FAILED}" = App handshake failed, '
            f'"{SCATTER_SYMBOL_DISCONNECT_FAILED}" = Disconnect failed)'
        )

        print(f"\n{'Iter':>5} | {'Src':>5} | Results")
        print(f"{'#':>5} | {'Port':>5} | ")
        print(f"{'':->6}|{'+':->8}-0---4-5---9-0---4-5---9-")

        for iteration_index, iteration in enumerate(self.ping_history):
            for port_bucket in sorted(iteration):
                print(f"{iteration_index:>5} | {port_bucket:>5} | {format_result_hits(iteration[port_bucket])}")