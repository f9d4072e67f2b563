"""Processor that writes every result as a CSV line."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from rnping.config import PingResultProcessorCommonConfig
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor
from rnping.utils import create_log_file

CSV_HEADER = (
    "UtcTime,WorkerId,Protocol,TargetIp,TargetPort,SourceIp,SourcePort,IsWarmup,"
    "IsSucceeded,RttInMs,IsTimedOut,PreparationError,PingError,HandshakeError,DisconnectError"
)


class CsvLogger(PingResultProcessor):
    """Logs results to a CSV file with a header line."""

    name = "CsvLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig, log_path: Union[str, Path]) -> None:
        super().__init__(common_config)
        self.log_path = Path(log_path)
        self._file = create_log_file(self.log_path)

    def _write(self, text: str) -> None:
        try:
            self._file.write(text)
        except (OSError, ValueError) as error:
            raise OSError(f"Failed to write logs to csv file! Path = {self.log_path}: {error}") from error

    def initialize(self) -> None:
        self._write(CSV_HEADER + "\n")

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        self._write(ping_result.to_csv_lite() + "\n")

    def rundown(self) -> None:
        self._file.close()