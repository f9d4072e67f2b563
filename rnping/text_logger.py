"""Processor that writes every result as a readable text line."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from rnping.config import PingResultProcessorCommonConfig
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor
from rnping.utils import create_log_file


class TextLogger(PingResultProcessor):
    """Logs the console form of each result to a text file."""

    name = "TextLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig, log_path: Union[str, Path]) -> None:
        super().__init__(common_config)
        self.log_path = Path(log_path)
        self._file = create_log_file(self.log_path)

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        try:
            self._file.write(ping_result.to_console_log() + "\n")
        except (OSError, ValueError) as error:
            raise OSError(f"Failed to write logs to text file! Path = {self.log_path}: {error}") from error

    def rundown(self) -> None:
        self._file.close()