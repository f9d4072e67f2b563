"""Processor that writes every result into a JSON array."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from rnping.config import PingResultProcessorCommonConfig
from rnping.dto import PingResultDto
from rnping.processor import PingResultProcessor
from rnping.utils import create_log_file


class JsonLogger(PingResultProcessor):
    """Logs results to a file holding one JSON array, one object per line."""

    name = "JsonLogger"

    def __init__(self, common_config: PingResultProcessorCommonConfig, log_path: Union[str, Path]) -> None:
        super().__init__(common_config)
        self.log_path = Path(log_path)
        self._file = create_log_file(self.log_path)
        self._is_first_element = True

    def _write(self, text: str) -> None:
        try:
            self._file.write(text)
        except (OSError, ValueError) as error:
            raise OSError(f"Failed to write logs to json file! Path = {self.log_path}: {error}") from error

    def initialize(self) -> None:
        self._write("[")

    def process_ping_result(self, ping_result: PingResultDto) -> None:
        separator = "\n  " if self._is_first_element else ",\n  "
        self._is_first_element = False
        self._write(separator + ping_result.to_json_lite())

    def rundown(self) -> None:
        self._write("\n]\n")
        self._file.close()