"""Common interface of everything that consumes ping results."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from rnping.config import PingResultProcessorCommonConfig
from rnping.dto import PingResultDto


class PingResultProcessor(ABC):
    """Receives ping results one by one, between ``initialize`` and ``rundown``."""

    name: ClassVar[str] = "PingResultProcessor"

    def __init__(self, common_config: PingResultProcessorCommonConfig) -> None:
        self.common_config = common_config

    @property
    def config(self) -> PingResultProcessorCommonConfig:
        return self.common_config

    def has_quiet_level(self, quiet_level: int) -> bool:
        """True when the configured quiet level is at least ``quiet_level``."""
        return self.common_config.quiet_level >= quiet_level

    def initialize(self) -> None:
        """Called once before the first result."""

    @abstractmethod
    def process_ping_result(self, ping_result: PingResultDto) -> None:
        """Handle a single ping result."""

    def rundown(self) -> None:
        """Called once after the last result."""