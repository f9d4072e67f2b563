"""Configuration objects for ping runners, result processors and stub servers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from functools import total_ordering
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path
from typing import Any, Callable, ClassVar, Optional, Union

from rnping.basic_types import RangeList

RNP_NAME = "Rnp"
RNP_SERVER_NAME = "Rnp Server"
RNP_ABOUT = "A simple layer 4 ping tool for cloud."

IpAddress = Union[IPv4Address, IPv6Address]
SocketAddress = tuple[IpAddress, int]


class QuietLevel(IntEnum):
    """How much console output is suppressed; higher levels suppress more."""

    NONE = 0
    NO_PING_RESULT = 1
    NO_PING_SUMMARY = 2
    NO_OUTPUT = 3


_BUILTIN_PROTOCOLS = ("TCP", "QUIC")


@total_ordering
@dataclass(frozen=True)
class RnpSupportedProtocol:
    """A ping protocol: one of the built-in ones or an externally provided one."""

    name: str
    is_external: bool = False

    TCP: ClassVar[RnpSupportedProtocol]
    QUIC: ClassVar[RnpSupportedProtocol]

    def __post_init__(self) -> None:
        if not self.is_external and self.name not in _BUILTIN_PROTOCOLS:
            raise ValueError("Invalid protocol")

    @classmethod
    def external(cls, name: str) -> RnpSupportedProtocol:
        return cls(name, True)

    def _sort_key(self) -> tuple[int, str]:
        if self.is_external:
            return (len(_BUILTIN_PROTOCOLS), self.name)
        return (_BUILTIN_PROTOCOLS.index(self.name), "")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RnpSupportedProtocol):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.name


RnpSupportedProtocol.TCP = RnpSupportedProtocol("TCP")
RnpSupportedProtocol.QUIC = RnpSupportedProtocol("QUIC")


def parse_protocol(text: str) -> RnpSupportedProtocol:
    """Parse a built-in protocol name, case-insensitively."""
    upper = text.upper()
    if upper == "TCP":
        return RnpSupportedProtocol.TCP
    if upper == "QUIC":
        return RnpSupportedProtocol.QUIC
    raise ValueError("Invalid protocol")


@dataclass
class PingClientConfig:
    wait_timeout: timedelta
    time_to_live: Optional[int]
    check_disconnect: bool
    wait_before_disconnect: timedelta
    disconnect_timeout: timedelta
    server_name: Optional[str]
    log_tls_key: bool
    alpn_protocol: Optional[str]
    use_timer_rtt: bool


@dataclass
class PingWorkerConfig:
    protocol: RnpSupportedProtocol
    target: SocketAddress
    source_ip: IpAddress
    ping_interval: timedelta
    ping_client_config: PingClientConfig


@dataclass
class PingWorkerSchedulerConfig:
    source_ports: RangeList
    ping_count: Optional[int]
    warmup_count: int
    parallel_ping_count: int


@dataclass
class PingResultProcessorCommonConfig:
    quiet_level: int


@dataclass(eq=False)
class PingResultProcessorConfig:
    """Result processor settings.

    ``exit_failure_reason``, when given, is a list that receives the result
    that made the run stop on failure.
    """

    common_config: PingResultProcessorCommonConfig
    exit_on_fail: bool
    exit_failure_reason: Optional[list]
    csv_log_path: Optional[Path]
    json_log_path: Optional[Path]
    text_log_path: Optional[Path]
    show_result_scatter: bool
    show_latency_scatter: bool
    latency_buckets: Optional[list[float]]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PingResultProcessorConfig):
            return NotImplemented
        return (
            self.common_config == other.common_config
            and self.exit_on_fail == other.exit_on_fail
            and (self.exit_failure_reason is None) == (other.exit_failure_reason is None)
            and self.csv_log_path == other.csv_log_path
            and self.json_log_path == other.json_log_path
            and self.text_log_path == other.text_log_path
            and self.show_result_scatter == other.show_result_scatter
            and self.show_latency_scatter == other.show_latency_scatter
            and self.latency_buckets == other.latency_buckets
        )


@dataclass(eq=False)
class RnpPingRunnerConfig:
    worker_config: PingWorkerConfig
    worker_scheduler_config: PingWorkerSchedulerConfig
    result_processor_config: PingResultProcessorConfig
    external_ping_client_factory: Optional[Callable[..., Any]] = None
    extra_ping_result_processors: list = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.extra_ping_result_processors is None:
            self.extra_ping_result_processors = []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RnpPingRunnerConfig):
            return NotImplemented
        if (
            self.worker_config != other.worker_config
            or self.worker_scheduler_config != other.worker_scheduler_config
            or self.result_processor_config != other.result_processor_config
        ):
            return False
        if (self.external_ping_client_factory is None) != (other.external_ping_client_factory is None):
            return False
        mine = [p.name for p in self.extra_ping_result_processors]
        theirs = [p.name for p in other.extra_ping_result_processors]
        return mine == theirs


@dataclass
class RnpStubServerConfig:
    protocol: RnpSupportedProtocol
    server_address: SocketAddress
    report_interval: timedelta
    close_on_accept: bool
    write_chunk_size: int
    write_count_limit: int
    sleep_before_write: timedelta
    wait_before_disconnect: timedelta