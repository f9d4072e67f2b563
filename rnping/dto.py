"""Flat, serialisable record of a single ping result."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any, Mapping, Union

IpAddress = Union[IPv4Address, IPv6Address]

_TIME_PATTERN = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<offset>Z|[+-]\d{2}:\d{2})"
)

_BOOL_TEXT = {True: "true", False: "false"}


def _format_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    micro = value.microsecond
    if micro == 0:
        fraction = ""
    elif micro % 1000 == 0:
        fraction = f".{micro // 1000:03d}"
    else:
        fraction = f".{micro:06d}"
    return f"{text}{fraction}Z"


def _parse_time(text: str) -> datetime:
    match = _TIME_PATTERN.fullmatch(text.strip())
    if match is None:
        raise ValueError(f'Invalid timestamp "{text}"')
    offset = match["offset"]
    if offset == "Z":
        offset = "+00:00"
    parsed = datetime.fromisoformat(match["base"] + offset)
    fraction = (match["frac"] or "")[:6].ljust(6, "0")
    return parsed.replace(microsecond=int(fraction)).astimezone(timezone.utc)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(f'Invalid boolean "{value}"')


def _to_ip(value: Any) -> IpAddress:
    return value if isinstance(value, (IPv4Address, IPv6Address)) else ip_address(str(value))


def _to_time(value: Any) -> datetime:
    return value if isinstance(value, datetime) else _parse_time(str(value))


_FIELDS = (
    ("utc_time", "UtcTime", _to_time),
    ("worker_id", "WorkerId", int),
    ("protocol", "Protocol", str),
    ("target_ip", "TargetIp", _to_ip),
    ("target_port", "TargetPort", int),
    ("source_ip", "SourceIp", _to_ip),
    ("source_port", "SourcePort", int),
    ("is_warmup", "IsWarmup", _to_bool),
    ("is_succeeded", "IsSucceeded", _to_bool),
    ("rtt_in_ms", "RttInMs", float),
    ("is_timed_out", "IsTimedOut", _to_bool),
    ("preparation_error", "PreparationError", str),
    ("ping_error", "PingError", str),
    ("handshake_error", "HandshakeError", str),
    ("disconnect_error", "DisconnectError", str),
)


@dataclass
class PingResultDto:
    utc_time: datetime
    worker_id: int
    protocol: str
    target_ip: IpAddress
    target_port: int
    source_ip: IpAddress
    source_port: int
    is_warmup: bool
    is_succeeded: bool
    rtt_in_ms: float
    is_timed_out: bool
    preparation_error: str
    ping_error: str
    handshake_error: str
    disconnect_error: str

    def _endpoints(self) -> str:
        warmup = " (warmup)" if self.is_warmup else ""
        return (
            f"{self.protocol} {self.target_ip}:{self.target_port} "
            f"from {self.source_ip}:{self.source_port}{warmup}"
        )

    def to_console_log(self) -> str:
        """Human readable one-line description of the result."""
        endpoints = self._endpoints()
        rtt = f"{self.rtt_in_ms:.2f}"

        if self.is_timed_out:
            return f"Reaching {endpoints} failed: Timed out, RTT = {rtt}ms"
        if self.preparation_error:
            return (
                f"Unable to perform ping to {endpoints}, because failed preparing to ping: "
                f"Error = {self.preparation_error}"
            )
        if self.ping_error:
            return f"Reaching {endpoints} failed: {self.ping_error}"
        if self.handshake_error:
            return (
                f"Reaching {endpoints} succeeded, but app handshake failed: "
                f"RTT={rtt}ms, Error = {self.handshake_error}"
            )
        if self.disconnect_error:
            return (
                f"Reaching {endpoints} succeeded, but disconnect failed: "
                f"RTT={rtt}ms, Error = {self.disconnect_error}"
            )
        return f"Reaching {endpoints} succeeded: RTT={rtt}ms"

    def to_json_lite(self) -> str:
        """Compact JSON object for the result, with fields in a fixed order."""
        return (
            "{"
            f'"UtcTime":"{_format_time(self.utc_time)}",'
            f'"WorkerId":{self.worker_id},'
            f'"Protocol":"{self.protocol}",'
            f'"TargetIp":"{self.target_ip}",'
            f'"TargetPort":{self.target_port},'
            f'"SourceIp":"{self.source_ip}",'
            f'"SourcePort":{self.source_port},'
            f'"IsWarmup":{_BOOL_TEXT[bool(self.is_warmup)]},'
            f'"IsSucceeded":{_BOOL_TEXT[bool(self.is_succeeded)]},'
            f'"RttInMs":{self.rtt_in_ms:.2f},'
            f'"IsTimedOut":{_BOOL_TEXT[bool(self.is_timed_out)]},'
            f'"PreparationError":"{self.preparation_error}",'
            f'"PingError":"{self.ping_error}",'
            f'"HandshakeError":"{self.handshake_error}",'
            f'"DisconnectError":"{self.disconnect_error}"'
            "}"
        )

    def to_csv_lite(self) -> str:
        """One CSV line for the result, without a line break."""
        return ",".join(
            [
                _format_time(self.utc_time),
                str(self.worker_id),
                self.protocol,
                str(self.target_ip),
                str(self.target_port),
                str(self.source_ip),
                str(self.source_port),
                _BOOL_TEXT[bool(self.is_warmup)],
                _BOOL_TEXT[bool(self.is_succeeded)],
                f"{self.rtt_in_ms:.2f}",
                _BOOL_TEXT[bool(self.is_timed_out)],
                f'"{self.preparation_error}"',
                f'"{self.ping_error}"',
                f'"{self.handshake_error}"',
                f'"{self.disconnect_error}"',
            ]
        )

    def to_record(self) -> dict[str, Any]:
        """Mapping with PascalCase keys, in log column order, of plain values."""
        record: dict[str, Any] = {}
        for attr, key, _ in _FIELDS:
            value = getattr(self, attr)
            if attr == "utc_time":
                value = _format_time(value)
            elif attr in ("target_ip", "source_ip"):
                value = str(value)
            record[key] = value
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PingResultDto:
        """Build a result from a PascalCase mapping, as read from CSV or JSON logs."""
        return cls(**{attr: convert(record[key]) for attr, key, convert in _FIELDS})