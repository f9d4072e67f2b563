"""Inclusive integer range lists such as ``1024,10000-11000``."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_MAX_VALUE = 65535
_UNSIGNED = re.compile(r"\+?[0-9]+")


@dataclass
class RangeList:
    """An ordered list of inclusive ``(start, end)`` ranges."""

    ranges: list[tuple[int, int]] = field(default_factory=list)

    def total_count(self) -> int:
        """Number of values covered by all ranges together."""
        return sum(end - start + 1 for start, end in self.ranges)

    def __str__(self) -> str:
        return ",".join(
            str(start) if start == end else f"{start}-{end}" for start, end in self.ranges
        )


def _parse_value(text: str, what: str) -> int:
    if _UNSIGNED.fullmatch(text):
        value = int(text)
        if value <= _MAX_VALUE:
            return value
    raise ValueError(f'Parse {what} "{text}" failed.')


def parse_range_list(text: str) -> RangeList:
    """Parse a comma separated list of values and ``start-end`` ranges."""
    if not text:
        return RangeList()

    ranges: list[tuple[int, int]] = []
    for part in text.split(","):
        bounds = part.split("-")
        if len(bounds) == 1:
            value = _parse_value(bounds[0], "port")
            ranges.append((value, value))
        elif len(bounds) == 2:
            start = _parse_value(bounds[0], "port range start")
            end = _parse_value(bounds[1], "port range end")
            ranges.append((start, end))
        else:
            raise ValueError(
                f'Invalid port range "{part}". Each port range should only contain '
                "1 or 2 elements. Examples: 1024, 10000-11000"
            )
    return RangeList(ranges)