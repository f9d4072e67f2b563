"""Log file creation and ping target parsing."""

from __future__ import annotations

import re
from ipaddress import IPv4Address, IPv6Address, ip_address
from pathlib import Path
from typing import TextIO, Union

IpAddress = Union[IPv4Address, IPv6Address]

_DEFAULT_PORT = 80
_PORT_PATTERN = re.compile(r"\+?[0-9]+")


def create_log_file(path: Union[str, Path]) -> TextIO:
    """Create the log file, and its folder if missing, opened for writing."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise OSError(f"Failed to create log folder: {path.parent}: {error}") from error

    try:
        return open(path, "w", encoding="utf-8", newline="")
    except OSError as error:
        raise OSError(f"Failed to create log file: {path}: {error}") from error


def _invalid_ip(ip_text: str, text: str) -> ValueError:
    return ValueError(f'Invalid IP "{ip_text}" found in ping target "{text}"')


def _parse_port(port_text: str, text: str) -> int:
    if _PORT_PATTERN.fullmatch(port_text):
        port = int(port_text)
        if port <= 65535:
            return port
    raise ValueError(f'Invalid port "{port_text}" found in ping target "{text}"')


def parse_ping_target(text: str) -> tuple[IpAddress, int]:
    """Parse ``ip``, ``ip:port``, ``[ipv6]`` or ``[ipv6]:port``; the port defaults to 80."""
    last_bracket = text.rfind("]")
    last_colon = text.rfind(":")
    port_text = None

    if last_bracket >= 0:
        if last_colon > last_bracket:
            if last_colon + 1 < len(text):
                port_text = text[last_colon + 1 :]
            ip_text = text[:last_colon]
        else:
            ip_text = text

        if len(ip_text) < 2 or not ip_text.startswith("[") or not ip_text.endswith("]"):
            raise _invalid_ip(ip_text, text)
        ip_text = ip_text[1:-1]
    else:
        if last_colon >= 0:
            if last_colon + 1 < len(text):
                port_text = text[last_colon + 1 :]
            ip_text = text[:last_colon]
        else:
            ip_text = text

        if any(not c.isnumeric() and c != "." for c in ip_text):
            raise ValueError(
                f'Invalid IP "{ip_text}" found in ping target "{text}"\n\n'
                f'NOTICE: "{ip_text}" looks like a domain name and pinging a domain name is '
                "explicitly banned. This is because DNS could return different IP address for "
                "the same domain name, which misleads people when collaborating on network issues. "
                "If it is a domain, please run the following command and and choose a IP to ping, "
                "otherwise please fix the ip and try again:"
                f"\n\n    nslookup {ip_text}\n"
            )

    if "%" in ip_text:
        raise _invalid_ip(ip_text, text)
    try:
        ip = ip_address(ip_text)
    except ValueError:
        raise _invalid_ip(ip_text, text) from None

    port = _DEFAULT_PORT if port_text is None else _parse_port(port_text, text)
    return ip, port