"""TCP stub server that accepts pings and reports per-connection traffic."""

from __future__ import annotations

import asyncio
import dataclasses
from contextlib import suppress
from dataclasses import dataclass
from datetime import timedelta
from ipaddress import IPv6Address, ip_address
from typing import Optional

from rnping.config import RnpStubServerConfig, RnpSupportedProtocol, SocketAddress

_READ_BUFFER_SIZE = 4096


def _format_endpoint(ip, port: int) -> str:
    if isinstance(ip, IPv6Address):
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


def _format_peer(peer) -> str:
    if isinstance(peer, tuple) and len(peer) >= 2:
        return _format_endpoint(ip_address(peer[0]), peer[1])
    return str(peer)


@dataclass
class ConnectionStats:
    """Traffic counters of one accepted connection."""

    remote_address: str
    is_alive: bool = True
    bytes_read: int = 0
    bytes_write: int = 0
    total_write_count: int = 0

    def take_stats(self) -> ConnectionStats:
        """Return a copy of the counters and reset the byte counters."""
        stats = dataclasses.replace(self)
        self.bytes_read = 0
        self.bytes_write = 0
        return stats


class StubServerTcp:
    """Accepts TCP connections, reads from them and optionally writes to them."""

    def __init__(
        self,
        config: RnpStubServerConfig,
        stop_event: asyncio.Event,
        server_started_event: asyncio.Event,
    ) -> None:
        self.config = config
        self.stop_event = stop_event
        self.server_started_event = server_started_event
        self.bound_address: Optional[SocketAddress] = None
        self.conn_stats: dict[int, ConnectionStats] = {}
        self._next_conn_id = 0
        self._tasks: set[asyncio.Task] = set()

    async def run(self) -> None:
        """Serve until the stop event is set; the started event is always set on exit."""
        try:
            await self._serve()
        finally:
            self.server_started_event.set()

    async def _serve(self) -> None:
        ip, port = self.config.server_address
        server = await asyncio.start_server(self._handle_new_connection, str(ip), port)
        try:
            host, bound_port = server.sockets[0].getsockname()[:2]
            self.bound_address = (ip_address(host), bound_port)
            self.server_started_event.set()
            print(
                f"Rnp {self.config.protocol} server started successfully at "
                f"{_format_endpoint(*self.bound_address)}."
            )

            loop = asyncio.get_running_loop()
            interval = self.config.report_interval.total_seconds()
            next_report = loop.time()
            while not self.stop_event.is_set():
                remaining = next_report - loop.time()
                if remaining <= 0:
                    self.report_and_reset_conn_stats()
                    next_report += interval
                    continue
                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self.stop_event.wait(), remaining)
        finally:
            server.close()
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            await server.wait_closed()

    async def _handle_new_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = _format_peer(writer.get_extra_info("peername"))
        print(f"New connection received: Remote = {peer}")

        if self.config.close_on_accept:
            writer.close()
            with suppress(Exception):
                await writer.wait_closed()
            print(f"Connection closed on accept: Remote = {peer}")
            return

        conn_id = self._next_conn_id
        self._next_conn_id += 1
        stats = ConnectionStats(peer)
        self.conn_stats[conn_id] = stats

        task = asyncio.create_task(self._run_connection(reader, writer, peer, stats))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        peer: str,
        stats: ConnectionStats,
    ) -> None:
        parts = [asyncio.create_task(self._read_loop(reader, peer, stats))]
        if self.config.write_chunk_size != 0:
            parts.append(asyncio.create_task(self._write_loop(writer, peer, stats)))
        parts.append(asyncio.create_task(self.stop_event.wait()))
        try:
            await asyncio.wait(parts, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for part in parts:
                part.cancel()
            await asyncio.gather(*parts, return_exceptions=True)
            stats.is_alive = False
            writer.close()
            with suppress(Exception):
                await writer.wait_closed()

    async def _read_loop(self, reader: asyncio.StreamReader, peer: str, stats: ConnectionStats) -> None:
        while True:
            try:
                data = await reader.read(_READ_BUFFER_SIZE)
            except OSError as error:
                print(f"Error found in connection to {peer}, connection closed: Error = {error}")
                return

            if not data:
                wait = self.config.wait_before_disconnect
                if wait > timedelta(0):
                    print(
                        "Connection is half shutdown by remote side. "
                        f"Wait for {wait} before disconnect the connection: Remote = {peer}"
                    )
                    await asyncio.sleep(wait.total_seconds())
                print(f"Connection is half shutdown by remote side. Closing connection: Remote = {peer}")
                return

            stats.bytes_read += len(data)

    async def _write_loop(self, writer: asyncio.StreamWriter, peer: str, stats: ConnectionStats) -> None:
        chunk = bytes(self.config.write_chunk_size)
        limit = self.config.write_count_limit
        while True:
            if self.config.sleep_before_write > timedelta(0):
                await asyncio.sleep(self.config.sleep_before_write.total_seconds())

            if limit != 0 and stats.total_write_count >= limit:
                # Nothing more to write; keep the connection open for reading.
                await asyncio.get_running_loop().create_future()
            stats.total_write_count += 1

            try:
                writer.write(chunk)
                await writer.drain()
            except OSError as error:
                print(f"Error found in connection to {peer}, connection closed: Error = {error}")
                return
            stats.bytes_write += len(chunk)

    def report_and_reset_conn_stats(self) -> list[str]:
        """Print and return the traffic report, then drop closed connections."""
        if not self.conn_stats:
            return []

        interval_ms = self.config.report_interval // timedelta(milliseconds=1)
        lines = ["========== Connection Stats =========="]
        for conn_id, conn_stats in self.conn_stats.items():
            stats = conn_stats.take_stats()
            read_bps = stats.bytes_read * 8 * 1000 // interval_ms
            write_bps = stats.bytes_write * 8 * 1000 // interval_ms
            lines.append(
                f"[{conn_id}] {stats.remote_address} => Read = {read_bps} bytes ({stats.bytes_read} bps), "
                f"Write = {write_bps} bytes ({stats.bytes_write} bps)"
            )
        lines.append("")
        for line in lines:
            print(line)

        # Dead connections are dropped only after their last report.
        self.conn_stats = {k: v for k, v in self.conn_stats.items() if v.is_alive}
        return lines


def run_stub_server(
    config: RnpStubServerConfig,
    stop_event: asyncio.Event,
    server_started_event: asyncio.Event,
) -> asyncio.Task:
    """Start a stub server for the configured protocol as a task on the running loop."""
    if config.report_interval // timedelta(milliseconds=1) <= 0:
        raise ValueError("Report interval must be at least 1 millisecond")

    print(f"Starting rnp {config.protocol} server at {_format_endpoint(*config.server_address)} ...")

    if config.protocol != RnpSupportedProtocol.TCP:
        raise ValueError(f"Protocol {config.protocol} is not supported!")

    server = StubServerTcp(config, stop_event, server_started_event)
    return asyncio.create_task(server.run())