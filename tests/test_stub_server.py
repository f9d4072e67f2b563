import asyncio
from datetime import timedelta
from ipaddress import IPv4Address

import pytest

from rnping.config import RnpStubServerConfig, RnpSupportedProtocol
from rnping.stub_server import ConnectionStats, StubServerTcp, run_stub_server


def make_config(**overrides):
    values = dict(
        protocol=RnpSupportedProtocol.TCP,
        server_address=(IPv4Address("127.0.0.1"), 0),
        report_interval=timedelta(seconds=60),
        close_on_accept=False,
        write_chunk_size=0,
        write_count_limit=0,
        sleep_before_write=timedelta(0),
        wait_before_disconnect=timedelta(0),
    )
    values.update(overrides)
    return RnpStubServerConfig(**values)


async def wait_until(predicate, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


async def start_server(config):
    stop = asyncio.Event()
    started = asyncio.Event()
    server = StubServerTcp(config, stop, started)
    task = asyncio.create_task(server.run())
    await asyncio.wait_for(started.wait(), 5)
    return server, task, stop


async def stop_server(task, stop):
    stop.set()
    await asyncio.wait_for(task, 5)


def test_take_stats_returns_counters_and_clears_bytes():
    stats = ConnectionStats("127.0.0.1:1000", bytes_read=10, bytes_write=20, total_write_count=3)
    taken = stats.take_stats()
    assert (taken.bytes_read, taken.bytes_write, taken.total_write_count) == (10, 20, 3)
    assert (stats.bytes_read, stats.bytes_write) == (0, 0)
    assert stats.total_write_count == 3
    assert stats.remote_address == taken.remote_address


def test_unsupported_protocol_is_rejected():
    config = make_config(protocol=RnpSupportedProtocol.QUIC)
    with pytest.raises(ValueError, match="Protocol QUIC is not supported!"):
        run_stub_server(config, asyncio.Event(), asyncio.Event())


def test_zero_report_interval_is_rejected():
    config = make_config(report_interval=timedelta(0))
    with pytest.raises(ValueError):
        run_stub_server(config, asyncio.Event(), asyncio.Event())


def test_report_without_connections_is_empty():
    server = StubServerTcp(make_config(), asyncio.Event(), asyncio.Event())
    assert server.report_and_reset_conn_stats() == []


@pytest.mark.asyncio
async def test_run_stub_server_starts_and_stops():
    stop = asyncio.Event()
    started = asyncio.Event()
    task = run_stub_server(make_config(), stop, started)
    await asyncio.wait_for(started.wait(), 5)
    assert not task.done()
    stop.set()
    await asyncio.wait_for(task, 5)
    assert task.exception() is None
    assert started.is_set()


@pytest.mark.asyncio
async def test_close_on_accept_closes_connection():
    server, task, stop = await start_server(make_config(close_on_accept=True))
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_address[1])
        data = await asyncio.wait_for(reader.read(10), 5)
        assert data == b""
        assert server.conn_stats == {}
        writer.close()
    finally:
        await stop_server(task, stop)


@pytest.mark.asyncio
async def test_read_bytes_are_counted_and_reset_by_report():
    server, task, stop = await start_server(make_config())
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_address[1])
        writer.write(b"0123456789")
        await writer.drain()
        await wait_until(lambda: 0 in server.conn_stats and server.conn_stats[0].bytes_read == 10)

        lines = server.report_and_reset_conn_stats()
        assert lines[0] == "========== Connection Stats =========="
        assert lines[1].startswith("[0] 127.0.0.1:")
        assert server.conn_stats[0].bytes_read == 0
        assert server.conn_stats[0].is_alive
        writer.close()
    finally:
        await stop_server(task, stop)


@pytest.mark.asyncio
async def test_closed_connection_is_dropped_after_report():
    server, task, stop = await start_server(make_config())
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_address[1])
        await wait_until(lambda: 0 in server.conn_stats)
        writer.close()
        await wait_until(lambda: not server.conn_stats[0].is_alive)

        lines = server.report_and_reset_conn_stats()
        assert len(lines) == 3
        assert server.conn_stats == {}
    finally:
        await stop_server(task, stop)


@pytest.mark.asyncio
async def test_writes_stop_at_count_limit():
    server, task, stop = await start_server(make_config(write_chunk_size=4, write_count_limit=3))
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_address[1])
        data = await asyncio.wait_for(reader.readexactly(12), 5)
        assert data == bytes(12)
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(reader.read(1), 0.3)
        assert server.conn_stats[0].total_write_count == 3
        assert server.conn_stats[0].bytes_write == 12
        writer.close()
    finally:
        await stop_server(task, stop)


@pytest.mark.asyncio
async def test_bind_failure_raises_and_signals_started():
    server, task, stop = await start_server(make_config())
    try:
        port = server.bound_address[1]
        second_started = asyncio.Event()
        second = StubServerTcp(
            make_config(server_address=(IPv4Address("127.0.0.1"), port)),
            asyncio.Event(),
            second_started,
        )
        with pytest.raises(OSError):
            await second.run()
        assert second_started.is_set()
        assert second.bound_address is None
    finally:
        await stop_server(task, stop)