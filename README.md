# rnping

Building blocks for a layer 4 (TCP) ping tool aimed at cloud networks:
parsing ping targets and source port ranges, turning individual ping
results into console lines, CSV, JSON and text logs, summarising them as
latency buckets and scatter maps, and a small TCP stub server to ping
against. The package has no dependencies outside the standard library.

## Parsing inputs

Source port ranges are a comma separated list of single ports and
inclusive `start-end` ranges, each value between 0 and 65535:

```python
from rnping.basic_types import parse_range_list

ports = parse_range_list("1024-2047,3096,3097")
print(ports)                # 1024-2047,3096,3097
print(ports.total_count())  # 1026
```

An empty string gives an empty `RangeList`. A malformed part such as
`"1-"`, `"-2"` or `"1-2-3"` raises `ValueError`.

Ping targets are IP addresses with an optional port; IPv6 addresses go in
brackets. A missing port, or a trailing colon with nothing after it, means
port 80. `parse_ping_target` returns an `(ip_address, port)` tuple:

```python
from rnping.utils import parse_ping_target

parse_ping_target("10.0.0.1:443")   # (IPv4Address('10.0.0.1'), 443)
parse_ping_target("[::1]")          # (IPv6Address('::1'), 80)
```

Domain names are refused on purpose with a `ValueError` that explains why:
DNS may hand out different addresses for the same name, which makes shared
troubleshooting misleading. Resolve the name yourself and ping the address
you pick.

`parse_protocol` in `rnping.config` turns `"tcp"` or `"quic"` (in any
case) into `RnpSupportedProtocol.TCP` or `RnpSupportedProtocol.QUIC`;
`RnpSupportedProtocol.external(name)` names a protocol supplied elsewhere.

## Ping results

A single result is a `rnping.dto.PingResultDto`. It renders itself as a
readable line (`to_console_log()`), a CSV line (`to_csv_lite()`) or a
compact JSON object (`to_json_lite()`). `to_record()` gives a mapping with
PascalCase keys in log column order, and `PingResultDto.from_record()`
builds a result back from such a mapping, for example a row read from a
CSV log or an object read from a JSON log.

## Processing results

Every processor derives from `rnping.processor.PingResultProcessor` and
follows the same life cycle: `initialize()`, then `process_ping_result()`
for each `PingResultDto`, then `rundown()` to close files or print a
summary.

| Class | Module | What it does |
| --- | --- | --- |
| `ConsoleLogger` | `rnping.console_logger` | prints each result and, at rundown, connect statistics |
| `CsvLogger` | `rnping.csv_logger` | writes a header and one CSV line per result |
| `JsonLogger` | `rnping.json_logger` | writes a JSON array, one object per line |
| `TextLogger` | `rnping.text_logger` | writes the console line of each result |
| `LatencyBucketLogger` | `rnping.latency_bucket_logger` | counts results per latency range |
| `LatencyScatterLogger` | `rnping.latency_scatter_logger` | maps latency by source port and iteration |
| `ResultScatterLogger` | `rnping.result_scatter_logger` | maps outcome symbols by source port and iteration |

The file loggers create the log folder if it is missing.

`rnping.processor_factory.create_ping_result_processors(config,
extra_processors, ping_stop_event)` builds the set a run needs from a
`PingResultProcessorConfig`: the console logger always comes first, then
the CSV, JSON and text loggers, the result and latency scatter maps and the
latency bucket table as the configuration asks, and finally the extra
processors you pass in.

The quiet level (`rnping.config.QuietLevel`) controls how much reaches the
console: `NONE` prints everything, `NO_PING_RESULT` replaces per-ping lines
with a running count, `NO_PING_SUMMARY` also drops the summaries, and
`NO_OUTPUT` prints nothing.

With `exit_on_fail` set, `exit_failure_reason` must be a list. When a ping
fails for a reason other than a local preparation error, the console logger
stores that result in the list and sets `ping_stop_event`, so whatever runs
the pings can stop early.

## Stub server

`rnping.stub_server.run_stub_server(config, stop_event,
server_started_event)` must be called from inside a running asyncio event
loop; it starts a `StubServerTcp` described by an `RnpStubServerConfig` and
returns the task that runs it. Only the TCP protocol is served; any other
raises `ValueError`, as does a report interval shorter than a millisecond.

The server sets `server_started_event` once it listens (and again when it
exits, so waiters are never left hanging). It accepts connections, can
close them straight away (`close_on_accept`), reads whatever the peer
sends, and can write chunks of zeros back with the size, count limit and
delay you choose. At each report interval it prints the bytes read and
written per connection, and it stops when `stop_event` is set.

```python
import asyncio
from datetime import timedelta
from ipaddress import ip_address

from rnping.config import RnpStubServerConfig, RnpSupportedProtocol
from rnping.stub_server import run_stub_server

async def main():
    config = RnpStubServerConfig(
        protocol=RnpSupportedProtocol.TCP,
        server_address=(ip_address("127.0.0.1"), 0),
        report_interval=timedelta(seconds=1),
        close_on_accept=False,
        write_chunk_size=0,
        write_count_limit=0,
        sleep_before_write=timedelta(0),
        wait_before_disconnect=timedelta(0),
    )
    stop, started = asyncio.Event(), asyncio.Event()
    task = run_stub_server(config, stop, started)
    await started.wait()
    await asyncio.sleep(5)
    stop.set()
    await task

asyncio.run(main())
```

## What this package does not do

The package does not send pings. There are no ping clients, no workers
that schedule pings over source ports, and no runner that feeds results
into the processors; you supply the `PingResultDto` values yourself. Nor
does it install a command-line program: both the processors and the stub
server are used from Python code.