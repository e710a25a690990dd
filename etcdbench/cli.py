"""
etcdbench - load generator for the etcd v2 keys API.

Usage:
    # Write 1000 keys named after the current Unix second, sequentially
    etcdbench -action write -writeCount 1000

    # Write with up to 100 requests in flight
    etcdbench -action write -writeCount 1000 -writeCon

    # Read round-robin over the keys listed at the root
    etcdbench -action read -readCount 5000 -readCon

    # Read one key repeatedly and print what comes back
    etcdbench -action read -readCount 10 -readKey /foo -verbose

    # Target another cluster and show latency percentiles
    etcdbench -host 10.0.0.5 -port 2379 -action read -readCount 500 -latency
"""
from __future__ import annotations

import sys
import time
from typing import Callable, Sequence

from .client import EtcdClient
from .config import RunConfiguration, parse_args
from .dispatcher import AdmissionGate, BatchReport, run_batch
from .errors import BenchError, ConfigurationError
from .keys import KeyPool, read_key_for, write_key_for, write_value_for
from .models import OperationResult


# ANSI color codes
class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    RESET = '\033[0m'


def format_duration(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:.2f}s"
    return f"{seconds * 1000:.1f}ms"


def print_node(result: OperationResult) -> None:
    # One write per line; concurrent workers share stdout.
    sys.stdout.write(f"{result.node.key} => {result.node.value}\n")


def print_results(mode: str, report: BatchReport) -> None:
    """Print latency statistics for a finished batch."""
    latencies = report.latencies_ms
    mode_color = Colors.CYAN if mode == "read" else Colors.YELLOW

    print(f"\n{'='*60}")
    print(f"Results - {mode_color}{mode.upper()}{Colors.RESET}")
    print(f"{'='*60}")
    print(f"Total time:    {report.elapsed:.2f}s")
    print(f"Operations:    {report.count}")
    print(f"Peak in flight: {report.peak_in_flight}")
    print(f"Achieved rate: {Colors.GREEN}{report.rate:.1f} req/s{Colors.RESET}")
    print(f"\nLatency (ms):")
    print(f"  Min:  {min(latencies):.1f}")
    print(f"  Avg:  {sum(latencies) / len(latencies):.1f}")
    print(f"  Max:  {max(latencies):.1f}")
    print(f"  P50:  {report.percentile(0.50):.1f}")
    print(f"  P95:  {report.percentile(0.95):.1f}")
    print(f"  P99:  {report.percentile(0.99):.1f}")
    print(f"{'='*60}\n")


def _finish(mode: str, config: RunConfiguration, report: BatchReport) -> None:
    print(f"Processed {report.count} in {format_duration(report.elapsed)}")
    if config.latency:
        print_results(mode, report)


def run_read(
    config: RunConfiguration,
    client: EtcdClient,
    gate: AdmissionGate | None = None,
) -> BatchReport | None:
    """Read ``read_count`` keys, round-robin over the root listing unless a key is fixed."""
    if config.read_count <= 0:
        return None

    pool = KeyPool.from_listing(client.fetch(""))
    if not config.read_key and not pool:
        raise ConfigurationError(
            f"No keys found under {client.endpoint}/. "
            "Run a write first (etcdbench -action write -writeCount 100) or pass -readKey."
        )

    report = run_batch(
        config.read_count,
        lambda i: (read_key_for(i, config.read_key, pool),),
        client.fetch,
        concurrent=config.read_concurrent,
        gate=gate,
        on_result=print_node if config.verbose else None,
    )
    _finish("read", config, report)
    return report


def run_write(
    config: RunConfiguration,
    client: EtcdClient,
    gate: AdmissionGate | None = None,
    clock: Callable[[], float] = time.time,
) -> BatchReport | None:
    """Write ``write_count`` values ``"0".."n-1"``."""
    if config.write_count <= 0:
        return None

    report = run_batch(
        config.write_count,
        lambda i: (write_key_for(i, config.write_key, clock), write_value_for(i)),
        client.store,
        concurrent=config.write_concurrent,
        gate=gate,
        on_result=print_node if config.verbose else None,
    )
    _finish("write", config, report)
    return report


def execute(config: RunConfiguration, client: EtcdClient) -> BatchReport | None:
    if config.mode == "read":
        return run_read(config, client)
    if config.mode == "write":
        return run_write(config, client)
    return None


def main(argv: Sequence[str] | None = None) -> int:
    config = parse_args(argv)
    print(config.summary())

    if config.mode == "none":
        return 0

    try:
        with EtcdClient(config.endpoint) as client:
            execute(config, client)
    except BenchError as e:
        print(f"{Colors.RED}✗ {e}{Colors.RESET}", file=sys.stderr)
        return e.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
