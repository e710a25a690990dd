"""Command-line options resolved into a ``RunConfiguration``."""
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Sequence

from .client import keys_endpoint

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2379
DEFAULT_SCHEME = "http"

SUPPORTED_ACTIONS = ("read", "write")

_TRUE = {"1", "t", "true", "yes", "on"}
_FALSE = {"0", "f", "false", "no", "off"}


@dataclass(frozen=True)
class RunConfiguration:
    action: str = ""
    write_count: int = 0
    write_key: str = ""
    write_concurrent: bool = False
    read_count: int = 0
    read_key: str = ""
    read_concurrent: bool = False
    verbose: bool = False
    latency: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    scheme: str = DEFAULT_SCHEME

    @property
    def mode(self) -> str:
        return self.action if self.action in SUPPORTED_ACTIONS else "none"

    @property
    def endpoint(self) -> str:
        return keys_endpoint(self.host, self.port, self.scheme)

    def summary(self) -> str:
        """One-line description of the run, printed before anything executes."""
        return (
            f"action={self.action} verbose={_fmt_bool(self.verbose)} "
            f"writeCount={self.write_count} writeKey={self.write_key} "
            f"writeCon={_fmt_bool(self.write_concurrent)} "
            f"readCount={self.read_count} readKey={self.read_key} "
            f"readCon={_fmt_bool(self.read_concurrent)} "
            f"host={self.host} port={self.port}"
        )


def _fmt_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {raw!r}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="etcdbench",
        description="Drive read or write load against an etcd v2 keys API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog=(
            "Examples:\n"
            "  etcdbench -action write -writeCount 1000 -writeCon\n"
            "  etcdbench -action read -readCount 5000 -readCon -latency\n"
            "  etcdbench -action read -readCount 10 -readKey /foo -verbose\n"
            "  ETCDBENCH_HOST=10.0.0.5 etcdbench -action write -writeCount 100\n"
        ),
    )

    def flag(name: str, **kwargs) -> None:
        p.add_argument(f"-{name}", f"--{name}", dest=name, **kwargs)

    def switch(name: str, help_text: str) -> None:
        # Go-style boolean: bare "-name" or "-name=false"
        flag(name, type=parse_bool, nargs="?", const=True, default=False, metavar="BOOL", help=help_text)

    flag("action", default="", help="Perform an action. Supported: read, write")

    flag("writeCount", type=int, default=0, help="Total of writes count (default: %(default)s)")
    flag("writeKey", default="", help="Write a specific key (default: current Unix second)")
    switch("writeCon", "Write concurrently")

    flag("readCount", type=int, default=0, help="Total of reads count (default: %(default)s)")
    flag("readKey", default="", help="Read a specific key (default: round-robin over root listing)")
    switch("readCon", "Read concurrently")

    switch("verbose", "Print debug log")
    switch("latency", "Print latency percentiles after the run")

    flag(
        "host",
        default=os.environ.get("ETCDBENCH_HOST", DEFAULT_HOST),
        help="etcd host (default: ETCDBENCH_HOST env var or %(default)s)",
    )
    flag(
        "port",
        type=int,
        default=os.environ.get("ETCDBENCH_PORT", str(DEFAULT_PORT)),
        help="etcd client port (default: ETCDBENCH_PORT env var or %(default)s)",
    )
    flag(
        "scheme",
        choices=["http", "https"],
        default=os.environ.get("ETCDBENCH_SCHEME", DEFAULT_SCHEME),
        help="URL scheme (default: ETCDBENCH_SCHEME env var or %(default)s)",
    )
    return p


def parse_args(argv: Sequence[str] | None = None) -> RunConfiguration:
    args = build_parser().parse_args(argv)
    return RunConfiguration(
        action=args.action,
        write_count=args.writeCount,
        write_key=args.writeKey,
        write_concurrent=args.writeCon,
        read_count=args.readCount,
        read_key=args.readKey,
        read_concurrent=args.readCon,
        verbose=args.verbose,
        latency=args.latency,
        host=args.host,
        port=args.port,
        scheme=args.scheme,
    )
