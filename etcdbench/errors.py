"""Error taxonomy for etcdbench.

Every failure that aborts a run is a ``BenchError``; ``cli.main`` maps it to
the process exit code stored on the class.
"""
from __future__ import annotations


class BenchError(Exception):
    """Base class for errors that abort a benchmark run."""

    exit_code = 1


class ConfigurationError(BenchError):
    """The run cannot proceed with the resolved options (e.g. empty key pool)."""

    exit_code = 2


class TransportError(BenchError):
    """The request never produced a usable HTTP response."""

    exit_code = 3


class StoreError(TransportError):
    """The store answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class DecodeError(BenchError):
    """The response body is not a valid etcd envelope."""

    exit_code = 4
