"""Load generator for the etcd v2 keys API."""
from __future__ import annotations

from .client import EtcdClient
from .config import RunConfiguration, parse_args
from .dispatcher import MAX_IN_FLIGHT, AdmissionGate, BatchReport, run_batch
from .errors import (
    BenchError,
    ConfigurationError,
    DecodeError,
    StoreError,
    TransportError,
)
from .keys import KeyPool
from .models import Node, OperationResult

__version__ = "0.1.0"

__all__ = [
    "AdmissionGate",
    "BatchReport",
    "BenchError",
    "ConfigurationError",
    "DecodeError",
    "EtcdClient",
    "KeyPool",
    "MAX_IN_FLIGHT",
    "Node",
    "OperationResult",
    "RunConfiguration",
    "StoreError",
    "TransportError",
    "parse_args",
    "run_batch",
]
