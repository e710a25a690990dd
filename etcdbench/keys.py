"""Key selection for read and write batches."""
from __future__ import annotations

import time
from typing import Callable, Iterable, Iterator

from .errors import ConfigurationError
from .models import OperationResult


class KeyPool:
    """Fixed, ordered set of keys read round-robin by iteration index."""

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys = tuple(keys)

    @classmethod
    def from_listing(cls, listing: OperationResult) -> KeyPool:
        return cls(child.key for child in listing.node.children)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def key_for(self, index: int) -> str:
        if not self._keys:
            raise ConfigurationError(
                "Key pool is empty: the root listing returned no keys. "
                "Seed the store first or pass -readKey."
            )
        return self._keys[index % len(self._keys)]


def read_key_for(index: int, read_key: str, pool: KeyPool) -> str:
    return read_key if read_key else pool.key_for(index)


def write_key_for(index: int, write_key: str, clock: Callable[[], float] = time.time) -> str:
    """Explicit key, or the current Unix second.

    Every write issued within the same second shares a key, so a fast batch
    keeps overwriting one entry.
    """
    return write_key if write_key else str(int(clock()))


def write_value_for(index: int) -> str:
    return str(index)
