"""Decoded etcd v2 keys API responses."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Node:
    key: str = ""
    value: str = ""
    is_directory: bool = False
    children: tuple[Node, ...] = ()
    created_version: int = 0
    modified_version: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Build a node from its JSON form, ignoring unknown fields.

        Only directories carry children; ``nodes`` on a leaf is dropped.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"node must be an object, got {type(data).__name__}")

        is_directory = bool(data.get("dir", False))
        children: tuple[Node, ...] = ()
        if is_directory:
            children = tuple(cls.from_dict(c) for c in data.get("nodes") or ())

        return cls(
            key=_text(data.get("key")),
            value="" if is_directory else _text(data.get("value")),
            is_directory=is_directory,
            children=children,
            created_version=int(data.get("createdIndex", 0)),
            modified_version=int(data.get("modifiedIndex", 0)),
        )


@dataclass(frozen=True)
class OperationResult:
    action: str
    node: Node
    previous_node: Node | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperationResult:
        if not isinstance(data, Mapping):
            raise TypeError(f"envelope must be an object, got {type(data).__name__}")

        prev = data.get("prevNode")
        return cls(
            action=str(data.get("action", "")),
            node=Node.from_dict(data.get("node") or {}),
            previous_node=Node.from_dict(prev) if prev else None,
        )


def _text(raw: Any) -> str:
    # JSON null decodes to "", not "None".
    return "" if raw is None else str(raw)
