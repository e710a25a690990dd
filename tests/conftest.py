"""Shared fixtures: an in-memory etcd v2 keys API served by pytest-httpserver."""
from __future__ import annotations

import json
import re
import socket
import threading
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

import pytest
from werkzeug import Request, Response

from etcdbench.client import EtcdClient, keys_endpoint

if TYPE_CHECKING:
    from pytest_httpserver import HTTPServer

KEYS_PREFIX = "/v2/keys"


class FakeEtcd:
    """Flat key space with just enough of the v2 API for the benchmark.

    Every request is recorded as ``(method, key, body, headers)``.
    """

    def __init__(self) -> None:
        self.data: dict[str, tuple[str, int, int]] = {}
        self.index = 0
        self.requests: list[tuple[str, str, str, dict[str, str]]] = []
        self._lock = threading.Lock()

    def seed(self, *keys: str, value: str = "seed") -> None:
        for key in keys:
            self.index += 1
            self.data[key] = (value, self.index, self.index)

    def key_requests(self, method: str | None = None) -> list[tuple[str, str, str, dict[str, str]]]:
        """Recorded requests, excluding the root listing."""
        return [
            r for r in self.requests
            if r[1] != "/" and (method is None or r[0] == method)
        ]

    def _node(self, key: str) -> dict:
        value, created, modified = self.data[key]
        return {"key": key, "value": value, "createdIndex": created, "modifiedIndex": modified}

    def handle(self, request: Request) -> Response:
        key = request.path[len(KEYS_PREFIX):] or "/"
        body = request.get_data(as_text=True)
        with self._lock:
            self.requests.append((request.method, key, body, dict(request.headers)))
            if request.method == "GET":
                return self._get(key)
            if request.method == "PUT":
                return self._put(key, parse_qs(body).get("value", [""])[0])
        return _json({"errorCode": 405, "message": "Method not allowed"}, 405)

    def _get(self, key: str) -> Response:
        if key == "/":
            nodes = [self._node(k) for k in self.data]
            return _json({"action": "get", "node": {"dir": True, "nodes": nodes}})
        if key not in self.data:
            return _json(
                {"errorCode": 100, "message": "Key not found", "cause": key, "index": self.index},
                404,
            )
        return _json({"action": "get", "node": self._node(key)})

    def _put(self, key: str, value: str) -> Response:
        envelope: dict = {"action": "set"}
        self.index += 1
        created = self.index
        if key in self.data:
            envelope["prevNode"] = self._node(key)
            created = self.data[key][1]
        self.data[key] = (value, created, self.index)
        envelope["node"] = self._node(key)
        return _json(envelope, 200 if "prevNode" in envelope else 201)


def _json(body: dict, status: int = 200) -> Response:
    return Response(json.dumps(body), status=status, content_type="application/json")


@pytest.fixture
def fake_etcd(httpserver: HTTPServer) -> FakeEtcd:
    etcd = FakeEtcd()
    httpserver.expect_request(re.compile(r"^/v2/keys(/.*)?$")).respond_with_handler(etcd.handle)
    return etcd


@pytest.fixture
def endpoint(httpserver: HTTPServer) -> str:
    return keys_endpoint(httpserver.host, httpserver.port)


@pytest.fixture
def client(endpoint: str):
    with EtcdClient(endpoint) as c:
        yield c


@pytest.fixture
def server_args(httpserver: HTTPServer) -> list[str]:
    return ["-host", httpserver.host, "-port", str(httpserver.port)]


@pytest.fixture
def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
