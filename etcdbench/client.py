"""HTTP adapter for the etcd v2 keys API."""
from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .errors import DecodeError, StoreError, TransportError
from .models import OperationResult

DEFAULT_POOL_SIZE = 100

WRITE_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Cache-Control": "no-cache",
}


def keys_endpoint(host: str, port: int, scheme: str = "http") -> str:
    return f"{scheme}://{host}:{port}/v2/keys"


class EtcdClient:
    """Issues GET/PUT requests under ``<endpoint>/<key>``.

    The session is shared by every dispatcher thread, so its connection pool
    is sized to the number of requests that may be in flight at once.
    """

    def __init__(
        self,
        endpoint: str,
        session: requests.Session | None = None,
        pool_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def __enter__(self) -> EtcdClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def url_for(self, key: str) -> str:
        # Store keys are absolute ("/foo"); avoid "keys//foo".
        return f"{self.endpoint}/{key.lstrip('/')}"

    def fetch(self, key: str = "") -> OperationResult:
        """GET a key. An empty key lists the root directory."""
        return self._send("GET", self.url_for(key))

    def store(self, key: str, value: str) -> OperationResult:
        """PUT ``value`` at ``key`` as a form-encoded body."""
        return self._send(
            "PUT",
            self.url_for(key),
            data={"value": value},
            headers=WRITE_HEADERS,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> OperationResult:
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return decode_response(response, method)


def decode_response(response: requests.Response, method: str = "GET") -> OperationResult:
    """Turn an HTTP response into an ``OperationResult`` or raise."""
    if not response.ok:
        raise _store_error(response, method)

    try:
        payload = response.json()
    except ValueError as e:
        raise DecodeError(
            f"{method} {response.url}: invalid JSON body ({e})"
        ) from e

    try:
        return OperationResult.from_dict(payload)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{method} {response.url}: unexpected envelope ({e})") from e


def _store_error(response: requests.Response, method: str) -> StoreError:
    # etcd reports failures as {"errorCode": 100, "message": "Key not found", "cause": "/x"}
    error_code = None
    detail = response.text.strip()
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and "errorCode" in body:
        error_code = body.get("errorCode")
        detail = body.get("message", "")
        if body.get("cause"):
            detail = f"{detail} ({body['cause']})"

    return StoreError(
        f"{method} {response.url}: HTTP {response.status_code} - {detail}",
        status_code=response.status_code,
        error_code=error_code,
    )
