from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import requests

from neuralforge.client.errors import (
    BridgeCallFailed,
    BridgeUnavailable,
    HTTPStatusError,
    HTTPTransportError,
)
from neuralforge.client.operations import OPERATIONS, Operation

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201})
NO_CONTENT = 204


class BridgeCapability:
    """Describes which bridge bindings exist in the current runtime.

    The desktop host binds an API object into the window; anything else (tests,
    a browser served by server mode) passes an explicit mapping or
    ``BridgeCapability.unavailable()``.
    """

    def __init__(self, bindings: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._bindings = dict(bindings or {})

    @classmethod
    def from_api(cls, api: object) -> BridgeCapability:
        bindings: dict[str, Callable[..., Any]] = {}
        for method_name in OPERATIONS:
            binding = getattr(api, method_name, None)
            if callable(binding):
                bindings[method_name] = binding
        return cls(bindings)

    @classmethod
    def unavailable(cls) -> BridgeCapability:
        return cls()

    @property
    def available(self) -> bool:
        return bool(self._bindings)

    def resolve(self, method_name: str) -> Callable[..., Any] | None:
        return self._bindings.get(method_name)


class BridgeTransport:
    name = "bridge"

    def __init__(self, capability: BridgeCapability) -> None:
        self._capability = capability

    @property
    def capability(self) -> BridgeCapability:
        return self._capability

    async def call(self, operation: Operation, args: Sequence[Any]) -> Any:
        binding = self._capability.resolve(operation.bridge_method)
        if binding is None:
            raise BridgeUnavailable(operation.name, f"no binding for {operation.bridge_method}")
        try:
            if inspect.iscoroutinefunction(binding):
                raw = await binding(*args)
            else:
                raw = await asyncio.to_thread(binding, *args)
        except Exception as exc:
            raise BridgeCallFailed(operation.name, str(exc) or type(exc).__name__) from exc
        return self._unwrap(operation, raw)

    def _unwrap(self, operation: Operation, raw: Any) -> Any:
        if not isinstance(raw, dict) or "status" not in raw:
            raise BridgeCallFailed(operation.name, "malformed bridge response")
        status = raw["status"]
        if status == "cancelled":
            if operation.cancellable:
                return None
            raise BridgeCallFailed(operation.name, "operation cannot be cancelled")
        if status != "ok":
            raise BridgeCallFailed(operation.name, str(raw.get("message") or status))
        value = raw.get(operation.result_key) if operation.result_key else None
        try:
            return operation.parse(value)
        except (TypeError, ValueError) as exc:
            raise BridgeCallFailed(operation.name, f"unexpected result: {exc}") from exc


class HttpTransport:
    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        # requests.Session is not safe to share across worker threads.
        self._lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        if self._owns_session:
            with self._lock:
                self._session.close()

    def _send(self, method: str, url: str, kwargs: dict[str, Any]) -> requests.Response:
        with self._lock:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)

    async def call(self, operation: Operation, args: Sequence[Any]) -> Any:
        route = operation.http
        if route is None:
            raise HTTPTransportError(operation.name, "no HTTP route for this operation")
        url = f"{self._base_url}{route.path}"
        try:
            response = await asyncio.to_thread(self._send, route.method, url, route.build(args))
        except requests.RequestException as exc:
            raise HTTPTransportError(operation.name, f"{route.method} {url} failed: {exc}") from exc

        status = response.status_code
        if status == NO_CONTENT:
            return operation.empty_result()
        if status not in SUCCESS_STATUSES:
            raise HTTPStatusError(operation.name, status, response.text)
        try:
            return operation.parse(_decode_body(response))
        except (TypeError, ValueError) as exc:
            raise HTTPTransportError(operation.name, f"malformed response body: {exc}") from exc


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type:
        return response.json()
    return response.text
