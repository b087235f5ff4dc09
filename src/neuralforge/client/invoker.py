"""Dual-transport invocation of remote operations.

Per call the invoker runs a small state machine::

    Start -> TryBridge -> Done | TryHTTP -> Done | Failed   (bridge preferred)
    Start -> TryHTTP -> Done | Failed                       (HTTP only)

A failed or missing bridge binding falls back to HTTP exactly once. HTTP
failures are terminal. Nothing is kept between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from neuralforge.client.errors import (
    BridgeCallFailed,
    BridgeUnavailable,
    HTTPStatusError,
    HTTPTransportError,
    InvocationFailed,
    TransportError,
)
from neuralforge.client.operations import Operation
from neuralforge.client.transports import BridgeTransport, HttpTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResult:
    operation: str
    value: Any = None
    transport: str | None = None
    error: TransportError | None = None
    attempts: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise InvocationFailed(self.operation, self.error, self.attempts)
        return self.value


class DualTransportInvoker:
    def __init__(self, bridge: BridgeTransport, http: HttpTransport, *, prefer_bridge: bool = True) -> None:
        self._bridge = bridge
        self._http = http
        self._prefer_bridge = prefer_bridge

    @property
    def prefer_bridge(self) -> bool:
        return self._prefer_bridge

    def close(self) -> None:
        self._http.close()

    async def invoke(self, operation: Operation, *args: Any, prefer_bridge: bool | None = None) -> TransportResult:
        use_bridge = self._prefer_bridge if prefer_bridge is None else prefer_bridge
        attempts: list[str] = []
        bridge_error: TransportError | None = None

        if use_bridge:
            attempts.append(self._bridge.name)
            try:
                value = await self._bridge.call(operation, args)
            except (BridgeUnavailable, BridgeCallFailed) as exc:
                bridge_error = exc
                logger.warning("%s: bridge attempt failed: %s", operation.name, exc.message)
            else:
                logger.info("%s: bridge ok", operation.name)
                return TransportResult(operation.name, value, self._bridge.name, attempts=tuple(attempts))

        if not operation.has_http_fallback:
            error = bridge_error or BridgeUnavailable(operation.name, "bridge disabled and no HTTP route exists")
            logger.error("%s: failed with no fallback: %s", operation.name, error.message)
            return TransportResult(operation.name, transport=error.transport, error=error, attempts=tuple(attempts))

        if bridge_error is not None:
            logger.info("%s: falling back to http", operation.name)
        attempts.append(self._http.name)
        try:
            value = await self._http.call(operation, args)
        except (HTTPTransportError, HTTPStatusError) as exc:
            logger.error("%s: http attempt failed: %s", operation.name, exc.message)
            return TransportResult(operation.name, transport=self._http.name, error=exc, attempts=tuple(attempts))
        logger.info("%s: http ok", operation.name)
        return TransportResult(operation.name, value, self._http.name, attempts=tuple(attempts))
