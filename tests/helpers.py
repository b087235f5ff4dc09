from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from neuralforge.client.invoker import DualTransportInvoker
from neuralforge.client.transports import BridgeCapability, BridgeTransport, HttpTransport


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None, content_type: str = "application/json") -> None:
        self.status_code = status_code
        if body is None:
            self.content = b""
        elif isinstance(body, str):
            self.content = body.encode("utf-8")
        else:
            self.content = json.dumps(body).encode("utf-8")
        self.text = self.content.decode("utf-8")
        self.headers = {"Content-Type": content_type}

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    def __init__(self, *outcomes: FakeResponse | Exception) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


class RecordingBridge:
    """Bridge bindings that record every call made through them."""

    def __init__(self, **handlers: Callable[..., Any]) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._handlers = handlers

    def capability(self) -> BridgeCapability:
        return BridgeCapability({name: self._binding(name, handler) for name, handler in self._handlers.items()})

    def _binding(self, name: str, handler: Callable[..., Any]) -> Callable[..., Any]:
        def call(*args: Any) -> Any:
            self.calls.append((name, args))
            return handler(*args)

        return call


def build_invoker(
    bridge: RecordingBridge | None,
    session: FakeSession,
    prefer_bridge: bool = True,
) -> DualTransportInvoker:
    capability = bridge.capability() if bridge is not None else BridgeCapability.unavailable()
    http = HttpTransport("http://localhost:8080", session=session)  # type: ignore[arg-type]
    return DualTransportInvoker(BridgeTransport(capability), http, prefer_bridge=prefer_bridge)


def failing(message: str = "bridge exploded") -> Callable[..., Any]:
    def raise_error(*args: Any) -> Any:
        raise RuntimeError(message)

    return raise_error

