from __future__ import annotations


class NeuralForgeError(Exception):
    """Base class for every error raised by the client layer."""


class UserInputError(NeuralForgeError):
    """A caller-side precondition failed before any transport was attempted."""


class TransportError(NeuralForgeError):
    transport = "unknown"

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} via {self.transport}: {message}")
        self.operation = operation
        self.message = message


class BridgeUnavailable(TransportError):
    transport = "bridge"


class BridgeCallFailed(TransportError):
    transport = "bridge"


class HTTPTransportError(TransportError):
    transport = "http"


class HTTPStatusError(TransportError):
    transport = "http"

    def __init__(self, operation: str, status_code: int, body: str = "") -> None:
        detail = f"unexpected status {status_code}"
        if body:
            detail = f"{detail}: {body[:200]}"
        super().__init__(operation, detail)
        self.status_code = status_code
        self.body = body


class InvocationFailed(NeuralForgeError):
    """Terminal failure of one invocation, after every allowed transport was tried."""

    def __init__(self, operation: str, cause: TransportError, attempts: tuple[str, ...]) -> None:
        super().__init__(str(cause))
        self.operation = operation
        self.cause = cause
        self.attempts = attempts

    @property
    def transport(self) -> str:
        return self.cause.transport

    @property
    def status_code(self) -> int | None:
        return getattr(self.cause, "status_code", None)
