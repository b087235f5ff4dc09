from neuralforge.client.api import NeuralForgeClient
from neuralforge.client.errors import (
    BridgeCallFailed,
    BridgeUnavailable,
    HTTPStatusError,
    HTTPTransportError,
    InvocationFailed,
    NeuralForgeError,
    TransportError,
    UserInputError,
)
from neuralforge.client.invoker import DualTransportInvoker, TransportResult
from neuralforge.client.transports import BridgeCapability, BridgeTransport, HttpTransport

__all__ = [
    "BridgeCallFailed",
    "BridgeCapability",
    "BridgeTransport",
    "BridgeUnavailable",
    "DualTransportInvoker",
    "HTTPStatusError",
    "HTTPTransportError",
    "HttpTransport",
    "InvocationFailed",
    "NeuralForgeClient",
    "NeuralForgeError",
    "TransportError",
    "TransportResult",
    "UserInputError",
]
