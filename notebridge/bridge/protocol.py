"""Inbound message classification and wire serialization.

Two request shapes are accepted, plus one heartbeat shape:

- heartbeat: ``{"type": "ping"}`` answered with ``{"type": "pong"}``
- custom: ``{"id"?, "action": str, "payload"?: object}``
- JSON-RPC 2.0: ``{"jsonrpc": "2.0", "id"?, "method": str, "params"?: object}``

Whether a reply is expected depends only on the presence of the ``id`` key,
not on its value: ``{"id": null, ...}`` still gets a response.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Literal

from pydantic import BaseModel

from notebridge.bridge.types import BridgeRequest, Failure, LogFn, Outcome, Success

JSONRPC_VERSION = "2.0"
JSONRPC_SERVER_ERROR = -32000
PONG_FRAME = json.dumps({"type": "pong"})

SendFn = Callable[[str], Any]


class CustomSuccessResponse(BaseModel):
    id: Any = None
    result: Any = None


class CustomErrorResponse(BaseModel):
    id: Any = None
    error: str


class JsonRpcError(BaseModel):
    code: int = JSONRPC_SERVER_ERROR
    message: str


class JsonRpcSuccessResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    result: Any = None


class JsonRpcErrorResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    error: JsonRpcError


@dataclass(frozen=True)
class Heartbeat:
    pass


@dataclass(frozen=True)
class CustomRequest:
    request: BridgeRequest
    expects_response: bool


@dataclass(frozen=True)
class JsonRpcRequest:
    request: BridgeRequest
    expects_response: bool


InboundMessage = Heartbeat | CustomRequest | JsonRpcRequest


def _as_payload(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def classify_message(message: Any) -> InboundMessage | None:
    """Classify a decoded JSON value; returns None for unsupported shapes."""
    if not isinstance(message, dict):
        return None

    if message.get("type") == "ping":
        return Heartbeat()

    action = message.get("action")
    if isinstance(action, str):
        if not action:
            return None
        return CustomRequest(
            request=BridgeRequest(
                id=message.get("id"),
                action=action,
                payload=_as_payload(message.get("payload")),
            ),
            expects_response="id" in message,
        )

    method = message.get("method")
    if message.get("jsonrpc") == JSONRPC_VERSION and isinstance(method, str):
        if not method:
            return None
        return JsonRpcRequest(
            request=BridgeRequest(
                id=message.get("id"),
                action=method,
                payload=_as_payload(message.get("params")),
            ),
            expects_response="id" in message,
        )

    return None


def build_response(message: CustomRequest | JsonRpcRequest, outcome: Outcome) -> BaseModel:
    """Build the wire model answering ``message`` with ``outcome``."""
    request_id = message.request.id
    if isinstance(message, JsonRpcRequest):
        if isinstance(outcome, Success):
            return JsonRpcSuccessResponse(id=request_id, result=outcome.result)
        return JsonRpcErrorResponse(id=request_id, error=JsonRpcError(message=outcome.message))
    if isinstance(outcome, Success):
        return CustomSuccessResponse(id=request_id, result=outcome.result)
    return CustomErrorResponse(id=request_id, error=outcome.message)


def encode_response(message: CustomRequest | JsonRpcRequest, outcome: Outcome) -> str:
    """Serialize a response; a result that is not JSON-serializable becomes a failure."""
    try:
        return build_response(message, outcome).model_dump_json()
    except Exception as e:
        if isinstance(outcome, Failure):
            raise
        return build_response(message, Failure(f"Failed to serialize result: {e}")).model_dump_json()


class Responder:
    """One-shot reply capability bound to one inbound message and its socket."""

    def __init__(self, message: CustomRequest | JsonRpcRequest, send: SendFn, log: LogFn):
        self.message = message
        self._send = send
        self._log = log
        self._used = False

    @property
    def used(self) -> bool:
        return self._used

    def __call__(self, outcome: Outcome) -> None:
        if self._used:
            self._log(f"Duplicate response for {self.message.request.action} ignored", "warn")
            return
        self._used = True
        frame = encode_response(self.message, outcome)
        try:
            sent = self._send(frame)
        except Exception as e:
            self._log(f"Response for {self.message.request.action} not delivered: {e}", "warn")
            return
        if sent is False:
            self._log(f"Response for {self.message.request.action} not delivered: socket closed", "warn")


@dataclass(frozen=True)
class NormalizedRequest:
    request: BridgeRequest
    respond: Responder | None


class ProtocolNormalizer:
    """Turns raw frames into canonical requests plus an optional responder."""

    def __init__(self, *, log: LogFn):
        self._log = log

    def parse(self, raw: str | bytes) -> Any:
        return json.loads(raw)

    def normalize(self, raw: str | bytes, send: SendFn) -> NormalizedRequest | None:
        """Classify one frame.

        Heartbeats are answered here through ``send`` and yield None, as do
        malformed and unsupported frames (logged and dropped, never answered).
        """
        try:
            message = self.parse(raw)
        except Exception as e:
            # Includes RecursionError from deeply nested frames.
            self._log(f"Failed to process message: {e}", "error")
            return None

        classified = classify_message(message)
        if classified is None:
            self._log("Ignoring unsupported message format", "warn")
            return None

        if isinstance(classified, Heartbeat):
            try:
                send(PONG_FRAME)
            except Exception as e:
                self._log(f"Heartbeat reply failed: {e}", "warn")
            return None

        respond = Responder(classified, send, self._log) if classified.expects_response else None
        return NormalizedRequest(request=classified.request, respond=respond)
