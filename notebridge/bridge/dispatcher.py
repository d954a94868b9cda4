"""Handler invocation for normalized bridge requests."""

from __future__ import annotations

import inspect

from notebridge.bridge.protocol import Responder
from notebridge.bridge.types import BridgeRequest, Failure, LogFn, Outcome, RequestHandler, Success
from notebridge.utils.exceptions import describe_error


class RequestDispatcher:
    """Runs the registered handler and routes its outcome to the responder.

    Invocations are not serialized: each call awaits only its own handler,
    so replies may leave in a different order than requests arrived.
    """

    def __init__(self, *, log: LogFn):
        self._log = log
        self._handler: RequestHandler | None = None

    @property
    def handler(self) -> RequestHandler | None:
        return self._handler

    def set_handler(self, handler: RequestHandler | None) -> None:
        """Replace the handler; calls already in flight keep the old one."""
        self._handler = handler

    async def dispatch(self, request: BridgeRequest, respond: Responder | None = None) -> Outcome | None:
        handler = self._handler
        if handler is None:
            self._log("Message received but no handler is registered; ignoring", "warn")
            return None

        self._log(f"Received: {request.action}")
        outcome: Outcome
        try:
            result = handler(request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            message = describe_error(e)
            outcome = Failure(message)
            self._log(f"Failed: {request.action} - {message}", "error")
        else:
            outcome = Success(result)
            self._log(f"Completed: {request.action}")

        if respond is not None:
            respond(outcome)
        return outcome
