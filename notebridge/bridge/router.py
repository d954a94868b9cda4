"""Action-name routing for bridge requests."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from notebridge.bridge.types import BridgeRequest
from notebridge.utils.exceptions import UnknownActionError

if TYPE_CHECKING:
    from notebridge.bridge.client import BridgeClient

ActionFn = Callable[[dict[str, Any]], Awaitable[Any] | Any]


class ActionRouter:
    """Request handler that picks a callable by ``request.action``.

    Registered callables receive the request payload and may be sync or
    async. Unregistered actions raise UnknownActionError, which the
    dispatcher turns into a failure response.
    """

    def __init__(self) -> None:
        self._actions: dict[str, ActionFn] = {}

    def register(self, name: str, fn: ActionFn) -> None:
        if not name:
            raise ValueError("action name must be non-empty")
        self._actions[name] = fn

    def action(self, name: str) -> Callable[[ActionFn], ActionFn]:
        def decorator(fn: ActionFn) -> ActionFn:
            self.register(name, fn)
            return fn

        return decorator

    def actions(self) -> list[str]:
        return sorted(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    async def __call__(self, request: BridgeRequest) -> Any:
        fn = self._actions.get(request.action)
        if fn is None:
            raise UnknownActionError(request.action)
        result = fn(request.payload)
        if inspect.isawaitable(result):
            result = await result
        return result


def install_status_action(router: ActionRouter, client: "BridgeClient", name: str = "get_status") -> None:
    """Expose the client's connection state as an action."""

    def get_status(_payload: dict[str, Any]) -> dict[str, Any]:
        status = client.connection.describe()
        status["actions"] = router.actions()
        status["inflight"] = client.inflight
        return status

    router.register(name, get_status)
