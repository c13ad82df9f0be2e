# rpcrouter/server/dispatcher.py
import inspect
import logging
from typing import Any, Callable
from typing import TYPE_CHECKING

from rpcrouter.errors import InvalidRequestError, JSONRPCError, SERVER_ERROR
from rpcrouter.path import RpcPath
from rpcrouter.schemas import ParseResult, RPCResponse, RpcRequest
from rpcrouter.server.binding import bind_params
from rpcrouter.server.parser import RequestParser

if TYPE_CHECKING:
    from rpcrouter.server.registry import RouteTable

logger = logging.getLogger("rpcrouter.dispatcher")


async def _call_fn(fn: Callable, args: list, kwargs: dict) -> Any:
    """
    Call `fn` (sync or async) with bound arguments.
    Always return concrete result (never a coroutine).
    """
    result = fn(*args, **kwargs)
    # A sync function may still hand back an awaitable
    if inspect.isawaitable(result):
        return await result
    return result


def make_response(result: Any = None, error: Any = None, id: Any = None) -> dict:
    # normalize error into a dict that RPCResponse expects
    if error is not None and hasattr(error, "to_dict"):
        error = error.to_dict()
    response = RPCResponse(result=result, error=error, id=id)
    if error is None:
        return response.model_dump(mode="json", exclude={"error"})
    return response.model_dump(mode="json", exclude={"result"}, exclude_none=True) | {"id": id}


class RPCDispatcher:
    """Resolves parsed requests against a route table and invokes them."""

    def __init__(self, table: "RouteTable", parser: RequestParser | None = None):
        self.table = table
        self.parser = parser or RequestParser()

    async def dispatch(self, path: RpcPath, request: RpcRequest) -> dict | None:
        """Run one request. Returns its response, or None for a notification."""
        request_id = request.id.to_json()
        try:
            method = self.table.get(path, request.method)
            args, kwargs = bind_params(method, request.params)
            result = await _call_fn(method.fn, args, kwargs)
            if request.is_notification:
                return None
            return make_response(result=result, id=request_id)
        except JSONRPCError as e:
            if request.is_notification:
                logger.warning(f"Notification '{request.method}' failed: {e.to_dict()}")
                return None
            return make_response(error=e, id=request_id)
        except Exception as e:
            # Wrap ANY python error into JSONRPCError
            logger.exception(f"Method '{request.method}' raised")
            if request.is_notification:
                return None
            return make_response(error=SERVER_ERROR(d={"exception": str(e)}), id=request_id)

    async def dispatch_batch(self, path: RpcPath, parsed: ParseResult) -> list[dict] | dict | None:
        responses = [await self.dispatch(path, request) for request in parsed.records]
        if not parsed.is_batch:
            return responses[0]
        return [r for r in responses if r is not None] or None

    async def handle_text(self, path: RpcPath, raw_text: str | None) -> list[dict] | dict | None:
        """Parse and dispatch raw request text.

        A request that fails to parse is answered with a single error
        response whose id is null, even when the input was a batch.
        """
        try:
            parsed = self.parser.parse_requests(raw_text)
        except InvalidRequestError as e:
            logger.debug(f"Invalid request: {e}")
            return make_response(error=e, id=None)
        return await self.dispatch_batch(path, parsed)
