# rpcrouter/transport/http.py
import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from rpcrouter.errors import INVALID_REQUEST, InvalidPathError, InvalidRequestError, JSONRPCError
from rpcrouter.path import RpcPath
from rpcrouter.server.dispatcher import RPCDispatcher, make_response
from rpcrouter.server.parser import RequestParser

if TYPE_CHECKING:
    from rpcrouter.server.registry import RouteTable

logger = logging.getLogger("rpcrouter.transport")


class HTTPTransport:
    """Serves JSON-RPC over HTTP POST.

    The part of the URL after the mount path names the route:
    ``POST /jsonrpc/math`` dispatches against ``RpcPath.parse("math")``.
    """

    def __init__(self, dispatcher: RPCDispatcher, parser: RequestParser | None = None):
        self.dispatcher = dispatcher
        self.parser = parser or dispatcher.parser

    async def handle(self, request: Request) -> Response:
        try:
            path = RpcPath.parse(request.path_params.get("route", ""))
        except InvalidPathError as e:
            return self._error_response(INVALID_REQUEST({"reason": e.reason, "path": e.path}), None, 400)

        raw = await request.body()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return self._error_response(InvalidRequestError(f"body is not valid UTF-8: {e}"), None, 400)

        try:
            parsed = self.parser.parse_requests(text)
        except InvalidRequestError as e:
            logger.debug(f"Rejected request at {path}: {e}")
            return self._error_response(e, None, 400)

        responses = await self.dispatcher.dispatch_batch(path, parsed)
        if responses is None:
            return Response(status_code=204)
        return JSONResponse(responses)

    def _error_response(self, error: JSONRPCError, id, status=400):
        return JSONResponse(status_code=status, content=make_response(error=error, id=id))


def create_app(
    table: "RouteTable",
    mount_path: str = "/jsonrpc",
    title: str | None = None,
    parser: RequestParser | None = None,
) -> FastAPI:
    """Build the FastAPI app for a route table."""
    dispatcher = RPCDispatcher(table, parser)
    transport = HTTPTransport(dispatcher)
    mount = "/" + mount_path.strip("/") if mount_path and mount_path.strip("/") else ""

    app = FastAPI(title=title or table.name)

    # RPC endpoints: base methods at the mount path, routed methods below it
    app.post(mount or "/")(transport.handle)
    app.post(mount + "/{route:path}")(transport.handle)

    # Methods introspection endpoint
    async def methods_endpoint():
        return JSONResponse(content={"result": table.list_methods(), "error": None})

    app.get("/methods")(methods_endpoint)
    return app
