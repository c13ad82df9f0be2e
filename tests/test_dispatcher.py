import pytest

from rpcrouter.path import RpcPath
from rpcrouter.schemas import RequestId, RpcRequest
from rpcrouter.server.dispatcher import RPCDispatcher, make_response

MATH = RpcPath.parse("/math")


class TestDispatch:
    @pytest.mark.anyio
    async def test_successful_call(self, calc_table):
        # Arrange
        dispatcher = RPCDispatcher(calc_table)
        request = RpcRequest(method="add", params=[2, 3], id=RequestId(1))

        # Act
        response = await dispatcher.dispatch(MATH, request)

        # Assert
        assert response == {"jsonrpc": "2.0", "result": 5, "id": 1}

    @pytest.mark.anyio
    async def test_async_method_is_awaited(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)
        request = RpcRequest(method="divide", params={"a": 9, "b": 3}, id=RequestId("x"))

        response = await dispatcher.dispatch(MATH, request)

        assert response == {"jsonrpc": "2.0", "result": 3.0, "id": "x"}

    @pytest.mark.anyio
    async def test_none_result_is_kept(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        response = await dispatcher.dispatch(MATH, RpcRequest(method="nothing", id=RequestId(1)))

        assert response == {"jsonrpc": "2.0", "result": None, "id": 1}

    @pytest.mark.anyio
    async def test_unknown_method(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        response = await dispatcher.dispatch(MATH, RpcRequest(method="ping", id=RequestId(2)))

        assert response["error"]["code"] == -32601
        assert response["id"] == 2

    @pytest.mark.anyio
    async def test_invalid_params(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)
        request = RpcRequest(method="add", params=["1", "2"], id=RequestId(3))

        response = await dispatcher.dispatch(MATH, request)

        assert response["error"]["code"] == -32602

    @pytest.mark.anyio
    async def test_method_exception_becomes_server_error(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        response = await dispatcher.dispatch(RpcPath.parse("broken"), RpcRequest(method="fail", id=RequestId(4)))

        assert response["error"] == {"code": -32000, "message": "Server error", "data": {"exception": "boom"}}
        assert response["id"] == 4

    @pytest.mark.anyio
    async def test_notifications_get_no_response(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        assert await dispatcher.dispatch(MATH, RpcRequest(method="add", params=[1, 2])) is None
        assert await dispatcher.dispatch(MATH, RpcRequest(method="missing")) is None
        assert await dispatcher.dispatch(RpcPath.parse("broken"), RpcRequest(method="fail")) is None


class TestHandleText:
    @pytest.mark.anyio
    async def test_single_request(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        response = await dispatcher.handle_text(RpcPath.root(), '{"jsonrpc": "2.0", "method": "ping", "id": 1}')

        assert response == {"jsonrpc": "2.0", "result": "pong", "id": 1}

    @pytest.mark.anyio
    async def test_batch_skips_notifications(self, calc_table):
        # Arrange
        dispatcher = RPCDispatcher(calc_table)
        raw = (
            '[{"jsonrpc": "2.0", "method": "add", "params": [1, 1], "id": "a"},'
            ' {"jsonrpc": "2.0", "method": "add", "params": [2, 2]},'
            ' {"jsonrpc": "2.0", "method": "add", "params": [3, 3], "id": "c"}]'
        )

        # Act
        responses = await dispatcher.handle_text(MATH, raw)

        # Assert
        assert responses == [
            {"jsonrpc": "2.0", "result": 2, "id": "a"},
            {"jsonrpc": "2.0", "result": 6, "id": "c"},
        ]

    @pytest.mark.anyio
    async def test_all_notification_batch_returns_none(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        assert await dispatcher.handle_text(RpcPath.root(), '[{"jsonrpc": "2.0", "method": "ping"}]') is None

    @pytest.mark.anyio
    async def test_invalid_batch_returns_single_error(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)
        raw = '[{"jsonrpc": "2.0", "method": "ping", "id": 1}, {"method": "ping", "id": 2}]'

        response = await dispatcher.handle_text(RpcPath.root(), raw)

        assert response["id"] is None
        assert response["error"]["code"] == -32600
        assert response["error"]["data"]["index"] == 1

    @pytest.mark.anyio
    async def test_malformed_json_returns_parse_error(self, calc_table):
        dispatcher = RPCDispatcher(calc_table)

        response = await dispatcher.handle_text(RpcPath.root(), "{nope")

        assert response["error"]["code"] == -32700
        assert response["id"] is None


class TestMakeResponse:
    def test_error_response_keeps_null_id(self):
        from rpcrouter.errors import METHOD_NOT_FOUND

        response = make_response(error=METHOD_NOT_FOUND(), id=None)

        assert response == {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found"}, "id": None}
