import pytest
from pydantic import ValidationError

from rpcrouter.schemas import RequestId, RpcRequest


class TestRequestId:
    def test_kinds(self):
        assert RequestId.absent().kind == "absent"
        assert RequestId(1).kind == "int"
        assert RequestId("1").kind == "str"

    def test_int_and_str_ids_are_distinct(self):
        assert RequestId(1) != RequestId("1")
        assert RequestId(1) == 1
        assert RequestId("1") == "1"
        assert RequestId("1") != 1
        assert len({RequestId(1), RequestId("1")}) == 2

    def test_ids_mix_with_raw_values_in_sets(self):
        ids = {RequestId(1), RequestId("x"), RequestId.absent()}

        assert 1 in ids
        assert "x" in ids
        assert None in ids
        assert "1" not in ids
        assert hash(RequestId(7)) == hash(7)

    def test_absent_equals_none(self):
        assert RequestId.absent() == None  # noqa: E711
        assert RequestId.absent().is_absent
        assert RequestId.absent().to_json() is None

    @pytest.mark.parametrize("value", [True, 1.0, [1], {"a": 1}])
    def test_rejects_other_types(self, value):
        with pytest.raises(TypeError):
            RequestId(value)


class TestRpcRequest:
    def test_defaults(self):
        request = RpcRequest(method="ping")

        assert request.jsonrpc == "2.0"
        assert request.params == []
        assert request.is_notification

    def test_is_immutable(self):
        request = RpcRequest(method="ping", id=RequestId(1))

        with pytest.raises(ValidationError):
            request.method = "other"

    def test_rejects_empty_method(self):
        with pytest.raises(ValidationError):
            RpcRequest(method="")

    def test_rejects_raw_id(self):
        with pytest.raises(ValidationError):
            RpcRequest(method="ping", id=1)
