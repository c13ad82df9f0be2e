# rpcrouter/server/parser.py
import json
import logging
from typing import Any, Protocol

from rpcrouter.errors import InvalidRequestError, RequestParseError
from rpcrouter.schemas import JSONRPC_VERSION, ParseResult, RequestId, RpcRequest

logger = logging.getLogger("rpcrouter.parser")


class JsonDeserializer(Protocol):
    """Turns request text into plain JSON values.

    Implementations raise ``ValueError`` (``json.JSONDecodeError`` is one)
    when the text is not valid JSON.
    """

    def loads(self, text: str) -> Any: ...


class StdlibJsonDeserializer:
    """Default deserializer backed by :func:`json.loads`.

    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and are rejected.
    """

    def loads(self, text: str) -> Any:
        return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name!r}")


class RequestParser:
    """Parses raw JSON-RPC text into validated ``RpcRequest`` records.

    A top-level array is a batch, a top-level object a single request.
    Validation is all-or-nothing: the first invalid element aborts the
    whole parse with an ``InvalidRequestError``.
    """

    def __init__(self, deserializer: JsonDeserializer | None = None):
        self.deserializer = deserializer or StdlibJsonDeserializer()

    def parse_requests(self, raw_text: str | None) -> ParseResult:
        if raw_text is None or not raw_text.strip():
            raise InvalidRequestError("empty request")

        try:
            payload = self.deserializer.loads(raw_text)
        except ValueError as e:
            logger.debug(f"Rejected malformed JSON: {e}")
            raise RequestParseError(str(e)) from e
        except RecursionError as e:
            logger.debug("Rejected JSON nested too deeply")
            raise RequestParseError("JSON nested too deeply") from e

        if isinstance(payload, list):
            if not payload:
                raise InvalidRequestError("batch must contain at least one request")
            records = [self._parse_object(item, index) for index, item in enumerate(payload)]
            logger.debug(f"Parsed batch of {len(records)} request(s)")
            return ParseResult(records, True)

        return ParseResult([self._parse_object(payload, None)], False)

    def _parse_object(self, item: Any, index: int | None) -> RpcRequest:
        if not isinstance(item, dict):
            raise InvalidRequestError(
                f"request must be a JSON object, got {_json_type(item)}", index=index
            )

        if "jsonrpc" not in item:
            raise InvalidRequestError("missing JSON-RPC version", field="jsonrpc", index=index)
        version = item["jsonrpc"]
        if version != JSONRPC_VERSION:
            raise InvalidRequestError(
                f"unsupported JSON-RPC version {version!r}, expected {JSONRPC_VERSION!r}",
                field="jsonrpc",
                index=index,
            )

        if "method" not in item:
            raise InvalidRequestError("missing method", field="method", index=index)
        method = item["method"]
        if not isinstance(method, str):
            raise InvalidRequestError(
                f"method must be a string, got {_json_type(method)}", field="method", index=index
            )
        if not method:
            raise InvalidRequestError("method must not be empty", field="method", index=index)

        request_id = self._parse_id(item.get("id"), index)

        params = item.get("params", [])
        if not isinstance(params, (list, dict)):
            raise InvalidRequestError(
                f"params must be an array or an object, got {_json_type(params)}",
                field="params",
                index=index,
            )

        return RpcRequest(jsonrpc=version, method=method, params=params, id=request_id)

    @staticmethod
    def _parse_id(raw_id: Any, index: int | None) -> RequestId:
        if raw_id is None:
            return RequestId.absent()
        if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
            raise InvalidRequestError(
                f"id must be an integer or a string, got {_json_type(raw_id)}",
                field="id",
                index=index,
            )
        return RequestId(raw_id)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
