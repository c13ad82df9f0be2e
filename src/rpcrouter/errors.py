# rpcrouter/errors.py
from typing import Any
from dataclasses import dataclass


@dataclass
class JSONRPCError(Exception):
    code: int
    message: str
    data: Any = None

    def to_dict(self):
        base = {"code": self.code, "message": self.message}
        if self.data is not None:
            base["data"] = self.data
        return base


# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = lambda d=None: JSONRPCError(-32700, "Parse error", d)
INVALID_REQUEST = lambda d=None: JSONRPCError(-32600, "Invalid Request", d)
METHOD_NOT_FOUND = lambda d=None: JSONRPCError(-32601, "Method not found", d)
INVALID_PARAMS = lambda d=None: JSONRPCError(-32602, "Invalid params", d)
INTERNAL_ERROR = lambda d=None: JSONRPCError(-32603, "Internal error", d)
SERVER_ERROR = lambda code= -32000, d=None: JSONRPCError(code, "Server error", d)


class InvalidRequestError(JSONRPCError):
    """A JSON-RPC structural violation found while parsing a request.

    ``field`` names the offending member (``"jsonrpc"``, ``"method"``,
    ``"id"``, ``"params"``) and ``index`` the position inside a batch, or
    ``None`` for a single request or for failures of the whole document.
    """

    code_value = -32600
    message_value = "Invalid Request"

    def __init__(self, reason: str, *, field: str | None = None, index: int | None = None):
        data: dict[str, Any] = {"reason": reason}
        if field is not None:
            data["field"] = field
        if index is not None:
            data["index"] = index
        super().__init__(self.code_value, self.message_value, data)
        self.reason = reason
        self.field = field
        self.index = index

    def __str__(self) -> str:
        where = ""
        if self.index is not None:
            where += f" [batch index {self.index}]"
        if self.field is not None:
            where += f" [field '{self.field}']"
        return f"{self.message}: {self.reason}{where}"


class RequestParseError(InvalidRequestError):
    """The request text is not syntactically valid JSON."""

    code_value = -32700
    message_value = "Parse error"


class InvalidPathError(ValueError):
    """Malformed RPC path syntax."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid RPC path {path!r}: {reason}")
        self.path = path
        self.reason = reason
