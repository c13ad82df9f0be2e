# rpcrouter/schemas.py
from dataclasses import dataclass
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, InstanceOf

JSONRPC_VERSION = "2.0"


@dataclass(frozen=True, slots=True)
class RequestId:
    """JSON-RPC request id: absent, an integer or a string.

    An absent id marks the request as a notification.
    """

    value: int | str | None = None

    def __post_init__(self) -> None:
        if self.value is not None and (
            isinstance(self.value, bool) or not isinstance(self.value, (int, str))
        ):
            raise TypeError(f"request id must be int, str or None, got {type(self.value).__name__}")

    @classmethod
    def absent(cls) -> "RequestId":
        return cls(None)

    @property
    def kind(self) -> Literal["absent", "int", "str"]:
        if self.value is None:
            return "absent"
        return "int" if isinstance(self.value, int) else "str"

    @property
    def is_absent(self) -> bool:
        return self.value is None

    def to_json(self) -> int | str | None:
        return self.value

    def __eq__(self, other: object) -> bool:
        # 1 and "1" are different ids
        if isinstance(other, RequestId):
            return self.kind == other.kind and self.value == other.value
        if isinstance(other, bool):
            return False
        if other is None or isinstance(other, (int, str)):
            return self == RequestId(other)
        return NotImplemented

    def __hash__(self) -> int:
        # equal raw values must hash alike
        return hash(self.value)


class RpcRequest(BaseModel):
    """A validated JSON-RPC 2.0 request (or notification when ``id`` is absent)."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = Field(default=JSONRPC_VERSION)
    method: str = Field(min_length=1)
    params: list[Any] | dict[str, Any] = Field(default_factory=list)
    id: InstanceOf[RequestId] = Field(default_factory=RequestId.absent)

    @property
    def is_notification(self) -> bool:
        return self.id.is_absent

    @property
    def parameter_list(self) -> list[Any] | dict[str, Any]:
        return self.params


class ParseResult(NamedTuple):
    records: list[RpcRequest]
    is_batch: bool


class RPCErrorObject(BaseModel):
    code: int
    message: str
    data: Any = None


class RPCResponse(BaseModel):
    jsonrpc: str = Field(default=JSONRPC_VERSION)
    result: Any = None
    error: RPCErrorObject | None = None
    id: int | str | None
