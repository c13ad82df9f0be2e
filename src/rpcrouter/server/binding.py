# rpcrouter/server/binding.py
"""
Bind opaque JSON params to a registered method's parameters.

The parser stores params exactly as JSON encodes them. Conversion to
native types happens here, against the parameter metadata collected at
registration: values are checked strictly against their type hints, and
ISO-8601 strings are turned into ``datetime``, ``date`` or ``time`` only
when the parameter asks for one of those types.
"""
from datetime import date, datetime, time
from functools import lru_cache
from typing import Any, Union, get_args, get_origin
import inspect
import re
import types

from pydantic import TypeAdapter, ValidationError

from rpcrouter.errors import INVALID_PARAMS
from rpcrouter.server.descriptors import MethodDescriptor

TEMPORAL_TYPES = (datetime, date, time)

# pydantic reads these as unix timestamps, which are not ISO-8601
_NUMBER = re.compile(r"[+-]?\d+(\.\d*)?")


def bind_params(method: MethodDescriptor, params: list | dict | None) -> tuple[list, dict]:
    """Return ``(args, kwargs)`` for calling ``method`` with ``params``.

    Raises INVALID_PARAMS if the params do not fit the signature or a
    value does not validate against its parameter's type.
    """
    if params is None:
        params = []
    sig = method.signature

    try:
        if isinstance(params, list):
            bound = sig.bind(*params)
        elif isinstance(params, dict):
            bound = sig.bind(**params)
        else:
            raise INVALID_PARAMS({"reason": "params must be list or dict"})
    except TypeError as e:
        raise INVALID_PARAMS({"reason": str(e)})

    for name, value in bound.arguments.items():
        descriptor = method.parameter(name)
        if descriptor is None or descriptor.type is None:
            continue
        bound.arguments[name] = _convert(name, value, descriptor.type)

    return list(bound.args), dict(bound.kwargs)


def _convert(name: str, value: Any, tp: Any) -> Any:
    try:
        return _adapter(tp).validate_python(value, strict=True)
    except ValidationError as e:
        error = e
    # only ISO-8601 strings may become temporal values
    if isinstance(value, str) and not _NUMBER.fullmatch(value.strip()):
        for member in _temporal_members(tp):
            try:
                return _adapter(member).validate_python(value, strict=False)
            except ValidationError:
                continue
    errors = error.errors(include_url=False)
    detail = errors[0]["msg"] if errors else str(error)
    raise INVALID_PARAMS({"reason": f"param '{name}': {detail}", "param": name})


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def _temporal_members(tp: Any) -> list:
    if inspect.isclass(tp) and get_origin(tp) is None and issubclass(tp, TEMPORAL_TYPES):
        return [tp]
    # Optional[datetime] and friends
    if get_origin(tp) in (Union, types.UnionType):
        return [member for arg in get_args(tp) for member in _temporal_members(arg)]
    return []
