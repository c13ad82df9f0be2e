# rpcrouter/server/descriptors.py
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Type
import inspect


# ──────────────────────────────────────────────────────────────
# ParameterDescriptor – one parameter of a registered method
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    """Parameter name, as declared on the function."""

    type: Optional[Type] = None
    """Type hint, or None when the parameter is unannotated."""

    annotation: str | None = None
    """Free-text description supplied at registration."""

    default: Any = inspect.Parameter.empty
    """Default value, ``inspect.Parameter.empty`` when required."""

    @property
    def required(self) -> bool:
        return self.default is inspect.Parameter.empty

    def to_json(self) -> dict:
        return {
            "name": self.name,
            "type": _type_name(self.type),
            "annotation": self.annotation,
            "required": self.required,
        }


# ──────────────────────────────────────────────────────────────
# MethodDescriptor – Holds function + metadata
# ──────────────────────────────────────────────────────────────
@dataclass
class MethodDescriptor:
    """
    Wraps an RPC method with the metadata needed for lookup, binding and dispatch.

    This class is callable (behaves like the original function) and stores:
    - Original function
    - Name, annotation
    - Parameter descriptors (from the signature and type hints)
    - Return type
    """

    fn: Callable[..., Any]
    """Original function to be called."""

    name: str
    """RPC method name (as registered)."""

    annotation: str | None = None
    """Human-readable description of the method."""

    parameters: tuple[ParameterDescriptor, ...] = ()
    """Parameters in declaration order."""

    return_type: Optional[Type] = None
    """Return type of the function (from type hints)."""

    # ───── Make it callable (behaves like fn) ─────
    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Call the original function."""
        return self.fn(*args, **kwargs)

    # ───── Helper: Is async? ─────
    @property
    def is_async(self) -> bool:
        """Check if the wrapped function is async."""
        return inspect.iscoroutinefunction(self.fn)

    # ───── Helper: Get signature ─────
    @property
    def signature(self) -> inspect.Signature:
        """Return the function signature."""
        return inspect.signature(self.fn)

    def parameter(self, name: str) -> ParameterDescriptor | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    # ───── To JSON (for introspection) ─────
    def to_json(self) -> dict:
        """Return method info as JSON-serializable dict."""
        return {
            "name": self.name,
            "annotation": self.annotation,
            "parameters": [p.to_json() for p in self.parameters],
            "return_type": _type_name(self.return_type),
            "is_async": self.is_async,
        }


# ──────────────────────────────────────────────────────────────
# RouteInfo – methods grouped under one path
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RouteInfo:
    route: str | None
    """Canonical path string, or None for methods not bound to any path."""

    annotation: str | None = None
    methods: tuple[MethodDescriptor, ...] = field(default_factory=tuple)

    def to_json(self) -> dict:
        return {
            "route": self.route,
            "annotation": self.annotation,
            "methods": [m.to_json() for m in self.methods],
        }


def _type_name(tp: Optional[Type]) -> str | None:
    if tp is None:
        return None
    return getattr(tp, "__name__", None) or str(tp)
