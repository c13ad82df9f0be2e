# rpcrouter/server/registry.py
from __future__ import annotations

import inspect
import json
import logging
import sys
from enum import Enum
from typing import Any, Callable, Dict, Mapping, get_type_hints

import anyio
import uvicorn
from fastapi import FastAPI

from rpcrouter.config import RouterSettings, coerce_settings
from rpcrouter.errors import METHOD_NOT_FOUND
from rpcrouter.path import RpcPath
from rpcrouter.server.descriptors import MethodDescriptor, ParameterDescriptor, RouteInfo

_BINDABLE_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


# ──────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────
def _configure_logging(level: str | int = "INFO"):
    logger = logging.getLogger("rpcrouter")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)


# ──────────────────────────────────────────────────────────────
# Transport Enum
# ──────────────────────────────────────────────────────────────
class Transport(str, Enum):
    STDIO = "stdio"
    HTTP = "http"

    def __str__(self):
        return self.value


def _as_path(path: RpcPath | str | None) -> RpcPath:
    if isinstance(path, RpcPath):
        return path
    return RpcPath.parse(path)


# ──────────────────────────────────────────────────────────────
# Main Route Table Class
# ──────────────────────────────────────────────────────────────
class RouteTable:
    """Maps ``(RpcPath, method name)`` to a :class:`MethodDescriptor`.

    Methods registered without a path (or under the root path) are the
    base methods. The table is filled once at startup and only read
    afterwards.
    """

    def __init__(
        self,
        name: str | None = None,
        settings: RouterSettings | dict | None = None,
    ):
        self._settings: RouterSettings = coerce_settings(settings)
        self._name = name or "RouteTable"
        self._base_methods: Dict[str, MethodDescriptor] = {}
        self._routes: Dict[RpcPath, Dict[str, MethodDescriptor]] = {}
        self._route_annotations: Dict[RpcPath, str] = {}
        self._logger = logging.getLogger("rpcrouter.registry")
        self._app: FastAPI | None = None

        _configure_logging(self._settings.log_level)
        self._logger.info(f"Initialized {self._name}")

    # ───── Properties ─────
    @property
    def name(self) -> str:
        return self._name

    @property
    def settings(self) -> RouterSettings:
        return self._settings

    @property
    def base_methods(self) -> tuple[MethodDescriptor, ...]:
        return tuple(self._base_methods.values())

    @property
    def routes(self) -> tuple[RpcPath, ...]:
        return tuple(self._routes)

    # ───── Register Decorator ─────
    def register(
        self,
        name: str | None = None,
        *,
        path: RpcPath | str | None = None,
        annotation: str | None = None,
        param_annotations: Mapping[str, str] | None = None,
    ):
        """Register a function as an RPC method.

        ``path`` binds the method to a route; without it the method is a
        base method. ``annotation`` and ``param_annotations`` are kept as
        free-text metadata on the descriptor.
        """
        route = _as_path(path)

        def decorator(fn: Callable) -> Callable:
            descriptor = _describe(fn, name or fn.__name__, annotation, param_annotations)
            methods = self._methods_for(route, create=True)

            if descriptor.name in methods:
                if not self._settings.warn_on_duplicate:
                    raise ValueError(f"Method '{descriptor.name}' already registered at {route}")
                self._logger.warning(f"Replacing method '{descriptor.name}' at {route}")

            methods[descriptor.name] = descriptor
            self._logger.debug(f"Registered: {descriptor.name} at {route}")
            return fn
        return decorator

    def annotate_route(self, path: RpcPath | str, annotation: str) -> None:
        route = _as_path(path)
        if route.is_root:
            raise ValueError("base methods have no route annotation")
        self._methods_for(route, create=True)
        self._route_annotations[route] = annotation

    # ───── Lookup ─────
    def lookup(self, path: RpcPath | str | None, method_name: str) -> MethodDescriptor | None:
        methods = self._methods_for(_as_path(path))
        if methods is None:
            return None
        return methods.get(method_name)

    def get(self, path: RpcPath | str | None, method_name: str) -> MethodDescriptor:
        descriptor = self.lookup(path, method_name)
        if descriptor is None:
            route = _as_path(path)
            self._logger.error(f"Method not found: {method_name} at {route}")
            raise METHOD_NOT_FOUND({"method": method_name, "path": str(route)})
        return descriptor

    def _methods_for(self, route: RpcPath, create: bool = False) -> Dict[str, MethodDescriptor] | None:
        if route.is_root:
            return self._base_methods
        if create:
            return self._routes.setdefault(route, {})
        return self._routes.get(route)

    # ───── Introspection ─────
    def describe(self) -> list[RouteInfo]:
        infos = [
            RouteInfo(
                route=str(route),
                annotation=self._route_annotations.get(route),
                methods=tuple(methods.values()),
            )
            for route, methods in self._routes.items()
        ]
        infos.append(RouteInfo(route=None, annotation=None, methods=self.base_methods))
        return infos

    def list_methods(self) -> list[dict]:
        return [info.to_json() for info in self.describe()]

    # ───── FastAPI App ─────
    @property
    def app(self) -> FastAPI:
        self._setup_fastapi_app()
        return self._app

    def _setup_fastapi_app(self):
        if self._app is not None:
            return
        from rpcrouter.transport.http import create_app

        self._app = create_app(self, mount_path=self._settings.mount_path, title=self._name)

    # ───── RUN METHOD ─────
    def run(
        self,
        transport: Transport | str = Transport.HTTP,
        *,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        """Serve the table over the selected transport."""
        if isinstance(transport, str):
            try:
                transport = Transport(transport)
            except ValueError:
                raise ValueError(f"Invalid transport: {transport}. Choose from: {', '.join(t.value for t in Transport)}")

        host = host or self._settings.host
        port = port or self._settings.port

        match transport:
            case Transport.STDIO:
                anyio.run(self._run_stdio_async)
            case Transport.HTTP:
                anyio.run(self._run_http_async, host, port)

    # ───── Transport Runners ─────
    async def _run_stdio_async(self):
        from rpcrouter.server.dispatcher import RPCDispatcher

        dispatcher = RPCDispatcher(self)
        self._logger.info("Running in STDIO mode")
        while True:
            line = await anyio.to_thread.run_sync(sys.stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            try:
                response = await dispatcher.handle_text(RpcPath.root(), line)
                if response is not None:
                    sys.stdout.write(json.dumps(response) + "\n")
                    sys.stdout.flush()
            except Exception as e:
                self._logger.error(f"STDIO error: {e}")

    async def _run_http_async(self, host: str, port: int):
        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=self._settings.log_level.lower() if isinstance(self._settings.log_level, str) else "info",
        )
        server = uvicorn.Server(config)
        self._logger.info(f"Starting HTTP server at http://{host}:{port}{self._settings.mount_path}")
        await server.serve()


def _describe(
    fn: Callable,
    name: str,
    annotation: str | None,
    param_annotations: Mapping[str, str] | None,
) -> MethodDescriptor:
    hints: Dict[str, Any] = get_type_hints(fn)
    return_hint = hints.pop("return", None)
    signature = inspect.signature(fn)
    param_annotations = dict(param_annotations or {})

    unknown = set(param_annotations) - set(signature.parameters)
    if unknown:
        raise ValueError(f"Annotations for unknown parameters of '{name}': {', '.join(sorted(unknown))}")

    parameters = tuple(
        ParameterDescriptor(
            name=param.name,
            type=hints.get(param.name),
            annotation=param_annotations.get(param.name),
            default=param.default,
        )
        for param in signature.parameters.values()
        if param.kind in _BINDABLE_KINDS
    )
    return MethodDescriptor(
        fn=fn,
        name=name,
        annotation=annotation,
        parameters=parameters,
        return_type=return_hint,
    )
