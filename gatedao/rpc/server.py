"""
GateDAO JSON-RPC 2.0 Server

Transport-agnostic dispatcher for the dao_* namespace:
- @rpc_method handlers collected from RPCModule namespaces
- Batch requests and notifications
- Parameter binding checked against the handler signature before dispatch
- Governance failures surfaced as server-range error codes by the modules
"""

import asyncio
import inspect
import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Union

from ..logger import get_logger

logger = get_logger(__name__)

RequestId = Union[str, int, None]
Params = Union[List, Dict, None]


class RPCErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes."""

    # Standard errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server range, one code per governance error kind
    SERVER_ERROR = -32000
    RESOURCE_NOT_FOUND = -32001
    TRANSACTION_REJECTED = -32003
    ACTION_NOT_ALLOWED = -32099


@dataclass
class RPCError(Exception):
    """Error raised by a handler and reported in the response's error member."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> dict:
        error = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


@dataclass
class RPCRequest:
    """A validated request object."""

    method: str
    params: Params = None
    id: RequestId = None

    @classmethod
    def parse(cls, data: Any) -> "RPCRequest":
        """Validate one decoded request object. Raises RPCError(INVALID_REQUEST)."""
        if not isinstance(data, dict):
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid request")
        if data.get("jsonrpc", "2.0") != "2.0":
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version")
        method = data.get("method")
        if not method or not isinstance(method, str):
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Missing method")
        return cls(method=method, params=data.get("params"), id=data.get("id"))

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass
class RPCResponse:
    """Either a result or an error for one request id."""

    id: RequestId = None
    result: Optional[Any] = None
    error: Optional[RPCError] = None

    def to_dict(self) -> dict:
        response = {"jsonrpc": "2.0", "id": self.id}
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response


RPCMethod = Callable[..., Any]


class RPCModule:
    """
    A namespace of RPC handlers.

    Public coroutine methods decorated with @rpc_method are exposed as
    ``<namespace>_<name>``.
    """

    namespace: str = ""

    def __init__(self, context: Any = None):
        self.context = context

    def get_methods(self) -> Dict[str, RPCMethod]:
        methods = {}
        for name in dir(self):
            if name.startswith("_"):
                continue
            attr = getattr(self, name)
            if callable(attr) and getattr(attr, "__rpc_method__", False):
                methods[f"{self.namespace}_{name}" if self.namespace else name] = attr
        return methods


def rpc_method(func: RPCMethod) -> RPCMethod:
    """
    Mark a module coroutine as an RPC endpoint.

    Usage:
        @rpc_method
        async def proposalCount(self) -> int:
            return self.context.engine.proposal_count
    """
    func.__rpc_method__ = True
    return func


def _bind_params(handler: RPCMethod, params: Params) -> inspect.BoundArguments:
    signature = inspect.signature(handler)
    if params is not None and not isinstance(params, (list, dict)):
        raise RPCError(RPCErrorCode.INVALID_PARAMS, "Invalid params type")
    try:
        if isinstance(params, dict):
            return signature.bind(**params)
        return signature.bind(*(params or []))
    except TypeError as e:
        raise RPCError(RPCErrorCode.INVALID_PARAMS, f"Invalid params: {e}") from e


class RPCServer:
    """
    Method table plus request dispatch.

    The HTTP node feeds raw request bodies into handle_request and sends
    back whatever JSON it returns.
    """

    def __init__(self):
        self._methods: Dict[str, RPCMethod] = {}

    def register_module(self, module: RPCModule):
        methods = module.get_methods()
        clashes = sorted(set(methods) & set(self._methods))
        if clashes:
            raise ValueError(f"RPC methods already registered: {', '.join(clashes)}")
        self._methods.update(methods)
        logger.info(f"Registered RPC module: {module.namespace} ({len(methods)} methods)")

    def get_methods(self) -> List[str]:
        return sorted(self._methods)

    async def handle_request(self, data: Union[str, bytes, dict, list]) -> Optional[str]:
        """
        Handle a single or batch request.

        Args:
            data: Request body (JSON text or an already-decoded object)

        Returns:
            JSON response text, or None when nothing needs an answer
            (every request was a notification)
        """
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                error = RPCError(RPCErrorCode.PARSE_ERROR, f"Parse error: {e}")
                return json.dumps(RPCResponse(error=error).to_dict())

        if not isinstance(data, list):
            response = await self._dispatch(data)
            return None if response is None else json.dumps(response.to_dict())

        if not data:
            error = RPCError(RPCErrorCode.INVALID_REQUEST, "Empty batch")
            return json.dumps(RPCResponse(error=error).to_dict())

        responses = await asyncio.gather(*[self._dispatch(item) for item in data])
        answered = [r.to_dict() for r in responses if r is not None]
        return json.dumps(answered) if answered else None

    async def _dispatch(self, data: Any) -> Optional[RPCResponse]:
        try:
            request = RPCRequest.parse(data)
        except RPCError as e:
            # Malformed requests are always answered
            request_id = data.get("id") if isinstance(data, dict) else None
            return RPCResponse(id=request_id, error=e)

        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise RPCError(RPCErrorCode.METHOD_NOT_FOUND, f"Method not found: {request.method}")
            bound = _bind_params(handler, request.params)
            response = RPCResponse(id=request.id, result=await handler(*bound.args, **bound.kwargs))
        except RPCError as e:
            response = RPCResponse(id=request.id, error=e)
        except Exception as e:
            logger.exception(f"Error handling RPC method {request.method}")
            response = RPCResponse(id=request.id, error=RPCError(RPCErrorCode.INTERNAL_ERROR, str(e)))

        return None if request.is_notification else response
