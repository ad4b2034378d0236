"""
GateDAO JSON-RPC

JSON-RPC 2.0 server plus the dao_* governance namespace.
"""

from .server import (
    RPCError,
    RPCErrorCode,
    RPCModule,
    RPCRequest,
    RPCResponse,
    RPCServer,
    rpc_method,
)
from .modules import DAOModule

__all__ = [
    "RPCError",
    "RPCErrorCode",
    "RPCModule",
    "RPCRequest",
    "RPCResponse",
    "RPCServer",
    "rpc_method",
    "DAOModule",
]
