"""
GateDAO RPC Modules
"""

from .dao import DAOModule

__all__ = [
    "DAOModule",
]
