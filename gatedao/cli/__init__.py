"""
GateDAO CLI Tools
"""

from .dao import cli

__all__ = ["cli"]
