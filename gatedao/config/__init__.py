"""
GateDAO Configuration

Loads config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    DAOConfig,
    GovernanceSectionConfig,
    MembershipSectionConfig,
    NodeSectionConfig,
    load_config,
)

__all__ = [
    "DAOConfig",
    "GovernanceSectionConfig",
    "MembershipSectionConfig",
    "NodeSectionConfig",
    "load_config",
]
