"""
GateDAO Exceptions

Base exception classes shared across GateDAO packages.
"""


class GateDAOException(Exception):
    """Base exception for GateDAO."""
    pass


class ConfigurationError(GateDAOException, ValueError):
    """Invalid or unreadable configuration."""
    pass
