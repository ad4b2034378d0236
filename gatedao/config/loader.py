"""
GateDAO TOML Configuration Loader

Loads config.toml at startup with environment variable overrides.
Each [section] is a dataclass with from_dict / apply_env.

Environment variable mapping:
    [node] host                    → GATEDAO_NODE_HOST
    [node] port                    → GATEDAO_NODE_PORT
    [node] log_level               → GATEDAO_LOG_LEVEL
    [governance] voting_period     → GATEDAO_VOTING_PERIOD
    [governance] quorum_percentage → GATEDAO_QUORUM_PERCENTAGE
    [membership] max_supply        → GATEDAO_MAX_SUPPLY
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from ..constants import (
    DEFAULT_ROLE_EXPIRATION_DAYS,
    GATEDAO_NODE_HOST,
    GATEDAO_NODE_PORT,
    GATEDAO_QUORUM_PERCENTAGE,
    GATEDAO_VOTING_PERIOD,
    GOVERNANCE_QUORUM_MAX,
    GOVERNANCE_QUORUM_MIN,
    LOG_LEVEL,
    MEMBERSHIP_MAX_SUPPLY,
    MEMBERSHIP_NFT_NAME,
    MEMBERSHIP_NFT_SYMBOL,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_env(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer (got {v!r})") from None


def _int_value(data: Dict[str, Any], key: str, default: int, section: str) -> int:
    v = data.get(key, default)
    if isinstance(v, bool):
        raise ConfigurationError(f"[{section}] {key} must be an integer (got {v!r})")
    try:
        return int(v)
    except (TypeError, ValueError):
        raise ConfigurationError(f"[{section}] {key} must be an integer (got {v!r})") from None


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class NodeSectionConfig:
    """[node] section."""
    host: str = str(GATEDAO_NODE_HOST)
    port: int = int(GATEDAO_NODE_PORT)
    log_level: str = str(LOG_LEVEL)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeSectionConfig":
        return cls(
            host=data.get("host", str(GATEDAO_NODE_HOST)),
            port=_int_value(data, "port", int(GATEDAO_NODE_PORT), "node"),
            log_level=str(data.get("log_level", str(LOG_LEVEL))).upper(),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("GATEDAO_NODE_HOST"):
            self.host = v
        if (v := _int_env("GATEDAO_NODE_PORT")) is not None:
            self.port = v
        if v := os.environ.get("GATEDAO_LOG_LEVEL"):
            self.log_level = v.upper()


@dataclass
class GovernanceSectionConfig:
    """[governance] section."""
    voting_period: int = int(GATEDAO_VOTING_PERIOD)
    quorum_percentage: int = int(GATEDAO_QUORUM_PERCENTAGE)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSectionConfig":
        return cls(
            voting_period=_int_value(data, "voting_period", int(GATEDAO_VOTING_PERIOD), "governance"),
            quorum_percentage=_int_value(
                data, "quorum_percentage", int(GATEDAO_QUORUM_PERCENTAGE), "governance"
            ),
        )

    def apply_env(self) -> None:
        if (v := _int_env("GATEDAO_VOTING_PERIOD")) is not None:
            self.voting_period = v
        if (v := _int_env("GATEDAO_QUORUM_PERCENTAGE")) is not None:
            self.quorum_percentage = v


@dataclass
class MembershipSectionConfig:
    """[membership] section."""
    name: str = MEMBERSHIP_NFT_NAME
    symbol: str = MEMBERSHIP_NFT_SYMBOL
    max_supply: int = MEMBERSHIP_MAX_SUPPLY
    role_expiration_days: int = DEFAULT_ROLE_EXPIRATION_DAYS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MembershipSectionConfig":
        return cls(
            name=data.get("name", MEMBERSHIP_NFT_NAME),
            symbol=data.get("symbol", MEMBERSHIP_NFT_SYMBOL),
            max_supply=_int_value(data, "max_supply", MEMBERSHIP_MAX_SUPPLY, "membership"),
            role_expiration_days=_int_value(
                data, "role_expiration_days", DEFAULT_ROLE_EXPIRATION_DAYS, "membership"
            ),
        )

    def apply_env(self) -> None:
        if (v := _int_env("GATEDAO_MAX_SUPPLY")) is not None:
            self.max_supply = v


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class DAOConfig:
    """Complete configuration for one DAO instance."""
    node: NodeSectionConfig = field(default_factory=NodeSectionConfig)
    governance: GovernanceSectionConfig = field(default_factory=GovernanceSectionConfig)
    membership: MembershipSectionConfig = field(default_factory=MembershipSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DAOConfig":
        """Create DAOConfig from a parsed TOML dict."""
        return cls(
            node=NodeSectionConfig.from_dict(data.get("node", {})),
            governance=GovernanceSectionConfig.from_dict(data.get("governance", {})),
            membership=MembershipSectionConfig.from_dict(data.get("membership", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DAOConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.node.apply_env()
        self.governance.apply_env()
        self.membership.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError (a ValueError) on invalid config
        """
        if self.governance.voting_period <= 0:
            raise ConfigurationError("voting_period must be > 0")
        if not GOVERNANCE_QUORUM_MIN <= self.governance.quorum_percentage <= GOVERNANCE_QUORUM_MAX:
            raise ConfigurationError(
                f"quorum_percentage must be within {GOVERNANCE_QUORUM_MIN}..{GOVERNANCE_QUORUM_MAX}"
            )
        if self.membership.max_supply < 0:
            raise ConfigurationError("max_supply must be >= 0")
        if self.membership.role_expiration_days <= 0:
            raise ConfigurationError("role_expiration_days must be > 0")
        if self.node.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.node.log_level}")
        if not 0 < self.node.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.node.port}")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node": {
                "host": self.node.host,
                "port": self.node.port,
                "log_level": self.node.log_level,
            },
            "governance": {
                "voting_period": self.governance.voting_period,
                "quorum_percentage": self.governance.quorum_percentage,
            },
            "membership": {
                "name": self.membership.name,
                "symbol": self.membership.symbol,
                "max_supply": self.membership.max_supply,
                "role_expiration_days": self.membership.role_expiration_days,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> DAOConfig:
    """
    Load and validate DAO configuration.

    Resolution order:
        1. Explicit *path* argument
        2. GATEDAO_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("GATEDAO_CONFIG", "config.toml")

    cfg = DAOConfig.from_file(path)
    cfg.validate()
    return cfg
