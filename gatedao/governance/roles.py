"""
Role vocabulary and collaborator interfaces.

The engine depends on two external collaborators, both injected:

  - CapabilityOracle:   "does principal P currently hold role R?"
  - MembershipRegistry: per-principal membership units and total supply

Neither answer is ever cached by the engine.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from eth_hash.auto import keccak

from ..constants import ROLE_ADMIN, ROLE_EXECUTOR, ROLE_PROPOSER, ROLE_VOTER


class Role(Enum):
    """Closed set of capability roles. Values are the canonical role names."""
    VOTER = ROLE_VOTER
    PROPOSER = ROLE_PROPOSER
    EXECUTOR = ROLE_EXECUTOR
    ADMIN = ROLE_ADMIN

    @property
    def role_id(self) -> bytes:
        """32-byte keccak256 of the role name (ERC-7432 role identifier)."""
        return keccak(self.value.encode())

    @property
    def role_id_hex(self) -> str:
        return "0x" + self.role_id.hex()

    @classmethod
    def parse(cls, value: Union["Role", str, bytes]) -> "Role":
        """
        Resolve a role from a Role, its name ("VOTER"), its canonical
        value ("VOTER_ROLE"), or its role id (bytes or 0x-hex).
        """
        if isinstance(value, Role):
            return value
        if isinstance(value, bytes):
            for role in cls:
                if role.role_id == value:
                    return role
            raise ValueError(f"Unknown role id: 0x{value.hex()}")
        if not isinstance(value, str):
            raise ValueError(f"Unknown role: {value!r}")
        text = value.strip()
        upper = text.upper()
        for role in cls:
            if upper in (role.name, role.value):
                return role
            if text.lower() == role.role_id_hex:
                return role
        raise ValueError(f"Unknown role: {value}")


class CapabilityOracle(ABC):
    """Answers role questions as of the current time (expiry and revocation applied)."""

    @abstractmethod
    def has_valid_role(self, role: Role, principal: str) -> bool:
        ...


class MembershipRegistry(ABC):
    """Source of vote weight and of the quorum denominator."""

    @abstractmethod
    def balance_of(self, principal: str) -> int:
        ...

    @abstractmethod
    def total_supply(self) -> int:
        ...
