"""
GateDAO Membership

Reference implementations of the engine's external collaborators:
  - MembershipNFT  (nft.py)            membership units, balances, total supply
  - RoleRegistry   (role_registry.py)  time-bound, revocable role grants
"""

from .nft import (
    MaxSupplyReachedError,
    MembershipError,
    MembershipNFT,
    NotTokenOwnerError,
    TokenAlreadyMintedError,
    TokenNotFoundError,
    Transfer,
)
from .role_registry import (
    NonRevocableRoleError,
    RoleGrant,
    RoleNotGrantedError,
    RoleRegistry,
    RoleRegistryError,
)

__all__ = [
    "MaxSupplyReachedError",
    "MembershipError",
    "MembershipNFT",
    "NotTokenOwnerError",
    "TokenAlreadyMintedError",
    "TokenNotFoundError",
    "Transfer",
    "NonRevocableRoleError",
    "RoleGrant",
    "RoleNotGrantedError",
    "RoleRegistry",
    "RoleRegistryError",
]
