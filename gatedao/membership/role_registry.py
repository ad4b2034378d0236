"""
Membership Role Registry (ERC-7432 style)

Roles are granted on membership token ids, to a recipient, until an
expiration date. A principal holds a role while it owns a token whose grant
for that role names it as recipient and has neither expired nor been revoked.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..clock import SystemClock
from ..exceptions import GateDAOException
from ..governance.roles import CapabilityOracle, Role
from ..logger import get_logger
from .nft import MembershipNFT, TokenNotFoundError

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class RoleRegistryError(GateDAOException):
    """Base role registry exception."""


class RoleNotGrantedError(RoleRegistryError):
    """No grant exists for (role, token id)."""


class NonRevocableRoleError(RoleRegistryError):
    """Grant is not revocable by this caller."""


# ══════════════════════════════════════════════════════════════════════
#  GRANT
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoleGrant:
    """
    A role granted on one membership token.

    Fields:
        role:             Granted role
        token_address:    Membership collection address
        token_id:         Token the grant is attached to
        recipient:        Principal the role is granted to
        expiration_date:  Unix seconds; None never expires
        revocable:        Whether the grantor may revoke before expiry
        grantor:          Who issued the grant (informational)
        data:             Opaque payload carried with the grant
    """
    role: Role
    token_address: str
    token_id: int
    recipient: str
    expiration_date: Optional[int] = None
    revocable: bool = True
    grantor: Optional[str] = None
    data: bytes = b""

    def is_active(self, now: int) -> bool:
        return self.expiration_date is None or now < self.expiration_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "roleId": self.role.role_id_hex,
            "tokenAddress": self.token_address,
            "tokenId": self.token_id,
            "recipient": self.recipient,
            "expirationDate": self.expiration_date,
            "revocable": self.revocable,
            "grantor": self.grantor,
            "data": "0x" + self.data.hex(),
        }


# ══════════════════════════════════════════════════════════════════════
#  REGISTRY
# ══════════════════════════════════════════════════════════════════════

class RoleRegistry(CapabilityOracle):
    """Capability oracle backed by per-token role grants."""

    def __init__(self, membership: MembershipNFT, clock: Optional[Callable[[], int]] = None):
        self._membership = membership
        self._clock = clock or SystemClock()
        self._grants: Dict[Tuple[int, Role], RoleGrant] = {}
        self._lock = threading.RLock()

    @property
    def membership(self) -> MembershipNFT:
        return self._membership

    def now(self) -> int:
        return int(self._clock())

    # ── Grant / revoke ────────────────────────────────────────────────

    def grant_role(
        self,
        role: Role,
        token_id: int,
        recipient: str,
        expiration_date: Optional[int] = None,
        revocable: bool = True,
        data: bytes = b"",
        grantor: Optional[str] = None,
    ) -> RoleGrant:
        """Grant *role* on *token_id* to *recipient*, replacing any previous grant."""
        role = Role.parse(role)
        if not recipient:
            raise RoleRegistryError("Recipient is required")
        if not self._membership.exists(token_id):
            raise TokenNotFoundError(f"Token #{token_id} does not exist")
        now = self.now()
        if expiration_date is not None and expiration_date <= now:
            raise RoleRegistryError(
                f"Expiration date {expiration_date} is not in the future (now={now})"
            )

        grant = RoleGrant(
            role=role,
            token_address=self._membership.address,
            token_id=token_id,
            recipient=recipient,
            expiration_date=expiration_date,
            revocable=revocable,
            grantor=grantor,
            data=data,
        )
        with self._lock:
            self._grants[(token_id, role)] = grant

        logger.info(
            f"{role.value} granted on token #{token_id} to {recipient} "
            f"(expires={expiration_date}, revocable={revocable})"
        )
        return grant

    def revoke_role(self, role: Role, token_id: int, revoker: Optional[str] = None) -> RoleGrant:
        """
        Remove a grant. Non-revocable grants can only be given up by their recipient.
        """
        role = Role.parse(role)
        with self._lock:
            grant = self._grants.get((token_id, role))
            if grant is None:
                raise RoleNotGrantedError(f"{role.value} not granted on token #{token_id}")
            if not grant.revocable and revoker != grant.recipient:
                raise NonRevocableRoleError(
                    f"{role.value} on token #{token_id} is not revocable"
                )
            del self._grants[(token_id, role)]

        logger.info(f"{role.value} revoked on token #{token_id} (recipient={grant.recipient})")
        return grant

    # ── Queries ───────────────────────────────────────────────────────

    def get_grant(self, role: Role, token_id: int) -> Optional[RoleGrant]:
        return self._grants.get((token_id, Role.parse(role)))

    def recipient_of(self, role: Role, token_id: int) -> Optional[str]:
        grant = self.get_grant(role, token_id)
        return grant.recipient if grant else None

    def role_expiration_date(self, role: Role, token_id: int) -> Optional[int]:
        grant = self.get_grant(role, token_id)
        if grant is None:
            raise RoleNotGrantedError(f"{Role.parse(role).value} not granted on token #{token_id}")
        return grant.expiration_date

    def has_valid_role(self, role: Role, principal: str) -> bool:
        role = Role.parse(role)
        now = self.now()
        for token_id in self._membership.tokens_of(principal):
            grant = self._grants.get((token_id, role))
            if grant and grant.recipient == principal and grant.is_active(now):
                return True
        return False

    def roles_of(self, principal: str) -> List[Role]:
        return [role for role in Role if self.has_valid_role(role, principal)]

    def grants(self) -> List[RoleGrant]:
        with self._lock:
            return list(self._grants.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenAddress": self._membership.address,
            "grants": [g.to_dict() for g in self.grants()],
        }

    def __repr__(self) -> str:
        return f"<RoleRegistry grants={len(self._grants)}>"
