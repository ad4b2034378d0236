"""
Membership NFT

An in-process non-fungible membership token. Each token id is one
membership unit: a holder's balance is its vote weight and the number of
minted, unburned tokens is the quorum denominator.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from eth_hash.auto import keccak

from ..constants import MEMBERSHIP_MAX_SUPPLY, MEMBERSHIP_NFT_NAME, MEMBERSHIP_NFT_SYMBOL
from ..exceptions import GateDAOException
from ..governance.roles import MembershipRegistry
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class MembershipError(GateDAOException):
    """Base membership exception."""


class TokenNotFoundError(MembershipError):
    """Token id was never minted or has been burned."""


class TokenAlreadyMintedError(MembershipError):
    """Token id is already owned."""


class NotTokenOwnerError(MembershipError):
    """Caller does not own the token."""


class MaxSupplyReachedError(MembershipError):
    """Minting would exceed the supply cap."""


# ══════════════════════════════════════════════════════════════════════
#  TRANSFER RECORD
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Transfer:
    """Mint (sender=None), transfer, or burn (recipient=None)."""
    token_id: int
    sender: Optional[str]
    recipient: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "tokenId": self.token_id,
            "from": self.sender,
            "to": self.recipient,
        }


# ══════════════════════════════════════════════════════════════════════
#  MEMBERSHIP NFT
# ══════════════════════════════════════════════════════════════════════

@dataclass
class MembershipNFT(MembershipRegistry):
    """
    ERC-721–style membership registry.

    Fields:
        name:        Collection name
        symbol:      Collection symbol
        max_supply:  Cap on outstanding tokens (0 = uncapped)
    """
    name: str = MEMBERSHIP_NFT_NAME
    symbol: str = MEMBERSHIP_NFT_SYMBOL
    max_supply: int = MEMBERSHIP_MAX_SUPPLY
    _owners: Dict[int, str] = field(default_factory=dict, repr=False)
    _holdings: Dict[str, Set[int]] = field(default_factory=dict, repr=False)
    _next_token_id: int = field(default=0, repr=False)
    _transfers: List[Transfer] = field(default_factory=list, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def __post_init__(self):
        if not self.name:
            raise MembershipError("Collection name cannot be empty")
        if not self.symbol:
            raise MembershipError("Collection symbol cannot be empty")
        if self.max_supply < 0:
            raise MembershipError(f"max_supply cannot be negative ({self.max_supply})")

    # ── Identity ──────────────────────────────────────────────────────

    @property
    def address(self) -> str:
        """Deterministic collection address, used as the ERC-7432 token address."""
        digest = keccak(f"{self.name}:{self.symbol}".encode())
        return "0x" + digest[-20:].hex()

    # ── MembershipRegistry ────────────────────────────────────────────

    def balance_of(self, principal: str) -> int:
        return len(self._holdings.get(principal, ()))

    def total_supply(self) -> int:
        return len(self._owners)

    # ── Queries ───────────────────────────────────────────────────────

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise TokenNotFoundError(f"Token #{token_id} does not exist")
        return owner

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def tokens_of(self, principal: str) -> List[int]:
        with self._lock:
            return sorted(self._holdings.get(principal, ()))

    @property
    def transfers(self) -> List[Transfer]:
        return list(self._transfers)

    # ── Mutations ─────────────────────────────────────────────────────

    def mint(self, to: str, token_id: Optional[int] = None) -> int:
        """
        Mint a membership token to *to*.

        Without *token_id* the next free sequential id is used.
        """
        if not to:
            raise MembershipError("Cannot mint to an empty address")
        with self._lock:
            if self.max_supply and self.total_supply() >= self.max_supply:
                raise MaxSupplyReachedError(
                    f"{self.symbol}: max supply {self.max_supply} reached"
                )
            if token_id is None:
                while self._next_token_id in self._owners:
                    self._next_token_id += 1
                token_id = self._next_token_id
            if token_id < 0:
                raise MembershipError(f"Invalid token id {token_id}")
            if token_id in self._owners:
                raise TokenAlreadyMintedError(f"Token #{token_id} already minted")

            self._owners[token_id] = to
            self._holdings.setdefault(to, set()).add(token_id)
            self._transfers.append(Transfer(token_id, None, to))

        logger.info(f"{self.symbol} #{token_id} minted to {to}")
        return token_id

    def transfer(self, sender: str, recipient: str, token_id: int) -> None:
        if not recipient:
            raise MembershipError("Cannot transfer to an empty address")
        with self._lock:
            owner = self.owner_of(token_id)
            if owner != sender:
                raise NotTokenOwnerError(f"{sender} does not own token #{token_id}")
            if sender == recipient:
                return
            self._holdings[sender].discard(token_id)
            if not self._holdings[sender]:
                del self._holdings[sender]
            self._owners[token_id] = recipient
            self._holdings.setdefault(recipient, set()).add(token_id)
            self._transfers.append(Transfer(token_id, sender, recipient))

        logger.info(f"{self.symbol} #{token_id}: {sender} → {recipient}")

    def burn(self, owner: str, token_id: int) -> None:
        with self._lock:
            if self.owner_of(token_id) != owner:
                raise NotTokenOwnerError(f"{owner} does not own token #{token_id}")
            del self._owners[token_id]
            self._holdings[owner].discard(token_id)
            if not self._holdings[owner]:
                del self._holdings[owner]
            self._transfers.append(Transfer(token_id, owner, None))

        logger.info(f"{self.symbol} #{token_id} burned by {owner}")

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "maxSupply": self.max_supply,
            "totalSupply": self.total_supply(),
            "holders": {
                holder: sorted(tokens) for holder, tokens in self._holdings.items()
            },
        }

    def __repr__(self) -> str:
        return f"<MembershipNFT {self.symbol} supply={self.total_supply()}/{self.max_supply}>"
