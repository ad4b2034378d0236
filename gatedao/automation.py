"""
DAO Automation

Wires a complete in-process DAO (membership NFT, role registry, governance
engine) from configuration and drives it through the usual operator flows:
mint memberships, grant roles, propose, vote, execute, and inspect members.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .clock import ManualClock, SystemClock
from .config import DAOConfig
from .constants import SECONDS_PER_DAY
from .governance import GovernanceEngine, Proposal, Role
from .governance.engine import ExecutionEffect
from .logger import get_logger
from .membership import MembershipNFT, RoleGrant, RoleRegistry

logger = get_logger(__name__)


@dataclass
class MemberData:
    """A member to onboard: one membership token plus the listed roles on it."""
    address: str
    roles: List[str] = field(default_factory=list)
    role_expiration_days: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemberData":
        return cls(
            address=data["address"],
            roles=list(data.get("roles", [])),
            role_expiration_days=data.get("roleExpirationDays"),
        )


@dataclass
class ProposalData:
    title: str
    description: str


class DAOAutomation:
    """
    Operator facade over one DAO instance.

    Every governance call goes through the engine, so role gates, voting
    windows and tallies behave exactly as they would for any other caller.
    """

    def __init__(
        self,
        config: Optional[DAOConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        on_execute: Optional[ExecutionEffect] = None,
    ):
        self.config = config or DAOConfig()
        self.config.validate()
        self.clock = clock or SystemClock()

        self.membership = MembershipNFT(
            name=self.config.membership.name,
            symbol=self.config.membership.symbol,
            max_supply=self.config.membership.max_supply,
        )
        self.roles = RoleRegistry(self.membership, clock=self.clock)
        self.engine = GovernanceEngine(
            role_oracle=self.roles,
            membership=self.membership,
            voting_period=self.config.governance.voting_period,
            quorum_percentage=self.config.governance.quorum_percentage,
            clock=self.clock,
            on_execute=on_execute,
        )
        logger.info(
            f"DAO deployed: {self.membership.symbol} at {self.membership.address} "
            f"(period={self.engine.voting_period}s, quorum={self.engine.quorum_percentage}%)"
        )

    # ── Membership ────────────────────────────────────────────────────

    def mint_membership(self, to_address: str) -> int:
        return self.membership.mint(to_address)

    def batch_mint_memberships(self, addresses: List[str]) -> List[int]:
        logger.info(f"Batch minting {len(addresses)} membership NFTs")
        return [self.mint_membership(address) for address in addresses]

    def grant_role(
        self,
        role: Union[Role, str],
        member_address: str,
        token_id: int,
        expiration_days: Optional[int] = None,
        revocable: bool = True,
    ) -> RoleGrant:
        days = expiration_days
        if days is None:
            days = self.config.membership.role_expiration_days
        expiration_date = int(self.clock()) + days * SECONDS_PER_DAY
        return self.roles.grant_role(
            Role.parse(role),
            token_id,
            member_address,
            expiration_date=expiration_date,
            revocable=revocable,
        )

    def setup_members(self, members: List[MemberData]) -> Dict[str, int]:
        """Mint one token per member and grant its roles on that token. Returns address → token id."""
        logger.info(f"Setting up {len(members)} members")
        tokens: Dict[str, int] = {}
        for member in members:
            token_id = self.mint_membership(member.address)
            for role in member.roles:
                self.grant_role(role, member.address, token_id, member.role_expiration_days)
            tokens[member.address] = token_id
        return tokens

    # ── Governance ────────────────────────────────────────────────────

    def create_proposal(self, proposer: str, proposal: ProposalData) -> int:
        return self.engine.create_proposal(proposer, proposal.title, proposal.description)

    def vote(self, voter: str, proposal_id: int, support: bool) -> int:
        return self.engine.vote(voter, proposal_id, support)

    def execute_proposal(self, executor: str, proposal_id: int) -> None:
        self.engine.execute_proposal(executor, proposal_id)

    def get_proposal(self, proposal_id: int) -> Dict[str, Any]:
        """Proposal fields plus its current state name."""
        proposal: Proposal = self.engine.get_proposal(proposal_id)
        info = proposal.to_dict()
        info["state"] = self.engine.get_proposal_state(proposal_id).label
        return info

    def get_member_info(self, address: str) -> Dict[str, Any]:
        return {
            "address": address,
            "nftBalance": self.membership.balance_of(address),
            "votingWeight": self.engine.get_voting_weight(address),
            "roles": [
                role.value for role in Role if self.engine.has_valid_role(role, address)
            ],
        }

    # ── Deployment info ───────────────────────────────────────────────

    def deployment_info(self) -> Dict[str, Any]:
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "contracts": {
                "membershipNFT": self.membership.address,
                "roleRegistry": self.roles.to_dict()["tokenAddress"],
            },
            "config": self.config.to_dict(),
            "membership": self.membership.to_dict(),
            "grants": [g.to_dict() for g in self.roles.grants()],
            "proposals": [self.get_proposal(p.id) for p in self.engine.proposals()],
        }

    def save_deployment_info(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.deployment_info(), indent=2))
        logger.info(f"Deployment info saved to {path}")
        return path


# ══════════════════════════════════════════════════════════════════════
#  SCENARIOS
# ══════════════════════════════════════════════════════════════════════

DEFAULT_MEMBERS = [
    MemberData(
        address="0x63E5a246937549b3ECcBB410AF42da54F999D172",
        roles=["ADMIN_ROLE", "PROPOSER_ROLE", "EXECUTOR_ROLE", "VOTER_ROLE"],
    ),
    MemberData(
        address="0x3F01E90459c9931B2ff9a40BF81933273e7ea209",
        roles=["PROPOSER_ROLE", "VOTER_ROLE"],
    ),
    MemberData(
        address="0x8B3ecF29f52c6C4943dbAD4f34D8b79077C238dd",
        roles=["VOTER_ROLE"],
    ),
]


class DAOScenarios:
    """Canned end-to-end flows used by the CLI."""

    def __init__(self, dao: DAOAutomation):
        self.dao = dao

    def _members_with(self, role: Role) -> List[str]:
        holders = []
        for address in self.dao.membership.to_dict()["holders"]:
            if self.dao.engine.has_valid_role(role, address):
                holders.append(address)
        return holders

    def setup_complete_dao(self, members: Optional[List[MemberData]] = None) -> List[Dict[str, Any]]:
        members = members if members is not None else DEFAULT_MEMBERS
        self.dao.setup_members(members)
        return [self.dao.get_member_info(m.address) for m in members]

    def run_governance_cycle(
        self,
        proposal: Optional[ProposalData] = None,
        support: bool = True,
    ) -> Dict[str, Any]:
        """
        Propose, let every voter vote, close the window (simulated clocks only)
        and execute if the proposal succeeded.
        """
        proposal = proposal or ProposalData(
            title="Increase Membership Limit",
            description="Proposal to increase the maximum number of DAO members from 100 to 200",
        )
        proposers = self._members_with(Role.PROPOSER)
        if not proposers:
            raise ValueError("No member holds PROPOSER_ROLE")

        proposal_id = self.dao.create_proposal(proposers[0], proposal)
        for voter in self._members_with(Role.VOTER):
            self.dao.vote(voter, proposal_id, support)

        if isinstance(self.dao.clock, ManualClock):
            self.dao.clock.advance(self.dao.engine.voting_period + 1)

        info = self.dao.get_proposal(proposal_id)
        executors = self._members_with(Role.EXECUTOR)
        if info["state"] == "Succeeded" and executors:
            self.dao.execute_proposal(executors[0], proposal_id)
            info = self.dao.get_proposal(proposal_id)
        return info

    def manage_membership(
        self,
        new_member: str = "0x1234567890123456789012345678901234567890",
        roles: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        token_id = self.dao.mint_membership(new_member)
        for role in roles or ["VOTER_ROLE"]:
            self.dao.grant_role(role, new_member, token_id)
        return self.dao.get_member_info(new_member)
