"""
Token-Gated Governance Engine

Implements the proposal lifecycle and vote tally:
  - createProposal / vote / executeProposal, each gated by a role that is
    re-checked against the CapabilityOracle on every call
  - point-in-time vote weight read from the MembershipRegistry
  - quorum: (yes + no) * 100 >= quorumPercentage * totalSupply
  - majority: yes > no
  - at most one vote per principal per proposal, at most one execution
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Set

from ..clock import SystemClock
from ..constants import (
    GOVERNANCE_QUORUM_MAX,
    GOVERNANCE_QUORUM_MIN,
    GOVERNANCE_QUORUM_PERCENTAGE,
    GOVERNANCE_VOTING_PERIOD_SECONDS,
)
from ..logger import get_logger
from .errors import (
    AlreadyVotedError,
    InsufficientRolePermissionsError,
    ProposalDoesNotExistError,
    ProposalNotActiveError,
    ProposalRejectedError,
    QuorumNotMetError,
    VotingEndedError,
    VotingNotEndedError,
)
from .events import EventLog, ProposalCreated, ProposalExecuted, VoteCast
from .proposals import Proposal, ProposalState, ProposalStore
from .roles import CapabilityOracle, MembershipRegistry, Role

logger = get_logger(__name__)

ExecutionEffect = Callable[[Proposal], Any]


class GovernanceEngine:
    """
    Role-gated proposal state machine.

    Mutations run under one engine-wide lock so that every precondition
    check and the write that follows it form a single atomic step. Reads
    go to the store without locking and see whole, immutable records.
    """

    def __init__(
        self,
        role_oracle: CapabilityOracle,
        membership: MembershipRegistry,
        voting_period: int = GOVERNANCE_VOTING_PERIOD_SECONDS,
        quorum_percentage: int = GOVERNANCE_QUORUM_PERCENTAGE,
        clock: Optional[Callable[[], int]] = None,
        event_log: Optional[EventLog] = None,
        on_execute: Optional[ExecutionEffect] = None,
    ):
        """
        Args:
            role_oracle:        Answers has_valid_role(role, principal)
            membership:         Answers balance_of(principal) / total_supply()
            voting_period:      Seconds from creation to end of voting window
            quorum_percentage:  Integer 0..100
            clock:              Callable() -> int seconds; defaults to wall clock
            event_log:          Destination for emitted events
            on_execute:         Domain action run once when a proposal executes
        """
        if int(voting_period) <= 0:
            raise ValueError(f"voting_period must be positive (got {voting_period})")
        if not GOVERNANCE_QUORUM_MIN <= int(quorum_percentage) <= GOVERNANCE_QUORUM_MAX:
            raise ValueError(
                f"quorum_percentage must be within "
                f"{GOVERNANCE_QUORUM_MIN}..{GOVERNANCE_QUORUM_MAX} (got {quorum_percentage})"
            )

        self._role_oracle = role_oracle
        self._membership = membership
        self._voting_period = int(voting_period)
        self._quorum_percentage = int(quorum_percentage)
        self._clock = clock or SystemClock()
        self._events = event_log or EventLog()
        self._on_execute = on_execute

        self._store = ProposalStore()
        self._lock = threading.RLock()
        self._executing: Set[int] = set()

    # ── Configuration (read-only) ─────────────────────────────────────

    @property
    def voting_period(self) -> int:
        return self._voting_period

    @property
    def quorum_percentage(self) -> int:
        return self._quorum_percentage

    @property
    def role_oracle(self) -> CapabilityOracle:
        return self._role_oracle

    @property
    def membership(self) -> MembershipRegistry:
        return self._membership

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def proposal_count(self) -> int:
        return len(self._store)

    def now(self) -> int:
        return int(self._clock())

    # ── Authorization ─────────────────────────────────────────────────

    def has_valid_role(self, role: Role, principal: str) -> bool:
        """Ask the oracle, every time. Grants may expire or be revoked between calls."""
        return bool(self._role_oracle.has_valid_role(Role.parse(role), principal))

    def _require_role(self, role: Role, principal: str, proposal_id: Optional[int] = None):
        if not self.has_valid_role(role, principal):
            logger.warning(f"{principal} lacks {role.value}; rejected")
            raise InsufficientRolePermissionsError(
                f"{principal} does not hold {role.value}",
                proposal_id=proposal_id,
                role=role,
                principal=principal,
            )

    def _require_proposal(self, proposal_id: int) -> Proposal:
        proposal = self._store.get(proposal_id)
        if proposal is None:
            raise ProposalDoesNotExistError(
                f"Proposal #{proposal_id} does not exist", proposal_id=proposal_id
            )
        return proposal

    # ── Weight ────────────────────────────────────────────────────────

    def get_voting_weight(self, principal: str) -> int:
        """Membership balance right now; 0 for non-members."""
        return int(self._membership.balance_of(principal))

    def total_supply(self) -> int:
        return int(self._membership.total_supply())

    # ── Commands ──────────────────────────────────────────────────────

    def create_proposal(self, principal: str, title: str, description: str) -> int:
        """
        Append a new proposal. Requires PROPOSER_ROLE.

        Returns the new proposal id (ids are 0, 1, 2, ... in call order).
        """
        with self._lock:
            self._require_role(Role.PROPOSER, principal)

            now = self.now()
            proposal = self._store.append(
                proposer=principal,
                title=title,
                description=description,
                start_time=now,
                end_time=now + self._voting_period,
            )
            logger.info(
                f"Proposal #{proposal.id} created by {principal}: '{title}' "
                f"(voting ends {proposal.end_time})"
            )
            self._events.emit(ProposalCreated(proposal.id, principal, title, timestamp=now))
        return proposal.id

    def vote(self, principal: str, proposal_id: int, support: bool) -> int:
        """
        Cast a weighted vote. Requires VOTER_ROLE.

        Checks, first failure wins:
            1. Proposal exists             → ProposalDoesNotExist
            2. Caller holds VOTER_ROLE     → InsufficientRolePermissions
            3. now <= end_time             → VotingEnded
            4. Caller has not voted yet    → AlreadyVoted

        Returns the recorded weight (may be 0).
        """
        support = bool(support)
        with self._lock:
            proposal = self._require_proposal(proposal_id)
            self._require_role(Role.VOTER, principal, proposal_id)

            now = self.now()
            if not proposal.is_open(now):
                logger.debug(f"Vote on Proposal #{proposal_id} after window by {principal}")
                raise VotingEndedError(
                    f"Voting on proposal #{proposal_id} ended at {proposal.end_time}",
                    proposal_id=proposal_id,
                )
            if proposal.has_voted(principal):
                logger.debug(f"Repeat vote on Proposal #{proposal_id} by {principal}")
                raise AlreadyVotedError(
                    f"{principal} has already voted on proposal #{proposal_id}",
                    proposal_id=proposal_id,
                )

            weight = self.get_voting_weight(principal)
            self._store.replace(proposal.with_vote(principal, support, weight))
            logger.info(
                f"Vote: {principal} → {'YES' if support else 'NO'} on Proposal #{proposal_id} "
                f"(weight={weight})"
            )
            self._events.emit(VoteCast(proposal_id, principal, support, weight, timestamp=now))
        return weight

    def execute_proposal(self, principal: str, proposal_id: int) -> None:
        """
        Execute a succeeded proposal exactly once. Requires EXECUTOR_ROLE.

        Checks, first failure wins:
            1. Proposal exists             → ProposalDoesNotExist
            2. Caller holds EXECUTOR_ROLE  → InsufficientRolePermissions
            3. Not already executed        → ProposalNotActive
            4. now > end_time              → VotingNotEnded
            5. Quorum met                  → QuorumNotMet
            6. yes > no                    → ProposalRejected

        The execution effect runs before the executed flag is committed; if it
        raises, nothing is committed and the error propagates.
        """
        with self._lock:
            proposal = self._require_proposal(proposal_id)
            self._require_role(Role.EXECUTOR, principal, proposal_id)

            if proposal.executed or proposal_id in self._executing:
                raise ProposalNotActiveError(
                    f"Proposal #{proposal_id} already executed", proposal_id=proposal_id
                )

            now = self.now()
            if proposal.is_open(now):
                raise VotingNotEndedError(
                    f"Voting on proposal #{proposal_id} ends at {proposal.end_time} (now={now})",
                    proposal_id=proposal_id,
                )

            supply = self.total_supply()
            if not proposal.quorum_reached(self._quorum_percentage, supply):
                logger.debug(
                    f"Proposal #{proposal_id}: quorum not met "
                    f"({proposal.total_votes}/{supply}, need {self._quorum_percentage}%)"
                )
                raise QuorumNotMetError(
                    f"Proposal #{proposal_id}: {proposal.total_votes} of {supply} units voted, "
                    f"{self._quorum_percentage}% required",
                    proposal_id=proposal_id,
                )
            if not proposal.majority_reached:
                raise ProposalRejectedError(
                    f"Proposal #{proposal_id}: yes={proposal.yes_votes} no={proposal.no_votes}",
                    proposal_id=proposal_id,
                )

            if self._on_execute is not None:
                # Hook may re-enter the engine while the lock is held
                self._executing.add(proposal_id)
                try:
                    self._on_execute(proposal)
                finally:
                    self._executing.discard(proposal_id)
            self._store.replace(proposal.with_executed(now))
            logger.info(f"Proposal #{proposal_id} EXECUTED by {principal}")
            self._events.emit(ProposalExecuted(proposal_id, timestamp=now))

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self._require_proposal(proposal_id)

    def get_proposal_state(self, proposal_id: int) -> ProposalState:
        """
        Read-side mirror of the execute guards. Unknown ids are PENDING.
        """
        proposal = self._store.get(proposal_id)
        if proposal is None:
            return ProposalState.PENDING
        if proposal.executed:
            return ProposalState.EXECUTED
        if proposal.is_open(self.now()):
            return ProposalState.ACTIVE
        if (proposal.quorum_reached(self._quorum_percentage, self.total_supply())
                and proposal.majority_reached):
            return ProposalState.SUCCEEDED
        return ProposalState.DEFEATED

    def has_voted(self, proposal_id: int, principal: str) -> bool:
        proposal = self._store.get(proposal_id)
        return proposal is not None and proposal.has_voted(principal)

    def proposals(self) -> List[Proposal]:
        return self._store.all()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "votingPeriod": self._voting_period,
            "quorumPercentage": self._quorum_percentage,
            "proposalCount": self.proposal_count,
            "totalSupply": self.total_supply(),
            "events": len(self._events),
        }

    def __repr__(self) -> str:
        return (
            f"<GovernanceEngine proposals={self.proposal_count} "
            f"period={self._voting_period}s quorum={self._quorum_percentage}%>"
        )
