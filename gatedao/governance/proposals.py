"""
Governance Proposals

Defines the proposal lifecycle states, the immutable Proposal record and
the append-only ProposalStore owned by the GovernanceEngine.
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Iterator, List, Optional


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalState(IntEnum):
    """Observable lifecycle stage. Values match the wire encoding."""
    PENDING = 0     # Id not yet assigned
    ACTIVE = 1      # Voting window open
    DEFEATED = 2    # Window closed, quorum missed or yes <= no
    SUCCEEDED = 3   # Window closed, quorum met and yes > no
    EXECUTED = 4    # Executed exactly once

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def is_terminal(self) -> bool:
        return self in (ProposalState.DEFEATED, ProposalState.EXECUTED)


# ══════════════════════════════════════════════════════════════════════
#  TALLY ARITHMETIC
# ══════════════════════════════════════════════════════════════════════

def quorum_met(yes_votes: int, no_votes: int, quorum_percentage: int, total_supply: int) -> bool:
    """(yes + no) * 100 >= quorum% * supply, in integers."""
    return (yes_votes + no_votes) * 100 >= quorum_percentage * total_supply


def majority_met(yes_votes: int, no_votes: int) -> bool:
    return yes_votes > no_votes


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Proposal:
    """
    A governance proposal.

    Records are immutable: a vote or an execution produces a new record that
    replaces the old one in the store, so a reader holding a reference always
    sees a consistent tally.

    Fields:
        id:           Dense, zero-based creation index
        proposer:     Principal that created the proposal
        title:        Opaque short text
        description:  Opaque long text
        start_time:   Engine clock at creation
        end_time:     start_time + voting period (inclusive end of the window)
        yes_votes:    Accumulated weight in favour
        no_votes:     Accumulated weight against
        voters:       Principals that have voted (one vote each)
        executed:     Terminal execution flag
        executed_at:  Engine clock at execution
    """
    id: int
    proposer: str
    title: str
    description: str
    start_time: int
    end_time: int
    yes_votes: int = 0
    no_votes: int = 0
    voters: FrozenSet[str] = field(default_factory=frozenset)
    executed: bool = False
    executed_at: Optional[int] = None

    # ── Properties ────────────────────────────────────────────────────

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes

    @property
    def voter_count(self) -> int:
        return len(self.voters)

    def is_open(self, now: int) -> bool:
        """Votes are accepted while now <= end_time."""
        return now <= self.end_time

    def has_voted(self, principal: str) -> bool:
        return principal in self.voters

    def quorum_reached(self, quorum_percentage: int, total_supply: int) -> bool:
        return quorum_met(self.yes_votes, self.no_votes, quorum_percentage, total_supply)

    @property
    def majority_reached(self) -> bool:
        return majority_met(self.yes_votes, self.no_votes)

    # ── Derived records ───────────────────────────────────────────────

    def with_vote(self, voter: str, support: bool, weight: int) -> "Proposal":
        if support:
            return replace(self, yes_votes=self.yes_votes + weight,
                           voters=self.voters | {voter})
        return replace(self, no_votes=self.no_votes + weight,
                       voters=self.voters | {voter})

    def with_executed(self, now: int) -> "Proposal":
        return replace(self, executed=True, executed_at=now)

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "title": self.title,
            "description": self.description,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "executed": self.executed,
        }

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} '{self.title}' "
            f"yes={self.yes_votes} no={self.no_votes} executed={self.executed}>"
        )


# ══════════════════════════════════════════════════════════════════════
#  STORE
# ══════════════════════════════════════════════════════════════════════

class ProposalStore:
    """
    Ordered, append-only proposal collection.

    Writes are serialized by the owning engine. Reads take no lock: a slot
    holds one immutable record and is swapped by a single assignment.
    """

    def __init__(self):
        self._proposals: List[Proposal] = []

    def append(
        self,
        proposer: str,
        title: str,
        description: str,
        start_time: int,
        end_time: int,
    ) -> Proposal:
        proposal = Proposal(
            id=len(self._proposals),
            proposer=proposer,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
        )
        self._proposals.append(proposal)
        return proposal

    def replace(self, proposal: Proposal) -> None:
        if not self.exists(proposal.id):
            raise KeyError(proposal.id)
        self._proposals[proposal.id] = proposal

    def exists(self, proposal_id: int) -> bool:
        if isinstance(proposal_id, bool) or not isinstance(proposal_id, int):
            return False
        return 0 <= proposal_id < len(self._proposals)

    def get(self, proposal_id: int) -> Optional[Proposal]:
        if not self.exists(proposal_id):
            return None
        return self._proposals[proposal_id]

    def all(self) -> List[Proposal]:
        return list(self._proposals)

    def __len__(self) -> int:
        return len(self._proposals)

    def __iter__(self) -> Iterator[Proposal]:
        return iter(list(self._proposals))

    def __repr__(self) -> str:
        return f"<ProposalStore count={len(self._proposals)}>"
