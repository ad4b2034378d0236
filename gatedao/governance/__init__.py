"""
GateDAO Token-Gated Governance

Provides:
  - Role / CapabilityOracle / MembershipRegistry          (roles.py)
  - GovernanceError and its kinds and conditions          (errors.py)
  - Proposal / ProposalState / ProposalStore              (proposals.py)
  - ProposalCreated / VoteCast / ProposalExecuted / EventLog (events.py)
  - GovernanceEngine                                      (engine.py)
"""

from .roles import (
    CapabilityOracle,
    MembershipRegistry,
    Role,
)
from .errors import (
    AlreadyVotedError,
    AuthorizationError,
    GovernanceError,
    InsufficientRolePermissionsError,
    NotFoundError,
    ProposalDoesNotExistError,
    ProposalNotActiveError,
    ProposalRejectedError,
    QuorumNotMetError,
    StateError,
    VotingEndedError,
    VotingNotEndedError,
    describe_error,
)
from .proposals import (
    Proposal,
    ProposalState,
    ProposalStore,
)
from .events import (
    EventLog,
    ProposalCreated,
    ProposalExecuted,
    VoteCast,
)
from .engine import GovernanceEngine

__all__ = [
    # Roles
    "CapabilityOracle",
    "MembershipRegistry",
    "Role",
    # Errors
    "AlreadyVotedError",
    "AuthorizationError",
    "GovernanceError",
    "InsufficientRolePermissionsError",
    "NotFoundError",
    "ProposalDoesNotExistError",
    "ProposalNotActiveError",
    "ProposalRejectedError",
    "QuorumNotMetError",
    "StateError",
    "VotingEndedError",
    "VotingNotEndedError",
    "describe_error",
    # Proposals
    "Proposal",
    "ProposalState",
    "ProposalStore",
    # Events
    "EventLog",
    "ProposalCreated",
    "ProposalExecuted",
    "VoteCast",
    # Engine
    "GovernanceEngine",
]
