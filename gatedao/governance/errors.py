"""
Governance error taxonomy.

Three kinds, each split into named conditions:

  AuthorizationError  principal lacks the role at call time
  NotFoundError       proposal id does not exist
  StateError          action invalid for the proposal's temporal/tally/execution state

Every condition class carries a stable `condition` string that callers
(RPC clients, CLI) can match on.
"""

from typing import Dict, Optional

from ..exceptions import GateDAOException


# ══════════════════════════════════════════════════════════════════════
#  KINDS
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(GateDAOException):
    """Base governance exception."""
    kind: str = "GovernanceError"
    condition: str = "GovernanceError"
    retryable: bool = False

    def __init__(self, message: Optional[str] = None, proposal_id: Optional[int] = None):
        self.proposal_id = proposal_id
        super().__init__(message or self.condition)

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "condition": self.condition,
            "message": str(self),
            "proposalId": self.proposal_id,
            "retryable": self.retryable,
            "hint": describe_error(self),
        }


class AuthorizationError(GovernanceError):
    kind = "AuthorizationError"


class NotFoundError(GovernanceError):
    kind = "NotFoundError"


class StateError(GovernanceError):
    kind = "StateError"


# ══════════════════════════════════════════════════════════════════════
#  CONDITIONS
# ══════════════════════════════════════════════════════════════════════

class InsufficientRolePermissionsError(AuthorizationError):
    """Caller does not currently hold the required role."""
    condition = "InsufficientRolePermissions"

    def __init__(self, message: Optional[str] = None, proposal_id: Optional[int] = None,
                 role=None, principal: Optional[str] = None):
        self.role = role
        self.principal = principal
        super().__init__(message, proposal_id)


class ProposalDoesNotExistError(NotFoundError):
    condition = "ProposalDoesNotExist"


class VotingEndedError(StateError):
    condition = "VotingEnded"


class AlreadyVotedError(StateError):
    condition = "AlreadyVoted"


class VotingNotEndedError(StateError):
    """Becomes valid by the passage of time alone."""
    condition = "VotingNotEnded"
    retryable = True


class QuorumNotMetError(StateError):
    condition = "QuorumNotMet"


class ProposalRejectedError(StateError):
    condition = "ProposalRejected"


class ProposalNotActiveError(StateError):
    """Proposal already executed."""
    condition = "ProposalNotActive"


_HINTS: Dict[str, str] = {
    "InsufficientRolePermissions": "Connect an account holding the required role and resubmit.",
    "ProposalDoesNotExist": "Check the proposal id; no proposal exists with that id.",
    "VotingEnded": "Voting on this proposal has closed.",
    "AlreadyVoted": "This account has already voted on this proposal.",
    "VotingNotEnded": "Wait until the voting period closes, then execute.",
    "QuorumNotMet": "This proposal failed: not enough membership participated.",
    "ProposalRejected": "This proposal failed: it did not get more yes than no votes.",
    "ProposalNotActive": "This proposal has already been executed.",
}


def describe_error(exc: GovernanceError) -> str:
    """Actionable, user-facing message for a governance error."""
    return _HINTS.get(exc.condition, str(exc))
