"""
GateDAO dao_* RPC Methods

Governance JSON-RPC methods. The calling principal is passed explicitly as
`sender`; signature verification happens upstream of this module.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from ...governance import GovernanceError, Role
from ...membership import MembershipError, RoleRegistryError
from ..server import RPCError, RPCErrorCode, RPCModule, rpc_method

_KIND_CODES = {
    "AuthorizationError": RPCErrorCode.ACTION_NOT_ALLOWED,
    "NotFoundError": RPCErrorCode.RESOURCE_NOT_FOUND,
    "StateError": RPCErrorCode.TRANSACTION_REJECTED,
}


@contextmanager
def _rpc_errors():
    """Translate domain exceptions raised inside the block into RPCError."""
    try:
        yield
    except GovernanceError as e:
        info = e.to_dict()
        raise RPCError(
            _KIND_CODES.get(e.kind, RPCErrorCode.SERVER_ERROR),
            str(e),
            data={"kind": info["kind"], "condition": info["condition"], "hint": info["hint"]},
        ) from e
    except (MembershipError, RoleRegistryError, ValueError) as e:
        raise RPCError(RPCErrorCode.INVALID_PARAMS, str(e)) from e


def _proposal_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RPCError(RPCErrorCode.INVALID_PARAMS, f"proposalId must be an integer (got {value!r})")
    return value


def _address(value: Any, name: str = "address") -> str:
    if not isinstance(value, str) or not value:
        raise RPCError(RPCErrorCode.INVALID_PARAMS, f"{name} must be a non-empty string")
    return value


class DAOModule(RPCModule):
    """
    Governance RPC methods (dao_* namespace).

    Context is a DAOAutomation instance.
    """

    namespace = "dao"

    @property
    def _engine(self):
        return self.context.engine

    # ── Mutations ─────────────────────────────────────────────────────

    @rpc_method
    async def createProposal(self, sender: str, title: str, description: str) -> int:
        """
        Create a proposal. Requires PROPOSER_ROLE.

        Returns:
            New proposal id
        """
        sender = _address(sender, "sender")
        with _rpc_errors():
            return self._engine.create_proposal(sender, str(title), str(description))

    @rpc_method
    async def vote(self, sender: str, proposalId: int, support: bool) -> Dict[str, Any]:
        """
        Cast a weighted vote. Requires VOTER_ROLE.

        Returns:
            Recorded vote with the weight applied
        """
        sender = _address(sender, "sender")
        proposal_id = _proposal_id(proposalId)
        if not isinstance(support, bool):
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "support must be a boolean")
        with _rpc_errors():
            weight = self._engine.vote(sender, proposal_id, support)
        return {"proposalId": proposal_id, "voter": sender, "support": support, "weight": weight}

    @rpc_method
    async def executeProposal(self, sender: str, proposalId: int) -> Dict[str, Any]:
        """Execute a succeeded proposal. Requires EXECUTOR_ROLE."""
        sender = _address(sender, "sender")
        proposal_id = _proposal_id(proposalId)
        with _rpc_errors():
            self._engine.execute_proposal(sender, proposal_id)
            return self.context.get_proposal(proposal_id)

    # ── Queries ───────────────────────────────────────────────────────

    @rpc_method
    async def getProposal(self, proposalId: int) -> Dict[str, Any]:
        proposal_id = _proposal_id(proposalId)
        with _rpc_errors():
            return self.context.get_proposal(proposal_id)

    @rpc_method
    async def getProposalState(self, proposalId: int) -> int:
        """
        Returns the numeric state: 0 Pending, 1 Active, 2 Defeated,
        3 Succeeded, 4 Executed. Unknown ids report Pending.
        """
        return int(self._engine.get_proposal_state(_proposal_id(proposalId)))

    @rpc_method
    async def getVotingWeight(self, address: str) -> int:
        return self._engine.get_voting_weight(_address(address))

    @rpc_method
    async def hasValidRole(self, role: str, address: str) -> bool:
        with _rpc_errors():
            return self._engine.has_valid_role(Role.parse(role), _address(address))

    @rpc_method
    async def proposalCount(self) -> int:
        return self._engine.proposal_count

    @rpc_method
    async def votingPeriod(self) -> int:
        return self._engine.voting_period

    @rpc_method
    async def quorumPercentage(self) -> int:
        return self._engine.quorum_percentage

    @rpc_method
    async def getEvents(self, fromIndex: int = 0, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Returns events in emission order, starting at *fromIndex*,
        optionally filtered by event name.
        """
        if isinstance(fromIndex, bool) or not isinstance(fromIndex, int) or fromIndex < 0:
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "fromIndex must be a non-negative integer")
        return [event.to_dict() for event in self._engine.events.since(fromIndex, name)]

    @rpc_method
    async def getMemberInfo(self, address: str) -> Dict[str, Any]:
        return self.context.get_member_info(_address(address))
