"""
Automation Test Suite

Coverage:
  - DAOAutomation wiring from configuration
  - membership minting, role grants, member setup
  - governance passthrough and member info
  - deployment snapshot
  - canned scenarios
"""

import json
import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from gatedao.automation import (
    DEFAULT_MEMBERS,
    DAOAutomation,
    DAOScenarios,
    MemberData,
    ProposalData,
)
from gatedao.clock import ManualClock
from gatedao.config import DAOConfig
from gatedao.constants import SECONDS_PER_DAY
from gatedao.exceptions import ConfigurationError
from gatedao.governance import (
    InsufficientRolePermissionsError,
    ProposalRejectedError,
    QuorumNotMetError,
    Role,
)
from gatedao.membership import MaxSupplyReachedError, RoleRegistryError


ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20

GENESIS = 1_700_000_000


def make_automation(**overrides):
    config = DAOConfig()
    for key, value in overrides.items():
        section, field_name = key.split("__")
        setattr(getattr(config, section), field_name, value)
    return DAOAutomation(config, clock=ManualClock(start=GENESIS))


class TestDAOAutomation:

    def test_wires_config_into_engine(self):
        dao = make_automation(governance__voting_period=600, governance__quorum_percentage=60)
        assert dao.engine.voting_period == 600
        assert dao.engine.quorum_percentage == 60
        assert dao.engine.membership is dao.membership
        assert dao.engine.role_oracle is dao.roles

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigurationError):
            make_automation(governance__quorum_percentage=200)

    def test_batch_mint(self):
        dao = make_automation()
        assert dao.batch_mint_memberships([ALICE, BOB, CAROL, ALICE, BOB]) == [0, 1, 2, 3, 4]
        assert dao.membership.total_supply() == 5
        assert dao.engine.get_voting_weight(ALICE) == 2

    def test_mint_respects_cap(self):
        dao = make_automation(membership__max_supply=1)
        dao.mint_membership(ALICE)
        with pytest.raises(MaxSupplyReachedError):
            dao.mint_membership(BOB)

    def test_grant_role_expiration_days(self):
        dao = make_automation()
        token = dao.mint_membership(ALICE)
        grant = dao.grant_role("VOTER_ROLE", ALICE, token, expiration_days=10)
        assert grant.expiration_date == GENESIS + 10 * SECONDS_PER_DAY
        default_grant = dao.grant_role(Role.PROPOSER, ALICE, token)
        assert default_grant.expiration_date == GENESIS + 365 * SECONDS_PER_DAY

    def test_grant_role_zero_days_rejected(self):
        dao = make_automation()
        token = dao.mint_membership(ALICE)
        with pytest.raises(RoleRegistryError):
            dao.grant_role(Role.VOTER, ALICE, token, expiration_days=0)
        with pytest.raises(RoleRegistryError):
            dao.setup_members([MemberData(BOB, ["VOTER_ROLE"], role_expiration_days=0)])
        assert not dao.roles.has_valid_role(Role.VOTER, ALICE)

    def test_grant_expires(self):
        dao = make_automation()
        token = dao.mint_membership(ALICE)
        dao.grant_role(Role.PROPOSER, ALICE, token, expiration_days=1)
        dao.clock.advance(SECONDS_PER_DAY)
        with pytest.raises(InsufficientRolePermissionsError):
            dao.create_proposal(ALICE, ProposalData("T", "D"))

    def test_setup_members(self):
        dao = make_automation()
        tokens = dao.setup_members([
            MemberData(ALICE, ["PROPOSER_ROLE", "VOTER_ROLE"]),
            MemberData.from_dict({"address": BOB, "roles": ["VOTER_ROLE"], "roleExpirationDays": 2}),
        ])
        assert tokens == {ALICE: 0, BOB: 1}
        assert dao.roles.role_expiration_date(Role.VOTER, 1) == GENESIS + 2 * SECONDS_PER_DAY
        assert dao.get_member_info(ALICE) == {
            "address": ALICE,
            "nftBalance": 1,
            "votingWeight": 1,
            "roles": ["VOTER_ROLE", "PROPOSER_ROLE"],
        }

    def test_governance_passthrough(self):
        dao = make_automation()
        dao.setup_members([
            MemberData(ALICE, ["PROPOSER_ROLE", "VOTER_ROLE", "EXECUTOR_ROLE"]),
            MemberData(BOB, ["VOTER_ROLE"]),
            MemberData(CAROL, ["VOTER_ROLE"]),
        ])
        pid = dao.create_proposal(ALICE, ProposalData("Treasury", "Fund the guild"))
        assert dao.get_proposal(pid)["state"] == "Active"
        assert dao.vote(BOB, pid, False) == 1
        dao.clock.advance(dao.engine.voting_period + 1)
        assert dao.get_proposal(pid)["state"] == "Defeated"
        with pytest.raises(ProposalRejectedError):
            dao.execute_proposal(ALICE, pid)

    def test_save_deployment_info(self, tmp_path):
        dao = make_automation()
        dao.setup_members([MemberData(ALICE, ["PROPOSER_ROLE"])])
        dao.create_proposal(ALICE, ProposalData("T", "D"))
        path = dao.save_deployment_info(tmp_path / "deployments" / "dao.json")
        info = json.loads(path.read_text())
        assert info["contracts"]["membershipNFT"] == dao.membership.address
        assert info["membership"]["totalSupply"] == 1
        assert info["grants"][0]["role"] == "PROPOSER_ROLE"
        assert info["proposals"][0]["title"] == "T"
        assert info["config"]["governance"]["quorum_percentage"] == 30


class TestDAOScenarios:

    def test_setup_complete_dao(self):
        scenarios = DAOScenarios(make_automation())
        members = scenarios.setup_complete_dao()
        assert [m["address"] for m in members] == [m.address for m in DEFAULT_MEMBERS]
        assert members[0]["roles"] == ["VOTER_ROLE", "PROPOSER_ROLE", "EXECUTOR_ROLE", "ADMIN_ROLE"]
        assert members[2]["roles"] == ["VOTER_ROLE"]

    def test_governance_cycle_executes(self):
        executed = []
        dao = DAOAutomation(DAOConfig(), clock=ManualClock(start=GENESIS), on_execute=executed.append)
        scenarios = DAOScenarios(dao)
        scenarios.setup_complete_dao()
        result = scenarios.run_governance_cycle()
        assert result["state"] == "Executed"
        assert result["yesVotes"] == 3
        assert [p.title for p in executed] == ["Increase Membership Limit"]

    def test_governance_cycle_against(self):
        scenarios = DAOScenarios(make_automation())
        scenarios.setup_complete_dao()
        result = scenarios.run_governance_cycle(ProposalData("No", "Reject me"), support=False)
        assert result["state"] == "Defeated"
        assert result["noVotes"] == 3
        assert not result["executed"]

    def test_governance_cycle_needs_proposer(self):
        scenarios = DAOScenarios(make_automation())
        scenarios.setup_complete_dao([MemberData(ALICE, ["VOTER_ROLE"])])
        with pytest.raises(ValueError):
            scenarios.run_governance_cycle()

    def test_governance_cycle_quorum_failure_not_executed(self):
        dao = make_automation(governance__quorum_percentage=100)
        scenarios = DAOScenarios(dao)
        scenarios.setup_complete_dao()
        dao.mint_membership(CAROL)
        result = scenarios.run_governance_cycle()
        assert result["state"] == "Defeated"
        with pytest.raises(QuorumNotMetError):
            dao.execute_proposal(DEFAULT_MEMBERS[0].address, result["id"])

    def test_manage_membership(self):
        scenarios = DAOScenarios(make_automation())
        info = scenarios.manage_membership(ALICE, ["VOTER_ROLE", "PROPOSER_ROLE"])
        assert info["nftBalance"] == 1
        assert info["roles"] == ["VOTER_ROLE", "PROPOSER_ROLE"]
