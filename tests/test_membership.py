"""
Membership Test Suite

Coverage:
  - MembershipNFT: mint, supply cap, transfer, burn, balances
  - RoleRegistry: grant, expiry, revocation, recipient checks
  - Role: identifiers and parsing
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eth_hash.auto import keccak

from gatedao.clock import ManualClock
from gatedao.governance import Role
from gatedao.membership import (
    MaxSupplyReachedError,
    MembershipError,
    MembershipNFT,
    NonRevocableRoleError,
    NotTokenOwnerError,
    RoleNotGrantedError,
    RoleRegistry,
    RoleRegistryError,
    TokenAlreadyMintedError,
    TokenNotFoundError,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20

GENESIS = 1_700_000_000


def make_nft(**kwargs):
    return MembershipNFT(**kwargs)


def make_registry(nft=None, start=GENESIS):
    nft = nft or make_nft()
    clock = ManualClock(start=start)
    return RoleRegistry(nft, clock=clock), nft, clock


# ══════════════════════════════════════════════════════════════════════
#  ROLES
# ══════════════════════════════════════════════════════════════════════

class TestRole:

    def test_role_ids_are_keccak_of_names(self):
        assert Role.VOTER.role_id == keccak(b"VOTER_ROLE")
        assert Role.ADMIN.role_id_hex == "0x" + keccak(b"ADMIN_ROLE").hex()
        assert len({r.role_id for r in Role}) == 4

    @pytest.mark.parametrize("value", [
        Role.EXECUTOR, "EXECUTOR", "executor", "EXECUTOR_ROLE", " executor_role ",
    ])
    def test_parse_names(self, value):
        assert Role.parse(value) is Role.EXECUTOR

    def test_parse_role_ids(self):
        assert Role.parse(keccak(b"PROPOSER_ROLE")) is Role.PROPOSER
        assert Role.parse(Role.PROPOSER.role_id_hex.upper().replace("0X", "0x")) is Role.PROPOSER

    @pytest.mark.parametrize("value", ["TREASURER", b"\x00" * 32, 7, None])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            Role.parse(value)


# ══════════════════════════════════════════════════════════════════════
#  MEMBERSHIP NFT
# ══════════════════════════════════════════════════════════════════════

class TestMembershipNFT:

    def test_defaults(self):
        nft = make_nft()
        assert nft.name == "DAO Membership"
        assert nft.symbol == "DAOMEM"
        assert nft.max_supply == 1000
        assert nft.total_supply() == 0
        assert nft.address.startswith("0x") and len(nft.address) == 42

    def test_mint_sequential_ids(self):
        nft = make_nft()
        assert [nft.mint(ALICE), nft.mint(BOB), nft.mint(ALICE)] == [0, 1, 2]
        assert nft.balance_of(ALICE) == 2
        assert nft.balance_of(BOB) == 1
        assert nft.balance_of(CAROL) == 0
        assert nft.total_supply() == 3
        assert nft.tokens_of(ALICE) == [0, 2]
        assert nft.owner_of(1) == BOB

    def test_mint_explicit_id_skipped_by_sequence(self):
        nft = make_nft()
        assert nft.mint(ALICE, token_id=0) == 0
        assert nft.mint(BOB, token_id=1) == 1
        assert nft.mint(CAROL) == 2

    def test_duplicate_token_id_rejected(self):
        nft = make_nft()
        nft.mint(ALICE, token_id=5)
        with pytest.raises(TokenAlreadyMintedError):
            nft.mint(BOB, token_id=5)

    def test_supply_cap(self):
        nft = make_nft(max_supply=2)
        nft.mint(ALICE)
        nft.mint(BOB)
        with pytest.raises(MaxSupplyReachedError):
            nft.mint(CAROL)
        assert nft.total_supply() == 2

    def test_zero_cap_is_uncapped(self):
        nft = make_nft(max_supply=0)
        for _ in range(1005):
            nft.mint(ALICE)
        assert nft.total_supply() == 1005

    @pytest.mark.parametrize("kwargs", [{"name": ""}, {"symbol": ""}, {"max_supply": -1}])
    def test_invalid_collection(self, kwargs):
        with pytest.raises(MembershipError):
            make_nft(**kwargs)

    def test_mint_to_empty_address(self):
        with pytest.raises(MembershipError):
            make_nft().mint("")

    def test_transfer_moves_balance(self):
        nft = make_nft()
        token = nft.mint(ALICE)
        nft.transfer(ALICE, BOB, token)
        assert nft.balance_of(ALICE) == 0
        assert nft.balance_of(BOB) == 1
        assert nft.owner_of(token) == BOB
        assert [(t.sender, t.recipient) for t in nft.transfers] == [(None, ALICE), (ALICE, BOB)]

    def test_transfer_requires_owner(self):
        nft = make_nft()
        token = nft.mint(ALICE)
        with pytest.raises(NotTokenOwnerError):
            nft.transfer(BOB, CAROL, token)

    def test_unknown_token(self):
        nft = make_nft()
        with pytest.raises(TokenNotFoundError):
            nft.owner_of(9)
        with pytest.raises(TokenNotFoundError):
            nft.transfer(ALICE, BOB, 9)

    def test_burn_reduces_supply(self):
        nft = make_nft()
        token = nft.mint(ALICE)
        nft.mint(BOB)
        nft.burn(ALICE, token)
        assert nft.total_supply() == 1
        assert nft.balance_of(ALICE) == 0
        assert not nft.exists(token)
        with pytest.raises(NotTokenOwnerError):
            nft.burn(ALICE, 1)

    def test_to_dict(self):
        nft = make_nft()
        nft.mint(ALICE)
        nft.mint(ALICE)
        info = nft.to_dict()
        assert info["totalSupply"] == 2
        assert info["holders"] == {ALICE: [0, 1]}


# ══════════════════════════════════════════════════════════════════════
#  ROLE REGISTRY
# ══════════════════════════════════════════════════════════════════════

class TestRoleRegistry:

    def test_grant_gives_role_to_token_owner(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        grant = registry.grant_role(Role.VOTER, token, ALICE, expiration_date=GENESIS + 10)
        assert grant.token_address == nft.address
        assert registry.has_valid_role(Role.VOTER, ALICE)
        assert not registry.has_valid_role(Role.PROPOSER, ALICE)
        assert registry.recipient_of(Role.VOTER, token) == ALICE
        assert registry.role_expiration_date(Role.VOTER, token) == GENESIS + 10
        assert registry.roles_of(ALICE) == [Role.VOTER]

    def test_grant_accepts_role_names(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role("PROPOSER_ROLE", token, ALICE)
        assert registry.has_valid_role("proposer", ALICE)

    def test_grant_on_unknown_token(self):
        registry, _, _ = make_registry()
        with pytest.raises(TokenNotFoundError):
            registry.grant_role(Role.VOTER, 0, ALICE)

    def test_grant_with_past_expiration(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        with pytest.raises(RoleRegistryError):
            registry.grant_role(Role.VOTER, token, ALICE, expiration_date=GENESIS)

    def test_expiry_is_exclusive(self):
        registry, nft, clock = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.VOTER, token, ALICE, expiration_date=GENESIS + 10)
        clock.advance(9)
        assert registry.has_valid_role(Role.VOTER, ALICE)
        clock.advance(1)
        assert not registry.has_valid_role(Role.VOTER, ALICE)

    def test_no_expiration_never_expires(self):
        registry, nft, clock = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.VOTER, token, ALICE)
        clock.advance(100 * 365 * 86400)
        assert registry.has_valid_role(Role.VOTER, ALICE)

    def test_recipient_must_own_token(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.VOTER, token, BOB)
        assert not registry.has_valid_role(Role.VOTER, BOB)
        assert not registry.has_valid_role(Role.VOTER, ALICE)

    def test_revoke(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.VOTER, token, ALICE)
        registry.revoke_role(Role.VOTER, token)
        assert not registry.has_valid_role(Role.VOTER, ALICE)
        assert registry.get_grant(Role.VOTER, token) is None
        with pytest.raises(RoleNotGrantedError):
            registry.revoke_role(Role.VOTER, token)
        with pytest.raises(RoleNotGrantedError):
            registry.role_expiration_date(Role.VOTER, token)

    def test_non_revocable_only_released_by_recipient(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.ADMIN, token, ALICE, revocable=False)
        with pytest.raises(NonRevocableRoleError):
            registry.revoke_role(Role.ADMIN, token, revoker=BOB)
        assert registry.has_valid_role(Role.ADMIN, ALICE)
        registry.revoke_role(Role.ADMIN, token, revoker=ALICE)
        assert not registry.has_valid_role(Role.ADMIN, ALICE)

    def test_regrant_replaces(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        registry.grant_role(Role.VOTER, token, ALICE, expiration_date=GENESIS + 5)
        registry.grant_role(Role.VOTER, token, ALICE, expiration_date=GENESIS + 50)
        assert registry.role_expiration_date(Role.VOTER, token) == GENESIS + 50
        assert len(registry.grants()) == 1

    def test_grant_to_dict(self):
        registry, nft, _ = make_registry()
        token = nft.mint(ALICE)
        grant = registry.grant_role(Role.VOTER, token, ALICE, data=b"\x01")
        info = grant.to_dict()
        assert info["role"] == "VOTER_ROLE"
        assert info["roleId"] == Role.VOTER.role_id_hex
        assert info["tokenId"] == token
        assert info["data"] == "0x01"
        assert info["expirationDate"] is None
