"""
GateDAO: token-gated DAO governance.

Proposals are created by role holders, voted on with weight equal to the
voter's membership balance, and executed once the voting window closes with
quorum and majority met.
"""

__version__ = "0.1.0"
