"""
GateDAO Constants

This module consolidates all global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast

from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

NODE_DEFAULTS = {
    'GATEDAO_NODE_HOST':               '127.0.0.1',
    'GATEDAO_NODE_PORT':               '3009',
    'GATEDAO_VOTING_PERIOD':           str(7 * 24 * 60 * 60),
    'GATEDAO_QUORUM_PERCENTAGE':       '30',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# GOVERNANCE PARAMETERS
# ==================================================================================
SECONDS_PER_DAY = 24 * 60 * 60

GOVERNANCE_VOTING_PERIOD_SECONDS = 7 * SECONDS_PER_DAY
GOVERNANCE_QUORUM_PERCENTAGE = 30   # % of outstanding membership units
GOVERNANCE_QUORUM_MIN = 0
GOVERNANCE_QUORUM_MAX = 100

# Role names; role ids are keccak256 of these strings
ROLE_VOTER = "VOTER_ROLE"
ROLE_PROPOSER = "PROPOSER_ROLE"
ROLE_EXECUTOR = "EXECUTOR_ROLE"
ROLE_ADMIN = "ADMIN_ROLE"

DEFAULT_ROLE_EXPIRATION_DAYS = 365


# ==================================================================================
# MEMBERSHIP NFT PARAMETERS
# ==================================================================================
MEMBERSHIP_NFT_NAME = "DAO Membership"
MEMBERSHIP_NFT_SYMBOL = "DAOMEM"
MEMBERSHIP_MAX_SUPPLY = 1000  # 0 means uncapped


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = NODE_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
