"""Contract encoding configuration constants.

Keep this file aligned with the ledger's contract transactor limits
(`ContractCreate` / `ContractCall` preflight checks).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# Contract definition limits
MAX_FUNCTIONS = 12
MAX_FUNCTION_PARAMETERS = 32

# Parameter flags
TF_SEND_AMOUNT = 0x00010000

# ContractCreate transaction flags
TF_IMMUTABLE = 0x00010000

# Units
DROPS_PER_XRP = 1_000_000
MAX_XRP = 100_000_000_000
MAX_DROPS = MAX_XRP * DROPS_PER_XRP
NATIVE_CURRENCY = "XRP"

# Standard 3-character currency codes
CURRENCY_CODE_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789?!@#$%^&*<>(){}[]|"
)
CURRENCY_HEX_LENGTH = 40

# Addresses
ACCOUNT_ID_SIZE = 20
ACCOUNT_TYPE_PREFIX = 0x00
MIN_ADDRESS_LENGTH = 25
MAX_ADDRESS_LENGTH = 35

# Calls
MAX_COMPUTATION_ALLOWANCE = 0xFFFFFFFF
DEFAULT_COMPUTATION_ALLOWANCE = 1_000_000

# Node endpoint
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5005
DEFAULT_TIMEOUT = 30.0

# Waiting for a submitted transaction to be validated
POLL_INTERVAL = 1.0
MAX_VALIDATION_POLLS = 20


@dataclass
class ClientConfig:
    """Connection settings for a ledger node JSON-RPC endpoint."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    standalone: bool = True
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = POLL_INTERVAL
    max_polls: int = MAX_VALIDATION_POLLS

    @property
    def endpoint(self) -> str:
        scheme = "http" if self.standalone else "https"
        return f"{scheme}://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables."""
        config = cls()
        config.host = os.environ.get("XRPLD_HOST", DEFAULT_HOST)
        config.port = int(os.environ.get("XRPLD_PORT", DEFAULT_PORT))
        config.standalone = os.environ.get("XRPLD_ENV") == "standalone"
        config.timeout = float(os.environ.get("XRPLD_TIMEOUT", DEFAULT_TIMEOUT))
        return config
