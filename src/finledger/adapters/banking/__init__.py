"""Bank session adapters."""

from finledger.adapters.banking.credentials import (
    BankCredentials,
    BankingConfig,
    load_banking_config,
)
from finledger.adapters.banking.dkb import DkbAdapter
from finledger.adapters.banking.protocol import BankAdapter
from finledger.adapters.banking.registry import AdapterRegistry, default_adapters

__all__ = [
    "AdapterRegistry",
    "BankAdapter",
    "BankCredentials",
    "BankingConfig",
    "DkbAdapter",
    "default_adapters",
    "load_banking_config",
]
