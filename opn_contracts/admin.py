import os
from typing import Iterable, List, Optional

from opn_contracts.constants import (
    ADDITIONAL_ADMIN_ENVVAR,
    ADMIN_WALLET_ENVVAR,
    DEFAULT_ADMIN_WALLETS,
)


def configured_admin_wallets() -> List[str]:
    """Admin wallets known to the platform, including any configured through the environment."""
    wallets = list(DEFAULT_ADMIN_WALLETS)
    for envvar in (ADMIN_WALLET_ENVVAR, ADDITIONAL_ADMIN_ENVVAR):
        wallet = os.environ.get(envvar)
        if wallet:
            wallets.append(wallet)
    return wallets


def is_admin(address: Optional[str], admin_wallets: Optional[Iterable[str]] = None) -> bool:
    if not address:
        return False
    if admin_wallets is None:
        admin_wallets = configured_admin_wallets()
    return address.lower() in {wallet.lower() for wallet in admin_wallets}
