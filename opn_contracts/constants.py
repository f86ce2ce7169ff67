from pathlib import Path

import opn_contracts

#
# Filesystem
#

DEPLOYMENT_DIR = Path(opn_contracts.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
DEPLOYMENTS_DIR = DEPLOYMENT_DIR / "deployments"

#
# Networks
#

OPN = "opn"
LOCAL_NETWORKS = ["local"]

OPN_CHAIN_ID = 403
OPN_EXPLORER_URL = "https://explorer.cor3innovations.io"
OPN_EXPLORER_API_URL = f"{OPN_EXPLORER_URL}/api"
COINMARKETCAP_QUOTES_URL = "https://pro-api.coinmarketcap.com/v2/cryptocurrency/quotes/latest"

NATIVE_CURRENCY = "OPN"

# rough estimate of what a full system deployment costs
MIN_DEPLOYMENT_BALANCE = 500_000_000_000_000_000  # wei

#
# Contracts
#

ASSET_REGISTRY = "OPNAssetRegistry"
POSITION_NFT = "OPNPositionNFT"
PRIMARY_MARKET = "OPNPrimaryMarket"
SECONDARY_MARKET = "OPNSecondaryMarket"
GOVERNANCE = "OPNGovernance"
TOKENIZATION = "OPNTokenization"

OPN_SYSTEM_CONTRACTS = [ASSET_REGISTRY, POSITION_NFT, PRIMARY_MARKET, SECONDARY_MARKET, GOVERNANCE]

#
# Access control
#

ADMIN_ROLE = "ADMIN_ROLE"
MINTER_ROLE = "MINTER_ROLE"
DEFAULT_ADMIN_ROLE = "DEFAULT_ADMIN_ROLE"

# OpenZeppelin AccessControl reverts carry this in their message
ACCESS_CONTROL_REVERT = "AccessControl"

DEFAULT_ADMIN_WALLETS = ["0xd715011858545620E23aC58dB8c9c1Be212A41E5"]

#
# Environment
#

FEE_RECIPIENT_ENVVAR = "FEE_RECIPIENT"
ADMIN_WALLET_ENVVAR = "ADMIN_WALLET"
USDC_ADDRESS_ENVVAR = "USDC_ADDRESS"
BASE_URI_ENVVAR = "BASE_URI"
ADDITIONAL_ADMIN_ENVVAR = "ADDITIONAL_ADMIN"
REPORT_GAS_ENVVAR = "REPORT_GAS"
EXPLORER_API_KEY_ENVVAR = "SAGE_EXPLORER_API_KEY"
COINMARKETCAP_API_KEY_ENVVAR = "COINMARKETCAP_API_KEY"

# deployment constants that can be overridden from the environment
CONSTANT_ENVIRONMENT_OVERRIDES = {
    "FEE_RECIPIENT": FEE_RECIPIENT_ENVVAR,
    "ADMIN_WALLET": ADMIN_WALLET_ENVVAR,
    "USDC_ADDRESS": USDC_ADDRESS_ENVVAR,
    "BASE_URI": BASE_URI_ENVVAR,
}

#
# Manifest
#

DEFAULT_MANIFEST_NAME = "deployment"
MANIFEST_VERSION = "1.0.0"
