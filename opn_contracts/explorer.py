import os
from typing import Any, Dict, NamedTuple, Optional

import requests
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from opn_contracts.constants import EXPLORER_API_KEY_ENVVAR, OPN_EXPLORER_API_URL
from opn_contracts.manifest import DeploymentManifest, utc_timestamp


class CreationInfo(NamedTuple):
    tx_hash: str
    block_number: int
    deployer: ChecksumAddress


def get_creation_info(
    contract_address: ChecksumAddress,
    api_key: Optional[str] = None,
    api_url: str = OPN_EXPLORER_API_URL,
) -> CreationInfo:
    """Looks up the transaction that created a contract through the explorer's txlist API."""
    params = {
        "module": "account",
        "action": "txlist",
        "address": contract_address,
        "page": 1,
        "sort": "asc",
    }
    if api_key:
        params["apikey"] = api_key

    response = requests.get(api_url, params=params)
    response.raise_for_status()
    data = response.json()

    if data.get("status") == "1" and data.get("result"):
        # with ascending sort the first transaction is the contract creation
        tx = data["result"][0]
        return CreationInfo(
            tx_hash=tx["hash"],
            block_number=int(tx["blockNumber"]),
            deployer=to_checksum_address(tx["from"]),
        )
    raise ValueError(f"Could not find contract creation transaction for {contract_address}")


def recover_manifest(
    network: str,
    chain_id: int,
    contracts: Dict[str, str],
    configuration: Optional[Dict[str, Any]] = None,
    api_url: str = OPN_EXPLORER_API_URL,
) -> DeploymentManifest:
    """Rebuilds a manifest for contracts that were deployed without one."""
    api_key = os.environ.get(EXPLORER_API_KEY_ENVVAR)
    if not contracts:
        raise ValueError("No contracts to recover a manifest for.")

    creations = dict()
    for name, address in contracts.items():
        info = get_creation_info(to_checksum_address(address), api_key=api_key, api_url=api_url)
        print(f"(i) {name} created at block {info.block_number} by {info.deployer}")
        creations[name] = info

    latest = max(creations.values(), key=lambda info: info.block_number)
    return DeploymentManifest(
        network=network,
        chain_id=chain_id,
        contracts={name: to_checksum_address(address) for name, address in contracts.items()},
        configuration=configuration or dict(),
        deployer=latest.deployer,
        block_number=latest.block_number,
        timestamp=utc_timestamp(),
    )
