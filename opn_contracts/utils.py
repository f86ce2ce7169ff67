import json
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml
from ape import networks, project
from ape.contracts import ContractContainer, ContractInstance
from web3 import Web3

from opn_contracts.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    NATIVE_CURRENCY,
    OPN,
    OPN_EXPLORER_URL,
    REPORT_GAS_ENVVAR,
)
from opn_contracts.networks import is_local_network


def _load_yaml(filepath: Path) -> Dict[str, Any]:
    with open(filepath) as config_file:
        return yaml.safe_load(config_file) or dict()


def _load_json(filepath: Path) -> Dict[str, Any]:
    with open(filepath) as json_file:
        return json.load(json_file)


def validate_config(config: Dict) -> None:
    """
    A deployment config needs a deployment section whose chain_id is the chain
    of the connected network. Local networks accept any chain_id.
    """
    print("Validating deployment config...")
    chain_id = (config.get("deployment") or dict()).get("chain_id")
    if not chain_id:
        raise ValueError("Deployment config has no deployment.chain_id.")

    connected_chain_id = networks.provider.network.chain_id
    if int(chain_id) != connected_chain_id and not is_local_network():
        raise ValueError(
            f"Deployment config is for chain {chain_id}, "
            f"but the connected network is chain {connected_chain_id}."
        )


def check_explorer_plugin() -> None:
    """Publishing sources needs a block explorer for the connected network."""
    if is_local_network():
        return
    if networks.provider.network.explorer is None:
        raise ValueError(
            f"No explorer plugin configured for network '{networks.provider.network.name}'."
        )


def verify_contracts(contracts: List[ContractInstance]) -> None:
    """Publishes the sources of deployed contracts to the block explorer."""
    block_explorer = networks.provider.network.explorer
    for contract in contracts:
        print(f"(i) Publishing {contract.contract_type.name} sources at {contract.address}...")
        block_explorer.publish_contract(contract.address)


def get_contract_container(contract_name: str) -> ContractContainer:
    container = getattr(project, contract_name, None)
    if container is None:
        raise ValueError(f"The project has no contract named '{contract_name}'.")
    return container


def format_balance(wei: int) -> str:
    """Formats a wei amount as native token units."""
    return f"{Web3.from_wei(wei, 'ether')} {NATIVE_CURRENCY}"


def explorer_address_url(address: str) -> str:
    return f"{OPN_EXPLORER_URL}/address/{address}"


def report_gas_enabled() -> bool:
    return os.environ.get(REPORT_GAS_ENVVAR, "").lower() == "true"


def constructor_params_filepath(filename: str) -> Path:
    """Deployment config for the connected network; local networks use the local configs."""
    network_dir = "local" if is_local_network() else OPN
    filepath = CONSTRUCTOR_PARAMS_DIR / network_dir / filename
    if not filepath.exists():
        raise ValueError(f"No deployment config '{filename}' for network '{network_dir}'.")
    return filepath
