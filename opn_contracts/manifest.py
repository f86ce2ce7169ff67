import json
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from ape.contracts import ContractInstance
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from opn_contracts.constants import DEFAULT_MANIFEST_NAME, DEPLOYMENTS_DIR, MANIFEST_VERSION
from opn_contracts.utils import _load_json, get_contract_container

ContractName = str

STANDARD_MANIFEST_JSON_FORMAT = {"indent": 2}


class DeploymentManifest(NamedTuple):
    """The record of a single deployment run on a single network."""

    network: str
    chain_id: int
    contracts: Dict[ContractName, ChecksumAddress]
    configuration: Dict[str, Any]
    deployer: ChecksumAddress
    block_number: int
    timestamp: str
    gas_used: Optional[Dict[ContractName, int]] = None
    roles: Optional[Dict[str, bool]] = None
    version: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        data = OrderedDict(
            network=self.network,
            chainId=int(self.chain_id),
            contracts=dict(self.contracts),
            configuration=dict(self.configuration),
            deployer=self.deployer,
            blockNumber=int(self.block_number),
            timestamp=self.timestamp,
        )
        if self.gas_used:
            # stringified, big totals do not survive JS number parsing
            data["gasUsed"] = {name: str(gas) for name, gas in self.gas_used.items()}
        if self.roles is not None:
            data["roles"] = dict(self.roles)
        if self.version:
            data["version"] = self.version
        return data

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "DeploymentManifest":
        gas_used = data.get("gasUsed")
        return cls(
            network=data["network"],
            chain_id=int(data["chainId"]),
            contracts=dict(data["contracts"]),
            configuration=dict(data.get("configuration", {})),
            deployer=data["deployer"],
            block_number=int(data["blockNumber"]),
            timestamp=data["timestamp"],
            gas_used={k: int(v) for k, v in gas_used.items()} if gas_used else None,
            roles=data.get("roles"),
            version=data.get("version"),
        )


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp, millisecond precision, 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def manifest_filepath(
    network: str, directory: Path = DEPLOYMENTS_DIR, name: str = DEFAULT_MANIFEST_NAME
) -> Path:
    return Path(directory) / f"{network}-{name}.json"


def manifest_from_ape_deployments(
    deployments: Dict[ContractName, ContractInstance],
    deployer: str,
    network: str,
    chain_id: int,
    block_number: int,
    configuration: Dict[str, Any],
    extra_contracts: Optional[Dict[ContractName, str]] = None,
    gas_used: Optional[Dict[ContractName, int]] = None,
    roles: Optional[Dict[str, bool]] = None,
) -> DeploymentManifest:
    """
    Builds a manifest from the contract instances returned by ape deployments.
    `extra_contracts` are pre-existing contracts the deployment was wired to.
    """
    contracts = OrderedDict()
    for name, instance in deployments.items():
        contracts[name] = to_checksum_address(instance.address)
    for name, address in (extra_contracts or dict()).items():
        contracts.setdefault(name, to_checksum_address(address))

    return DeploymentManifest(
        network=network,
        chain_id=chain_id,
        contracts=contracts,
        configuration=configuration,
        deployer=to_checksum_address(deployer),
        block_number=block_number,
        timestamp=utc_timestamp(),
        gas_used=gas_used or None,
        roles=roles,
        version=MANIFEST_VERSION,
    )


def write_manifest(
    manifest: DeploymentManifest,
    directory: Path = DEPLOYMENTS_DIR,
    name: str = DEFAULT_MANIFEST_NAME,
) -> Path:
    """Writes the manifest, replacing any earlier manifest for the same network and name."""
    filepath = manifest_filepath(network=manifest.network, directory=directory, name=name)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(manifest.to_json_dict(), file, **STANDARD_MANIFEST_JSON_FORMAT)
    return filepath


def read_manifest(filepath: Path) -> DeploymentManifest:
    return DeploymentManifest.from_json_dict(_load_json(filepath))


def contracts_from_manifest(
    manifest: DeploymentManifest, chain_id: int
) -> Dict[ContractName, ContractInstance]:
    """Returns contract instances for the addresses recorded in a manifest."""
    if manifest.chain_id != chain_id:
        raise ValueError(
            f"Manifest for chain {manifest.chain_id} cannot be used on chain {chain_id}."
        )
    return {
        name: get_contract_container(name).at(address)
        for name, address in manifest.contracts.items()
    }


def contract_from_manifest(
    manifest: DeploymentManifest,
    contract_name: ContractName,
    chain_id: int,
    filepath: Optional[Path] = None,
) -> ContractInstance:
    """Returns the instance of one contract recorded in a manifest."""
    if manifest.chain_id != chain_id:
        raise ValueError(
            f"Manifest for chain {manifest.chain_id} cannot be used on chain {chain_id}."
        )
    if contract_name not in manifest.contracts:
        source = filepath or f"The {manifest.network} manifest"
        listed = ", ".join(manifest.contracts) or "nothing"
        raise ValueError(f"{source} does not record {contract_name} (it lists {listed}).")
    return get_contract_container(contract_name).at(manifest.contracts[contract_name])
