from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple

import click
from ape.api import ReceiptAPI
from ape.contracts import ContractInstance
from ape.exceptions import ContractLogicError
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from opn_contracts.constants import ADMIN_ROLE, DEFAULT_ADMIN_ROLE
from opn_contracts.errors import MissingAdminPrivilege, RoleGrantFailed, is_access_control_error
from opn_contracts.manifest import read_manifest
from opn_contracts.networks import is_local_network
from opn_contracts.params import Transactor
from opn_contracts.utils import _load_yaml, get_contract_container

DEPLOYER_INDICATOR = "$deployer"


class RoleAssignment(NamedTuple):
    """A role that `grantee` should hold on `contract`."""

    contract: str
    role: str
    grantee: str
    address: ChecksumAddress

    @property
    def label(self) -> str:
        return f"{self.grantee} has {self.role} on {self.contract}"


class ReferenceAssignment(NamedTuple):
    """A contract-valued setting, read with `getter` and written with `setter`."""

    contract: str
    getter: str
    setter: str
    target: str
    address: ChecksumAddress


class RolesConfig(NamedTuple):
    chain_id: int
    contracts: Dict[str, ChecksumAddress]
    roles: List[RoleAssignment]
    references: List[ReferenceAssignment]


def _resolve_grantee(grantee: str, contracts: Dict[str, str], account_address: str) -> str:
    if grantee == DEPLOYER_INDICATOR:
        return to_checksum_address(account_address)
    if grantee in contracts:
        return contracts[grantee]
    try:
        return to_checksum_address(grantee)
    except ValueError:
        raise ValueError(f"'{grantee}' is neither a configured contract nor an address.")


def roles_config_from_dict(config: Dict, account_address: str) -> RolesConfig:
    deployment = config.get("deployment") or dict()
    chain_id = deployment.get("chain_id")
    if not chain_id:
        raise ValueError("chain_id is not set in roles config.")

    contracts = {
        name: to_checksum_address(address)
        for name, address in (config.get("contracts") or dict()).items()
    }

    roles = list()
    for entry in config.get("roles") or list():
        contract = entry["contract"]
        if contract not in contracts:
            raise ValueError(f"Role entry refers to unknown contract '{contract}'.")
        roles.append(
            RoleAssignment(
                contract=contract,
                role=entry["role"],
                grantee=entry["grantee"],
                address=_resolve_grantee(entry["grantee"], contracts, account_address),
            )
        )

    references = list()
    for entry in config.get("references") or list():
        contract = entry["contract"]
        if contract not in contracts:
            raise ValueError(f"Reference entry refers to unknown contract '{contract}'.")
        references.append(
            ReferenceAssignment(
                contract=contract,
                getter=entry["getter"],
                setter=entry["setter"],
                target=entry["target"],
                address=_resolve_grantee(entry["target"], contracts, account_address),
            )
        )

    return RolesConfig(
        chain_id=int(chain_id), contracts=contracts, roles=roles, references=references
    )


def load_roles_config(filepath: Path, account_address: str) -> RolesConfig:
    return roles_config_from_dict(_load_yaml(filepath), account_address=account_address)


def contracts_from_roles_config(
    config: RolesConfig, chain_id: int
) -> Dict[str, ContractInstance]:
    """Binds the configured addresses to their contract types."""
    if config.chain_id != chain_id and not is_local_network():
        raise ValueError(
            f"Roles config is for chain {config.chain_id}, connected to chain {chain_id}."
        )
    return {
        name: get_contract_container(name).at(address)
        for name, address in config.contracts.items()
    }


def deployed_addresses(
    chain_id: int,
    account_address: str,
    manifest_filepath: Optional[Path] = None,
    config_filepath: Optional[Path] = None,
) -> Dict[str, ChecksumAddress]:
    """Contract addresses from a deployment manifest, or from a roles config without one."""
    if manifest_filepath:
        manifest = read_manifest(manifest_filepath)
        if manifest.chain_id != chain_id:
            raise ValueError(
                f"Manifest is for chain {manifest.chain_id}, connected to chain {chain_id}."
            )
        return {name: to_checksum_address(a) for name, a in manifest.contracts.items()}
    if not config_filepath:
        raise ValueError("Either a manifest or a roles config is required.")
    config = load_roles_config(config_filepath, account_address=account_address)
    if config.chain_id != chain_id and not is_local_network():
        raise ValueError(
            f"Roles config is for chain {config.chain_id}, connected to chain {chain_id}."
        )
    return config.contracts


def get_role_hash(contract: ContractInstance, role: str) -> bytes:
    """Reads a role identifier (e.g. MINTER_ROLE()) from the contract."""
    try:
        role_getter = getattr(contract, role)
    except AttributeError:
        raise ValueError(f"{contract.contract_type.name} does not define {role}.")
    return role_getter()


def has_role(contract: ContractInstance, role_hash: bytes, address: str) -> bool:
    return bool(contract.hasRole(role_hash, address))


def _mark(held: bool) -> str:
    return click.style("✓", fg="green") if held else click.style("✗", fg="red")


def audit_roles(
    contracts: Dict[str, ContractInstance], assignments: List[RoleAssignment]
) -> List[Tuple[RoleAssignment, bool]]:
    """Reads each desired assignment from chain and prints whether it is held."""
    results = list()
    for assignment in assignments:
        contract = contracts[assignment.contract]
        role_hash = get_role_hash(contract, assignment.role)
        held = has_role(contract, role_hash, assignment.address)
        click.echo(f"  {_mark(held)} {assignment.label} ({assignment.address})")
        results.append((assignment, held))
    return results


def ensure_role(
    transactor: Transactor,
    contract: ContractInstance,
    role: str,
    address: str,
    label: Optional[str] = None,
    confirmations: int = 1,
) -> Optional[ReceiptAPI]:
    """
    Grants `role` to `address` unless it is already held. Returns the grant receipt,
    or None when nothing had to be done.
    """
    label = label or address
    role_hash = get_role_hash(contract, role)
    if has_role(contract, role_hash, address):
        click.secho(f"(i) {label} already has {role}", fg="green")
        return None

    click.secho(f"Granting {role} to {label}...", fg="yellow")
    try:
        receipt = transactor.transact(
            contract.grantRole, role_hash, address, required_confirmations=confirmations
        )
    except ContractLogicError as e:
        if is_access_control_error(e):
            raise MissingAdminPrivilege(
                f"{transactor.get_account().address} cannot grant {role} "
                f"on {contract.contract_type.name}."
            ) from e
        raise

    if receipt.failed:
        raise RoleGrantFailed(f"Grant of {role} to {label} failed in tx {receipt.txn_hash}.")
    if not has_role(contract, role_hash, address):
        raise RoleGrantFailed(f"{label} still lacks {role} after tx {receipt.txn_hash}.")

    click.secho(f"(i) {role} granted to {label}", fg="green")
    return receipt


def ensure_admins(
    transactor: Transactor,
    contract: ContractInstance,
    admins: List[Optional[str]],
    confirmations: int = 1,
) -> Dict[ChecksumAddress, Optional[ReceiptAPI]]:
    """
    Makes every wallet in `admins` hold ADMIN_ROLE on `contract`. Empty entries are
    skipped and repeated wallets are granted once.
    """
    receipts = dict()
    for admin in admins:
        if not admin:
            continue
        address = to_checksum_address(admin)
        if address in receipts:
            continue
        receipts[address] = ensure_role(
            transactor, contract, ADMIN_ROLE, address, confirmations=confirmations
        )
    return receipts


def ensure_reference(
    transactor: Transactor,
    contract: ContractInstance,
    getter: str,
    setter: str,
    address: str,
    confirmations: int = 1,
) -> Optional[ReceiptAPI]:
    """Points `contract.getter()` at `address`, transacting only when it differs."""
    current = getattr(contract, getter)()
    click.echo(f"  Current {getter}: {current}")
    if str(current).lower() == address.lower():
        click.secho(f"(i) {getter} already set to {address}", fg="green")
        return None

    click.secho(f"Updating {getter} to {address}...", fg="yellow")
    return transactor.transact(
        getattr(contract, setter), address, required_confirmations=confirmations
    )


def ensure_self_admin(transactor: Transactor, contract: ContractInstance) -> Optional[ReceiptAPI]:
    """
    Makes sure the transactor holds ADMIN_ROLE, granting it to itself
    when it holds DEFAULT_ADMIN_ROLE.
    """
    address = transactor.get_account().address
    admin_role = get_role_hash(contract, ADMIN_ROLE)
    default_admin_role = get_role_hash(contract, DEFAULT_ADMIN_ROLE)

    has_admin = has_role(contract, admin_role, address)
    has_default_admin = has_role(contract, default_admin_role, address)
    click.echo(f"  {_mark(has_admin)} {ADMIN_ROLE}")
    click.echo(f"  {_mark(has_default_admin)} {DEFAULT_ADMIN_ROLE}")

    if has_admin:
        click.secho(f"(i) {address} already has {ADMIN_ROLE}", fg="green")
        return None
    if not has_default_admin:
        raise MissingAdminPrivilege(
            f"{address} holds neither {ADMIN_ROLE} nor {DEFAULT_ADMIN_ROLE} on "
            f"{contract.contract_type.name}; it may not be the deploying wallet."
        )
    return ensure_role(transactor, contract, ADMIN_ROLE, address, label="this account")


def repair_roles(
    transactor: Transactor,
    contracts: Dict[str, ContractInstance],
    assignments: List[RoleAssignment],
    confirmations: int = 1,
) -> Dict[str, bool]:
    """
    Grants every missing assignment and re-reads all of them afterwards.
    A grant that fails is reported and left for the final audit, so the
    remaining assignments are still attempted.
    Returns the final state keyed by assignment label.
    """
    click.secho("\nChecking current roles...", bold=True)
    audit_roles(contracts, assignments)

    click.secho("\nGranting missing roles...", bold=True)
    for assignment in assignments:
        try:
            ensure_role(
                transactor,
                contracts[assignment.contract],
                assignment.role,
                assignment.address,
                label=assignment.grantee,
                confirmations=confirmations,
            )
        except (MissingAdminPrivilege, RoleGrantFailed) as e:
            click.secho(f"(!) {assignment.label}: {e}", fg="red")

    click.secho("\nVerifying roles...", bold=True)
    final = audit_roles(contracts, assignments)
    return {assignment.label: held for assignment, held in final}
