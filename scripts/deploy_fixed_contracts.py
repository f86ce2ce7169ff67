#!/usr/bin/python3

import click
from ape import networks, project
from ape.exceptions import ContractLogicError

from opn_contracts.constants import (
    ASSET_REGISTRY,
    GOVERNANCE,
    MINTER_ROLE,
    PRIMARY_MARKET,
    SECONDARY_MARKET,
)
from opn_contracts.errors import exit_on_error
from opn_contracts.params import Deployer
from opn_contracts.roles import ensure_reference, ensure_role, get_role_hash, has_role
from opn_contracts.summary import print_deployment_summary
from opn_contracts.utils import constructor_params_filepath, get_contract_container

VERIFY = False


@exit_on_error
def main():
    """
    This script redeploys OPNPositionNFT and OPNSecondaryMarket with the
    purchase price fix and rewires them into the live system.
    """

    deployer = Deployer.from_yaml(
        filepath=constructor_params_filepath("fixed-contracts.yml"), verify=VERIFY
    )
    confirmations = deployer.confirmations

    existing = {
        name: deployer.existing(name) for name in (ASSET_REGISTRY, PRIMARY_MARKET, GOVERNANCE)
    }
    print("Using existing contracts:")
    for name, address in existing.items():
        print(f"\t{name}: {address}")

    position_nft = deployer.deploy(project.OPNPositionNFT)
    secondary_market = deployer.deploy(project.OPNSecondaryMarket)

    click.secho("\nGranting roles...", bold=True)
    grantees = {
        PRIMARY_MARKET: existing[PRIMARY_MARKET],
        SECONDARY_MARKET: secondary_market.address,
    }
    for label, address in grantees.items():
        ensure_role(
            deployer, position_nft, MINTER_ROLE, address, label=label, confirmations=confirmations
        )

    click.secho("\nUpdating AssetRegistry...", bold=True)
    asset_registry = get_contract_container(ASSET_REGISTRY).at(existing[ASSET_REGISTRY])
    try:
        ensure_reference(
            deployer,
            asset_registry,
            getter="positionNFTContract",
            setter="setPositionNFTContract",
            address=position_nft.address,
            confirmations=confirmations,
        )
    except ContractLogicError as e:
        click.secho(f"(!) Could not update AssetRegistry (may need admin role): {e}", fg="yellow")
        click.secho(
            f"    You'll need to manually call "
            f"assetRegistry.setPositionNFTContract('{position_nft.address}')",
            fg="yellow",
        )

    click.secho("\nVerifying roles...", bold=True)
    minter_role = get_role_hash(position_nft, MINTER_ROLE)
    roles = {
        "primaryMarketHasMinterRole": has_role(
            position_nft, minter_role, grantees[PRIMARY_MARKET]
        ),
        "secondaryMarketHasMinterRole": has_role(
            position_nft, minter_role, grantees[SECONDARY_MARKET]
        ),
    }
    for label, held in roles.items():
        print(f"\t{label}: {held}")

    deployer.finalize(configuration=dict(), roles=roles, contracts=existing)
    print_deployment_summary(deployer.manifest, gas_price=networks.provider.gas_price)
