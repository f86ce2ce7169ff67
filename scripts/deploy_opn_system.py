#!/usr/bin/python3

import click
from ape import networks, project
from ape.exceptions import ContractLogicError
from eth_utils import to_checksum_address

from opn_contracts.constants import MINTER_ROLE, PRIMARY_MARKET, SECONDARY_MARKET
from opn_contracts.errors import exit_on_error
from opn_contracts.params import Deployer
from opn_contracts.roles import ensure_role
from opn_contracts.summary import print_deployment_summary
from opn_contracts.utils import constructor_params_filepath

VERIFY = False


@exit_on_error
def main():
    """
    This script deploys the five-contract OPN system and wires it together:
    AssetRegistry <-> PositionNFT, minter roles for both markets, registry admin.
    """

    deployer = Deployer.from_yaml(
        filepath=constructor_params_filepath("opn-system.yml"), verify=VERIFY
    )
    confirmations = deployer.confirmations

    asset_registry = deployer.deploy(project.OPNAssetRegistry)
    position_nft = deployer.deploy(project.OPNPositionNFT)

    click.secho("\nLinking AssetRegistry <-> PositionNFT...", bold=True)
    deployer.transact(
        asset_registry.setPositionNFTContract,
        position_nft.address,
        required_confirmations=confirmations,
    )

    primary_market = deployer.deploy(project.OPNPrimaryMarket)
    ensure_role(
        deployer,
        position_nft,
        MINTER_ROLE,
        primary_market.address,
        label=PRIMARY_MARKET,
        confirmations=confirmations,
    )

    secondary_market = deployer.deploy(project.OPNSecondaryMarket)
    ensure_role(
        deployer,
        position_nft,
        MINTER_ROLE,
        secondary_market.address,
        label=SECONDARY_MARKET,
        confirmations=confirmations,
    )

    _ = deployer.deploy(project.OPNGovernance)

    click.secho("\nSetting up admin roles...", bold=True)
    admin_wallet = to_checksum_address(deployer.constant("ADMIN_WALLET"))
    if admin_wallet != deployer.get_account().address:
        print(f"Adding admin to AssetRegistry: {admin_wallet}")
        try:
            deployer.transact(
                asset_registry.addAdmin, admin_wallet, required_confirmations=confirmations
            )
        except ContractLogicError as e:
            # addAdmin reverts for wallets that are already admins
            click.secho(f"(!) Admin might already exist: {e}", fg="yellow")
    else:
        print("(i) Deployer is already admin")

    configuration = {
        "usdcAddress": deployer.constant("USDC_ADDRESS"),
        "feeRecipient": deployer.constant("FEE_RECIPIENT"),
        "adminWallet": admin_wallet,
        "platformFee": str(deployer.constant("PLATFORM_FEE")),
        "marketplaceFee": str(deployer.constant("MARKETPLACE_FEE")),
        "approvalThreshold": str(deployer.constant("APPROVAL_THRESHOLD")),
        "minVotingPeriod": deployer.constant("MIN_VOTING_PERIOD"),
        "maxVotingPeriod": deployer.constant("MAX_VOTING_PERIOD"),
    }
    deployer.finalize(configuration=configuration)

    print_deployment_summary(deployer.manifest, gas_price=networks.provider.gas_price)
    click.secho("System is ready for testing!", fg="green")
