#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option
from web3 import Web3

from opn_contracts.constants import ASSET_REGISTRY
from opn_contracts.errors import exit_on_error
from opn_contracts.manifest import contract_from_manifest, manifest_filepath, read_manifest
from opn_contracts.options import autosign_option, manifest_option
from opn_contracts.params import Transactor
from opn_contracts.utils import format_balance

TEST_ASSET = dict(
    asset_type="Real Estate",
    asset_name="Test Property - Luxury Apartment",
    asset_description="Test asset for deployment verification",
    main_image_url="https://example.com/image.jpg",
    metadata_url="https://example.com/metadata.json",
    total_supply=1000,
    price_per_token=Web3.to_wei(0.1, "ether"),
    min_purchase_amount=10,
    max_purchase_amount=100,
    max_positions_per_user=5,
)


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@manifest_option
@autosign_option
@exit_on_error
def cli(network, account, manifest_path, autosign):
    """Creates a fixed-price test asset on a deployed registry."""
    network_name = networks.provider.network.name
    filepath = manifest_path or manifest_filepath(network=network_name)
    if not filepath.exists():
        raise click.FileError(str(filepath), hint="deployment manifest not found")

    manifest = read_manifest(filepath)
    asset_registry = contract_from_manifest(
        manifest, ASSET_REGISTRY, chain_id=networks.provider.chain_id, filepath=filepath
    )

    transactor = Transactor(account, autosign=autosign)
    click.secho("Creating test asset (Fixed Model)...", bold=True)
    receipt = transactor.transact(asset_registry.createFixedAsset, *TEST_ASSET.values())

    logs = receipt.decode_logs(asset_registry.AssetCreated)
    if not logs:
        click.secho("(!) Asset created but couldn't find AssetCreated event", fg="yellow")
        return

    asset_id = list(logs[0].event_arguments.values())[0]
    asset = asset_registry.assets(asset_id)
    click.secho(f"\nAsset created successfully! Asset ID: {asset_id}", fg="green")
    print(
        f"- Creator: {asset.creator}",
        f"- Name: {asset.assetName}",
        f"- Type: {asset.assetType}",
        f"- Total Supply: {asset.totalSupply} tokens",
        f"- Price per Token: {format_balance(asset.pricePerToken)}",
        f"- Min Purchase: {asset.minPurchaseAmount} tokens",
        f"- Max Purchase: {asset.maxPurchaseAmount} tokens",
        f"- Is Active: {asset.isActive}",
        sep="\n",
    )


if __name__ == "__main__":
    cli()
