#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option
from ape.utils import ZERO_ADDRESS

from opn_contracts.constants import OPN_EXPLORER_API_URL
from opn_contracts.errors import exit_on_error
from opn_contracts.explorer import recover_manifest
from opn_contracts.manifest import manifest_filepath, write_manifest
from opn_contracts.options import roles_config_option
from opn_contracts.roles import load_roles_config
from opn_contracts.summary import print_manifest


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@roles_config_option
@click.option(
    "--api-url",
    help="Block explorer API endpoint.",
    type=str,
    default=OPN_EXPLORER_API_URL,
    show_default=True,
)
@exit_on_error
def cli(network, config_filepath, api_url):
    """Rebuilds the deployment manifest of live contracts from block explorer data."""
    # only the contract addresses are used, grantees are irrelevant here
    config = load_roles_config(config_filepath, account_address=ZERO_ADDRESS)
    network_name = networks.provider.network.name
    chain_id = networks.provider.chain_id
    if config.chain_id != chain_id:
        raise ValueError(f"Roles config is for chain {config.chain_id}, not {chain_id}.")

    filepath = manifest_filepath(network=network_name)
    if filepath.exists():
        click.confirm(f"{filepath} exists; overwrite it?", abort=True)

    manifest = recover_manifest(
        network=network_name, chain_id=chain_id, contracts=config.contracts, api_url=api_url
    )
    write_manifest(manifest)
    print_manifest(manifest)
    click.secho(f"(i) Deployment manifest written to {filepath}", fg="green")


if __name__ == "__main__":
    cli()
