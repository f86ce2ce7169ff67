#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from opn_contracts.constants import ADMIN_ROLE, ASSET_REGISTRY, PRIMARY_MARKET
from opn_contracts.errors import exit_on_error
from opn_contracts.options import autosign_option, roles_config_option
from opn_contracts.params import Transactor
from opn_contracts.roles import (
    contracts_from_roles_config,
    ensure_role,
    get_role_hash,
    has_role,
    load_roles_config,
)

CONFIRMATIONS = 2


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@roles_config_option
@autosign_option
@exit_on_error
def cli(network, account, config_filepath, autosign):
    """
    Grants ADMIN_ROLE on the asset registry to the primary market,
    which needs it to record sales.
    """
    transactor = Transactor(account, autosign=autosign)
    config = load_roles_config(config_filepath, account_address=account.address)
    contracts = contracts_from_roles_config(config, chain_id=networks.provider.chain_id)

    asset_registry = contracts[ASSET_REGISTRY]
    primary_market = contracts[PRIMARY_MARKET]
    print(f"AssetRegistry: {asset_registry.address}")
    print(f"PrimaryMarket: {primary_market.address}")

    ensure_role(
        transactor,
        asset_registry,
        ADMIN_ROLE,
        primary_market.address,
        label=PRIMARY_MARKET,
        confirmations=CONFIRMATIONS,
    )

    admin_role = get_role_hash(asset_registry, ADMIN_ROLE)
    if has_role(asset_registry, admin_role, primary_market.address):
        click.secho("PrimaryMarket can now record sales in AssetRegistry.", fg="green")


if __name__ == "__main__":
    cli()
