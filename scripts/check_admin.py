#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from opn_contracts.admin import is_admin
from opn_contracts.constants import ADMIN_ROLE, DEFAULT_ADMIN_ROLE
from opn_contracts.errors import exit_on_error
from opn_contracts.options import (
    address_option,
    autosign_option,
    contract_option,
    manifest_option,
    roles_config_option,
)
from opn_contracts.params import Transactor
from opn_contracts.roles import deployed_addresses, ensure_self_admin, get_role_hash, has_role
from opn_contracts.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@contract_option
@address_option
@manifest_option
@roles_config_option
@autosign_option
@exit_on_error
def cli(network, account, contract_name, address, manifest_path, config_filepath, autosign):
    """
    Makes sure the account holds ADMIN_ROLE on a contract, granting it to itself if it can.
    With --address, only reports the admin roles held by that address.
    """
    addresses = deployed_addresses(
        chain_id=networks.provider.chain_id,
        account_address=account.address,
        manifest_filepath=manifest_path,
        config_filepath=config_filepath,
    )
    try:
        contract_address = addresses[contract_name]
    except KeyError:
        raise ValueError(f"No address known for {contract_name} on this network.")

    contract = get_contract_container(contract_name).at(contract_address)
    click.secho(f"Checking admin role on {contract_name} ({contract_address})", bold=True)

    if address:
        for role in (ADMIN_ROLE, DEFAULT_ADMIN_ROLE):
            held = has_role(contract, get_role_hash(contract, role), address)
            click.echo(f"  {address} has {role}: {held}")
    else:
        address = account.address
        transactor = Transactor(account, autosign=autosign)
        ensure_self_admin(transactor, contract)

    click.echo(f"Platform admin wallet: {'yes' if is_admin(address) else 'no'}")


if __name__ == "__main__":
    cli()
