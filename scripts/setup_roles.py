#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option
from ape.exceptions import ContractLogicError

from opn_contracts.errors import exit_on_error
from opn_contracts.options import autosign_option, roles_config_option
from opn_contracts.params import Transactor
from opn_contracts.roles import (
    contracts_from_roles_config,
    ensure_reference,
    load_roles_config,
    repair_roles,
)


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@roles_config_option
@autosign_option
@exit_on_error
def cli(network, account, config_filepath, autosign):
    """Grants every role listed in the roles config that is not yet held on-chain."""
    transactor = Transactor(account, autosign=autosign)
    transactor.check_balance()

    config = load_roles_config(config_filepath, account_address=account.address)
    contracts = contracts_from_roles_config(config, chain_id=networks.provider.chain_id)

    click.secho("Contract addresses:", bold=True)
    for name, contract in contracts.items():
        click.echo(f"  {name}: {contract.address}")

    final = repair_roles(transactor, contracts, config.roles)

    for reference in config.references:
        click.secho(f"\nChecking {reference.contract}.{reference.getter}...", bold=True)
        try:
            ensure_reference(
                transactor,
                contracts[reference.contract],
                getter=reference.getter,
                setter=reference.setter,
                address=reference.address,
            )
        except ContractLogicError as e:
            click.secho(f"(!) Could not update {reference.getter}: {e}", fg="yellow")

    if all(final.values()):
        click.secho("\nAll roles configured successfully!", fg="green")
    else:
        missing = [label for label, held in final.items() if not held]
        click.secho(f"\nSome roles are still missing: {', '.join(missing)}", fg="red")
        raise click.exceptions.Exit(1)


if __name__ == "__main__":
    cli()
