#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from opn_contracts.constants import MIN_DEPLOYMENT_BALANCE
from opn_contracts.errors import exit_on_error
from opn_contracts.inspector import inspect, print_report
from opn_contracts.types import WeiAmount


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@click.option(
    "--min-balance",
    help="Balance below which a deployment is considered underfunded (wei, or e.g. '0.5 OPN').",
    type=WeiAmount(),
    default=MIN_DEPLOYMENT_BALANCE,
    show_default=True,
)
@exit_on_error
def cli(network, account, min_balance):
    """Reports the account balance and whether the network is ready for a deployment."""
    report = inspect(account=account, provider=networks.provider, minimum_balance=min_balance)
    print_report(report)
    click.secho("\nCheck complete!", fg="green")


if __name__ == "__main__":
    cli()
