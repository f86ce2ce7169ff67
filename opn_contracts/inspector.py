from typing import NamedTuple

import click
from ape.api import AccountAPI, ProviderAPI

from opn_contracts.constants import MIN_DEPLOYMENT_BALANCE
from opn_contracts.utils import format_balance


class ReadinessReport(NamedTuple):
    address: str
    balance: int
    network: str
    chain_id: int
    block_number: int
    gas_price: int
    minimum_balance: int = MIN_DEPLOYMENT_BALANCE

    @property
    def sufficient(self) -> bool:
        return self.balance > self.minimum_balance


def inspect(
    account: AccountAPI, provider: ProviderAPI, minimum_balance: int = MIN_DEPLOYMENT_BALANCE
) -> ReadinessReport:
    """Reads the account balance and chain metadata. Nothing is sent."""
    return ReadinessReport(
        address=account.address,
        balance=account.balance,
        network=provider.network.name,
        chain_id=provider.chain_id,
        block_number=provider.get_block("latest").number,
        gas_price=provider.gas_price,
        minimum_balance=minimum_balance,
    )


def print_report(report: ReadinessReport) -> None:
    click.secho("Checking Account Balance", bold=True)
    click.echo(f"Network: {report.network}")
    click.echo("=" * 50)
    click.echo(f"\nAccount: {report.address}")
    click.echo(f"Balance: {format_balance(report.balance)}")

    if report.sufficient:
        click.secho("Sufficient balance for deployment", fg="green")
    else:
        click.secho("Balance might be insufficient", fg="yellow")
        click.secho(
            f"Recommended: at least {format_balance(report.minimum_balance)} for gas", fg="yellow"
        )

    click.echo("\nNetwork Info:")
    click.echo(f"- Chain ID: {report.chain_id}")
    click.echo(f"- Network Name: {report.network}")
    click.echo(f"- Current Block: {report.block_number}")
    click.echo(f"- Gas Price: {report.gas_price}")
