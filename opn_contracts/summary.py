import json
import os
from typing import Optional

import click
import requests

from opn_contracts.constants import COINMARKETCAP_API_KEY_ENVVAR
from opn_contracts.frontend import frontend_env
from opn_contracts.manifest import DeploymentManifest
from opn_contracts.market import get_usd_price, usd_cost
from opn_contracts.utils import explorer_address_url, report_gas_enabled

RULE = "=" * 70
THIN_RULE = "-" * 70


def print_gas_table(manifest: DeploymentManifest, gas_price: Optional[int] = None) -> None:
    """
    Prints the gas used per contract. With a gas price and a CoinMarketCap key,
    an estimated USD cost column is added.
    """
    gas_used = manifest.gas_used or dict()
    usd_price = None
    if gas_price and os.environ.get(COINMARKETCAP_API_KEY_ENVVAR):
        try:
            usd_price = get_usd_price()
        except (requests.RequestException, ValueError) as e:
            click.secho(f"(!) No USD price available: {e}", fg="yellow")

    click.secho("\nTOTAL GAS USED:", bold=True)
    click.echo(THIN_RULE)
    for name, gas in gas_used.items():
        line = f"{name:<25} {gas:>12}"
        if usd_price is not None:
            line += f"  ${usd_cost(gas, gas_price, usd_price):.2f}"
        click.echo(line)
    click.echo(THIN_RULE)
    total = sum(gas_used.values())
    line = f"{'TOTAL':<25} {total:>12}"
    if usd_price is not None:
        line += f"  ${usd_cost(total, gas_price, usd_price):.2f}"
    click.echo(line)


def print_deployment_summary(manifest: DeploymentManifest, gas_price: Optional[int] = None) -> None:
    click.echo(f"\n{RULE}")
    click.secho("DEPLOYMENT COMPLETED SUCCESSFULLY!", fg="green", bold=True)
    click.echo(RULE)

    click.secho("\nDEPLOYED CONTRACTS:", bold=True)
    click.echo(THIN_RULE)
    for name, address in manifest.contracts.items():
        click.echo(f"{name:<25} {address}")

    if report_gas_enabled():
        print_gas_table(manifest, gas_price=gas_price)

    click.secho("\nUPDATE YOUR FRONTEND .ENV FILE:", bold=True)
    click.echo(THIN_RULE)
    for key, value in frontend_env(manifest).items():
        click.echo(f"{key}={value}")

    click.secho("\nEXPLORER LINKS:", bold=True)
    click.echo(THIN_RULE)
    for name, address in manifest.contracts.items():
        click.echo(f"{name}:\n{explorer_address_url(address)}\n")


def print_manifest(manifest: DeploymentManifest) -> None:
    click.secho("\nDeployment Summary:", bold=True)
    click.echo(json.dumps(manifest.to_json_dict(), indent=2))
