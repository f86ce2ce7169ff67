#!/usr/bin/python3

import os

import click
from ape import networks, project

from opn_contracts.constants import ADDITIONAL_ADMIN_ENVVAR, ADMIN_ROLE
from opn_contracts.errors import exit_on_error
from opn_contracts.params import Deployer
from opn_contracts.roles import ensure_admins
from opn_contracts.summary import print_deployment_summary, print_manifest
from opn_contracts.utils import constructor_params_filepath

VERIFY = False


@exit_on_error
def main():
    """
    This script deploys the standalone OPNTokenization contract (no KYC registry).
    """

    deployer = Deployer.from_yaml(
        filepath=constructor_params_filepath("opn-tokenization.yml"), verify=VERIFY
    )

    tokenization = deployer.deploy(project.OPNTokenization)

    click.secho("\nSetting up admin roles...", bold=True)
    admin_wallet = deployer.constant("ADMIN_WALLET")
    admins = [admin_wallet, os.environ.get(ADDITIONAL_ADMIN_ENVVAR)]
    for address in ensure_admins(
        deployer, tokenization, admins, confirmations=deployer.confirmations
    ):
        print(f"(i) {address} holds {ADMIN_ROLE}")

    configuration = {
        "baseURI": deployer.constant("BASE_URI"),
        "feeRecipient": deployer.constant("FEE_RECIPIENT"),
        "platformFee": str(deployer.constant("PLATFORM_FEE")),
        "adminWallet": admin_wallet,
    }
    deployer.finalize(configuration=configuration)

    print_manifest(deployer.manifest)
    print_deployment_summary(deployer.manifest, gas_price=networks.provider.gas_price)
