#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from opn_contracts.errors import exit_on_error
from opn_contracts.manifest import contracts_from_manifest, manifest_filepath, read_manifest
from opn_contracts.options import manifest_option
from opn_contracts.utils import check_explorer_plugin, verify_contracts


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@manifest_option
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify; all contracts in the manifest when omitted.",
    type=click.STRING,
    multiple=True,
)
@exit_on_error
def cli(network, manifest_path, contract_names):
    """Publishes deployed contract sources to the block explorer."""
    check_explorer_plugin()
    filepath = manifest_path or manifest_filepath(network=networks.provider.network.name)
    chain_id = networks.provider.chain_id
    contracts = contracts_from_manifest(read_manifest(filepath), chain_id=chain_id)

    contract_instances = []
    for contract_name in contract_names or contracts.keys():
        try:
            contract_instances.append(contracts[contract_name])
        except KeyError:
            raise ValueError(
                f"Contract '{contract_name}' not found in manifest, '{filepath}', "
                f"for chain {chain_id}"
            )

    verify_contracts(contract_instances)


if __name__ == "__main__":
    cli()
