from pathlib import Path

import click

from opn_contracts.constants import CONSTRUCTOR_PARAMS_DIR, OPN_SYSTEM_CONTRACTS, TOKENIZATION
from opn_contracts.types import ChecksumAddress

DEFAULT_ROLES_CONFIG = CONSTRUCTOR_PARAMS_DIR / "opn" / "roles.yml"


roles_config_option = click.option(
    "--config",
    "-c",
    "config_filepath",
    help="Roles config listing contract addresses and desired role assignments.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_ROLES_CONFIG,
    show_default=True,
)

contract_option = click.option(
    "--contract",
    "-k",
    "contract_name",
    help="Name of the access-controlled contract.",
    type=click.Choice([TOKENIZATION, *OPN_SYSTEM_CONTRACTS]),
    required=True,
)

address_option = click.option(
    "--address",
    "-a",
    help="Account address to check or grant.",
    type=ChecksumAddress(),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

manifest_option = click.option(
    "--manifest",
    "-m",
    "manifest_path",
    help="Deployment manifest; defaults to the manifest of the connected network.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)
