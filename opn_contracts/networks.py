from ape import networks

from opn_contracts.constants import LOCAL_NETWORKS


def is_local_network() -> bool:
    """Returns True when connected to a local development network."""
    return networks.provider.network.name in LOCAL_NETWORKS
