import pytest

from opn_contracts.constants import ADMIN_ROLE, MINTER_ROLE, OPN_CHAIN_ID
from opn_contracts.manifest import DeploymentManifest, write_manifest
from opn_contracts.options import DEFAULT_ROLES_CONFIG
from opn_contracts.roles import deployed_addresses, load_roles_config, roles_config_from_dict
from tests.conftest import DEPLOYER, POSITION_NFT, PRIMARY_MARKET, REGISTRY


@pytest.fixture
def roles_config():
    return {
        "deployment": {"chain_id": 403},
        "contracts": {
            "OPNAssetRegistry": REGISTRY.lower(),
            "OPNPositionNFT": POSITION_NFT,
            "OPNPrimaryMarket": PRIMARY_MARKET,
        },
        "roles": [
            {"contract": "OPNPositionNFT", "role": MINTER_ROLE, "grantee": "OPNPrimaryMarket"},
            {"contract": "OPNAssetRegistry", "role": ADMIN_ROLE, "grantee": "$deployer"},
        ],
        "references": [
            {
                "contract": "OPNAssetRegistry",
                "getter": "positionNFTContract",
                "setter": "setPositionNFTContract",
                "target": "OPNPositionNFT",
            }
        ],
    }


def test_roles_config_from_dict(roles_config):
    config = roles_config_from_dict(roles_config, account_address=DEPLOYER)

    assert config.chain_id == 403
    assert config.contracts["OPNAssetRegistry"] == REGISTRY
    minter, admin = config.roles
    assert minter.address == PRIMARY_MARKET
    assert minter.label == f"OPNPrimaryMarket has {MINTER_ROLE} on OPNPositionNFT"
    assert admin.address == DEPLOYER
    (reference,) = config.references
    assert reference.address == POSITION_NFT


def test_roles_config_with_literal_grantee(roles_config):
    roles_config["roles"] = [
        {"contract": "OPNPositionNFT", "role": MINTER_ROLE, "grantee": PRIMARY_MARKET.lower()}
    ]
    config = roles_config_from_dict(roles_config, account_address=DEPLOYER)
    assert config.roles[0].address == PRIMARY_MARKET


def test_roles_config_rejects_unknown_names(roles_config):
    roles_config["roles"].append(
        {"contract": "OPNPositionNFT", "role": MINTER_ROLE, "grantee": "OPNMystery"}
    )
    with pytest.raises(ValueError, match="neither a configured contract nor an address"):
        roles_config_from_dict(roles_config, account_address=DEPLOYER)

    roles_config["roles"] = [
        {"contract": "OPNMystery", "role": MINTER_ROLE, "grantee": "$deployer"}
    ]
    with pytest.raises(ValueError, match="unknown contract"):
        roles_config_from_dict(roles_config, account_address=DEPLOYER)


def test_roles_config_requires_chain_id(roles_config):
    del roles_config["deployment"]
    with pytest.raises(ValueError, match="chain_id"):
        roles_config_from_dict(roles_config, account_address=DEPLOYER)


def test_shipped_roles_config():
    config = load_roles_config(DEFAULT_ROLES_CONFIG, account_address=DEPLOYER)
    assert config.chain_id == OPN_CHAIN_ID
    assert len(config.contracts) == 5
    assert {(r.contract, r.role, r.grantee) for r in config.roles} == {
        ("OPNPositionNFT", MINTER_ROLE, "OPNPrimaryMarket"),
        ("OPNPositionNFT", MINTER_ROLE, "OPNSecondaryMarket"),
        ("OPNAssetRegistry", ADMIN_ROLE, "OPNPrimaryMarket"),
    }
    assert config.references[0].address == config.contracts["OPNPositionNFT"]


def test_deployed_addresses_prefers_manifest(tmp_path):
    manifest = DeploymentManifest(
        network="mainnet",
        chain_id=OPN_CHAIN_ID,
        contracts={"OPNAssetRegistry": REGISTRY},
        configuration={},
        deployer=DEPLOYER,
        block_number=1,
        timestamp="2025-01-01T00:00:00.000Z",
    )
    filepath = write_manifest(manifest, directory=tmp_path)

    addresses = deployed_addresses(
        chain_id=OPN_CHAIN_ID,
        account_address=DEPLOYER,
        manifest_filepath=filepath,
        config_filepath=DEFAULT_ROLES_CONFIG,
    )
    assert addresses == {"OPNAssetRegistry": REGISTRY}

    with pytest.raises(ValueError, match="Manifest is for chain"):
        deployed_addresses(chain_id=1, account_address=DEPLOYER, manifest_filepath=filepath)


def test_deployed_addresses_from_roles_config():
    addresses = deployed_addresses(
        chain_id=OPN_CHAIN_ID, account_address=DEPLOYER, config_filepath=DEFAULT_ROLES_CONFIG
    )
    assert "OPNGovernance" in addresses
