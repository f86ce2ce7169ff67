from collections import OrderedDict
from types import SimpleNamespace

import pytest

from opn_contracts.constants import CONSTRUCTOR_PARAMS_DIR
from opn_contracts.errors import InsufficientBalance
from opn_contracts.params import (
    ConstructorParameters,
    ResolutionContext,
    _validate_constructor_args,
    _validate_method_args,
    apply_environment_overrides,
)
from opn_contracts.utils import _load_yaml
from tests.conftest import DEPLOYER, POSITION_NFT, REGISTRY, method_abi

USDC = "0x0000000000000000000000000000000000000001"


@pytest.fixture
def system_config():
    return {
        "deployment": {"chain_id": 403},
        "constants": {"USDC_ADDRESS": USDC, "FEE_RECIPIENT": "$deployer", "PLATFORM_FEE": 250},
        "existing": {"OPNAssetRegistry": REGISTRY},
        "contracts": [
            {"OPNPositionNFT": {"constructor": {"assetRegistry": "$OPNAssetRegistry"}}},
            {
                "OPNPrimaryMarket": {
                    "constructor": {
                        "assetRegistry": "$OPNAssetRegistry",
                        "positionNFT": "$OPNPositionNFT",
                        "feeRecipient": "$FEE_RECIPIENT",
                        "fees": ["$PLATFORM_FEE", 100],
                    }
                }
            },
            "OPNGovernance",
        ],
    }


def test_resolve_variables(system_config):
    parameters = ConstructorParameters.from_config(system_config)
    context = ResolutionContext(
        deployer_address=DEPLOYER,
        deployments={"OPNPositionNFT": SimpleNamespace(address=POSITION_NFT)},
        existing={"OPNAssetRegistry": REGISTRY},
    )

    resolved = parameters.resolve("OPNPrimaryMarket", context)

    assert resolved == OrderedDict(
        assetRegistry=REGISTRY,
        positionNFT=POSITION_NFT,
        feeRecipient=DEPLOYER,
        fees=[250, 100],
    )
    assert parameters.resolve("OPNGovernance", context) == OrderedDict()


def test_contract_not_deployed_yet(system_config):
    parameters = ConstructorParameters.from_config(system_config)
    context = ResolutionContext(deployer_address=DEPLOYER, existing={"OPNAssetRegistry": REGISTRY})
    with pytest.raises(ConstructorParameters.Invalid, match="OPNPositionNFT"):
        parameters.resolve("OPNPrimaryMarket", context)


def test_contract_not_in_config(system_config):
    parameters = ConstructorParameters.from_config(system_config)
    with pytest.raises(ConstructorParameters.Invalid):
        parameters.resolve("OPNSecondaryMarket", ResolutionContext(deployer_address=DEPLOYER))


def test_unknown_variables(system_config):
    system_config["contracts"][0]["OPNPositionNFT"]["constructor"]["usdc"] = "$USDC_TOKEN"
    with pytest.raises(ValueError, match="USDC_TOKEN"):
        ConstructorParameters.from_config(system_config)

    system_config["contracts"][0]["OPNPositionNFT"]["constructor"] = {"nft": "$OPNMystery"}
    with pytest.raises(ValueError, match="OPNMystery"):
        ConstructorParameters.from_config(system_config)


def test_environment_overrides(monkeypatch, system_config):
    override = "0x2222222222222222222222222222222222222222"
    monkeypatch.setenv("FEE_RECIPIENT", override)
    constants = apply_environment_overrides(system_config["constants"])
    assert constants["FEE_RECIPIENT"] == override
    assert constants["USDC_ADDRESS"] == USDC
    assert system_config["constants"]["FEE_RECIPIENT"] == "$deployer"

    parameters = ConstructorParameters.from_config(system_config, constants=constants)
    context = ResolutionContext(
        deployer_address=DEPLOYER,
        deployments={"OPNPositionNFT": SimpleNamespace(address=POSITION_NFT)},
        existing={"OPNAssetRegistry": REGISTRY},
    )
    assert parameters.resolve("OPNPrimaryMarket", context)["feeRecipient"] == override


def test_empty_environment_values_do_not_override(monkeypatch):
    monkeypatch.setenv("USDC_ADDRESS", "")
    assert apply_environment_overrides({"USDC_ADDRESS": USDC}) == {"USDC_ADDRESS": USDC}


def test_validate_constructor_args():
    abi_inputs = [SimpleNamespace(type="address"), SimpleNamespace(type="uint256")]
    _validate_constructor_args(
        "OPNPrimaryMarket", abi_inputs, OrderedDict(registry=REGISTRY, fee=250)
    )

    with pytest.raises(ConstructorParameters.Invalid, match="expects 2 argument"):
        _validate_constructor_args("OPNPrimaryMarket", abi_inputs, OrderedDict(fee=250))

    with pytest.raises(ConstructorParameters.Invalid, match="position 1"):
        _validate_constructor_args(
            "OPNPrimaryMarket", abi_inputs, OrderedDict(registry=REGISTRY, fee="lots")
        )


def test_validate_method_args():
    abis = [method_abi("setPositionNFTContract", "address")]
    assert _validate_method_args(abis, [POSITION_NFT]) == {"arg0": POSITION_NFT}
    with pytest.raises(ValueError, match="Could not find ABI"):
        _validate_method_args(abis, [POSITION_NFT, 1])


@pytest.mark.parametrize("filename", ["opn-system.yml", "opn-tokenization.yml"])
@pytest.mark.parametrize("network", ["opn", "local"])
def test_shipped_configs_resolve(network, filename):
    config = _load_yaml(CONSTRUCTOR_PARAMS_DIR / network / filename)
    parameters = ConstructorParameters.from_config(config)
    deployments = {
        name: SimpleNamespace(address=POSITION_NFT) for name in parameters.parameters.keys()
    }
    context = ResolutionContext(deployer_address=DEPLOYER, deployments=deployments)
    for contract_name in parameters.parameters:
        resolved = parameters.resolve(contract_name, context)
        assert not any(str(value).startswith("$") for value in resolved.values())


def test_fixed_contracts_config_uses_existing_addresses():
    config = _load_yaml(CONSTRUCTOR_PARAMS_DIR / "opn" / "fixed-contracts.yml")
    parameters = ConstructorParameters.from_config(config)
    context = ResolutionContext(
        deployer_address=DEPLOYER,
        deployments={"OPNPositionNFT": SimpleNamespace(address=POSITION_NFT)},
        existing=config["existing"],
    )
    resolved = parameters.resolve("OPNSecondaryMarket", context)
    assert resolved["positionNFT"] == POSITION_NFT
    assert resolved["assetRegistry"] == config["existing"]["OPNAssetRegistry"]
    assert resolved["feeRecipient"] == DEPLOYER


def test_check_balance(transactor, deployer_account):
    assert transactor.check_balance(minimum=10**20) == deployer_account.balance

    deployer_account.balance = 0
    with pytest.raises(InsufficientBalance):
        transactor.check_balance()
