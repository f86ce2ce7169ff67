import pytest

from opn_contracts import explorer
from opn_contracts.explorer import CreationInfo, get_creation_info, recover_manifest
from tests.conftest import DEPLOYER, POSITION_NFT, REGISTRY

OTHER_DEPLOYER = "0x4444444444444444444444444444444444444444"

CREATIONS = {
    REGISTRY: {"hash": "0xaa", "blockNumber": "100", "from": DEPLOYER.lower()},
    POSITION_NFT: {"hash": "0xbb", "blockNumber": "105", "from": OTHER_DEPLOYER},
}


class FakeResponse:
    def __init__(self, data):
        self.data = data

    def raise_for_status(self):
        pass

    def json(self):
        return self.data


@pytest.fixture
def explorer_api(monkeypatch):
    requests_made = []

    def get(url, params):
        requests_made.append((url, params))
        creation = CREATIONS.get(params["address"])
        if creation is None:
            return FakeResponse({"status": "0", "message": "No transactions found", "result": []})
        return FakeResponse({"status": "1", "result": [creation, {"hash": "0xcc"}]})

    monkeypatch.setattr(explorer.requests, "get", get)
    return requests_made


def test_get_creation_info(explorer_api):
    info = get_creation_info(REGISTRY, api_key="secret", api_url="https://explorer/api")
    assert info == CreationInfo(tx_hash="0xaa", block_number=100, deployer=DEPLOYER)

    url, params = explorer_api[0]
    assert url == "https://explorer/api"
    assert params["action"] == "txlist"
    assert params["sort"] == "asc"
    assert params["apikey"] == "secret"


def test_get_creation_info_not_found(explorer_api):
    with pytest.raises(ValueError, match="Could not find contract creation"):
        get_creation_info(OTHER_DEPLOYER)


def test_recover_manifest(explorer_api, monkeypatch):
    monkeypatch.delenv("SAGE_EXPLORER_API_KEY", raising=False)
    manifest = recover_manifest(
        network="mainnet",
        chain_id=403,
        contracts={"OPNAssetRegistry": REGISTRY, "OPNPositionNFT": POSITION_NFT},
    )
    assert manifest.block_number == 105
    assert manifest.deployer == OTHER_DEPLOYER
    assert manifest.contracts == {"OPNAssetRegistry": REGISTRY, "OPNPositionNFT": POSITION_NFT}
    assert manifest.configuration == {}
    assert all("apikey" not in params for _, params in explorer_api)


def test_recover_manifest_without_contracts():
    with pytest.raises(ValueError):
        recover_manifest(network="mainnet", chain_id=403, contracts={})
