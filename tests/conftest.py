import os
from types import SimpleNamespace

import pytest
from ape.exceptions import ContractLogicError, CustomError
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from ethpm_types.abi import ErrorABI
from web3 import Web3

from opn_contracts.constants import ADMIN_ROLE, DEFAULT_ADMIN_ROLE, MINTER_ROLE
from opn_contracts.params import Transactor

DEPLOYER = "0x1111111111111111111111111111111111111111"
REGISTRY = to_checksum_address("0x02C24BC4094F028796Fec1FEBeF331bfc476400C")
PRIMARY_MARKET = to_checksum_address("0xb4De64Ba962dfc5F4912C0B84b14ed7073C7A8D4")
SECONDARY_MARKET = to_checksum_address("0x7939cd0FE1596c424945DC48533f51d1dE546b7C")
POSITION_NFT = to_checksum_address("0x99db2D8c1674Ee2C4957233BC71Cc4C264Da88a3")

ROLE_HASHES = {
    DEFAULT_ADMIN_ROLE: b"\x00" * 32,
    ADMIN_ROLE: bytes(Web3.keccak(text=ADMIN_ROLE)),
    MINTER_ROLE: bytes(Web3.keccak(text=MINTER_ROLE)),
}


def access_control_error_message(address, role=None):
    role = role or b"\x00" * 32
    return f"AccessControl: account {address.lower()} is missing role 0x{role.hex()}"


UNAUTHORIZED_ACCOUNT_ABI = ErrorABI(
    type="error",
    name="AccessControlUnauthorizedAccount",
    inputs=[{"name": "account", "type": "address"}, {"name": "neededRole", "type": "bytes32"}],
)


def access_control_custom_error(address, role=None):
    """The revert OpenZeppelin 5 AccessControl raises, as ape decodes it."""
    error_class = type(UNAUTHORIZED_ACCOUNT_ABI.name, (CustomError,), {})
    inputs = {"account": address, "neededRole": role or b"\x00" * 32}
    return error_class(UNAUTHORIZED_ACCOUNT_ABI, inputs)


def method_abi(name, *input_types):
    return MethodABI(
        type="function",
        name=name,
        stateMutability="nonpayable",
        inputs=[{"name": f"arg{i}", "type": t} for i, t in enumerate(input_types)],
        outputs=[],
    )


class FakeReceipt:
    def __init__(self, failed=False):
        self.txn_hash = "0x" + os.urandom(32).hex()
        self.block_number = 42
        self.gas_used = 21_000
        self.failed = failed


class FakeAccount:
    def __init__(self, address=DEPLOYER, balance=10**18):
        self.address = address
        self.balance = balance


class FakeTransactionHandler:
    """Stands in for an ape contract method: real ABIs, recorded calls."""

    def __init__(self, contract, name, effect, *input_types):
        self.contract = contract
        self.abis = [method_abi(name, *input_types)]
        self.name = name
        self.effect = effect
        self.calls = []

    def __call__(self, *args, sender=None, **txn_kwargs):
        self.calls.append((args, sender, txn_kwargs))
        return self.effect(*args, sender=sender)

    def __str__(self):
        return self.name


class FakeAccessControlContract:
    """A minimal AccessControl contract with an optional contract-valued setting."""

    def __init__(
        self, name, address, admins=(), grants_take_effect=True, reason_string_reverts=False
    ):
        self.contract_type = SimpleNamespace(name=name)
        self.address = address
        self.members = set()
        for admin in admins:
            self.members.add((ROLE_HASHES[DEFAULT_ADMIN_ROLE], admin.lower()))
        self.grants_take_effect = grants_take_effect
        self.reason_string_reverts = reason_string_reverts
        self.position_nft = "0x0000000000000000000000000000000000000000"
        self.grantRole = FakeTransactionHandler(
            self, "grantRole", self._grant, "bytes32", "address"
        )
        self.setPositionNFTContract = FakeTransactionHandler(
            self, "setPositionNFTContract", self._set_position_nft, "address"
        )

    def DEFAULT_ADMIN_ROLE(self):
        return ROLE_HASHES[DEFAULT_ADMIN_ROLE]

    def ADMIN_ROLE(self):
        return ROLE_HASHES[ADMIN_ROLE]

    def MINTER_ROLE(self):
        return ROLE_HASHES[MINTER_ROLE]

    def hasRole(self, role_hash, address):
        return (role_hash, address.lower()) in self.members

    def positionNFTContract(self):
        return self.position_nft

    def _grant(self, role_hash, address, sender):
        if not self.hasRole(ROLE_HASHES[DEFAULT_ADMIN_ROLE], sender.address):
            if self.reason_string_reverts:
                raise ContractLogicError(access_control_error_message(sender.address))
            raise access_control_custom_error(sender.address)
        if self.grants_take_effect:
            self.members.add((role_hash, address.lower()))
        return FakeReceipt()

    def _set_position_nft(self, address, sender):
        self.position_nft = address
        return FakeReceipt()


@pytest.fixture
def deployer_account():
    return FakeAccount()


@pytest.fixture
def transactor(deployer_account):
    return Transactor(deployer_account, autosign=True)


@pytest.fixture
def position_nft():
    return FakeAccessControlContract("OPNPositionNFT", POSITION_NFT, admins=[DEPLOYER])


@pytest.fixture
def asset_registry():
    return FakeAccessControlContract("OPNAssetRegistry", REGISTRY, admins=[DEPLOYER])


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for envvar in (
        "ADMIN_WALLET",
        "ADDITIONAL_ADMIN",
        "FEE_RECIPIENT",
        "USDC_ADDRESS",
        "BASE_URI",
        "REPORT_GAS",
        "COINMARKETCAP_API_KEY",
    ):
        monkeypatch.delenv(envvar, raising=False)
