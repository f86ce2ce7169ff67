"""
Deployment configs and the accounts that act on them.

A deployment config is a YAML file with a ``deployment`` section (name, chain_id,
confirmations), ``constants``, optional ``existing`` contract addresses and the list
of ``contracts`` to deploy, in order, with their constructor arguments. An argument
may refer to ``$deployer``, to an upper-case constant (``$FEE_RECIPIENT``) or to
another contract (``$OPNAssetRegistry``); references are resolved when the contract
is deployed.
"""

import os
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ape import accounts, chain, networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape_accounts import KeyfileAccount
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from opn_contracts.confirm import _confirm_resolution, _continue
from opn_contracts.constants import (
    CONSTANT_ENVIRONMENT_OVERRIDES,
    DEFAULT_MANIFEST_NAME,
    DEPLOYMENTS_DIR,
    MIN_DEPLOYMENT_BALANCE,
)
from opn_contracts.errors import InsufficientBalance
from opn_contracts.manifest import (
    DeploymentManifest,
    manifest_filepath,
    manifest_from_ape_deployments,
    write_manifest,
)
from opn_contracts.networks import is_local_network
from opn_contracts.utils import (
    _load_yaml,
    check_explorer_plugin,
    format_balance,
    validate_config,
    verify_contracts,
)

CONSTRUCTOR_KEY = "constructor"
DEFAULT_CONFIRMATIONS = 1


class ConfigScope:
    """Names a deployment config lets its arguments refer to."""

    def __init__(self, contract_names: Sequence[str], constants: Dict[str, Any]):
        self.contract_names = set(contract_names)
        self.constants = constants


class ResolutionContext:
    """What references resolve against at deployment time."""

    def __init__(
        self,
        deployer_address: str,
        deployments: Optional[Dict[str, ContractInstance]] = None,
        existing: Optional[Dict[str, str]] = None,
    ):
        self.deployer_address = deployer_address
        self.deployments = deployments if deployments is not None else dict()
        self.existing = existing or dict()

    def address_of(self, contract_name: str) -> str:
        instance = self.deployments.get(contract_name)
        if instance is not None:
            return instance.address
        if contract_name in self.existing:
            return self.existing[contract_name]
        raise ConstructorParameters.Invalid(
            f"{contract_name} is neither deployed yet nor listed as an existing contract."
        )


class Variable(ABC):
    PREFIX = "$"

    @classmethod
    def is_reference(cls, value: Any) -> bool:
        return isinstance(value, str) and value.startswith(cls.PREFIX)

    @classmethod
    def parse(cls, value: str, scope: ConfigScope) -> "Variable":
        name = value[len(cls.PREFIX) :]
        if name == DeployerAddress.NAME:
            return DeployerAddress()
        if name.isupper():
            return ConstantValue(name, scope)
        return ContractAddress(name, scope)

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Any:
        raise NotImplementedError


class DeployerAddress(Variable):
    NAME = "deployer"

    def resolve(self, context: ResolutionContext) -> Any:
        return context.deployer_address


class ConstantValue(Variable):
    def __init__(self, name: str, scope: ConfigScope):
        if name not in scope.constants:
            raise ConstructorParameters.Invalid(f"Constant '{name}' is not defined in the config.")
        self.name = name
        # a constant may itself refer to the deployer or to a contract
        self.value = parse_value(scope.constants[name], scope)

    def resolve(self, context: ResolutionContext) -> Any:
        return resolve_value(self.value, context)


class ContractAddress(Variable):
    def __init__(self, name: str, scope: ConfigScope):
        if name not in scope.contract_names:
            raise ConstructorParameters.Invalid(
                f"Contract '{name}' is neither deployed by nor listed as existing in the config."
            )
        self.name = name

    def resolve(self, context: ResolutionContext) -> Any:
        return context.address_of(self.name)


def parse_value(value: Any, scope: ConfigScope) -> Any:
    if isinstance(value, list):
        return [parse_value(item, scope) for item in value]
    if Variable.is_reference(value):
        return Variable.parse(value, scope)
    return value


def resolve_value(value: Any, context: ResolutionContext) -> Any:
    if isinstance(value, list):
        return [resolve_value(item, context) for item in value]
    if isinstance(value, Variable):
        return value.resolve(context)
    return value


def _contract_entries(config: Dict) -> "OrderedDict[str, Dict]":
    """The ``contracts`` list as contract name -> raw constructor arguments."""
    entries = OrderedDict()
    for entry in config.get("contracts") or list():
        if isinstance(entry, str):
            entries[entry] = OrderedDict()
        elif isinstance(entry, dict) and len(entry) == 1:
            ((name, data),) = entry.items()
            entries[name] = (data or dict()).get(CONSTRUCTOR_KEY) or OrderedDict()
        else:
            raise ValueError(f"Malformed contracts entry in deployment config: {entry}")
    return entries


def apply_environment_overrides(constants: Dict[str, Any]) -> Dict[str, Any]:
    """Returns the constants with any values overridden from the environment."""
    overridden = dict(constants)
    for constant_name, envvar in CONSTANT_ENVIRONMENT_OVERRIDES.items():
        value = os.environ.get(envvar)
        if value:
            overridden[constant_name] = value
    return overridden


def _encodable(abi_inputs: Sequence[Any], values: Sequence[Any]) -> bool:
    return all(w3.is_encodable(abi_input.type, v) for abi_input, v in zip(abi_inputs, values))


def _validate_method_args(method_abis: List[MethodABI], args: Sequence[Any]) -> Dict[str, Any]:
    """Finds the overload accepting ``args`` and returns them keyed by input name."""
    if not method_abis:
        raise ValueError("No method ABIs to validate arguments against.")
    for abi in method_abis:
        if len(abi.inputs) == len(args) and _encodable(abi.inputs, args):
            return {abi_input.name: arg for abi_input, arg in zip(abi.inputs, args)}
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_args(
    contract_name: str, abi_inputs: Sequence[Any], arguments: "OrderedDict[str, Any]"
) -> None:
    """
    Checks resolved constructor arguments against the constructor ABI. Arguments
    are matched by position; their names in the config are labels only.
    """
    if len(arguments) != len(abi_inputs):
        raise ConstructorParameters.Invalid(
            f"{contract_name} constructor expects {len(abi_inputs)} argument(s), "
            f"the config lists {len(arguments)}."
        )
    for position, (abi_input, (name, value)) in enumerate(zip(abi_inputs, arguments.items())):
        if not w3.is_encodable(abi_input.type, value):
            raise ConstructorParameters.Invalid(
                f"{contract_name} argument '{name}' (position {position}) "
                f"is not a valid {abi_input.type}: {value!r}"
            )


class ConstructorParameters:
    """Constructor arguments of every contract in a deployment config, in deployment order."""

    class Invalid(ValueError):
        """Raised when constructor arguments cannot be parsed or resolved."""

    def __init__(self, parameters: "OrderedDict[str, OrderedDict]", scope: ConfigScope):
        self.parameters = parameters
        self.scope = scope

    @classmethod
    def from_config(
        cls, config: Dict, constants: Optional[Dict[str, Any]] = None
    ) -> "ConstructorParameters":
        print("Processing contract constructor parameters...")
        entries = _contract_entries(config)
        if constants is None:
            constants = config.get("constants") or dict()
        scope = ConfigScope(
            contract_names=[*(config.get("existing") or dict()), *entries], constants=constants
        )

        parameters = OrderedDict()
        for contract_name, arguments in entries.items():
            parameters[contract_name] = OrderedDict(
                (name, parse_value(raw, scope)) for name, raw in arguments.items()
            )
        return cls(parameters=parameters, scope=scope)

    def resolve(self, contract_name: str, context: ResolutionContext) -> "OrderedDict[str, Any]":
        try:
            arguments = self.parameters[contract_name]
        except KeyError:
            raise self.Invalid(f"{contract_name} is not listed in the deployment config.")
        return OrderedDict(
            (name, resolve_value(value, context)) for name, value in arguments.items()
        )


class Transactor:
    """
    An ape account that sends ABI-checked, annotated transactions,
    each confirmed by the operator unless autosign is on.
    """

    def __init__(self, account: Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            if is_local_network():
                account = accounts.test_accounts[0]
            else:
                account = select_account()
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        if isinstance(self._account, KeyfileAccount):
            self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        return self._account

    def transact(self, method: ContractTransactionHandler, *args, **txn_kwargs) -> ReceiptAPI:
        named_args = _validate_method_args(method.abis, args)
        contract = method.contract
        print(f"\nTransacting {contract.contract_type.name}[{contract.address[:10]}].{method}")
        for name, value in named_args.items():
            print(f"\t{name}={value}")
        if not self._autosign:
            _continue()

        receipt = method(*args, sender=self._account, **txn_kwargs)
        print(f"\ttx: {receipt.txn_hash} (block {receipt.block_number}, gas {receipt.gas_used})")
        return receipt

    def check_balance(self, minimum: int = 0) -> int:
        """
        Returns the account balance. An empty account cannot deploy anything;
        a balance under `minimum` is only worth a warning.
        """
        balance = self._account.balance
        print(f"Account balance: {format_balance(balance)}")
        if balance == 0:
            raise InsufficientBalance(
                f"Account {self._account.address} has no balance; fund it before transacting."
            )
        if balance < minimum:
            print(f"WARNING: Balance might be insufficient; recommended {format_balance(minimum)}")
        return balance


class Deployer(Transactor):
    """
    A transactor that deploys the contracts of one deployment config
    and records them in a manifest.
    """

    def __init__(
        self,
        config: Dict,
        path: Path,
        verify: bool,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        manifest_dir: Path = DEPLOYMENTS_DIR,
    ):
        super().__init__(account, autosign)
        validate_config(config=config)
        if verify:
            check_explorer_plugin()

        self.config = config
        self.path = path
        self.verify = verify
        deployment = config["deployment"]
        self.name = deployment.get("name", DEFAULT_MANIFEST_NAME)
        self.confirmations = int(deployment.get("confirmations", DEFAULT_CONFIRMATIONS))
        self.manifest_dir = manifest_dir
        self.manifest: Optional[DeploymentManifest] = None

        self.constants = apply_environment_overrides(config.get("constants") or dict())
        self.constructor_parameters = ConstructorParameters.from_config(
            config, constants=self.constants
        )
        self.deployments: Dict[str, ContractInstance] = OrderedDict()
        self.gas_used: Dict[str, int] = OrderedDict()
        self.context = ResolutionContext(
            deployer_address=self._account.address,
            deployments=self.deployments,
            existing={
                name: to_checksum_address(address)
                for name, address in (config.get("existing") or dict()).items()
            },
        )

        self._print_deployment_info()
        self.check_balance(minimum=MIN_DEPLOYMENT_BALANCE)
        if not self._autosign:
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        return cls(_load_yaml(filepath), filepath, *args, **kwargs)

    def constant(self, name: str) -> Any:
        """A deployment constant with its references resolved."""
        return ConstantValue(name, self.constructor_parameters.scope).resolve(self.context)

    def existing(self, contract_name: str) -> str:
        """Address of a contract that was deployed before this run."""
        try:
            return self.context.existing[contract_name]
        except KeyError:
            raise ValueError(f"'{contract_name}' is not listed under 'existing' in {self.path}.")

    def deploy(self, container: ContractContainer) -> ContractInstance:
        contract_name = container.contract_type.name
        arguments = self.constructor_parameters.resolve(contract_name, self.context)
        _validate_constructor_args(contract_name, container.constructor.abi.inputs, arguments)
        if not self._autosign:
            _confirm_resolution(arguments, contract_name)

        print(f"\nDeploying {contract_name}...")
        instance = self._account.deploy(
            container,
            *arguments.values(),
            publish=self.verify,
            required_confirmations=self.confirmations,
        )
        print(f"(i) {contract_name} deployed to {instance.address}")

        self.deployments[contract_name] = instance
        if instance.receipt is not None:
            self.gas_used[contract_name] = instance.receipt.gas_used
        return instance

    def finalize(
        self,
        configuration: Dict[str, Any],
        roles: Optional[Dict[str, bool]] = None,
        contracts: Optional[Dict[str, str]] = None,
    ) -> Path:
        """
        Writes the manifest of this run; `contracts` are pre-existing addresses
        the run was wired to. Deployments are published to the explorer when
        verification is on.
        """
        manifest = manifest_from_ape_deployments(
            deployments=self.deployments,
            deployer=self._account.address,
            network=networks.provider.network.name,
            chain_id=networks.provider.network.chain_id,
            block_number=chain.blocks.height,
            configuration=configuration,
            extra_contracts=contracts,
            gas_used=self.gas_used,
            roles=roles,
        )
        filepath = write_manifest(manifest, directory=self.manifest_dir, name=self.name)
        print(f"(i) Deployment manifest written to {filepath}!")
        self.manifest = manifest

        if self.verify:
            verify_contracts(contracts=list(self.deployments.values()))
        return filepath

    def _print_deployment_info(self):
        network = networks.provider.network
        target = manifest_filepath(network.name, directory=self.manifest_dir, name=self.name)
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Manifest: {target}",
            f"Verify: {self.verify}",
            f"Confirmations: {self.confirmations}",
            f"Ecosystem: {network.ecosystem.name}",
            f"Network: {network.name}",
            f"Chain ID: {network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
