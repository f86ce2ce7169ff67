from collections import OrderedDict

from ape.utils import ZERO_ADDRESS


def _confirm_or_abort(question: str) -> None:
    """Aborts the running script unless the operator answers yes."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting!")
        exit(-1)


def _continue() -> None:
    _confirm_or_abort("Continue")


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the operator to confirm the resolved constructor parameters of a contract."""
    if not resolved_params:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm_or_abort(f"Deploy {contract_name}")
        return

    print(f"\nConstructor parameters for {contract_name}")
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
    if ZERO_ADDRESS in resolved_params.values():
        print("WARNING: Zero address detected for a constructor parameter")
    _confirm_or_abort(f"Deploy {contract_name}")
