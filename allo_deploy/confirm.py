from collections import OrderedDict

from ape.utils import ZERO_ADDRESS

from allo_deploy.artifacts import DeploymentError


def _answered_no(question: str) -> bool:
    answer = input(question)
    return answer.lower().strip() == "n"


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    if _answered_no(f"Deploy {contract_name} Y/N? "):
        print("Aborting deployment!")
        raise DeploymentError(f"Deployment of {contract_name} aborted by user.")


def _confirm_zero_address(contract_name: str) -> None:
    if _answered_no("Zero Address detected for deployment parameter; Continue? Y/N? "):
        print("Aborting deployment!")
        raise DeploymentError(f"Deployment of {contract_name} aborted by user.")


def confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the resolved constructor parameters for a single contract."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nConstructor parameters for {contract_name}")
    contains_zero_address = False
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
        if not contains_zero_address:
            contains_zero_address = resolved_value == ZERO_ADDRESS
    _confirm_deployment(contract_name)
    if contains_zero_address:
        _confirm_zero_address(contract_name)
