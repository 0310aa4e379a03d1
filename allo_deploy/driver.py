from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, List, NamedTuple, Optional

from ape import networks
from ape.api import AccountAPI

from allo_deploy.artifacts import (
    ApeArtifactSource,
    ArtifactNotFoundError,
    ArtifactSource,
    DeploymentError,
)
from allo_deploy.confirm import confirm_resolution
from allo_deploy.constants import ALLO_CONTRACTS, CONTRACT_LABELS
from allo_deploy.params import ConstructorParameters, DeploymentConfig, ResolutionContext
from allo_deploy.registry import registry_from_ape_deployments
from allo_deploy.utils import (
    check_etherscan_plugin,
    get_account,
    get_artifact_filepath,
    is_local_network,
    validate_config,
    verify_contracts,
)

Confirmation = Callable[[OrderedDict, str], None]


class DeploymentResult(NamedTuple):
    """
    Outcome of a deployment run.

    ``addresses`` holds every contract confirmed before the run finished,
    so a failed result still reports what is already on-chain.
    """

    addresses: "OrderedDict[str, str]"
    deployments: List[Any]
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        if self.error is None:
            return None
        return type(self.error).__name__


def address_line(contract_name: str, address: str) -> str:
    label = CONTRACT_LABELS.get(contract_name, contract_name)
    return f"{label} deployed to: {address}"


def deploy_contracts(
    source: ArtifactSource,
    constructor_parameters: Optional[ConstructorParameters] = None,
    confirm: Optional[Confirmation] = None,
) -> DeploymentResult:
    """
    Deploys contracts one after the other, printing each confirmed address.

    Stops at the first contract that cannot be resolved or deployed; nothing
    already deployed is rolled back.
    """
    if constructor_parameters is None:
        constructor_parameters = ConstructorParameters(
            OrderedDict((name, OrderedDict()) for name in ALLO_CONTRACTS)
        )

    addresses = OrderedDict()
    deployments = list()
    for contract_name in constructor_parameters.contract_names:
        try:
            factory = source.resolve_factory(contract_name)
            context = ResolutionContext(deployed=addresses, deployer=source.signer_address())
            resolved_params = constructor_parameters.resolve(contract_name, context)
            if confirm is not None:
                confirm(resolved_params, contract_name)
            handle = factory.deploy_and_confirm(*resolved_params.values())
        except (ArtifactNotFoundError, DeploymentError) as e:
            return DeploymentResult(addresses=addresses, deployments=deployments, error=e)

        addresses[contract_name] = handle.address
        deployments.append(handle)
        print(address_line(contract_name, handle.address))

    return DeploymentResult(addresses=addresses, deployments=deployments)


def finalize(deployments: List[Any], registry_filepath: Optional[Path], verify: bool) -> None:
    """Records the deployments to the registry and optionally to block explorers."""
    if registry_filepath is not None:
        registry_from_ape_deployments(deployments=deployments, output_filepath=registry_filepath)
    if not verify:
        return
    if is_local_network():
        print("(i) Skipping verification on a local network.")
        return
    verify_contracts(contracts=deployments)


def _print_deployment_info(
    account: AccountAPI, config: DeploymentConfig, registry_filepath: Optional[Path]
) -> None:
    print(
        f"Account: {account.address}",
        f"Config: {config.params_filepath or 'default'}",
        f"Registry: {registry_filepath or 'disabled'}",
        f"Verify: {config.verify}",
        f"Ecosystem: {networks.provider.network.ecosystem.name}",
        f"Network: {networks.provider.network.name}",
        f"Chain ID: {networks.provider.network.chain_id}",
        sep="\n",
    )


def run_deployment(config: DeploymentConfig) -> DeploymentResult:
    """Connects to the configured network and deploys the configured contracts."""
    params = config.load_params()

    with networks.parse_network_choice(config.network):
        validate_config(params)
        constructor_parameters = ConstructorParameters.from_config(params)
        account = get_account(config.account, autosign=config.autosign)
        if config.verify:
            check_etherscan_plugin()

        registry_filepath = config.registry_filepath or get_artifact_filepath(params)
        _print_deployment_info(account, config, registry_filepath)

        interactive = not (config.autosign or is_local_network())
        result = deploy_contracts(
            source=ApeArtifactSource(account=account),
            constructor_parameters=constructor_parameters,
            confirm=confirm_resolution if interactive else None,
        )
        if result.ok:
            finalize(result.deployments, registry_filepath, verify=config.verify)

    return result
