from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ape import project
from ape.api import AccountAPI
from ape.contracts import ContractContainer, ContractInstance
from ape.exceptions import ApeException


class ArtifactNotFoundError(LookupError):
    """Raised when a contract identifier is not part of the build artifacts."""


class DeploymentError(Exception):
    """Raised when a creation transaction reverts, is rejected or cannot be sent."""


class ContractFactory(ABC):
    """Deploys a single compiled contract."""

    name: str

    @abstractmethod
    def deploy_and_confirm(self, *args) -> Any:
        """
        Submits a creation transaction and blocks until it is confirmed.
        Returns a handle exposing the deployed ``address``.
        """
        raise NotImplementedError


class ArtifactSource(ABC):
    """Resolves contract identifiers to factories."""

    @abstractmethod
    def resolve_factory(self, name: str) -> ContractFactory:
        raise NotImplementedError

    def signer_address(self) -> Optional[str]:
        """Address of the account paying for deployments, if known."""
        return None


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency in project.dependencies.specified:
        try:
            return getattr(dependency.project, contract)
        except AttributeError:
            continue
    raise ArtifactNotFoundError(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(contract)

    return contract_container


class ApeContractFactory(ContractFactory):
    def __init__(self, container: ContractContainer, account: AccountAPI):
        self.container = container
        self.account = account
        self.name = container.contract_type.name

    def deploy_and_confirm(self, *args) -> ContractInstance:
        try:
            # ape waits for the receipt before returning the instance
            return self.account.deploy(self.container, *args)
        except ApeException as e:
            raise DeploymentError(f"Deployment of {self.name} failed: {e}") from e


class ApeArtifactSource(ArtifactSource):
    """Resolves factories from the compiled ape project, deploying with ``account``."""

    def __init__(self, account: AccountAPI):
        self.account = account
        self._cache: Dict[str, ApeContractFactory] = dict()

    def resolve_factory(self, name: str) -> ApeContractFactory:
        if name not in self._cache:
            container = get_contract_container(name)
            self._cache[name] = ApeContractFactory(container=container, account=self.account)
        return self._cache[name]

    def signer_address(self) -> Optional[str]:
        return self.account.address
