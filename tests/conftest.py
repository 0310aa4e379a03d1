import os
from typing import NamedTuple

import pytest
from eth_utils import to_checksum_address

from allo_deploy.artifacts import (
    ArtifactNotFoundError,
    ArtifactSource,
    ContractFactory,
    DeploymentError,
)

DEPLOYER_ADDRESS = to_checksum_address("0x" + "d" * 40)


# Utility functions
def random_address():
    return to_checksum_address("0x" + os.urandom(20).hex())


class DeployedContract(NamedTuple):
    name: str
    address: str
    args: tuple


class FakeFactory(ContractFactory):
    def __init__(self, name, revert=False):
        self.name = name
        self.revert = revert
        self.calls = list()

    def deploy_and_confirm(self, *args):
        self.calls.append(args)
        if self.revert:
            raise DeploymentError(f"Deployment of {self.name} failed: execution reverted")
        return DeployedContract(name=self.name, address=random_address(), args=args)


class FakeArtifactSource(ArtifactSource):
    """Build artifacts for a fixed set of contracts."""

    def __init__(self, known=("RFPSimpleStrategy", "Allo"), reverting=()):
        self.factories = {name: FakeFactory(name, revert=name in reverting) for name in known}
        self.resolved = list()

    def resolve_factory(self, name):
        self.resolved.append(name)
        try:
            return self.factories[name]
        except KeyError:
            raise ArtifactNotFoundError(f"No contract found with name '{name}'.")

    def signer_address(self):
        return DEPLOYER_ADDRESS


def address_lines(output):
    return [line for line in output.splitlines() if " deployed to: " in line]


# Fixtures
@pytest.fixture
def artifact_source():
    return FakeArtifactSource()


@pytest.fixture
def params_file(tmp_path):
    def write(text, name="params.yml"):
        filepath = tmp_path / name
        filepath.write_text(text)
        return filepath

    return write
