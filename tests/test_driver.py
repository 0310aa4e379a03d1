from collections import OrderedDict

import pytest

from allo_deploy.artifacts import ArtifactNotFoundError, DeploymentError
from allo_deploy.confirm import confirm_resolution
from allo_deploy.driver import address_line, deploy_contracts
from allo_deploy.params import ConstructorParameters
from tests.conftest import DEPLOYER_ADDRESS, FakeArtifactSource, address_lines


def test_deploys_strategy_then_allo(artifact_source, capsys):
    result = deploy_contracts(source=artifact_source)

    assert result.ok
    assert result.error_kind is None
    assert list(result.addresses) == ["RFPSimpleStrategy", "Allo"]
    assert artifact_source.resolved == ["RFPSimpleStrategy", "Allo"]

    lines = address_lines(capsys.readouterr().out)
    assert len(lines) == 2
    assert lines[0] == "RFPSimpleStrategy deployed to: " + result.addresses["RFPSimpleStrategy"]
    assert lines[1] == "Allo deployed to: " + result.addresses["Allo"]


def test_deploys_without_constructor_arguments(artifact_source):
    deploy_contracts(source=artifact_source)
    for factory in artifact_source.factories.values():
        assert factory.calls == [()]


def test_each_deployment_is_a_new_contract(artifact_source):
    first = deploy_contracts(source=artifact_source)
    second = deploy_contracts(source=artifact_source)
    assert first.ok and second.ok
    assert len(artifact_source.factories["Allo"].calls) == 2


def test_unknown_strategy_deploys_nothing(capsys):
    source = FakeArtifactSource(known=("Allo",))

    result = deploy_contracts(source=source)

    assert not result.ok
    assert result.error_kind == "ArtifactNotFoundError"
    assert isinstance(result.error, ArtifactNotFoundError)
    assert result.addresses == OrderedDict()
    assert source.resolved == ["RFPSimpleStrategy"]
    assert source.factories["Allo"].calls == []
    assert address_lines(capsys.readouterr().out) == []


@pytest.mark.parametrize(
    "source_kwargs,error_kind",
    [
        ({"known": ("RFPSimpleStrategy",)}, "ArtifactNotFoundError"),
        ({"reverting": ("Allo",)}, "DeploymentError"),
    ],
)
def test_allo_failure_keeps_strategy_deployment(source_kwargs, error_kind, capsys):
    source = FakeArtifactSource(**source_kwargs)

    result = deploy_contracts(source=source)

    assert not result.ok
    assert result.error_kind == error_kind
    assert list(result.addresses) == ["RFPSimpleStrategy"]
    assert len(result.deployments) == 1

    lines = address_lines(capsys.readouterr().out)
    assert len(lines) == 1
    assert lines[0].startswith("RFPSimpleStrategy deployed to: ")


def test_unexpected_errors_propagate(artifact_source):
    def explode(*args):
        raise RuntimeError("provider disconnected")

    artifact_source.factories["RFPSimpleStrategy"].deploy_and_confirm = explode
    with pytest.raises(RuntimeError, match="provider disconnected"):
        deploy_contracts(source=artifact_source)


def test_constructor_parameters_resolve_earlier_deployments(artifact_source):
    config = {
        "constants": {"FEE_PERCENTAGE": 100},
        "contracts": [
            "RFPSimpleStrategy",
            {
                "Allo": {
                    "constructor": {
                        "_owner": "$deployer",
                        "_strategy": "$RFPSimpleStrategy",
                        "_percentFee": "$FEE_PERCENTAGE",
                    }
                }
            },
        ],
    }
    parameters = ConstructorParameters.from_config(config)

    result = deploy_contracts(source=artifact_source, constructor_parameters=parameters)

    assert result.ok
    strategy_address = result.addresses["RFPSimpleStrategy"]
    assert artifact_source.factories["Allo"].calls == [(DEPLOYER_ADDRESS, strategy_address, 100)]


def test_confirmation_sees_resolved_parameters(artifact_source):
    confirmed = list()

    def confirm(resolved_params, contract_name):
        confirmed.append((contract_name, dict(resolved_params)))

    deploy_contracts(source=artifact_source, confirm=confirm)
    assert confirmed == [("RFPSimpleStrategy", {}), ("Allo", {})]


def test_declined_confirmation_stops_deployment(artifact_source, monkeypatch, capsys):
    answers = iter(["y", "n"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

    result = deploy_contracts(source=artifact_source, confirm=confirm_resolution)

    assert result.error_kind == "DeploymentError"
    assert list(result.addresses) == ["RFPSimpleStrategy"]
    assert artifact_source.factories["Allo"].calls == []
    assert "Aborting deployment!" in capsys.readouterr().out


def test_zero_address_parameter_asks_twice(monkeypatch):
    prompts = list()

    def answer(prompt):
        prompts.append(prompt)
        return "n" if prompt.startswith("Zero Address") else "y"

    monkeypatch.setattr("builtins.input", answer)
    params = OrderedDict(_registry="0x" + "0" * 40)
    with pytest.raises(DeploymentError, match="aborted"):
        confirm_resolution(params, "Allo")
    assert len(prompts) == 2


def test_address_line_uses_contract_label():
    address = "0x" + "a" * 40
    assert address_line("Allo", address) == f"Allo deployed to: {address}"
    assert address_line("Registry", address) == f"Registry deployed to: {address}"
