import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from ape.utils import ZERO_ADDRESS

from allo_deploy.constants import ALLO_CONTRACTS, DEFAULT_NETWORK
from allo_deploy.utils import _load_yaml

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"


class DeploymentConfig(NamedTuple):
    """Everything a deployment run needs, passed explicitly to the driver."""

    network: str = DEFAULT_NETWORK  # ape network choice or RPC endpoint URI
    account: Optional[str] = None  # ape account alias of the signer
    params_filepath: Optional[Path] = None
    registry_filepath: Optional[Path] = None
    verify: bool = False
    autosign: bool = False

    def load_params(self) -> typing.Dict:
        """Returns the params file contents, or the default Allo deployment."""
        if self.params_filepath is None:
            return {"contracts": list(ALLO_CONTRACTS)}
        return _load_yaml(self.params_filepath)


class ResolutionContext(NamedTuple):
    """Values available while resolving constructor parameters."""

    deployed: Dict[str, str]
    deployer: Optional[str] = None


class VariableContext:
    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        constants: typing.Dict[str, Any] = None,
    ):
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.constants = constants or dict()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, context: ResolutionContext) -> Any:
        if context.deployer is None:
            return ZERO_ADDRESS
        return context.deployer


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ConstructorParameters.Invalid(
                f"Constant '{constant_name}' not found in deployment file."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, context: ResolutionContext) -> Any:
        return self.constant_value


class ContractName(Variable):
    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise ConstructorParameters.Invalid(f"Contract name {contract_name} not found")

        # only contracts deployed earlier in the same run have an address
        position = context.contract_names.index(contract_name)
        if position >= context.contract_names.index(context.contract_name):
            raise ConstructorParameters.Invalid(
                f"{context.contract_name} references {contract_name}, "
                f"which is not deployed before it"
            )
        self.contract_name = contract_name

    def resolve(self, context: ResolutionContext) -> Any:
        """Resolves a contract address."""
        return context.deployed[self.contract_name]


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _resolve_param(value: Any, context: ResolutionContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


def get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict):
            contract_names.extend(list(contract_info.keys()))
        else:
            raise ValueError("Malformed constructor parameters YAML.")

    return contract_names


class ConstructorParameters:
    """Represents the constructor parameters for a set of contracts."""

    class Invalid(Exception):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict):
        self.parameters = parameters

    @property
    def contract_names(self) -> List[str]:
        return list(self.parameters)

    @classmethod
    def from_config(cls, config: typing.Dict) -> "ConstructorParameters":
        """Loads the constructor parameters from a params config."""
        print("Processing contract constructor parameters...")
        contracts_config = OrderedDict()
        contract_names = get_contract_names(config)
        constants = config.get("constants")
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                contracts_config[contract_info] = OrderedDict()
                continue

            if len(contract_info) != 1:
                raise ValueError("Malformed constructor parameters YAML.")

            contract_name = list(contract_info.keys())[0]  # only one entry
            contract_data = contract_info[contract_name] or dict()
            if not isinstance(contract_data, dict):
                raise ValueError(f"Malformed constructor parameter config for {contract_name}.")

            parameter_values = OrderedDict()
            raw_values = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
            variable_context = VariableContext(
                contract_names=contract_names, contract_name=contract_name, constants=constants
            )
            for name, value in raw_values.items():
                parameter_values[name] = _process_raw_value(value, variable_context)
            contracts_config[contract_name] = parameter_values

        return cls(parameters=contracts_config)

    def resolve(self, contract_name: str, context: ResolutionContext) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        resolved_params = OrderedDict()
        for name, value in self.parameters.get(contract_name, OrderedDict()).items():
            resolved_params[name] = _resolve_param(value, context)
        return resolved_params
