"""contract-functions - design by contract for Python callables."""

from .version import CONTRACTS_VERSION
from .errors import (
    ContractError,
    AbstractError,
    ConditionError,
    ConditionMetaError,
    ConditionViolation,
    PreconditionViolation,
    PostconditionViolation,
    ExceptionConditionViolation,
)
from .location import INTERNAL_LOCATION
from .settings import Verification
from .protocols import Precondition, Postcondition, ExceptionCondition
from .conditions import (
    Call,
    MUST_NOT_HAPPEN,
    RESULT_IS_AWAITABLE,
    false_condition,
    result_is_awaitable,
    verify_all,
    averify_all,
)
from .function import ContractFunction, AbstractFunction, is_contract_function
from .contract import Contract, AsyncContract, ROOT

__version__ = CONTRACTS_VERSION

__all__ = [
    # Version
    "CONTRACTS_VERSION",
    # Contracts
    "Contract",
    "AsyncContract",
    "ROOT",
    # Contract functions
    "ContractFunction",
    "AbstractFunction",
    "is_contract_function",
    # Conditions
    "Call",
    "MUST_NOT_HAPPEN",
    "RESULT_IS_AWAITABLE",
    "false_condition",
    "result_is_awaitable",
    "verify_all",
    "averify_all",
    # Condition protocols
    "Precondition",
    "Postcondition",
    "ExceptionCondition",
    # Errors
    "ContractError",
    "AbstractError",
    "ConditionError",
    "ConditionMetaError",
    "ConditionViolation",
    "PreconditionViolation",
    "PostconditionViolation",
    "ExceptionConditionViolation",
    # Configuration
    "Verification",
    "INTERNAL_LOCATION",
]
