"""Contract exceptions.

Every error the engine raises is a ContractError. The family is split in
two: ConditionError reports on a specific condition of a specific call
(either the condition was violated, or it could not be evaluated), and
AbstractError reports a call of a placeholder that has no implementation.

Instances are immutable once constructed. Only the attributes the
interpreter itself maintains on raised exceptions (``__traceback__``,
``__cause__``, ``__context__``, ``__notes__``, ...) can still be assigned.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from . import location, report

EOL = "\n"
INDENT = "    "


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


class ContractError(Exception):
    """Raised when the engine detects a problem with a contract or its use.

    Captures the stack at construction, restricted to frames outside the
    library. Considered abstract.
    """

    default_message = "abstract type"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            object.__setattr__(self, "_message", message)
        super().__init__(self.message)
        object.__setattr__(self, "_raw_stack", location.raw())

    def __setattr__(self, name: str, value: Any) -> None:
        if not _is_dunder(name):
            raise AttributeError(f"{type(self).__name__} is immutable, cannot set '{name}'")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if not _is_dunder(name):
            raise AttributeError(f"{type(self).__name__} is immutable, cannot delete '{name}'")
        super().__delattr__(name)

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def message(self) -> str:
        return self.__dict__.get("_message", self.default_message)

    @property
    def raw_stack(self) -> str:
        """Frames outside the library at the time this error was created."""
        return self._raw_stack

    @property
    def stack(self) -> str:
        """Name and message, followed by the raw stack."""
        return f"{self.name}: {self.message}{EOL}{self._raw_stack}"

    def __str__(self) -> str:
        return self.message


class AbstractError(ContractError):
    """Raised when the abstract placeholder of a contract is called. You shouldn't."""

    default_message = "an abstract function cannot be executed"

    def __init__(self, contract):
        from .contract import Contract
        if not isinstance(contract, Contract):
            raise TypeError(f"contract must be a Contract, got {type(contract).__name__}")
        object.__setattr__(self, "contract", contract)
        super().__init__()


class ConditionError(ContractError):
    """A specific condition failed during a specific call of a contract function.

    Considered abstract. Reports which condition failed, of which contract,
    during a call of which contract function, with which receiver and which
    arguments.

    Attributes:
        contract_function: The contract function that was called
        condition: The condition that failed
        receiver: The instance the contract function was bound to, or None
        arguments: Positional arguments of the call, receiver excluded
        keywords: Keyword arguments of the call (read-only)
    """

    def __init__(
        self,
        contract_function,
        condition,
        receiver: Any,
        arguments: Tuple[Any, ...],
        keywords: Optional[Mapping[str, Any]] = None,
    ):
        from .function import is_contract_function
        if not is_contract_function(contract_function):
            raise TypeError("contract_function must be a contract function")
        if not callable(condition):
            raise TypeError("condition must be callable")

        object.__setattr__(self, "contract_function", contract_function)
        object.__setattr__(self, "condition", condition)
        object.__setattr__(self, "receiver", receiver)
        object.__setattr__(self, "arguments", tuple(arguments))
        object.__setattr__(self, "keywords", MappingProxyType(dict(keywords or {})))
        super().__init__()

    @property
    def function_name(self) -> str:
        return getattr(self.contract_function, "__name__", repr(self.contract_function))

    @property
    def message(self) -> str:
        condition = report.concise_condition("condition", self.condition)
        return f"{condition} failed while {self.function_name} was called"

    def details(self) -> str:
        """Multi-line description of the contract, the condition and the call."""
        lines = [
            "contract:",
            str(self.contract_function.contract.location),
            "condition:",
            INDENT + report.concise_condition("", self.condition),
            "contract function:",
            str(self.contract_function.location),
            f"receiver ({report.type_name(self.receiver)}):",
            INDENT + report.value(self.receiver),
            f"arguments ({len(self.arguments)}):",
        ]
        for index, arg in enumerate(self.arguments):
            lines.append(f"{INDENT}{index} ({report.type_name(arg)}): {report.value(arg)}")
        if self.keywords:
            lines.append(f"keywords ({len(self.keywords)}):")
            for key, arg in self.keywords.items():
                lines.append(f"{INDENT}{key} ({report.type_name(arg)}): {report.value(arg)}")
        return EOL.join(lines)

    @property
    def stack(self) -> str:
        return EOL.join([
            f"{self.name}: {self.message}",
            self.details(),
            "call stack:",
            self._raw_stack,
        ])


class ConditionMetaError(ConditionError):
    """The condition could not be evaluated.

    There is probably a programming error in the condition itself. The
    exception it raised is kept in ``error``.
    """

    def __init__(self, contract_function, condition, receiver, arguments, keywords, error: Any):
        object.__setattr__(self, "error", error)
        super().__init__(contract_function, condition, receiver, arguments, keywords)

    @property
    def message(self) -> str:
        condition = report.concise_condition("condition", self.condition)
        return (
            f"error occurred while evaluating {condition} "
            f"while contract function {self.function_name} was called ({self.error!r})"
        )

    def details(self) -> str:
        return EOL.join([super().details(), "caused by:", report.extensive_thrown(self.error)])


class ConditionViolation(ConditionError):
    """A condition returned a falsy value.

    Considered abstract. Instances are only created by the condition
    verifier, through ``from_call``.
    """

    @classmethod
    def from_call(cls, contract_function, condition, call) -> "ConditionViolation":
        """Create a violation for condition from a call snapshot."""
        return cls(contract_function, condition, call.receiver, call.arguments, call.keywords)


class PreconditionViolation(ConditionViolation):
    """A precondition was violated. The implementation was not called.

    This is a programming error on the side of the caller.
    """


class PostconditionViolation(ConditionViolation):
    """The implementation ended nominally, but the result did not conform.

    If the postcondition itself is correct, this is a programming error in
    the implementation. One should assume the system is now in an undefined
    state.
    """

    def __init__(self, contract_function, condition, receiver, arguments, keywords, result: Any):
        object.__setattr__(self, "result", result)
        super().__init__(contract_function, condition, receiver, arguments, keywords)

    @classmethod
    def from_call(cls, contract_function, condition, call) -> "PostconditionViolation":
        return cls(
            contract_function,
            condition,
            call.receiver,
            call.arguments,
            call.keywords,
            call.outcome.get("result"),
        )

    def details(self) -> str:
        return EOL.join([
            super().details(),
            f"result ({report.type_name(self.result)}):",
            INDENT + report.value(self.result),
        ])


class ExceptionConditionViolation(ConditionViolation):
    """The implementation raised an exception that its contract does not allow."""

    def __init__(self, contract_function, condition, receiver, arguments, keywords, exception: Any):
        object.__setattr__(self, "exception", exception)
        super().__init__(contract_function, condition, receiver, arguments, keywords)

    @classmethod
    def from_call(cls, contract_function, condition, call) -> "ExceptionConditionViolation":
        return cls(
            contract_function,
            condition,
            call.receiver,
            call.arguments,
            call.keywords,
            call.outcome.get("exception"),
        )

    def details(self) -> str:
        return EOL.join([
            super().details(),
            f"exception ({report.type_name(self.exception)}):",
            report.extensive_thrown(self.exception),
        ])


__all__ = [
    "ContractError",
    "AbstractError",
    "ConditionError",
    "ConditionMetaError",
    "ConditionViolation",
    "PreconditionViolation",
    "PostconditionViolation",
    "ExceptionConditionViolation",
]
