"""Contract specifications.

A contract describes an operation by three lists of conditions:

- ``pre``: preconditions, checked before the implementation is called;
- ``post``: postconditions, checked when the implementation returns;
- ``exception``: exception conditions, checked when the implementation
  raises. Any exception that no condition allows is a contract violation.

Contracts are immutable. Whether they are verified is decided by their
``verification`` cell, which can be toggled at any time.

Example:
    >>> double_contract = Contract(
    ...     pre=[lambda x: x > 0],
    ...     post=[lambda x, result: result == x * 2],
    ... )
    >>> @double_contract.implementation
    ... def double(x):
    ...     return x * 2
    >>> double(5)
    10
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Tuple

from . import location as _location
from .call import call_async, call_sync
from .conditions import MUST_NOT_HAPPEN, Call, as_conditions
from .function import AbstractFunction, ContractFunction, is_contract_function
from .protocols import ExceptionCondition, Postcondition, Precondition
from .settings import Verification


@dataclass(frozen=True, eq=False)
class Contract:
    """Contract for functions that return their result directly.

    Attributes:
        pre: Preconditions, in evaluation order
        post: Postconditions, in evaluation order
        exception: Exception conditions, in evaluation order
        verification: Shared configuration cell with the verification toggles
        location: Where the contract was created, or INTERNAL_LOCATION
        abstract: Placeholder contract function that raises AbstractError
    """
    pre: Sequence[Precondition] = ()
    post: Sequence[Postcondition] = ()
    exception: Sequence[ExceptionCondition] = MUST_NOT_HAPPEN
    verification: Optional[Verification] = None
    location: Any = None
    abstract: AbstractFunction = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "pre", as_conditions("pre", self.pre))
        object.__setattr__(self, "post", as_conditions("post", self.post))
        object.__setattr__(self, "exception", as_conditions("exception", self.exception))

        if self.verification is None:
            object.__setattr__(self, "verification", Verification())
        elif not isinstance(self.verification, Verification):
            raise TypeError(f"verification must be a Verification, got {type(self.verification).__name__}")

        if self.location is None:
            object.__setattr__(self, "location", _location.location())
        elif not _location.is_location(self.location):
            raise TypeError(f"location must be a location, got {self.location!r}")

        object.__setattr__(self, "abstract", AbstractFunction(self))

    def implementation(self, implementation: Callable[..., Any]) -> ContractFunction:
        """Wrap implementation in a contract function for this contract.

        Can be used as a decorator. The contract function rejects calls passing
        ``result``, ``exception`` or ``callee`` as keyword arguments.

        Raises:
            TypeError: If implementation is not callable
        """
        if not callable(implementation):
            raise TypeError(f"implementation must be callable, got {type(implementation).__name__}")
        return ContractFunction(self, implementation, _location.location())

    def is_implemented_by(self, f: Any) -> bool:
        """Whether f is a contract function for this contract."""
        return is_contract_function(f, self)

    def invoke(self, contract_function: ContractFunction, call: Call) -> Any:
        """Run the call protocol of this kind of contract."""
        return call_sync(contract_function, call)


@dataclass(frozen=True, eq=False)
class AsyncContract(Contract):
    """Contract for functions that return an awaitable.

    Postconditions apply to the value the awaitable resolves to, exception
    conditions to the exception it raises. ``fast_exception`` conditions apply
    to exceptions raised synchronously, before the awaitable is returned.
    Returning anything but an awaitable is a postcondition violation.

    For ``async def`` implementations nothing runs before the coroutine is
    awaited, so the distinction between ``exception`` and ``fast_exception``
    is lost there: every exception is checked against ``exception``.
    """
    fast_exception: Sequence[ExceptionCondition] = MUST_NOT_HAPPEN

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "fast_exception", as_conditions("fast_exception", self.fast_exception))

    def invoke(self, contract_function: ContractFunction, call: Call) -> Any:
        return call_async(contract_function, call)


# The most general contract: nothing may ever call it, and anything goes afterwards.
# Specializations weaken the precondition and strengthen the postconditions.
ROOT = Contract(
    pre=MUST_NOT_HAPPEN,
    post=(),
    exception=(),
    location=_location.INTERNAL_LOCATION,
)

Contract.root = ROOT


__all__ = ["Contract", "AsyncContract", "ROOT"]
