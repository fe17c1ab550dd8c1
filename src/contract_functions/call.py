"""Call protocols.

These functions run every time a contract function is called. The
synchronous protocol is used for implementations that return their result
directly, the asynchronous protocol for implementations that return an
awaitable (a deferred result, settled later as a value or an exception).

Both protocols follow the same steps:

1. check the preconditions; on failure the implementation is never called;
2. call the implementation;
3. let errors of the contract taxonomy pass through unchanged, so that the
   deepest failure of a chain of nested contract functions is the one
   reported;
4. check the postconditions against a nominal result, or the exception
   conditions against an exception, and return the result or re-raise the
   exception unchanged.

Calls passing ``result``, ``exception`` or ``callee`` as keyword arguments
are rejected with a TypeError, whatever the flags say. The ``verify`` and
``verify_postconditions`` flags of the contract's verification cell are read
at each call.
"""

import logging
from typing import Any, Awaitable

from .conditions import RESULT_IS_AWAITABLE, Call, averify_all, is_verifying, verify_all
from .errors import (
    ContractError,
    ExceptionConditionViolation,
    PostconditionViolation,
    PreconditionViolation,
)

logger = logging.getLogger(__name__)


def _unverified(contract_function) -> bool:
    # Calls from inside the function's own conditions are not verified again
    return not contract_function.contract.verification.verify or is_verifying(contract_function)


def call_sync(contract_function, call: Call) -> Any:
    """Run the synchronous call protocol of contract_function for call."""
    contract = contract_function.contract
    call.check_reserved()
    if _unverified(contract_function):
        return contract_function.execute(call)

    verify_all(PreconditionViolation, contract_function, contract.pre, call)
    if not contract.verification.verify_postconditions:
        return contract_function.execute(call)

    callee = contract_function.callee
    try:
        result = contract_function.execute(call)
    except ContractError:
        logger.debug("Contract error passes through %r unchanged", contract_function)
        raise
    except Exception as exc:
        verify_all(
            ExceptionConditionViolation,
            contract_function,
            contract.exception,
            call.settled(exception=exc, callee=callee),
        )
        raise
    verify_all(
        PostconditionViolation,
        contract_function,
        contract.post,
        call.settled(result=result, callee=callee),
    )
    return result


async def _settle(contract_function, call: Call, deferred: Awaitable[Any]) -> Any:
    contract = contract_function.contract
    callee = contract_function.callee
    try:
        resolution = await deferred
    except ContractError:
        logger.debug("Contract error passes through %r unchanged", contract_function)
        raise
    except Exception as rejection:
        await averify_all(
            ExceptionConditionViolation,
            contract_function,
            contract.exception,
            call.settled(exception=rejection, callee=callee),
        )
        raise
    await averify_all(
        PostconditionViolation,
        contract_function,
        contract.post,
        call.settled(result=resolution, callee=callee),
    )
    return resolution


def call_async(contract_function, call: Call) -> Any:
    """Run the asynchronous call protocol of contract_function for call.

    Preconditions, fast exceptions and the type of the immediate result are
    checked synchronously. The returned coroutine checks postconditions or
    exception conditions after the deferred result of the implementation has
    settled.
    """
    contract = contract_function.contract
    call.check_reserved()
    if _unverified(contract_function):
        return contract_function.execute(call)

    verify_all(PreconditionViolation, contract_function, contract.pre, call)
    if not contract.verification.verify_postconditions:
        return contract_function.execute(call)

    try:
        deferred = contract_function.execute(call)
    except ContractError:
        logger.debug("Contract error passes through %r unchanged", contract_function)
        raise
    except Exception as fast_exception:
        verify_all(
            ExceptionConditionViolation,
            contract_function,
            contract.fast_exception,
            call.settled(exception=fast_exception, callee=contract_function.callee),
        )
        raise
    verify_all(PostconditionViolation, contract_function, RESULT_IS_AWAITABLE, call.settled(result=deferred))
    return _settle(contract_function, call, deferred)


__all__ = ["call_sync", "call_async"]
