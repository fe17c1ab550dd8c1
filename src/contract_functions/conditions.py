"""Condition evaluation.

Conditions of a list are evaluated one by one, in declaration order, and
evaluation stops at the first condition that fails. Conditions may have side
effects, and later conditions may rely on earlier ones having passed, so the
order is never changed and nothing is evaluated concurrently.

A condition fails in one of two ways:

- it returns a falsy value: the contract was violated, and the violation type
  chosen by the caller is raised;
- it raises: the condition itself is broken, and a ConditionMetaError is
  raised. A broken condition cannot judge the call, so this takes precedence.

Only the asynchronous verifier awaits conditions that return awaitables.
Everywhere else such a condition is broken.
"""

import functools
import inspect
import logging
from contextlib import contextmanager
from collections.abc import Iterable as IterableABC
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple, Type

from .errors import ConditionMetaError, ConditionViolation
from . import report

logger = logging.getLogger(__name__)

# Keyword arguments the engine adds for postconditions and exception conditions
RESERVED_KEYWORDS = frozenset({"result", "exception", "callee"})


def false_condition(*args, **kwargs) -> bool:
    """Condition that always fails."""
    return False


# Use to express that something must never happen: a call, a nominal end, an exception
MUST_NOT_HAPPEN: Tuple[Callable[..., Any], ...] = (false_condition,)


def result_is_awaitable(*args, result=None, **kwargs) -> bool:
    """Postcondition of every asynchronous contract function: it returns an awaitable."""
    return inspect.isawaitable(result)


RESULT_IS_AWAITABLE: Tuple[Callable[..., Any], ...] = (result_is_awaitable,)


@functools.lru_cache(maxsize=1024)
def _reserved_parameters(condition: Callable[..., Any]) -> Mapping[str, Optional[int]]:
    try:
        signature = inspect.signature(condition)
    except (TypeError, ValueError):
        return MappingProxyType({})
    reserved = {}
    position = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            for name in RESERVED_KEYWORDS - set(reserved):
                reserved[name] = None
            break
        if param.name in RESERVED_KEYWORDS:
            if param.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD:
                reserved[param.name] = position
            elif param.kind is inspect.Parameter.KEYWORD_ONLY:
                reserved[param.name] = None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            position += 1
    return MappingProxyType(reserved)


def reserved_parameters(condition: Callable[..., Any]) -> Mapping[str, Optional[int]]:
    """Reserved keywords that condition declares, by name or through **kwargs.

    Maps each name to its position among the positional parameters, or to
    None when it can only be passed by keyword.
    """
    try:
        return _reserved_parameters(condition)
    except TypeError:
        # unhashable callable
        return _reserved_parameters.__wrapped__(condition)


def accepted_keywords(condition: Callable[..., Any]) -> FrozenSet[str]:
    """Reserved keywords that condition declares, by name or through **kwargs."""
    return frozenset(reserved_parameters(condition))


def as_conditions(name: str, conditions: Iterable[Callable[..., Any]]) -> Tuple[Callable[..., Any], ...]:
    """Copy a condition list into a tuple, rejecting anything that is not callable."""
    if isinstance(conditions, (str, bytes)) or callable(conditions) or not isinstance(conditions, IterableABC):
        raise TypeError(f"{name} must be a sequence of callables, got {type(conditions).__name__}")
    copy = tuple(conditions)
    for index, condition in enumerate(copy):
        if not callable(condition):
            raise TypeError(f"{name}[{index}] must be callable, got {type(condition).__name__}")
    return copy


@dataclass(frozen=True)
class Call:
    """Snapshot of the arguments of one call of a contract function.

    Attributes:
        receiver_args: Empty, or a 1-tuple holding the receiver of a bound call
        arguments: Positional arguments, receiver excluded
        keywords: Keyword arguments
        outcome: Reserved keywords for postconditions and exception conditions
    """
    receiver_args: Tuple[Any, ...] = ()
    arguments: Tuple[Any, ...] = ()
    keywords: Mapping[str, Any] = field(default_factory=dict)
    outcome: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        receiver_args = tuple(self.receiver_args)
        if len(receiver_args) > 1:
            raise ValueError(f"A call has at most 1 receiver, got {len(receiver_args)}")
        unknown = set(self.outcome) - RESERVED_KEYWORDS
        if unknown:
            raise ValueError(f"Unknown outcome keywords: {sorted(unknown)}")
        object.__setattr__(self, "receiver_args", receiver_args)
        object.__setattr__(self, "arguments", tuple(self.arguments))
        object.__setattr__(self, "keywords", MappingProxyType(dict(self.keywords)))
        object.__setattr__(self, "outcome", MappingProxyType(dict(self.outcome)))

    @property
    def receiver(self) -> Any:
        return self.receiver_args[0] if self.receiver_args else None

    @property
    def positional(self) -> Tuple[Any, ...]:
        """Receiver (if any) followed by the arguments, as Python passes them."""
        return self.receiver_args + self.arguments

    def settled(self, **outcome: Any) -> "Call":
        """The same call, extended with the outcome of the implementation."""
        return replace(self, outcome=outcome)

    def check_reserved(self) -> None:
        """Reject calls whose keywords clash with the reserved outcome keywords."""
        clash = RESERVED_KEYWORDS.intersection(self.keywords)
        if clash:
            raise TypeError(
                f"Keyword argument(s) {sorted(clash)} of the call clash with the keywords "
                "reserved for postconditions and exception conditions"
            )

    def condition_arguments(self, condition: Callable[..., Any]) -> Tuple[Tuple[Any, ...], Dict[str, Any]]:
        """Positional and keyword arguments for condition.

        A reserved keyword declared as an ordinary parameter cuts the
        positional arguments short, so that it is only filled by keyword.
        """
        positional = self.positional
        kwargs = dict(self.keywords)
        if self.outcome:
            reserved = reserved_parameters(condition)
            for key, value in self.outcome.items():
                if key not in reserved:
                    continue
                kwargs[key] = value
                if reserved[key] is not None:
                    positional = positional[:reserved[key]]
        return positional, kwargs

    def condition_kwargs(self, condition: Callable[..., Any]) -> Dict[str, Any]:
        return self.condition_arguments(condition)[1]

    def apply(self, condition: Callable[..., Any]) -> Any:
        """Evaluate condition for this call."""
        positional, kwargs = self.condition_arguments(condition)
        return condition(*positional, **kwargs)

    def invoke(self, implementation: Callable[..., Any]) -> Any:
        """Call implementation with exactly the arguments of this call."""
        return implementation(*self.positional, **self.keywords)


# Contract functions whose conditions are being evaluated in the current context.
# A call of such a function from inside its own conditions is not verified again.
_IN_PROGRESS: ContextVar[FrozenSet[Tuple[int, int]]] = ContextVar("_IN_PROGRESS", default=frozenset())


def is_verifying(contract_function) -> bool:
    """Whether the conditions of contract_function are being evaluated right now."""
    return contract_function.key in _IN_PROGRESS.get()


@contextmanager
def _verifying(contract_function):
    token = _IN_PROGRESS.set(_IN_PROGRESS.get() | {contract_function.key})
    try:
        yield
    finally:
        _IN_PROGRESS.reset(token)


def _check_violation_type(violation_type: Type[ConditionViolation]) -> None:
    if not (inspect.isclass(violation_type) and issubclass(violation_type, ConditionViolation)):
        raise TypeError(f"violation_type must be a ConditionViolation type, got {violation_type!r}")


def _meta_error(contract_function, condition, call: Call, err: Exception) -> ConditionMetaError:
    logger.debug(
        "%s could not be evaluated for %s: %r",
        report.concise_condition("condition", condition),
        contract_function,
        err,
    )
    return ConditionMetaError(contract_function, condition, call.receiver, call.arguments, call.keywords, err)


def _violation(violation_type, contract_function, condition, call: Call) -> ConditionViolation:
    logger.debug(
        "%s: %s failed for %s",
        violation_type.__name__,
        report.concise_condition("condition", condition),
        contract_function,
    )
    return violation_type.from_call(contract_function, condition, call)


def _discard(awaitable: Any) -> None:
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()


def verify(violation_type, contract_function, condition, call: Call) -> None:
    """Evaluate a single condition; raise when it fails or cannot be evaluated.

    Conditions evaluated here cannot be awaited. A condition returning an
    awaitable cannot be judged, and is reported as a ConditionMetaError.
    """
    try:
        outcome = call.apply(condition)
        if inspect.isawaitable(outcome):
            _discard(outcome)
            raise TypeError(
                f"{report.concise_condition('condition', condition)} returned an awaitable, "
                "but is checked synchronously"
            )
        passed = bool(outcome)
    except Exception as err:
        raise _meta_error(contract_function, condition, call, err) from err
    if not passed:
        raise _violation(violation_type, contract_function, condition, call)


def verify_all(
    violation_type: Type[ConditionViolation],
    contract_function,
    conditions: Sequence[Callable[..., Any]],
    call: Call,
) -> None:
    """Evaluate conditions in order, stopping at the first failure.

    Args:
        violation_type: ConditionViolation subtype raised for a falsy condition
        contract_function: The contract function being called
        conditions: Conditions to evaluate, in declaration order
        call: Snapshot of the call, with its outcome when applicable

    Raises:
        ConditionMetaError: A condition raised an exception
        ConditionViolation: A condition returned a falsy value (of violation_type)
    """
    _check_violation_type(violation_type)
    with _verifying(contract_function):
        for condition in conditions:
            verify(violation_type, contract_function, condition, call)


async def averify(violation_type, contract_function, condition, call: Call) -> None:
    """Like verify(), but awaits the condition's result when it is awaitable."""
    try:
        outcome = call.apply(condition)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        passed = bool(outcome)
    except Exception as err:
        raise _meta_error(contract_function, condition, call, err) from err
    if not passed:
        raise _violation(violation_type, contract_function, condition, call)


async def averify_all(
    violation_type: Type[ConditionViolation],
    contract_function,
    conditions: Sequence[Callable[..., Any]],
    call: Call,
) -> None:
    """Like verify_all(), for conditions that may return awaitables.

    Awaitable results are awaited one at a time; the next condition is only
    evaluated after the previous one settled and passed.
    """
    _check_violation_type(violation_type)
    with _verifying(contract_function):
        for condition in conditions:
            await averify(violation_type, contract_function, condition, call)


__all__ = [
    "RESERVED_KEYWORDS",
    "false_condition",
    "MUST_NOT_HAPPEN",
    "result_is_awaitable",
    "RESULT_IS_AWAITABLE",
    "reserved_parameters",
    "accepted_keywords",
    "as_conditions",
    "Call",
    "is_verifying",
    "verify",
    "verify_all",
    "averify",
    "averify_all",
]
