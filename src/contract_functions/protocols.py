"""Condition protocols.

Conditions are plain callables. These protocols document the keyword
arguments the engine delivers to each kind; a condition only receives the
reserved keywords (``result``, ``exception``, ``callee``) it declares, by
name or through ``**kwargs``.
"""

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Precondition(Protocol):
    """Checked before the implementation is called.

    Receives the receiver (when bound) and the arguments of the call.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        ...


@runtime_checkable
class Postcondition(Protocol):
    """Checked after the implementation returned nominally.

    Receives the arguments of the call, and may declare ``result`` and
    ``callee`` (the contract function, to re-invoke the verified operation).
    """

    def __call__(self, *args: Any, result: Any = ..., callee: Callable[..., Any] = ..., **kwargs: Any) -> Any:
        ...


@runtime_checkable
class ExceptionCondition(Protocol):
    """Checked after the implementation raised an exception.

    Receives the arguments of the call, and may declare ``exception`` and
    ``callee``. A truthy result means the exception is allowed.
    """

    def __call__(
        self,
        *args: Any,
        exception: BaseException = ...,
        callee: Callable[..., Any] = ...,
        **kwargs: Any,
    ) -> Any:
        ...


__all__ = ["Precondition", "Postcondition", "ExceptionCondition"]
