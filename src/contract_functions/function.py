"""Contract functions.

A contract function is the public entry point of an implementation that is
verified against a contract. It is an adapter object: it owns references to
the contract, the implementation, and the location where it was created, and
delegates calls to the contract's call protocol. The implementation itself is
never modified.

Contract functions behave like the functions they wrap:

- they carry the implementation's name, docstring and signature;
- as class attributes they bind the instance they are accessed through, like
  methods do;
- they can be partially applied;
- when the implementation is a class, they can stand in for it in
  ``isinstance``, ``issubclass`` and as a base class.

Binding and partial application produce new contract functions with the same
contract and location, wrapping the correspondingly bound implementation.
"""

import functools
import inspect
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from .conditions import Call
from .errors import AbstractError
from .location import is_location


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


class ContractFunction:
    """Callable that verifies its contract at every call of its implementation.

    Obtain instances through ``Contract.implementation``.

    Attributes:
        contract: The contract this function is verified against
        implementation: The wrapped callable (bound, when this function is bound)
        location: Where this contract function was created
        receiver: The instance this function is bound to, or None
    """

    def __init__(
        self,
        contract,
        implementation: Callable[..., Any],
        location,
        receiver_args: Tuple[Any, ...] = (),
        partial_args: Tuple[Any, ...] = (),
        partial_keywords: Optional[Mapping[str, Any]] = None,
    ):
        if "_contract" in self.__dict__:
            raise TypeError(f"{self!r} is already linked to a contract")
        from .contract import Contract
        if not isinstance(contract, Contract):
            raise TypeError(f"contract must be a Contract, got {type(contract).__name__}")
        if not callable(implementation):
            raise TypeError(f"implementation must be callable, got {type(implementation).__name__}")
        if not is_location(location):
            raise TypeError(f"location must be a location, got {location!r}")
        if len(receiver_args) > 1:
            raise ValueError("A contract function is bound to at most 1 receiver")

        object.__setattr__(self, "_contract", contract)
        object.__setattr__(self, "_root", implementation)
        object.__setattr__(self, "_location", location)
        object.__setattr__(self, "_receiver_args", tuple(receiver_args))
        object.__setattr__(self, "_partial_args", tuple(partial_args))
        object.__setattr__(self, "_partial_keywords", MappingProxyType(dict(partial_keywords or {})))

        bound = self._receiver_args + self._partial_args
        if bound or self._partial_keywords:
            implementation = functools.partial(implementation, *bound, **self._partial_keywords)
        object.__setattr__(self, "_implementation", implementation)

        functools.update_wrapper(self, self._root, updated=())
        self.__wrapped__ = implementation

    def __setattr__(self, name: str, value: Any) -> None:
        if not _is_dunder(name):
            raise AttributeError(f"contract function is immutable, cannot set '{name}'")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if not _is_dunder(name):
            raise AttributeError(f"contract function is immutable, cannot delete '{name}'")
        object.__delattr__(self, name)

    @property
    def contract(self):
        return self._contract

    @property
    def implementation(self) -> Callable[..., Any]:
        return self._implementation

    @property
    def location(self):
        return self._location

    @property
    def receiver(self) -> Any:
        return self._receiver_args[0] if self._receiver_args else None

    @property
    def is_bound(self) -> bool:
        return bool(self._receiver_args)

    @property
    def key(self) -> Tuple[int, int]:
        """Identifies the operation: the same contract with the same implementation."""
        return id(self._contract), id(self._root)

    @property
    def callee(self) -> "ContractFunction":
        """This function, bound to the same receiver, without partially applied arguments.

        Conditions receive it as ``callee`` to re-invoke the verified operation
        with a full argument list.
        """
        if not (self._partial_args or self._partial_keywords):
            return self
        cached = self.__dict__.get("_callee")
        if cached is None:
            cached = ContractFunction(self._contract, self._root, self._location, self._receiver_args)
            object.__setattr__(self, "_callee", cached)
        return cached

    def snapshot(self, args: Tuple[Any, ...], kwargs: Mapping[str, Any]) -> Call:
        """Snapshot of a call with args and kwargs, bound arguments included."""
        return Call(
            receiver_args=self._receiver_args,
            arguments=self._partial_args + tuple(args),
            keywords={**self._partial_keywords, **kwargs},
        )

    def execute(self, call: Call) -> Any:
        """Call the implementation for call, without any verification."""
        return call.invoke(self._root)

    def __call__(self, *args, **kwargs):
        return self._contract.invoke(self, self.snapshot(args, kwargs))

    def _derive(self, receiver_args: Tuple[Any, ...], partial_args: Tuple[Any, ...], partial_keywords) -> "ContractFunction":
        return ContractFunction(
            self._contract,
            self._root,
            self._location,
            receiver_args=receiver_args,
            partial_args=partial_args,
            partial_keywords=partial_keywords,
        )

    def bind(self, receiver: Any) -> "ContractFunction":
        """Contract function with receiver bound, like a method bound to an instance."""
        if self._receiver_args:
            raise TypeError(f"{self!r} is already bound")
        return self._derive((receiver,), self._partial_args, self._partial_keywords)

    def partial(self, *args, **kwargs) -> "ContractFunction":
        """Contract function with leading positional and some keyword arguments applied."""
        return self._derive(
            self._receiver_args,
            self._partial_args + args,
            {**self._partial_keywords, **kwargs},
        )

    def __get__(self, instance, owner=None):
        if instance is None or self._receiver_args:
            return self
        return self.bind(instance)

    # Stand-in for a class implementation

    def _implementation_class(self) -> type:
        if not inspect.isclass(self._root):
            raise TypeError(f"{self!r} does not wrap a class")
        return self._root

    def __instancecheck__(self, instance: Any) -> bool:
        return isinstance(instance, self._implementation_class())

    def __subclasscheck__(self, subclass: type) -> bool:
        return issubclass(subclass, self._implementation_class())

    def __mro_entries__(self, bases):
        return (self._implementation_class(),)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ContractFunction):
            return NotImplemented
        return (
            self._contract is other._contract
            and self._root is other._root
            and len(self._receiver_args) == len(other._receiver_args)
            and all(a is b for a, b in zip(self._receiver_args, other._receiver_args))
            and self._partial_args == other._partial_args
            and self._partial_keywords == other._partial_keywords
        )

    def __hash__(self) -> int:
        return hash((self.key, tuple(id(r) for r in self._receiver_args)))

    def __repr__(self) -> str:
        name = getattr(self, "__qualname__", None) or repr(self._root)
        bound = f" bound to {type(self.receiver).__name__}" if self._receiver_args else ""
        return f"<contract function {name}{bound}>"


class AbstractFunction(ContractFunction):
    """Placeholder for an operation that has a contract, but no implementation.

    Calling it raises AbstractError, without verifying anything.
    """

    def __init__(self, contract):
        def abstract(*args, **kwargs):
            raise AbstractError(contract)

        super().__init__(contract, abstract, contract.location)

    def __call__(self, *args, **kwargs):
        raise AbstractError(self._contract)

    def __get__(self, instance, owner=None):
        return self


def is_contract_function(f: Any, contract=None) -> bool:
    """Whether f is a contract function, for contract when one is given."""
    if not isinstance(f, ContractFunction):
        return False
    return contract is None or f.contract is contract


__all__ = ["ContractFunction", "AbstractFunction", "is_contract_function"]
