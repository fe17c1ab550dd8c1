"""Tests for condition protocols."""

import pytest
from contract_functions import (
    Contract,
    ExceptionCondition,
    Postcondition,
    PostconditionViolation,
    Precondition,
    PreconditionViolation,
    false_condition,
)


def test_condition_protocols():
    """Test that plain callables satisfy the condition protocols."""
    assert isinstance(lambda x: x > 0, Precondition)
    assert isinstance(false_condition, Postcondition)
    assert isinstance(len, ExceptionCondition)
    assert not isinstance(42, Precondition)
    assert not isinstance("x > 0", Postcondition)


def test_callable_objects_as_conditions():
    """Test that objects implementing __call__ work as conditions."""

    # Create minimal implementations
    class AtLeast:
        def __init__(self, minimum: int):
            self.minimum = minimum

        def __call__(self, x: int) -> bool:
            return x >= self.minimum

    class ResultBelow:
        def __init__(self, maximum: int):
            self.maximum = maximum

        def __call__(self, x: int, result: int = None) -> bool:
            return result < self.maximum

    class OnlyKeyErrors:
        def __call__(self, x: int, exception: BaseException = None) -> bool:
            return isinstance(exception, KeyError)

    pre = AtLeast(0)
    post = ResultBelow(100)
    exc = OnlyKeyErrors()
    assert isinstance(pre, Precondition)
    assert isinstance(post, Postcondition)
    assert isinstance(exc, ExceptionCondition)

    contract = Contract(pre=[pre], post=[post], exception=[exc])
    table = {1: 10, 2: 200}

    @contract.implementation
    def lookup(x: int) -> int:
        return table[x]

    assert lookup(1) == 10
    with pytest.raises(PostconditionViolation):
        lookup(2)
    with pytest.raises(KeyError):
        lookup(3)
    with pytest.raises(PreconditionViolation):
        lookup(-1)
