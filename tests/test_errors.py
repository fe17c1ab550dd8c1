"""Tests for the contract error taxonomy."""

import os

import pytest
from contract_functions import (
    ROOT,
    AbstractError,
    Call,
    ConditionError,
    ConditionMetaError,
    ConditionViolation,
    Contract,
    ContractError,
    ExceptionConditionViolation,
    PostconditionViolation,
    PreconditionViolation,
)

PACKAGE_DIR = os.path.join("src", "contract_functions")


def positive(x):
    return x > 0


@pytest.fixture
def double():
    contract = Contract(pre=[positive])
    return contract.implementation(lambda x: x * 2)


def test_hierarchy():
    """Test the shape of the error family."""
    assert issubclass(ContractError, Exception)
    assert issubclass(AbstractError, ContractError)
    assert issubclass(ConditionError, ContractError)
    assert issubclass(ConditionMetaError, ConditionError)
    assert issubclass(ConditionViolation, ConditionError)
    for leaf in (PreconditionViolation, PostconditionViolation, ExceptionConditionViolation):
        assert issubclass(leaf, ConditionViolation)
        assert not issubclass(leaf, ConditionMetaError)


def test_condition_error_fields(double):
    """Test fields of a violation are copied from the call."""
    err = PreconditionViolation(double, positive, None, [-1], {"flag": True})
    assert err.contract_function is double
    assert err.condition is positive
    assert err.receiver is None
    assert err.arguments == (-1,)
    assert dict(err.keywords) == {"flag": True}
    assert err.name == "PreconditionViolation"


def test_condition_error_message(double):
    """Test the message names the condition and the function."""
    err = PreconditionViolation(double, positive, None, (-1,))
    assert "positive" in err.message
    assert "failed while" in err.message
    assert str(err) == err.message


def test_condition_error_details(double):
    """Test details describe the contract, the function and the arguments."""
    err = PreconditionViolation(double, positive, None, (-1,), {"flag": True})
    details = err.details()
    assert "contract:" in details
    assert "condition:" in details
    assert "contract function:" in details
    assert "arguments (1):" in details
    assert "0 (int): -1" in details
    assert "flag (bool): True" in details
    assert str(double.contract.location) in details


def test_stack_composition(double):
    """Test the stack starts with name and message and lists outside frames only."""
    err = PreconditionViolation(double, positive, None, (-1,))
    assert err.stack.startswith(f"PreconditionViolation: {err.message}")
    assert "call stack:" in err.stack
    assert "test_errors.py" in err.raw_stack
    assert PACKAGE_DIR not in err.raw_stack


def test_errors_are_immutable(double):
    """Test errors cannot be changed after construction."""
    err = PostconditionViolation(double, positive, None, (5,), {}, 15)
    with pytest.raises(AttributeError):
        err.result = 10
    with pytest.raises(AttributeError):
        err.condition = None
    with pytest.raises(AttributeError):
        del err.arguments
    assert err.result == 15


def test_immutable_errors_can_be_raised(double):
    """Test the interpreter can still attach traceback and cause."""
    err = PreconditionViolation(double, positive, None, (-1,))
    cause = ValueError("cause")
    with pytest.raises(PreconditionViolation) as excinfo:
        raise err from cause
    assert excinfo.value is err
    assert err.__cause__ is cause
    assert err.__traceback__ is not None


def test_meta_error(double):
    """Test a meta error keeps the error of the condition."""
    error = ZeroDivisionError("division by zero")
    err = ConditionMetaError(double, positive, None, (1,), {}, error)
    assert err.error is error
    assert "error occurred while evaluating" in err.message
    assert "ZeroDivisionError" in err.message
    assert "caused by:" in err.details()


def test_postcondition_violation_details(double):
    """Test postcondition violations report the result."""
    err = PostconditionViolation(double, positive, None, (5,), {}, 15)
    assert "result (int):" in err.details()
    assert "15" in err.details()


def test_exception_condition_violation_details(double):
    """Test exception condition violations report the exception."""
    try:
        raise KeyError("missing")
    except KeyError as exc:
        raised = exc
    err = ExceptionConditionViolation(double, positive, None, (5,), {}, raised)
    assert err.exception is raised
    assert "exception (KeyError):" in err.details()
    assert "Traceback" in err.details()


def test_from_call(double):
    """Test violations are built from a call snapshot."""
    call = Call(arguments=(5,), keywords={"flag": False}).settled(result=15)
    err = PostconditionViolation.from_call(double, positive, call)
    assert err.result == 15
    assert err.arguments == (5,)
    assert dict(err.keywords) == {"flag": False}

    call = Call(arguments=(5,)).settled(exception=KeyError("x"))
    err = ExceptionConditionViolation.from_call(double, positive, call)
    assert isinstance(err.exception, KeyError)


def test_condition_error_validation(double):
    """Test condition errors need a contract function and a callable condition."""
    with pytest.raises(TypeError, match="contract function"):
        PreconditionViolation(lambda x: x, positive, None, ())
    with pytest.raises(TypeError, match="callable"):
        PreconditionViolation(double, "x > 0", None, ())


def test_abstract_error():
    """Test abstract errors refer to their contract."""
    err = AbstractError(ROOT)
    assert err.contract is ROOT
    assert err.message == "an abstract function cannot be executed"
    assert err.stack.startswith("AbstractError: an abstract function cannot be executed")

    with pytest.raises(TypeError, match="Contract"):
        AbstractError("not a contract")


def test_contract_error_message():
    """Test the root error has a default and an explicit message."""
    assert ContractError().message == "abstract type"
    assert str(ContractError("something went wrong")) == "something went wrong"
