"""Human readable rendering of conditions, values and raised exceptions."""

import inspect
import re
import reprlib
import traceback
from typing import Any

# Constants
MAX_CONCISE_LENGTH = 80
CONCISE_END_LENGTH = 15
CONCISE_SEPARATOR = " … "

_WHITESPACE_RE = re.compile(r"\s+")

_value_repr = reprlib.Repr()
_value_repr.maxlevel = 1
_value_repr.maxlist = 5
_value_repr.maxtuple = 5
_value_repr.maxdict = 5
_value_repr.maxset = 5
_value_repr.maxstring = 60
_value_repr.maxother = 60


def _callable_text(f: Any) -> str:
    name = getattr(f, "__qualname__", None) or getattr(f, "__name__", None)
    if getattr(f, "__name__", None) == "<lambda>":
        # The source line is more telling than "<lambda>"
        try:
            return inspect.getsource(f).strip()
        except (OSError, TypeError):
            return name
    if name:
        return name
    return repr(f)


def concise_condition(prefix: str, f: Any) -> str:
    """Single line representation of a condition or function.

    Long representations keep their start and their end, joined by
    CONCISE_SEPARATOR, so the result is at most MAX_CONCISE_LENGTH long.
    """
    result = f"{prefix} {_callable_text(f)}" if prefix else _callable_text(f)
    result = _WHITESPACE_RE.sub(" ", result)
    if len(result) > MAX_CONCISE_LENGTH:
        start_length = MAX_CONCISE_LENGTH - CONCISE_END_LENGTH - len(CONCISE_SEPARATOR)
        result = result[:start_length] + CONCISE_SEPARATOR + result[-CONCISE_END_LENGTH:]
    return result.strip()


def type_name(v: Any) -> str:
    """Name of the type of v, as good as possible."""
    if v is None:
        return "None"
    return type(v).__qualname__


def value(v: Any) -> str:
    """Short, stable representation of an arbitrary value."""
    if isinstance(v, str):
        return _value_repr.repr(v)
    if isinstance(v, BaseException):
        return f"{type(v).__name__}: {v}"
    if inspect.isclass(v) or inspect.isroutine(v):
        return concise_condition("", v)
    try:
        return _value_repr.repr(v)
    except Exception as err:
        return f"<{type_name(v)} instance, repr failed: {type(err).__name__}>"


def extensive_thrown(thrown: Any) -> str:
    """Full multi-line representation of a raised exception.

    Exceptions that were raised carry a traceback, which is included. Anything
    else is rendered with value().
    """
    if not isinstance(thrown, BaseException):
        return value(thrown)
    lines = traceback.format_exception(type(thrown), thrown, thrown.__traceback__)
    return "".join(lines).rstrip("\n")


__all__ = [
    "MAX_CONCISE_LENGTH",
    "CONCISE_END_LENGTH",
    "CONCISE_SEPARATOR",
    "concise_condition",
    "type_name",
    "value",
    "extensive_thrown",
]
