"""Stack capture restricted to frames outside this library.

Contracts and contract functions remember where they were created, and
contract errors remember where they were raised. Frames that belong to the
library itself carry no information for the developer reading a report, so
they are filtered out here, in one place.
"""

import os
import traceback
from typing import List

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep

# Generated code (dataclass __init__, exec'd helpers) has no source file
_GENERATED = "<string>"

UNKNOWN_LOCATION = "    location could not be determined"


class _InternalLocation:
    """Location of contracts that are created by the library itself."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "INTERNAL"

    __str__ = __repr__


INTERNAL_LOCATION = _InternalLocation()


def _is_outside(frame: traceback.FrameSummary) -> bool:
    if frame.filename == _GENERATED:
        return False
    return not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR)


def _outside_frames() -> List[traceback.FrameSummary]:
    return [frame for frame in traceback.extract_stack() if _is_outside(frame)]


def _format(frame: traceback.FrameSummary) -> str:
    return f'  File "{frame.filename}", line {frame.lineno}, in {frame.name}'


def location(skip: int = 0) -> str:
    """Single-line reference to the innermost frame outside the library.

    Args:
        skip: Number of additional outside frames to skip, counting outwards

    Returns:
        A line in the format of a traceback entry, clickable in most consoles
    """
    if skip < 0:
        raise ValueError(f"skip must be non-negative, got {skip}")
    frames = _outside_frames()
    if not frames:
        return UNKNOWN_LOCATION
    return _format(frames[max(len(frames) - 1 - skip, 0)])


def raw(skip: int = 0) -> str:
    """Multi-line stack of the frames outside the library, innermost last."""
    if skip < 0:
        raise ValueError(f"skip must be non-negative, got {skip}")
    frames = _outside_frames()
    if skip:
        frames = frames[:-skip] or frames[:1]
    if not frames:
        return UNKNOWN_LOCATION
    return "".join(traceback.format_list(frames)).rstrip("\n")


def is_location(value) -> bool:
    """Whether value is a usable creation-site token."""
    return value is INTERNAL_LOCATION or (isinstance(value, str) and bool(value.strip()))


__all__ = [
    "INTERNAL_LOCATION",
    "UNKNOWN_LOCATION",
    "location",
    "raw",
    "is_location",
]
