"""Core type definitions for step handlers.

This module defines the types a handler may use in its signature:
the return type of nested (multistep) handlers and width-constrained
numeric parameter types. Width constraints are expressed as pydantic
field metadata and enforced when captured text is bound to a parameter.
"""

from struct import pack, unpack
from typing import Annotated

from pydantic import AfterValidator, Field

#: Return type of a nested handler. The texts are matched and executed
#: in order as if they were steps of the scenario; the first one that
#: does not pass fails the parent step.
type Steps = list[str]

FLOAT32_MAX = 3.4028234663852886e38


def to_float32(value: float) -> float:
    """Round a float to single precision."""
    return unpack('f', pack('f', value))[0]


Int8 = Annotated[int, Field(ge=-(2**7), le=2**7 - 1)]
Int16 = Annotated[int, Field(ge=-(2**15), le=2**15 - 1)]
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]

Float32 = Annotated[float, Field(ge=-FLOAT32_MAX, le=FLOAT32_MAX), AfterValidator(to_float32)]
Float64 = Annotated[float, Field()]
