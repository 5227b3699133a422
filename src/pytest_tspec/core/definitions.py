"""Step definition models.

A step definition binds a compiled pattern to a handler. Handlers come
in a closed set of variants (`HandlerKind`) and declare parameters from
a fixed table of argument kinds (`ArgumentKind`). Both are resolved once
at registration, so the execution engine never inspects handlers again.
"""

from collections.abc import Callable
from enum import StrEnum
from re import Pattern
from typing import Any

from pydantic import Field, TypeAdapter

from pytest_tspec.models import SchemaModel

#: Any callable accepted as a step handler.
type StepHandler = Callable[..., Any]


class HandlerKind(StrEnum):
    """Handler variants."""

    #: Returns `None` on success or an exception instance on failure.
    ERROR = 'error'
    #: Returns an ordered sequence of step texts to execute instead.
    NESTED = 'nested'


class ArgumentKind(StrEnum):
    """Supported handler parameter kinds."""

    INTEGER = 'integer'
    FLOAT = 'float'
    STRING = 'string'
    BYTES = 'bytes'
    DOCSTRING = 'docstring'
    TABLE = 'table'
    ANY = 'any'

    @property
    def structured(self) -> bool:
        """Whether the kind only accepts the attached step argument."""
        return self in (ArgumentKind.DOCSTRING, ArgumentKind.TABLE)


class Parameter(SchemaModel):
    """Declared handler parameter."""

    name: str = Field(
        title='Parameter name',
    )

    kind: ArgumentKind = Field(
        default=ArgumentKind.ANY,
        title='Argument kind',
        description='Conversion applied to the value bound to the parameter.',
    )

    required: bool = Field(
        default=True,
        title='Required flag',
        description='False if the parameter declares a default value.',
    )

    adapter: TypeAdapter | None = Field(  # type: ignore[type-arg]
        default=None,
        title='Constraint validator',
        description=(
            'Validator for annotated parameter types, for example '
            'integer width limits. Applied after conversion.'
        ),
    )


class StepDefinition(SchemaModel):
    """Registered step definition.

    Contains the pattern used to match step texts, the handler and
    its resolved shape. Definitions are passed to the formatter when
    a step is matched and are attached to step results.
    """

    pattern: Pattern[str] = Field(
        title='Step pattern',
        description='Compiled regular expression matched against step texts.',
    )

    handler: StepHandler = Field(
        title='Step handler',
    )

    kind: HandlerKind = Field(
        default=HandlerKind.ERROR,
        title='Handler kind',
    )

    parameters: tuple[Parameter, ...] = Field(
        default=(),
        title='Handler parameters',
        description='Positional parameters in declaration order.',
    )

    @property
    def nested(self) -> bool:
        """Whether the handler returns nested steps."""
        return self.kind is HandlerKind.NESTED

    @property
    def expression(self) -> str:
        """Source of the pattern."""
        return self.pattern.pattern

    @property
    def name(self) -> str:
        """Display name of the handler."""
        return getattr(self.handler, '__qualname__', None) or repr(self.handler)
