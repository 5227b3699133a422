"""Conversion of step captures into handler arguments.

Values supplied to a handler are the pattern captures in order,
followed by the structured step argument if the step has one. Each
value is converted according to the kind of the parameter it lands on.
Any mismatch raises `StepBindingError`; the engine turns it into a
failed step.
"""

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pytest_tspec.errors import StepBindingError
from pytest_tspec.schema import DocString, Table

from .definitions import ArgumentKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

if TYPE_CHECKING:
    from pytest_tspec.errors import ErrorContext
    from pytest_tspec.schema import Step

    from .definitions import Parameter, StepDefinition


def _parse_bytes(value: str) -> bytes:
    return value.encode('utf-8')


def _check_literal(value: str) -> str:
    """Reject what Python number literals allow but plain decimals do not."""
    if not value.isascii() or '_' in value or value != value.strip():
        raise ValueError(f'Invalid numeric literal: {value!r}')

    return value


def _parse_int(value: str) -> int:
    return int(_check_literal(value), 10)


def _parse_float(value: str) -> float:
    return float(_check_literal(value))


#: Conversions of captured text by parameter kind.
CONVERTERS: dict[ArgumentKind, 'Callable[[str], Any]'] = {
    ArgumentKind.INTEGER: _parse_int,
    ArgumentKind.FLOAT: _parse_float,
    ArgumentKind.STRING: str,
    ArgumentKind.BYTES: _parse_bytes,
}

#: Types of structured step arguments by parameter kind.
STRUCTURED: dict[ArgumentKind, type[DocString | Table]] = {
    ArgumentKind.DOCSTRING: DocString,
    ArgumentKind.TABLE: Table,
}


class ArgumentBinder:
    """Builds positional handler arguments for a matched step."""

    @classmethod
    def bind(cls, definition: 'StepDefinition', captures: 'Sequence[str | None]',
             step: 'Step', location: 'ErrorContext | None' = None) -> tuple[Any, ...]:
        """Convert captures and the step argument into handler arguments.

        Args:
            definition: Matched step definition.
            captures: Groups captured by the definition pattern.
            step: Matched step.
            location: Location of the step, used for error reporting.

        Returns:
            Positional arguments for the handler.

        Raises:
            StepBindingError: On arity mismatch or conversion failure.
        """
        values: list[str | DocString | Table | None] = list(captures)
        if step.argument is not None:
            values.append(step.argument)

        parameters = definition.parameters
        required = sum(1 for parameter in parameters if parameter.required)

        if not required <= len(values) <= len(parameters):
            expected = f'{len(parameters)}'
            if required != len(parameters):
                expected = f'{required} to {len(parameters)}'
            raise StepBindingError.from_step(
                f'Handler {definition.name!r} expects {expected} arguments, '
                f'but the step supplies {len(values)}',
                step,
                location,
            )

        return tuple(
            cls.convert(parameter, value, step, location, position=position)
            for position, (parameter, value) in enumerate(zip(parameters, values, strict=False))
        )

    @classmethod
    def convert(cls, parameter: 'Parameter', value: str | DocString | Table | None,  # noqa: ANN401, PLR0913
                step: 'Step', location: 'ErrorContext | None' = None, *,
                position: int = 0) -> Any:
        """Convert one value for a parameter.

        Args:
            parameter: Target parameter declaration.
            value: Captured text, structured argument, or `None` for
                an optional group that did not participate.
            step: Matched step.
            location: Location of the step, used for error reporting.
            position: Position of the argument.

        Returns:
            Converted value.

        Raises:
            StepBindingError: If the value does not fit the parameter.
        """
        if value is None or parameter.kind is ArgumentKind.ANY:
            return value

        described = f'argument {position + 1} ({parameter.name!r})'
        is_text = isinstance(value, str)

        if parameter.kind.structured:
            if not isinstance(value, STRUCTURED[parameter.kind]):
                raise StepBindingError.from_step(
                    f'Cannot bind {described}: expected an attached {parameter.kind.value}, '
                    f'got {type(value).__name__}',
                    step,
                    location,
                )
            return value

        if not is_text:
            raise StepBindingError.from_step(
                f'Cannot bind {described}: attached {type(value).__name__} '
                f'cannot be converted to {parameter.kind.value}',
                step,
                location,
            )

        try:
            converted = CONVERTERS[parameter.kind](value)
            if parameter.adapter is not None:
                converted = parameter.adapter.validate_python(converted)

        except (ValueError, ValidationError) as base:
            raise StepBindingError.from_step(
                f'Cannot bind {described}: {value!r} is not a valid {parameter.kind.value}',
                step,
                location,
                error=base,
            ) from base

        return converted
