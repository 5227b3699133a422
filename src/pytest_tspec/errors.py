"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report step definition problems at setup time, per-step failures
captured during execution, and fatal lifecycle hook faults in a structured
and extensible way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError

    from pytest_tspec.schema import Step

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_SCENARIO = '<unnamed scenario>'
FORMAT_INDENT = 4

MAPPINGS = (dict,)
SCALARS = (str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    This structure aggregates optional metadata that may be available
    at different stages of registration or execution.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the scenario where the error occurred.
    scenario: str | None

    #: Number of the step within the scenario.
    step_num: int | None
    #: Text of the failing step.
    step_text: str | None

    #: Source of the pattern matched by the step.
    pattern: str | None
    #: Nesting depth of the failing step (zero for top-level steps).
    depth: int | None

    #: Underlying exception that triggered formatting.
    error: BaseException | None

    #: Runtime element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting step-related errors.

    This formatter is responsible for producing human-readable
    error messages with optional location and YAML-based
    contextual snippets.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        details = cls.get_location_string(context, indent=FORMAT_INDENT)
        details += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)
        if not details:
            return message

        return f'{message}{linesep}{details}'

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format scenario and step location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including scenario, step
            number, step text, pattern and nesting depth when available.
        """
        indent = cls._ensure_indent(indent)

        message = ''
        if (scenario := context.get('scenario')) is not None:
            message += f'{indent}in scenario "{scenario or FORMAT_SCENARIO}"{linesep}'

        if (step_num := context.get('step_num')) is not None:
            step_num += 1
            message += f'{indent}on step {step_num}'
            if step_text := context.get('step_text'):
                message += f' "{step_text}"'
            if depth := context.get('depth'):
                message += f', nesting level {depth}'
            message += linesep
        elif step_text := context.get('step_text'):
            message += f'{indent}on step "{step_text}"{linesep}'

        if pattern := context.get('pattern'):
            message += f'{indent}matched by /{pattern}/{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing the failing element.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Non-scalar and non-container objects are replaced with
        a placeholder to prevent leaking opaque data.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class DefinitionWarning(UserWarning):
    """Warning emitted for suspicious but valid suite configuration.

    Used when a registration is accepted but is likely a mistake,
    for example a pattern that can never be reached because it is
    registered twice.
    """


class TSpecError(Exception, ErrorFormatter):
    """Base exception for all pytest-tspec errors.

    All custom exceptions raised by the library should inherit from
    this class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class StepDefinitionError(TSpecError):
    """Error raised when a step definition or hook cannot be registered.

    Raised immediately from the registration call for patterns that do
    not compile, handlers that are not callable or declare an unsupported
    shape, and hooks that are not callable. A suite with such an error
    must not run.
    """


class HookError(TSpecError):
    """Error raised when a lifecycle hook fails.

    Hook faults are never isolated: the original exception is chained
    as the cause and the run is aborted.
    """


class SuiteStateError(TSpecError):
    """Error raised when the execution engine is used out of order."""


class ScenarioSchemaError(TSpecError):
    """Error raised when a provider supplies a malformed scenario.

    Scenarios given as mappings are validated before the suite starts,
    so a malformed document never leaves the suite half-run.
    """

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            position: int | None = None) -> 'Self':
        """Create a schema error from a Pydantic validation failure.

        Args:
            error: ValidationError raised by Pydantic.
            data: Scenario data as supplied by the provider.
            position: Position of the scenario in the supplied sequence.

        Returns:
            ScenarioSchemaError pointing at the first failing element.
        """
        prefix = 'Invalid scenario'
        if position is not None:
            prefix += f' #{position + 1}'

        error_context = ErrorContext(error=error, element=data)
        if isinstance(data, dict) and isinstance(data.get('name'), str):
            error_context['scenario'] = data['name']

        if not data or not isinstance(data, dict):
            return cls(f'{prefix}: expected a mapping', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_pydantic_context(data, item):
                message, value = located
                return cls(
                    f'{prefix}: {message}',
                    context=ErrorContext({**error_context, 'element': value}),
                )

        return cls(prefix, context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in scenario data.

        Walks the error location path and extracts the minimal
        substructure responsible for the failure.

        Returns:
            A tuple of (error message, extracted element), or `None`
            if the location cannot be followed through the data.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)) and isinstance(key, int) and 0 <= key < len(last_item):
                container, last_item, last_key = last_item, last_item[key], key
            elif isinstance(last_item, dict) and key in last_item:
                container, last_item, last_key = last_item, last_item[key], key
            else:
                break

        message = next(
            (line.strip() for line in (error.get('msg') or '').splitlines() if line.strip()),
            None,
        )
        if not message or last_key is None:
            return None

        location = '.'.join(str(key) for key in error['loc'])
        if location:
            message = f'{message} at {location}'

        if isinstance(container, (list, tuple)):
            return message, [last_item]

        return message, {last_key: last_item}


class StepError(TSpecError):
    """Base error for failures captured on a single step.

    Step errors never escape the execution engine. They are attached
    to the step result and reported to hooks and the formatter.
    """

    @classmethod
    def from_step(cls, message: str, step: 'Step',
                  location: ErrorContext | None = None, *,
                  error: BaseException | None = None) -> 'Self':
        """Create a step error enriched with location context.

        Args:
            message: Human-readable error description.
            step: Step associated with the error.
            location: Scenario, step number, pattern and nesting depth
                of the step, as far as they are known.
            error: Optional underlying exception.

        Returns:
            An initialized step error with location context.
        """
        error_context = ErrorContext({
            **(location or {}),
            'step_text': step.text,
            'error': error,
            'element': step.model_dump(exclude_none=True),
        })

        return cls(message, context=error_context)


class StepBindingError(StepError):
    """Error raised when step captures cannot be bound to handler parameters.

    Covers arity mismatches, structured arguments bound to scalar
    parameters (and the reverse), and conversion failures.
    """


class StepRuntimeError(StepError):
    """Error raised when a step handler raises or returns an error."""


class StepUndefinedError(StepError):
    """Error raised when a nested step text matches no definition."""


class NestingDepthError(StepError):
    """Error raised when nested step expansion exceeds the depth limit."""
