"""Registration-time validation of step patterns and handlers.

Every check the engine needs about a handler happens here, once:
the pattern is compiled, the return annotation selects the handler
variant and every parameter annotation is mapped onto the fixed table
of argument kinds. Anything unsupported raises `StepDefinitionError`
before a single scenario runs.
"""

from collections.abc import Sequence
from inspect import Parameter as SignatureParameter
from inspect import signature
from re import LOCALE
from re import compile as regexp
from re import error as RegexError  # noqa: N812
from re import Pattern
from types import NoneType, UnionType
from typing import Annotated, Any, TypeAliasType, Union, get_args, get_origin

from pydantic import PydanticUserError, TypeAdapter

from pytest_tspec.errors import StepDefinitionError
from pytest_tspec.schema import DocString, Table

from .definitions import ArgumentKind, HandlerKind, Parameter, StepDefinition

#: Fixed table of parameter base types and their conversions.
ARGUMENT_KINDS: dict[Any, ArgumentKind] = {
    int: ArgumentKind.INTEGER,
    float: ArgumentKind.FLOAT,
    str: ArgumentKind.STRING,
    bytes: ArgumentKind.BYTES,
    DocString: ArgumentKind.DOCSTRING,
    Table: ArgumentKind.TABLE,
    Any: ArgumentKind.ANY,
}

#: Generic containers accepted as the return type of nested handlers.
_STEP_SEQUENCES = (list, Sequence)

_POSITIONAL = (
    SignatureParameter.POSITIONAL_ONLY,
    SignatureParameter.POSITIONAL_OR_KEYWORD,
)


def compile_pattern(pattern: Any) -> Pattern[str]:  # noqa: ANN401
    """Normalize a step pattern to a compiled regular expression.

    Args:
        pattern: Precompiled expression, text, or UTF-8 encoded bytes.

    Returns:
        Compiled text pattern.

    Raises:
        StepDefinitionError: If the pattern has an unsupported type
            or does not compile.
    """
    flags = 0

    if isinstance(pattern, Pattern):
        if not isinstance(pattern.pattern, bytes):
            return pattern
        # LOCALE is valid for bytes patterns only
        flags = pattern.flags & ~LOCALE
        pattern = pattern.pattern

    if isinstance(pattern, bytes):
        try:
            pattern = pattern.decode('utf-8')
        except UnicodeDecodeError as base:
            raise StepDefinitionError(f'Pattern {pattern!r} is not valid UTF-8') from base

    if not isinstance(pattern, str):
        raise StepDefinitionError(
            f'Expected pattern to be a compiled expression, a string or bytes, '
            f'but got: {type(pattern).__name__}',
        )

    try:
        return regexp(pattern, flags)

    except RegexError as base:
        raise StepDefinitionError(f'Invalid step pattern /{pattern}/: {base}') from base


def _unwrap_alias(annotation: Any) -> Any:  # noqa: ANN401
    """Resolve `type X = ...` aliases to their value."""
    while isinstance(annotation, TypeAliasType):
        annotation = annotation.__value__

    return annotation


def _is_error_type(annotation: Any) -> bool:  # noqa: ANN401
    """Whether the annotation is an exception class."""
    return isinstance(annotation, type) and issubclass(annotation, BaseException)


def resolve_handler_kind(annotation: Any,  # noqa: ANN401
                         kind: HandlerKind | None = None) -> HandlerKind:
    """Select the handler variant from a return annotation.

    Args:
        annotation: Return annotation of the handler.
        kind: Explicitly requested variant, if any.

    Returns:
        The handler variant.

    Raises:
        StepDefinitionError: If the annotation declares more than one
            value, an unsupported type, or contradicts `kind`.
    """
    if annotation is SignatureParameter.empty:
        return kind or HandlerKind.ERROR

    resolved = _resolve_return(_unwrap_alias(annotation))
    if kind is not None and kind is not resolved:
        raise StepDefinitionError(
            f'Handler is registered as {kind.value!r}, '
            f'but its return annotation declares {resolved.value!r}',
        )

    return resolved


def _resolve_return(annotation: Any) -> HandlerKind:  # noqa: ANN401
    """Map a concrete return annotation onto a handler variant."""
    if annotation is None or annotation is NoneType or _is_error_type(annotation):
        return HandlerKind.ERROR

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin in (Union, UnionType):
        if all(item is NoneType or _is_error_type(item) for item in args):
            return HandlerKind.ERROR
        raise StepDefinitionError(
            f'Expected handler to return an error, but got: {annotation}',
        )

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis and _unwrap_alias(args[0]) is str:  # noqa: PLR2004
            return HandlerKind.NESTED
        if len(args) != 1:
            raise StepDefinitionError(
                f'Expected handler to return only one value, but it has: {len(args)}',
            )

    if origin in _STEP_SEQUENCES:
        if args and _unwrap_alias(args[0]) is str:
            return HandlerKind.NESTED
        raise StepDefinitionError(
            f'Expected handler to return a list of strings for nested steps, but got: {annotation}',
        )

    raise StepDefinitionError(
        f'Expected handler to return an error or a list of strings, but got: {annotation}',
    )


def resolve_argument_kind(annotation: Any) -> tuple[ArgumentKind, TypeAdapter[Any] | None]:  # noqa: ANN401
    """Map a parameter annotation onto the table of argument kinds.

    Optional annotations (`X | None`) resolve to the kind of `X`.
    Annotated types resolve to the kind of their base type and keep
    a validator for their metadata.

    Args:
        annotation: Parameter annotation.

    Returns:
        Tuple with the argument kind and an optional constraint validator.

    Raises:
        StepDefinitionError: If the annotation is not supported.
    """
    if annotation is SignatureParameter.empty:
        return ArgumentKind.ANY, None

    annotation = _unwrap_alias(annotation)

    if get_origin(annotation) in (Union, UnionType):
        args = tuple(item for item in get_args(annotation) if item is not NoneType)
        if len(args) != 1:
            raise StepDefinitionError(f'Unsupported argument type: {annotation}')
        annotation = _unwrap_alias(args[0])

    adapter = None
    base = annotation
    if get_origin(annotation) is Annotated:
        base = get_args(annotation)[0]
        try:
            adapter = TypeAdapter(annotation)
        except PydanticUserError as base_error:
            raise StepDefinitionError(f'Invalid argument constraints: {annotation}') from base_error

    kind = ARGUMENT_KINDS.get(base)
    if kind is None:
        raise StepDefinitionError(f'Unsupported argument type: {annotation}')

    return kind, adapter


def resolve_parameters(parameters: Sequence[SignatureParameter]) -> tuple[Parameter, ...]:
    """Build parameter declarations for handler signature parameters.

    Args:
        parameters: Parameters of the handler signature.

    Returns:
        Declarations of the positional parameters in order.

    Raises:
        StepDefinitionError: If a parameter is variadic, keyword-only
            without a default, or has an unsupported annotation.
    """
    declared = []

    for item in parameters:
        if item.kind is SignatureParameter.KEYWORD_ONLY and item.default is not item.empty:
            continue

        if item.kind not in _POSITIONAL:
            raise StepDefinitionError(
                f'Handler parameter {item.name!r} must be positional',
            )

        try:
            kind, adapter = resolve_argument_kind(item.annotation)
        except StepDefinitionError as base:
            raise StepDefinitionError(f'Handler parameter {item.name!r}: {base.message}') from base

        declared.append(Parameter(
            name=item.name,
            kind=kind,
            required=item.default is item.empty,
            adapter=adapter,
        ))

    return tuple(declared)


def define_step(pattern: Any, handler: Any,  # noqa: ANN401
                kind: HandlerKind | None = None) -> StepDefinition:
    """Validate a pattern and a handler and build a step definition.

    Args:
        pattern: Precompiled expression, text, or UTF-8 encoded bytes.
        handler: Step handler callable.
        kind: Explicit handler variant; inferred from the return
            annotation if omitted.

    Returns:
        Immutable step definition.

    Raises:
        StepDefinitionError: If the pattern or the handler is invalid.
    """
    compiled = compile_pattern(pattern)

    if not callable(handler):
        raise StepDefinitionError(
            f'Expected handler to be callable, but got: {type(handler).__name__}',
        )

    try:
        handler_signature = signature(handler, eval_str=True)

    except (NameError, SyntaxError) as base:
        raise StepDefinitionError(f'Handler {handler!r} has unresolvable annotations') from base

    except (TypeError, ValueError) as base:
        raise StepDefinitionError(f'Handler {handler!r} has no inspectable signature') from base

    try:
        return StepDefinition(
            pattern=compiled,
            handler=handler,
            kind=resolve_handler_kind(handler_signature.return_annotation, kind),
            parameters=resolve_parameters(tuple(handler_signature.parameters.values())),
        )

    except StepDefinitionError as base:
        raise StepDefinitionError(f'{base.message} (step /{compiled.pattern}/)') from base
