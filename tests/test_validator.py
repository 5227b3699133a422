"""Tests for registration-time handler validation."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

import pytest

from pytest_tspec.core import ArgumentKind, HandlerKind, PatternRegistry
from pytest_tspec.core.validator import define_step, resolve_argument_kind, resolve_handler_kind
from pytest_tspec.errors import StepDefinitionError
from pytest_tspec.schema import DocString, Table
from pytest_tspec.values import Float32, Int8, Int64, Steps

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_mock import MockerFixture


def variadic(*values: str) -> None:
    return None


def variadic_keywords(**values: str) -> None:
    return None


def keyword_only(*, value: str) -> None:
    return None


def unsupported(value: dict) -> None:
    return None


def unresolvable(value: 'Missing') -> None:  # noqa: F821
    return None


@pytest.mark.parametrize('annotation, except_kind', (
    pytest.param(None, HandlerKind.ERROR, id='none'),
    pytest.param(type(None), HandlerKind.ERROR, id='none type'),
    pytest.param(Exception, HandlerKind.ERROR, id='exception'),
    pytest.param(AssertionError, HandlerKind.ERROR, id='exception subclass'),
    pytest.param(ValueError | None, HandlerKind.ERROR, id='optional exception'),
    pytest.param(Optional[Exception], HandlerKind.ERROR, id='typing optional exception'),  # noqa: UP045
    pytest.param(Steps, HandlerKind.NESTED, id='steps alias'),
    pytest.param(list[str], HandlerKind.NESTED, id='list of strings'),
    pytest.param(tuple[str, ...], HandlerKind.NESTED, id='tuple of strings'),
    pytest.param(Sequence[str], HandlerKind.NESTED, id='sequence of strings'),
))
def test_resolve_handler_kind(annotation: Any, except_kind: HandlerKind) -> None:  # noqa: ANN401
    """Select the handler variant from the return annotation."""
    assert resolve_handler_kind(annotation) is except_kind


@pytest.mark.parametrize('annotation, expect_message', (
    pytest.param(tuple[str, str], r'^Expected handler to return only one value, but it has: 2', id='two values'),
    pytest.param(tuple[str, int, bool], r'but it has: 3', id='three values'),
    pytest.param(int, r'^Expected handler to return an error or a list of strings', id='integer'),
    pytest.param(str, r'^Expected handler to return an error or a list of strings', id='string'),
    pytest.param(list[int], r'^Expected handler to return a list of strings', id='list of integers'),
    pytest.param(str | None, r'^Expected handler to return an error', id='optional string'),
))
def test_resolve_handler_kind_unsupported(annotation: Any, expect_message: str) -> None:  # noqa: ANN401
    """Reject return annotations outside of the supported variants."""
    with pytest.raises(StepDefinitionError, match=expect_message):
        resolve_handler_kind(annotation)


def test_resolve_handler_kind_explicit() -> None:
    """Use an explicit variant for handlers without a return annotation."""
    def handler():  # noqa: ANN202
        return ['a step']

    definition = define_step(r'^a nested step$', handler, HandlerKind.NESTED)

    assert definition.kind is HandlerKind.NESTED
    assert definition.nested


def test_resolve_handler_kind_contradiction() -> None:
    """Reject an explicit variant contradicting the return annotation."""
    def handler() -> None:
        return None

    with pytest.raises(StepDefinitionError, match=r"registered as 'nested'"):
        define_step(r'^a step$', handler, HandlerKind.NESTED)


@pytest.mark.parametrize('annotation, except_kind, except_adapter', (
    pytest.param(int, ArgumentKind.INTEGER, False, id='int'),
    pytest.param(Int8, ArgumentKind.INTEGER, True, id='int8'),
    pytest.param(Int64, ArgumentKind.INTEGER, True, id='int64'),
    pytest.param(int | None, ArgumentKind.INTEGER, False, id='optional int'),
    pytest.param(float, ArgumentKind.FLOAT, False, id='float'),
    pytest.param(Float32, ArgumentKind.FLOAT, True, id='float32'),
    pytest.param(str, ArgumentKind.STRING, False, id='str'),
    pytest.param(bytes, ArgumentKind.BYTES, False, id='bytes'),
    pytest.param(DocString, ArgumentKind.DOCSTRING, False, id='docstring'),
    pytest.param(Table, ArgumentKind.TABLE, False, id='table'),
    pytest.param(Any, ArgumentKind.ANY, False, id='any'),
))
def test_resolve_argument_kind(annotation: Any, except_kind: ArgumentKind,  # noqa: ANN401
                               except_adapter: bool) -> None:
    """Map parameter annotations onto the table of argument kinds."""
    kind, adapter = resolve_argument_kind(annotation)

    assert kind is except_kind
    assert (adapter is not None) == except_adapter


@pytest.mark.parametrize('annotation', (
    pytest.param(dict, id='dict'),
    pytest.param(list[str], id='list'),
    pytest.param(int | str, id='union'),
    pytest.param(bool | None, id='optional bool'),
))
def test_resolve_argument_kind_unsupported(annotation: Any) -> None:  # noqa: ANN401
    """Reject parameter annotations outside of the conversion table."""
    with pytest.raises(StepDefinitionError, match=r'^Unsupported argument type'):
        resolve_argument_kind(annotation)


def test_define_step_parameters() -> None:
    """Declare positional parameters in order with their kinds."""
    def handler(count: Int8, name, table: Table | None = None, *, verbose: bool = False) -> None:  # noqa: ANN001
        return None

    definition = define_step(r'^(\d+) (\w+)$', handler)

    assert [item.name for item in definition.parameters] == ['count', 'name', 'table']
    assert [item.kind for item in definition.parameters] == [
        ArgumentKind.INTEGER,
        ArgumentKind.ANY,
        ArgumentKind.TABLE,
    ]
    assert [item.required for item in definition.parameters] == [True, True, False]


@pytest.mark.parametrize('handler, expect_message', (
    pytest.param(variadic, r"^Handler parameter 'values' must be positional", id='variadic'),
    pytest.param(variadic_keywords, r"^Handler parameter 'values' must be positional", id='variadic keywords'),
    pytest.param(keyword_only, r"^Handler parameter 'value' must be positional", id='keyword only'),
    pytest.param(unsupported, r"^Handler parameter 'value': Unsupported argument type", id='unsupported'),
    pytest.param(unresolvable, r'has unresolvable annotations', id='unresolvable annotation'),
))
def test_define_step_invalid_handler(handler: 'Callable[..., None]', expect_message: str) -> None:
    """Reject handler signatures that cannot be bound."""
    with pytest.raises(StepDefinitionError, match=expect_message):
        define_step(r'^a step$', handler)


def test_define_step_error_names_pattern() -> None:
    """Mention the pattern in handler validation errors."""
    def handler(value: dict) -> None:
        return None

    with pytest.raises(StepDefinitionError, match=r'\(step /\^a step\$/\)'):
        define_step(r'^a step$', handler)


def test_two_return_values_never_invoked(mocker: 'MockerFixture') -> None:
    """Fail registration of a handler declaring two return values."""
    spy = mocker.Mock()

    def handler() -> tuple[str, str]:
        spy()
        return 'a', 'b'

    registry = PatternRegistry()
    with pytest.raises(StepDefinitionError, match=r'only one value, but it has: 2'):
        registry.register(r'^a pair$', handler)

    assert len(registry) == 0
    assert registry.lookup('a pair') is None
    spy.assert_not_called()
