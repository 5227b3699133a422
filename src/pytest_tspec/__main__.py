"""CLI utilities for pytest-tspec.

Provides the JSON Schema of scenario documents for providers and
a listing of the step definitions registered by a setup function.
"""

from importlib import import_module
from typing import TYPE_CHECKING

from click import ClickException, argument, echo, group, option

from pytest_tspec.errors import TSpecError
from pytest_tspec.jsonschema import SchemaGenerator
from pytest_tspec.suite import TestSuite

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_tspec.core import StepDefinition


@group(help='Command-line utilities for pytest-tspec.')
def cli() -> None:
    """Root CLI group for pytest-tspec tools."""
    return None


@cli.command(
    name='schema',
    help='Print the JSON Schema of scenario documents to standard output.',
)
@option(
    '--indent',
    type=int,
    default=4,
    show_default=True,
    help='Indentation of the generated JSON.',
)
def print_schema(indent: int) -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema(indent))


def _load_setup(target: str) -> 'Callable[[TestSuite], object]':
    """Import a suite setup function.

    Args:
        target: Reference in the `module:function` form.

    Returns:
        The setup function.

    Raises:
        ClickException: If the reference cannot be resolved.
    """
    module_name, _, function_name = target.partition(':')
    if not module_name or not function_name:
        raise ClickException(f'Expected MODULE:FUNCTION, but got: {target}')

    try:
        module = import_module(module_name)
    except ImportError as base:
        raise ClickException(f'Cannot import module {module_name!r}: {base}') from base

    setup = getattr(module, function_name, None)
    if not callable(setup):
        raise ClickException(f'Module {module_name!r} has no callable {function_name!r}')

    return setup


def _describe(definition: 'StepDefinition') -> str:
    """Render a step definition as a single line."""
    parameters = ', '.join(
        f'{parameter.name}: {parameter.kind.value}'
        + ('' if parameter.required else ' = optional')
        for parameter in definition.parameters
    )

    return f'/{definition.expression}/ [{definition.kind.value}] {definition.name}({parameters})'


@cli.command(
    name='steps',
    help=(
        'List the step definitions registered by a setup function '
        'in precedence order. The function receives an empty suite.'
    ),
)
@argument('target')
def list_steps(target: str) -> None:
    """Apply a setup function to a fresh suite and list its steps.

    Args:
        target: Setup function reference in the `module:function` form.
    """
    setup = _load_setup(target)
    suite = TestSuite()

    try:
        setup(suite)
    except TSpecError as base:
        raise ClickException(str(base)) from base

    for position, definition in enumerate(suite.definitions):
        echo(f'{position + 1:>3}. {_describe(definition)}')


if __name__ == '__main__':
    cli()
