"""Pytest plugin exposing step suites to tests.

This module integrates `pytest-tspec` with pytest by:
- registering command-line options for the runtime settings;
- resolving shared `RunnerSettings` at configure time;
- providing the `tspec_suite` fixture with a fresh suite per test.

Options left unset fall back to `TSPEC_*` environment variables and
then to the defaults.
"""

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from pytest import UsageError, fixture

from pytest_tspec.formatters import LoggingFormatter
from pytest_tspec.settings import RunnerSettings
from pytest_tspec.suite import TestSuite

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.fixtures import FixtureRequest

#: Command-line options and the settings fields they override.
OPTIONS = {
    'tspec_max_depth': 'max_nesting_depth',
    'tspec_after_undefined': 'after_undefined',
    'tspec_stop_on_failure': 'stop_on_failure',
}


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-tspec.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('tspec', 'step definition suites')

    group.addoption(
        '--tspec-max-depth',
        action='store',
        dest='tspec_max_depth',
        type=int,
        default=None,
        help='Maximum depth of nested step expansion.',
    )
    group.addoption(
        '--tspec-after-undefined',
        action='store',
        dest='tspec_after_undefined',
        choices=('skipped', 'pending'),
        default=None,
        help=(
            'Outcome of the steps following an undefined step '
            'in the same scenario.'
        ),
    )
    group.addoption(
        '--tspec-stop-on-failure',
        action='store_true',
        dest='tspec_stop_on_failure',
        default=None,
        help='Do not start further scenarios of a suite once a scenario failed.',
    )


def pytest_configure(config: 'Config') -> None:
    """Resolve runtime settings.

    The settings are attached to the pytest configuration object as
    `config.tspec_settings`.

    Args:
        config: Pytest configuration object.

    Raises:
        UsageError: If an option or environment variable is invalid.
    """
    overrides: dict[str, Any] = {}
    for option, field in OPTIONS.items():
        value = config.getoption(option, default=None)
        if value is not None:
            overrides[field] = value

    try:
        settings = RunnerSettings(**overrides)

    except ValidationError as base:
        raise UsageError(f'Invalid pytest-tspec settings:\n{base}') from base

    config.tspec_settings = settings  # type: ignore[attr-defined]


@fixture
def tspec_suite(request: 'FixtureRequest') -> TestSuite:
    """Fresh step suite reporting progress to the log.

    Returns:
        Empty suite configured with the resolved runtime settings.
    """
    settings = getattr(request.config, 'tspec_settings', None)

    return TestSuite(settings=settings, formatter=LoggingFormatter())
