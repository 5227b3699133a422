"""Tests for the pytest plugin."""

from typing import TYPE_CHECKING

import pytest

from pytest_tspec.formatters import LoggingFormatter
from pytest_tspec.plugin import pytest_addoption, pytest_configure
from pytest_tspec.settings import RunnerSettings
from pytest_tspec.suite import TestSuite

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


@pytest.fixture
def config(mocker: 'MockerFixture', settings: RunnerSettings) -> 'MockType':
    """Provide a pytest configuration mock with unset options."""
    options: dict[str, object] = {}

    config = mocker.Mock(spec=['getoption', 'tspec_settings'])
    config.getoption.side_effect = lambda name, default=None: options.get(name, default)
    config.options = options

    return config


def test_addoption(mocker: 'MockerFixture') -> None:
    """Register the command-line options in a dedicated group."""
    parser = mocker.Mock()

    pytest_addoption(parser)

    group = parser.getgroup.return_value
    names = [call.args[0] for call in group.addoption.call_args_list]

    assert names == ['--tspec-max-depth', '--tspec-after-undefined', '--tspec-stop-on-failure']


def test_configure_defaults(config: 'MockType') -> None:
    """Resolve default settings when no option is given."""
    pytest_configure(config)

    assert config.tspec_settings == RunnerSettings()


def test_configure_options(config: 'MockType') -> None:
    """Override settings with command-line options."""
    config.options.update({
        'tspec_max_depth': 3,
        'tspec_after_undefined': 'pending',
        'tspec_stop_on_failure': True,
    })

    pytest_configure(config)

    assert config.tspec_settings.max_nesting_depth == 3
    assert config.tspec_settings.after_undefined == 'pending'
    assert config.tspec_settings.stop_on_failure is True


def test_configure_invalid_option(config: 'MockType') -> None:
    """Report invalid settings as a usage error."""
    config.options['tspec_max_depth'] = 0

    with pytest.raises(pytest.UsageError, match=r'^Invalid pytest-tspec settings'):
        pytest_configure(config)


def test_suite_fixture(tspec_suite: TestSuite) -> None:
    """Provide a fresh suite logging its progress."""
    assert isinstance(tspec_suite, TestSuite)
    assert isinstance(tspec_suite.engine.formatter, LoggingFormatter)
    assert tspec_suite.definitions == ()
