"""Tests for runtime settings."""

import os
from typing import TYPE_CHECKING

import pydantic
import pytest

from pytest_tspec.settings import DEFAULT_NESTING_DEPTH, RunnerSettings

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_settings_defaults(settings: RunnerSettings) -> None:
    """Provide defaults when nothing is configured."""
    assert settings.max_nesting_depth == DEFAULT_NESTING_DEPTH
    assert settings.after_undefined == 'skipped'
    assert settings.stop_on_failure is False


def test_settings_from_environment(settings: RunnerSettings, mocker: 'MockerFixture') -> None:
    """Resolve settings from prefixed environment variables."""
    mocker.patch.dict(os.environ, {
        'TSPEC_MAX_NESTING_DEPTH': '4',
        'TSPEC_AFTER_UNDEFINED': 'pending',
        'TSPEC_STOP_ON_FAILURE': 'true',
        'MAX_NESTING_DEPTH': '100',
    })

    resolved = RunnerSettings()

    assert resolved.max_nesting_depth == 4
    assert resolved.after_undefined == 'pending'
    assert resolved.stop_on_failure is True


def test_settings_arguments_override_environment(settings: RunnerSettings, mocker: 'MockerFixture') -> None:
    """Prefer explicit arguments over environment variables."""
    mocker.patch.dict(os.environ, {'TSPEC_MAX_NESTING_DEPTH': '4'})

    assert RunnerSettings(max_nesting_depth=8).max_nesting_depth == 8


@pytest.mark.parametrize('values, except_message', (
    pytest.param({'max_nesting_depth': 0}, r'greater than or equal to 1', id='zero depth'),
    pytest.param({'max_nesting_depth': 100000}, r'less than or equal to 100', id='depth over limit'),
    pytest.param({'after_undefined': 'failed'}, r"Input should be 'skipped' or 'pending'", id='unknown outcome'),
))
def test_settings_invalid(settings: RunnerSettings, values: dict, except_message: str) -> None:
    """Reject invalid settings values."""
    with pytest.raises(pydantic.ValidationError, match=except_message):
        RunnerSettings(**values)


def test_settings_are_immutable(settings: RunnerSettings) -> None:
    """Forbid modifying resolved settings."""
    with pytest.raises(pydantic.ValidationError, match=r'frozen'):
        settings.stop_on_failure = True  # type: ignore[misc]
