"""Tests configurations and fixtures."""

import os
from typing import TYPE_CHECKING

import pytest

from pytest_tspec.formatters import Formatter
from pytest_tspec.schema import Scenario, Step
from pytest_tspec.settings import RunnerSettings
from pytest_tspec.suite import TestSuite

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


@pytest.fixture
def settings(mocker: 'MockerFixture') -> RunnerSettings:
    """Provide default runtime settings isolated from the environment.

    `TSPEC_*` variables of the developer or CI environment are removed
    for the duration of the test so that defaults are deterministic.
    """
    environment = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith('TSPEC_')
    }
    mocker.patch.dict(os.environ, environment, clear=True)

    return RunnerSettings()


@pytest.fixture
def formatter(mocker: 'MockerFixture') -> 'MockType':
    """Provide a formatter mock recording every notification."""
    return mocker.Mock(spec=Formatter)


@pytest.fixture
def suite(settings: RunnerSettings, formatter: 'MockType') -> TestSuite:
    """Provide an empty suite with default settings."""
    return TestSuite(settings=settings, formatter=formatter)


@pytest.fixture
def make_scenario() -> 'Callable[..., Scenario]':
    """Provide a factory building scenarios from step texts.

    Step texts may be given as strings or as ready `Step` models
    when a step needs a structured argument.
    """
    def make(*steps: str | Step, name: str = 'example') -> Scenario:
        return Scenario(
            name=name,
            steps=tuple(
                step if isinstance(step, Step) else Step(text=step)
                for step in steps
            ),
        )

    return make
