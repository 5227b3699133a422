"""Run progress notifications.

A formatter observes a run without influencing it. The engine calls it
at suite, scenario and step boundaries; rendering and reporting are
left to subclasses.
"""

from logging import Logger, getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pytest_tspec.core.definitions import StepDefinition
    from pytest_tspec.core.results import ScenarioResult, StepResult, SuiteResult
    from pytest_tspec.schema import Scenario, Step


class Formatter:
    """Base formatter ignoring every event."""

    def suite_started(self) -> None:
        """Called once after the before-suite hooks ran."""

    def scenario_started(self, scenario: 'Scenario') -> None:
        """Called before the before-scenario hooks of a scenario."""

    def step_defined(self, step: 'Step', definition: 'StepDefinition') -> None:
        """Called when a top-level step matched a definition."""

    def step_finished(self, step: 'Step', result: 'StepResult') -> None:
        """Called with the classified result of a top-level step."""

    def scenario_finished(self, scenario: 'Scenario', result: 'ScenarioResult') -> None:
        """Called after the after-scenario hooks of a scenario."""

    def suite_finished(self, result: 'SuiteResult') -> None:
        """Called once before the after-suite hooks run."""


class LoggingFormatter(Formatter):
    """Formatter writing run progress to a logger.

    Passed steps and scenario boundaries are logged at DEBUG; failed,
    undefined and other non-passed results at INFO.
    """

    def __init__(self, logger: Logger | None = None) -> None:
        """Initialize the formatter.

        Args:
            logger: Target logger; the module logger if omitted.
        """
        self.logger = logger or getLogger(__name__)

    def suite_started(self) -> None:
        self.logger.debug('Suite started')

    def scenario_started(self, scenario: 'Scenario') -> None:
        self.logger.debug('Scenario %r started', scenario.name)

    def step_defined(self, step: 'Step', definition: 'StepDefinition') -> None:
        self.logger.debug('Step %r matched /%s/', step.text, definition.expression)

    def step_finished(self, step: 'Step', result: 'StepResult') -> None:
        if result.passed:
            self.logger.debug('Step %r passed', step.text)
            return

        message = f'Step {step.text!r} {result.outcome.value}'
        if result.error is not None:
            message += f': {result.error}'

        self.logger.info(message)

    def scenario_finished(self, scenario: 'Scenario', result: 'ScenarioResult') -> None:
        self.logger.debug('Scenario %r %s', scenario.name, result.outcome.value)

    def suite_finished(self, result: 'SuiteResult') -> None:
        self.logger.info(
            'Suite finished: %s',
            ', '.join(
                f'{count} {outcome.value}'
                for outcome, count in sorted(result.statistics.items())
            ) or 'no scenarios',
        )
