"""Execution outcomes and result records.

Results are immutable records produced by the execution engine. They
carry everything hooks and formatters need: the step or scenario, its
classified outcome, the matched definition and the captured error.
"""

from collections import Counter
from enum import StrEnum
from os import linesep

from pydantic import Field

from pytest_tspec.errors import FORMAT_SCENARIO, ErrorFormatter
from pytest_tspec.models import SchemaModel
from pytest_tspec.schema import Scenario, Step  # noqa: TC001

from .definitions import StepDefinition  # noqa: TC001


class Outcome(StrEnum):
    """Classification of an executed step or scenario."""

    #: The handler ran and signaled no error.
    PASSED = 'passed'
    #: The handler signaled an error, raised, or its arguments could not be bound.
    FAILED = 'failed'
    #: No registered pattern matched the step text.
    UNDEFINED = 'undefined'
    #: Not executed because a previous step of the scenario did not pass.
    SKIPPED = 'skipped'
    #: Not executed because a previous step of the scenario was undefined
    #: (only when configured with `after_undefined='pending'`).
    PENDING = 'pending'


class StepResult(SchemaModel):
    """Result of a single step."""

    step: Step

    outcome: Outcome

    definition: StepDefinition | None = Field(
        default=None,
        title='Matched definition',
    )

    error: BaseException | None = Field(
        default=None,
        title='Captured error',
        description='Error of a failed step, chained to its cause where there is one.',
    )

    nested: tuple['StepResult', ...] = Field(
        default=(),
        title='Nested step results',
        description='Results of the steps returned by a nested handler, in order.',
    )

    @property
    def passed(self) -> bool:
        """Whether the step passed."""
        return self.outcome is Outcome.PASSED


class ScenarioResult(SchemaModel):
    """Result of a scenario."""

    scenario: Scenario

    outcome: Outcome

    steps: tuple[StepResult, ...] = Field(
        default=(),
        title='Step results',
    )

    @property
    def passed(self) -> bool:
        """Whether the scenario passed."""
        return self.outcome is Outcome.PASSED

    @property
    def error(self) -> BaseException | None:
        """Error of the first failed step, if any."""
        for result in self.steps:
            if result.error is not None:
                return result.error

        return None

    def describe(self) -> str:
        """Describe why the scenario did not pass."""
        name = self.scenario.name or FORMAT_SCENARIO

        for step_num, result in enumerate(self.steps):
            if result.outcome is Outcome.UNDEFINED:
                return ErrorFormatter.format(
                    f'Scenario {name!r}: step {step_num + 1} is undefined',
                    {'scenario': self.scenario.name, 'step_num': step_num, 'step_text': result.step.text},
                )
            if result.error is not None:
                return f'Scenario {name!r}: {result.error}'

        return f'Scenario {name!r}: {self.outcome.value}'


class SuiteResult(SchemaModel):
    """Result of a suite run."""

    scenarios: tuple[ScenarioResult, ...] = Field(
        default=(),
        title='Scenario results',
    )

    @property
    def ok(self) -> bool:
        """Whether every executed scenario passed."""
        return all(result.passed for result in self.scenarios)

    @property
    def statistics(self) -> Counter[Outcome]:
        """Number of scenarios by outcome."""
        return Counter(result.outcome for result in self.scenarios)

    @property
    def step_statistics(self) -> Counter[Outcome]:
        """Number of top-level steps by outcome."""
        return Counter(
            step.outcome
            for result in self.scenarios
            for step in result.steps
        )

    def raise_for_status(self) -> None:
        """Raise an assertion error describing every failed scenario.

        Raises:
            AssertionError: If any scenario did not pass.
        """
        if self.ok:
            return

        raise AssertionError(linesep.join(
            result.describe()
            for result in self.scenarios
            if not result.passed
        ))
