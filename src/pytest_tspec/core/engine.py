"""Suite, scenario and step traversal.

The engine is a one-shot state machine: `IDLE` until `run` is called,
`RUNNING` while scenarios execute and `DONE` afterwards. Handler
invocations run inside a supervised boundary that turns every fault
into a failed step result. Hook invocations are not supervised, so a
hook fault aborts the run (after-suite hooks still run).
"""

from collections.abc import Iterable, Mapping
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pytest_tspec.errors import (
    ErrorContext,
    HookError,
    NestingDepthError,
    ScenarioSchemaError,
    StepError,
    StepRuntimeError,
    SuiteStateError,
)
from pytest_tspec.formatters import Formatter
from pytest_tspec.schema import Scenario
from pytest_tspec.settings import RunnerSettings

from .binder import ArgumentBinder
from .nested import NestedStepExpander
from .results import Outcome, ScenarioResult, StepResult, SuiteResult

if TYPE_CHECKING:
    from pytest_tspec.schema import Step

    from .definitions import StepDefinition
    from .hooks import HookRegistry
    from .registry import PatternRegistry

logger = getLogger(__name__)


class SuiteState(StrEnum):
    """Lifecycle state of an execution engine."""

    IDLE = 'idle'
    RUNNING = 'running'
    DONE = 'done'


class ExecutionEngine:
    """Runs scenarios against registered step definitions and hooks."""

    def __init__(self, registry: 'PatternRegistry', hooks: 'HookRegistry', *,
                 settings: RunnerSettings | None = None,
                 formatter: Formatter | None = None) -> None:
        """Initialize the engine.

        Args:
            registry: Step definitions to match steps against.
            hooks: Lifecycle hooks.
            settings: Runtime settings; resolved from the environment
                if omitted.
            formatter: Receiver of progress notifications.
        """
        self.registry = registry
        self.hooks = hooks

        self.settings = settings or RunnerSettings()
        self.formatter = formatter or Formatter()

        self.expander = NestedStepExpander(
            self.execute_step,
            max_depth=self.settings.max_nesting_depth,
        )

        self.state = SuiteState.IDLE

    @staticmethod
    def load(scenarios: Iterable[Scenario | Mapping[str, Any]]) -> tuple[Scenario, ...]:
        """Validate provider scenarios.

        Args:
            scenarios: Scenario models or mappings in the scenario schema.

        Returns:
            Validated scenarios in order.

        Raises:
            ScenarioSchemaError: If a mapping is not a valid scenario.
        """
        loaded = []

        for position, item in enumerate(scenarios):
            if isinstance(item, Scenario):
                loaded.append(item)
                continue

            try:
                loaded.append(Scenario.model_validate(item))

            except ValidationError as base:
                raise ScenarioSchemaError.from_pydantic_error(
                    base,
                    data=item,
                    position=position,
                ) from base

        return tuple(loaded)

    def run(self, scenarios: Iterable[Scenario | Mapping[str, Any]]) -> SuiteResult:
        """Run a suite of scenarios.

        Args:
            scenarios: Scenario models or mappings in the scenario schema.

        Returns:
            Results of the executed scenarios.

        Raises:
            SuiteStateError: If the engine has already run.
            ScenarioSchemaError: If a scenario is malformed.
            HookError: If a lifecycle hook fails.
        """
        if self.state is not SuiteState.IDLE:
            raise SuiteStateError(f'Cannot run a suite in the {self.state.value!r} state')

        loaded = self.load(scenarios)

        self.state = SuiteState.RUNNING
        logger.debug('Suite is running %d scenarios', len(loaded))

        try:
            self.hooks.run_before_suite()

        except HookError:
            self.state = SuiteState.DONE
            raise

        self.formatter.suite_started()

        results: list[ScenarioResult] = []
        try:
            for scenario in loaded:
                result = self.run_scenario(scenario)
                results.append(result)

                if not result.passed and self.settings.stop_on_failure:
                    logger.info('Scenario %r failed, remaining scenarios are not started', scenario.name)
                    break

            suite = SuiteResult(scenarios=tuple(results))
            self.formatter.suite_finished(suite)

        finally:
            self.state = SuiteState.DONE
            logger.debug('Suite is done')
            self.hooks.run_after_suite()

        return suite

    def run_scenario(self, scenario: Scenario) -> ScenarioResult:
        """Run a single scenario.

        Every step gets before-step and after-step hooks. Once a step
        did not pass, the remaining steps are not executed.

        Args:
            scenario: Scenario to run.

        Returns:
            Result of the scenario.
        """
        self.formatter.scenario_started(scenario)
        self.hooks.run_before_scenario(scenario)

        results: list[StepResult] = []
        follower: Outcome | None = None

        for step_num, step in enumerate(scenario.steps):
            location = ErrorContext(scenario=scenario.name, step_num=step_num)
            self.hooks.run_before_step(step, location)

            if follower is None:
                result = self.execute_step(step, location)
                if not result.passed:
                    follower = self.follower_outcome(result.outcome)
            else:
                result = self.skip_step(step, follower)

            results.append(result)

            self.formatter.step_finished(step, result)
            self.hooks.run_after_step(step, result, location)

        outcome = Outcome.PASSED
        if not all(result.passed for result in results):
            outcome = Outcome.FAILED

        scenario_result = ScenarioResult(
            scenario=scenario,
            outcome=outcome,
            steps=tuple(results),
        )

        self.hooks.run_after_scenario(scenario, scenario_result)
        self.formatter.scenario_finished(scenario, scenario_result)

        return scenario_result

    def follower_outcome(self, outcome: Outcome) -> Outcome:
        """Outcome of the steps following a step that did not pass."""
        if outcome is Outcome.UNDEFINED and self.settings.after_undefined == 'pending':
            return Outcome.PENDING

        return Outcome.SKIPPED

    def skip_step(self, step: 'Step', outcome: Outcome) -> StepResult:
        """Classify a step that is not executed."""
        match = self.registry.lookup(step.text)

        return StepResult(
            step=step,
            outcome=outcome,
            definition=match.definition if match else None,
        )

    def execute_step(self, step: 'Step', location: ErrorContext,
                     depth: int = 0) -> StepResult:
        """Match, bind, invoke and classify a single step.

        Args:
            step: Step to execute.
            location: Scenario and step number of the step.
            depth: Nesting level; zero for scenario steps.

        Returns:
            Classified step result. Step faults never escape.
        """
        match = self.registry.lookup(step.text)
        if match is None:
            logger.debug('Step %r is undefined', step.text)
            return StepResult(step=step, outcome=Outcome.UNDEFINED)

        definition = match.definition
        location = ErrorContext({
            **location,
            'pattern': definition.expression,
            'depth': depth,
        })

        if depth == 0:
            self.formatter.step_defined(step, definition)

        nested: tuple[StepResult, ...] = ()
        failure: StepError | None = None

        try:
            arguments = ArgumentBinder.bind(definition, match.captures, step, location)
            returned = self.invoke(definition, arguments, step, location)

            if definition.nested:
                texts = self.expander.check_texts(returned, step, location)
                nested, error = self.expander.expand(texts, step, location, depth + 1)
                if error is not None:
                    raise error

        except StepError as error:
            failure = error

        except RecursionError as base:
            failure = NestingDepthError.from_step(
                f'Nested steps exceed the interpreter recursion limit at depth {depth}',
                step,
                location,
                error=base,
            )

        if failure is not None:
            logger.debug('Step %r failed: %s', step.text, failure.message)
            return StepResult(
                step=step,
                outcome=Outcome.FAILED,
                definition=definition,
                error=failure,
                nested=nested,
            )

        return StepResult(
            step=step,
            outcome=Outcome.PASSED,
            definition=definition,
            nested=nested,
        )

    @staticmethod
    def invoke(definition: 'StepDefinition', arguments: tuple[Any, ...],  # noqa: ANN401
               step: 'Step', location: ErrorContext) -> Any:
        """Call a handler inside the supervised boundary.

        Args:
            definition: Matched step definition.
            arguments: Bound positional arguments.
            step: Executed step.
            location: Location of the step.

        Returns:
            Value returned by a nested handler, `None` otherwise.

        Raises:
            StepRuntimeError: If the handler raises, returns an error,
                or returns anything else than `None` or an error.
        """
        try:
            returned = definition.handler(*arguments)

        except Exception as base:
            raise StepRuntimeError.from_step(
                f'Handler {definition.name!r} raised {base!r}',
                step,
                location,
                error=base,
            ) from base

        if definition.nested:
            return returned

        if isinstance(returned, BaseException):
            raise StepRuntimeError.from_step(
                f'Handler {definition.name!r} returned {returned!r}',
                step,
                location,
                error=returned,
            ) from returned

        if returned is not None:
            raise StepRuntimeError.from_step(
                f'Expected handler {definition.name!r} to return None or an error, '
                f'but got: {type(returned).__name__}',
                step,
                location,
            )

        return None
