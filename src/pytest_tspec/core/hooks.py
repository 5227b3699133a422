"""Lifecycle hooks.

Hooks are callbacks registered at suite, scenario and step boundaries.
They run in registration order to completion. Unlike step handlers,
hooks are not supervised: an exception inside a hook is re-raised as
`HookError`, chained to the original, and aborts the run.
"""

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pytest_tspec.errors import ErrorContext, HookError, StepDefinitionError

if TYPE_CHECKING:
    from pytest_tspec.schema import Scenario, Step

    from .results import ScenarioResult, StepResult

#: Hook run once before or after the whole suite.
type SuiteHook = Callable[[], Any]

#: Hook run before every scenario.
type BeforeScenarioHook = Callable[['Scenario'], Any]

#: Hook run after every scenario with its result.
type AfterScenarioHook = Callable[['Scenario', 'ScenarioResult'], Any]

#: Hook run before every step.
type BeforeStepHook = Callable[['Step'], Any]

#: Hook run after every step with its result.
type AfterStepHook = Callable[['Step', 'StepResult'], Any]

logger = getLogger(__name__)


class HookRegistry:
    """Ordered lifecycle hooks.

    Suite-scoped hooks (before/after suite) and scenario-scoped hooks
    (before/after scenario and step) are kept in independent lists.
    """

    def __init__(self) -> None:
        """Initialize empty hook lists."""
        self.before_suite_hooks: list[SuiteHook] = []
        self.after_suite_hooks: list[SuiteHook] = []

        self.before_scenario_hooks: list[BeforeScenarioHook] = []
        self.after_scenario_hooks: list[AfterScenarioHook] = []

        self.before_step_hooks: list[BeforeStepHook] = []
        self.after_step_hooks: list[AfterStepHook] = []

    @staticmethod
    def _append[T](hooks: list[T], hook: T, stage: str) -> T:
        """Validate and append a hook.

        Raises:
            StepDefinitionError: If the hook is not callable.
        """
        if not callable(hook):
            raise StepDefinitionError(
                f'Expected {stage} hook to be callable, but got: {type(hook).__name__}',
            )

        hooks.append(hook)
        logger.debug('Registered %s hook %r', stage, hook)

        return hook

    def before_suite(self, hook: SuiteHook) -> SuiteHook:
        """Register a hook run once before any scenario.

        Use it to prepare the suite for a spin, for example to connect
        and prepare a database.
        """
        return self._append(self.before_suite_hooks, hook, 'before suite')

    def after_suite(self, hook: SuiteHook) -> SuiteHook:
        """Register a hook run once after all scenarios."""
        return self._append(self.after_suite_hooks, hook, 'after suite')

    def before_scenario(self, hook: BeforeScenarioHook) -> BeforeScenarioHook:
        """Register a hook run before every scenario.

        It is a good place to restore the default state so that every
        scenario is isolated from the others.
        """
        return self._append(self.before_scenario_hooks, hook, 'before scenario')

    def after_scenario(self, hook: AfterScenarioHook) -> AfterScenarioHook:
        """Register a hook run after every scenario."""
        return self._append(self.after_scenario_hooks, hook, 'after scenario')

    def before_step(self, hook: BeforeStepHook) -> BeforeStepHook:
        """Register a hook run before every step."""
        return self._append(self.before_step_hooks, hook, 'before step')

    def after_step(self, hook: AfterStepHook) -> AfterStepHook:
        """Register a hook run after every step.

        The step result carries the captured error, which makes it
        a good place for extra diagnostics, for example taking
        a screenshot of a headless browser after a failure.
        """
        return self._append(self.after_step_hooks, hook, 'after step')

    def run_before_suite(self) -> None:
        self._run(self.before_suite_hooks, 'before suite')

    def run_after_suite(self) -> None:
        self._run(self.after_suite_hooks, 'after suite')

    def run_before_scenario(self, scenario: 'Scenario') -> None:
        self._run(
            self.before_scenario_hooks,
            'before scenario',
            scenario,
            location=ErrorContext(scenario=scenario.name),
        )

    def run_after_scenario(self, scenario: 'Scenario', result: 'ScenarioResult') -> None:
        self._run(
            self.after_scenario_hooks,
            'after scenario',
            scenario,
            result,
            location=ErrorContext(scenario=scenario.name),
        )

    def run_before_step(self, step: 'Step', location: ErrorContext | None = None) -> None:
        self._run(
            self.before_step_hooks,
            'before step',
            step,
            location=ErrorContext({**(location or {}), 'step_text': step.text}),
        )

    def run_after_step(self, step: 'Step', result: 'StepResult',
                       location: ErrorContext | None = None) -> None:
        self._run(
            self.after_step_hooks,
            'after step',
            step,
            result,
            location=ErrorContext({**(location or {}), 'step_text': step.text}),
        )

    @staticmethod
    def _run(hooks: list[Callable[..., Any]], stage: str, *args: Any,  # noqa: ANN401
             location: ErrorContext | None = None) -> None:
        """Run hooks in registration order.

        Args:
            hooks: Hooks to run.
            stage: Human-readable lifecycle stage.
            *args: Positional arguments passed to every hook.
            location: Scenario and step the hooks run for.

        Raises:
            HookError: If a hook raises; the original exception is the cause.
        """
        for hook in hooks:
            try:
                hook(*args)

            except Exception as base:
                name = getattr(hook, '__qualname__', None) or repr(hook)
                raise HookError(
                    f'The {stage} hook {name!r} failed: {base!r}',
                    context=ErrorContext({**(location or {}), 'error': base}),
                ) from base
