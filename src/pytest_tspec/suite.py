"""Registration surface of a test suite.

`TestSuite` bundles a step registry, lifecycle hooks and an execution
engine. Step definitions and hooks are registered during the setup
phase; `run` executes scenarios once:

    suite = TestSuite()

    @suite.step(r'^a counter is (\\d+)$')
    def counter_is(value: int) -> None:
        ...

    suite.run(scenarios).raise_for_status()
"""

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pytest_tspec.core import ExecutionEngine, HookRegistry, PatternRegistry, SuiteState
from pytest_tspec.errors import SuiteStateError

if TYPE_CHECKING:
    from pytest_tspec.core import HandlerKind, StepDefinition, SuiteResult
    from pytest_tspec.core.definitions import StepHandler
    from pytest_tspec.formatters import Formatter
    from pytest_tspec.schema import Scenario
    from pytest_tspec.settings import RunnerSettings


class TestSuite:
    """Step definitions and hooks of a single run."""

    __test__ = False

    def __init__(self, *, settings: 'RunnerSettings | None' = None,
                 formatter: 'Formatter | None' = None) -> None:
        """Initialize an empty suite.

        Args:
            settings: Runtime settings; resolved from `TSPEC_*`
                environment variables if omitted.
            formatter: Receiver of progress notifications.
        """
        self.registry = PatternRegistry()
        self.hooks = HookRegistry()

        self.engine = ExecutionEngine(
            self.registry,
            self.hooks,
            settings=settings,
            formatter=formatter,
        )

    @property
    def definitions(self) -> tuple['StepDefinition', ...]:
        """Registered step definitions in precedence order."""
        return tuple(self.registry)

    def _ensure_setup(self) -> None:
        if self.engine.state is not SuiteState.IDLE:
            raise SuiteStateError(
                f'Cannot register steps or hooks in the {self.engine.state.value!r} state',
            )

    def register_step(self, pattern: Any, handler: 'StepHandler | None' = None, *,  # noqa: ANN401
                      kind: 'HandlerKind | None' = None) -> Any:
        """Register a step definition.

        Without a handler the method returns a decorator registering
        the decorated function and returning it unchanged.

        Args:
            pattern: Precompiled expression, text, or UTF-8 encoded bytes.
            handler: Step handler callable.
            kind: Explicit handler variant; inferred from the return
                annotation if omitted.

        Returns:
            The registered definition, or a decorator if the handler
            is omitted.

        Raises:
            StepDefinitionError: If the pattern or the handler is invalid.
            SuiteStateError: If the suite has already started.
        """
        self._ensure_setup()

        if handler is None:
            return self.step(pattern, kind=kind)

        return self.registry.register(pattern, handler, kind=kind)

    def step[F: Callable[..., Any]](self, pattern: Any, *,  # noqa: ANN401
                                    kind: 'HandlerKind | None' = None) -> Callable[[F], F]:
        """Decorator registering a step handler."""
        def decorator(handler: F) -> F:
            self._ensure_setup()
            self.registry.register(pattern, handler, kind=kind)
            return handler

        return decorator

    def before_suite[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.before_suite(fn)
        return fn

    def after_suite[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.after_suite(fn)
        return fn

    def before_scenario[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.before_scenario(fn)
        return fn

    def after_scenario[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.after_scenario(fn)
        return fn

    def before_step[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.before_step(fn)
        return fn

    def after_step[F: Callable[..., Any]](self, fn: F) -> F:
        self._ensure_setup()
        self.hooks.after_step(fn)
        return fn

    def run(self, scenarios: Iterable['Scenario | Mapping[str, Any]']) -> 'SuiteResult':
        """Run scenarios against the registered steps and hooks.

        A suite runs once; a second call raises `SuiteStateError`.

        Raises:
            SuiteStateError: If the suite has already run.
            ScenarioSchemaError: If a scenario is malformed.
            HookError: If a lifecycle hook fails.
        """
        return self.engine.run(scenarios)
