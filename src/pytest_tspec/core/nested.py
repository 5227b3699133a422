"""Recursive expansion of nested steps.

A nested handler returns step texts instead of doing the work itself.
Each text is executed exactly like a top-level step, strictly in order;
the first one that does not pass becomes the failure of the parent step
and no further text of that sequence is attempted.
"""

from collections.abc import Callable, Sequence
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pytest_tspec.errors import NestingDepthError, StepError, StepRuntimeError, StepUndefinedError
from pytest_tspec.schema import Step

from .results import Outcome

if TYPE_CHECKING:
    from pytest_tspec.errors import ErrorContext

    from .results import StepResult

#: Executes one step at a nesting depth and classifies it.
type StepExecutor = Callable[[Step, 'ErrorContext', int], 'StepResult']

logger = getLogger(__name__)


class NestedStepExpander:
    """Executes the step texts returned by nested handlers."""

    def __init__(self, execute: StepExecutor, *, max_depth: int) -> None:
        """Initialize the expander.

        Args:
            execute: Callback executing a single step at a given depth.
            max_depth: Deepest nesting level allowed.
        """
        self.execute = execute
        self.max_depth = max_depth

    @staticmethod
    def check_texts(texts: Any, parent: Step,  # noqa: ANN401
                    location: 'ErrorContext | None' = None) -> tuple[str, ...]:
        """Validate the value returned by a nested handler.

        Raises:
            StepRuntimeError: If the value is not a sequence of strings.
        """
        if isinstance(texts, Sequence) and not isinstance(texts, (str, bytes)):
            if all(isinstance(text, str) for text in texts):
                return tuple(texts)

        raise StepRuntimeError.from_step(
            f'Expected nested handler to return a list of strings, but got: {type(texts).__name__}',
            parent,
            location,
        )

    def expand(self, texts: Sequence[str], parent: Step, location: 'ErrorContext',
               depth: int) -> tuple[tuple['StepResult', ...], 'StepError | None']:
        """Execute nested step texts in order.

        Args:
            texts: Step texts returned by the parent handler.
            parent: Step whose handler returned the texts.
            location: Location of the parent step.
            depth: Nesting depth of the texts (the parent depth plus one).

        Returns:
            Results of the executed texts and the error of the parent
            step, or `None` if every text passed.
        """
        if depth > self.max_depth:
            return (), NestingDepthError.from_step(
                f'Nested steps exceed the depth limit of {self.max_depth}',
                parent,
                location,
            )

        results: list[StepResult] = []

        for text in texts:
            result = self.execute(Step(text=text), location, depth)
            results.append(result)

            if result.outcome is Outcome.PASSED:
                continue

            logger.debug('Nested step %r is %s at depth %d', text, result.outcome.value, depth)

            if result.outcome is Outcome.UNDEFINED:
                return tuple(results), StepUndefinedError.from_step(
                    f'Nested step "{text}" is undefined',
                    parent,
                    location,
                )

            message = f'Nested step "{text}" failed'
            if isinstance(result.error, StepError):
                message += f': {result.error.message}'

            return tuple(results), StepRuntimeError.from_step(
                message,
                parent,
                location,
                error=result.error,
            )

        return tuple(results), None
