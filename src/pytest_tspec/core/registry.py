"""Ordered registry of step definitions.

Registration order is permanent and is the only precedence rule:
lookup returns the first definition whose pattern matches a step text.
Overlapping patterns are neither detected nor reported at lookup time.
"""

from logging import getLogger
from typing import TYPE_CHECKING, Any
from warnings import warn

from pydantic import Field

from pytest_tspec.errors import DefinitionWarning
from pytest_tspec.models import SchemaModel

from .definitions import HandlerKind, StepDefinition
from .validator import define_step

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = getLogger(__name__)


class StepMatch(SchemaModel):
    """Result of a successful lookup."""

    definition: StepDefinition

    captures: tuple[str | None, ...] = Field(
        default=(),
        title='Captured groups',
        description=(
            'Groups captured by the pattern in order. Optional groups '
            'that did not participate in the match are `None`.'
        ),
    )


class PatternRegistry:
    """Step definitions in registration order."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self.definitions: list[StepDefinition] = []

    def __iter__(self) -> 'Iterator[StepDefinition]':
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def register(self, pattern: Any, handler: Any, *,  # noqa: ANN401
                 kind: HandlerKind | None = None) -> StepDefinition:
        """Validate and append a step definition.

        Args:
            pattern: Precompiled expression, text, or UTF-8 encoded bytes.
            handler: Step handler callable.
            kind: Explicit handler variant; inferred from the return
                annotation if omitted.

        Returns:
            The registered definition.

        Raises:
            StepDefinitionError: If the pattern or the handler is invalid.
        """
        definition = define_step(pattern, handler, kind)

        for existing in self.definitions:
            if existing.pattern == definition.pattern:
                warn(
                    f'Step /{definition.expression}/ is already registered '
                    f'for {existing.name!r}, {definition.name!r} is unreachable',
                    category=DefinitionWarning,
                    stacklevel=3,
                )
                break

        self.definitions.append(definition)
        logger.debug(
            'Registered %s step /%s/ for %s',
            definition.kind.value,
            definition.expression,
            definition.name,
        )

        return definition

    def lookup(self, text: str) -> StepMatch | None:
        """Find the earliest registered definition matching a step text.

        Patterns are searched, not anchored: anchors belong in the pattern.

        Args:
            text: Step text.

        Returns:
            The match with its captured groups, or `None` if no
            definition matches.
        """
        for definition in self.definitions:
            if match := definition.pattern.search(text):
                return StepMatch(definition=definition, captures=match.groups())

        return None
