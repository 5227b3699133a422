"""Scenario and step models.

Scenarios are supplied by an external provider. They are transient:
the engine reads them once during a run and never modifies them.
"""

from pydantic import Field

from pytest_tspec.models import SchemaModel

from .arguments import DocString, Table


class Step(SchemaModel):
    """One line of scenario behavior."""

    text: str = Field(
        title='Step text',
        description=(
            'Human-readable step line matched against the patterns '
            'of registered step definitions.'
        ),
        examples=[
            'a counter is 7',
        ],
    )

    argument: DocString | Table | None = Field(
        default=None,
        title='Structured argument',
        description=(
            'Optional doc string or data table attached to the step. '
            'It is passed to the handler after the pattern captures.'
        ),
    )


class Scenario(SchemaModel):
    """Ordered sequence of steps forming one test case.

    The name and tags are opaque metadata: the engine passes them
    through to hooks and the formatter untouched.
    """

    name: str = Field(
        default='',
        title='Scenario name',
        description='Human-readable name of the scenario.',
    )

    tags: tuple[str, ...] = Field(
        default=(),
        title='Scenario tags',
        description='Tags attached to the scenario by the provider.',
    )

    steps: tuple[Step, ...] = Field(
        default=(),
        title='Scenario steps',
        description='Steps executed in order.',
    )
