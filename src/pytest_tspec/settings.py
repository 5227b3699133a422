"""Runtime settings of the execution engine.

Settings are resolved from keyword arguments first and from `TSPEC_*`
environment variables second, so a CI job may tune a run without
touching the suite setup code.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pytest_tspec.models import SettingsModel

#: Default limit for recursive nested step expansion.
DEFAULT_NESTING_DEPTH = 16

#: Upper bound of the nesting depth limit, kept well below the
#: interpreter recursion limit.
MAX_NESTING_DEPTH = 100


class RunnerSettings(SettingsModel):
    """Execution engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix='TSPEC_',
        frozen=True,
        extra='ignore',
    )

    max_nesting_depth: int = Field(
        default=DEFAULT_NESTING_DEPTH,
        ge=1,
        le=MAX_NESTING_DEPTH,
        title='Nesting depth limit',
        description=(
            'Maximum depth of nested step expansion. A step whose '
            'expansion goes deeper fails instead of recursing further.'
        ),
    )

    after_undefined: Literal['skipped', 'pending'] = Field(
        default='skipped',
        title='Outcome after an undefined step',
        description=(
            'Outcome assigned to the remaining steps of a scenario once '
            'a step matched no definition.'
        ),
    )

    stop_on_failure: bool = Field(
        default=False,
        title='Stop on first failed scenario',
        description=(
            'Do not start further scenarios once a scenario failed. '
            'After-suite hooks still run.'
        ),
    )
