"""Scenario data model.

Immutable Pydantic models describing the scenarios supplied by an
external provider: scenarios, their steps and the structured arguments
a step may carry.
"""

from .arguments import DocString, Table
from .scenarios import Scenario, Step

__all__ = (
    'DocString',
    'Scenario',
    'Step',
    'Table',
)
