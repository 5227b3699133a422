"""Step registry and execution engine.

This package provides:
- the ordered registry of step definitions and its registration checks;
- conversion of pattern captures into handler arguments;
- lifecycle hooks and recursive nested step expansion;
- the engine running scenarios and classifying their steps.
"""

from .binder import ArgumentBinder
from .definitions import ArgumentKind, HandlerKind, Parameter, StepDefinition
from .engine import ExecutionEngine, SuiteState
from .hooks import HookRegistry
from .nested import NestedStepExpander
from .registry import PatternRegistry, StepMatch
from .results import Outcome, ScenarioResult, StepResult, SuiteResult

__all__ = (
    'ArgumentBinder',
    'ArgumentKind',
    'ExecutionEngine',
    'HandlerKind',
    'HookRegistry',
    'NestedStepExpander',
    'Outcome',
    'Parameter',
    'PatternRegistry',
    'ScenarioResult',
    'StepDefinition',
    'StepMatch',
    'StepResult',
    'SuiteResult',
    'SuiteState',
)
