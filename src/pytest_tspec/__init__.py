"""Step definition registry and execution engine for behavior-driven scenarios.

The `pytest_tspec` package maps human-readable step lines of scenario
descriptions onto registered handler functions and runs them inside
suite, scenario and step lifecycle hooks.

Key features:
- ordered pattern registry where the first registered match wins;
- handler shapes and parameter types validated at registration;
- typed conversion of pattern captures into handler arguments;
- per-step fault isolation with recursive nested step expansion;
- pytest integration through the `tspec_suite` fixture.

The primary public entry point is `pytest_tspec.suite.TestSuite`.
"""
