"""Test suite for the pytest-tspec package.

This package contains unit and integration tests validating step
registration, argument binding, lifecycle hooks, nested steps and
the execution semantics of scenario runs.
"""
