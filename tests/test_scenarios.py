"""Tests for scenario document models."""

import json

import pydantic
import pytest

from pytest_tspec.jsonschema import SchemaGenerator
from pytest_tspec.schema import DocString, Scenario, Step, Table


def test_scenario_from_mapping() -> None:
    """Validate a scenario supplied as a mapping."""
    scenario = Scenario.model_validate({
        'name': 'checkout',
        'tags': ['@smoke'],
        'steps': [
            {'text': 'I have a cart'},
            {'text': 'a request', 'argument': {'content': '{}', 'media_type': 'json'}},
            {'text': 'users', 'argument': {'header': ['name', 'role'], 'rows': [['Alice', 'admin']]}},
        ],
    })

    assert scenario.tags == ('@smoke',)
    assert scenario.steps[0].argument is None
    assert isinstance(scenario.steps[1].argument, DocString)
    assert isinstance(scenario.steps[2].argument, Table)


@pytest.mark.parametrize('content, except_message', (
    pytest.param(
        {'steps': [{'text': 'a step', 'extra': True}]},
        r'Extra inputs are not permitted',
        id='extra field',
    ),
    pytest.param(
        {'steps': [{}]},
        r'Field required',
        id='missing text',
    ),
    pytest.param(
        {'steps': [{'text': 'users', 'argument': {'header': ['a', 'b'], 'rows': [['1']]}}]},
        r'row 1 has 1 cells, but the header has 2',
        id='narrow row',
    ),
))
def test_scenario_invalid(content: dict, except_message: str) -> None:
    """Reject malformed scenario documents."""
    with pytest.raises(pydantic.ValidationError, match=except_message):
        Scenario.model_validate(content)


def test_scenario_is_immutable() -> None:
    """Forbid modifying scenarios after validation."""
    step = Step(text='a step')

    with pytest.raises(pydantic.ValidationError, match=r'frozen'):
        step.text = 'another step'  # type: ignore[misc]


def test_table_records() -> None:
    """Return table rows keyed by the header cells."""
    table = Table(header=('name', 'role'), rows=(('Alice', 'admin'), ('Bob', 'user')))

    assert table.records() == [
        {'name': 'Alice', 'role': 'admin'},
        {'name': 'Bob', 'role': 'user'},
    ]
    assert Table(header=('name',)).records() == []


def test_json_schema() -> None:
    """Generate the JSON Schema of scenario documents."""
    schema = json.loads(SchemaGenerator.make_schema())

    assert schema['title'] == 'pytest-tspec'
    assert schema['type'] == 'array'
    assert set(schema['$defs']) >= {'DocString', 'Scenario', 'Step', 'Table'}
    assert schema['$defs']['Step']['required'] == ['text']
