"""Tests for error formatting."""

import pytest

from pytest_tspec.errors import ErrorContext, ErrorFormatter, StepRuntimeError, TSpecError
from pytest_tspec.schema import DocString, Step


@pytest.mark.parametrize('context, except_lines', (
    pytest.param(
        None,
        ['Something failed'],
        id='no context',
    ),
    pytest.param(
        ErrorContext(error=ValueError('x')),
        ['Something failed'],
        id='no location',
    ),
    pytest.param(
        ErrorContext(scenario='checkout', step_num=1, step_text='I pay'),
        [
            'Something failed',
            '    in scenario "checkout"',
            '    on step 2 "I pay"',
        ],
        id='scenario step',
    ),
    pytest.param(
        ErrorContext(scenario='', step_num=0, step_text='I pay', pattern='^I pay$', depth=2),
        [
            'Something failed',
            '    in scenario "<unnamed scenario>"',
            '    on step 1 "I pay", nesting level 2',
            '    matched by /^I pay$/',
        ],
        id='nested step',
    ),
    pytest.param(
        ErrorContext(step_text='I pay'),
        [
            'Something failed',
            '    on step "I pay"',
        ],
        id='step without number',
    ),
))
def test_format_location(context: ErrorContext | None, except_lines: list[str]) -> None:
    """Format the location of an error."""
    assert ErrorFormatter.format('Something failed', context).splitlines() == except_lines


def test_format_snippet() -> None:
    """Render the failing element as a YAML snippet."""
    step = Step(text='a request', argument=DocString(content='{}'))

    error = StepRuntimeError.from_step(
        'Request failed',
        step,
        ErrorContext(scenario='api', step_num=0),
        error=ValueError('bad'),
    )

    assert str(error).splitlines() == [
        'Request failed',
        '    in scenario "api"',
        '    on step 1 "a request"',
        '         ...',
        '        text: a request',
        '        argument:',
        "          content: '{}'",
    ]


def test_format_unsafe_values() -> None:
    """Replace runtime objects in snippets with a placeholder."""
    error = TSpecError('Broken', context=ErrorContext(element={'handler': object(), 'values': (1, 'a')}))

    assert str(error).splitlines()[1:] == [
        '         ...',
        '        handler: <runtime object>',
        '        values:',
        '        - 1',
        '        - a',
    ]


def test_from_step_keeps_location() -> None:
    """Merge the step into an existing location."""
    error = StepRuntimeError.from_step(
        'Failed',
        Step(text='a step'),
        ErrorContext(scenario='example', step_num=3, pattern='step', depth=1),
    )

    assert error.message == 'Failed'
    assert error.context is not None
    assert error.context['scenario'] == 'example'
    assert error.context['step_num'] == 3
    assert error.context['step_text'] == 'a step'
    assert error.context['element'] == {'text': 'a step'}
