"""Structured step arguments.

A step may carry one multi-line argument in addition to its text:
a doc string (a raw block of text) or a data table. Arguments are
passed through to handlers unmodified; they are never derived from
pattern captures.
"""

from typing import Self

from pydantic import Field, model_validator

from pytest_tspec.models import SchemaModel


class DocString(SchemaModel):
    """Raw text block attached to a step."""

    content: str = Field(
        title='Content',
        description='Text of the block, without the surrounding delimiters.',
    )

    media_type: str | None = Field(
        default=None,
        title='Media type',
        description='Optional content type annotation, for example `json`.',
    )


class Table(SchemaModel):
    """Data table attached to a step.

    A table consists of a header row and an ordered sequence of data
    rows. Every cell is a string and every row is as wide as the header.
    """

    header: tuple[str, ...] = Field(
        title='Header',
        description='Names of the table columns.',
    )

    rows: tuple[tuple[str, ...], ...] = Field(
        default=(),
        title='Rows',
        description='Ordered data rows of string cells.',
    )

    @model_validator(mode='after')
    def check_row_width(self) -> Self:
        """Check every row has as many cells as the header.

        Returns:
            Self.

        Raises:
            ValueError: If a row is narrower or wider than the header.
        """
        width = len(self.header)
        for position, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f'row {position + 1} has {len(row)} cells, '
                    f'but the header has {width}',
                )

        return self

    def records(self) -> list[dict[str, str]]:
        """Return data rows as mappings keyed by the header cells."""
        return [
            dict(zip(self.header, row, strict=True))
            for row in self.rows
        ]
