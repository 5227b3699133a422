"""JSON Schema management."""

from functools import cache
from json import dumps

from pydantic import TypeAdapter
from pydantic.json_schema import GenerateJsonSchema

from pytest_tspec.schema import Scenario


class SchemaGenerator(GenerateJsonSchema):
    """JSON Schema generator for scenario documents.

    Scenario documents are produced by external providers, usually as
    a list of scenarios, so the generated schema describes that list.
    """

    @classmethod
    @cache
    def get_adapter(cls) -> TypeAdapter[list[Scenario]]:
        """Build and cache the adapter for scenario documents.

        Returns:
            Adapter validating a list of scenarios.
        """
        return TypeAdapter(list[Scenario])

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Generate the JSON Schema for scenario documents.

        Args:
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.
        """
        schema = {
            **cls.get_adapter().json_schema(
                schema_generator=cls,
                mode='validation',
            ),
            'title': 'pytest-tspec',
            'description': 'JSON Schema for pytest-tspec scenario documents',
            '$schema': cls.schema_dialect,
        }

        return dumps(
            schema,
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )

