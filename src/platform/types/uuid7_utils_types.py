"""
UUID7 Pydantic Type Integration

uuid_utils.UUID has no pydantic core schema, so FastAPI can neither validate it
from a path/body nor describe it in OpenAPI. UtilsUUID7 adds both.

```python
class TripResponse(BaseModel):
    id: UtilsUUID7  # "019a3fa5-..." in JSON, uuid_utils.UUID in Python
```

https://docs.pydantic.dev/latest/concepts/types/#customizing-validation-with-__get_pydantic_core_schema__
"""

from typing import Any

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


def to_uuid(value: Any) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValueError(f'Invalid UUID: {value}') from e


class UtilsUUID7(UUID):
    """Pydantic-compatible uuid_utils.UUID (accepts any RFC 4122 text form)."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(to_uuid),
            ]
        )
        # JSON has no UUID type: only strings there; Python mode also takes UUID objects
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(UUID), from_str]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used='always', return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        # handler(schema) would expand validator internals that OpenAPI cannot render
        return {'type': 'string', 'format': 'uuid'}
