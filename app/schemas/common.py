from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body using the public API's camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def join_list(value: Any) -> Any:
    """Accept ``["a", "b"]`` wherever a comma-separated string is expected."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return value
