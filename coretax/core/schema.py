"""Pydantic base shared by request inputs and API responses.

Every model speaks camelCase on the wire while the Python side keeps
snake_case attribute names.
"""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def blank_to_none(value: object) -> object:
    """Strip string input and treat an empty result as absent."""
    if isinstance(value, str):
        return value.strip() or None
    return value


# Unique identifiers (NPWP, NIK): "" and whitespace mean "not provided"
OptionalIdentifier = Annotated[
    str | None, Field(max_length=32), BeforeValidator(blank_to_none)
]


class CamelModel(BaseModel):
    """Base for every wire model: camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
