"""Common Pydantic schemas and base classes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class CamelSchema(BaseModel):
    """Schema persisted inside JSON columns with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class MessageResponse(BaseSchema):
    """Generic acknowledgement."""

    success: bool = True
    message: str
