"""Shared base classes for request/response schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """
    Request body base.

    Accepts camelCase keys (as sent by the web client) and snake_case keys.
    Fields are optional at this layer; services enforce required fields so
    each resource can report its own message.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str
