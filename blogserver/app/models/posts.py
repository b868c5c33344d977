"""Pydantic models for post request bodies and responses."""

from datetime import datetime

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Responses keep the field names existing clients read: `_id`, `createdAt`, `updatedAt`.
_RESPONSE_CONFIG = ConfigDict(
    from_attributes=True,
    alias_generator=AliasGenerator(serialization_alias=to_camel),
)


class PostCreate(BaseModel):
    """Body of ``POST /posts``.

    Every field is optional at the schema level so that a missing title or
    content is reported as a 400 by the access controller rather than as a
    schema error.  Unknown keys (``author`` included) are ignored.
    """

    title: str | None = None
    content: str | None = None
    published: bool | None = None


class PostUpdate(BaseModel):
    """Body of ``PUT /posts/{id}``; only keys the client sends are applied."""

    title: str | None = None
    content: str | None = None
    published: bool | None = None


class AuthorOut(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: int = Field(serialization_alias="_id")
    username: str


class PostOut(BaseModel):
    """A post as returned to clients, with its author populated."""

    model_config = _RESPONSE_CONFIG

    id: int = Field(serialization_alias="_id")
    title: str
    content: str
    author: AuthorOut
    published: bool
    created_at: datetime
    updated_at: datetime


class PostEnvelope(BaseModel):
    message: str
    post: PostOut


class MessageResponse(BaseModel):
    message: str
