"""Ownership and create-body rules for posts.

Pure functions with no transport or store dependency, so the same rules
can be exercised directly in tests and reused by any caller:

- :func:`validate_create` checks a create body and fills defaults
- :func:`authorize_mutation` decides whether a principal may change a post
- :func:`apply_update` copies a partial update onto a post
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from blogserver.app.models.post_record import MUTABLE_FIELDS
from blogserver.app.models.posts import PostCreate, PostUpdate

MISSING_FIELD_MESSAGE = "Title and content are required"


class Decision(StrEnum):
    allow = "allow"
    deny = "deny"


@dataclass(frozen=True)
class ValidatedPost:
    """A create body ready for storage; the caller supplies ``author_id``."""

    title: str
    content: str
    published: bool = False


def validate_create(body: PostCreate) -> tuple[ValidatedPost | None, list[str]]:
    """Validate a create body and build the normalized payload.

    Returns ``(post, errors)`` where *errors* is empty on success.  Title and
    content must be present and non-empty; whitespace-only text is accepted.
    ``published`` defaults to False when absent or null.
    """
    if not body.title or not body.content:
        return None, [MISSING_FIELD_MESSAGE]
    return (
        ValidatedPost(
            title=body.title,
            content=body.content,
            published=bool(body.published),
        ),
        [],
    )


def authorize_mutation(principal_id: Any, author_id: Any) -> Decision:
    """Allow iff the acting principal is the post's author.

    Ids are compared by their string form so an int id from the store
    matches the same id carried as text by a token or path.
    """
    if principal_id is None or author_id is None:
        return Decision.deny
    if str(principal_id) == str(author_id):
        return Decision.allow
    return Decision.deny


def apply_update(post: Any, patch: PostUpdate) -> Any:
    """Overwrite only the fields the client actually sent.

    Keys omitted from the JSON body, and keys sent as ``null``, leave the
    stored value untouched.  Empty strings are written as-is.
    """
    sent = patch.model_dump(exclude_unset=True)
    for field in MUTABLE_FIELDS:
        value = sent.get(field)
        if value is not None:
            setattr(post, field, value)
    return post
