"""Post CRUD endpoints.

Reads are public.  Create, update, delete and ``/posts/user/my-posts``
require a bearer token; update and delete additionally require the caller
to be the post's author.
"""

import logging

from fastapi import APIRouter, Depends

from blogserver.app.core.errors import Forbidden, NotFound, ValidationError
from blogserver.app.core.logging import (
    EVENT_POST_CREATED,
    EVENT_POST_DELETED,
    EVENT_POST_MUTATION_DENIED,
    EVENT_POST_UPDATED,
    log_event,
)
from blogserver.app.models.post_record import Post
from blogserver.app.models.posts import (
    MessageResponse,
    PostCreate,
    PostEnvelope,
    PostOut,
    PostUpdate,
)
from blogserver.app.services.access_control import (
    Decision,
    apply_update,
    authorize_mutation,
    validate_create,
)
from blogserver.app.services.identity import Principal, get_current_principal
from blogserver.app.services.post_store import PostStore, get_post_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts")

POST_NOT_FOUND = "Post not found"
# Largest value a SQLite INTEGER primary key can hold.
_MAX_POST_ID = 2**63 - 1


def _load_post(store: PostStore, post_id: str) -> Post:
    """Fetch a post by its path id; ids that cannot exist are simply not found."""
    # ASCII digits only: no sign, underscores, whitespace or other scripts.
    if not (post_id.isascii() and post_id.isdigit()):
        raise NotFound(POST_NOT_FOUND)
    key = int(post_id)
    if not 0 < key <= _MAX_POST_ID:
        raise NotFound(POST_NOT_FOUND)
    post = store.get(key)
    if post is None:
        raise NotFound(POST_NOT_FOUND)
    return post


def _require_owner(principal: Principal, post: Post, action: str) -> None:
    if authorize_mutation(principal.id, post.author_id) is Decision.deny:
        log_event(
            logger, "warning", EVENT_POST_MUTATION_DENIED,
            action=action, post_id=post.id, principal_id=principal.id,
        )
        raise Forbidden(f"Not authorized to {action} this post")


@router.get("", response_model=list[PostOut])
def list_published_posts(store: PostStore = Depends(get_post_store)) -> list[Post]:
    """Return all published posts, newest first."""
    return store.find(published=True)


@router.get("/user/my-posts", response_model=list[PostOut])
def list_my_posts(
    principal: Principal = Depends(get_current_principal),
    store: PostStore = Depends(get_post_store),
) -> list[Post]:
    """Return every post owned by the caller, drafts included."""
    return store.find(author_id=principal.id)


@router.get("/{post_id}", response_model=PostOut)
def get_post(post_id: str, store: PostStore = Depends(get_post_store)) -> Post:
    return _load_post(store, post_id)


@router.post("", response_model=PostEnvelope, status_code=201)
def create_post(
    body: PostCreate,
    principal: Principal = Depends(get_current_principal),
    store: PostStore = Depends(get_post_store),
) -> PostEnvelope:
    validated, errors = validate_create(body)
    if validated is None:
        raise ValidationError("; ".join(errors))

    post = store.create(
        title=validated.title,
        content=validated.content,
        published=validated.published,
        author_id=principal.id,
    )
    log_event(
        logger, "info", EVENT_POST_CREATED,
        post_id=post.id,
        author_id=principal.id,
        published=post.published,
        content_len=len(post.content),
    )
    return PostEnvelope(
        message="Post created successfully",
        post=PostOut.model_validate(post),
    )


@router.put("/{post_id}", response_model=PostEnvelope)
def update_post(
    post_id: str,
    body: PostUpdate,
    principal: Principal = Depends(get_current_principal),
    store: PostStore = Depends(get_post_store),
) -> PostEnvelope:
    post = _load_post(store, post_id)
    _require_owner(principal, post, "update")

    post = store.save(apply_update(post, body))
    log_event(
        logger, "info", EVENT_POST_UPDATED,
        post_id=post.id,
        fields=",".join(sorted(body.model_fields_set)) or "-",
    )
    return PostEnvelope(
        message="Post updated successfully",
        post=PostOut.model_validate(post),
    )


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    principal: Principal = Depends(get_current_principal),
    store: PostStore = Depends(get_post_store),
) -> MessageResponse:
    post = _load_post(store, post_id)
    _require_owner(principal, post, "delete")

    if not store.delete(post.id):
        raise NotFound(POST_NOT_FOUND)
    log_event(logger, "info", EVENT_POST_DELETED, post_id=post.id)
    return MessageResponse(message="Post deleted successfully")
