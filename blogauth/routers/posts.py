"""Blog post routes; every route sits behind the session gate."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.dependencies import get_database_session
from blogauth.errors import NotFound, ValidationError
from blogauth.gate import AuthContext, require_session
from blogauth.request_body import parse_body
from blogauth.schemas.post import PostForm
from blogauth.services.post_service import PostService, get_post_service, parse_post_id
from blogauth.templating import render

router = APIRouter(tags=["posts"])

logger = structlog.get_logger(__name__)


@router.get("/index", response_model=None)
async def list_posts(
    request: Request,
    auth: Annotated[AuthContext, Depends(require_session)],
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    post_service: Annotated[PostService, Depends(get_post_service)],
) -> Response:
    """Render every post, newest first."""
    try:
        posts = await post_service.list_posts(db_session=db_session)
    except SQLAlchemyError as exc:
        logger.error("post.list_failed", user_id=str(auth.user_id), error=str(exc))
        return PlainTextResponse("Error loading posts", status_code=500)
    logger.info("post.listed", user_id=str(auth.user_id), count=len(posts))
    return render(request, "index.html", {"posts": posts})


@router.get("/wishlist", response_model=None)
async def wishlist(
    request: Request,
    auth: Annotated[AuthContext, Depends(require_session)],
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    post_service: Annotated[PostService, Depends(get_post_service)],
) -> Response:
    """Render every post in storage order."""
    try:
        posts = await post_service.list_posts(db_session=db_session, newest_first=False)
    except SQLAlchemyError as exc:
        logger.error("post.wishlist_failed", user_id=str(auth.user_id), error=str(exc))
        return PlainTextResponse("Error loading wishlist", status_code=500)
    return render(request, "wishlist.html", {"posts": posts})


@router.get("/new", response_model=None)
async def new_post_form(
    request: Request,
    auth: Annotated[AuthContext, Depends(require_session)],
) -> Response:
    """Render the new post form."""
    del auth
    return render(request, "new.html")


@router.post("/new", response_model=None)
async def create_post(
    request: Request,
    auth: Annotated[AuthContext, Depends(require_session)],
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    post_service: Annotated[PostService, Depends(get_post_service)],
) -> RedirectResponse:
    """Create a post from the form and go back to the listing."""
    try:
        form = await parse_body(request, PostForm)
        post = await post_service.create_post(
            db_session=db_session, title=form.title, content=form.content
        )
    except ValidationError:
        return RedirectResponse(url="/new", status_code=303)
    except SQLAlchemyError as exc:
        logger.error("post.create_failed", user_id=str(auth.user_id), error=str(exc))
        return RedirectResponse(url="/new", status_code=303)
    logger.info("post.created", user_id=str(auth.user_id), post_id=str(post.id))
    return RedirectResponse(url="/index", status_code=303)


@router.get("/posts/{post_id}", response_model=None)
async def view_post(
    post_id: str,
    request: Request,
    auth: Annotated[AuthContext, Depends(require_session)],
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    post_service: Annotated[PostService, Depends(get_post_service)],
) -> Response:
    """Render a single post."""
    parsed_id = parse_post_id(post_id)
    try:
        if parsed_id is None:
            raise NotFound("Post not found")
        post = await post_service.get_post(db_session=db_session, post_id=parsed_id)
    except NotFound:
        logger.info("post.not_found", user_id=str(auth.user_id), post_id=post_id)
        return PlainTextResponse("Post not found", status_code=404)
    except SQLAlchemyError as exc:
        logger.error("post.read_failed", user_id=str(auth.user_id), error=str(exc))
        return PlainTextResponse("Error loading post", status_code=500)
    return render(request, "post.html", {"post": post})


@router.post("/delete/{post_id}", response_model=None)
async def delete_post(
    post_id: str,
    auth: Annotated[AuthContext, Depends(require_session)],
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    post_service: Annotated[PostService, Depends(get_post_service)],
) -> RedirectResponse:
    """Delete a post and go back to the listing."""
    parsed_id = parse_post_id(post_id)
    if parsed_id is None:
        logger.info("post.not_found", user_id=str(auth.user_id), post_id=post_id)
        return RedirectResponse(url="/index", status_code=303)
    try:
        deleted = await post_service.delete_post(db_session=db_session, post_id=parsed_id)
    except SQLAlchemyError as exc:
        logger.error("post.delete_failed", user_id=str(auth.user_id), error=str(exc))
        return RedirectResponse(url="/index", status_code=303)
    logger.info("post.deleted", user_id=str(auth.user_id), post_id=post_id, deleted=deleted)
    return RedirectResponse(url="/index", status_code=303)
