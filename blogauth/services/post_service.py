"""Blog post CRUD."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.errors import NotFound, ValidationError
from blogauth.models.post import Post


def parse_post_id(raw_post_id: str) -> UUID | None:
    """Parse a path parameter into a post id, returning None when it is not a UUID."""
    try:
        return UUID(raw_post_id)
    except ValueError:
        return None


class PostService:
    """Create, list, read and delete posts."""

    async def list_posts(self, db_session: AsyncSession, newest_first: bool = True) -> list[Post]:
        """Return every post, newest first unless told otherwise."""
        statement = select(Post)
        if newest_first:
            statement = statement.order_by(Post.created_at.desc())
        result = await db_session.execute(statement)
        return list(result.scalars().all())

    async def get_post(self, db_session: AsyncSession, post_id: UUID) -> Post:
        """Return one post or raise NotFound."""
        post = await db_session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    async def create_post(
        self, db_session: AsyncSession, title: str | None, content: str | None
    ) -> Post:
        """Insert a post with a non-empty title and content."""
        if not title or not content:
            raise ValidationError()
        post = Post(title=title, content=content)
        try:
            db_session.add(post)
            await db_session.flush()
        except Exception:
            await db_session.rollback()
            raise
        await db_session.commit()
        return post

    async def delete_post(self, db_session: AsyncSession, post_id: UUID) -> bool:
        """Delete a post; returns False when it was already gone."""
        try:
            result = await db_session.execute(delete(Post).where(Post.id == post_id))
        except Exception:
            await db_session.rollback()
            raise
        await db_session.commit()
        return bool(result.rowcount)


def get_post_service() -> PostService:
    """Provide the post service dependency."""
    return PostService()
