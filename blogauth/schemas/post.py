"""Post form schema."""

from pydantic import BaseModel


class PostForm(BaseModel):
    """New post form fields."""

    title: str | None = None
    content: str | None = None
