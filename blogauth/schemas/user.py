"""User-facing auth request and response schemas."""

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    """Signup and login payload; presence is checked by the auth service."""

    email: str | None = None
    password: str | None = None


class MessageResponse(BaseModel):
    """Plain message payload returned by signup and login."""

    message: str
