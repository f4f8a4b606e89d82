"""Pydantic schema for the User entity shared by every layer."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserPayload(BaseModel):
    """
    User as it crosses each boundary: HTTP body, service value, storage result.

    All fields are required; string fields must be non-empty.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Immutable user identifier")
    login: str = Field(..., min_length=1, description="Login")
    password: str = Field(..., min_length=1, description="Password (stored as given)")
    role: str = Field(..., min_length=1, description="Role, e.g. admin or user")
