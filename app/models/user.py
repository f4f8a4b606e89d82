"""ORM model for the users table."""

from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import UUID

from app.models.base import Base


class User(Base):
    """
    User account managed by the users service.

    id is supplied by the caller and never changes; the primary key
    constraint is what surfaces duplicate inserts.
    """

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True)
    login = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
