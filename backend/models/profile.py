"""User profile database model."""

from sqlalchemy import Column, Integer, String, Uuid

from database.base import Base
from models.base import TimestampMixin


class Profile(Base, TimestampMixin):
    """Application user with a running token balance."""

    __tablename__ = "profiles"

    # Same id as the identity provider's user id
    id = Column(Uuid(as_uuid=True), primary_key=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    token_balance = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Profile {self.display_name or self.id} ({self.token_balance} tokens)>"
