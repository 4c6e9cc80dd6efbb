"""
User database model.

Users are synced from the external identity provider on first sign-in.
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from groupledger.app.db.session import Base


class User(Base):
    """
    User model.

    The id is issued by the identity provider; it is never generated here.
    """
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=False)
    photo_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}')>"
