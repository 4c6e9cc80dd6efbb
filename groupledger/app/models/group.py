"""
Group and membership database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from groupledger.app.db.session import Base
from groupledger.app.models.enums import GroupType


class Group(Base):
    """
    Group model.

    A group is joined through its shareable code. The creator becomes the
    first member in the same transaction that creates the group.
    """
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    type = Column(Enum(GroupType, values_callable=lambda e: [m.value for m in e]), default=GroupType.OTHER, nullable=False)
    code = Column(String(32), unique=True, index=True, nullable=False)

    created_by = Column(String(128), ForeignKey('users.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Group(id={self.id}, name='{self.name}', code='{self.code}')>"


class GroupMember(Base):
    """Membership of a user in a group. One row per (group, user)."""
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint('group_id', 'user_id', name='uq_group_member'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id'), nullable=False, index=True)
    user_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<GroupMember(group_id={self.group_id}, user_id='{self.user_id}')>"
