"""SQLAlchemy models and enums for the users domain."""

from __future__ import annotations

import enum

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql.sqltypes import TIMESTAMP

from app.core.database import Base
from app.core.db_defaults import timestamp_default


class SkillLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class User(Base):
    """Application user model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=timestamp_default()
    )

    skills = relationship(
        "UserSkill",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="UserSkill.id",
    )
    ideas = relationship("Idea", back_populates="author")


class Skill(Base):
    """Named skill shared by users and ideas."""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, nullable=False)
    name = Column(String, nullable=False, unique=True)


class UserSkill(Base):
    """A skill held by a user at a given proficiency level."""

    __tablename__ = "user_skills"
    __table_args__ = (UniqueConstraint("user_id", "skill_id"),)

    id = Column(Integer, primary_key=True, nullable=False)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False
    )
    level = Column(
        SQLAlchemyEnum(
            SkillLevel,
            name="skill_level",
            native_enum=False,
            length=16,
            values_callable=lambda levels: [level.value for level in levels],
        ),
        nullable=False,
        default=SkillLevel.BEGINNER,
    )

    user = relationship("User", back_populates="skills")
    skill = relationship("Skill", lazy="joined")


__all__ = ["SkillLevel", "User", "Skill", "UserSkill"]
