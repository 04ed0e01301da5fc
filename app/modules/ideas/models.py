"""Idea domain models."""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.db_defaults import timestamp_default


class IdeaStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class IdeaVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


def _enum_values(members):
    return [member.value for member in members]


class Idea(Base):
    """A proposal its author recruits contributors for."""

    __tablename__ = "ideas"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    status = Column(
        Enum(
            IdeaStatus,
            name="idea_status",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=IdeaStatus.PUBLISHED,
    )
    visibility = Column(
        Enum(
            IdeaVisibility,
            name="idea_visibility",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=IdeaVisibility.PUBLIC,
    )
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())

    author = relationship("User", back_populates="ideas")
    skill_links = relationship(
        "IdeaSkill",
        back_populates="idea",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="IdeaSkill.id",
    )

    @property
    def required_skills(self) -> list:
        """Skill names the idea asks contributors for."""
        return [link.skill.name for link in self.skill_links]


class IdeaSkill(Base):
    """Join row between an idea and one of its required skills."""

    __tablename__ = "idea_skills"
    __table_args__ = (UniqueConstraint("idea_id", "skill_id"),)

    id = Column(Integer, primary_key=True, index=True)
    idea_id = Column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False
    )

    idea = relationship("Idea", back_populates="skill_links")
    skill = relationship("Skill", lazy="joined")


__all__ = ["Idea", "IdeaSkill", "IdeaStatus", "IdeaVisibility"]
