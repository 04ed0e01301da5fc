"""contribution lifecycle schema

Revision ID: 3f9a1c2d4b7e
Revises:
Create Date: 2026-10-17 09:12:44.318207

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f9a1c2d4b7e"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _json():
    return postgresql.JSONB().with_variant(sa.JSON(), "sqlite")


def _status(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, length=16)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_skills"),
        sa.UniqueConstraint("name", name="uq_skills_name"),
    )
    op.create_table(
        "user_skills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("skill_id", sa.Integer(), nullable=False),
        sa.Column(
            "level",
            _status("skill_level", "beginner", "intermediate", "advanced", "expert"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_user_skills_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["skill_id"], ["skills.id"], name="fk_user_skills_skill_id_skills", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_skills"),
        sa.UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_id"),
    )
    op.create_index("ix_user_skills_user_id", "user_skills", ["user_id"])

    op.create_table(
        "ideas",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", _status("idea_status", "draft", "published"), nullable=False),
        sa.Column(
            "visibility", _status("idea_visibility", "public", "private"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(
            ["author_id"], ["users.id"], name="fk_ideas_author_id_users", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ideas"),
    )
    op.create_index("ix_ideas_id", "ideas", ["id"])
    op.create_index("ix_ideas_author_id", "ideas", ["author_id"])

    op.create_table(
        "idea_skills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("idea_id", sa.Integer(), nullable=False),
        sa.Column("skill_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["idea_id"], ["ideas.id"], name="fk_idea_skills_idea_id_ideas", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["skill_id"], ["skills.id"], name="fk_idea_skills_skill_id_skills", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_idea_skills"),
        sa.UniqueConstraint("idea_id", "skill_id", name="uq_idea_skills_idea_id"),
    )
    op.create_index("ix_idea_skills_id", "idea_skills", ["id"])
    op.create_index("ix_idea_skills_idea_id", "idea_skills", ["idea_id"])

    op.create_table(
        "contribution_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("idea_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("skills", _json(), nullable=False),
        sa.Column(
            "status",
            _status("contribution_status", "pending", "accepted", "rejected", "withdrawn"),
            nullable=False,
        ),
        sa.Column("initiated_by_owner", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["idea_id"],
            ["ideas.id"],
            name="fk_contribution_requests_idea_id_ideas",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_contribution_requests_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_contribution_requests"),
    )
    op.create_index("ix_contribution_requests_id", "contribution_requests", ["id"])
    op.create_index(
        "ix_contribution_requests_idea_id", "contribution_requests", ["idea_id"]
    )
    op.create_index(
        "ix_contribution_requests_user_id", "contribution_requests", ["user_id"]
    )
    op.create_index(
        "idx_contribution_requests_idea_status",
        "contribution_requests",
        ["idea_id", "status"],
    )
    # At most one pending row per (idea, user).
    op.create_index(
        "uq_contribution_requests_pending",
        "contribution_requests",
        ["idea_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("metadata", _json(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_notifications_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index(
        "idx_notifications_user_created", "notifications", ["user_id", "created_at"]
    )
    op.create_index("idx_notifications_type", "notifications", ["type"])

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("idea_id", sa.Integer(), nullable=True),
        sa.Column("metadata", _json(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_activities_user_id_users", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_activities"),
    )
    op.create_index("ix_activities_id", "activities", ["id"])
    op.create_index(
        "idx_activities_user_created", "activities", ["user_id", "created_at"]
    )
    op.create_index(
        "idx_activities_idea_created", "activities", ["idea_id", "created_at"]
    )

    op.create_table(
        "side_effect_failures",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "kind", _status("side_effect_kind", "notification", "activity"), nullable=False
        ),
        sa.Column("payload", _json(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column(
            "status",
            _status("side_effect_failure_status", "pending", "delivered", "abandoned"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_side_effect_failures"),
    )
    op.create_index("ix_side_effect_failures_id", "side_effect_failures", ["id"])
    op.create_index(
        "idx_side_effect_failures_status", "side_effect_failures", ["status"]
    )


def downgrade():
    op.drop_table("side_effect_failures")
    op.drop_table("activities")
    op.drop_table("notifications")
    op.drop_index("uq_contribution_requests_pending", table_name="contribution_requests")
    op.drop_table("contribution_requests")
    op.drop_table("idea_skills")
    op.drop_table("ideas")
    op.drop_table("user_skills")
    op.drop_table("skills")
    op.drop_table("users")
