"""Parking table for side effects that failed after their transition committed."""

import enum

from sqlalchemy import Column, DateTime, Enum, Index, Integer, Text

from app.core.database import Base
from app.core.db_defaults import json_type, timestamp_default


class SideEffectKind(str, enum.Enum):
    NOTIFICATION = "notification"
    ACTIVITY = "activity"


class SideEffectFailureStatus(str, enum.Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    ABANDONED = "abandoned"


def _enum_values(members):
    return [member.value for member in members]


class SideEffectFailure(Base):
    """A notification/activity payload waiting to be replayed."""

    __tablename__ = "side_effect_failures"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(
        Enum(
            SideEffectKind,
            name="side_effect_kind",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    payload = Column(json_type(), nullable=False)
    attempts = Column(Integer, nullable=False, default=1)
    last_error = Column(Text, nullable=True)
    status = Column(
        Enum(
            SideEffectFailureStatus,
            name="side_effect_failure_status",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=SideEffectFailureStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_side_effect_failures_status", "status"),)


__all__ = ["SideEffectFailure", "SideEffectFailureStatus", "SideEffectKind"]
