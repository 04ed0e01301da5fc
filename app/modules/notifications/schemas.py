from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationOut(BaseModel):
    id: int
    user_id: int
    type: str = Field(validation_alias="notification_type")
    title: str
    message: str
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias="notification_metadata"
    )
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
