from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityOut(BaseModel):
    id: int
    type: str = Field(validation_alias="activity_type")
    description: str
    user_id: int
    idea_id: Optional[int] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias="activity_metadata"
    )
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
