from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class ConfigUpdateRequest(BaseModel):
    value: Dict[str, Any] = Field(..., description="Fields to change; merged over the current value")
    expected_version: Optional[int] = Field(
        None, ge=0, description="Reject the update if the stored version has moved on"
    )


class ConfigResponse(BaseModel):
    key: str
    version: int
    value: Dict[str, Any]


class ConfigVersionResponse(BaseModel):
    key: str
    version: int
    value: Dict[str, Any]
    preset_id: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PresetAppliedResponse(BaseModel):
    message: str
    preset_id: str
    configurations: List[ConfigResponse]
