"""
Pydantic schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
    return value


class FrameCreate(BaseModel):
    """Schema for inserting a frame row; id and created_at are assigned server side"""
    name: str = Field(..., max_length=255, description="Display name of the frame")
    image_url: str = Field(..., max_length=1024, description="Public URL of the stored image")
    is_active: bool = Field(True, description="Whether the frame is offered to users")

    @field_validator("name", "image_url")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)


class FrameUpdate(BaseModel):
    """Schema for a partial update (all fields optional, identity fields rejected)"""
    name: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None

    @field_validator("name", "image_url")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)

    class Config:
        extra = "forbid"


class FrameResponse(BaseModel):
    """Schema for Frame response"""
    id: str
    name: str
    image_url: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RemoveObjectsRequest(BaseModel):
    """Keys to remove from a storage bucket"""
    prefixes: List[str] = Field(..., min_length=1, description="Object keys to remove")


class RemoveObjectsResponse(BaseModel):
    removed: List[str]


class UploadObjectResponse(BaseModel):
    Key: str
